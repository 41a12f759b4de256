"""Project store - the single owned source of truth for an editing session.

The store holds one immutable ``Project`` value. Every named operation builds
a new Project (``model_copy``) and swaps it in under the store lock, so a
reader holding the previous value never sees a partial write. Subscribers are
called after the swap, outside the lock, with the new Project.

Keyframe queries go through an index of ``(layerId, property) -> keyframes``
sorted by time, rebuilt whenever the keyframe list changes.

Example:
    store = ProjectStore()
    store.set_project(project)
    store.set_current_time(1.0)
    kf = store.add_keyframe(layer_id, 'positionX', 300)
    store.value_at(layer_id, 'positionX', 0.5)
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Union

from animforge.animation.easing import Easing, EasingType
from animforge.animation.evaluator import resolve_layer, resolve_property
from animforge.animation.keyframes import (
    AnimatableProperty,
    Keyframe,
    KeyframeValue,
    group_tracks,
    keyframes_for,
    patch_keyframe,
    remove_keyframe,
    upsert_keyframe,
)
from animforge.animation.timebase import clamp_time
from animforge.scene import Layer, Project

logger = logging.getLogger(__name__)

Subscriber = Callable[[Project], None]

# Project fields update_settings may change
_SETTINGS_FIELDS = ('name', 'width', 'height', 'fps', 'duration')


class ProjectStore:
    """Thread-safe owner of the current Project."""

    def __init__(self, project: Optional[Project] = None):
        self._lock = threading.RLock()
        self._project = project if project is not None else Project()
        self._tracks = group_tracks(self._project.keyframes)
        self._subscribers: list[Subscriber] = []

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    @property
    def project(self) -> Project:
        """The current Project value. Never mutate it in place."""
        return self._project

    def get_layer(self, layer_id: str) -> Optional[Layer]:
        return self._project.get_layer(layer_id)

    def get_keyframes_for_layer(
        self,
        layer_id: str,
        prop: Optional[Union[AnimatableProperty, str]] = None,
    ) -> list[Keyframe]:
        """
        Keyframes of a layer sorted by time, optionally for one property.

        Args:
            layer_id: Layer to query
            prop: Restrict to one property

        Returns:
            New list (callers may keep or modify it)
        """
        with self._lock:
            if prop is not None:
                return list(self._tracks.get((layer_id, AnimatableProperty(prop).value), ()))
            tracks = self._tracks
        merged = [kf for (lid, _), track in tracks.items() if lid == layer_id for kf in track]
        return sorted(merged, key=lambda kf: kf.time)

    def value_at(
        self,
        layer_id: str,
        prop: Union[AnimatableProperty, str],
        t: Optional[float] = None,
    ) -> Optional[KeyframeValue]:
        """
        Live value of one layer property.

        Falls back to the element's static value when the property has no
        keyframes. Returns None for unknown layers.
        """
        with self._lock:
            project = self._project
            track = self._tracks.get((layer_id, AnimatableProperty(prop).value), [])
        layer = project.get_layer(layer_id)
        if layer is None:
            return None
        return resolve_property(layer.element, prop, track, project.current_time if t is None else t)

    def resolve_layer(self, layer_id: str, t: Optional[float] = None) -> Optional[dict]:
        """All live property values of a layer, or None for unknown layers."""
        project = self._project
        layer = project.get_layer(layer_id)
        if layer is None:
            return None
        return resolve_layer(project, layer, t)

    # -------------------------------------------------------------------------
    # Subscribers
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback run after every change.

        Returns:
            Function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Project-level operations
    # -------------------------------------------------------------------------

    def set_project(self, project: Project) -> None:
        """Replace the whole project (e.g. after an import)."""
        self._apply(lambda current: project, keyframes_changed=True)

    def update_settings(self, **changes: Any) -> None:
        """
        Change name, canvas size, frame rate or duration.

        Unknown keys raise ``ValueError``; values are validated like a new
        Project, so a shorter duration re-clamps the current time.
        """
        unknown = set(changes) - set(_SETTINGS_FIELDS)
        if unknown:
            raise ValueError(f"Unknown project settings: {sorted(unknown)}")

        def change(current: Project) -> Project:
            data = {name: getattr(current, name) for name in _SETTINGS_FIELDS}
            data.update(changes)
            validated = Project.model_validate(data)
            return current.model_copy(update={
                **{name: getattr(validated, name) for name in _SETTINGS_FIELDS},
                'current_time': clamp_time(current.current_time, validated.duration),
            })

        self._apply(change)

    def set_current_time(self, t: float) -> None:
        """Set the playback time, clamped to ``[0, duration]``."""
        def change(current: Project) -> Optional[Project]:
            clamped = clamp_time(t, current.duration)
            if clamped == current.current_time:
                return None
            return current.model_copy(update={'current_time': clamped})

        self._apply(change)

    def set_is_playing(self, playing: bool) -> None:
        def change(current: Project) -> Optional[Project]:
            if current.is_playing == playing:
                return None
            return current.model_copy(update={'is_playing': playing})

        self._apply(change)

    # -------------------------------------------------------------------------
    # Layer operations
    # -------------------------------------------------------------------------

    def add_layer(self, layer: Layer, index: Optional[int] = None) -> None:
        """Insert a layer (at the top of the paint order by default)."""
        def change(current: Project) -> Project:
            layers = list(current.layers)
            if index is None:
                layers.append(layer)
            else:
                layers.insert(index, layer)
            return current.model_copy(update={'layers': layers})

        self._apply(change)

    def remove_layer(self, layer_id: str) -> None:
        """Remove a layer together with its keyframes. Unknown ids are a no-op."""
        def change(current: Project) -> Optional[Project]:
            if current.get_layer(layer_id) is None:
                return None
            update: dict[str, Any] = {
                'layers': [layer for layer in current.layers if layer.id != layer_id],
                'keyframes': [kf for kf in current.keyframes if kf.layer_id != layer_id],
            }
            if current.selected_layer_id == layer_id:
                update['selected_layer_id'] = None
            return current.model_copy(update=update)

        self._apply(change, keyframes_changed=True)

    def toggle_layer_visibility(self, layer_id: str) -> None:
        self._update_layer(layer_id, lambda layer: {'visible': not layer.visible})

    def toggle_layer_lock(self, layer_id: str) -> None:
        self._update_layer(layer_id, lambda layer: {'locked': not layer.locked})

    def select_layer(self, layer_id: Optional[str]) -> None:
        """Select a layer, or clear the selection with None."""
        def change(current: Project) -> Optional[Project]:
            if layer_id is not None and current.get_layer(layer_id) is None:
                logger.debug("select_layer: unknown layer %s", layer_id)
                return None
            return current.model_copy(update={'selected_layer_id': layer_id})

        self._apply(change)

    def _update_layer(self, layer_id: str, changes: Callable[[Layer], dict]) -> None:
        def change(current: Project) -> Optional[Project]:
            index = current.get_layer_index(layer_id)
            if index is None:
                return None
            layers = list(current.layers)
            layers[index] = layers[index].model_copy(update=changes(layers[index]))
            return current.model_copy(update={'layers': layers})

        self._apply(change)

    # -------------------------------------------------------------------------
    # Keyframe operations
    # -------------------------------------------------------------------------

    def add_keyframe(
        self,
        layer_id: str,
        prop: Union[AnimatableProperty, str],
        value: KeyframeValue,
        easing: Union[Easing, str] = EasingType.LINEAR,
    ) -> Optional[Keyframe]:
        """
        Add a keyframe at the current time, replacing one in the same slot.

        Args:
            layer_id: Owning layer
            prop: Animated property
            value: Number, or color string for fill/stroke
            easing: Easing towards the next keyframe

        Returns:
            The stored keyframe, or None if the layer does not exist
        """
        added: list[Keyframe] = []

        def change(current: Project) -> Optional[Project]:
            if current.get_layer(layer_id) is None:
                logger.warning("add_keyframe: unknown layer %s", layer_id)
                return None
            keyframe = Keyframe(
                time=current.current_time,
                property=prop,
                value=value,
                easing=easing,
                layerId=layer_id,
            )
            added.append(keyframe)
            return current.model_copy(update={
                'keyframes': upsert_keyframe(current.keyframes, keyframe),
            })

        self._apply(change, keyframes_changed=True)
        return added[0] if added else None

    def delete_keyframe(self, keyframe_id: str) -> None:
        """Delete a keyframe by id. Unknown ids are a no-op."""
        def change(current: Project) -> Optional[Project]:
            keyframes = remove_keyframe(current.keyframes, keyframe_id)
            if len(keyframes) == len(current.keyframes):
                return None
            return current.model_copy(update={'keyframes': keyframes})

        self._apply(change, keyframes_changed=True)

    def update_keyframe(self, keyframe_id: str, updates: dict[str, Any]) -> Optional[Keyframe]:
        """
        Merge partial fields into a keyframe (e.g. ``{'easing': 'hold'}``).

        Returns:
            The updated keyframe, or None if the id is unknown
        """
        updated: list[Keyframe] = []

        def change(current: Project) -> Optional[Project]:
            if not any(kf.id == keyframe_id for kf in current.keyframes):
                return None
            keyframes = patch_keyframe(current.keyframes, keyframe_id, updates)
            updated.extend(kf for kf in keyframes if kf.id == keyframe_id)
            return current.model_copy(update={'keyframes': keyframes})

        self._apply(change, keyframes_changed=True)
        return updated[0] if updated else None

    def keyframes_for(self, layer_id: str, prop: Optional[str] = None) -> list[Keyframe]:
        """Unindexed scan, equivalent to ``get_keyframes_for_layer``."""
        return keyframes_for(self._project.keyframes, layer_id, prop)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _apply(
        self,
        change: Callable[[Project], Optional[Project]],
        keyframes_changed: bool = False,
    ) -> None:
        """Swap in ``change(current)`` under the lock, then notify.

        Subscribers run after the lock is released so they may call back into
        other components (e.g. a playback controller) without lock inversion.
        """
        with self._lock:
            project = change(self._project)
            if project is None:
                return
            self._project = project
            if keyframes_changed:
                self._tracks = group_tracks(project.keyframes)
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(project)
