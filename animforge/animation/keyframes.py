"""
Keyframe model and the pure operations of the keyframe store.

Keyframes live in one flat list owned by the project. Each keyframe refers to
its layer by id and to its property by name; there is at most one keyframe
per (layerId, property, time). The functions here never mutate their input,
they return a new list, so callers can swap the project's list atomically.

Serialization format:
{
    "id": "uuid",
    "time": 1.5,
    "property": "positionX",
    "value": 300,
    "easing": "easeInOut",
    "layerId": "layer-uuid"
}
"""

from __future__ import annotations

import logging
import math
import uuid
from collections import defaultdict
from enum import Enum
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .easing import CubicBezierEasing, Easing, EasingType, coerce_easing

logger = logging.getLogger(__name__)


class AnimatableProperty(str, Enum):
    """Properties that can carry keyframes."""
    POSITION_X = "positionX"
    POSITION_Y = "positionY"
    ROTATION = "rotation"
    SCALE_X = "scaleX"
    SCALE_Y = "scaleY"
    OPACITY = "opacity"
    FILL = "fill"
    STROKE = "stroke"
    STROKE_WIDTH = "strokeWidth"


COLOR_PROPERTIES = frozenset({AnimatableProperty.FILL, AnimatableProperty.STROKE})

KeyframeValue = Union[float, str]


def is_color_property(prop: Union[AnimatableProperty, str]) -> bool:
    """Check whether a property holds color strings instead of numbers."""
    return AnimatableProperty(prop) in COLOR_PROPERTIES


def new_keyframe_id() -> str:
    return str(uuid.uuid4())


class Keyframe(BaseModel):
    """A timestamped value plus easing for one property of one layer."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra='ignore',
        use_enum_values=True,
    )

    id: str = Field(default_factory=new_keyframe_id)
    time: float = Field(default=0.0, ge=0.0)
    prop: AnimatableProperty = Field(alias='property')
    value: KeyframeValue = Field(default=0.0)
    easing: Union[EasingType, CubicBezierEasing] = Field(default=EasingType.LINEAR)
    layer_id: str = Field(alias='layerId')

    @field_validator('easing', mode='before')
    @classmethod
    def _coerce_easing(cls, v: Any) -> Easing:
        return coerce_easing(v)

    @model_validator(mode='after')
    def _check_value(self) -> 'Keyframe':
        if is_color_property(self.prop):
            if not isinstance(self.value, str):
                raise ValueError(f"'{self.prop}' keyframes need a color string")
        else:
            if isinstance(self.value, str):
                try:
                    self.value = float(self.value)
                except ValueError:
                    raise ValueError(f"'{self.prop}' keyframes need a number") from None
            if not math.isfinite(self.value):
                raise ValueError('keyframe value must be finite')
        return self

    @property
    def is_color(self) -> bool:
        return is_color_property(self.prop)

    def track_key(self) -> tuple[str, str]:
        """Key of the (layer, property) track this keyframe belongs to."""
        return (self.layer_id, AnimatableProperty(self.prop).value)

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode='json')

    @classmethod
    def from_api_dict(cls, data: dict[str, Any]) -> 'Keyframe':
        return cls.model_validate(data)


def _same_slot(a: Keyframe, b: Keyframe) -> bool:
    return a.layer_id == b.layer_id and a.prop == b.prop and a.time == b.time


def upsert_keyframe(keyframes: Iterable[Keyframe], keyframe: Keyframe) -> list[Keyframe]:
    """
    Insert a keyframe, replacing any keyframe in the same slot.

    A slot is the (layerId, property, time) triple. The replacement takes the
    old keyframe's list position but keeps its own (new) id.

    Args:
        keyframes: Current keyframe list
        keyframe: Keyframe to insert

    Returns:
        New keyframe list
    """
    result = list(keyframes)
    for i, existing in enumerate(result):
        if _same_slot(existing, keyframe):
            logger.debug(
                "Replacing keyframe %s with %s at %s/%s t=%s",
                existing.id, keyframe.id, keyframe.layer_id, keyframe.prop, keyframe.time,
            )
            result[i] = keyframe
            return result
    result.append(keyframe)
    return result


def remove_keyframe(keyframes: Iterable[Keyframe], keyframe_id: str) -> list[Keyframe]:
    """Remove a keyframe by id. Unknown ids leave the list unchanged."""
    return [kf for kf in keyframes if kf.id != keyframe_id]


def _field_name(key: str) -> str:
    for name, info in Keyframe.model_fields.items():
        if key == name or key == info.alias:
            return name
    return key


def patch_keyframe(
    keyframes: Iterable[Keyframe],
    keyframe_id: str,
    updates: dict[str, Any],
) -> list[Keyframe]:
    """
    Merge field updates into one keyframe.

    Keys may be field names or their camelCase aliases. The id cannot be
    changed. If the patch moves the keyframe onto an occupied slot, the
    keyframe previously in that slot is dropped.

    Args:
        keyframes: Current keyframe list
        keyframe_id: Id of the keyframe to update
        updates: Partial fields, e.g. ``{'easing': 'hold'}``

    Returns:
        New keyframe list (unchanged if the id is unknown)
    """
    result = list(keyframes)
    index = next((i for i, kf in enumerate(result) if kf.id == keyframe_id), None)
    if index is None:
        return result

    data = result[index].model_dump()
    for key, value in updates.items():
        name = _field_name(key)
        if name == 'id' or name not in Keyframe.model_fields:
            continue
        data[name] = value
    updated = Keyframe.model_validate(data)

    return [
        updated if i == index else kf
        for i, kf in enumerate(result)
        if i == index or not _same_slot(kf, updated)
    ]


def keyframes_for(
    keyframes: Iterable[Keyframe],
    layer_id: str,
    prop: Optional[Union[AnimatableProperty, str]] = None,
) -> list[Keyframe]:
    """All keyframes of a layer (optionally one property), sorted by time."""
    wanted = AnimatableProperty(prop) if prop is not None else None
    matches = [
        kf for kf in keyframes
        if kf.layer_id == layer_id and (wanted is None or kf.prop == wanted)
    ]
    return sorted(matches, key=lambda kf: kf.time)


def group_tracks(keyframes: Iterable[Keyframe]) -> dict[tuple[str, str], list[Keyframe]]:
    """Index keyframes by (layerId, property), each track sorted by time."""
    tracks: dict[tuple[str, str], list[Keyframe]] = defaultdict(list)
    for kf in keyframes:
        tracks[kf.track_key()].append(kf)
    for track in tracks.values():
        track.sort(key=lambda kf: kf.time)
    return dict(tracks)
