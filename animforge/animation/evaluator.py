"""Live property resolution for layers.

The interpolation engine only handles non-empty tracks. This module supplies
the caller-side fallback: a property without keyframes resolves to the static
value stored on the element's transform or style.
"""

from __future__ import annotations

from typing import Optional, Sequence, TYPE_CHECKING

from .color import normalize_hex
from .interpolation import value_at
from .keyframes import AnimatableProperty, Keyframe, KeyframeValue, group_tracks

if TYPE_CHECKING:
    from animforge.scene import BaseElement, Layer, Project

# Property -> (model section, field name)
PROPERTY_FIELDS: dict[AnimatableProperty, tuple[str, str]] = {
    AnimatableProperty.POSITION_X: ('transform', 'x'),
    AnimatableProperty.POSITION_Y: ('transform', 'y'),
    AnimatableProperty.ROTATION: ('transform', 'rotation'),
    AnimatableProperty.SCALE_X: ('transform', 'scale_x'),
    AnimatableProperty.SCALE_Y: ('transform', 'scale_y'),
    AnimatableProperty.OPACITY: ('style', 'opacity'),
    AnimatableProperty.FILL: ('style', 'fill'),
    AnimatableProperty.STROKE: ('style', 'stroke'),
    AnimatableProperty.STROKE_WIDTH: ('style', 'stroke_width'),
}


def static_value(element: 'BaseElement', prop: AnimatableProperty | str) -> Optional[KeyframeValue]:
    """Value of a property as stored on the element (None for unset paint)."""
    section, field = PROPERTY_FIELDS[AnimatableProperty(prop)]
    return getattr(getattr(element, section), field)


def resolve_property(
    element: 'BaseElement',
    prop: AnimatableProperty | str,
    track: Sequence[Keyframe],
    t: float,
) -> Optional[KeyframeValue]:
    """Resolve one property at time ``t``, falling back to the static value."""
    if track:
        return value_at(track, t)
    return static_value(element, prop)


def resolve_layer(
    project: 'Project',
    layer: 'Layer',
    t: Optional[float] = None,
) -> dict[str, Optional[KeyframeValue]]:
    """
    Resolve every animatable property of a layer.

    Args:
        project: Project holding the keyframes
        layer: Layer to evaluate
        t: Time in seconds (defaults to the project's current time)

    Returns:
        Mapping of property name to live value
    """
    if t is None:
        t = project.current_time
    tracks = group_tracks(kf for kf in project.keyframes if kf.layer_id == layer.id)
    return {
        prop.value: resolve_property(layer.element, prop, tracks.get((layer.id, prop.value), ()), t)
        for prop in AnimatableProperty
    }


def apply_values(
    element: 'BaseElement',
    values: dict[str, Optional[KeyframeValue]],
) -> 'BaseElement':
    """Return a copy of ``element`` with resolved values written back."""
    updates: dict[str, dict] = {'transform': {}, 'style': {}}
    for name, value in values.items():
        section, field = PROPERTY_FIELDS[AnimatableProperty(name)]
        if value is not None and AnimatableProperty(name) in (AnimatableProperty.FILL, AnimatableProperty.STROKE):
            value = normalize_hex(value)
        updates[section][field] = value

    transform = element.transform.model_copy(update=updates['transform'])
    style = element.style.model_copy(update=updates['style'])
    # model_copy skips validation, so clamp like Style does
    style.opacity = max(0.0, min(1.0, style.opacity))
    style.stroke_width = max(0.0, style.stroke_width)
    return element.model_copy(update={'transform': transform, 'style': style})
