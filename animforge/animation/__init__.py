"""
Animation engine: keyframes, easing, interpolation and playback.

Everything here is independent of the scene models except ``evaluator``,
which reads element transforms and styles for the static fallback.
"""

from .color import (
    from_normalized,
    lerp_color,
    normalize_hex,
    parse_color,
    to_normalized,
)
from .easing import (
    CubicBezier,
    CubicBezierEasing,
    Easing,
    EasingType,
    apply_easing,
    coerce_easing,
    easing_from_tangents,
    easing_to_tangents,
)
from .keyframes import (
    AnimatableProperty,
    Keyframe,
    KeyframeValue,
    group_tracks,
    is_color_property,
    keyframes_for,
    patch_keyframe,
    remove_keyframe,
    upsert_keyframe,
)
from .interpolation import color_at, numeric_at, sample_track, value_at
from .evaluator import apply_values, resolve_layer, resolve_property, static_value
from .playback import PlaybackConfig, PlaybackController, PlaybackState, format_timecode
from .timebase import (
    end_frame,
    frame_to_seconds,
    last_frame,
    round_half_up,
    seconds_to_frame,
    snap_to_frame,
)

__all__ = [
    # Color
    'parse_color',
    'normalize_hex',
    'to_normalized',
    'from_normalized',
    'lerp_color',
    # Easing
    'EasingType',
    'CubicBezierEasing',
    'CubicBezier',
    'Easing',
    'apply_easing',
    'coerce_easing',
    'easing_to_tangents',
    'easing_from_tangents',
    # Keyframes
    'AnimatableProperty',
    'Keyframe',
    'KeyframeValue',
    'is_color_property',
    'upsert_keyframe',
    'remove_keyframe',
    'patch_keyframe',
    'keyframes_for',
    'group_tracks',
    # Interpolation
    'value_at',
    'numeric_at',
    'color_at',
    'sample_track',
    'static_value',
    'resolve_property',
    'resolve_layer',
    'apply_values',
    # Playback
    'PlaybackState',
    'PlaybackConfig',
    'PlaybackController',
    'format_timecode',
    # Timebase
    'round_half_up',
    'seconds_to_frame',
    'frame_to_seconds',
    'snap_to_frame',
    'end_frame',
    'last_frame',
]
