"""Keyframe interpolation.

Maps an ordered keyframe track and a query time to a property value:

- before the first keyframe / after the last: clamp to that keyframe's value
- between ``k0`` and ``k1``: ``p = (t - k0.time) / (k1.time - k0.time)``,
  remapped by ``k0``'s easing, then linear interpolation of numbers or of each
  RGB channel for colors

Tracks must be non-empty, sorted by time and hold a single property. Falling
back to the element's static value for an empty track is the caller's job
(see ``animforge.animation.evaluator``).

Example:
    from animforge.animation import Keyframe, value_at

    track = [
        Keyframe(property='positionX', time=0, value=0, layerId='a'),
        Keyframe(property='positionX', time=2, value=200, layerId='a'),
    ]
    value_at(track, 1.0)  # 100.0
"""

from __future__ import annotations

import bisect
from typing import Sequence, Union

import numpy as np

from .color import lerp_color, normalize_hex
from .easing import apply_easing
from .keyframes import Keyframe, KeyframeValue, is_color_property


def lerp(a: float, b: float, progress: float) -> float:
    """Linear interpolation between two numbers."""
    return a + (b - a) * progress


def find_segment(times: Sequence[float], t: float) -> int:
    """Index ``i`` of the bracketing pair with ``times[i] <= t < times[i + 1]``.

    Assumes ``times[0] <= t < times[-1]``.
    """
    return bisect.bisect_right(times, t) - 1


def segment_progress(k0: Keyframe, k1: Keyframe, t: float) -> float:
    """Eased progress of ``t`` through the segment ``k0 -> k1``."""
    span = k1.time - k0.time
    if span <= 0:
        # Zero-length interval snaps to the later keyframe
        return 1.0
    return apply_easing(k0.easing, (t - k0.time) / span)


def _held(keyframe: Keyframe) -> KeyframeValue:
    if is_color_property(keyframe.prop):
        return normalize_hex(keyframe.value)
    return keyframe.value


def value_at(keyframes: Sequence[Keyframe], t: float) -> KeyframeValue:
    """
    Resolve a property value at time ``t``.

    Args:
        keyframes: Non-empty track, sorted by time, one property
        t: Query time in seconds

    Returns:
        A float for numeric properties, a ``#rrggbb`` string for colors

    Raises:
        ValueError: If the track is empty
    """
    if not keyframes:
        raise ValueError('value_at needs at least one keyframe')

    first, last = keyframes[0], keyframes[-1]
    if t <= first.time:
        return _held(first)
    if t >= last.time:
        return _held(last)

    times = [kf.time for kf in keyframes]
    i = find_segment(times, t)
    k0, k1 = keyframes[i], keyframes[i + 1]
    progress = segment_progress(k0, k1, t)

    if is_color_property(k0.prop):
        return lerp_color(k0.value, k1.value, progress)
    return lerp(_as_number(k0.value), _as_number(k1.value), progress)


def numeric_at(keyframes: Sequence[Keyframe], t: float) -> float:
    """``value_at`` for numeric tracks, always returning a float."""
    return _as_number(value_at(keyframes, t))


def color_at(keyframes: Sequence[Keyframe], t: float) -> str:
    """``value_at`` for color tracks, always returning ``#rrggbb``."""
    return normalize_hex(value_at(keyframes, t))


def sample_track(
    keyframes: Sequence[Keyframe],
    times: Union[Sequence[float], np.ndarray],
) -> np.ndarray:
    """
    Evaluate a numeric track at many times at once.

    Bracketing is vectorized with ``np.searchsorted``; easing is then applied
    segment by segment.

    Args:
        keyframes: Non-empty numeric track, sorted by time
        times: Query times in seconds

    Returns:
        Float array with one value per query time
    """
    if not keyframes:
        raise ValueError('sample_track needs at least one keyframe')
    if is_color_property(keyframes[0].prop):
        raise ValueError('sample_track only supports numeric properties')

    query = np.asarray(times, dtype=np.float64)
    key_times = np.array([kf.time for kf in keyframes], dtype=np.float64)
    key_values = np.array([_as_number(kf.value) for kf in keyframes], dtype=np.float64)

    result = np.empty_like(query)
    result[query <= key_times[0]] = key_values[0]
    result[query >= key_times[-1]] = key_values[-1]

    inside = (query > key_times[0]) & (query < key_times[-1])
    if not np.any(inside):
        return result

    segments = np.searchsorted(key_times, query[inside], side='right') - 1
    inside_values = np.empty(segments.shape, dtype=np.float64)
    for seg in np.unique(segments):
        mask = segments == seg
        k0, k1 = keyframes[seg], keyframes[seg + 1]
        eased = np.array([segment_progress(k0, k1, t) for t in query[inside][mask]])
        inside_values[mask] = key_values[seg] + (key_values[seg + 1] - key_values[seg]) * eased
    result[inside] = inside_values
    return result


def _as_number(value: KeyframeValue) -> float:
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return float(value)
