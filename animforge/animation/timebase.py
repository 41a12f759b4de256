"""Time unit conversion between seconds and frame indices.

The interchange format counts time in frames, the editor in seconds. All
conversions round half up (like ``Math.round``) rather than using Python's
banker's rounding, so that 0.5 frames always lands on the next frame.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from negative infinity."""
    return math.floor(value + 0.5)


def seconds_to_frame(seconds: float, fps: float) -> int:
    """Convert a time in seconds to a frame index: ``round(t * fps)``."""
    return round_half_up(seconds * fps)


def frame_to_seconds(frame: float, fps: float) -> float:
    """Convert a frame index back to seconds."""
    if fps <= 0:
        return 0.0
    return frame / fps


def snap_to_frame(seconds: float, fps: float) -> float:
    """Snap a time to the nearest exact frame boundary."""
    if fps <= 0:
        return seconds
    return seconds_to_frame(seconds, fps) / fps


def end_frame(duration: float, fps: float) -> int:
    """Frame index one past the last rendered frame: ``ceil(duration * fps)``.

    The product is rounded to 9 decimals first so float noise such as
    ``0.1 * 30 == 3.0000000000000004`` does not add a frame.
    """
    return math.ceil(round(duration * fps, 9))


def last_frame(duration: float, fps: float) -> int:
    """Highest valid frame index: ``round(duration * fps)``."""
    return seconds_to_frame(duration, fps)


def clamp_time(seconds: float, duration: float) -> float:
    """Clamp a time to ``[0, duration]``."""
    return max(0.0, min(seconds, duration))
