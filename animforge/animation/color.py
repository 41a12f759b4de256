"""Color parsing, formatting and interpolation.

Colors travel through the editor as CSS-like strings. The canonical form is
lowercase ``#rrggbb``. Anything that cannot be resolved becomes black rather
than raising, so a bad color value never interrupts playback or export.

Example:
    >>> parse_color('#F80')
    (255, 136, 0)
    >>> to_normalized('#ff0000')
    [1.0, 0.0, 0.0]
    >>> lerp_color('#000000', '#ffffff', 0.5)
    '#808080'
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

import numpy as np

from .timebase import round_half_up

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]

BLACK: RGB = (0, 0, 0)

# Keyword colors most often found in hand-written SVG
NAMED_COLORS: dict[str, RGB] = {
    'black': (0, 0, 0),
    'white': (255, 255, 255),
    'red': (255, 0, 0),
    'lime': (0, 255, 0),
    'green': (0, 128, 0),
    'blue': (0, 0, 255),
    'yellow': (255, 255, 0),
    'cyan': (0, 255, 255),
    'aqua': (0, 255, 255),
    'magenta': (255, 0, 255),
    'fuchsia': (255, 0, 255),
    'gray': (128, 128, 128),
    'grey': (128, 128, 128),
    'silver': (192, 192, 192),
    'maroon': (128, 0, 0),
    'olive': (128, 128, 0),
    'purple': (128, 0, 128),
    'teal': (0, 128, 128),
    'navy': (0, 0, 128),
    'orange': (255, 165, 0),
    'pink': (255, 192, 203),
    'brown': (165, 42, 42),
}

_HEX_RE = re.compile(r'^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')
_RGB_RE = re.compile(
    r'^rgba?\(\s*([-\d.]+)\s*,\s*([-\d.]+)\s*,\s*([-\d.]+)\s*(?:,\s*[-\d.]+\s*)?\)$'
)


def is_none_color(value: Optional[str]) -> bool:
    """Check whether a paint value means "no paint"."""
    return value is None or value.strip().lower() in ('', 'none', 'transparent')


def try_parse_color(value: object) -> Optional[RGB]:
    """Parse a color string, returning None when it cannot be resolved."""
    if not isinstance(value, str):
        return None
    text = value.strip()

    match = _HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = ''.join(c * 2 for c in digits)
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    match = _RGB_RE.match(text.lower())
    if match:
        channels = [_clamp_channel(float(c)) for c in match.groups()]
        return (channels[0], channels[1], channels[2])

    return NAMED_COLORS.get(text.lower())


def parse_color(value: object) -> RGB:
    """Parse a color string into an ``(r, g, b)`` triple of 0-255 ints.

    :param value: ``#rgb``, ``#rrggbb``, ``#rrggbbaa``, ``rgb(r,g,b)`` or a
        named color
    :return: The color, or black if it cannot be resolved
    """
    rgb = try_parse_color(value)
    if rgb is None:
        logger.debug("Unresolvable color %r, falling back to black", value)
        return BLACK
    return rgb


def format_hex(rgb: Sequence[float]) -> str:
    """Format an RGB triple (0-255) as canonical ``#rrggbb``."""
    r, g, b = (_clamp_channel(c) for c in rgb[:3])
    return f'#{r:02x}{g:02x}{b:02x}'


def normalize_hex(value: object) -> str:
    """Return the canonical ``#rrggbb`` form of any accepted color input."""
    return format_hex(parse_color(value))


def to_normalized(value: object) -> list[float]:
    """Convert a color string to 0-1 RGB channels."""
    return [c / 255 for c in parse_color(value)]


def from_normalized(channels: Sequence[float]) -> str:
    """Convert 0-1 RGB(A) channels back to ``#rrggbb``. Alpha is ignored."""
    if len(channels) < 3:
        return format_hex(BLACK)
    return format_hex([c * 255 for c in channels[:3]])


def lerp_color(start: object, end: object, progress: float) -> str:
    """Interpolate two colors channel by channel.

    :param start: Color at progress 0
    :param end: Color at progress 1
    :param progress: Eased progress (not clamped, so overshooting curves
        extrapolate and are clipped to the channel range)
    :return: Canonical hex color
    """
    a = np.asarray(parse_color(start), dtype=np.float64)
    b = np.asarray(parse_color(end), dtype=np.float64)
    mixed = a + (b - a) * progress
    return format_hex(mixed.tolist())


def _clamp_channel(value: float) -> int:
    return max(0, min(255, round_half_up(value)))
