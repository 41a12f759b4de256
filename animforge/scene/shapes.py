"""
Shape elements - the leaf variants of the element tree.

Each variant adds its own geometry to BaseElement:
- RectElement (type: 'rect'): x, y, width, height, optional corner radius
- CircleElement (type: 'circle'): cx, cy, r
- EllipseElement (type: 'ellipse'): cx, cy, rx, ry
- PathElement (type: 'path'): SVG path data string
- PolygonElement / PolylineElement: flat coordinate list as a string
"""

import re
from typing import Literal, Optional

from pydantic import Field, field_validator

from .base import BaseElement, ensure_finite

_NUMBER_RE = re.compile(r'[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?')


def parse_points(points: str) -> list[tuple[float, float]]:
    """
    Parse a space/comma delimited coordinate list into (x, y) pairs.

    A trailing odd coordinate is ignored, as SVG renderers do.

    Args:
        points: e.g. "0,0 100,0 50,80"

    Returns:
        List of points
    """
    values = [float(v) for v in _NUMBER_RE.findall(points or '')]
    return [(values[i], values[i + 1]) for i in range(0, len(values) - 1, 2)]


def format_points(points: list[tuple[float, float]]) -> str:
    """Format (x, y) pairs as an SVG points string."""
    return ' '.join(f'{format_number(x)},{format_number(y)}' for x, y in points)


def format_number(value: float) -> str:
    """Shortest repr of a float, without a trailing ".0"."""
    text = repr(float(value))
    return text[:-2] if text.endswith('.0') else text


class RectElement(BaseElement):
    """Axis-aligned rectangle with optional rounded corners."""

    element_type: Literal["rect"] = Field(default="rect", alias="type")
    name: str = Field(default='Rectangle')

    x: float = Field(default=0.0)
    y: float = Field(default=0.0)
    width: float = Field(default=0.0)
    height: float = Field(default=0.0)
    rx: Optional[float] = Field(default=None)  # Corner radius

    @field_validator('x', 'y', 'width', 'height', 'rx')
    @classmethod
    def _finite(cls, v: Optional[float]) -> Optional[float]:
        return v if v is None else ensure_finite(v)

    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)


class CircleElement(BaseElement):
    """Circle given by center and radius."""

    element_type: Literal["circle"] = Field(default="circle", alias="type")
    name: str = Field(default='Circle')

    cx: float = Field(default=0.0)
    cy: float = Field(default=0.0)
    r: float = Field(default=0.0)

    @field_validator('cx', 'cy', 'r')
    @classmethod
    def _finite(cls, v: float) -> float:
        return ensure_finite(v)


class EllipseElement(BaseElement):
    """Ellipse given by center and both radii."""

    element_type: Literal["ellipse"] = Field(default="ellipse", alias="type")
    name: str = Field(default='Ellipse')

    cx: float = Field(default=0.0)
    cy: float = Field(default=0.0)
    rx: float = Field(default=0.0)
    ry: float = Field(default=0.0)

    @field_validator('cx', 'cy', 'rx', 'ry')
    @classmethod
    def _finite(cls, v: float) -> float:
        return ensure_finite(v)


class PathElement(BaseElement):
    """Free-form path holding SVG path data."""

    element_type: Literal["path"] = Field(default="path", alias="type")
    name: str = Field(default='Path')

    d: str = Field(default='')


class PolygonElement(BaseElement):
    """Closed polygon."""

    element_type: Literal["polygon"] = Field(default="polygon", alias="type")
    name: str = Field(default='Polygon')

    points: str = Field(default='')

    def point_list(self) -> list[tuple[float, float]]:
        return parse_points(self.points)


class PolylineElement(BaseElement):
    """Open polyline."""

    element_type: Literal["polyline"] = Field(default="polyline", alias="type")
    name: str = Field(default='Polyline')

    points: str = Field(default='')

    def point_list(self) -> list[tuple[float, float]]:
        return parse_points(self.points)
