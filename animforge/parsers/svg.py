"""
SVG parser - builds editor layers from an SVG document.

One Layer is created per supported top-level element. Groups (``<g>``)
become GroupElements with their supported children, recursively.

Supported: rect, circle, ellipse, path, polygon, polyline, g.
Skipped silently: defs, title, desc, metadata, style.
Anything else (image, foreignObject, text, use, ...) is skipped with a
warning; it never makes the parse fail.

Example:
    result = parse_svg(Path('logo.svg').read_text())
    if result.success:
        project = Project(width=result.width or 800, layers=result.layers)
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from xml.etree import ElementTree as ET

from pydantic import ValidationError

from animforge.errors import SVGParseError
from animforge.scene import (
    BaseElement,
    CircleElement,
    EllipseElement,
    GroupElement,
    Layer,
    PathElement,
    PolygonElement,
    PolylineElement,
    RectElement,
    Style,
    Transform,
)

logger = logging.getLogger(__name__)

_NUMBER = r'[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?'
_TRANSLATE_RE = re.compile(rf'translate\(\s*({_NUMBER})(?:[\s,]+({_NUMBER}))?\s*\)')
_SCALE_RE = re.compile(rf'scale\(\s*({_NUMBER})(?:[\s,]+({_NUMBER}))?\s*\)')
_ROTATE_RE = re.compile(rf'rotate\(\s*({_NUMBER})')
_LENGTH_RE = re.compile(rf'^\s*({_NUMBER})')

_SILENT_TAGS = {'defs', 'title', 'desc', 'metadata', 'style'}


@dataclass
class SVGParseResult:
    """Result of parsing an SVG document."""

    success: bool
    layers: list[Layer] = field(default_factory=list)
    width: Optional[float] = None
    height: Optional[float] = None
    warnings: list[str] = field(default_factory=list)
    error: Optional[str] = None


def _strip_ns(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _parse_float(value: Optional[str], default: float = 0.0) -> float:
    """Leading number of an attribute ("10px" -> 10.0)."""
    if value is None:
        return default
    match = _LENGTH_RE.match(value)
    return float(match.group(1)) if match else default


def _optional_float(value: Optional[str]) -> Optional[float]:
    return _parse_float(value) if value is not None else None


def parse_transform(value: Optional[str]) -> Transform:
    """Read translate/scale/rotate from a transform attribute."""
    if not value:
        return Transform()
    data: dict[str, float] = {}
    match = _TRANSLATE_RE.search(value)
    if match:
        data['x'] = float(match.group(1))
        data['y'] = float(match.group(2) or 0)
    match = _SCALE_RE.search(value)
    if match:
        data['scale_x'] = float(match.group(1))
        data['scale_y'] = float(match.group(2)) if match.group(2) else data['scale_x']
    match = _ROTATE_RE.search(value)
    if match:
        data['rotation'] = float(match.group(1))
    return Transform(**data)


def _style_attributes(el: ET.Element) -> dict[str, str]:
    """Presentation attributes, overridden by the inline ``style`` attribute."""
    attrs = {
        name: el.get(name)
        for name in ('fill', 'stroke', 'stroke-width', 'opacity')
        if el.get(name) is not None
    }
    for declaration in (el.get('style') or '').split(';'):
        if ':' in declaration:
            name, _, value = declaration.partition(':')
            name = name.strip()
            if name in ('fill', 'stroke', 'stroke-width', 'opacity'):
                attrs[name] = value.strip()
    return attrs


def parse_style(el: ET.Element) -> Style:
    attrs = _style_attributes(el)
    data: dict[str, Any] = {
        'fill': attrs.get('fill'),
        'stroke': attrs.get('stroke'),
    }
    if 'stroke-width' in attrs:
        data['stroke_width'] = _parse_float(attrs['stroke-width'], 1.0)
    if 'opacity' in attrs:
        data['opacity'] = _parse_float(attrs['opacity'], 1.0)
    return Style(**data)


class SVGParser:
    """Walks an SVG tree and collects layers and warnings."""

    def __init__(self):
        self.warnings: list[str] = []
        self._builders: dict[str, Callable[[ET.Element, dict], BaseElement]] = {
            'rect': self._rect,
            'circle': self._circle,
            'ellipse': self._ellipse,
            'path': self._path,
            'polygon': self._polygon,
            'polyline': self._polyline,
            'g': self._group,
        }

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def parse(self, source: str) -> SVGParseResult:
        try:
            root = ET.fromstring(source)
        except ET.ParseError as exc:
            raise SVGParseError(f"Invalid SVG: {exc}") from exc
        if _strip_ns(root.tag) != 'svg':
            raise SVGParseError("No SVG element found")

        width, height = self._canvas_size(root)
        layers = []
        for child in root:
            element = self.element(child)
            if element is not None:
                layers.append(Layer(name=element.name, element=element))

        if not layers:
            raise SVGParseError("No supported elements found")
        return SVGParseResult(success=True, layers=layers, width=width, height=height, warnings=self.warnings)

    def _canvas_size(self, root: ET.Element) -> tuple[Optional[float], Optional[float]]:
        width = height = None
        view_box = root.get('viewBox')
        if view_box:
            parts = re.split(r'[\s,]+', view_box.strip())
            if len(parts) == 4:
                width, height = _parse_float(parts[2]) or None, _parse_float(parts[3]) or None
        if not width:
            width = _optional_float(root.get('width'))
        if not height:
            height = _optional_float(root.get('height'))
        return width, height

    def element(self, el: ET.Element) -> Optional[BaseElement]:
        tag = _strip_ns(el.tag)
        builder = self._builders.get(tag)
        if builder is None:
            if tag not in _SILENT_TAGS:
                self.warn(f"Unsupported SVG element <{tag}> skipped")
            return None

        element_id = el.get('id') or f"el_{uuid.uuid4().hex[:9]}"
        try:
            common = {
                'id': element_id,
                'transform': parse_transform(el.get('transform')),
                'style': parse_style(el),
            }
            return builder(el, common)
        except ValidationError as exc:
            self.warn(f"Invalid <{tag}> {element_id!r} skipped: {exc.errors()[0]['msg']}")
            return None

    # -------------------------------------------------------------------------
    # Element builders
    # -------------------------------------------------------------------------

    def _rect(self, el: ET.Element, common: dict) -> BaseElement:
        return RectElement(
            name=f"Rect {common['id']}",
            x=_parse_float(el.get('x')),
            y=_parse_float(el.get('y')),
            width=_parse_float(el.get('width')),
            height=_parse_float(el.get('height')),
            rx=_optional_float(el.get('rx') or el.get('ry')),
            **common,
        )

    def _circle(self, el: ET.Element, common: dict) -> BaseElement:
        return CircleElement(
            name=f"Circle {common['id']}",
            cx=_parse_float(el.get('cx')),
            cy=_parse_float(el.get('cy')),
            r=_parse_float(el.get('r')),
            **common,
        )

    def _ellipse(self, el: ET.Element, common: dict) -> BaseElement:
        return EllipseElement(
            name=f"Ellipse {common['id']}",
            cx=_parse_float(el.get('cx')),
            cy=_parse_float(el.get('cy')),
            rx=_parse_float(el.get('rx')),
            ry=_parse_float(el.get('ry')),
            **common,
        )

    def _path(self, el: ET.Element, common: dict) -> BaseElement:
        return PathElement(name=f"Path {common['id']}", d=el.get('d') or '', **common)

    def _polygon(self, el: ET.Element, common: dict) -> BaseElement:
        return PolygonElement(name=f"Polygon {common['id']}", points=el.get('points') or '', **common)

    def _polyline(self, el: ET.Element, common: dict) -> BaseElement:
        return PolylineElement(name=f"Polyline {common['id']}", points=el.get('points') or '', **common)

    def _group(self, el: ET.Element, common: dict) -> BaseElement:
        children = [child for child in (self.element(c) for c in el) if child is not None]
        return GroupElement(name=f"Group {common['id']}", children=children, **common)


def parse_svg(source: str) -> SVGParseResult:
    """
    Parse SVG source text into layers.

    Args:
        source: SVG document text

    Returns:
        SVGParseResult; ``success`` is False for invalid XML, a non-SVG root
        or a document without supported elements
    """
    parser = SVGParser()
    try:
        return parser.parse(source)
    except SVGParseError as exc:
        logger.warning("SVG import failed: %s", exc)
        return SVGParseResult(success=False, warnings=parser.warnings, error=str(exc))
    except ValueError as exc:
        logger.warning("SVG import failed: %s", exc)
        return SVGParseResult(success=False, warnings=parser.warnings, error=f"Invalid SVG: {exc}")
