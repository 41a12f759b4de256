"""
Lottie importer.

Rebuilds a Project from a Lottie document, inverting ``exporter``:

- header -> name, canvas size, fps, duration (``op / fr``)
- each shape layer -> Layer; its first shape group -> Element
- geometry item -> element variant (``rc`` rect, ``el`` named "Circle" with
  equal diameters -> circle else ellipse, ``sh`` -> path / polygon / polyline)
- fill/stroke entries -> Style, normalized channels -> hex
- animated properties -> Keyframes at ``t / fr`` seconds, easing recovered
  from ``h`` and ``o``/``i`` tangents

Failures never raise out of the public functions; they return an
``ImportResult`` with ``success=False``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from animforge.animation.color import from_normalized
from animforge.animation.easing import Easing, EasingType, easing_from_tangents
from animforge.animation.keyframes import AnimatableProperty, Keyframe, upsert_keyframe
from animforge.animation.timebase import frame_to_seconds
from animforge.errors import DocumentFormatError
from animforge.scene import (
    BaseElement,
    CircleElement,
    EllipseElement,
    GroupElement,
    Layer,
    PathElement,
    PolygonElement,
    PolylineElement,
    Project,
    RectElement,
    Style,
    Transform,
    format_points,
)

from .lottie import (
    EllipseShape,
    FillShape,
    GroupShape,
    LayerTransform,
    LottieAnimation,
    LottieKeyframe,
    LottieProperty,
    PathShape,
    RectShape,
    ShapeLayer,
    StrokeShape,
    TransformShape,
)
from .path_data import BezierPath, to_path_data

logger = logging.getLogger(__name__)

SHAPE_LAYER_TYPE = 4


@dataclass
class ImportResult:
    """Outcome of an import."""

    success: bool
    project: Optional[Project] = None
    warnings: list[str] = field(default_factory=list)
    error: Optional[str] = None


def _easing_of(entry: LottieKeyframe) -> Easing:
    if entry.h == 1:
        return EasingType.HOLD
    if entry.o is None or entry.i is None:
        return EasingType.LINEAR
    out_x, out_y = entry.o.first()
    in_x, in_y = entry.i.first()
    return easing_from_tangents(out_x, out_y, in_x, in_y)


def _static_list(prop: LottieProperty, size: int) -> list[float]:
    """Static value of a property as a list, or the first keyframe's value."""
    value = prop.k
    if prop.is_animated:
        entries = prop.keyframes
        value = entries[0].s if entries and entries[0].s is not None else [0.0] * size
    if isinstance(value, (int, float)):
        value = [value]
    if not isinstance(value, list) or len(value) < size:
        raise DocumentFormatError(f"Expected {size} values, got {value!r}")
    return [_number(v) for v in value[:size]]


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise DocumentFormatError(f"Expected a number, got {value!r}") from None


def _static_number(prop: LottieProperty) -> float:
    return _static_list(prop, 1)[0]


class LottieImporter:
    """LottieAnimation -> Project converter."""

    def __init__(self, document: LottieAnimation):
        self.document = document
        self.fps = document.fr
        self.warnings: list[str] = []
        self.keyframes: list[Keyframe] = []

    def import_project(self, raw_layers: list[Any]) -> Project:
        layers = []
        for index, raw in enumerate(raw_layers):
            layer = self._layer(index, raw)
            if layer is not None:
                layers.append(layer)

        doc = self.document
        return Project(
            name=doc.nm or 'Imported Animation',
            width=doc.w,
            height=doc.h,
            fps=doc.fr,
            duration=frame_to_seconds(doc.op, doc.fr),
            layers=layers,
            keyframes=self.keyframes,
        )

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    # -------------------------------------------------------------------------
    # Layers
    # -------------------------------------------------------------------------

    def _layer(self, index: int, raw: Any) -> Optional[Layer]:
        if not isinstance(raw, dict):
            raise DocumentFormatError(f"Layer {index} is not an object")
        if raw.get('ty') != SHAPE_LAYER_TYPE:
            self.warn(f"Skipped layer {index} ({raw.get('nm', '')!r}): unsupported type {raw.get('ty')!r}")
            return None
        shape_layer = ShapeLayer.model_validate(raw)

        groups = [shape for shape in shape_layer.shapes if isinstance(shape, GroupShape)]
        if not groups:
            self.warn(f"Skipped layer {index} ({shape_layer.nm!r}): no shape group")
            return None
        if len(groups) > 1:
            self.warn(f"Layer {index} ({shape_layer.nm!r}): only the first shape group is imported")

        layer = Layer(name=shape_layer.nm, element=RectElement())
        group = groups[0]
        # Exported groups carry the element name; generic "Group" names do not
        name = group.nm if group.nm and group.nm != 'Group' else shape_layer.nm
        element = self._element(group, name, layer.id)
        element = self._apply_layer_transform(element, shape_layer.ks, layer.id)
        return layer.model_copy(update={'element': element})

    def _apply_layer_transform(self, element: BaseElement, ks: LayerTransform, layer_id: str) -> BaseElement:
        x, y = _static_list(ks.p, 2)
        scale_x, scale_y = _static_list(ks.s, 2)
        transform = Transform(
            x=x,
            y=y,
            rotation=_static_number(ks.r),
            scaleX=scale_x / 100,
            scaleY=scale_y / 100,
        )
        style = element.style.model_copy(update={
            'opacity': max(0.0, min(1.0, _static_number(ks.o) / 100)),
        })

        self._keyframes(ks.p, layer_id, [AnimatableProperty.POSITION_X, AnimatableProperty.POSITION_Y])
        self._keyframes(ks.s, layer_id, [AnimatableProperty.SCALE_X, AnimatableProperty.SCALE_Y], scale=0.01)
        self._keyframes(ks.r, layer_id, [AnimatableProperty.ROTATION])
        self._keyframes(ks.o, layer_id, [AnimatableProperty.OPACITY], scale=0.01)
        return element.model_copy(update={'transform': transform, 'style': style})

    # -------------------------------------------------------------------------
    # Keyframes
    # -------------------------------------------------------------------------

    def _keyframes(
        self,
        prop: LottieProperty,
        layer_id: str,
        targets: list[AnimatableProperty],
        scale: float = 1.0,
    ) -> None:
        """One keyframe per entry and target axis; a later entry at the same frame wins."""
        for entry in prop.keyframes:
            if entry.s is None:
                continue
            time = frame_to_seconds(entry.t, self.fps)
            easing = _easing_of(entry)
            for axis, target in enumerate(targets):
                if axis >= len(entry.s):
                    break
                self.keyframes = upsert_keyframe(self.keyframes, Keyframe(
                    time=time,
                    property=target,
                    value=_number(entry.s[axis]) * scale,
                    easing=easing,
                    layerId=layer_id,
                ))

    def _color_keyframes(self, prop: LottieProperty, layer_id: Optional[str], target: AnimatableProperty) -> None:
        if layer_id is None:
            return
        for entry in prop.keyframes:
            if entry.s is None:
                continue
            self.keyframes = upsert_keyframe(self.keyframes, Keyframe(
                time=frame_to_seconds(entry.t, self.fps),
                property=target,
                value=from_normalized([_number(c) for c in entry.s]),
                easing=_easing_of(entry),
                layerId=layer_id,
            ))

    # -------------------------------------------------------------------------
    # Elements
    # -------------------------------------------------------------------------

    def _element(self, group: GroupShape, name: str, layer_id: Optional[str]) -> BaseElement:
        """Element for one shape group. ``layer_id`` is None for nested groups."""
        style = self._style(group, layer_id)
        children = group.items_of(GroupShape)
        rects = group.items_of(RectShape)
        ellipses = group.items_of(EllipseShape)
        paths = group.items_of(PathShape)

        if children and not (rects or ellipses or paths):
            return GroupElement(
                name=name,
                style=style,
                children=[self._child(child) for child in children],
            )
        if rects:
            rect = rects[0]
            cx, cy = _static_list(rect.p, 2)
            width, height = _static_list(rect.s, 2)
            roundness = _static_number(rect.r)
            return RectElement(
                name=name,
                style=style,
                x=cx - width / 2,
                y=cy - height / 2,
                width=width,
                height=height,
                rx=roundness if roundness > 0 else None,
            )
        if ellipses:
            ellipse = ellipses[0]
            cx, cy = _static_list(ellipse.p, 2)
            width, height = _static_list(ellipse.s, 2)
            if ellipse.nm == 'Circle' and width == height:
                return CircleElement(name=name, style=style, cx=cx, cy=cy, r=width / 2)
            return EllipseElement(name=name, style=style, cx=cx, cy=cy, rx=width / 2, ry=height / 2)
        if paths:
            return self._path_element(paths, name, style)

        self.warn(f"Shape group {group.nm!r} has no supported geometry, imported as empty group")
        return GroupElement(name=name, style=style)

    def _child(self, group: GroupShape) -> BaseElement:
        element = self._element(group, group.nm or 'Element', None)
        tr = group.transform or TransformShape()
        x, y = _static_list(tr.p, 2)
        scale_x, scale_y = _static_list(tr.s, 2)
        transform = Transform(
            x=x,
            y=y,
            rotation=_static_number(tr.r),
            scaleX=scale_x / 100,
            scaleY=scale_y / 100,
        )
        style = element.style.model_copy(update={
            'opacity': max(0.0, min(1.0, _static_number(tr.o) / 100)),
        })
        return element.model_copy(update={'transform': transform, 'style': style})

    def _path_element(self, paths: list[PathShape], name: str, style: Style) -> BaseElement:
        beziers = []
        for shape in paths:
            if shape.ks.is_animated:
                self.warn(f"Animated path {shape.nm!r} imported at its first keyframe")
                entries = shape.ks.keyframes
                first = entries[0].s[0] if entries and entries[0].s else None
                if isinstance(first, dict):
                    beziers.append(BezierPath.from_lottie(first))
            elif isinstance(shape.ks.k, dict):
                beziers.append(BezierPath.from_lottie(shape.ks.k))

        straight = all(
            not any(t != (0.0, 0.0) for t in path.in_tangents + path.out_tangents)
            for path in beziers
        )
        if len(beziers) == 1 and straight and paths[0].nm in ('Polygon', 'Polyline'):
            path = beziers[0]
            cls = PolygonElement if paths[0].nm == 'Polygon' else PolylineElement
            return cls(name=name, style=style, points=format_points(path.points()))
        return PathElement(name=name, style=style, d=to_path_data(beziers))

    def _style(self, group: GroupShape, layer_id: Optional[str]) -> Style:
        fill: Optional[str] = None
        stroke: Optional[str] = None
        stroke_width = 1.0

        fills = group.items_of(FillShape)
        if fills:
            fill = from_normalized(_static_list(fills[0].c, 3))
            self._color_keyframes(fills[0].c, layer_id, AnimatableProperty.FILL)

        strokes = group.items_of(StrokeShape)
        if strokes:
            stroke = from_normalized(_static_list(strokes[0].c, 3))
            stroke_width = _static_number(strokes[0].w)
            self._color_keyframes(strokes[0].c, layer_id, AnimatableProperty.STROKE)
            if layer_id is not None:
                self._keyframes(strokes[0].w, layer_id, [AnimatableProperty.STROKE_WIDTH])

        return Style(fill=fill, stroke=stroke, strokeWidth=stroke_width)


def import_document(data: Union[dict[str, Any], LottieAnimation]) -> ImportResult:
    """
    Rebuild a Project from a Lottie document.

    Args:
        data: Parsed Lottie JSON or a LottieAnimation model

    Returns:
        ImportResult; ``success`` is False for malformed documents
    """
    try:
        if isinstance(data, LottieAnimation):
            raw_layers = [layer.to_api_dict() for layer in data.layers]
            document = data
        elif isinstance(data, dict):
            raw_layers = data.get('layers', [])
            if not isinstance(raw_layers, list):
                raise DocumentFormatError("'layers' must be a list")
            document = LottieAnimation.model_validate({**data, 'layers': []})
        else:
            raise DocumentFormatError(f"Expected a Lottie object, got {type(data).__name__}")

        importer = LottieImporter(document)
        project = importer.import_project(raw_layers)
        if not project.layers and raw_layers:
            raise DocumentFormatError("No supported layers found")
        return ImportResult(success=True, project=project, warnings=importer.warnings)
    except ValidationError as exc:
        logger.warning("Invalid Lottie document: %s", exc)
        return ImportResult(success=False, error=f"Invalid Lottie document: {exc}")
    except DocumentFormatError as exc:
        logger.warning("Invalid Lottie document: %s", exc)
        return ImportResult(success=False, error=str(exc))


def import_from_json(text: str) -> ImportResult:
    """Import a Lottie document from a JSON string."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return ImportResult(success=False, error=f"Invalid JSON: {exc}")
    return import_document(data)


def load_lottie(file: Union[str, Path]) -> ImportResult:
    """Import a Lottie document from a file."""
    try:
        text = Path(file).read_text(encoding='utf-8')
    except OSError as exc:
        return ImportResult(success=False, error=f"Cannot read {file}: {exc}")
    return import_from_json(text)
