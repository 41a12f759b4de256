"""
Lottie exporter.

Converts a Project and its keyframes into a Lottie document. The export is a
pure function of the Project: the same Project always yields the same
document.

Unit conversion at the boundary:
- seconds -> frame index ``round(t * fps)`` (half up)
- opacity 0-1 -> 0-100, scale 1.0 -> 100
- hex colors -> normalized ``[r, g, b, 1]``

Position and scale combine their two axes by time union: at a time where
only one axis has a keyframe, the other axis contributes its static value,
not an interpolated one. This is lossy by construction.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, Union

from animforge.animation.color import to_normalized
from animforge.animation.easing import EasingType, coerce_easing, easing_to_tangents
from animforge.animation.keyframes import AnimatableProperty, Keyframe, group_tracks
from animforge.animation.timebase import seconds_to_frame
from animforge.config import settings
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
)

from .lottie import (
    BezierHandle,
    EllipseShape,
    FillShape,
    GroupShape,
    LayerTransform,
    LottieAnimation,
    LottieKeyframe,
    LottieProperty,
    PathShape,
    RectShape,
    ShapeItem,
    ShapeLayer,
    StrokeShape,
    TransformShape,
)
from .path_data import parse_path_data, points_to_path

logger = logging.getLogger(__name__)

Tracks = dict[tuple[str, str], list[Keyframe]]


def _num(value: float) -> Union[int, float]:
    """Integral floats as ints, so 30.0 is written as 30."""
    value = float(value)
    return int(value) if value.is_integer() else value


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _color(value: Any) -> list[Union[int, float]]:
    return [_num(c) for c in to_normalized(value)] + [1]


class LottieExporter:
    """
    Project -> LottieAnimation converter.

    Example:
        exporter = LottieExporter(project)
        document = exporter.export()
        data = document.to_api_dict()
    """

    def __init__(self, project: Project, embed_easing: Optional[bool] = None):
        self.project = project
        self.fps = project.fps
        self.embed_easing = settings.EMBED_EASING if embed_easing is None else embed_easing
        self.tracks: Tracks = group_tracks(project.keyframes)

    def export(self) -> LottieAnimation:
        end = self.project.end_frame
        return LottieAnimation(
            v=settings.LOTTIE_VERSION,
            fr=_num(self.fps),
            ip=0,
            op=end,
            w=self.project.width,
            h=self.project.height,
            nm=self.project.name,
            ddd=0,
            assets=[],
            layers=[self._layer(layer, index, end) for index, layer in enumerate(self.project.layers)],
        )

    # -------------------------------------------------------------------------
    # Layers
    # -------------------------------------------------------------------------

    def _track(self, layer_id: str, prop: AnimatableProperty) -> list[Keyframe]:
        return self.tracks.get((layer_id, prop.value), [])

    def _layer(self, layer: Layer, index: int, end: int) -> ShapeLayer:
        return ShapeLayer(
            ty=4,
            nm=layer.name,
            ind=index + 1,
            ip=0,
            op=end,
            st=0,
            ks=self._layer_transform(layer),
            shapes=[self._element_group(layer.element, TransformShape(), layer.id)],
        )

    def _layer_transform(self, layer: Layer) -> LayerTransform:
        transform = layer.element.transform
        style = layer.element.style

        def track(prop: AnimatableProperty) -> list[Keyframe]:
            return self._track(layer.id, prop)

        return LayerTransform(
            p=self._combined(
                track(AnimatableProperty.POSITION_X), track(AnimatableProperty.POSITION_Y),
                transform.x, transform.y, scale=1,
            ),
            a=LottieProperty.static([0, 0]),
            s=self._combined(
                track(AnimatableProperty.SCALE_X), track(AnimatableProperty.SCALE_Y),
                transform.scale_x, transform.scale_y, scale=100,
            ),
            r=self._single(track(AnimatableProperty.ROTATION), transform.rotation),
            o=self._single(
                track(AnimatableProperty.OPACITY), style.opacity,
                convert=lambda v: _clamp_unit(v) * 100,
            ),
        )

    # -------------------------------------------------------------------------
    # Animated properties
    # -------------------------------------------------------------------------

    def _entry(self, time: float, values: list, easing: Any) -> LottieKeyframe:
        entry = LottieKeyframe(t=seconds_to_frame(time, self.fps), s=values, e=values)
        if self.embed_easing:
            easing = coerce_easing(easing)
            if easing == EasingType.HOLD:
                entry.h = 1
            else:
                out_x, out_y, in_x, in_y = easing_to_tangents(easing)
                entry.o = BezierHandle(x=[out_x], y=[out_y])
                entry.i = BezierHandle(x=[in_x], y=[in_y])
        return entry

    def _combined(
        self,
        x_track: Sequence[Keyframe],
        y_track: Sequence[Keyframe],
        default_x: float,
        default_y: float,
        scale: float,
    ) -> LottieProperty:
        """Two-axis property merged by the union of both axes' keyframe times."""
        if not x_track and not y_track:
            return LottieProperty.static([_num(default_x * scale), _num(default_y * scale)])

        x_at = {kf.time: kf for kf in x_track}
        y_at = {kf.time: kf for kf in y_track}
        entries = []
        for time in sorted(set(x_at) | set(y_at)):
            x_kf, y_kf = x_at.get(time), y_at.get(time)
            x = float(x_kf.value) if x_kf is not None else default_x
            y = float(y_kf.value) if y_kf is not None else default_y
            easing = (x_kf or y_kf).easing
            entries.append(self._entry(time, [_num(x * scale), _num(y * scale)], easing))
        return LottieProperty.animated(entries)

    def _single(
        self,
        track: Sequence[Keyframe],
        default: Any,
        convert: Callable[[Any], Any] = float,
        wrap: bool = False,
    ) -> LottieProperty:
        """One-axis property; ``wrap`` keeps list values (colors) unwrapped."""
        if not track:
            value = convert(default)
            return LottieProperty.static(value if wrap else _num(value))
        entries = []
        for kf in track:
            value = convert(kf.value)
            values = value if wrap else [_num(value)]
            entries.append(self._entry(kf.time, values, kf.easing))
        return LottieProperty.animated(entries)

    # -------------------------------------------------------------------------
    # Shapes
    # -------------------------------------------------------------------------

    def _element_group(
        self,
        element: BaseElement,
        closing: TransformShape,
        layer_id: Optional[str] = None,
    ) -> GroupShape:
        """
        Shape group for one element: geometry, fill, stroke, closing transform.

        Paint keyframes only exist for the layer's own element, so nested
        children are exported with ``layer_id=None``.
        """
        items: list[ShapeItem] = list(self._geometry(element))
        items.extend(self._paint(element.style, layer_id))
        items.append(closing)
        return GroupShape(nm=element.name, it=items, np=len(items) - 1)

    def _geometry(self, element: BaseElement) -> list[ShapeItem]:
        if isinstance(element, RectElement):
            cx, cy = element.center()
            return [RectShape(
                nm='Rectangle',
                p=LottieProperty.static([_num(cx), _num(cy)]),
                s=LottieProperty.static([_num(element.width), _num(element.height)]),
                r=LottieProperty.static(_num(element.rx or 0)),
            )]
        if isinstance(element, CircleElement):
            return [EllipseShape(
                nm='Circle',
                p=LottieProperty.static([_num(element.cx), _num(element.cy)]),
                s=LottieProperty.static([_num(element.r * 2), _num(element.r * 2)]),
            )]
        if isinstance(element, EllipseElement):
            return [EllipseShape(
                nm='Ellipse',
                p=LottieProperty.static([_num(element.cx), _num(element.cy)]),
                s=LottieProperty.static([_num(element.rx * 2), _num(element.ry * 2)]),
            )]
        if isinstance(element, PathElement):
            return [
                PathShape(nm='Path', ks=LottieProperty.static(path.to_lottie()))
                for path in parse_path_data(element.d)
            ]
        if isinstance(element, PolygonElement):
            path = points_to_path(element.point_list(), closed=True)
            return [PathShape(nm='Polygon', ks=LottieProperty.static(path.to_lottie()))]
        if isinstance(element, PolylineElement):
            path = points_to_path(element.point_list(), closed=False)
            return [PathShape(nm='Polyline', ks=LottieProperty.static(path.to_lottie()))]
        if isinstance(element, GroupElement):
            return [
                self._element_group(child, self._child_transform(child.transform, child.style))
                for child in element.children
            ]
        raise ValueError(f"Cannot export element type {element.element_type!r}")

    def _child_transform(self, transform: Transform, style: Style) -> TransformShape:
        return TransformShape(
            p=LottieProperty.static([_num(transform.x), _num(transform.y)]),
            a=LottieProperty.static([0, 0]),
            s=LottieProperty.static([_num(transform.scale_x * 100), _num(transform.scale_y * 100)]),
            r=LottieProperty.static(_num(transform.rotation)),
            o=LottieProperty.static(_num(_clamp_unit(style.opacity) * 100)),
        )

    def _paint(self, style: Style, layer_id: Optional[str]) -> list[ShapeItem]:
        def track(prop: AnimatableProperty) -> list[Keyframe]:
            return self._track(layer_id, prop) if layer_id is not None else []

        fill_track = track(AnimatableProperty.FILL)
        stroke_track = track(AnimatableProperty.STROKE)
        width_track = track(AnimatableProperty.STROKE_WIDTH)

        items: list[ShapeItem] = []
        if style.has_fill() or fill_track:
            items.append(FillShape(
                nm='Fill',
                c=self._single(fill_track, style.fill, convert=_color, wrap=True),
                o=LottieProperty.static(100),
            ))
        if style.has_stroke() or stroke_track:
            items.append(StrokeShape(
                nm='Stroke',
                c=self._single(stroke_track, style.stroke, convert=_color, wrap=True),
                o=LottieProperty.static(100),
                w=self._single(width_track, style.stroke_width, convert=lambda v: max(0.0, float(v))),
                lc=2,
                lj=2,
            ))
        return items


def export_project(project: Project, embed_easing: Optional[bool] = None) -> LottieAnimation:
    """
    Export a Project to a Lottie document model.

    Args:
        project: Project to export
        embed_easing: Write easing tangents per keyframe
            (defaults to ``settings.EMBED_EASING``)

    Returns:
        LottieAnimation document
    """
    return LottieExporter(project, embed_easing=embed_easing).export()


def export_to_dict(project: Project, embed_easing: Optional[bool] = None) -> dict[str, Any]:
    """Export a Project to a JSON-ready Lottie dict."""
    return export_project(project, embed_easing=embed_easing).to_api_dict()


def export_to_json(project: Project, pretty: bool = True, embed_easing: Optional[bool] = None) -> str:
    """Export a Project to a Lottie JSON string."""
    data = export_to_dict(project, embed_easing=embed_easing)
    if pretty:
        return json.dumps(data, indent=settings.JSON_INDENT)
    return json.dumps(data, separators=(',', ':'))


def save_lottie(project: Project, file: Union[str, Path], embed_easing: Optional[bool] = None) -> Path:
    """
    Write a Project as a Lottie JSON file.

    Args:
        project: Project to export
        file: Target path
        embed_easing: See ``export_project``

    Returns:
        The written path
    """
    path = Path(file)
    path.write_text(export_to_json(project, embed_easing=embed_easing), encoding='utf-8')
    logger.info("Exported %s (%d layers) to %s", project.name, len(project.layers), path)
    return path
