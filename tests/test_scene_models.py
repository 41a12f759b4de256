"""Tests for the scene model: elements, layers and projects."""

import json

import pytest
from pydantic import ValidationError

from animforge.scene import (
    BaseElement,
    CircleElement,
    GroupElement,
    Layer,
    PolygonElement,
    Project,
    RectElement,
    Style,
    Transform,
    element_from_dict,
    get_element_class,
    parse_points,
)


class TestStyle:
    """Style clamping and paint handling."""

    def test_defaults(self):
        style = Style()
        assert style.fill is None
        assert style.stroke is None
        assert style.stroke_width == 1.0
        assert style.opacity == 1.0

    def test_opacity_clamped(self):
        assert Style(opacity=1.5).opacity == 1.0
        assert Style(opacity=-0.2).opacity == 0.0

    def test_negative_stroke_width_clamped(self):
        assert Style(strokeWidth=-3).stroke_width == 0.0

    def test_none_keyword_means_no_paint(self):
        style = Style(fill='none', stroke='NONE')
        assert not style.has_fill()
        assert not style.has_stroke()

    def test_serialized_keys(self):
        assert Style(fill='#ff0000').model_dump(by_alias=True) == {
            'fill': '#ff0000', 'stroke': None, 'strokeWidth': 1.0, 'opacity': 1.0,
        }


class TestElements:
    """Element variants and the type registry."""

    def test_geometry_must_be_finite(self):
        with pytest.raises(ValidationError):
            RectElement(width=float('inf'))
        with pytest.raises(ValidationError):
            CircleElement(r=float('nan'))
        with pytest.raises(ValidationError):
            Transform(x=float('nan'))

    def test_registry(self):
        assert get_element_class('rect') is RectElement
        assert get_element_class('group') is GroupElement
        with pytest.raises(ValueError):
            get_element_class('text')

    def test_from_dict_dispatches_on_type(self):
        element = element_from_dict({'type': 'circle', 'cx': 1, 'cy': 2, 'r': 3})
        assert isinstance(element, CircleElement)
        assert element.r == 3

    def test_rect_center(self):
        assert RectElement(x=10, y=20, width=100, height=50).center() == (60, 45)

    def test_polygon_points(self):
        polygon = PolygonElement(points='0,0 100,0 50,80')
        assert polygon.point_list() == [(0, 0), (100, 0), (50, 80)]

    def test_parse_points_ignores_odd_coordinate(self):
        assert parse_points('1 2, 3 4 5') == [(1, 2), (3, 4)]


class TestGroups:
    """Recursive group elements."""

    def nested_data(self):
        return {
            'type': 'group',
            'name': 'Outer',
            'children': [
                {'type': 'rect', 'width': 10, 'height': 10},
                {
                    'type': 'group',
                    'name': 'Inner',
                    'children': [{'type': 'ellipse', 'rx': 5, 'ry': 3}],
                },
            ],
        }

    def test_children_coerced_to_variants(self):
        group = element_from_dict(self.nested_data())
        assert isinstance(group, GroupElement)
        assert isinstance(group.children[0], RectElement)
        assert isinstance(group.children[1], GroupElement)
        assert group.children[1].children[0].element_type == 'ellipse'

    def test_walk_and_depth(self):
        group = element_from_dict(self.nested_data())
        assert [e.element_type for e in group.walk()] == ['group', 'rect', 'group', 'ellipse']
        assert group.depth() == 2

    def test_round_trip_keeps_variant_fields(self):
        group = element_from_dict(self.nested_data())
        data = group.to_api_dict()
        assert data['children'][0]['width'] == 10
        assert data['children'][1]['children'][0]['rx'] == 5
        assert BaseElement.from_api_dict(data).to_api_dict() == data
        assert isinstance(BaseElement.from_api_dict(data), GroupElement)


class TestLayer:
    """Layers own exactly one element."""

    def test_element_dict_coerced(self):
        layer = Layer.model_validate({'name': 'L', 'element': {'type': 'rect', 'width': 5}})
        assert isinstance(layer.element, RectElement)
        assert layer.visible and not layer.locked

    def test_unknown_element_type_rejected(self):
        with pytest.raises(ValidationError):
            Layer.model_validate({'element': {'type': 'text'}})

    def test_serialization_includes_variant_fields(self, rect_layer):
        data = rect_layer.to_api_dict()
        assert data['element']['type'] == 'rect'
        assert data['element']['width'] == 100
        assert data['element']['style']['fill'] == '#ff0000'


class TestProject:
    """Project aggregate and timebase helpers."""

    def test_blank_defaults(self):
        project = Project()
        assert project.name == 'Untitled Project'
        assert (project.width, project.height) == (800, 600)
        assert project.fps == 30
        assert project.duration == 5
        assert project.current_time == 0
        assert project.layers == []

    def test_current_time_clamped(self):
        assert Project(duration=2, currentTime=5).current_time == 2
        assert Project(duration=2, currentTime=-1).current_time == 0

    def test_frame_range(self):
        project = Project(fps=30, duration=2)
        assert project.last_frame == 60
        assert project.end_frame == 60

    def test_end_frame_rounds_up(self):
        project = Project(fps=30, duration=1.01)
        assert project.end_frame == 31
        assert project.last_frame == 30

    def test_end_frame_ignores_float_noise(self):
        assert Project(fps=30, duration=0.1).end_frame == 3

    def test_rational_fps(self):
        project = Project(fps=30000 / 1001, duration=1)
        assert project.end_frame == 30

    def test_invalid_fps_rejected(self):
        with pytest.raises(ValidationError):
            Project(fps=0)

    def test_get_layer(self, project, rect_layer):
        assert project.get_layer('layer-rect') == rect_layer
        assert project.get_layer('missing') is None

    def test_json_round_trip(self, project):
        project = project.model_copy(update={'keyframes': []})
        text = project.to_json()
        assert json.loads(text)['layers'][0]['element']['type'] == 'rect'
        restored = Project.from_json(text)
        assert restored.to_api_dict() == project.to_api_dict()

    def test_save_and_load(self, project, tmp_path):
        path = tmp_path / 'project.json'
        project.save(path)
        assert Project.load(path).to_api_dict() == project.to_api_dict()

    def test_migrates_legacy_position_properties(self):
        data = {
            'layers': [{'id': 'l1', 'element': {'type': 'rect'}}],
            'keyframes': [
                {'time': 0, 'property': 'x', 'value': 1, 'layerId': 'l1'},
                {'time': 0, 'property': 'y', 'value': 2, 'layerId': 'l1'},
            ],
        }
        project = Project.from_api_dict(data)
        assert [kf.prop for kf in project.keyframes] == ['positionX', 'positionY']
