"""
Scene Models

Pydantic models for the editor's scene graph.

Element Hierarchy:
    BaseElement (abstract)
    ├── RectElement (type: 'rect')
    ├── CircleElement (type: 'circle')
    ├── EllipseElement (type: 'ellipse')
    ├── PathElement (type: 'path')
    ├── PolygonElement (type: 'polygon')
    ├── PolylineElement (type: 'polyline')
    └── GroupElement (type: 'group', owns children)

Layers wrap one element each; the Project owns layers and keyframes.
"""

from .base import BaseElement, ElementType, Style, Transform
from .shapes import (
    CircleElement,
    EllipseElement,
    PathElement,
    PolygonElement,
    PolylineElement,
    RectElement,
    format_points,
    parse_points,
)
from .group import GroupElement
from .layer import Layer
from .project import Project

# Element type registry for deserialization
_ELEMENT_REGISTRY: dict[str, type[BaseElement]] = {
    'rect': RectElement,
    'circle': CircleElement,
    'ellipse': EllipseElement,
    'path': PathElement,
    'polygon': PolygonElement,
    'polyline': PolylineElement,
    'group': GroupElement,
}


def get_element_class(element_type: str) -> type[BaseElement]:
    """
    Get the element class for a type tag.

    Args:
        element_type: Tag such as 'rect' or 'group'

    Returns:
        Element class

    Raises:
        ValueError: If the tag is unknown
    """
    try:
        return _ELEMENT_REGISTRY[element_type]
    except KeyError:
        raise ValueError(f"Unknown element type: {element_type!r}") from None


def element_from_dict(data: dict) -> BaseElement:
    """
    Create an element instance from a serialized dictionary.

    Args:
        data: Serialized element data

    Returns:
        Element instance of the appropriate variant
    """
    return BaseElement.from_api_dict(data)


__all__ = [
    # Base
    'BaseElement',
    'ElementType',
    'Style',
    'Transform',
    # Variants
    'RectElement',
    'CircleElement',
    'EllipseElement',
    'PathElement',
    'PolygonElement',
    'PolylineElement',
    'GroupElement',
    # Containers
    'Layer',
    'Project',
    # Utilities
    'get_element_class',
    'element_from_dict',
    'parse_points',
    'format_points',
]
