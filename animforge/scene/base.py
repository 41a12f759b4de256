"""
BaseElement - Abstract base model for all renderable elements.

Provides shared properties for all element variants:
- Identity: id, name, type
- Transform: x, y, rotation (degrees), scaleX, scaleY
- Style: fill, stroke, strokeWidth, opacity

Uses Pydantic v2 with camelCase aliases so projects serialize to the same
JSON the editor front end reads.
"""

from enum import Enum
from typing import Any, Iterator, Optional
import math
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator

from animforge.animation.color import is_none_color


class ElementType(str, Enum):
    """Element variant tags."""
    RECT = "rect"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    PATH = "path"
    POLYGON = "polygon"
    POLYLINE = "polyline"
    GROUP = "group"


def ensure_finite(value: float) -> float:
    """Reject NaN and infinite geometry values."""
    if not math.isfinite(value):
        raise ValueError('value must be a finite number')
    return value


class Transform(BaseModel):
    """
    Element transform.

    Serialization format:
    {"x": 0, "y": 0, "rotation": 0, "scaleX": 1.0, "scaleY": 1.0}
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    x: float = Field(default=0.0)
    y: float = Field(default=0.0)
    rotation: float = Field(default=0.0)  # Degrees
    scale_x: float = Field(default=1.0, alias='scaleX')
    scale_y: float = Field(default=1.0, alias='scaleY')

    @field_validator('x', 'y', 'rotation', 'scale_x', 'scale_y')
    @classmethod
    def _finite(cls, v: float) -> float:
        return ensure_finite(v)

    def is_identity(self) -> bool:
        return (
            self.x == 0 and self.y == 0 and self.rotation == 0
            and self.scale_x == 1.0 and self.scale_y == 1.0
        )


class Style(BaseModel):
    """
    Element paint style.

    ``fill``/``stroke`` of None mean "no paint"; the SVG keyword "none" is
    accepted on input and stored as None. Out-of-range opacity and negative
    stroke widths are clamped here so the canonical model never holds them.

    Serialization format:
    {"fill": "#ff0000", "stroke": null, "strokeWidth": 1, "opacity": 1.0}
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    fill: Optional[str] = Field(default=None)
    stroke: Optional[str] = Field(default=None)
    stroke_width: float = Field(default=1.0, alias='strokeWidth')
    opacity: float = Field(default=1.0)

    @field_validator('fill', 'stroke', mode='before')
    @classmethod
    def _none_paint(cls, v: Any) -> Optional[str]:
        if v is None or (isinstance(v, str) and is_none_color(v)):
            return None
        return v

    @field_validator('stroke_width')
    @classmethod
    def _clamp_stroke_width(cls, v: float) -> float:
        return max(0.0, ensure_finite(v))

    @field_validator('opacity')
    @classmethod
    def _clamp_opacity(cls, v: float) -> float:
        return max(0.0, min(1.0, ensure_finite(v)))

    def has_fill(self) -> bool:
        return self.fill is not None

    def has_stroke(self) -> bool:
        return self.stroke is not None


class BaseElement(BaseModel):
    """
    Base model for all element variants.

    Serializes to:
    {
        "type": "rect",
        "id": "uuid",
        "name": "Rect 1",
        "transform": {...},
        "style": {...},
        ...variant geometry
    }
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
        use_enum_values=True,
    )

    # Variant tag (overridden in subclasses with Literal types)
    element_type: str = Field(default="rect", alias="type")
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(default='Element')
    transform: Transform = Field(default_factory=Transform)
    style: Style = Field(default_factory=Style)

    def to_api_dict(self) -> dict[str, Any]:
        """
        Convert to a JSON-ready dictionary with camelCase keys.

        Returns:
            Dict matching the editor's element format
        """
        return self.model_dump(by_alias=True, mode='json')

    @classmethod
    def from_api_dict(cls, data: dict[str, Any]) -> 'BaseElement':
        """
        Create an element from a serialized dictionary.

        Dispatches on the "type" tag, so calling this on BaseElement returns
        the matching variant.

        Args:
            data: Dictionary from to_api_dict() or the editor

        Returns:
            Element instance of the matching variant
        """
        # Import here to avoid circular imports
        from animforge.scene import get_element_class

        element_class = get_element_class(data.get('type', 'rect'))
        return element_class.model_validate(data)

    def is_group(self) -> bool:
        """Check if this is a group element."""
        return self.element_type == "group"

    def walk(self) -> Iterator['BaseElement']:
        """Yield this element and, for groups, all descendants depth-first."""
        yield self
