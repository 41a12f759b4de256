"""
Layer - Editor wrapper around exactly one element.

A layer adds editor-only metadata (visibility, lock) to the element it owns.
Its id is the key keyframes use to refer back to it.
"""

from typing import Any
import uuid

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, field_validator

from .base import BaseElement


class Layer(BaseModel):
    """
    Layer model.

    Serialization format:
    {
        "id": "uuid",
        "name": "Layer 1",
        "visible": true,
        "locked": false,
        "element": {"type": "rect", ...}
    }
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(default='Layer')
    visible: bool = Field(default=True)
    locked: bool = Field(default=False)
    element: SerializeAsAny[BaseElement]

    @field_validator('element', mode='before')
    @classmethod
    def _coerce_element(cls, v: Any) -> Any:
        """Accept a dict and coerce it to the matching element variant."""
        if isinstance(v, dict):
            return BaseElement.from_api_dict(v)
        return v

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode='json')

    @classmethod
    def from_api_dict(cls, data: dict[str, Any]) -> 'Layer':
        return cls.model_validate(data)
