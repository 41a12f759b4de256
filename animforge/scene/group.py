"""
GroupElement - Container element that owns an ordered list of children.

Groups make the element model a tree: children are owned exclusively (never
shared or back-referenced), may themselves be groups, and keep their paint
order (first child is painted first).
"""

from typing import Any, Iterator, Literal

from pydantic import Field, SerializeAsAny, field_validator

from .base import BaseElement


class GroupElement(BaseElement):
    """
    Group of child elements.

    Serialization format:
    {
        "type": "group",
        "children": [{"type": "rect", ...}, {"type": "group", "children": [...]}],
        ...base element properties
    }
    """

    element_type: Literal["group"] = Field(default="group", alias="type")
    name: str = Field(default='Group')

    children: list[SerializeAsAny[BaseElement]] = Field(default_factory=list)

    @field_validator('children', mode='before')
    @classmethod
    def _coerce_children(cls, v: Any) -> list:
        """Accept dicts and coerce them to the matching element variant."""
        if not isinstance(v, list):
            return v
        result = []
        for item in v:
            if isinstance(item, dict):
                result.append(BaseElement.from_api_dict(item))
            else:
                result.append(item)
        return result

    def is_group(self) -> bool:
        """Check if this is a group element."""
        return True

    def walk(self) -> Iterator[BaseElement]:
        """Yield this group and all descendants depth-first, in paint order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def depth(self) -> int:
        """Nesting depth of the subtree (a group without groups inside is 1)."""
        nested = [child.depth() for child in self.children if isinstance(child, GroupElement)]
        return 1 + max(nested, default=0)
