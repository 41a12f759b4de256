"""
Lottie document models.

Pydantic models for the subset of the Lottie (Bodymovin) JSON schema that the
editor reads and writes. Field names are the format's own short keys, so no
aliases are needed; dump with ``to_api_dict()`` to drop unset optional keys.

Document structure:
    LottieAnimation
    └── layers: ShapeLayer (ty: 4)
        ├── ks: LayerTransform (p, a, s, r, o)
        └── shapes: GroupShape (ty: 'gr')
            └── it: geometry (rc / el / sh), nested gr, fl, st, closing tr

Animatable values are ``LottieProperty`` objects: ``a == 0`` holds a static
value in ``k``, ``a == 1`` holds a list of ``LottieKeyframe`` in ``k``.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, ValidationInfo, field_validator

from animforge.config import settings


class LottieModel(BaseModel):
    """Base for all document models."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(mode='json', exclude_none=True)


class BezierHandle(LottieModel):
    """Easing tangent of a keyframe, ``{"x": [..], "y": [..]}``."""

    x: Union[float, list[float]] = Field(default=0.0)
    y: Union[float, list[float]] = Field(default=0.0)

    def first(self) -> tuple[float, float]:
        """Tangent of the first dimension as ``(x, y)``."""
        x = self.x[0] if isinstance(self.x, list) else self.x
        y = self.y[0] if isinstance(self.y, list) else self.y
        return (float(x), float(y))


class LottieKeyframe(LottieModel):
    """
    One entry of an animated property.

    ``t`` is a frame index, ``s``/``e`` the start/end value. ``o``/``i`` carry
    the easing curve towards the next entry; ``h == 1`` marks a hold.
    """

    t: Union[int, float]
    s: Optional[list[Any]] = None  # Numbers, or vertex data for paths
    e: Optional[list[Any]] = None
    o: Optional[BezierHandle] = None
    i: Optional[BezierHandle] = None
    h: Optional[int] = None

    @field_validator('s', 'e', mode='before')
    @classmethod
    def _listify(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return [v]
        return v


class LottieProperty(LottieModel):
    """Static (``a == 0``) or animated (``a == 1``) property."""

    a: int = Field(default=0)
    k: Any = Field(default=0)

    @field_validator('k', mode='before')
    @classmethod
    def _coerce_keyframes(cls, v: Any, info: ValidationInfo) -> Any:
        if info.data.get('a') == 1 and isinstance(v, list):
            return [
                LottieKeyframe.model_validate(item) if isinstance(item, dict) else item
                for item in v
            ]
        return v

    @property
    def is_animated(self) -> bool:
        return self.a == 1

    @property
    def keyframes(self) -> list[LottieKeyframe]:
        """Animated entries (empty for a static property)."""
        if not self.is_animated or not isinstance(self.k, list):
            return []
        return [kf for kf in self.k if isinstance(kf, LottieKeyframe)]

    @classmethod
    def static(cls, value: Any) -> 'LottieProperty':
        return cls(a=0, k=value)

    @classmethod
    def animated(cls, keyframes: list[LottieKeyframe]) -> 'LottieProperty':
        return cls(a=1, k=keyframes)


# --- Shape items ---

class ShapeItem(LottieModel):
    """Base for entries of a shape group's ``it`` list."""

    ty: str
    nm: str = Field(default='')


class RectShape(ShapeItem):
    """Rectangle, positioned by its center."""

    ty: Literal['rc'] = 'rc'
    nm: str = 'Rectangle'
    p: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0]))
    s: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0]))
    r: LottieProperty = Field(default_factory=lambda: LottieProperty.static(0))


class EllipseShape(ShapeItem):
    """Ellipse given by center and diameters."""

    ty: Literal['el'] = 'el'
    nm: str = 'Ellipse'
    p: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0]))
    s: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0]))


class PathShape(ShapeItem):
    """Bezier path; ``ks.k`` holds ``{"i", "o", "v", "c"}`` vertex data."""

    ty: Literal['sh'] = 'sh'
    nm: str = 'Path'
    ks: LottieProperty = Field(default_factory=lambda: LottieProperty.static(
        {'i': [], 'o': [], 'v': [], 'c': False}
    ))


class FillShape(ShapeItem):
    ty: Literal['fl'] = 'fl'
    nm: str = 'Fill'
    c: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0, 0, 1]))
    o: LottieProperty = Field(default_factory=lambda: LottieProperty.static(100))


class StrokeShape(ShapeItem):
    ty: Literal['st'] = 'st'
    nm: str = 'Stroke'
    c: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0, 0, 1]))
    o: LottieProperty = Field(default_factory=lambda: LottieProperty.static(100))
    w: LottieProperty = Field(default_factory=lambda: LottieProperty.static(1))
    lc: int = 2  # Round cap
    lj: int = 2  # Round join


class TransformShape(ShapeItem):
    """Closing transform of a shape group."""

    ty: Literal['tr'] = 'tr'
    nm: str = 'Transform'
    p: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0]))
    a: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0]))
    s: LottieProperty = Field(default_factory=lambda: LottieProperty.static([100, 100]))
    r: LottieProperty = Field(default_factory=lambda: LottieProperty.static(0))
    o: LottieProperty = Field(default_factory=lambda: LottieProperty.static(100))


class GroupShape(ShapeItem):
    """Shape group; the last item is its transform."""

    ty: Literal['gr'] = 'gr'
    nm: str = 'Group'
    it: list[SerializeAsAny[ShapeItem]] = Field(default_factory=list)
    np: int = Field(default=0)  # Number of items excluding the transform

    @field_validator('it', mode='before')
    @classmethod
    def _coerce_items(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        return [shape_from_dict(item) if isinstance(item, dict) else item for item in v]

    def items_of(self, shape_type: type) -> list:
        return [item for item in self.it if isinstance(item, shape_type)]

    @property
    def transform(self) -> Optional[TransformShape]:
        found = self.items_of(TransformShape)
        return found[-1] if found else None


# Shape type registry for deserialization
_SHAPE_REGISTRY: dict[str, type[ShapeItem]] = {
    'rc': RectShape,
    'el': EllipseShape,
    'sh': PathShape,
    'fl': FillShape,
    'st': StrokeShape,
    'tr': TransformShape,
    'gr': GroupShape,
}


def shape_from_dict(data: dict[str, Any]) -> ShapeItem:
    """
    Create a shape item from a dict, dispatching on ``ty``.

    Unknown types are kept as plain ``ShapeItem`` so documents from other
    tools still load; the importer reports them as warnings.
    """
    shape_class = _SHAPE_REGISTRY.get(data.get('ty', ''), ShapeItem)
    return shape_class.model_validate(data)


# --- Layers and document ---

class LayerTransform(LottieModel):
    """Layer transform bundle ``ks``."""

    p: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0]))
    a: LottieProperty = Field(default_factory=lambda: LottieProperty.static([0, 0]))
    s: LottieProperty = Field(default_factory=lambda: LottieProperty.static([100, 100]))
    r: LottieProperty = Field(default_factory=lambda: LottieProperty.static(0))
    o: LottieProperty = Field(default_factory=lambda: LottieProperty.static(100))


class ShapeLayer(LottieModel):
    """Shape layer (``ty == 4``)."""

    ty: Literal[4] = 4
    nm: str = Field(default='Layer')
    ind: int = Field(default=1)
    ip: Union[int, float] = Field(default=0)
    op: Union[int, float] = Field(default=0)
    st: Union[int, float] = Field(default=0)
    ks: LayerTransform = Field(default_factory=LayerTransform)
    shapes: list[SerializeAsAny[ShapeItem]] = Field(default_factory=list)

    @field_validator('shapes', mode='before')
    @classmethod
    def _coerce_shapes(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        return [shape_from_dict(item) if isinstance(item, dict) else item for item in v]


class LottieAnimation(LottieModel):
    """
    Top-level document.

    Serialization format:
    {
        "v": "5.5.7", "fr": 30, "ip": 0, "op": 150,
        "w": 800, "h": 600, "nm": "Untitled Project",
        "ddd": 0, "assets": [], "layers": [...]
    }
    """

    v: str = Field(default_factory=lambda: settings.LOTTIE_VERSION)
    fr: Union[int, float] = Field(gt=0)
    ip: Union[int, float] = Field(default=0)
    op: Union[int, float] = Field(ge=0)
    w: int = Field(ge=1)
    h: int = Field(ge=1)
    nm: str = Field(default='')
    ddd: int = Field(default=0)
    assets: list[Any] = Field(default_factory=list)
    layers: list[ShapeLayer] = Field(default_factory=list)
