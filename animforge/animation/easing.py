"""Easing curves that remap linear progress between two keyframes.

Supported easings:
- linear: identity
- easeIn / easeOut / easeInOut: quadratic acceleration curves
- hold: step function, the value stays at the start keyframe
- custom: CSS-style ``cubic-bezier(x1, y1, x2, y2)``

The cubic-bezier solver follows the usual timing-function implementation:
Newton-Raphson on x(t) for a few iterations, then bisection if Newton did
not converge, and finally y(t) for the parameter found.

For documents that store easing as bezier tangents, every named curve also
has a tangent pair (see ``EASING_TANGENTS``) used for export and for
recognizing the curve again on import.
"""

from __future__ import annotations

import math
from enum import Enum
from functools import lru_cache
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from animforge.config import settings


class EasingType(str, Enum):
    """Named easing identifiers (serialized values match the editor's)."""
    LINEAR = "linear"
    EASE_IN = "easeIn"
    EASE_OUT = "easeOut"
    EASE_IN_OUT = "easeInOut"
    HOLD = "hold"


class CubicBezierEasing(BaseModel):
    """
    Custom easing defined by two control points.

    The curve starts at (0, 0) and ends at (1, 1). x coordinates are clamped
    to [0, 1] so the curve stays a function of time; y may overshoot.

    Serialization format:
    {"type": "cubicBezier", "x1": 0.25, "y1": 0.1, "x2": 0.25, "y2": 1.0}
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore', frozen=True)

    easing_type: Literal["cubicBezier"] = Field(default="cubicBezier", alias="type")
    x1: float = Field(default=0.0)
    y1: float = Field(default=0.0)
    x2: float = Field(default=1.0)
    y2: float = Field(default=1.0)

    @field_validator('x1', 'x2')
    @classmethod
    def _clamp_x(cls, v: float) -> float:
        return max(0.0, min(1.0, v))

    @field_validator('y1', 'y2')
    @classmethod
    def _finite_y(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError('control point must be finite')
        return v

    def control_points(self) -> tuple[float, float, float, float]:
        """Return ``(x1, y1, x2, y2)``."""
        return (self.x1, self.y1, self.x2, self.y2)


Easing = Union[EasingType, CubicBezierEasing]


# Bezier tangents written for named easings: (out_x, out_y, in_x, in_y).
# easeIn/easeOut are the exact cubic forms of the quadratics; the piecewise
# easeInOut has no exact form and uses the common easeInOutQuad fit.
EASING_TANGENTS: dict[EasingType, tuple[float, float, float, float]] = {
    EasingType.LINEAR: (0.0, 0.0, 1.0, 1.0),
    EasingType.EASE_IN: (1 / 3, 0.0, 2 / 3, 1 / 3),
    EasingType.EASE_OUT: (1 / 3, 2 / 3, 2 / 3, 1.0),
    EasingType.EASE_IN_OUT: (0.455, 0.03, 0.515, 0.955),
}

TANGENT_MATCH_TOLERANCE = 1e-3


class CubicBezier:
    """Evaluator for a unit cubic bezier timing curve.

    Example:
        curve = CubicBezier(0.25, 0.1, 0.25, 1.0)
        curve.solve(0.5)  # ~0.80
    """

    NEWTON_ITERATIONS = 8

    def __init__(self, x1: float, y1: float, x2: float, y2: float,
                 epsilon: Optional[float] = None):
        self.epsilon = epsilon if epsilon is not None else settings.BEZIER_EPSILON
        # Polynomial coefficients, control points (0,0) and (1,1) implicit
        self._cx = 3.0 * x1
        self._bx = 3.0 * (x2 - x1) - self._cx
        self._ax = 1.0 - self._cx - self._bx
        self._cy = 3.0 * y1
        self._by = 3.0 * (y2 - y1) - self._cy
        self._ay = 1.0 - self._cy - self._by

    def sample_x(self, t: float) -> float:
        return ((self._ax * t + self._bx) * t + self._cx) * t

    def sample_y(self, t: float) -> float:
        return ((self._ay * t + self._by) * t + self._cy) * t

    def sample_dx(self, t: float) -> float:
        return (3.0 * self._ax * t + 2.0 * self._bx) * t + self._cx

    def solve_t(self, x: float) -> float:
        """Find the curve parameter whose x coordinate equals ``x``."""
        t = x
        for _ in range(self.NEWTON_ITERATIONS):
            error = self.sample_x(t) - x
            # The cubic can have roots outside the unit interval
            if abs(error) < self.epsilon and 0.0 <= t <= 1.0:
                return t
            slope = self.sample_dx(t)
            if abs(slope) < 1e-6:
                break
            t -= error / slope

        # Bisection fallback
        low, high = 0.0, 1.0
        t = x
        while low < high:
            value = self.sample_x(t)
            if abs(value - x) < self.epsilon:
                return t
            if x > value:
                low = t
            else:
                high = t
            if high - low < self.epsilon:
                break
            t = (low + high) / 2.0
        return t

    def solve(self, x: float) -> float:
        """Eased y for progress ``x`` in [0, 1]."""
        if x <= 0.0:
            return 0.0
        if x >= 1.0:
            return 1.0
        return self.sample_y(self.solve_t(x))


@lru_cache(maxsize=256)
def _bezier(x1: float, y1: float, x2: float, y2: float) -> CubicBezier:
    return CubicBezier(x1, y1, x2, y2)


def ease_in(p: float) -> float:
    return p * p


def ease_out(p: float) -> float:
    return p * (2.0 - p)


def ease_in_out(p: float) -> float:
    if p < 0.5:
        return 2.0 * p * p
    return -1.0 + (4.0 - 2.0 * p) * p


_NAMED_CURVES = {
    EasingType.LINEAR: lambda p: p,
    EasingType.EASE_IN: ease_in,
    EasingType.EASE_OUT: ease_out,
    EasingType.EASE_IN_OUT: ease_in_out,
    EasingType.HOLD: lambda p: 0.0,
}


def coerce_easing(value: object) -> Easing:
    """Turn user/serialized input into an ``Easing``.

    Accepts an ``EasingType``, its string value, a ``CubicBezierEasing``,
    its dict form, or a 4-item ``(x1, y1, x2, y2)`` sequence. Unknown input
    falls back to linear.
    """
    if isinstance(value, (EasingType, CubicBezierEasing)):
        return value
    if isinstance(value, str):
        try:
            return EasingType(value)
        except ValueError:
            return EasingType.LINEAR
    if isinstance(value, dict):
        return CubicBezierEasing.model_validate(value)
    if isinstance(value, (list, tuple)) and len(value) == 4:
        x1, y1, x2, y2 = (float(v) for v in value)
        return CubicBezierEasing(x1=x1, y1=y1, x2=x2, y2=y2)
    return EasingType.LINEAR


def apply_easing(easing: object, progress: float) -> float:
    """Remap linear progress ``p`` in [0, 1] to eased progress ``p'``.

    :param easing: Easing descriptor (see ``coerce_easing``)
    :param progress: Linear progress between two keyframes
    :return: Eased progress. Custom curves may overshoot [0, 1].
    """
    p = max(0.0, min(1.0, progress))
    easing = coerce_easing(easing)
    if isinstance(easing, CubicBezierEasing):
        return _bezier(*easing.control_points()).solve(p)
    return _NAMED_CURVES[easing](p)


def easing_to_tangents(easing: object) -> Optional[tuple[float, float, float, float]]:
    """Bezier tangents ``(out_x, out_y, in_x, in_y)`` for an easing.

    Returns None for hold, which has no curve representation.
    """
    easing = coerce_easing(easing)
    if isinstance(easing, CubicBezierEasing):
        return easing.control_points()
    return EASING_TANGENTS.get(easing)


def easing_from_tangents(out_x: float, out_y: float, in_x: float, in_y: float) -> Easing:
    """Recover an easing from bezier tangents, preferring named curves."""
    for easing_type, tangents in EASING_TANGENTS.items():
        if all(abs(a - b) <= TANGENT_MATCH_TOLERANCE
               for a, b in zip(tangents, (out_x, out_y, in_x, in_y))):
            return easing_type
    return CubicBezierEasing(x1=out_x, y1=out_y, x2=in_x, y2=in_y)
