"""SVG path data and point lists <-> Lottie bezier vertex data.

Lottie stores a path as vertices ``v`` with in/out tangents ``i``/``o``
relative to their vertex and a closed flag ``c``. SVG path strings are
converted subpath by subpath:

- ``M L H V Z`` map to vertices with zero tangents
- ``C S`` map directly to tangents, ``Q T`` are raised to cubics
- ``A`` (elliptical arcs) are approximated by a straight line to the arc's
  end point, with a warning

The reverse direction writes absolute ``M``/``L``/``C``/``Z`` commands only.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from animforge.errors import DocumentFormatError
from animforge.scene.shapes import format_number

logger = logging.getLogger(__name__)

Point = tuple[float, float]

_TOKEN_RE = re.compile(r'[MmLlHhVvCcSsQqTtAaZz]|[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?')

# Number of arguments per command
_ARG_COUNTS = {
    'M': 2, 'L': 2, 'H': 1, 'V': 1, 'C': 6, 'S': 4,
    'Q': 4, 'T': 2, 'A': 7, 'Z': 0,
}


def _lottie_points(value: Any, key: str) -> list[Point]:
    """Read a Lottie point list; missing means empty."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentFormatError(f"Path '{key}' must be a list, got {value!r}")
    points = []
    for p in value:
        if not isinstance(p, (list, tuple)) or len(p) < 2:
            raise DocumentFormatError(f"Path '{key}' has a malformed point {p!r}")
        try:
            x, y = float(p[0]), float(p[1])
        except (TypeError, ValueError):
            raise DocumentFormatError(f"Path '{key}' has a non-numeric point {p!r}") from None
        if not (math.isfinite(x) and math.isfinite(y)):
            raise DocumentFormatError(f"Path '{key}' has a non-finite point {p!r}")
        points.append((x, y))
    return points


@dataclass
class BezierPath:
    """One subpath as Lottie vertex data. Tangents are relative."""

    vertices: list[Point] = field(default_factory=list)
    in_tangents: list[Point] = field(default_factory=list)
    out_tangents: list[Point] = field(default_factory=list)
    closed: bool = False

    def add_vertex(self, point: Point, in_tangent: Point = (0.0, 0.0)) -> None:
        self.vertices.append(point)
        self.in_tangents.append(in_tangent)
        self.out_tangents.append((0.0, 0.0))

    def to_lottie(self) -> dict[str, Any]:
        return {
            'i': [list(p) for p in self.in_tangents],
            'o': [list(p) for p in self.out_tangents],
            'v': [list(p) for p in self.vertices],
            'c': self.closed,
        }

    @classmethod
    def from_lottie(cls, data: dict[str, Any]) -> 'BezierPath':
        """Build from Lottie `{v, i, o, c}` vertex data.

        Empty `i`/`o` mean straight segments. Otherwise each list must match
        `v` in length.

        :raises DocumentFormatError: For malformed points or ragged lists
        """
        vertices = _lottie_points(data.get('v'), 'v')
        tangents = []
        for key in ('i', 'o'):
            points = _lottie_points(data.get(key), key)
            if points and len(points) != len(vertices):
                raise DocumentFormatError(
                    f"Path '{key}' has {len(points)} points for {len(vertices)} vertices")
            tangents.append(points or [(0.0, 0.0)] * len(vertices))
        return cls(vertices, tangents[0], tangents[1], bool(data.get('c', False)))

    def points(self) -> list[Point]:
        return list(self.vertices)


class _Parser:
    """Stateful walk over path data tokens."""

    def __init__(self, d: str):
        self.tokens = _TOKEN_RE.findall(d or '')
        self.pos = 0
        self.paths: list[BezierPath] = []
        self.current: Optional[BezierPath] = None
        self.point: Point = (0.0, 0.0)
        self.start: Point = (0.0, 0.0)
        # Last control point, for S/T reflection
        self.last_cubic: Optional[Point] = None
        self.last_quad: Optional[Point] = None
        self.warnings: list[str] = []

    def numbers(self, count: int) -> Optional[list[float]]:
        values = []
        while len(values) < count:
            if self.pos >= len(self.tokens) or self.tokens[self.pos].isalpha():
                return None
            values.append(float(self.tokens[self.pos]))
            self.pos += 1
        return values

    def parse(self) -> list[BezierPath]:
        command = None
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if token.isalpha():
                command = token
                self.pos += 1
            elif command is None:
                self.warnings.append(f"Path data must start with a command, got {token!r}")
                break
            self._run(command)
            # Extra coordinate pairs after a moveto are linetos
            if command in 'Mm':
                command = 'L' if command == 'M' else 'l'
            if command in 'Zz':
                command = None
        self._finish()
        return self.paths

    def _run(self, command: str) -> None:
        upper = command.upper()
        relative = command.islower()
        if upper == 'Z':
            self._close()
            return
        args = self.numbers(_ARG_COUNTS[upper])
        if args is None:
            self.warnings.append(f"Incomplete arguments for {command!r}")
            self.pos = len(self.tokens)
            return

        x0, y0 = self.point

        def absolute(x: float, y: float) -> Point:
            return (x + x0, y + y0) if relative else (x, y)

        if upper == 'M':
            self._finish()
            self.current = BezierPath()
            self.point = self.start = absolute(*args)
            self.current.add_vertex(self.point)
            self.last_cubic = self.last_quad = None
            return

        self._ensure_path()
        if upper == 'L':
            self._line(absolute(*args))
        elif upper == 'H':
            self._line((args[0] + x0 if relative else args[0], y0))
        elif upper == 'V':
            self._line((x0, args[0] + y0 if relative else args[0]))
        elif upper == 'C':
            self._cubic(absolute(args[0], args[1]), absolute(args[2], args[3]), absolute(args[4], args[5]))
        elif upper == 'S':
            c1 = self._reflect(self.last_cubic)
            self._cubic(c1, absolute(args[0], args[1]), absolute(args[2], args[3]))
        elif upper == 'Q':
            self._quad(absolute(args[0], args[1]), absolute(args[2], args[3]))
        elif upper == 'T':
            self._quad(self._reflect(self.last_quad), absolute(args[0], args[1]))
        elif upper == 'A':
            self.warnings.append("Arc commands are approximated by straight lines")
            self._line(absolute(args[5], args[6]))

    def _reflect(self, control: Optional[Point]) -> Point:
        x, y = self.point
        if control is None:
            return (x, y)
        return (2 * x - control[0], 2 * y - control[1])

    def _ensure_path(self) -> None:
        if self.current is None:
            self.current = BezierPath()
            self.start = self.point
            self.current.add_vertex(self.point)

    def _line(self, end: Point) -> None:
        self.current.add_vertex(end)
        self.point = end
        self.last_cubic = self.last_quad = None

    def _cubic(self, c1: Point, c2: Point, end: Point) -> None:
        x0, y0 = self.point
        self.current.out_tangents[-1] = (c1[0] - x0, c1[1] - y0)
        self.current.add_vertex(end, (c2[0] - end[0], c2[1] - end[1]))
        self.point = end
        self.last_cubic = c2
        self.last_quad = None

    def _quad(self, control: Point, end: Point) -> None:
        x0, y0 = self.point
        c1 = (x0 + 2 / 3 * (control[0] - x0), y0 + 2 / 3 * (control[1] - y0))
        c2 = (end[0] + 2 / 3 * (control[0] - end[0]), end[1] + 2 / 3 * (control[1] - end[1]))
        self._cubic(c1, c2, end)
        self.last_quad = control

    def _close(self) -> None:
        path = self.current
        if path is None:
            return
        path.closed = True
        # A final vertex on top of the first one is the closing segment
        if len(path.vertices) > 1 and _same_point(path.vertices[-1], path.vertices[0]):
            path.in_tangents[0] = path.in_tangents.pop()
            path.vertices.pop()
            path.out_tangents.pop()
        self._finish()
        self.point = self.start
        self.last_cubic = self.last_quad = None

    def _finish(self) -> None:
        if self.current is not None and self.current.vertices:
            self.paths.append(self.current)
        self.current = None


def _same_point(a: Point, b: Point, tolerance: float = 1e-9) -> bool:
    return abs(a[0] - b[0]) <= tolerance and abs(a[1] - b[1]) <= tolerance


def parse_path_data(d: str) -> list[BezierPath]:
    """
    Convert SVG path data into bezier subpaths.

    Args:
        d: SVG path ``d`` attribute

    Returns:
        One BezierPath per subpath (empty for empty or invalid data)
    """
    parser = _Parser(d)
    paths = parser.parse()
    for warning in parser.warnings:
        logger.warning("Path data %r: %s", d[:40], warning)
    return paths


def _is_zero(p: Point) -> bool:
    return p[0] == 0 and p[1] == 0


def _segment(path: BezierPath, a: int, b: int) -> str:
    (x0, y0), (x1, y1) = path.vertices[a], path.vertices[b]
    out_t, in_t = path.out_tangents[a], path.in_tangents[b]
    if _is_zero(out_t) and _is_zero(in_t):
        return f'L {format_number(x1)} {format_number(y1)}'
    return (
        f'C {format_number(x0 + out_t[0])} {format_number(y0 + out_t[1])} '
        f'{format_number(x1 + in_t[0])} {format_number(y1 + in_t[1])} {format_number(x1)} {format_number(y1)}'
    )


def _subpath_commands(path: BezierPath) -> Iterator[str]:
    if not path.vertices:
        return
    x, y = path.vertices[0]
    yield f'M {format_number(x)} {format_number(y)}'
    for index in range(1, len(path.vertices)):
        yield _segment(path, index - 1, index)
    if path.closed:
        last = len(path.vertices) - 1
        if last > 0 and not (_is_zero(path.out_tangents[last]) and _is_zero(path.in_tangents[0])):
            yield _segment(path, last, 0)
        yield 'Z'


def to_path_data(paths: list[BezierPath]) -> str:
    """Write bezier subpaths as absolute SVG path data."""
    return ' '.join(command for path in paths for command in _subpath_commands(path))


def points_to_path(points: list[Point], closed: bool) -> BezierPath:
    """Straight-edged path through ``points`` (polygon when ``closed``)."""
    path = BezierPath(closed=closed)
    for point in points:
        path.add_vertex((float(point[0]), float(point[1])))
    return path
