"""
VectorDraft Path Model

Editable free-form paths are ordered lists of anchor points. Each anchor
has a node type that decides how its bezier handles behave:

- corner: no handles, straight joins
- smooth: two handles kept mirror-symmetric about the anchor
- disconnected: two independent handles

Handles are absolute coordinates in the same space as their anchor.
Every function here is pure and returns new points.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Sequence
import math

from .geometry import BoundingBox, Point, clamp, distance_between, rotate_point


class PathNodeType(Enum):
    """Anchor node types."""
    CORNER = "corner"
    SMOOTH = "smooth"
    DISCONNECTED = "disconnected"

    @classmethod
    def parse(cls, value) -> 'PathNodeType':
        """Parse a tag, falling back to CORNER for unknown input."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.CORNER


PATH_NODE_TYPE_LIST = [PathNodeType.CORNER, PathNodeType.SMOOTH, PathNodeType.DISCONNECTED]

MIN_SEGMENT_LENGTH = 0.5
MAX_POINTS_PER_PATH = 500
DEFAULT_HANDLE_OFFSET = 40.0

PATH_ROUNDING_EPSILON = 0.0001
HANDLE_FACTOR = 4 / 3


@dataclass(frozen=True)
class Handles:
    """Bezier control points on either side of an anchor."""
    left: Optional[Point] = None
    right: Optional[Point] = None

    def is_empty(self) -> bool:
        return self.left is None and self.right is None


@dataclass(frozen=True)
class PathPoint:
    """One anchor of a path."""
    x: float
    y: float
    type: PathNodeType = PathNodeType.CORNER
    handles: Optional[Handles] = None

    @property
    def anchor(self) -> Point:
        return Point(self.x, self.y)

    def has_handles(self) -> bool:
        return self.handles is not None and not self.handles.is_empty()


def _normalize_handles(handles: Optional[Handles]) -> Optional[Handles]:
    if handles is None or handles.is_empty():
        return None
    return handles


def create_path_point(x: float = 0.0, y: float = 0.0,
                      type: PathNodeType = PathNodeType.CORNER,
                      left: Optional[Point] = None,
                      right: Optional[Point] = None) -> PathPoint:
    """Create an anchor; empty handle sets are dropped."""
    return PathPoint(float(x), float(y), PathNodeType.parse(type),
                     _normalize_handles(Handles(left, right)))


def clone_path_point(point: Optional[PathPoint]) -> Optional[PathPoint]:
    if point is None:
        return None
    return replace(point, handles=_normalize_handles(point.handles))


def clone_path_points(points: Optional[Iterable[PathPoint]]) -> List[PathPoint]:
    if not points:
        return []
    return [clone_path_point(p) for p in points]


def get_handle(point: Optional[PathPoint], side: str) -> Optional[Point]:
    """Return the handle on ``side`` ("left" or "right"), if any."""
    if point is None or point.handles is None:
        return None
    return getattr(point.handles, side)


def set_handle(point: PathPoint, side: str, coords: Optional[Point]) -> PathPoint:
    """Return a copy with one handle replaced (or removed when None)."""
    current = point.handles or Handles()
    handles = replace(current, **{side: coords})
    return replace(point, handles=_normalize_handles(handles))


def translate_path_points(points: Optional[Iterable[PathPoint]],
                          dx: float = 0.0, dy: float = 0.0) -> List[PathPoint]:
    """Move anchors and their handles by the same delta."""
    if not points:
        return []
    delta = Point(dx, dy)
    result = []
    for point in points:
        handles = point.handles
        if handles is not None:
            handles = Handles(
                handles.left + delta if handles.left is not None else None,
                handles.right + delta if handles.right is not None else None,
            )
        result.append(replace(point, x=point.x + dx, y=point.y + dy,
                              handles=_normalize_handles(handles)))
    return result


def rotate_path_point(point: PathPoint, center: Optional[Point], angle: float) -> PathPoint:
    """Rotate an anchor and its handles around ``center`` (radians)."""
    if abs(angle) < 0.000001:
        return point
    pivot = center or Point(0.0, 0.0)
    anchor = rotate_point(point.anchor, pivot, angle)
    handles = point.handles
    if handles is not None:
        handles = Handles(
            rotate_point(handles.left, pivot, angle) if handles.left is not None else None,
            rotate_point(handles.right, pivot, angle) if handles.right is not None else None,
        )
    return replace(point, x=anchor.x, y=anchor.y, handles=_normalize_handles(handles))


def scale_path_points(points: Iterable[PathPoint], origin: Point,
                      scale_x: float, scale_y: float) -> List[PathPoint]:
    """Scale anchors and handles about ``origin``."""
    def scaled(p: Point) -> Point:
        return Point(origin.x + (p.x - origin.x) * scale_x,
                     origin.y + (p.y - origin.y) * scale_y)

    result = []
    for point in points:
        anchor = scaled(point.anchor)
        handles = point.handles
        if handles is not None:
            handles = Handles(
                scaled(handles.left) if handles.left is not None else None,
                scaled(handles.right) if handles.right is not None else None,
            )
        result.append(replace(point, x=anchor.x, y=anchor.y, handles=handles))
    return result


def _has_offset_handle(point: PathPoint, side: str) -> bool:
    handle = get_handle(point, side)
    return handle is not None and (handle.x != point.x or handle.y != point.y)


def has_curve_between(a: Optional[PathPoint], b: Optional[PathPoint]) -> bool:
    """True when either end has a handle offset from its anchor on the joining side."""
    if a is None or b is None:
        return False
    return _has_offset_handle(a, 'right') or _has_offset_handle(b, 'left')


def format_number(value: float) -> str:
    """Compact number formatting for path data."""
    if value == int(value):
        return str(int(value))
    text = f"{value:.4f}".rstrip('0').rstrip('.')
    return "0" if text == "-0" else text


def _segment_command(prev: PathPoint, current: PathPoint) -> str:
    if has_curve_between(prev, current):
        cp1 = get_handle(prev, 'right') or prev.anchor
        cp2 = get_handle(current, 'left') or current.anchor
        return (f"C {format_number(cp1.x)} {format_number(cp1.y)} "
                f"{format_number(cp2.x)} {format_number(cp2.y)} "
                f"{format_number(current.x)} {format_number(current.y)}")
    return f"L {format_number(current.x)} {format_number(current.y)}"


def build_path_string(points: Optional[Sequence[PathPoint]], closed: bool = False) -> str:
    """
    Build SVG path data for a list of anchors.

    A segment becomes a cubic ``C`` command when either endpoint has a
    handle offset from its anchor on the connecting side, otherwise a
    straight ``L``. Closed paths join the last point back to the first
    the same way and end with ``Z``.
    """
    if not points:
        return ""
    first = points[0]
    commands = [f"M {format_number(first.x)} {format_number(first.y)}"]
    for prev, current in zip(points, points[1:]):
        commands.append(_segment_command(prev, current))
    if closed and len(points) > 1:
        commands.append(_segment_command(points[-1], first))
        commands.append("Z")
    return " ".join(commands)


def ensure_handles_for_type(point: PathPoint,
                            offset: float = DEFAULT_HANDLE_OFFSET) -> PathPoint:
    """
    Make a point's handles consistent with its node type.

    Corner points lose their handles. Smooth points get default handles
    ``offset`` units either side of the anchor where missing; existing
    handles are kept.
    """
    if point.type == PathNodeType.CORNER:
        return replace(point, handles=None)
    if point.type == PathNodeType.SMOOTH:
        handles = point.handles or Handles()
        left = handles.left if handles.left is not None else Point(point.x - offset, point.y)
        right = handles.right if handles.right is not None else Point(point.x + offset, point.y)
        return replace(point, handles=Handles(left, right))
    return clone_path_point(point)


def update_handle_symmetry(point: Optional[PathPoint], moved_side: str) -> Optional[PathPoint]:
    """
    Mirror the untouched handle of a smooth point.

    The opposite handle is placed at the anchor reflected through the
    moved handle, or removed if the moved handle was removed. Other node
    types are returned unchanged.
    """
    if point is None or point.type != PathNodeType.SMOOTH:
        return point
    other_side = 'right' if moved_side == 'left' else 'left'
    moved = get_handle(point, moved_side)
    if moved is None:
        return set_handle(point, other_side, None)
    mirrored = Point(point.x - (moved.x - point.x), point.y - (moved.y - point.y))
    return set_handle(point, other_side, mirrored)


def set_node_type(point: PathPoint, node_type: PathNodeType,
                  offset: float = DEFAULT_HANDLE_OFFSET) -> PathPoint:
    """Change the node type and fix up handles to match."""
    return ensure_handles_for_type(replace(point, type=PathNodeType.parse(node_type)), offset)


def round_path_corners(points: Optional[Sequence[PathPoint]], radius: float = 0.0,
                       closed: bool = True) -> List[PathPoint]:
    """
    Replace the plain corners of a point list with rounded arcs.

    Each corner without handles becomes two disconnected points pulled
    back along the adjacent edges by ``min(radius, incoming/2,
    outgoing/2)``, joined by handles of length
    ``r * 4/3 * tan(angle/4)`` where ``angle`` is the turn between the
    incoming and outgoing edge directions. Points that already carry
    handles are passed through untouched. A zero or negative radius
    returns a copy of the input. For an open list (``closed`` false)
    the first and last points are endpoints, not corners, and are kept.
    """
    if not points or len(points) < 3:
        return clone_path_points(points)

    try:
        requested = max(0.0, float(radius))
    except (TypeError, ValueError):
        requested = 0.0
    if not math.isfinite(requested) or requested <= PATH_ROUNDING_EPSILON:
        return clone_path_points(points)

    count = len(points)
    rounded: List[PathPoint] = []

    for index in range(count):
        prev = points[(index - 1) % count]
        current = points[index]
        nxt = points[(index + 1) % count]

        if current.has_handles() or (not closed and index in (0, count - 1)):
            rounded.append(clone_path_point(current))
            continue

        incoming = distance_between(current.anchor, prev.anchor)
        outgoing = distance_between(current.anchor, nxt.anchor)
        if incoming < PATH_ROUNDING_EPSILON or outgoing < PATH_ROUNDING_EPSILON:
            rounded.append(clone_path_point(current))
            continue

        effective = min(requested, incoming / 2, outgoing / 2)
        if effective <= PATH_ROUNDING_EPSILON:
            rounded.append(clone_path_point(current))
            continue

        dir_prev = Point((prev.x - current.x) / incoming, (prev.y - current.y) / incoming)
        dir_next = Point((nxt.x - current.x) / outgoing, (nxt.y - current.y) / outgoing)

        tangent_in = Point(-dir_prev.x, -dir_prev.y)
        tangent_out = dir_next
        dot = clamp(tangent_in.x * tangent_out.x + tangent_in.y * tangent_out.y, -1.0, 1.0)
        angle = math.acos(dot)
        if angle < PATH_ROUNDING_EPSILON:
            # Collinear: nothing to round
            rounded.append(clone_path_point(current))
            continue

        handle_length = effective * HANDLE_FACTOR * math.tan(angle / 4)

        start = Point(current.x + dir_prev.x * effective, current.y + dir_prev.y * effective)
        end = Point(current.x + dir_next.x * effective, current.y + dir_next.y * effective)

        start_right = end_left = None
        if math.isfinite(handle_length) and abs(handle_length) > PATH_ROUNDING_EPSILON:
            start_right = Point(start.x + tangent_in.x * handle_length,
                                start.y + tangent_in.y * handle_length)
            end_left = Point(end.x - tangent_out.x * handle_length,
                             end.y - tangent_out.y * handle_length)

        rounded.append(create_path_point(start.x, start.y, PathNodeType.DISCONNECTED,
                                         right=start_right))
        rounded.append(create_path_point(end.x, end.y, PathNodeType.DISCONNECTED,
                                         left=end_left))

    return rounded


def path_bounding_box(points: Optional[Iterable[PathPoint]],
                      include_handles: bool = False) -> Optional[BoundingBox]:
    """Extent of the anchors (optionally handles too); None for no points."""
    if not points:
        return None
    coords: List[Point] = []
    for point in points:
        coords.append(point.anchor)
        if include_handles and point.handles is not None:
            if point.handles.left is not None:
                coords.append(point.handles.left)
            if point.handles.right is not None:
                coords.append(point.handles.right)
    return BoundingBox.from_points(coords)


def insert_point_on_segment(points: Sequence[PathPoint], index: int,
                            t: float = 0.5) -> List[PathPoint]:
    """
    Insert a corner anchor on the straight chord between ``points[index]``
    and the following point (wrapping), at parameter ``t``.
    """
    result = clone_path_points(points)
    if len(result) < 2 or not 0 <= index < len(result):
        return result
    a = result[index]
    b = result[(index + 1) % len(result)]
    t = clamp(t, 0.0, 1.0)
    new_point = create_path_point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)
    result.insert(index + 1, new_point)
    return result


def remove_path_point(points: Sequence[PathPoint], index: int) -> List[PathPoint]:
    """Drop the anchor at ``index``; paths never shrink below two points."""
    result = clone_path_points(points)
    if len(result) <= 2 or not 0 <= index < len(result):
        return result
    del result[index]
    return result
