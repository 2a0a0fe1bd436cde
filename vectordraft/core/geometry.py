"""
VectorDraft Geometry Primitives

Pure, stateless math shared by every other module: points, axis-aligned
boxes, containment tests, segment distance and box unions. All functions
work in a single world (page) coordinate space.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence
import math


POLYGON_EPSILON = 1e-9


@dataclass(frozen=True)
class Point:
    """A 2D point."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def rotate(self, angle: float, center: Optional['Point'] = None) -> 'Point':
        """Rotate point around center by angle (radians)."""
        return rotate_point(self, center or Point(0.0, 0.0), angle)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> 'BoundingBox':
        """Build a box from a top-left corner and extents."""
        return cls(x, y, x + width, y + height)

    @classmethod
    def from_center(cls, cx: float, cy: float, half_w: float, half_h: float) -> 'BoundingBox':
        return cls(cx - half_w, cy - half_h, cx + half_w, cy + half_h)

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> Optional['BoundingBox']:
        """Smallest box containing every point, or None when empty."""
        points = list(points)
        if not points:
            return None
        return cls(
            min_x=min(p.x for p in points),
            min_y=min(p.y for p in points),
            max_x=max(p.x for p in points),
            max_y=max(p.y for p in points)
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point(
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2
        )

    def contains(self, point: Point) -> bool:
        """Check if point is inside bounding box (edges included)."""
        return (self.min_x <= point.x <= self.max_x and
                self.min_y <= point.y <= self.max_y)

    def intersects(self, other: 'BoundingBox') -> bool:
        """Check if two bounding boxes overlap."""
        return rects_intersect(self, other)

    def translated(self, dx: float, dy: float) -> 'BoundingBox':
        return BoundingBox(self.min_x + dx, self.min_y + dy,
                           self.max_x + dx, self.max_y + dy)


def rotate_point(point: Point, center: Point, angle: float) -> Point:
    """Rotate ``point`` around ``center`` by ``angle`` radians."""
    if not math.isfinite(angle) or angle == 0:
        return point
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    dx = point.x - center.x
    dy = point.y - center.y
    return Point(
        center.x + dx * cos_a - dy * sin_a,
        center.y + dx * sin_a + dy * cos_a
    )


def distance_between(a: Optional[Point], b: Optional[Point]) -> float:
    """Euclidean distance; 0 when either point is missing."""
    if a is None or b is None:
        return 0.0
    return math.hypot(a.x - b.x, a.y - b.y)


def distance_to_segment(point: Optional[Point], a: Optional[Point],
                        b: Optional[Point]) -> float:
    """
    Distance from a point to the segment a-b.

    The projection parameter is clamped to [0, 1] so points beyond either
    end measure to the nearest endpoint. A zero-length segment degrades
    to point-to-point distance, missing input to infinity.
    """
    if point is None or a is None or b is None:
        return math.inf
    dx = b.x - a.x
    dy = b.y - a.y
    if dx == 0 and dy == 0:
        return distance_between(point, a)
    t = ((point.x - a.x) * dx + (point.y - a.y) * dy) / (dx * dx + dy * dy)
    t = max(0.0, min(1.0, t))
    cx = a.x + t * dx
    cy = a.y + t * dy
    return math.hypot(point.x - cx, point.y - cy)


def point_in_rect(point: Point, box: BoundingBox) -> bool:
    return box.contains(point)


def point_in_circle(point: Point, center: Point, radius: float) -> bool:
    """Normalized-distance test; a non-positive radius contains nothing."""
    if radius <= 0:
        return False
    return point_in_ellipse(point, center, radius, radius)


def point_in_ellipse(point: Point, center: Point, radius_x: float,
                     radius_y: float, rotation: float = 0.0) -> bool:
    """
    Check if a point lies inside an ellipse.

    Args:
        point: Point to test
        center: Ellipse center
        radius_x: Horizontal radius (before rotation)
        radius_y: Vertical radius (before rotation)
        rotation: Ellipse rotation in radians

    Returns:
        True when the normalized distance is <= 1
    """
    if radius_x <= 0 or radius_y <= 0:
        return False
    local = rotate_point(point, center, -rotation) if rotation else point
    nx = (local.x - center.x) / radius_x
    ny = (local.y - center.y) / radius_y
    return nx * nx + ny * ny <= 1.0


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """
    Check if a point is inside a polygon using ray casting.

    A tiny epsilon is added to the edge denominator so horizontal edges
    never divide by zero.
    """
    n = len(polygon)
    if n < 3:
        return False
    inside = False

    j = n - 1
    for i in range(n):
        pi = polygon[i]
        pj = polygon[j]
        if ((pi.y > point.y) != (pj.y > point.y) and
                point.x < (pj.x - pi.x) * (point.y - pi.y) /
                ((pj.y - pi.y) + POLYGON_EPSILON) + pi.x):
            inside = not inside
        j = i

    return inside


def rects_intersect(a: Optional[BoundingBox], b: Optional[BoundingBox]) -> bool:
    """
    Inclusive AABB overlap test.

    Rectangles with a non-positive width or height never intersect.
    """
    if a is None or b is None:
        return False
    if a.width <= 0 or a.height <= 0 or b.width <= 0 or b.height <= 0:
        return False
    return not (a.max_x < b.min_x or
                a.min_x > b.max_x or
                a.max_y < b.min_y or
                a.min_y > b.max_y)


def union_bounding_box(boxes: Iterable[Optional[BoundingBox]]) -> Optional[BoundingBox]:
    """Minimal box containing all inputs; None for empty input."""
    boxes = [box for box in boxes if box is not None]
    if not boxes:
        return None
    return BoundingBox(
        min_x=min(bb.min_x for bb in boxes),
        min_y=min(bb.min_y for bb in boxes),
        max_x=max(bb.max_x for bb in boxes),
        max_y=max(bb.max_y for bb in boxes)
    )


def coerce_number(value, default: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``default``."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp a number into [minimum, maximum]; NaN maps to the minimum."""
    if value != value:
        return minimum
    return max(minimum, min(maximum, value))
