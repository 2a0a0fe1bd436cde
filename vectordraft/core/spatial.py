"""
VectorDraft Spatial Queries

Per-type bounding boxes and hit tests, plus the hierarchy queries used by
selection and reparenting: children, descendants, ancestors and the
topmost shape or container under a point.

Paint order is collection order: later shapes paint on top, so
"topmost" searches walk the collection backwards.
"""

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set
import math

from .geometry import (
    BoundingBox, Point, distance_to_segment, point_in_circle,
    point_in_ellipse, point_in_polygon, rects_intersect, rotate_point
)
from .path import path_bounding_box
from .shapes import (
    BoxShape, Circle, Ellipse, Group, Line, PathShape, Polygon, Shape,
    Star, Text, is_container, line_points, polygon_vertices, star_vertices
)
from .text import text_extents


DEFAULT_HIT_TOLERANCE = 3.0


def _rotated_box(cx: float, cy: float, half_w: float, half_h: float,
                 rotation: float) -> BoundingBox:
    if not rotation:
        return BoundingBox.from_center(cx, cy, half_w, half_h)
    center = Point(cx, cy)
    angle = math.radians(rotation)
    corners = [
        rotate_point(Point(cx + sx * half_w, cy + sy * half_h), center, angle)
        for sx, sy in ((-1, -1), (1, -1), (1, 1), (-1, 1))
    ]
    return BoundingBox.from_points(corners)


def box_extents(shape: BoxShape, measurer=None):
    """Width and height of a box-like shape (text may be measured)."""
    if isinstance(shape, Text):
        return text_extents(shape, measurer)
    return max(0.0, shape.width), max(0.0, shape.height)


def shape_vertices(shape: Shape) -> Sequence[Point]:
    """Materialized vertices of a polygon or star (recomputed if missing)."""
    if isinstance(shape, Polygon):
        if shape.points:
            return shape.points
        return polygon_vertices(shape.x, shape.y, shape.radius, shape.sides, shape.rotation)
    if isinstance(shape, Star):
        if shape.points:
            return shape.points
        return star_vertices(shape.x, shape.y, shape.num_points, shape.outer_radius,
                             shape.inner_radius, shape.rotation)
    return ()


def get_shape_bounding_box(shape: Optional[Shape], measurer=None) -> Optional[BoundingBox]:
    """
    Axis-aligned bounds of a shape in world space.

    Returns None for shapes with nothing to measure (an empty line or
    path). Groups report their stored box, which the store keeps equal to
    the union of their visible children.
    """
    if shape is None:
        return None
    if isinstance(shape, BoxShape):
        width, height = box_extents(shape, measurer)
        return _rotated_box(shape.x, shape.y, width / 2, height / 2, shape.rotation)
    if isinstance(shape, Circle):
        r = max(0.0, shape.radius)
        return BoundingBox.from_center(shape.x, shape.y, r, r)
    if isinstance(shape, Ellipse):
        rx = max(0.0, shape.radius_x)
        ry = max(0.0, shape.radius_y)
        angle = math.radians(shape.rotation)
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        half_w = math.hypot(rx * cos_a, ry * sin_a)
        half_h = math.hypot(rx * sin_a, ry * cos_a)
        return BoundingBox.from_center(shape.x, shape.y, half_w, half_h)
    if isinstance(shape, (Polygon, Star)):
        vertices = shape_vertices(shape)
        if vertices:
            return BoundingBox.from_points(vertices)
        r = shape.radius if isinstance(shape, Polygon) else shape.outer_radius
        return BoundingBox.from_center(shape.x, shape.y, r, r)
    if isinstance(shape, Line):
        return BoundingBox.from_points(line_points(shape))
    if isinstance(shape, PathShape):
        return path_bounding_box(shape.points)
    return None


def client_rect(shape: Shape, measurer=None) -> Optional[BoundingBox]:
    """Rendered rectangle: the bounding box grown by half the stroke."""
    box = get_shape_bounding_box(shape, measurer)
    if box is None:
        return None
    pad = max(0.0, shape.stroke.width) / 2
    if isinstance(shape, (Line, PathShape)):
        pad = max(pad, 0.5)
    if pad:
        box = BoundingBox(box.min_x - pad, box.min_y - pad, box.max_x + pad, box.max_y + pad)
    return box


def _near_polyline(point: Point, vertices: Sequence[Point], closed: bool,
                   tolerance: float) -> bool:
    if len(vertices) == 1:
        return vertices[0].distance_to(point) <= tolerance
    segments = list(zip(vertices, vertices[1:]))
    if closed and len(vertices) > 2:
        segments.append((vertices[-1], vertices[0]))
    return any(distance_to_segment(point, a, b) <= tolerance for a, b in segments)


def point_in_shape(shape: Optional[Shape], x: float, y: float, measurer=None,
                   tolerance: float = DEFAULT_HIT_TOLERANCE) -> bool:
    """
    Per-type hit test.

    Lines and paths hit within ``stroke width + tolerance`` of any
    segment; closed paths are also hit anywhere inside.
    """
    if shape is None:
        return False
    point = Point(x, y)
    if isinstance(shape, BoxShape):
        width, height = box_extents(shape, measurer)
        center = Point(shape.x, shape.y)
        local = rotate_point(point, center, -math.radians(shape.rotation))
        return BoundingBox.from_center(shape.x, shape.y, width / 2, height / 2).contains(local)
    if isinstance(shape, Circle):
        return point_in_circle(point, Point(shape.x, shape.y), shape.radius)
    if isinstance(shape, Ellipse):
        return point_in_ellipse(point, Point(shape.x, shape.y), shape.radius_x,
                                shape.radius_y, math.radians(shape.rotation))
    if isinstance(shape, (Polygon, Star)):
        return point_in_polygon(point, shape_vertices(shape))
    if isinstance(shape, (Line, PathShape)):
        reach = max(0.0, shape.stroke.width) + tolerance
        if isinstance(shape, Line):
            vertices, closed = line_points(shape), False
        else:
            vertices, closed = [p.anchor for p in shape.points], shape.closed
        if not vertices:
            return False
        if _near_polyline(point, vertices, closed, reach):
            return True
        return closed and point_in_polygon(point, vertices)
    return False


# Hierarchy ------------------------------------------------------------------

def shape_index(shapes: Iterable[Shape]) -> Dict[str, Shape]:
    return {shape.id: shape for shape in shapes}


def children_by_parent(shapes: Iterable[Shape]) -> Dict[Optional[str], List[Shape]]:
    """Children grouped by parent id, each list in paint order."""
    index: Dict[Optional[str], List[Shape]] = {}
    for shape in shapes:
        index.setdefault(shape.parent_id, []).append(shape)
    return index


def children_of(shapes: Iterable[Shape], parent_id: Optional[str],
                page_id: Optional[str] = None) -> List[Shape]:
    return [s for s in shapes
            if s.parent_id == parent_id and (page_id is None or s.page_id == page_id)]


def descendant_ids(shapes: Iterable[Shape], shape_id: str) -> Set[str]:
    """Ids of every shape below ``shape_id`` (not including itself)."""
    index = children_by_parent(shapes)
    found: Set[str] = set()
    stack = [shape_id]
    while stack:
        for child in index.get(stack.pop(), ()):
            if child.id not in found:
                found.add(child.id)
                stack.append(child.id)
    return found


def ancestor_ids(shapes: Iterable[Shape], shape_id: str) -> List[str]:
    """Parent chain from the direct parent up to the page root."""
    by_id = shape_index(shapes)
    chain: List[str] = []
    current = by_id.get(shape_id)
    while current is not None and current.parent_id is not None:
        if current.parent_id in chain:
            break
        chain.append(current.parent_id)
        current = by_id.get(current.parent_id)
    return chain


def container_ancestor(shapes: Sequence[Shape], shape_id: str) -> Optional[Shape]:
    """
    Outermost group enclosing a shape, or None.

    Clicking a grouped shape selects its outermost group, so this is the
    selection target for hits inside groups.
    """
    by_id = shape_index(shapes)
    outermost = None
    for ancestor_id in ancestor_ids(shapes, shape_id):
        ancestor = by_id.get(ancestor_id)
        if isinstance(ancestor, Group):
            outermost = ancestor
    return outermost


def is_effectively_visible(shape: Shape, by_id: Dict[str, Shape]) -> bool:
    """A shape is visible only if it and every ancestor are visible."""
    seen = set()
    current: Optional[Shape] = shape
    while current is not None:
        if not current.visible:
            return False
        if current.parent_id is None or current.parent_id in seen:
            return True
        seen.add(current.parent_id)
        current = by_id.get(current.parent_id)
    return True


# Point queries --------------------------------------------------------------

def find_shape_at_point(shapes: Sequence[Shape], point: Point,
                        page_id: Optional[str] = None, measurer=None,
                        include_locked: bool = False,
                        include_containers: bool = True,
                        tolerance: float = DEFAULT_HIT_TOLERANCE) -> Optional[Shape]:
    """Topmost visible shape hit at ``point``."""
    by_id = shape_index(shapes)
    for shape in reversed(shapes):
        if page_id is not None and shape.page_id != page_id:
            continue
        if shape.locked and not include_locked:
            continue
        if not include_containers and is_container(shape):
            continue
        if not is_effectively_visible(shape, by_id):
            continue
        if point_in_shape(shape, point.x, point.y, measurer, tolerance):
            return shape
    return None


def find_container_at_point(shapes: Sequence[Shape], point: Point,
                            excluded_ids: Iterable[str] = (),
                            page_id: Optional[str] = None) -> Optional[Shape]:
    """
    Topmost visible, unlocked frame or group whose bounds contain
    ``point``, skipping ``excluded_ids`` (a dragged shape and its
    subtree can never become their own container).
    """
    excluded = set(excluded_ids)
    by_id = shape_index(shapes)
    for shape in reversed(shapes):
        if not is_container(shape) or shape.id in excluded or shape.locked:
            continue
        if page_id is not None and shape.page_id != page_id:
            continue
        if not is_effectively_visible(shape, by_id):
            continue
        box = get_shape_bounding_box(shape)
        if box is not None and box.contains(point):
            return shape
    return None


def marquee_hits(shapes: Sequence[Shape], marquee: BoundingBox,
                 to_screen: Optional[Callable[[BoundingBox], BoundingBox]] = None,
                 page_id: Optional[str] = None, measurer=None) -> List[str]:
    """
    Ids of visible, unlocked shapes whose rendered rectangle intersects
    ``marquee``. ``to_screen`` maps world boxes into the marquee's space.
    """
    by_id = shape_index(shapes)
    hits = []
    for shape in shapes:
        if page_id is not None and shape.page_id != page_id:
            continue
        if shape.locked or not is_effectively_visible(shape, by_id):
            continue
        rect = client_rect(shape, measurer)
        if rect is None:
            continue
        if to_screen is not None:
            rect = to_screen(rect)
        if rects_intersect(marquee, rect):
            hits.append(shape.id)
    return hits
