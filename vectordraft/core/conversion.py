"""
VectorDraft Shape-to-Path Conversion

Derives editable path points from primitive shapes. Conversion is
deterministic: the same shape parameters always produce the same point
list, which is what makes reverting an unedited conversion lossless.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple
import logging
import math

from .geometry import Point
from .path import PathNodeType, PathPoint, create_path_point, rotate_path_point
from .shapes import (
    Circle, Ellipse, Line, PathShape, Polygon, Rectangle, Shape, Star,
    corner_radii, line_points, star_vertices
)
from .spatial import shape_vertices

logger = logging.getLogger(__name__)


ELLIPSE_KAPPA = 0.5522847498307936


@dataclass(frozen=True)
class PathGeometry:
    """Points produced by a conversion plus the stroke joins to use."""
    points: Tuple[PathPoint, ...]
    closed: bool
    line_join: str = "miter"
    line_cap: str = "butt"


def _rotation_radians(shape: Shape) -> float:
    rotation = shape.rotation if math.isfinite(shape.rotation) else 0.0
    return math.radians(rotation)


def _rectangle_path(shape: Rectangle) -> Optional[PathGeometry]:
    width = max(0.0, shape.width)
    height = max(0.0, shape.height)
    if not width or not height:
        return None
    center = Point(shape.x, shape.y)
    half_w = width / 2
    half_h = height / 2
    corners = [
        create_path_point(center.x - half_w, center.y - half_h),
        create_path_point(center.x + half_w, center.y - half_h),
        create_path_point(center.x + half_w, center.y + half_h),
        create_path_point(center.x - half_w, center.y + half_h),
    ]
    angle = _rotation_radians(shape)
    if angle:
        corners = [rotate_path_point(p, center, angle) for p in corners]
    return PathGeometry(tuple(corners), True, "miter")


def _ellipse_path(shape: Shape, radius_x: float, radius_y: float) -> Optional[PathGeometry]:
    if not radius_x or not radius_y:
        return None
    cx, cy = shape.x, shape.y
    kx = radius_x * ELLIPSE_KAPPA
    ky = radius_y * ELLIPSE_KAPPA
    smooth = PathNodeType.SMOOTH
    nodes = [
        # top, right, bottom, left (clockwise in screen space)
        create_path_point(cx, cy - radius_y, smooth,
                          left=Point(cx - kx, cy - radius_y), right=Point(cx + kx, cy - radius_y)),
        create_path_point(cx + radius_x, cy, smooth,
                          left=Point(cx + radius_x, cy - ky), right=Point(cx + radius_x, cy + ky)),
        create_path_point(cx, cy + radius_y, smooth,
                          left=Point(cx + kx, cy + radius_y), right=Point(cx - kx, cy + radius_y)),
        create_path_point(cx - radius_x, cy, smooth,
                          left=Point(cx - radius_x, cy + ky), right=Point(cx - radius_x, cy - ky)),
    ]
    angle = _rotation_radians(shape)
    if angle:
        nodes = [rotate_path_point(p, Point(cx, cy), angle) for p in nodes]
    return PathGeometry(tuple(nodes), True, "round")


def _line_path(shape: Line) -> Optional[PathGeometry]:
    nodes = tuple(create_path_point(p.x, p.y) for p in line_points(shape))
    if len(nodes) < 2:
        return None
    return PathGeometry(nodes, False, "miter", "round")


def _vertex_path(vertices) -> Optional[PathGeometry]:
    nodes = tuple(create_path_point(v.x, v.y) for v in vertices
                  if math.isfinite(v.x) and math.isfinite(v.y))
    if len(nodes) < 3:
        return None
    return PathGeometry(nodes, True, "miter")


def can_convert_shape_to_path(shape: Optional[Shape]) -> bool:
    """Whether ``shape`` is well-formed enough to become a path."""
    if isinstance(shape, Rectangle):
        return shape.width > 0 and shape.height > 0
    if isinstance(shape, Circle):
        return shape.radius > 0
    if isinstance(shape, Ellipse):
        return shape.radius_x > 0 and shape.radius_y > 0
    if isinstance(shape, Line):
        return len(line_points(shape)) >= 2
    if isinstance(shape, Polygon):
        return len(shape_vertices(shape)) >= 3 and shape.radius > 0
    if isinstance(shape, Star):
        return len(shape.points) >= 3 or (shape.outer_radius > 0 and shape.num_points >= 2)
    return False


def shape_to_path(shape: Optional[Shape]) -> Optional[PathGeometry]:
    """
    Build path points for a primitive shape.

    Rectangles give four corner points at their (rotated) corners;
    circles and ellipses four smooth points at the cardinal positions
    with ``radius * KAPPA`` handles; lines a corner per coordinate pair;
    polygons and stars a corner per vertex. Returns None for anything
    that cannot be converted.
    """
    if not can_convert_shape_to_path(shape):
        return None
    if isinstance(shape, Rectangle):
        return _rectangle_path(shape)
    if isinstance(shape, Circle):
        return _ellipse_path(shape, shape.radius, shape.radius)
    if isinstance(shape, Ellipse):
        return _ellipse_path(shape, shape.radius_x, shape.radius_y)
    if isinstance(shape, Line):
        return _line_path(shape)
    if isinstance(shape, Polygon):
        return _vertex_path(shape_vertices(shape))
    if isinstance(shape, Star):
        if len(shape.points) >= 3:
            return _vertex_path(shape.points)
        inner = shape.inner_radius or shape.outer_radius / 2
        return _vertex_path(star_vertices(shape.x, shape.y, shape.num_points,
                                          shape.outer_radius, inner, shape.rotation))
    return None


def _carried_corner_radius(shape: Shape) -> float:
    if isinstance(shape, Rectangle):
        return min(corner_radii(shape))
    if isinstance(shape, Polygon):
        return max(0.0, shape.corner_radius)
    return 0.0


def convert_shape_to_path_shape(shape: Shape) -> Optional[PathShape]:
    """
    Replace a primitive with an equivalent ``PathShape``.

    The path keeps the shape's id, hierarchy and style and remembers the
    original in ``source``. Rounded rectangles and polygons carry their
    corner radius over as render-time rounding.
    """
    geometry = shape_to_path(shape)
    if geometry is None:
        logger.debug("Shape %s (%s) cannot be converted to a path", shape.id, shape.type)
        return None
    return PathShape(
        id=shape.id,
        name=shape.name,
        parent_id=shape.parent_id,
        page_id=shape.page_id,
        visible=shape.visible,
        locked=shape.locked,
        opacity=shape.opacity,
        blend_mode=shape.blend_mode,
        fill=shape.fill,
        stroke=shape.stroke,
        points=geometry.points,
        closed=geometry.closed,
        corner_radius=_carried_corner_radius(shape),
        source=shape,
    )


def can_revert_path(path: Optional[Shape]) -> bool:
    """True while a converted path's points still match its source."""
    if not isinstance(path, PathShape) or path.source is None:
        return False
    geometry = shape_to_path(path.source)
    if geometry is None:
        return False
    return geometry.closed == path.closed and geometry.points == tuple(path.points)


def revert_path_shape(path: PathShape) -> Optional[Shape]:
    """
    Restore the primitive behind an unedited converted path.

    Identity, hierarchy and style come from the path (they may have been
    changed after conversion); geometry comes from the source.
    """
    if not can_revert_path(path):
        return None
    return replace(
        path.source,
        id=path.id,
        parent_id=path.parent_id,
        page_id=path.page_id,
        visible=path.visible,
        locked=path.locked,
        opacity=path.opacity,
        blend_mode=path.blend_mode,
        fill=path.fill,
        stroke=path.stroke,
    )
