"""
VectorDraft Property Edits

Typed edit requests coming from property inspectors. Each request names
one property of the target shape and a value; values are coerced to safe
defaults rather than rejected.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union
import math

from .commands import Shapes, move_shapes, replace_shape
from .geometry import Point, clamp, coerce_number
from .path import rotate_path_point, scale_path_points
from .shapes import (
    BoxShape, Circle, Ellipse, Fill, Frame, Group, Line, PathShape, Polygon,
    Rectangle, RoundedPolygon, Shape, SolidFill, Star, Stroke, rematerialize
)
from .spatial import get_shape_bounding_box, shape_index


POSITION = 'position'
DIMENSIONS = 'dimensions'
ARC = 'arc'
ROTATION = 'rotation'
OPACITY = 'opacity'
CORNER_RADIUS = 'cornerRadius'
CORNER_SMOOTHING = 'cornerSmoothing'
POLYGON_SIDES = 'polygonSides'
RADIUS = 'radius'

PROPERTY_TYPES = (POSITION, DIMENSIONS, ARC, ROTATION, OPACITY, CORNER_RADIUS,
                  CORNER_SMOOTHING, POLYGON_SIDES, RADIUS)

MIN_RADIUS = 1.0
MIN_DIMENSION = 1.0


@dataclass(frozen=True)
class PropertyEditRequest:
    """A single property change aimed at one shape."""
    type: str
    value: Any = None

    def __post_init__(self):
        if self.type not in PROPERTY_TYPES:
            raise ValueError(f"Unknown property edit type: {self.type!r}")


def _get(value, name: str, default=None):
    if isinstance(value, Mapping):
        return value.get(name, default)
    return getattr(value, name, default)


def _wrap_degrees(value: float) -> float:
    return value % 360.0


def _with_polygon_class(shape: Polygon, corner_radius: float) -> Polygon:
    """Switch between Polygon and RoundedPolygon as the radius demands."""
    cls = RoundedPolygon if corner_radius > 0 else Polygon
    values = {f.name: getattr(shape, f.name) for f in fields(shape)}
    values['corner_radius'] = corner_radius
    if type(shape) is cls:
        return replace(shape, corner_radius=corner_radius)
    return cls(**values)


def _set_position(shapes: Sequence[Shape], shape: Shape, value) -> Shapes:
    box = get_shape_bounding_box(shape)
    if box is None:
        return tuple(shapes)
    if isinstance(shape, (BoxShape, Circle, Ellipse, Polygon, Star)) and not isinstance(shape, Group):
        current = Point(shape.x, shape.y)
    else:
        current = box.center
    x = coerce_number(_get(value, 'x'), current.x)
    y = coerce_number(_get(value, 'y'), current.y)
    return move_shapes(shapes, [shape.id], x - current.x, y - current.y)


def _set_dimensions(shape: Shape, value) -> Shape:
    width = max(MIN_DIMENSION, coerce_number(_get(value, 'width'), MIN_DIMENSION))
    height = max(MIN_DIMENSION, coerce_number(_get(value, 'height'), MIN_DIMENSION))
    if isinstance(shape, Group):
        return shape
    if isinstance(shape, BoxShape):
        return replace(shape, width=width, height=height)
    if isinstance(shape, Circle):
        return replace(shape, radius=max(width, height) / 2)
    if isinstance(shape, Ellipse):
        return replace(shape, radius_x=width / 2, radius_y=height / 2)
    if isinstance(shape, Polygon):
        return rematerialize(replace(shape, radius=min(width, height) / 2))
    if isinstance(shape, Star):
        outer = min(width, height) / 2
        ratio = shape.inner_radius / shape.outer_radius if shape.outer_radius else 0.5
        return rematerialize(replace(shape, outer_radius=outer, inner_radius=outer * ratio))
    if isinstance(shape, (Line, PathShape)):
        box = get_shape_bounding_box(shape)
        if box is None:
            return shape
        scale_x = width / box.width if box.width > 0 else 1.0
        scale_y = height / box.height if box.height > 0 else 1.0
        origin = box.center
        if isinstance(shape, Line):
            coords = []
            for i, v in enumerate(shape.points):
                if i % 2 == 0:
                    coords.append(origin.x + (v - origin.x) * scale_x)
                else:
                    coords.append(origin.y + (v - origin.y) * scale_y)
            return replace(shape, points=tuple(coords))
        return replace(shape, points=tuple(scale_path_points(shape.points, origin, scale_x, scale_y)))
    return shape


def _set_arc(shape: Shape, value) -> Shape:
    if not isinstance(shape, (Circle, Ellipse)):
        return shape
    start = _wrap_degrees(coerce_number(_get(value, 'start'), shape.arc_start))
    sweep = clamp(coerce_number(_get(value, 'sweep'), shape.arc_sweep), 0.0, 360.0)
    ratio = clamp(coerce_number(_get(value, 'ratio'), shape.arc_ratio), 0.0, 0.99)
    return replace(shape, arc_start=start, arc_sweep=sweep, arc_ratio=ratio)


def _set_rotation(shape: Shape, value) -> Shape:
    rotation = _wrap_degrees(coerce_number(value, shape.rotation))
    if isinstance(shape, Group):
        return shape
    if isinstance(shape, (Polygon, Star)):
        return rematerialize(replace(shape, rotation=rotation))
    if isinstance(shape, (Line, PathShape)):
        box = get_shape_bounding_box(shape)
        delta = math.radians(rotation - shape.rotation)
        if box is None or not delta:
            return replace(shape, rotation=rotation)
        center = box.center
        if isinstance(shape, Line):
            coords = []
            for i in range(0, len(shape.points) - 1, 2):
                p = Point(shape.points[i], shape.points[i + 1]).rotate(delta, center)
                coords.extend((p.x, p.y))
            return replace(shape, rotation=rotation, points=tuple(coords))
        points = tuple(rotate_path_point(p, center, delta) for p in shape.points)
        return replace(shape, rotation=rotation, points=points)
    return replace(shape, rotation=rotation)


def _corner_radius_value(value, current) -> Tuple:
    if isinstance(value, (list, tuple)):
        radii = tuple(max(0.0, coerce_number(v, 0.0)) for v in value[:4])
        radii = radii + (0.0,) * (4 - len(radii))
        return radii[0] if len(set(radii)) == 1 else radii
    fallback = current if isinstance(current, (int, float)) else 0.0
    return max(0.0, coerce_number(value, fallback))


def _set_corner_radius(shape: Shape, value) -> Shape:
    if isinstance(shape, (Rectangle, Frame)):
        return replace(shape, corner_radius=_corner_radius_value(value, shape.corner_radius))
    if isinstance(shape, Polygon):
        radius = max(0.0, coerce_number(value, shape.corner_radius))
        return _with_polygon_class(shape, radius)
    if isinstance(shape, PathShape):
        return replace(shape, corner_radius=max(0.0, coerce_number(value, shape.corner_radius)))
    return shape


def _set_corner_smoothing(shape: Shape, value) -> Shape:
    if isinstance(shape, (Rectangle, Frame, Polygon)):
        return replace(shape, corner_smoothing=clamp(coerce_number(value, 0.0), 0.0, 1.0))
    return shape


def _set_sides(shape: Shape, value) -> Shape:
    count = max(3, int(coerce_number(value, 3)))
    if isinstance(shape, Polygon):
        return rematerialize(replace(shape, sides=count))
    if isinstance(shape, Star):
        return rematerialize(replace(shape, num_points=count))
    return shape


def _set_radius(shape: Shape, value) -> Shape:
    radius = max(MIN_RADIUS, coerce_number(value, MIN_RADIUS))
    if isinstance(shape, Circle):
        return replace(shape, radius=radius)
    if isinstance(shape, Polygon):
        return rematerialize(replace(shape, radius=radius))
    if isinstance(shape, Star):
        ratio = shape.inner_radius / shape.outer_radius if shape.outer_radius else 0.5
        return rematerialize(replace(shape, outer_radius=radius, inner_radius=radius * ratio))
    return shape


_SHAPE_EDITORS = {
    DIMENSIONS: _set_dimensions,
    ARC: _set_arc,
    ROTATION: _set_rotation,
    CORNER_RADIUS: _set_corner_radius,
    CORNER_SMOOTHING: _set_corner_smoothing,
    POLYGON_SIDES: _set_sides,
    RADIUS: _set_radius,
}


def apply_property_edit(shapes: Sequence[Shape], target_id: Optional[str],
                        request: PropertyEditRequest) -> Shapes:
    """
    Apply ``request`` to the shape ``target_id``.

    Returns the unchanged tuple when the target is missing or the edit
    does not apply to its type.
    """
    shape = shape_index(shapes).get(target_id) if target_id else None
    if shape is None:
        return tuple(shapes)
    if request.type == POSITION:
        return _set_position(shapes, shape, request.value)
    if request.type == OPACITY:
        opacity = clamp(coerce_number(request.value, shape.opacity), 0.0, 1.0)
        return replace_shape(shapes, replace(shape, opacity=opacity))
    edited = _SHAPE_EDITORS[request.type](shape, request.value)
    if edited is shape:
        return tuple(shapes)
    return replace_shape(shapes, edited)


@dataclass(frozen=True)
class StyleInput:
    """
    Fill and stroke coming from the style controls. None leaves the
    property alone; ``preview`` marks intermediate values while a picker
    is being dragged.
    """
    fill: Optional[Union[Fill, str]] = None
    stroke: Optional[Stroke] = None
    preview: bool = False


def apply_style(shapes: Sequence[Shape], ids: Iterable[str], style: StyleInput) -> Shapes:
    """Set fill and stroke on the given shapes. Lines and groups take no fill."""
    targets = set(ids)
    fill = SolidFill(style.fill) if isinstance(style.fill, str) else style.fill
    changed = False
    result = []
    for shape in shapes:
        if shape.id in targets:
            changes = {}
            if fill is not None and not isinstance(shape, (Line, Group)) and shape.fill != fill:
                changes['fill'] = fill
            if style.stroke is not None and not isinstance(shape, Group) and shape.stroke != style.stroke:
                changes['stroke'] = style.stroke
            if changes:
                shape = replace(shape, **changes)
                changed = True
        result.append(shape)
    return tuple(result) if changed else tuple(shapes)
