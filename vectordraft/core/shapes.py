"""
VectorDraft Core Shapes Module

Defines the shape variants. Every shape is an immutable record; edits
produce new records with ``dataclasses.replace`` so the history manager
can keep prior collections as cheap snapshots.

Variants and their type tags:

- Rectangle ("rectangle"), Frame ("frame"), Group ("group"), Text ("text")
- Circle ("circle"), Ellipse ("ellipse")
- Polygon ("polygon"), RoundedPolygon ("roundedPolygon"), Star ("star")
- Line ("line"), PathShape ("path")

Frames and groups are containers: other shapes may name them as parent.
"""

from dataclasses import dataclass, field, replace
from typing import ClassVar, Dict, Optional, Tuple, Type, Union
from uuid import uuid4
import math

from .geometry import Point
from .gradient import Gradient
from .path import PathPoint


def new_shape_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class SolidFill:
    color: str = "#d9d9d9"


@dataclass(frozen=True)
class GradientFill:
    gradient: Gradient = field(default_factory=Gradient)


Fill = Union[SolidFill, GradientFill]


@dataclass(frozen=True)
class Stroke:
    color: str = "#000000"
    width: float = 0.0
    type: str = "solid"


@dataclass(frozen=True)
class Shape:
    """
    Fields common to every variant.

    ``parent_id`` is None for shapes owned by the page root, otherwise
    the id of a Frame or Group on the same page. ``rotation`` is in
    degrees.
    """
    TYPE: ClassVar[str] = "shape"

    id: str = field(default_factory=new_shape_id)
    name: str = ""
    parent_id: Optional[str] = None
    page_id: str = ""
    visible: bool = True
    locked: bool = False
    opacity: float = 1.0
    blend_mode: str = "normal"
    rotation: float = 0.0
    fill: Optional[Fill] = None
    stroke: Stroke = field(default_factory=Stroke)

    @property
    def type(self) -> str:
        return self.TYPE


@dataclass(frozen=True)
class BoxShape(Shape):
    """A shape described by its centre and extents."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


CornerRadius = Union[float, Tuple[float, float, float, float]]


@dataclass(frozen=True)
class Rectangle(BoxShape):
    TYPE: ClassVar[str] = "rectangle"

    corner_radius: CornerRadius = 0.0
    corner_smoothing: float = 0.0


@dataclass(frozen=True)
class Frame(BoxShape):
    TYPE: ClassVar[str] = "frame"

    corner_radius: CornerRadius = 0.0
    corner_smoothing: float = 0.0
    clip_content: bool = True


@dataclass(frozen=True)
class Group(BoxShape):
    """A container whose box is derived from its visible children."""
    TYPE: ClassVar[str] = "group"


@dataclass(frozen=True)
class Text(BoxShape):
    """
    A text box. A zero width or height means "measure the text"; layout
    itself is left to the renderer.
    """
    TYPE: ClassVar[str] = "text"

    text: str = ""
    font_family: str = "Inter"
    font_style: str = "normal"
    font_size: float = 24.0
    line_height: float = 1.2
    letter_spacing: float = 0.0
    align: str = "left"
    vertical_align: str = "top"
    text_decoration: str = "none"


@dataclass(frozen=True)
class Circle(Shape):
    TYPE: ClassVar[str] = "circle"

    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0
    arc_start: float = 0.0
    arc_sweep: float = 360.0
    arc_ratio: float = 0.0


@dataclass(frozen=True)
class Ellipse(Shape):
    TYPE: ClassVar[str] = "ellipse"

    x: float = 0.0
    y: float = 0.0
    radius_x: float = 0.0
    radius_y: float = 0.0
    arc_start: float = 0.0
    arc_sweep: float = 360.0
    arc_ratio: float = 0.0


@dataclass(frozen=True)
class Polygon(Shape):
    """Regular polygon with its vertices materialized in ``points``."""
    TYPE: ClassVar[str] = "polygon"

    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0
    sides: int = 5
    corner_radius: float = 0.0
    corner_smoothing: float = 0.0
    points: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class RoundedPolygon(Polygon):
    TYPE: ClassVar[str] = "roundedPolygon"


@dataclass(frozen=True)
class Star(Shape):
    TYPE: ClassVar[str] = "star"

    x: float = 0.0
    y: float = 0.0
    num_points: int = 5
    outer_radius: float = 0.0
    inner_radius: float = 0.0
    points: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class Line(Shape):
    """Polyline stored as a flat ``(x0, y0, x1, y1, ...)`` tuple."""
    TYPE: ClassVar[str] = "line"

    points: Tuple[float, ...] = ()


@dataclass(frozen=True)
class PathShape(Shape):
    """
    Free-form path.

    ``source`` keeps the primitive a converted path came from so that an
    unedited conversion can be reverted losslessly.
    """
    TYPE: ClassVar[str] = "path"

    points: Tuple[PathPoint, ...] = ()
    closed: bool = False
    corner_radius: float = 0.0
    source: Optional[Shape] = None


SHAPE_CLASSES: Dict[str, Type[Shape]] = {
    cls.TYPE: cls
    for cls in (Rectangle, Frame, Group, Text, Circle, Ellipse,
                Polygon, RoundedPolygon, Star, Line, PathShape)
}

CONTAINER_TYPES = (Frame, Group)

TYPE_LABELS = {
    "rectangle": "Rectangle",
    "frame": "Frame",
    "group": "Group",
    "text": "Text",
    "circle": "Circle",
    "ellipse": "Ellipse",
    "polygon": "Polygon",
    "roundedPolygon": "Polygon",
    "star": "Star",
    "line": "Line",
    "path": "Path",
}


def is_container(shape: Optional[Shape]) -> bool:
    return isinstance(shape, CONTAINER_TYPES)


def line_points(shape: Line) -> Tuple[Point, ...]:
    """Pair up a line's flat coordinate list, skipping non-finite pairs."""
    coords = shape.points
    pairs = []
    for i in range(0, len(coords) - 1, 2):
        x, y = coords[i], coords[i + 1]
        if math.isfinite(x) and math.isfinite(y):
            pairs.append(Point(x, y))
    return tuple(pairs)


def polygon_vertices(x: float, y: float, radius: float, sides: int,
                     rotation: float = 0.0) -> Tuple[Point, ...]:
    """
    Vertices of a regular polygon, the first one pointing up before
    ``rotation`` (degrees) is applied.
    """
    sides = max(3, int(sides))
    base = math.radians(rotation) - math.pi / 2
    step = 2 * math.pi / sides
    return tuple(
        Point(x + math.cos(base + i * step) * radius,
              y + math.sin(base + i * step) * radius)
        for i in range(sides)
    )


def star_vertices(x: float, y: float, num_points: int, outer_radius: float,
                  inner_radius: float, rotation: float = 0.0) -> Tuple[Point, ...]:
    """Alternating outer/inner spokes, starting at the top."""
    num_points = max(2, int(num_points))
    base = math.radians(rotation) - math.pi / 2
    step = math.pi / num_points
    vertices = []
    for i in range(num_points * 2):
        r = outer_radius if i % 2 == 0 else inner_radius
        angle = base + i * step
        vertices.append(Point(x + math.cos(angle) * r, y + math.sin(angle) * r))
    return tuple(vertices)


def make_polygon(corner_radius: float = 0.0, **fields) -> Polygon:
    """
    Build a Polygon, or a RoundedPolygon when ``corner_radius`` > 0, with
    its vertex list materialized from centre, radius, sides and rotation.
    """
    cls = RoundedPolygon if corner_radius > 0 else Polygon
    shape = cls(corner_radius=max(0.0, corner_radius), **fields)
    return rematerialize(shape)


def rematerialize(shape: Shape) -> Shape:
    """Recompute the cached vertex list of a polygon or star."""
    if isinstance(shape, Polygon):
        points = polygon_vertices(shape.x, shape.y, shape.radius, shape.sides, shape.rotation)
        return replace(shape, sides=max(3, int(shape.sides)), points=points)
    if isinstance(shape, Star):
        points = star_vertices(shape.x, shape.y, shape.num_points, shape.outer_radius,
                               shape.inner_radius, shape.rotation)
        return replace(shape, points=points)
    return shape


def corner_radii(shape: Union[Rectangle, Frame]) -> Tuple[float, float, float, float]:
    """
    Per-corner radii (top-left, top-right, bottom-right, bottom-left),
    each clamped to half the shorter side.
    """
    limit = max(0.0, min(shape.width, shape.height) / 2)
    radius = shape.corner_radius
    if isinstance(radius, (tuple, list)):
        values = tuple(radius[:4]) + (0.0,) * (4 - len(radius[:4]))
    else:
        values = (radius,) * 4
    return tuple(min(limit, max(0.0, float(v))) for v in values)
