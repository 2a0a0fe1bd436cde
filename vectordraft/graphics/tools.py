"""
Drawing Tools for VectorDraft

Provides the interaction base class and the drawing tools. Each tool
handles pointer interaction in world coordinates and creates shapes in
a ShapeStore.

Every interaction keeps the store snapshot taken when it started (its
baseline). Pointer moves apply previews that do not touch history;
finishing commits the baseline as a single undo entry and cancelling
restores it.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Optional
import logging
import math

from ..core import commands
from ..core.geometry import Point
from ..core.path import (
    MIN_SEGMENT_LENGTH, PathNodeType, PathPoint, create_path_point
)
from ..core.shapes import (
    Circle, Ellipse, Frame, Line, PathShape, Rectangle, Shape, Star, Text,
    make_polygon, new_shape_id, rematerialize
)

logger = logging.getLogger(__name__)


class ToolType(Enum):
    """Types of tools."""
    SELECT = "select"
    HAND = "hand"
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    CIRCLE = "circle"
    LINE = "line"
    POLYGON = "polygon"
    STAR = "star"
    FRAME = "frame"
    TEXT = "text"
    PEN = "pen"


class InteractionState(Enum):
    """What the pointer is currently doing."""
    IDLE = "idle"
    DRAWING = "drawing"
    MOVING = "moving"
    DRAGGING_ANCHOR = "dragging_anchor"
    DRAGGING_HANDLE = "dragging_handle"
    DRAGGING_CORNER_RADIUS = "dragging_corner_radius"
    DRAGGING_GRADIENT_HANDLE = "dragging_gradient_handle"
    ROTATING = "rotating"
    PANNING = "panning"
    MARQUEEING = "marqueeing"


class Interaction:
    """
    Base state machine for a pointer interaction on a ShapeStore.

    Holds the target id, the baseline snapshot and the pointer origin.
    A new interaction cannot begin while a baseline is held.
    """

    def __init__(self, store):
        self.store = store
        self.state = InteractionState.IDLE
        self.target_id: Optional[str] = None
        self._baseline = None
        self._origin: Optional[Point] = None

    @property
    def is_active(self) -> bool:
        return self._baseline is not None

    @property
    def baseline(self):
        return self._baseline

    def _begin(self, state: InteractionState, origin: Point,
               target_id: Optional[str] = None) -> bool:
        if self._baseline is not None:
            return False
        self._baseline = self.store.shapes
        self._origin = origin
        self.target_id = target_id
        self.state = state
        return True

    def _preview(self, updater: Callable) -> bool:
        """Show ``updater(baseline)`` without recording history."""
        if self._baseline is None:
            return False
        baseline = self._baseline
        return self.store.apply_change(lambda _: updater(baseline), record=False)

    def _commit(self) -> bool:
        """Record one history entry for everything previewed."""
        if self._baseline is None:
            return False
        committed = self.store.commit(self._baseline)
        self._reset()
        return committed

    def cancel(self) -> bool:
        """Restore the baseline (Escape)."""
        if self._baseline is None:
            return False
        self.store.revert(self._baseline)
        self._reset()
        return True

    def _reset(self):
        self._baseline = None
        self._origin = None
        self.target_id = None
        self.state = InteractionState.IDLE


class DrawingTool(Interaction, ABC):
    """
    Abstract base class for drawing tools.

    Each tool implements:
    - Pointer press/move/release handling
    - A live preview shape while drawing
    - Final shape creation (or removal when it stayed too small)
    """

    tool_type: ToolType = ToolType.SELECT

    def __init__(self, store):
        super().__init__(store)
        self._shape_id: Optional[str] = None
        self._name: str = ""
        self._parent_id: Optional[str] = None

    @abstractmethod
    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        """
        Build the shape spanning ``start`` to ``current``.

        Args:
            start: Press point in world coordinates
            current: Current pointer position in world coordinates
            fields: Identity fields (id, name, parent, page) to pass through

        Returns:
            The shape to preview
        """
        pass

    @abstractmethod
    def shape_size(self, start: Point, current: Point) -> float:
        """Size compared against the minimum shape size."""
        pass

    def _fields(self) -> dict:
        return {
            'id': self._shape_id,
            'name': self._name,
            'parent_id': self._parent_id,
            'page_id': self.store.active_page_id,
        }

    def _show(self, current: Point) -> None:
        shape = self.build_shape(self._origin, current, **self._fields())
        self._preview(lambda shapes: commands.add_shape(shapes, shape))

    def start_drawing(self, point: Point) -> bool:
        """
        Start drawing at the given point.

        The new shape is parented to the container under the point.
        """
        if not self._begin(InteractionState.DRAWING, point):
            return False
        container = self.store.container_at(point)
        self._parent_id = container.id if container is not None else None
        self._shape_id = new_shape_id()
        self._name = self.store.peek_name(self.shape_type)
        self.target_id = self._shape_id
        self._show(point)
        return True

    def update_drawing(self, point: Point) -> None:
        """Update the preview as the pointer moves."""
        if self.state != InteractionState.DRAWING:
            return
        self._show(point)

    def finish_drawing(self, point: Point) -> Optional[Shape]:
        """
        Finish drawing.

        Returns:
            The created shape, or None if it was below the minimum size
            (in which case it is removed without a history entry)
        """
        if self.state != InteractionState.DRAWING:
            return None
        self._show(point)
        if self.shape_size(self._origin, point) < self.store.settings.min_shape_size:
            logger.debug("Discarding %s below minimum size", self.shape_type)
            self.cancel()
            return None
        return self._keep()

    def _keep(self) -> Optional[Shape]:
        """Commit the drawn shape under a freshly allocated name."""
        shape_id = self._shape_id
        name = self.store.next_name(self.shape_type)
        self.store.apply_change(lambda s: commands.update_shape(s, shape_id, name=name), record=False)
        self._commit()
        return self.store.get_shape(shape_id)

    def handle_key_press(self, key: str) -> bool:
        """Escape cancels; returns True if the key was handled."""
        if key == "Escape" and self.is_active:
            return self.cancel()
        return False

    @property
    def shape_type(self) -> str:
        return self.tool_type.value

    def _reset(self):
        super()._reset()
        self._shape_id = None
        self._parent_id = None
        self._name = ""


def _span(start: Point, current: Point):
    """Centre, width and height of the box spanned by two points."""
    width = abs(current.x - start.x)
    height = abs(current.y - start.y)
    return Point((start.x + current.x) / 2, (start.y + current.y) / 2), width, height


class _BoxTool(DrawingTool):
    """Tools that drag out an axis-aligned box."""

    def shape_size(self, start: Point, current: Point) -> float:
        _, width, height = _span(start, current)
        return min(width, height)


class RectangleTool(_BoxTool):
    """Tool for drawing rectangles."""
    tool_type = ToolType.RECTANGLE

    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        center, width, height = _span(start, current)
        return self.store.build_shape(Rectangle, x=center.x, y=center.y,
                                      width=width, height=height, **fields)


class FrameTool(_BoxTool):
    """Tool for drawing frames."""
    tool_type = ToolType.FRAME

    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        center, width, height = _span(start, current)
        return self.store.build_shape(Frame, x=center.x, y=center.y,
                                      width=width, height=height, **fields)


class EllipseTool(_BoxTool):
    """Tool for drawing ellipses inside the dragged box."""
    tool_type = ToolType.ELLIPSE

    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        center, width, height = _span(start, current)
        return self.store.build_shape(Ellipse, x=center.x, y=center.y,
                                      radius_x=width / 2, radius_y=height / 2, **fields)


class _RadialTool(DrawingTool):
    """Tools centred on the press point with radius = drag distance."""

    def shape_size(self, start: Point, current: Point) -> float:
        return start.distance_to(current)


class CircleTool(_RadialTool):
    tool_type = ToolType.CIRCLE

    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        return self.store.build_shape(Circle, x=start.x, y=start.y,
                                      radius=start.distance_to(current), **fields)


class PolygonTool(_RadialTool):
    tool_type = ToolType.POLYGON

    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        settings = self.store.settings
        fill, stroke = self.store.default_style(self.shape_type)
        return make_polygon(x=start.x, y=start.y, radius=start.distance_to(current),
                            sides=settings.polygon_sides, fill=fill, stroke=stroke, **fields)


class StarTool(_RadialTool):
    tool_type = ToolType.STAR

    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        settings = self.store.settings
        outer = start.distance_to(current)
        shape = self.store.build_shape(Star, x=start.x, y=start.y,
                                       num_points=settings.star_points,
                                       outer_radius=outer,
                                       inner_radius=outer * settings.star_inner_ratio,
                                       **fields)
        return rematerialize(shape)


class LineTool(DrawingTool):
    """Tool for drawing straight lines."""
    tool_type = ToolType.LINE

    def shape_size(self, start: Point, current: Point) -> float:
        return start.distance_to(current)

    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        return self.store.build_shape(Line, points=(start.x, start.y, current.x, current.y),
                                      **fields)


class TextTool(DrawingTool):
    """
    Tool for creating text boxes.

    A click places an auto-sized text box centred on the point; a drag
    gives it a fixed box.
    """
    tool_type = ToolType.TEXT

    def __init__(self, store, text: str = "Text"):
        super().__init__(store)
        self.text = text

    def shape_size(self, start: Point, current: Point) -> float:
        return math.inf

    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        defaults = self.store.settings.text
        center, width, height = _span(start, current)
        min_size = self.store.settings.min_shape_size
        if width < min_size or height < min_size:
            center, width, height = start, 0.0, 0.0
        return self.store.build_shape(
            Text, x=center.x, y=center.y, width=width, height=height,
            text=self.text,
            font_family=defaults.font_family,
            font_style=defaults.font_style,
            font_size=defaults.font_size,
            line_height=defaults.line_height,
            letter_spacing=defaults.letter_spacing,
            align=defaults.align,
            vertical_align=defaults.vertical_align,
            text_decoration=defaults.text_decoration,
            **fields)


class PenTool(DrawingTool):
    """
    Tool for drawing bezier paths point by point.

    - click adds a corner point
    - click-drag adds a smooth point whose right handle follows the
      pointer and whose left handle mirrors it
    - clicking the first point again closes the path and finishes
    - Enter finishes an open path, Escape discards it
    """
    tool_type = ToolType.PEN

    def __init__(self, store):
        super().__init__(store)
        self._points: List[PathPoint] = []
        self._pressed = False
        self._closed = False

    @property
    def shape_type(self) -> str:
        return PathShape.TYPE

    def shape_size(self, start: Point, current: Point) -> float:
        return math.inf

    def build_shape(self, start: Point, current: Point, **fields) -> Shape:
        return self.store.build_shape(PathShape, points=tuple(self._points),
                                      closed=self._closed, **fields)

    def _show_points(self) -> None:
        self._show(self._origin)

    def start_drawing(self, point: Point) -> bool:
        """Press: begin a path, add a point, or close on the first point."""
        if not self.is_active:
            if not super().start_drawing(point):
                return False
            self._points = [create_path_point(point.x, point.y)]
            self._pressed = True
            self._show_points()
            return True
        first = self._points[0].anchor
        if len(self._points) >= 2 and first.distance_to(point) <= self.store.settings.close_path_distance:
            self._closed = True
            self._show_points()
            self._pressed = False
            return True
        self._points.append(create_path_point(point.x, point.y))
        self._pressed = True
        self._show_points()
        return True

    def update_drawing(self, point: Point) -> None:
        """Drag with the button held: pull out smooth handles on the last point."""
        if not self._pressed or not self._points:
            return
        last = self._points[-1]
        if last.anchor.distance_to(point) < MIN_SEGMENT_LENGTH:
            return
        mirrored = Point(2 * last.x - point.x, 2 * last.y - point.y)
        self._points[-1] = create_path_point(last.x, last.y, PathNodeType.SMOOTH,
                                             left=mirrored, right=point)
        self._show_points()

    def finish_drawing(self, point: Point) -> Optional[Shape]:
        """Release: returns the path once it has been closed."""
        self._pressed = False
        if self._closed:
            return self.complete()
        return None

    def complete(self) -> Optional[Shape]:
        """Finish the path; fewer than two points discards it."""
        if not self.is_active:
            return None
        if len(self._points) < 2:
            self.cancel()
            return None
        return self._keep()

    def handle_key_press(self, key: str) -> bool:
        if key in ("Enter", "Return") and self.is_active:
            self.complete()
            return True
        return super().handle_key_press(key)

    def _reset(self):
        super()._reset()
        self._points = []
        self._pressed = False
        self._closed = False


def create_tool(tool_type: ToolType, store) -> DrawingTool:
    """
    Factory function to create a tool instance.

    Args:
        tool_type: Type of tool to create
        store: ShapeStore the tool draws into

    Returns:
        DrawingTool instance
    """
    tool_map = {
        ToolType.RECTANGLE: RectangleTool,
        ToolType.ELLIPSE: EllipseTool,
        ToolType.CIRCLE: CircleTool,
        ToolType.LINE: LineTool,
        ToolType.POLYGON: PolygonTool,
        ToolType.STAR: StarTool,
        ToolType.FRAME: FrameTool,
        ToolType.TEXT: TextTool,
        ToolType.PEN: PenTool,
    }

    tool_class = tool_map.get(tool_type)
    if tool_class:
        return tool_class(store)

    raise ValueError(f"Unknown tool type: {tool_type}")
