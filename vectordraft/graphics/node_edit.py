"""
Node Editing Module

Direct manipulation of path anchors and bezier handles, plus the
one-shot node operations (change type, insert, delete) used by the
path editing mode.
"""

from dataclasses import replace
from typing import List, Optional
import logging

from ..core.commands import remove_shapes, replace_shape
from ..core.geometry import Point
from ..core.path import (
    PathNodeType, PathPoint, get_handle, insert_point_on_segment,
    remove_path_point, set_handle, set_node_type, translate_path_points,
    update_handle_symmetry
)
from ..core.shapes import PathShape
from ..core.spatial import shape_index
from .tools import Interaction, InteractionState

logger = logging.getLogger(__name__)


HANDLE_SIDES = ('left', 'right')


def _path(shapes, shape_id: str) -> Optional[PathShape]:
    shape = shape_index(shapes).get(shape_id)
    return shape if isinstance(shape, PathShape) else None


def _with_point(shapes, path: PathShape, index: int, point: PathPoint):
    points = list(path.points)
    points[index] = point
    return replace_shape(shapes, replace(path, points=tuple(points)))


class NodeEditor(Interaction):
    """
    Anchor and handle dragging on a PathShape.

    Dragging an anchor carries its handles along. Dragging a handle of a
    smooth point mirrors the opposite handle; disconnected points move
    one handle only.
    """

    def __init__(self, store):
        super().__init__(store)
        self.index: Optional[int] = None
        self.side: Optional[str] = None

    def find_node_at(self, shape_id: str, point: Point,
                     tolerance: Optional[float] = None) -> Optional[int]:
        """Index of the anchor within ``tolerance`` of ``point``, topmost first."""
        path = _path(self.store.shapes, shape_id)
        if path is None:
            return None
        reach = self.store.settings.hit_tolerance * 2 if tolerance is None else tolerance
        for index in reversed(range(len(path.points))):
            if path.points[index].anchor.distance_to(point) <= reach:
                return index
        return None

    # Dragging ---------------------------------------------------------------

    def start_anchor_drag(self, shape_id: str, index: int, point: Point) -> bool:
        path = _path(self.store.shapes, shape_id)
        if path is None or path.locked or not 0 <= index < len(path.points):
            return False
        if not self._begin(InteractionState.DRAGGING_ANCHOR, point, shape_id):
            return False
        self.index = index
        return True

    def start_handle_drag(self, shape_id: str, index: int, side: str, point: Point) -> bool:
        path = _path(self.store.shapes, shape_id)
        if path is None or path.locked or side not in HANDLE_SIDES:
            return False
        if not 0 <= index < len(path.points) or get_handle(path.points[index], side) is None:
            return False
        if not self._begin(InteractionState.DRAGGING_HANDLE, point, shape_id):
            return False
        self.index = index
        self.side = side
        return True

    def _dragged(self, shapes, point: Point):
        path = _path(shapes, self.target_id)
        if path is None:
            return shapes
        node = path.points[self.index]
        if self.state == InteractionState.DRAGGING_ANCHOR:
            dx = point.x - self._origin.x
            dy = point.y - self._origin.y
            moved = translate_path_points([node], dx, dy)[0]
        else:
            start = get_handle(node, self.side)
            target = Point(start.x + point.x - self._origin.x, start.y + point.y - self._origin.y)
            moved = update_handle_symmetry(set_handle(node, self.side, target), self.side)
        return _with_point(shapes, path, self.index, moved)

    def update_drag(self, point: Point) -> None:
        if self.state not in (InteractionState.DRAGGING_ANCHOR, InteractionState.DRAGGING_HANDLE):
            return
        self._preview(lambda shapes: self._dragged(shapes, point))

    def finish_drag(self, point: Point) -> bool:
        if self.state not in (InteractionState.DRAGGING_ANCHOR, InteractionState.DRAGGING_HANDLE):
            return False
        self.update_drag(point)
        return self._commit()

    def _reset(self):
        super()._reset()
        self.index = None
        self.side = None

    # One-shot node operations --------------------------------------------------

    def set_node_type(self, shape_id: str, index: int, node_type) -> bool:
        """Change a node's type; smooth nodes get default handles where missing."""
        offset = self.store.settings.smooth_handle_offset

        def update(shapes):
            path = _path(shapes, shape_id)
            if path is None or not 0 <= index < len(path.points):
                return shapes
            node = set_node_type(path.points[index], PathNodeType.parse(node_type), offset)
            return _with_point(shapes, path, index, node)

        return self.store.apply_change(update)

    def insert_node(self, shape_id: str, index: int, t: float = 0.5) -> bool:
        """Insert a corner on the segment after ``index``."""
        def update(shapes):
            path = _path(shapes, shape_id)
            if path is None:
                return shapes
            points: List[PathPoint] = insert_point_on_segment(path.points, index, t)
            if len(points) == len(path.points):
                return shapes
            return replace_shape(shapes, replace(path, points=tuple(points)))

        return self.store.apply_change(update)

    def delete_node(self, shape_id: str, index: int) -> bool:
        """
        Delete a node. A path left with a single point is removed; paths
        otherwise keep at least two points.
        """
        def update(shapes):
            path = _path(shapes, shape_id)
            if path is None or not 0 <= index < len(path.points):
                return shapes
            if len(path.points) <= 2:
                logger.debug("Removing path %s with too few points", shape_id)
                return remove_shapes(shapes, [shape_id])
            points = remove_path_point(path.points, index)
            closed = path.closed and len(points) >= 3
            return replace_shape(shapes, replace(path, points=tuple(points), closed=closed))

        return self.store.apply_change(update)
