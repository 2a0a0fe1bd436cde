"""
Transform Operations for VectorDraft

Pointer-driven edits of a single shape:
- Rotation around the bounding box centre
- Corner radius dragging
- Gradient handle dragging

Each runs as an interaction: previews from the baseline, one history
entry on release, the baseline restored on cancel.
"""

from dataclasses import replace
from typing import Optional
import math

from ..core.commands import replace_shape
from ..core.geometry import Point, clamp
from ..core.gradient import handle_from_absolute, normalize_gradient, resolve_gradient_handles
from ..core.properties import (
    CORNER_RADIUS, ROTATION, PropertyEditRequest, apply_property_edit
)
from ..core.shapes import Frame, GradientFill, PathShape, Polygon, Rectangle, corner_radii
from ..core.spatial import get_shape_bounding_box, shape_index
from .tools import Interaction, InteractionState


class RotationInteraction(Interaction):
    """Rotate a shape by dragging around its centre."""

    def __init__(self, store):
        super().__init__(store)
        self._center: Optional[Point] = None
        self._start_angle = 0.0
        self._start_rotation = 0.0

    def start_rotation(self, shape_id: str, point: Point) -> bool:
        shape = self.store.get_shape(shape_id)
        box = get_shape_bounding_box(shape, self.store.measurer)
        if shape is None or shape.locked or box is None:
            return False
        if not self._begin(InteractionState.ROTATING, point, shape_id):
            return False
        self._center = box.center
        self._start_angle = math.atan2(point.y - self._center.y, point.x - self._center.x)
        self._start_rotation = shape.rotation
        return True

    def rotation_for(self, point: Point, snap: bool = False) -> float:
        """Rotation in degrees the shape would get with the pointer at ``point``."""
        angle = math.atan2(point.y - self._center.y, point.x - self._center.x)
        rotation = self._start_rotation + math.degrees(angle - self._start_angle)
        if snap:
            step = self.store.settings.rotation_snap_degrees
            rotation = round(rotation / step) * step
        return rotation % 360.0

    def update_rotation(self, point: Point, snap: bool = False) -> None:
        if self.state != InteractionState.ROTATING:
            return
        request = PropertyEditRequest(ROTATION, self.rotation_for(point, snap))
        target = self.target_id
        self._preview(lambda shapes: apply_property_edit(shapes, target, request))

    def finish_rotation(self, point: Point, snap: bool = False) -> bool:
        if self.state != InteractionState.ROTATING:
            return False
        self.update_rotation(point, snap)
        return self._commit()


def _max_corner_radius(shape) -> float:
    if isinstance(shape, (Rectangle, Frame)):
        return max(0.0, min(shape.width, shape.height) / 2)
    if isinstance(shape, Polygon):
        return max(0.0, shape.radius)
    return math.inf


def _current_corner_radius(shape) -> float:
    if isinstance(shape, (Rectangle, Frame)):
        return max(corner_radii(shape))
    return shape.corner_radius


class CornerRadiusInteraction(Interaction):
    """
    Drag a corner handle towards the shape centre to round its corners.

    The radius grows by the distance the pointer moves towards the
    centre and is clamped to what the shape can hold.
    """

    SUPPORTED = (Rectangle, Frame, Polygon, PathShape)

    def __init__(self, store):
        super().__init__(store)
        self._center: Optional[Point] = None
        self._start_radius = 0.0
        self._limit = math.inf

    def start_corner_drag(self, shape_id: str, point: Point) -> bool:
        shape = self.store.get_shape(shape_id)
        if not isinstance(shape, self.SUPPORTED) or shape.locked:
            return False
        if isinstance(shape, PathShape) and not shape.closed:
            return False
        box = get_shape_bounding_box(shape, self.store.measurer)
        if box is None or not self._begin(InteractionState.DRAGGING_CORNER_RADIUS, point, shape_id):
            return False
        self._center = box.center
        self._start_radius = _current_corner_radius(shape)
        self._limit = _max_corner_radius(shape)
        return True

    def radius_for(self, point: Point) -> float:
        inward = self._center.distance_to(self._origin) - self._center.distance_to(point)
        return clamp(self._start_radius + inward, 0.0, self._limit)

    def update_corner_drag(self, point: Point) -> None:
        if self.state != InteractionState.DRAGGING_CORNER_RADIUS:
            return
        request = PropertyEditRequest(CORNER_RADIUS, self.radius_for(point))
        target = self.target_id
        self._preview(lambda shapes: apply_property_edit(shapes, target, request))

    def finish_corner_drag(self, point: Point) -> bool:
        if self.state != InteractionState.DRAGGING_CORNER_RADIUS:
            return False
        self.update_corner_drag(point)
        return self._commit()


class GradientHandleInteraction(Interaction):
    """Drag the start or end handle of a shape's gradient fill."""

    def __init__(self, store):
        super().__init__(store)
        self._side = 'end'

    def handle_positions(self, shape_id: str):
        """Absolute ``(start, end)`` handle positions, or None without a gradient."""
        shape = self.store.get_shape(shape_id)
        if shape is None or not isinstance(shape.fill, GradientFill):
            return None
        box = get_shape_bounding_box(shape, self.store.measurer)
        if box is None:
            return None
        return resolve_gradient_handles(normalize_gradient(shape.fill.gradient), box)

    def start_handle_drag(self, shape_id: str, side: str, point: Point) -> bool:
        if side not in ('start', 'end') or self.handle_positions(shape_id) is None:
            return False
        if not self._begin(InteractionState.DRAGGING_GRADIENT_HANDLE, point, shape_id):
            return False
        self._side = side
        return True

    def _moved(self, shapes, point: Point):
        shape = shape_index(shapes).get(self.target_id)
        box = get_shape_bounding_box(shape, self.store.measurer)
        if shape is None or box is None or not isinstance(shape.fill, GradientFill):
            return shapes
        gradient = normalize_gradient(shape.fill.gradient)
        handle = handle_from_absolute(point, box)
        gradient = replace(gradient, handles=replace(gradient.handles, **{self._side: handle}))
        return replace_shape(shapes, replace(shape, fill=GradientFill(gradient)))

    def update_handle_drag(self, point: Point) -> None:
        if self.state != InteractionState.DRAGGING_GRADIENT_HANDLE:
            return
        self._preview(lambda shapes: self._moved(shapes, point))

    def finish_handle_drag(self, point: Point) -> bool:
        if self.state != InteractionState.DRAGGING_GRADIENT_HANDLE:
            return False
        self.update_handle_drag(point)
        return self._commit()
