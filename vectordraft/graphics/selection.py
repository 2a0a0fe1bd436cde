"""
Selection Handling for VectorDraft

Manages selection state, the marquee (rubber band) and moving selected
shapes, including reparenting them into the container they are dropped
on.
"""

from typing import Callable, List, Optional
import logging

from ..core import commands
from ..core.geometry import BoundingBox, Point
from ..core.shapes import Shape
from ..core.spatial import (
    container_ancestor, descendant_ids, find_container_at_point,
    find_shape_at_point, marquee_hits, shape_index
)
from .tools import Interaction, InteractionState
from .viewport import Viewport

logger = logging.getLogger(__name__)


class SelectionManager:
    """
    Manages selection state and operations.

    Features:
    - Single selection and additive (XOR) toggling
    - Marquee selection in screen space
    - Listeners notified with the primary shape (or None)

    The primary shape is the first selected one.
    """

    def __init__(self, store, viewport: Optional[Viewport] = None):
        """
        Initialize selection manager.

        Args:
            store: ShapeStore whose shapes are selected
            viewport: Screen/world mapping for marquee selection
        """
        self.store = store
        self.viewport = viewport or Viewport()
        self._selected_ids: List[str] = []
        self._callbacks: List[Callable[[Optional[Shape]], None]] = []
        self._last_primary: Optional[Shape] = None

        # Marquee
        self.state = InteractionState.IDLE
        self._marquee_start: Optional[Point] = None
        self._marquee_current: Optional[Point] = None

        store.add_change_callback(self._on_shapes_changed)

    # Listeners ----------------------------------------------------------------

    def add_selection_callback(self, callback: Callable[[Optional[Shape]], None]):
        """Register callback invoked with the primary shape on selection change."""
        self._callbacks.append(callback)

    def remove_selection_callback(self, callback: Callable[[Optional[Shape]], None]):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self):
        primary = self.primary_shape
        self._last_primary = primary
        for callback in list(self._callbacks):
            callback(primary)

    def _on_shapes_changed(self, shapes):
        present = shape_index(shapes)
        kept = [i for i in self._selected_ids
                if i in present and present[i].page_id == self.store.active_page_id]
        pruned = kept != self._selected_ids
        self._selected_ids = kept
        if pruned or self.primary_shape is not self._last_primary:
            self._notify()

    # State --------------------------------------------------------------------

    @property
    def selected_ids(self) -> List[str]:
        return list(self._selected_ids)

    @property
    def primary_id(self) -> Optional[str]:
        return self._selected_ids[0] if self._selected_ids else None

    @property
    def primary_shape(self) -> Optional[Shape]:
        return self.store.get_shape(self.primary_id)

    def get_selected_shapes(self) -> List[Shape]:
        """Get list of currently selected shapes in selection order."""
        by_id = shape_index(self.store.shapes)
        return [by_id[i] for i in self._selected_ids if i in by_id]

    def is_selected(self, shape_id: str) -> bool:
        return shape_id in self._selected_ids

    # Operations ---------------------------------------------------------------

    def set_selection(self, ids) -> bool:
        """Replace the selection; unknown ids are ignored."""
        present = shape_index(self.store.shapes)
        new_ids = []
        for shape_id in ids:
            if shape_id in present and shape_id not in new_ids:
                new_ids.append(shape_id)
        if new_ids == self._selected_ids:
            return False
        self._selected_ids = new_ids
        self._notify()
        return True

    def clear_selection(self) -> bool:
        return self.set_selection([])

    def toggle(self, shape_id: str) -> bool:
        """Additive click: add if unselected, remove if selected."""
        if shape_id in self._selected_ids:
            return self.set_selection([i for i in self._selected_ids if i != shape_id])
        return self.set_selection(self._selected_ids + [shape_id])

    def select_all(self) -> bool:
        """Select every top-level visible, unlocked shape on the active page."""
        ids = [s.id for s in self.store.shapes_on_page()
               if s.parent_id is None and s.visible and not s.locked]
        return self.set_selection(ids)

    def target_at(self, point: Point) -> Optional[Shape]:
        """
        Shape a click at ``point`` (world) selects: the topmost hit, or
        the outermost group enclosing it.
        """
        hit = find_shape_at_point(self.store.shapes, point, self.store.active_page_id,
                                  self.store.measurer,
                                  tolerance=self.store.settings.hit_tolerance)
        if hit is None:
            return None
        group = container_ancestor(self.store.shapes, hit.id)
        return group or hit

    def select_at(self, point: Point, additive: bool = False) -> Optional[str]:
        """
        Click selection.

        Args:
            point: Click position in world coordinates
            additive: Shift-click, toggles the hit shape

        Returns:
            Id of the shape clicked, or None for empty canvas
        """
        target = self.target_at(point)
        if target is None:
            if not additive:
                self.clear_selection()
            return None
        if additive:
            self.toggle(target.id)
        elif target.id not in self._selected_ids:
            self.set_selection([target.id])
        return target.id

    def delete_selection(self) -> bool:
        """Remove the selected shapes (with their contents)."""
        ids = self.selected_ids
        if not ids:
            return False
        return self.store.remove_shapes(ids)

    # Marquee ------------------------------------------------------------------

    @property
    def marquee_rect(self) -> Optional[BoundingBox]:
        """Current marquee in screen coordinates."""
        if self._marquee_start is None or self._marquee_current is None:
            return None
        return BoundingBox.from_points([self._marquee_start, self._marquee_current])

    def start_marquee(self, screen_point: Point) -> bool:
        if self.state != InteractionState.IDLE:
            return False
        self.state = InteractionState.MARQUEEING
        self._marquee_start = screen_point
        self._marquee_current = screen_point
        return True

    def update_marquee(self, screen_point: Point) -> None:
        if self.state == InteractionState.MARQUEEING:
            self._marquee_current = screen_point

    def finish_marquee(self, screen_point: Optional[Point] = None,
                       additive: bool = False) -> List[str]:
        """
        Select the shapes whose rendered rectangle intersects the marquee.
        Additive marquees toggle each hit against the current selection.

        Returns:
            The ids hit by the marquee
        """
        if self.state != InteractionState.MARQUEEING:
            return []
        if screen_point is not None:
            self._marquee_current = screen_point
        rect = self.marquee_rect
        self.cancel_marquee()
        hits = marquee_hits(self.store.shapes, rect, self.viewport.world_box_to_screen,
                            self.store.active_page_id, self.store.measurer)
        if additive:
            selection = list(self._selected_ids)
            for shape_id in hits:
                if shape_id in selection:
                    selection.remove(shape_id)
                else:
                    selection.append(shape_id)
            self.set_selection(selection)
        else:
            self.set_selection(hits)
        logger.debug("Marquee selected %d shapes", len(hits))
        return hits

    def cancel_marquee(self):
        self.state = InteractionState.IDLE
        self._marquee_start = None
        self._marquee_current = None


class MoveInteraction(Interaction):
    """
    Drag selected shapes.

    Moves are previews from the baseline. While dragging, the container
    under the pointer (never one of the moved shapes or their contents)
    is tracked; on drop every moved root is reparented into it, or to
    the page root when the pointer is over no container.
    """

    def __init__(self, store):
        super().__init__(store)
        self._ids: List[str] = []
        self._excluded = set()
        self.hover_container_id: Optional[str] = None

    def start_move(self, ids, point: Point) -> bool:
        ids = [i for i in ids if self.store.get_shape(i) is not None]
        if not ids or not self._begin(InteractionState.MOVING, point, ids[0]):
            return False
        self._ids = self._roots(ids)
        self._excluded = set(self._ids)
        for shape_id in self._ids:
            self._excluded |= descendant_ids(self._baseline, shape_id)
        return True

    def _roots(self, ids) -> List[str]:
        """Drop ids nested inside other moved ids."""
        nested = set()
        for shape_id in ids:
            nested |= descendant_ids(self.store.shapes, shape_id)
        return [i for i in ids if i not in nested]

    def update_move(self, point: Point) -> None:
        if self.state != InteractionState.MOVING:
            return
        dx = point.x - self._origin.x
        dy = point.y - self._origin.y
        ids = self._ids
        self._preview(lambda shapes: commands.move_shapes(shapes, ids, dx, dy))
        container = find_container_at_point(self.store.shapes, point, self._excluded,
                                            self.store.active_page_id)
        self.hover_container_id = container.id if container is not None else None

    def finish_move(self, point: Point) -> bool:
        """
        Drop: apply the final move, reparent, and record one history entry.

        Returns:
            True if the document changed
        """
        if self.state != InteractionState.MOVING:
            return False
        self.update_move(point)
        parent_id = self.hover_container_id
        for shape_id in self._ids:
            shape = self.store.get_shape(shape_id)
            if shape is not None and shape.parent_id != parent_id:
                self.store.apply_change(
                    lambda shapes, sid=shape_id: commands.reparent_shape(shapes, sid, parent_id),
                    record=False)
        return self._commit()

    def _reset(self):
        super()._reset()
        self._ids = []
        self._excluded = set()
        self.hover_container_id = None
