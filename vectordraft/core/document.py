"""
VectorDraft Document Model

The ShapeStore is the root container for all design data: the ordered
shape collection (paint order), the pages, the active page and the
undo/redo history wrapping every mutation.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Type
import logging
import re

from . import commands
from .geometry import BoundingBox, Point
from .history import HistoryManager
from .properties import PropertyEditRequest, StyleInput, apply_property_edit, apply_style
from .settings import EditorSettings
from .shapes import Shape, Stroke, SolidFill, TYPE_LABELS, new_shape_id
from .spatial import (
    container_ancestor, descendant_ids, find_container_at_point,
    get_shape_bounding_box, shape_index
)
from .text import EstimatedTextMeasurer

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """A named canvas; shapes belong to exactly one page."""
    id: str = field(default_factory=new_shape_id)
    name: str = "Page 1"


_NAME_PATTERN = re.compile(r'^(.*) (\d+)$')


class ShapeStore:
    """
    Owns the shapes, pages and history of one document.

    Every mutation goes through :meth:`apply_change`, so callers can
    chain pure commands from :mod:`vectordraft.core.commands` and get one
    undo entry per call.
    """

    def __init__(self, settings: Optional[EditorSettings] = None,
                 shapes: Sequence[Shape] = (),
                 pages: Optional[Sequence[Page]] = None,
                 active_page_id: Optional[str] = None,
                 measurer=None):
        from ..graphics.gradient_raster import GradientRasterizer

        self.settings = settings or EditorSettings()
        self.measurer = measurer or EstimatedTextMeasurer()
        self.rasterizer = GradientRasterizer(self.settings.raster_cache_size)
        self.history = HistoryManager(shapes, self.settings.history_capacity)
        self._pages: List[Page] = list(pages) if pages else [Page()]
        ids = [p.id for p in self._pages]
        self._active_page_id = active_page_id if active_page_id in ids else ids[0]
        self._counters: Dict[str, int] = {}
        self._style_baseline = None
        self._seed_counters(self.shapes)

    # State ------------------------------------------------------------------

    @property
    def shapes(self):
        return self.history.present

    @property
    def pages(self):
        return tuple(self._pages)

    @property
    def active_page_id(self) -> str:
        return self._active_page_id

    @property
    def active_page(self) -> Page:
        return self.get_page(self._active_page_id)

    def get_shape(self, shape_id: Optional[str]) -> Optional[Shape]:
        if shape_id is None:
            return None
        for shape in self.shapes:
            if shape.id == shape_id:
                return shape
        return None

    def get_page(self, page_id: Optional[str]) -> Optional[Page]:
        for page in self._pages:
            if page.id == page_id:
                return page
        return None

    def shapes_on_page(self, page_id: Optional[str] = None) -> List[Shape]:
        page_id = page_id or self._active_page_id
        return [s for s in self.shapes if s.page_id == page_id]

    def children_of(self, parent_id: Optional[str], page_id: Optional[str] = None) -> List[Shape]:
        page_id = page_id or self._active_page_id
        return [s for s in self.shapes if s.parent_id == parent_id and s.page_id == page_id]

    def descendant_ids(self, shape_id: str):
        return descendant_ids(self.shapes, shape_id)

    def container_ancestor(self, shape_id: str) -> Optional[Shape]:
        return container_ancestor(self.shapes, shape_id)

    def bounding_box(self, shape_id: str) -> Optional[BoundingBox]:
        return get_shape_bounding_box(self.get_shape(shape_id), self.measurer)

    def container_at(self, point: Point, excluded_ids: Iterable[str] = ()) -> Optional[Shape]:
        return find_container_at_point(self.shapes, point, excluded_ids, self._active_page_id)

    def layer_counts(self) -> Dict[str, int]:
        """Number of shapes on each page, keyed by page id."""
        counts = {page.id: 0 for page in self._pages}
        for shape in self.shapes:
            if shape.page_id in counts:
                counts[shape.page_id] += 1
        return counts

    # History ----------------------------------------------------------------

    # A style preview baseline only survives while nothing else is recorded.
    def apply_change(self, updater: Callable, previous=None, record: bool = True) -> bool:
        if record:
            self._style_baseline = None
        return self.history.apply_change(updater, previous, record)

    def commit(self, baseline) -> bool:
        self._style_baseline = None
        return self.history.commit(baseline)

    def revert(self, baseline) -> bool:
        self._style_baseline = None
        return self.history.revert(baseline)

    def undo(self) -> bool:
        self._style_baseline = None
        return self.history.undo()

    def redo(self) -> bool:
        self._style_baseline = None
        return self.history.redo()

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def add_change_callback(self, callback):
        self.history.add_change_callback(callback)

    def remove_change_callback(self, callback):
        self.history.remove_change_callback(callback)

    def new_document(self) -> None:
        """Start over with one empty page, fresh counters and no history."""
        self._pages = [Page()]
        self._active_page_id = self._pages[0].id
        self._counters.clear()
        self._style_baseline = None
        self.rasterizer.clear()
        self.history.reset(())
        logger.info("New document")

    # Naming -----------------------------------------------------------------

    def _seed_counters(self, shapes: Iterable[Shape]) -> None:
        for shape in shapes:
            match = _NAME_PATTERN.match(shape.name or "")
            if match:
                label, number = match.group(1), int(match.group(2))
                self._counters[label] = max(self._counters.get(label, 0), number)

    def next_name(self, shape_type: str) -> str:
        """Next default name for a type, e.g. ``"Rectangle 3"``."""
        label = TYPE_LABELS.get(shape_type, shape_type.capitalize())
        self._counters[label] = self._counters.get(label, 0) + 1
        return f"{label} {self._counters[label]}"

    def peek_name(self, shape_type: str) -> str:
        """The name ``next_name`` would hand out, without consuming it."""
        label = TYPE_LABELS.get(shape_type, shape_type.capitalize())
        return f"{label} {self._counters.get(label, 0) + 1}"

    # Shape creation and edits -----------------------------------------------

    def build_shape(self, cls: Type[Shape], **fields) -> Shape:
        """
        Instantiate a shape with the editor defaults: a numbered name, the
        active page, the default fill and stroke for its type.
        """
        if 'name' not in fields:
            fields['name'] = self.next_name(cls.TYPE)
        fields.setdefault('page_id', self._active_page_id)
        fill, stroke = self.default_style(cls.TYPE)
        fields.setdefault('fill', fill)
        fields.setdefault('stroke', stroke)
        return cls(**fields)

    def default_style(self, shape_type: str):
        """Default ``(fill, stroke)`` for new shapes of a type."""
        fill = None if shape_type in ('line', 'group') else SolidFill(self.settings.default_fill)
        stroke = Stroke(self.settings.default_stroke, self.settings.stroke_width_for(shape_type))
        return fill, stroke

    def add_shape(self, shape: Shape, record: bool = True) -> bool:
        if not shape.page_id:
            shape = replace(shape, page_id=self._active_page_id)
        return self.apply_change(lambda s: commands.add_shape(s, shape), record=record)

    def remove_shapes(self, ids: Iterable[str]) -> bool:
        ids = list(ids)
        return self.apply_change(lambda s: commands.remove_shapes(s, ids))

    def update_shape(self, shape_id: str, **changes) -> bool:
        return self.apply_change(lambda s: commands.update_shape(s, shape_id, **changes))

    def move_shapes(self, ids: Iterable[str], dx: float, dy: float) -> bool:
        ids = list(ids)
        return self.apply_change(lambda s: commands.move_shapes(s, ids, dx, dy))

    def reparent_shape(self, shape_id: str, parent_id: Optional[str]) -> bool:
        return self.apply_change(lambda s: commands.reparent_shape(s, shape_id, parent_id))

    def bring_to_front(self, shape_id: str) -> bool:
        return self.apply_change(lambda s: commands.bring_to_front(s, shape_id))

    def move_shape_up(self, shape_id: str) -> bool:
        return self.apply_change(lambda s: commands.move_shape_up(s, shape_id))

    def move_shape_down(self, shape_id: str) -> bool:
        return self.apply_change(lambda s: commands.move_shape_down(s, shape_id))

    def group_shapes(self, ids: Iterable[str]) -> Optional[str]:
        """Group shapes and return the new group's id (None if nothing grouped)."""
        ids = list(ids)
        group_id = new_shape_id()
        name = self.next_name('group')
        changed = self.apply_change(
            lambda s: commands.group_shapes(s, ids, group_id=group_id, name=name))
        return group_id if changed else None

    def ungroup(self, group_id: str) -> bool:
        return self.apply_change(lambda s: commands.ungroup(s, group_id))

    def duplicate_shapes(self, ids: Iterable[str]) -> bool:
        ids = list(ids)
        return self.apply_change(lambda s: commands.duplicate_shapes(s, ids))

    def convert_to_path(self, shape_id: str) -> bool:
        return self.apply_change(lambda s: commands.convert_to_path(s, shape_id))

    def revert_path(self, shape_id: str) -> bool:
        return self.apply_change(lambda s: commands.revert_path(s, shape_id))

    def apply_property_edit(self, target_id: Optional[str], request: PropertyEditRequest) -> bool:
        """Apply an inspector edit to one shape; True if anything changed."""
        return self.apply_change(lambda s: apply_property_edit(s, target_id, request))

    def apply_style(self, ids: Iterable[str], style: StyleInput) -> bool:
        """
        Apply fill/stroke input to shapes.

        Preview input (a colour picker being dragged) moves the present
        without history; the next non-preview input records a single
        entry against the state before the first preview.
        """
        ids = list(ids)
        if style.preview:
            if self._style_baseline is None:
                self._style_baseline = self.shapes
            return self.apply_change(lambda s: apply_style(s, ids, style), record=False)
        baseline, self._style_baseline = self._style_baseline, None
        if baseline is not None:
            self.apply_change(lambda s: apply_style(s, ids, style), record=False)
            return self.commit(baseline)
        return self.apply_change(lambda s: apply_style(s, ids, style))

    # Pages ------------------------------------------------------------------

    def _unique_page_name(self, base: str) -> str:
        names = {p.name for p in self._pages}
        if base not in names:
            return base
        n = 2
        while f"{base} {n}" in names:
            n += 1
        return f"{base} {n}"

    def add_page(self, name: Optional[str] = None) -> Page:
        """Append a page and make it active."""
        page = Page(name=name or self._unique_page_name(f"Page {len(self._pages) + 1}"))
        self._pages.append(page)
        self._active_page_id = page.id
        logger.info("Added page %s", page.name)
        return page

    def rename_page(self, page_id: str, name: str) -> bool:
        page = self.get_page(page_id)
        name = (name or "").strip()
        if page is None or not name or name == page.name:
            return False
        page.name = name
        logger.info("Renamed page %s to %s", page_id, name)
        return True

    def duplicate_page(self, page_id: str) -> Optional[Page]:
        """
        Copy a page and all of its shapes. Copies get fresh ids with their
        parent links remapped into the copied set.
        """
        source = self.get_page(page_id)
        if source is None:
            return None
        page = Page(name=self._unique_page_name(f"{source.name} copy"))
        self._pages.insert(self._pages.index(source) + 1, page)
        originals = [s for s in self.shapes if s.page_id == page_id]
        if originals:
            self.apply_change(lambda s: tuple(s) + tuple(commands.clone_shapes(originals, page.id)))
        self._active_page_id = page.id
        logger.info("Duplicated page %s as %s", source.name, page.name)
        return page

    def delete_page(self, page_id: str) -> bool:
        """
        Delete a page with its shapes. The last remaining page cannot be
        deleted. History is cleared since earlier snapshots would refer to
        the removed page.
        """
        page = self.get_page(page_id)
        if page is None or len(self._pages) <= 1:
            return False
        index = self._pages.index(page)
        self._pages.remove(page)
        if self._active_page_id == page_id:
            self._active_page_id = self._pages[min(index, len(self._pages) - 1)].id
        self.history.reset(tuple(s for s in self.shapes if s.page_id != page_id))
        logger.info("Deleted page %s", page.name)
        return True

    def reorder_page(self, dragged_id: str, target_id: str, place_after: bool = False) -> bool:
        """Move ``dragged_id`` before (or after) ``target_id``."""
        dragged = self.get_page(dragged_id)
        target = self.get_page(target_id)
        if dragged is None or target is None or dragged is target:
            return False
        order = [p for p in self._pages if p is not dragged]
        index = order.index(target) + (1 if place_after else 0)
        order.insert(index, dragged)
        if order == self._pages:
            return False
        self._pages = order
        return True

    def set_active_page(self, page_id: str) -> bool:
        if self.get_page(page_id) is None or page_id == self._active_page_id:
            return False
        self._active_page_id = page_id
        return True
