"""
VectorDraft Shape Commands

Pure state transitions over the shape collection. Each command takes the
current tuple of shapes and returns the next one; when nothing changes
the very same tuple is returned so the history manager can recognise the
no-op.

Structural invariants restored by every command:

- children paint above their container (they follow it in the tuple)
- a group's box is the union of its visible children's boxes
- groups without children are removed
"""

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .conversion import convert_shape_to_path_shape, revert_path_shape
from .geometry import Point, union_bounding_box
from .path import translate_path_points
from .shapes import (
    BoxShape, Circle, Ellipse, Group, Line, PathShape, Polygon, Shape, Star,
    is_container, new_shape_id
)
from .spatial import (
    ancestor_ids, children_by_parent, descendant_ids, get_shape_bounding_box,
    shape_index
)

Shapes = Tuple[Shape, ...]


# Geometry -------------------------------------------------------------------

def translate_shape(shape: Shape, dx: float, dy: float) -> Shape:
    """Move a single shape; children are not touched."""
    if not dx and not dy:
        return shape
    if isinstance(shape, (BoxShape, Circle, Ellipse)):
        return replace(shape, x=shape.x + dx, y=shape.y + dy)
    if isinstance(shape, (Polygon, Star)):
        return replace(shape, x=shape.x + dx, y=shape.y + dy,
                       points=tuple(p + Point(dx, dy) for p in shape.points))
    if isinstance(shape, Line):
        coords = tuple(v + (dx if i % 2 == 0 else dy) for i, v in enumerate(shape.points))
        return replace(shape, points=coords)
    if isinstance(shape, PathShape):
        source = translate_shape(shape.source, dx, dy) if shape.source is not None else None
        return replace(shape, points=tuple(translate_path_points(shape.points, dx, dy)),
                       source=source)
    return shape


def _depth(shape: Shape, by_id: Dict[str, Shape]) -> int:
    depth = 0
    seen = set()
    current = shape
    while current.parent_id is not None and current.parent_id not in seen:
        seen.add(current.parent_id)
        parent = by_id.get(current.parent_id)
        if parent is None:
            break
        depth += 1
        current = parent
    return depth


def recompute_groups(shapes: Sequence[Shape]) -> Shapes:
    """
    Restore the group invariants.

    Empty groups are dropped (repeatedly, since removing one can empty
    its parent), then every group box is refitted to its visible
    children, innermost groups first. A group whose children are all
    hidden keeps its last box.
    """
    current = tuple(shapes)
    while True:
        parents = {s.parent_id for s in current}
        empty = {s.id for s in current if isinstance(s, Group) and s.id not in parents}
        if not empty:
            break
        current = tuple(s for s in current if s.id not in empty)

    groups = [s for s in current if isinstance(s, Group)]
    if not groups:
        return current if len(current) != len(shapes) else tuple(shapes)

    by_id = shape_index(current)
    groups.sort(key=lambda g: _depth(g, by_id), reverse=True)
    index = children_by_parent(current)
    for group in groups:
        group = by_id[group.id]
        box = union_bounding_box(
            get_shape_bounding_box(by_id[child.id])
            for child in index.get(group.id, ())
            if by_id[child.id].visible
        )
        if box is None:
            continue
        center = box.center
        if (group.x, group.y, group.width, group.height, group.rotation) != \
                (center.x, center.y, box.width, box.height, 0.0):
            by_id[group.id] = replace(group, x=center.x, y=center.y,
                                      width=box.width, height=box.height, rotation=0.0)

    result = tuple(by_id[s.id] for s in current)
    if len(result) == len(shapes) and all(a is b for a, b in zip(result, shapes)):
        return tuple(shapes)
    return result


# Basic edits ----------------------------------------------------------------

def _subtree_ids(shapes: Sequence[Shape], ids: Iterable[str]) -> Set[str]:
    found: Set[str] = set()
    for shape_id in ids:
        found.add(shape_id)
        found |= descendant_ids(shapes, shape_id)
    return found


def _top_index_of_subtree(shapes: Sequence[Shape], parent_id: str,
                          excluded: Set[str]) -> Optional[int]:
    members = descendant_ids(shapes, parent_id) | {parent_id}
    last = None
    for i, shape in enumerate(shapes):
        if shape.id in members and shape.id not in excluded:
            last = i
    return last


def _place_block(shapes: Sequence[Shape], block_ids: Set[str],
                 parent_id: Optional[str], page_id: str) -> List[Shape]:
    """Move the shapes in ``block_ids`` (kept in order) to the top of ``parent_id``'s children."""
    block = [s for s in shapes if s.id in block_ids]
    rest = [s for s in shapes if s.id not in block_ids]
    if parent_id is None:
        last = None
        for i, shape in enumerate(rest):
            if shape.page_id == page_id:
                last = i
        insert_at = len(rest) if last is None else last + 1
    else:
        top = _top_index_of_subtree(rest, parent_id, block_ids)
        insert_at = len(rest) if top is None else top + 1
    return rest[:insert_at] + block + rest[insert_at:]


def add_shape(shapes: Sequence[Shape], shape: Shape) -> Shapes:
    """
    Add a shape on top of its parent's children (or of its page when the
    parent is None or not a container on that page).
    """
    by_id = shape_index(shapes)
    parent = by_id.get(shape.parent_id) if shape.parent_id else None
    if shape.parent_id is not None and (not is_container(parent) or parent.page_id != shape.page_id):
        shape = replace(shape, parent_id=None)
    placed = _place_block(list(shapes) + [shape], {shape.id}, shape.parent_id, shape.page_id)
    return recompute_groups(placed)


def remove_shapes(shapes: Sequence[Shape], ids: Iterable[str]) -> Shapes:
    """Remove shapes together with everything they contain."""
    doomed = _subtree_ids(shapes, ids) & set(shape_index(shapes))
    if not doomed:
        return tuple(shapes)
    return recompute_groups([s for s in shapes if s.id not in doomed])


def replace_shape(shapes: Sequence[Shape], new_shape: Shape) -> Shapes:
    """Swap in a new record for the shape with the same id."""
    changed = False
    result = []
    for shape in shapes:
        if shape.id == new_shape.id and shape != new_shape:
            result.append(new_shape)
            changed = True
        else:
            result.append(shape)
    if not changed:
        return tuple(shapes)
    return recompute_groups(result)


def update_shape(shapes: Sequence[Shape], shape_id: str, **changes) -> Shapes:
    """Apply field changes to one shape."""
    shape = shape_index(shapes).get(shape_id)
    if shape is None:
        return tuple(shapes)
    return replace_shape(shapes, replace(shape, **changes))


def move_shapes(shapes: Sequence[Shape], ids: Iterable[str], dx: float, dy: float) -> Shapes:
    """Translate shapes and their descendants, each exactly once."""
    if not dx and not dy:
        return tuple(shapes)
    moving = _subtree_ids(shapes, ids)
    moved = [translate_shape(s, dx, dy) if s.id in moving else s for s in shapes]
    return recompute_groups(moved)


# Hierarchy ------------------------------------------------------------------

def reparent_shape(shapes: Sequence[Shape], shape_id: str,
                   new_parent_id: Optional[str]) -> Shapes:
    """
    Move a shape (with its subtree) under ``new_parent_id`` as the
    topmost child. Targets inside the moving subtree, non-containers and
    containers on another page are ignored.
    """
    by_id = shape_index(shapes)
    shape = by_id.get(shape_id)
    if shape is None:
        return tuple(shapes)
    block = _subtree_ids(shapes, [shape_id])
    if new_parent_id is not None:
        parent = by_id.get(new_parent_id)
        if new_parent_id in block or not is_container(parent) or parent.page_id != shape.page_id:
            return tuple(shapes)
    updated = [replace(s, parent_id=new_parent_id)
               if s.id == shape_id and s.parent_id != new_parent_id else s
               for s in shapes]
    placed = _place_block(updated, block, new_parent_id, shape.page_id)
    result = recompute_groups(placed)
    if all(a is b for a, b in zip(result, shapes)) and len(result) == len(shapes):
        return tuple(shapes)
    return result


def bring_to_front(shapes: Sequence[Shape], shape_id: str) -> Shapes:
    shape = shape_index(shapes).get(shape_id)
    if shape is None:
        return tuple(shapes)
    return reparent_shape(shapes, shape_id, shape.parent_id)


def _sibling_step(shapes: Sequence[Shape], shape_id: str, step: int) -> Shapes:
    by_id = shape_index(shapes)
    shape = by_id.get(shape_id)
    if shape is None:
        return tuple(shapes)
    siblings = [s for s in shapes if s.parent_id == shape.parent_id and s.page_id == shape.page_id]
    pos = next(i for i, s in enumerate(siblings) if s.id == shape_id)
    target = pos + step
    if not 0 <= target < len(siblings):
        return tuple(shapes)
    if step > 0:
        lower, upper = shape, siblings[target]
    else:
        lower, upper = siblings[target], shape
    # Move the lower block directly above the upper block
    lower_block = _subtree_ids(shapes, [lower.id])
    upper_block = _subtree_ids(shapes, [upper.id])
    rest = [s for s in shapes if s.id not in lower_block]
    last_upper = max(i for i, s in enumerate(rest) if s.id in upper_block)
    block = [s for s in shapes if s.id in lower_block]
    return tuple(rest[:last_upper + 1] + block + rest[last_upper + 1:])


def move_shape_up(shapes: Sequence[Shape], shape_id: str) -> Shapes:
    """Swap with the sibling painted directly above."""
    return _sibling_step(shapes, shape_id, 1)


def move_shape_down(shapes: Sequence[Shape], shape_id: str) -> Shapes:
    """Swap with the sibling painted directly below."""
    return _sibling_step(shapes, shape_id, -1)


def group_shapes(shapes: Sequence[Shape], ids: Iterable[str], group_id: Optional[str] = None,
                 name: str = "Group") -> Shapes:
    """
    Wrap shapes in a new group placed where the topmost of them was.

    Only shapes on the page of the first id are grouped; shapes nested
    inside another selected shape move along with it.
    """
    by_id = shape_index(shapes)
    requested = [i for i in ids if i in by_id]
    if not requested:
        return tuple(shapes)
    page_id = by_id[requested[0]].page_id
    selected = {i for i in requested if by_id[i].page_id == page_id}
    roots = {i for i in selected if not set(ancestor_ids(shapes, i)) & selected}
    order = [s.id for s in shapes]
    topmost = max(roots, key=order.index)
    parent_id = by_id[topmost].parent_id

    group = Group(id=group_id or new_shape_id(), name=name, parent_id=parent_id, page_id=page_id)
    moving = _subtree_ids(shapes, roots)
    block = [replace(s, parent_id=group.id) if s.id in roots else s
             for s in shapes if s.id in moving]

    result: List[Shape] = []
    for shape in shapes:
        if shape.id == topmost:
            result.append(group)
            result.extend(block)
        elif shape.id not in moving:
            result.append(shape)
    return recompute_groups(result)


def ungroup(shapes: Sequence[Shape], group_id: str) -> Shapes:
    """Dissolve a group; its children move up to the group's parent."""
    group = shape_index(shapes).get(group_id)
    if not isinstance(group, Group):
        return tuple(shapes)
    result = [replace(s, parent_id=group.parent_id) if s.parent_id == group_id else s
              for s in shapes if s.id != group_id]
    return recompute_groups(result)


# Paths ----------------------------------------------------------------------

def convert_to_path(shapes: Sequence[Shape], shape_id: str) -> Shapes:
    shape = shape_index(shapes).get(shape_id)
    if shape is None:
        return tuple(shapes)
    path = convert_shape_to_path_shape(shape)
    if path is None:
        return tuple(shapes)
    return replace_shape(shapes, path)


def revert_path(shapes: Sequence[Shape], shape_id: str) -> Shapes:
    shape = shape_index(shapes).get(shape_id)
    if not isinstance(shape, PathShape):
        return tuple(shapes)
    original = revert_path_shape(shape)
    if original is None:
        return tuple(shapes)
    return replace_shape(shapes, original)


# Copies ---------------------------------------------------------------------

def clone_shapes(shapes: Sequence[Shape], page_id: Optional[str] = None,
                 offset: Tuple[float, float] = (0.0, 0.0)) -> List[Shape]:
    """
    Copy shapes with fresh ids, remapping parent links inside the copied
    set. Parents outside the set are kept as is.
    """
    mapping = {s.id: new_shape_id() for s in shapes}
    copies = []
    for shape in shapes:
        copy = replace(
            shape,
            id=mapping[shape.id],
            parent_id=mapping.get(shape.parent_id, shape.parent_id),
            page_id=page_id if page_id is not None else shape.page_id,
        )
        copies.append(translate_shape(copy, *offset))
    return copies


def duplicate_shapes(shapes: Sequence[Shape], ids: Iterable[str],
                     offset: Tuple[float, float] = (10.0, 10.0)) -> Shapes:
    """Copy shapes (with their subtrees) on top of the originals."""
    subtree = _subtree_ids(shapes, ids)
    originals = [s for s in shapes if s.id in subtree]
    if not originals:
        return tuple(shapes)
    return recompute_groups(list(shapes) + clone_shapes(originals, offset=offset))
