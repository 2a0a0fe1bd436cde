"""
Project File I/O for VectorDraft

Serializes a ShapeStore (shapes, pages and the active page) to a single
JSON document, either inside a DocumentStorage under the storage key or
as a standalone project file.

Loading is forgiving: malformed records are skipped with a warning,
broken parent links are detached, and anything unreadable yields a
fresh document with one empty page.
"""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging

from ..core.commands import recompute_groups
from ..core.document import Page, ShapeStore
from ..core.geometry import Point, clamp, coerce_number
from ..core.gradient import gradient_to_dict, normalize_gradient
from ..core.path import Handles, PathNodeType, PathPoint
from ..core.settings import EditorSettings
from ..core.shapes import (
    BoxShape, Circle, Ellipse, Fill, Frame, GradientFill, Line, PathShape,
    Polygon, Rectangle, Shape, SHAPE_CLASSES, SolidFill, Star, Stroke, Text,
    is_container, new_shape_id, rematerialize
)
from .storage import DocumentStorage

logger = logging.getLogger(__name__)


# Shapes ---------------------------------------------------------------------

def _point_to_dict(point: Optional[Point]) -> Optional[Dict[str, float]]:
    if point is None:
        return None
    return {'x': point.x, 'y': point.y}


def _dict_to_point(value) -> Optional[Point]:
    if not isinstance(value, dict):
        return None
    return Point(coerce_number(value.get('x')), coerce_number(value.get('y')))


def path_point_to_dict(point: PathPoint) -> Dict[str, Any]:
    data = {'x': point.x, 'y': point.y, 'type': point.type.value}
    if point.handles is not None:
        data['handles'] = {
            'left': _point_to_dict(point.handles.left),
            'right': _point_to_dict(point.handles.right),
        }
    return data


def dict_to_path_point(data: Dict[str, Any]) -> PathPoint:
    handles = None
    raw = data.get('handles')
    if isinstance(raw, dict):
        left = _dict_to_point(raw.get('left'))
        right = _dict_to_point(raw.get('right'))
        if left is not None or right is not None:
            handles = Handles(left, right)
    return PathPoint(
        x=coerce_number(data.get('x')),
        y=coerce_number(data.get('y')),
        type=PathNodeType.parse(data.get('type')),
        handles=handles,
    )


def fill_to_dict(fill: Optional[Fill]) -> Optional[Dict[str, Any]]:
    if isinstance(fill, SolidFill):
        return {'type': 'solid', 'color': fill.color}
    if isinstance(fill, GradientFill):
        return {'type': 'gradient', 'gradient': gradient_to_dict(normalize_gradient(fill.gradient))}
    return None


def dict_to_fill(data) -> Optional[Fill]:
    if not isinstance(data, dict):
        return None
    if data.get('type') == 'gradient':
        return GradientFill(normalize_gradient(data.get('gradient')))
    color = data.get('color')
    return SolidFill(color) if isinstance(color, str) else None


def shape_to_dict(shape: Shape) -> Dict[str, Any]:
    """Convert Shape to dictionary."""
    base_dict = {
        'type': shape.type,
        'id': shape.id,
        'name': shape.name,
        'parent_id': shape.parent_id,
        'page_id': shape.page_id,
        'visible': shape.visible,
        'locked': shape.locked,
        'opacity': shape.opacity,
        'blend_mode': shape.blend_mode,
        'rotation': shape.rotation,
        'fill': fill_to_dict(shape.fill),
        'stroke': {'color': shape.stroke.color, 'width': shape.stroke.width,
                   'type': shape.stroke.type},
    }

    # Add type-specific data
    if isinstance(shape, BoxShape):
        base_dict.update({
            'x': shape.x,
            'y': shape.y,
            'width': shape.width,
            'height': shape.height,
        })
        if isinstance(shape, (Rectangle, Frame)):
            radius = shape.corner_radius
            base_dict['corner_radius'] = list(radius) if isinstance(radius, tuple) else radius
            base_dict['corner_smoothing'] = shape.corner_smoothing
        if isinstance(shape, Frame):
            base_dict['clip_content'] = shape.clip_content
        if isinstance(shape, Text):
            base_dict.update({
                'text': shape.text,
                'font_family': shape.font_family,
                'font_style': shape.font_style,
                'font_size': shape.font_size,
                'line_height': shape.line_height,
                'letter_spacing': shape.letter_spacing,
                'align': shape.align,
                'vertical_align': shape.vertical_align,
                'text_decoration': shape.text_decoration,
            })
    elif isinstance(shape, (Circle, Ellipse)):
        base_dict.update({
            'x': shape.x,
            'y': shape.y,
            'arc_start': shape.arc_start,
            'arc_sweep': shape.arc_sweep,
            'arc_ratio': shape.arc_ratio,
        })
        if isinstance(shape, Circle):
            base_dict['radius'] = shape.radius
        else:
            base_dict['radius_x'] = shape.radius_x
            base_dict['radius_y'] = shape.radius_y
    elif isinstance(shape, Polygon):
        base_dict.update({
            'x': shape.x,
            'y': shape.y,
            'radius': shape.radius,
            'sides': shape.sides,
            'corner_radius': shape.corner_radius,
            'corner_smoothing': shape.corner_smoothing,
            'points': [_point_to_dict(p) for p in shape.points],
        })
    elif isinstance(shape, Star):
        base_dict.update({
            'x': shape.x,
            'y': shape.y,
            'num_points': shape.num_points,
            'outer_radius': shape.outer_radius,
            'inner_radius': shape.inner_radius,
            'points': [_point_to_dict(p) for p in shape.points],
        })
    elif isinstance(shape, Line):
        base_dict['points'] = list(shape.points)
    elif isinstance(shape, PathShape):
        base_dict.update({
            'points': [path_point_to_dict(p) for p in shape.points],
            'closed': shape.closed,
            'corner_radius': shape.corner_radius,
            'source': shape_to_dict(shape.source) if shape.source is not None else None,
        })

    return base_dict


def _corner_radius(value):
    if isinstance(value, (list, tuple)):
        radii = tuple(max(0.0, coerce_number(v)) for v in value[:4])
        return radii + (0.0,) * (4 - len(radii))
    return max(0.0, coerce_number(value))


def dict_to_shape(shape_dict: Dict[str, Any]) -> Optional[Shape]:
    """
    Convert dictionary to Shape.

    Returns None (after logging a warning) for records that are not
    objects or carry an unknown type tag. Numeric fields are coerced.
    """
    if not isinstance(shape_dict, dict):
        logger.warning("Skipping malformed shape record: %r", shape_dict)
        return None
    shape_type = shape_dict.get('type')
    cls = SHAPE_CLASSES.get(shape_type)
    if cls is None:
        logger.warning("Skipping shape with unknown type %r", shape_type)
        return None

    stroke = shape_dict.get('stroke') if isinstance(shape_dict.get('stroke'), dict) else {}
    fields: Dict[str, Any] = {
        'id': str(shape_dict.get('id') or new_shape_id()),
        'name': str(shape_dict.get('name') or ''),
        'parent_id': shape_dict.get('parent_id') or None,
        'page_id': str(shape_dict.get('page_id') or ''),
        'visible': bool(shape_dict.get('visible', True)),
        'locked': bool(shape_dict.get('locked', False)),
        'opacity': clamp(coerce_number(shape_dict.get('opacity'), 1.0), 0.0, 1.0),
        'blend_mode': str(shape_dict.get('blend_mode') or 'normal'),
        'rotation': coerce_number(shape_dict.get('rotation')),
        'fill': dict_to_fill(shape_dict.get('fill')),
        'stroke': Stroke(
            color=str(stroke.get('color') or '#000000'),
            width=max(0.0, coerce_number(stroke.get('width'))),
            type=str(stroke.get('type') or 'solid'),
        ),
    }

    def number(name, default=0.0):
        return coerce_number(shape_dict.get(name), default)

    if issubclass(cls, BoxShape):
        fields.update(x=number('x'), y=number('y'),
                      width=max(0.0, number('width')), height=max(0.0, number('height')))
        if issubclass(cls, (Rectangle, Frame)):
            fields['corner_radius'] = _corner_radius(shape_dict.get('corner_radius'))
            fields['corner_smoothing'] = clamp(number('corner_smoothing'), 0.0, 1.0)
        if cls is Frame:
            fields['clip_content'] = bool(shape_dict.get('clip_content', True))
        if cls is Text:
            fields.update(
                text=str(shape_dict.get('text') or ''),
                font_family=str(shape_dict.get('font_family') or 'Inter'),
                font_style=str(shape_dict.get('font_style') or 'normal'),
                font_size=max(1.0, number('font_size', 24.0)),
                line_height=number('line_height', 1.2),
                letter_spacing=number('letter_spacing'),
                align=str(shape_dict.get('align') or 'left'),
                vertical_align=str(shape_dict.get('vertical_align') or 'top'),
                text_decoration=str(shape_dict.get('text_decoration') or 'none'),
            )
        return cls(**fields)

    if cls in (Circle, Ellipse):
        fields.update(x=number('x'), y=number('y'),
                      arc_start=number('arc_start') % 360.0,
                      arc_sweep=clamp(number('arc_sweep', 360.0), 0.0, 360.0),
                      arc_ratio=clamp(number('arc_ratio'), 0.0, 0.99))
        if cls is Circle:
            fields['radius'] = max(1.0, number('radius', 1.0))
        else:
            fields['radius_x'] = max(1.0, number('radius_x', 1.0))
            fields['radius_y'] = max(1.0, number('radius_y', 1.0))
        return cls(**fields)

    if issubclass(cls, Polygon):
        fields.update(x=number('x'), y=number('y'),
                      radius=max(1.0, number('radius', 1.0)),
                      sides=max(3, int(number('sides', 5))),
                      corner_radius=max(0.0, number('corner_radius')),
                      corner_smoothing=clamp(number('corner_smoothing'), 0.0, 1.0))
        return rematerialize(cls(**fields))

    if cls is Star:
        outer = max(1.0, number('outer_radius', 1.0))
        fields.update(x=number('x'), y=number('y'),
                      num_points=max(3, int(number('num_points', 5))),
                      outer_radius=outer,
                      inner_radius=max(0.0, number('inner_radius', outer / 2)))
        return rematerialize(cls(**fields))

    if cls is Line:
        raw = shape_dict.get('points')
        coords = tuple(coerce_number(v) for v in raw) if isinstance(raw, list) else ()
        fields['points'] = coords[:len(coords) - len(coords) % 2]
        return cls(**fields)

    if cls is PathShape:
        raw = shape_dict.get('points')
        points = tuple(dict_to_path_point(p) for p in raw if isinstance(p, dict)) \
            if isinstance(raw, list) else ()
        source = shape_dict.get('source')
        fields.update(points=points,
                      closed=bool(shape_dict.get('closed', False)),
                      corner_radius=max(0.0, number('corner_radius')),
                      source=dict_to_shape(source) if isinstance(source, dict) else None)
        return cls(**fields)

    return cls(**fields)


# Documents ------------------------------------------------------------------

def document_to_dict(store: ShapeStore) -> Dict[str, Any]:
    """Convert a ShapeStore to dictionary."""
    return {
        'pages': [{'id': page.id, 'name': page.name} for page in store.pages],
        'active_page_id': store.active_page_id,
        'shapes': [shape_to_dict(shape) for shape in store.shapes],
    }


def _sanitize_hierarchy(shapes: List[Shape], page_ids: List[str]) -> List[Shape]:
    """
    Put shapes on known pages, drop duplicate ids and detach parent links
    that point at missing shapes, non-containers, other pages or cycles.
    """
    seen = set()
    unique = []
    for shape in shapes:
        if shape.id in seen:
            logger.warning("Skipping duplicate shape id %s", shape.id)
            continue
        seen.add(shape.id)
        if shape.page_id not in page_ids:
            shape = replace(shape, page_id=page_ids[0])
        unique.append(shape)

    by_id = {s.id: s for s in unique}
    result = []
    for shape in unique:
        parent = by_id.get(shape.parent_id) if shape.parent_id else None
        broken = shape.parent_id is not None and (
            not is_container(parent) or parent.page_id != shape.page_id)
        if not broken and shape.parent_id is not None:
            chain = {shape.id}
            current = parent
            while current is not None:
                if current.id in chain:
                    broken = True
                    break
                chain.add(current.id)
                current = by_id.get(current.parent_id) if current.parent_id else None
        if broken:
            logger.warning("Detaching shape %s from invalid parent %s", shape.id, shape.parent_id)
            shape = replace(shape, parent_id=None)
            by_id[shape.id] = shape
        result.append(shape)
    return result


def dict_to_document(doc_dict: Any, settings: Optional[EditorSettings] = None) -> ShapeStore:
    """
    Convert dictionary to a ShapeStore.

    Anything that is not a usable document yields a fresh store with a
    single empty page.
    """
    if not isinstance(doc_dict, dict):
        logger.warning("Document data is not an object, starting fresh")
        return ShapeStore(settings)

    pages: List[Page] = []
    for page_dict in doc_dict.get('pages') or []:
        if not isinstance(page_dict, dict) or not page_dict.get('id'):
            logger.warning("Skipping malformed page record: %r", page_dict)
            continue
        page_id = str(page_dict['id'])
        if any(p.id == page_id for p in pages):
            continue
        pages.append(Page(id=page_id, name=str(page_dict.get('name') or f"Page {len(pages) + 1}")))
    if not pages:
        return ShapeStore(settings)

    shapes = []
    raw_shapes = doc_dict.get('shapes')
    for shape_dict in raw_shapes if isinstance(raw_shapes, list) else []:
        shape = dict_to_shape(shape_dict)
        if shape is not None:
            shapes.append(shape)
    shapes = recompute_groups(_sanitize_hierarchy(shapes, [p.id for p in pages]))

    return ShapeStore(settings, shapes=shapes, pages=pages,
                      active_page_id=doc_dict.get('active_page_id'))


def save_document(store: ShapeStore, storage: DocumentStorage, key: Optional[str] = None) -> bool:
    """
    Store the document as JSON under ``key`` (the settings' storage key
    by default).

    Returns:
        True if successful, False otherwise
    """
    try:
        payload = json.dumps(document_to_dict(store))
    except (TypeError, ValueError) as e:
        logger.warning("Could not serialize document: %s", e)
        return False
    return storage.write(key or store.settings.storage_key, payload)


def load_document(storage: DocumentStorage, settings: Optional[EditorSettings] = None,
                  key: Optional[str] = None) -> ShapeStore:
    """
    Load the document stored under ``key``.

    Missing or malformed data gives a fresh single-page document.
    """
    settings = settings or EditorSettings()
    raw = storage.read(key or settings.storage_key)
    if raw is None:
        return ShapeStore(settings)
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning("Stored document is not valid JSON: %s", e)
        return ShapeStore(settings)
    return dict_to_document(data, settings)


def save_project(store: ShapeStore, filepath: Union[str, Path]) -> bool:
    """
    Save a document to a project file.

    Args:
        store: The document to save
        filepath: Path to save the file

    Returns:
        True if successful, False otherwise
    """
    doc_dict = document_to_dict(store)
    doc_dict['saved_at'] = datetime.now().isoformat()
    try:
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(doc_dict, f, indent=2, ensure_ascii=False)
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Error saving project %s: %s", filepath, e)
        return False
    logger.info("Saved project to %s", filepath)
    return True


def load_project(filepath: Union[str, Path],
                 settings: Optional[EditorSettings] = None) -> Optional[ShapeStore]:
    """
    Load a document from a project file.

    Args:
        filepath: Path to the project file
        settings: Editor settings for the loaded store

    Returns:
        ShapeStore if the file could be read, None otherwise
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            doc_dict = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Error loading project %s: %s", filepath, e)
        return None
    return dict_to_document(doc_dict, settings)
