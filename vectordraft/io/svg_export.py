"""
SVG Export for VectorDraft

Writes one page of a document as SVG. Containers become nested groups
(frames clip their children), linear and radial gradients become native
gradient definitions, and angular and diamond gradients are rasterized
and embedded as PNG patterns.
"""

from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Union
from xml.etree import ElementTree as ET
import base64
import logging
import math

from ..core.conversion import shape_to_path
from ..core.document import ShapeStore
from ..core.geometry import BoundingBox, union_bounding_box
from ..core.gradient import (
    RADIAL, Gradient, normalize_gradient, requires_rasterization,
    resolve_gradient_handles
)
from ..core.path import build_path_string, format_number, round_path_corners
from ..core.shapes import (
    BoxShape, Circle, Ellipse, Frame, GradientFill, Group, Line, PathShape,
    Polygon, Rectangle, Shape, SolidFill, Star, Text, corner_radii, line_points
)
from ..core.spatial import (
    box_extents, children_by_parent, client_rect, get_shape_bounding_box,
    is_effectively_visible, shape_index, shape_vertices
)

logger = logging.getLogger(__name__)


SVG_NS = 'http://www.w3.org/2000/svg'
EMPTY_PAGE_SIZE = 100.0


def _num(value: float) -> str:
    return format_number(value)


def _points_attr(points) -> str:
    return ' '.join(f'{_num(p.x)},{_num(p.y)}' for p in points)


def _rounded_rect_path(box: BoundingBox, radii) -> str:
    """Rectangle outline with per-corner arcs (tl, tr, br, bl)."""
    tl, tr, br, bl = radii
    x0, y0, x1, y1 = box.min_x, box.min_y, box.max_x, box.max_y
    parts = [f'M {_num(x0 + tl)} {_num(y0)}', f'L {_num(x1 - tr)} {_num(y0)}']
    if tr:
        parts.append(f'A {_num(tr)} {_num(tr)} 0 0 1 {_num(x1)} {_num(y0 + tr)}')
    parts.append(f'L {_num(x1)} {_num(y1 - br)}')
    if br:
        parts.append(f'A {_num(br)} {_num(br)} 0 0 1 {_num(x1 - br)} {_num(y1)}')
    parts.append(f'L {_num(x0 + bl)} {_num(y1)}')
    if bl:
        parts.append(f'A {_num(bl)} {_num(bl)} 0 0 1 {_num(x0)} {_num(y1 - bl)}')
    parts.append(f'L {_num(x0)} {_num(y0 + tl)}')
    if tl:
        parts.append(f'A {_num(tl)} {_num(tl)} 0 0 1 {_num(x0 + tl)} {_num(y0)}')
    parts.append('Z')
    return ' '.join(parts)


def _arc_point(cx, cy, rx, ry, degrees):
    angle = math.radians(degrees)
    return cx + math.cos(angle) * rx, cy + math.sin(angle) * ry


def _arc_path(cx: float, cy: float, rx: float, ry: float,
              start: float, sweep: float, ratio: float) -> str:
    """
    Outline of an ellipse arc. Angles are degrees clockwise from the +x
    axis; ``ratio`` is the inner radius as a fraction of the outer one.
    """
    irx, iry = rx * ratio, ry * ratio
    if sweep >= 360:
        # Two half arcs per ring; the inner ring cuts a hole via evenodd
        parts = []
        for ring_rx, ring_ry in ((rx, ry), (irx, iry)):
            if not ring_rx or not ring_ry:
                continue
            x0, y0 = cx + ring_rx, cy
            x1, y1 = cx - ring_rx, cy
            parts.append(
                f'M {_num(x0)} {_num(y0)} '
                f'A {_num(ring_rx)} {_num(ring_ry)} 0 1 1 {_num(x1)} {_num(y1)} '
                f'A {_num(ring_rx)} {_num(ring_ry)} 0 1 1 {_num(x0)} {_num(y0)} Z'
            )
        return ' '.join(parts)

    large = 1 if sweep > 180 else 0
    sx, sy = _arc_point(cx, cy, rx, ry, start)
    ex, ey = _arc_point(cx, cy, rx, ry, start + sweep)
    parts = [f'M {_num(sx)} {_num(sy)}',
             f'A {_num(rx)} {_num(ry)} 0 {large} 1 {_num(ex)} {_num(ey)}']
    if ratio > 0:
        ix, iy = _arc_point(cx, cy, irx, iry, start + sweep)
        jx, jy = _arc_point(cx, cy, irx, iry, start)
        parts.append(f'L {_num(ix)} {_num(iy)}')
        parts.append(f'A {_num(irx)} {_num(iry)} 0 {large} 0 {_num(jx)} {_num(jy)}')
    else:
        parts.append(f'L {_num(cx)} {_num(cy)}')
    parts.append('Z')
    return ' '.join(parts)


def _local_box(shape: Shape, measurer=None) -> Optional[BoundingBox]:
    """Unrotated box in the element's own coordinates (before its transform)."""
    if isinstance(shape, BoxShape):
        width, height = box_extents(shape, measurer)
        return BoundingBox.from_center(shape.x, shape.y, width / 2, height / 2)
    if isinstance(shape, Circle):
        return BoundingBox.from_center(shape.x, shape.y, shape.radius, shape.radius)
    if isinstance(shape, Ellipse):
        return BoundingBox.from_center(shape.x, shape.y, shape.radius_x, shape.radius_y)
    return get_shape_bounding_box(shape, measurer)


def _uses_transform(shape: Shape) -> bool:
    if isinstance(shape, Group):
        return False
    return isinstance(shape, (BoxShape, Circle, Ellipse)) and bool(shape.rotation)


class SVGExporter:
    """Builds the SVG tree for one page."""

    def __init__(self, store: ShapeStore):
        self.store = store
        self.measurer = store.measurer
        self.defs: Optional[ET.Element] = None
        self._counter = 0

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f'{prefix}-{self._counter}'

    def export(self, page_id: Optional[str] = None) -> ET.Element:
        page_id = page_id or self.store.active_page_id
        shapes = [s for s in self.store.shapes if s.page_id == page_id]
        by_id = shape_index(shapes)
        visible = [s for s in shapes if is_effectively_visible(s, by_id)]

        bounds = union_bounding_box(client_rect(s, self.measurer) for s in visible)
        if bounds is None:
            bounds = BoundingBox(0.0, 0.0, EMPTY_PAGE_SIZE, EMPTY_PAGE_SIZE)

        svg = ET.Element('svg')
        svg.set('xmlns', SVG_NS)
        svg.set('width', _num(bounds.width))
        svg.set('height', _num(bounds.height))
        svg.set('viewBox', f'{_num(bounds.min_x)} {_num(bounds.min_y)} '
                           f'{_num(bounds.width)} {_num(bounds.height)}')
        self.defs = ET.SubElement(svg, 'defs')

        children = children_by_parent(visible)
        self._emit_children(svg, None, children)

        if not len(self.defs):
            svg.remove(self.defs)
        return svg

    def _emit_children(self, parent: ET.Element, parent_id: Optional[str],
                       children: Dict[Optional[str], List[Shape]]):
        for shape in children.get(parent_id, ()):
            self._emit(parent, shape, children)

    def _emit(self, parent: ET.Element, shape: Shape, children):
        if isinstance(shape, Group):
            g = ET.SubElement(parent, 'g')
            g.set('id', shape.id)
            self._apply_common(g, shape)
            self._emit_children(g, shape.id, children)
            return

        element = self._shape_element(parent, shape)
        if element is None:
            return
        element.set('id', shape.id)
        self._apply_common(element, shape)
        self._apply_paint(element, shape)

        if isinstance(shape, Frame):
            g = ET.SubElement(parent, 'g')
            if shape.clip_content:
                clip_id = self._next_id('clip')
                clip = ET.SubElement(self.defs, 'clipPath')
                clip.set('id', clip_id)
                ET.SubElement(clip, element.tag, {
                    k: v for k, v in element.attrib.items()
                    if k in ('x', 'y', 'width', 'height', 'rx', 'ry', 'd', 'transform')
                })
                g.set('clip-path', f'url(#{clip_id})')
            self._emit_children(g, shape.id, children)

    def _shape_element(self, parent: ET.Element, shape: Shape) -> Optional[ET.Element]:
        if isinstance(shape, (Rectangle, Frame)):
            box = _local_box(shape)
            radii = corner_radii(shape)
            if len(set(radii)) > 1:
                element = ET.SubElement(parent, 'path')
                element.set('d', _rounded_rect_path(box, radii))
            else:
                element = ET.SubElement(parent, 'rect')
                element.set('x', _num(box.min_x))
                element.set('y', _num(box.min_y))
                element.set('width', _num(box.width))
                element.set('height', _num(box.height))
                if radii[0]:
                    element.set('rx', _num(radii[0]))
                    element.set('ry', _num(radii[0]))
            return element

        if isinstance(shape, Text):
            return self._text_element(parent, shape)

        if isinstance(shape, (Circle, Ellipse)):
            rx, ry = ((shape.radius, shape.radius) if isinstance(shape, Circle)
                      else (shape.radius_x, shape.radius_y))
            if shape.arc_sweep >= 360 and not shape.arc_ratio:
                element = ET.SubElement(parent, 'ellipse')
                element.set('cx', _num(shape.x))
                element.set('cy', _num(shape.y))
                element.set('rx', _num(rx))
                element.set('ry', _num(ry))
            else:
                element = ET.SubElement(parent, 'path')
                element.set('d', _arc_path(shape.x, shape.y, rx, ry, shape.arc_start,
                                           shape.arc_sweep, shape.arc_ratio))
                element.set('fill-rule', 'evenodd')
            return element

        if isinstance(shape, Polygon) and shape.corner_radius > 0:
            geometry = shape_to_path(shape)
            if geometry is None:
                return None
            element = ET.SubElement(parent, 'path')
            element.set('d', build_path_string(
                round_path_corners(geometry.points, shape.corner_radius), True))
            return element

        if isinstance(shape, (Polygon, Star)):
            vertices = shape_vertices(shape)
            if len(vertices) < 3:
                return None
            element = ET.SubElement(parent, 'polygon')
            element.set('points', _points_attr(vertices))
            return element

        if isinstance(shape, Line):
            points = line_points(shape)
            if len(points) < 2:
                return None
            element = ET.SubElement(parent, 'polyline')
            element.set('points', _points_attr(points))
            return element

        if isinstance(shape, PathShape):
            points = shape.points
            if shape.corner_radius > 0:
                points = round_path_corners(points, shape.corner_radius, shape.closed)
            d = build_path_string(points, shape.closed)
            if not d:
                return None
            element = ET.SubElement(parent, 'path')
            element.set('d', d)
            return element

        return None

    def _text_element(self, parent: ET.Element, shape: Text) -> ET.Element:
        box = _local_box(shape, self.measurer)
        element = ET.SubElement(parent, 'text')
        anchor, x = {
            'center': ('middle', box.center.x),
            'right': ('end', box.max_x),
        }.get(shape.align, ('start', box.min_x))
        element.set('text-anchor', anchor)
        element.set('font-family', shape.font_family)
        element.set('font-size', _num(shape.font_size))
        if shape.font_style != 'normal':
            if 'bold' in shape.font_style:
                element.set('font-weight', 'bold')
            if 'italic' in shape.font_style:
                element.set('font-style', 'italic')
        if shape.letter_spacing:
            element.set('letter-spacing', _num(shape.letter_spacing))
        if shape.text_decoration != 'none':
            element.set('text-decoration', shape.text_decoration)
        line_height = shape.font_size * shape.line_height
        for index, line in enumerate(shape.text.split('\n')):
            tspan = ET.SubElement(element, 'tspan')
            tspan.set('x', _num(x))
            tspan.set('y', _num(box.min_y + shape.font_size + index * line_height))
            tspan.text = line
        return element

    def _apply_common(self, element: ET.Element, shape: Shape):
        if _uses_transform(shape):
            element.set('transform', f'rotate({_num(shape.rotation)} {_num(shape.x)} {_num(shape.y)})')
        if shape.opacity < 1:
            element.set('opacity', _num(shape.opacity))
        if shape.blend_mode and shape.blend_mode != 'normal':
            element.set('style', f'mix-blend-mode: {shape.blend_mode}')

    def _apply_paint(self, element: ET.Element, shape: Shape):
        fill = shape.fill
        if isinstance(shape, Line) or fill is None:
            element.set('fill', 'none')
        elif isinstance(fill, SolidFill):
            element.set('fill', fill.color)
        elif isinstance(fill, GradientFill):
            paint_id = self._gradient_paint(shape, normalize_gradient(fill.gradient))
            element.set('fill', f'url(#{paint_id})' if paint_id else 'none')

        stroke = shape.stroke
        if stroke.width > 0:
            element.set('stroke', stroke.color)
            element.set('stroke-width', _num(stroke.width))
            if stroke.type == 'dashed':
                element.set('stroke-dasharray', f'{_num(stroke.width * 4)} {_num(stroke.width * 2)}')
            elif stroke.type == 'dotted':
                element.set('stroke-dasharray', f'{_num(stroke.width)} {_num(stroke.width * 2)}')
                element.set('stroke-linecap', 'round')
        else:
            element.set('stroke', 'none')

    def _gradient_paint(self, shape: Shape, gradient: Gradient) -> Optional[str]:
        box = _local_box(shape, self.measurer)
        if box is None or box.width <= 0 or box.height <= 0:
            return None
        if requires_rasterization(gradient.type):
            return self._raster_pattern(box, gradient)

        start, end = resolve_gradient_handles(gradient, box)
        paint_id = self._next_id('gradient')
        if gradient.type == RADIAL:
            element = ET.SubElement(self.defs, 'radialGradient')
            element.set('cx', _num(start.x))
            element.set('cy', _num(start.y))
            element.set('r', _num(start.distance_to(end)))
        else:
            element = ET.SubElement(self.defs, 'linearGradient')
            element.set('x1', _num(start.x))
            element.set('y1', _num(start.y))
            element.set('x2', _num(end.x))
            element.set('y2', _num(end.y))
        element.set('id', paint_id)
        element.set('gradientUnits', 'userSpaceOnUse')
        for stop in gradient.stops:
            stop_el = ET.SubElement(element, 'stop')
            stop_el.set('offset', _num(stop.position))
            stop_el.set('stop-color', stop.color)
            if stop.opacity < 1:
                stop_el.set('stop-opacity', _num(stop.opacity))
        return paint_id

    def _raster_pattern(self, box: BoundingBox, gradient: Gradient) -> Optional[str]:
        image = self.store.rasterizer.to_image(gradient, math.ceil(box.width), math.ceil(box.height))
        if image is None:
            return None
        buffer = BytesIO()
        image.save(buffer, format='PNG')
        encoded = base64.b64encode(buffer.getvalue()).decode('ascii')

        paint_id = self._next_id('pattern')
        pattern = ET.SubElement(self.defs, 'pattern')
        pattern.set('id', paint_id)
        pattern.set('patternUnits', 'userSpaceOnUse')
        pattern.set('x', _num(box.min_x))
        pattern.set('y', _num(box.min_y))
        pattern.set('width', _num(box.width))
        pattern.set('height', _num(box.height))
        image_el = ET.SubElement(pattern, 'image')
        image_el.set('x', _num(box.min_x))
        image_el.set('y', _num(box.min_y))
        image_el.set('width', _num(box.width))
        image_el.set('height', _num(box.height))
        image_el.set('preserveAspectRatio', 'none')
        image_el.set('href', f'data:image/png;base64,{encoded}')
        return paint_id


def export_page_svg(store: ShapeStore, page_id: Optional[str] = None) -> str:
    """Render a page (the active one by default) as an SVG string."""
    svg = SVGExporter(store).export(page_id)
    tree = ET.ElementTree(svg)
    ET.indent(tree, space="  ")
    return ET.tostring(svg, encoding='unicode')


def export_svg(store: ShapeStore, filepath: Union[str, Path],
               page_id: Optional[str] = None) -> bool:
    """
    Export a page of the document to an SVG file.

    Returns:
        True if the file was written
    """
    svg = SVGExporter(store).export(page_id)
    tree = ET.ElementTree(svg)
    ET.indent(tree, space="  ")
    try:
        tree.write(filepath, encoding='unicode', xml_declaration=True)
    except OSError as e:
        logger.warning("Could not export SVG to %s: %s", filepath, e)
        return False
    logger.info("Exported SVG to %s", filepath)
    return True
