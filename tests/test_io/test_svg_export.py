"""
Tests for SVG export.
"""

import os
import tempfile
import unittest
from xml.etree import ElementTree as ET

from vectordraft.core.document import ShapeStore
from vectordraft.core.gradient import (
    ANGULAR, DEFAULT_GRADIENT, DEFAULT_STOPS, RADIAL, Gradient, default_gradient_handles
)
from vectordraft.core.path import create_path_point
from vectordraft.core.shapes import (
    Circle, Frame, GradientFill, Line, PathShape, Rectangle, Stroke, Text
)
from vectordraft.io.svg_export import export_page_svg, export_svg

NS = '{http://www.w3.org/2000/svg}'


class SVGTestCase(unittest.TestCase):
    def setUp(self):
        self.store = ShapeStore()

    def add(self, cls, **fields):
        shape = self.store.build_shape(cls, **fields)
        self.store.add_shape(shape)
        return shape

    def export(self, page_id=None):
        return ET.fromstring(export_page_svg(self.store, page_id))

    def find_by_id(self, root, shape_id):
        for element in root.iter():
            if element.get('id') == shape_id:
                return element
        return None


class TestDocument(SVGTestCase):
    def test_empty_page(self):
        root = self.export()
        self.assertEqual(root.tag, NS + 'svg')
        self.assertEqual(root.get('viewBox'), "0 0 100 100")
        self.assertIsNone(root.find(NS + 'defs'))

    def test_view_box_covers_shapes(self):
        self.add(Rectangle, width=100, height=50)
        self.add(Rectangle, x=200, width=20, height=20, stroke=Stroke(width=4))
        root = self.export()
        self.assertEqual(root.get('viewBox'), "-50 -25 262 50")
        self.assertEqual(root.get('width'), "262")

    def test_hidden_shapes_are_omitted(self):
        shown = self.add(Rectangle, width=10, height=10)
        hidden = self.add(Rectangle, width=10, height=10, visible=False)
        root = self.export()
        self.assertIsNotNone(self.find_by_id(root, shown.id))
        self.assertIsNone(self.find_by_id(root, hidden.id))

    def test_other_pages_are_omitted(self):
        self.add(Rectangle, width=10, height=10)
        page = self.store.add_page()
        root = self.export(page.id)
        self.assertEqual(len(root), 0)

    def test_export_to_file(self):
        self.add(Circle, radius=10)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "page.svg")
            self.assertTrue(export_svg(self.store, path))
            with open(path, encoding='utf-8') as f:
                content = f.read()
        self.assertTrue(content.startswith("<?xml"))
        self.assertIn("<ellipse", content)

    def test_unwritable_path(self):
        self.assertFalse(export_svg(self.store, "/nonexistent/vectordraft/page.svg"))


class TestElements(SVGTestCase):
    def test_rectangle(self):
        rect = self.add(Rectangle, x=10, y=20, width=40, height=30, corner_radius=5,
                        rotation=30, opacity=0.5)
        element = self.find_by_id(self.export(), rect.id)
        self.assertEqual(element.tag, NS + 'rect')
        self.assertEqual((element.get('x'), element.get('y')), ("-10", "5"))
        self.assertEqual(element.get('rx'), "5")
        self.assertEqual(element.get('transform'), "rotate(30 10 20)")
        self.assertEqual(element.get('opacity'), "0.5")
        self.assertEqual(element.get('fill'), self.store.settings.default_fill)
        self.assertEqual(element.get('stroke'), "none")

    def test_mixed_corners_become_path(self):
        rect = self.add(Rectangle, width=40, height=40, corner_radius=(0, 5, 0, 5))
        element = self.find_by_id(self.export(), rect.id)
        self.assertEqual(element.tag, NS + 'path')
        self.assertIn("A", element.get('d'))

    def test_circle_and_arc(self):
        circle = self.add(Circle, radius=10)
        arc = self.add(Circle, x=50, radius=10, arc_sweep=180, arc_ratio=0.5)
        root = self.export()
        self.assertEqual(self.find_by_id(root, circle.id).tag, NS + 'ellipse')
        arc_element = self.find_by_id(root, arc.id)
        self.assertEqual(arc_element.tag, NS + 'path')
        self.assertEqual(arc_element.get('fill-rule'), "evenodd")

    def test_line_and_dashes(self):
        line = self.add(Line, points=(0, 0, 10, 10), stroke=Stroke("#ff0000", 2, "dashed"))
        element = self.find_by_id(self.export(), line.id)
        self.assertEqual(element.tag, NS + 'polyline')
        self.assertEqual(element.get('points'), "0,0 10,10")
        self.assertEqual(element.get('fill'), "none")
        self.assertEqual(element.get('stroke-dasharray'), "8 4")

    def test_path(self):
        points = (create_path_point(0, 0), create_path_point(10, 0), create_path_point(10, 10))
        path = self.add(PathShape, points=points, closed=True)
        element = self.find_by_id(self.export(), path.id)
        self.assertEqual(element.tag, NS + 'path')
        self.assertEqual(element.get('d'), "M 0 0 L 10 0 L 10 10 L 0 0 Z")

    def test_rounded_open_path_keeps_endpoints(self):
        points = (create_path_point(0, 0), create_path_point(100, 0), create_path_point(100, 100))
        path = self.add(PathShape, points=points, closed=False, corner_radius=10)
        d = self.find_by_id(self.export(), path.id).get('d')
        self.assertTrue(d.startswith("M 0 0 L 90 0 "))
        self.assertTrue(d.endswith(" 100 100"))
        self.assertNotIn("Z", d)

    def test_text_lines(self):
        text = self.add(Text, x=0, y=0, width=100, height=40, text="one\ntwo",
                        font_size=10, line_height=1.5)
        element = self.find_by_id(self.export(), text.id)
        spans = element.findall(NS + 'tspan')
        self.assertEqual([s.text for s in spans], ["one", "two"])
        self.assertEqual([s.get('y') for s in spans], ["-10", "5"])
        self.assertEqual(element.get('text-anchor'), "start")


class TestContainers(SVGTestCase):
    def test_group_nests_children(self):
        a = self.add(Rectangle, width=10, height=10)
        b = self.add(Rectangle, x=50, width=10, height=10)
        group_id = self.store.group_shapes([a.id, b.id])
        group = self.find_by_id(self.export(), group_id)
        self.assertEqual(group.tag, NS + 'g')
        self.assertEqual([child.get('id') for child in group], [a.id, b.id])
        self.assertIsNone(group.get('transform'))

    def test_frame_clips_children(self):
        frame = self.add(Frame, width=100, height=100)
        child = self.add(Rectangle, width=10, height=10, parent_id=frame.id)
        root = self.export()
        clip = root.find(f'{NS}defs/{NS}clipPath')
        self.assertIsNotNone(clip)
        self.assertEqual(clip[0].tag, NS + 'rect')
        content = [g for g in root.iter(NS + 'g')
                   if g.get('clip-path') == f"url(#{clip.get('id')})"]
        self.assertEqual(len(content), 1)
        self.assertEqual(content[0][0].get('id'), child.id)
        self.assertIsNotNone(self.find_by_id(root, frame.id))

    def test_unclipped_frame(self):
        self.add(Frame, width=100, height=100, clip_content=False)
        self.assertIsNone(self.export().find(f'{NS}defs'))


class TestGradients(SVGTestCase):
    def test_linear_gradient(self):
        rect = self.add(Rectangle, width=100, height=100, fill=GradientFill(DEFAULT_GRADIENT))
        root = self.export()
        gradient = root.find(f'{NS}defs/{NS}linearGradient')
        self.assertEqual(gradient.get('gradientUnits'), "userSpaceOnUse")
        self.assertEqual(len(gradient.findall(NS + 'stop')), 2)
        self.assertEqual(self.find_by_id(root, rect.id).get('fill'),
                         f"url(#{gradient.get('id')})")

    def test_radial_gradient(self):
        gradient = Gradient(type=RADIAL, handles=default_gradient_handles(RADIAL, 90),
                            stops=DEFAULT_STOPS)
        self.add(Circle, radius=50, fill=GradientFill(gradient))
        element = self.export().find(f'{NS}defs/{NS}radialGradient')
        self.assertIsNotNone(element)
        self.assertEqual((element.get('cx'), element.get('cy')), ("0", "0"))

    def test_angular_gradient_is_embedded(self):
        gradient = Gradient(type=ANGULAR, stops=DEFAULT_STOPS)
        rect = self.add(Rectangle, width=20, height=10, fill=GradientFill(gradient))
        root = self.export()
        pattern = root.find(f'{NS}defs/{NS}pattern')
        self.assertEqual(pattern.get('patternUnits'), "userSpaceOnUse")
        image = pattern.find(NS + 'image')
        self.assertTrue(image.get('href').startswith("data:image/png;base64,"))
        self.assertEqual(self.find_by_id(root, rect.id).get('fill'),
                         f"url(#{pattern.get('id')})")

    def test_group_is_not_painted(self):
        a = self.add(Rectangle, width=10, height=10)
        b = self.add(Rectangle, x=50, width=10, height=10)
        group_id = self.store.group_shapes([a.id, b.id])
        self.assertIsNone(self.find_by_id(self.export(), group_id).get('fill'))


if __name__ == '__main__':
    unittest.main()
