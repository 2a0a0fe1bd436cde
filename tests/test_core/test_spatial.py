"""
Tests for bounding boxes, hit tests and hierarchy queries.
"""

import unittest

from vectordraft.core.geometry import BoundingBox, Point
from vectordraft.core.path import create_path_point
from vectordraft.core.shapes import (
    Circle, Ellipse, Frame, Group, Line, PathShape, Rectangle, Stroke, Text,
    make_polygon
)
from vectordraft.core.spatial import (
    client_rect, find_container_at_point, find_shape_at_point,
    get_shape_bounding_box, is_effectively_visible, marquee_hits, point_in_shape,
    shape_index
)


def box_tuple(box):
    return (round(box.min_x, 6), round(box.min_y, 6), round(box.max_x, 6), round(box.max_y, 6))


class TestBoundingBoxes(unittest.TestCase):
    """Test per-type bounds."""

    def test_rectangle_is_centered(self):
        box = get_shape_bounding_box(Rectangle(x=10, y=20, width=40, height=10))
        self.assertEqual(box_tuple(box), (-10, 15, 30, 25))

    def test_rotated_rectangle(self):
        box = get_shape_bounding_box(Rectangle(x=0, y=0, width=100, height=50, rotation=90))
        self.assertEqual(box_tuple(box), (-25, -50, 25, 50))

    def test_circle_and_ellipse(self):
        self.assertEqual(box_tuple(get_shape_bounding_box(Circle(x=5, y=5, radius=5))), (0, 0, 10, 10))
        ellipse = Ellipse(radius_x=20, radius_y=10, rotation=90)
        self.assertEqual(box_tuple(get_shape_bounding_box(ellipse)), (-10, -20, 10, 20))

    def test_polygon(self):
        box = get_shape_bounding_box(make_polygon(radius=10, sides=4))
        self.assertEqual(box_tuple(box), (-10, -10, 10, 10))

    def test_line_and_empty_path(self):
        box = get_shape_bounding_box(Line(points=(0, 5, 10, -5)))
        self.assertEqual(box_tuple(box), (0, -5, 10, 5))
        self.assertIsNone(get_shape_bounding_box(PathShape()))

    def test_auto_sized_text_is_measured(self):
        text = Text(text="abcd", font_size=10, line_height=1.5)
        box = get_shape_bounding_box(text)
        self.assertAlmostEqual(box.width, 24)
        self.assertAlmostEqual(box.height, 15)

    def test_client_rect_includes_stroke(self):
        rect = Rectangle(width=10, height=10, stroke=Stroke(width=4))
        self.assertEqual(box_tuple(client_rect(rect)), (-7, -7, 7, 7))


class TestHitTests(unittest.TestCase):
    """Test point_in_shape."""

    def test_rotated_rectangle(self):
        rect = Rectangle(width=100, height=10, rotation=90)
        self.assertTrue(point_in_shape(rect, 0, 40))
        self.assertFalse(point_in_shape(rect, 40, 0))

    def test_line_uses_stroke_and_tolerance(self):
        line = Line(points=(0, 0, 100, 0), stroke=Stroke(width=2))
        self.assertTrue(point_in_shape(line, 50, 4.5))
        self.assertFalse(point_in_shape(line, 50, 6))

    def test_closed_path_inside(self):
        points = (create_path_point(0, 0), create_path_point(100, 0), create_path_point(50, 100))
        closed = PathShape(points=points, closed=True)
        self.assertTrue(point_in_shape(closed, 50, 40))
        self.assertFalse(point_in_shape(PathShape(points=points), 50, 40))


class TestHierarchyQueries(unittest.TestCase):
    """Test container search, visibility and marquee hits."""

    def setUp(self):
        self.frame = Frame(id="frame", x=100, y=100, width=200, height=200)
        self.rect = Rectangle(id="rect", parent_id="frame", x=100, y=100, width=20, height=20)
        self.shapes = (self.frame, self.rect)

    def test_topmost_hit(self):
        hit = find_shape_at_point(self.shapes, Point(100, 100))
        self.assertEqual(hit.id, "rect")
        hit = find_shape_at_point(self.shapes, Point(20, 20))
        self.assertEqual(hit.id, "frame")

    def test_locked_shapes_are_skipped(self):
        shapes = (self.frame, Rectangle(id="rect", x=100, y=100, width=20, height=20, locked=True))
        self.assertEqual(find_shape_at_point(shapes, Point(100, 100)).id, "frame")

    def test_container_excludes_dragged(self):
        self.assertEqual(find_container_at_point(self.shapes, Point(100, 100)).id, "frame")
        self.assertIsNone(find_container_at_point(self.shapes, Point(100, 100), {"frame"}))

    def test_hidden_parent_hides_child(self):
        hidden = Frame(id="frame", x=100, y=100, width=200, height=200, visible=False)
        shapes = (hidden, self.rect)
        self.assertFalse(is_effectively_visible(self.rect, shape_index(shapes)))
        self.assertIsNone(find_shape_at_point(shapes, Point(100, 100)))

    def test_marquee_scenario(self):
        inside = Rectangle(id="inside", x=100, y=100, width=100, height=100)
        outside = Rectangle(id="outside", x=350, y=350, width=100, height=100)
        hits = marquee_hits((inside, outside), BoundingBox(0, 0, 200, 200))
        self.assertEqual(hits, ["inside"])

    def test_marquee_maps_to_screen(self):
        inside = Rectangle(id="a", x=100, y=100, width=10, height=10)

        def zoomed(box):
            return BoundingBox(box.min_x * 2, box.min_y * 2, box.max_x * 2, box.max_y * 2)

        self.assertEqual(marquee_hits((inside,), BoundingBox(150, 150, 180, 180)), [])
        self.assertEqual(marquee_hits((inside,), BoundingBox(150, 150, 195, 195), zoomed), ["a"])

    def test_group_box(self):
        group = Group(id="g", x=0, y=0, width=10, height=10)
        self.assertEqual(box_tuple(get_shape_bounding_box(group)), (-5, -5, 5, 5))


if __name__ == '__main__':
    unittest.main()
