"""
Tests for typed property edits.
"""

import unittest

from vectordraft.core.properties import (
    ARC, CORNER_RADIUS, CORNER_SMOOTHING, DIMENSIONS, OPACITY, POLYGON_SIDES,
    POSITION, RADIUS, ROTATION, PropertyEditRequest, apply_property_edit
)
from vectordraft.core.shapes import (
    Circle, Ellipse, Group, Line, Polygon, Rectangle, RoundedPolygon, Star,
    make_polygon, rematerialize
)


def edit(shape, edit_type, value):
    shapes = (shape,)
    result = apply_property_edit(shapes, shape.id, PropertyEditRequest(edit_type, value))
    return result, result[0] if result else None


class TestPropertyEdits(unittest.TestCase):
    """Test each property edit type."""

    def test_unknown_type_raises(self):
        with self.assertRaises(ValueError):
            PropertyEditRequest("shear", 1)

    def test_missing_target_is_noop(self):
        shapes = (Rectangle(width=10, height=10),)
        result = apply_property_edit(shapes, "nope", PropertyEditRequest(OPACITY, 0.5))
        self.assertEqual(result, shapes)

    def test_position(self):
        _, rect = edit(Rectangle(x=0, y=0, width=10, height=10), POSITION, {'x': 30, 'y': -5})
        self.assertEqual((rect.x, rect.y), (30, -5))

    def test_position_of_line_uses_box_center(self):
        _, line = edit(Line(points=(0, 0, 10, 10)), POSITION, {'x': 0, 'y': 0})
        self.assertEqual(line.points, (-5, -5, 5, 5))

    def test_dimensions(self):
        _, rect = edit(Rectangle(width=10, height=10), DIMENSIONS, {'width': 40, 'height': 0})
        self.assertEqual((rect.width, rect.height), (40, 1))
        _, circle = edit(Circle(radius=5), DIMENSIONS, {'width': 30, 'height': 20})
        self.assertEqual(circle.radius, 15)
        _, ellipse = edit(Ellipse(radius_x=1, radius_y=1), DIMENSIONS, {'width': 30, 'height': 20})
        self.assertEqual((ellipse.radius_x, ellipse.radius_y), (15, 10))

    def test_dimensions_on_group_is_ignored(self):
        group = Group(width=10, height=10)
        result = apply_property_edit((group,), group.id,
                                     PropertyEditRequest(DIMENSIONS, {'width': 50, 'height': 50}))
        self.assertIs(result[0], group)

    def test_arc_is_clamped(self):
        _, circle = edit(Circle(radius=5), ARC, {'start': 450, 'sweep': 500, 'ratio': 2})
        self.assertEqual((circle.arc_start, circle.arc_sweep, circle.arc_ratio), (90, 360, 0.99))

    def test_rotation_rematerializes_polygon(self):
        polygon = make_polygon(radius=10, sides=4)
        _, rotated = edit(polygon, ROTATION, 405)
        self.assertEqual(rotated.rotation, 45)
        self.assertNotEqual(rotated.points, polygon.points)
        self.assertAlmostEqual(rotated.points[0].x, 10 * 2 ** 0.5 / 2)

    def test_rotation_of_line_rotates_points(self):
        _, line = edit(Line(points=(-10, 0, 10, 0)), ROTATION, 90)
        self.assertAlmostEqual(line.points[0], 0)
        self.assertAlmostEqual(line.points[1], -10)

    def test_opacity_is_clamped(self):
        _, rect = edit(Rectangle(width=1, height=1), OPACITY, 3)
        self.assertEqual(rect.opacity, 1)
        _, rect = edit(Rectangle(width=1, height=1, opacity=0.5), OPACITY, -1)
        self.assertEqual(rect.opacity, 0)

    def test_corner_radius_rectangle(self):
        _, rect = edit(Rectangle(width=10, height=10), CORNER_RADIUS, 4)
        self.assertEqual(rect.corner_radius, 4)
        _, rect = edit(Rectangle(width=10, height=10), CORNER_RADIUS, [1, 2, 3, 4])
        self.assertEqual(rect.corner_radius, (1, 2, 3, 4))

    def test_corner_radius_switches_polygon_class(self):
        _, rounded = edit(make_polygon(radius=10), CORNER_RADIUS, 3)
        self.assertIsInstance(rounded, RoundedPolygon)
        self.assertEqual(rounded.type, "roundedPolygon")
        _, plain = edit(rounded, CORNER_RADIUS, 0)
        self.assertIs(type(plain), Polygon)

    def test_corner_smoothing(self):
        _, rect = edit(Rectangle(width=10, height=10), CORNER_SMOOTHING, 1.5)
        self.assertEqual(rect.corner_smoothing, 1)

    def test_sides(self):
        _, polygon = edit(make_polygon(radius=10), POLYGON_SIDES, 1)
        self.assertEqual(polygon.sides, 3)
        self.assertEqual(len(polygon.points), 3)
        star = rematerialize(Star(outer_radius=10, inner_radius=5))
        _, star = edit(star, POLYGON_SIDES, 8)
        self.assertEqual(len(star.points), 16)

    def test_radius_minimum(self):
        _, circle = edit(Circle(radius=5), RADIUS, -3)
        self.assertEqual(circle.radius, 1)
        _, circle = edit(Circle(radius=5), RADIUS, "bad")
        self.assertEqual(circle.radius, 1)

    def test_edit_not_applicable_is_noop(self):
        rect = Rectangle(width=10, height=10)
        result, _ = edit(rect, POLYGON_SIDES, 6)
        self.assertIs(result[0], rect)


if __name__ == '__main__':
    unittest.main()
