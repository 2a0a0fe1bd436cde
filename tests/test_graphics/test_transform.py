"""
Tests for rotation, corner radius and gradient handle interactions.
"""

from dataclasses import replace
import math
import unittest

from vectordraft.core.document import ShapeStore
from vectordraft.core.geometry import Point
from vectordraft.core.gradient import DEFAULT_GRADIENT, GradientHandles
from vectordraft.core.path import create_path_point
from vectordraft.core.shapes import (
    Circle, GradientFill, PathShape, Rectangle, SolidFill, corner_radii, make_polygon
)
from vectordraft.graphics.transform import (
    CornerRadiusInteraction, GradientHandleInteraction, RotationInteraction
)


class TransformTestCase(unittest.TestCase):
    def setUp(self):
        self.store = ShapeStore()
        self.rect = self.store.build_shape(Rectangle, width=100, height=100)
        self.store.add_shape(self.rect)

    def current(self, shape_id=None):
        return self.store.get_shape(shape_id or self.rect.id)


class TestRotation(TransformTestCase):
    def setUp(self):
        super().setUp()
        self.rotation = RotationInteraction(self.store)

    def test_quarter_turn(self):
        before = self.store.history.past_size
        self.assertTrue(self.rotation.start_rotation(self.rect.id, Point(100, 0)))
        self.assertAlmostEqual(self.rotation.rotation_for(Point(0, 100)), 90.0)
        self.assertTrue(self.rotation.finish_rotation(Point(0, 100)))
        self.assertAlmostEqual(self.current().rotation, 90.0)
        self.assertEqual(self.store.history.past_size, before + 1)

    def test_snapping(self):
        self.rotation.start_rotation(self.rect.id, Point(100, 0))
        angle = math.radians(40)
        point = Point(100 * math.cos(angle), 100 * math.sin(angle))
        self.assertAlmostEqual(self.rotation.rotation_for(point, snap=True), 45.0)
        self.assertAlmostEqual(self.rotation.rotation_for(point), 40.0)

    def test_result_is_wrapped(self):
        self.rotation.start_rotation(self.rect.id, Point(100, 0))
        self.assertAlmostEqual(self.rotation.rotation_for(Point(0, -100)), 270.0)

    def test_locked_shape_does_not_rotate(self):
        self.store.update_shape(self.rect.id, locked=True)
        self.assertFalse(self.rotation.start_rotation(self.rect.id, Point(100, 0)))

    def test_cancel(self):
        self.rotation.start_rotation(self.rect.id, Point(100, 0))
        self.rotation.update_rotation(Point(0, 100))
        self.assertAlmostEqual(self.current().rotation, 90.0)
        self.rotation.cancel()
        self.assertEqual(self.current().rotation, 0.0)


class TestCornerRadius(TransformTestCase):
    def setUp(self):
        super().setUp()
        self.corner = CornerRadiusInteraction(self.store)

    def test_drag_inward(self):
        self.assertTrue(self.corner.start_corner_drag(self.rect.id, Point(50, 50)))
        self.assertAlmostEqual(self.corner.radius_for(Point(40, 40)), 10 * math.sqrt(2))
        self.corner.finish_corner_drag(Point(40, 40))
        self.assertAlmostEqual(corner_radii(self.current())[0], 10 * math.sqrt(2))

    def test_clamped_to_half_side(self):
        self.corner.start_corner_drag(self.rect.id, Point(50, 50))
        self.assertEqual(self.corner.radius_for(Point(0, 0)), 50)
        self.assertEqual(self.corner.radius_for(Point(100, 100)), 0)

    def test_polygon_becomes_rounded(self):
        polygon = make_polygon(x=0, y=0, radius=40, sides=6, fill=SolidFill())
        self.store.add_shape(polygon)
        self.corner.start_corner_drag(polygon.id, Point(0, -40))
        self.corner.finish_corner_drag(Point(0, -30))
        rounded = self.current(polygon.id)
        self.assertEqual(rounded.type, "roundedPolygon")
        self.assertAlmostEqual(rounded.corner_radius, 10)

    def test_unsupported_shape(self):
        circle = self.store.build_shape(Circle, radius=10)
        self.store.add_shape(circle)
        self.assertFalse(self.corner.start_corner_drag(circle.id, Point(10, 0)))

    def test_open_path_is_not_rounded(self):
        points = (create_path_point(0, 0), create_path_point(100, 0), create_path_point(100, 100))
        path = self.store.build_shape(PathShape, points=points, closed=False)
        self.store.add_shape(path)
        self.assertFalse(self.corner.start_corner_drag(path.id, Point(100, 0)))
        closed = self.store.build_shape(PathShape, points=points, closed=True)
        self.store.add_shape(closed)
        self.assertTrue(self.corner.start_corner_drag(closed.id, Point(100, 0)))


class TestGradientHandles(TransformTestCase):
    def setUp(self):
        super().setUp()
        gradient = replace(DEFAULT_GRADIENT,
                           handles=GradientHandles(Point(0.0, 0.5), Point(0.5, 0.5)))
        self.store.update_shape(self.rect.id, fill=GradientFill(gradient))
        self.handles = GradientHandleInteraction(self.store)

    def test_handle_positions(self):
        start, end = self.handles.handle_positions(self.rect.id)
        self.assertEqual(start, Point(-50, 0))
        self.assertEqual(end, Point(0, 0))

    def test_no_gradient(self):
        self.store.update_shape(self.rect.id, fill=SolidFill())
        self.assertIsNone(self.handles.handle_positions(self.rect.id))
        self.assertFalse(self.handles.start_handle_drag(self.rect.id, 'end', Point(0, 0)))

    def test_drag_end_handle(self):
        before = self.store.history.past_size
        self.assertTrue(self.handles.start_handle_drag(self.rect.id, 'end', Point(0, 0)))
        self.handles.finish_handle_drag(Point(50, 0))
        handles = self.current().fill.gradient.handles
        self.assertEqual(handles.end, Point(1.0, 0.5))
        self.assertEqual(handles.start, Point(0.0, 0.5))
        self.assertEqual(self.store.history.past_size, before + 1)

    def test_handles_clamped_to_box(self):
        self.handles.start_handle_drag(self.rect.id, 'start', Point(-50, 0))
        self.handles.finish_handle_drag(Point(-200, 80))
        self.assertEqual(self.current().fill.gradient.handles.start, Point(0.0, 1.0))

    def test_cancel(self):
        original = self.current().fill
        self.handles.start_handle_drag(self.rect.id, 'end', Point(0, 0))
        self.handles.update_handle_drag(Point(50, 0))
        self.handles.cancel()
        self.assertIs(self.current().fill, original)


if __name__ == '__main__':
    unittest.main()
