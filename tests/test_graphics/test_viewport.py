"""
Tests for screen/world mapping, zooming and panning.
"""

import unittest

from vectordraft.core.geometry import BoundingBox, Point
from vectordraft.graphics.viewport import MAX_SCALE, Viewport


class TestViewport(unittest.TestCase):
    def test_conversions(self):
        viewport = Viewport(offset_x=10, offset_y=20, scale=2)
        self.assertEqual(viewport.world_to_screen(Point(5, 5)), Point(20, 30))
        self.assertEqual(viewport.screen_to_world(Point(20, 30)), Point(5, 5))

    def test_box_conversion(self):
        viewport = Viewport(offset_x=10, scale=2)
        box = viewport.world_box_to_screen(BoundingBox(0, 0, 10, 5))
        self.assertEqual((box.min_x, box.min_y, box.max_x, box.max_y), (10, 0, 30, 10))
        back = viewport.screen_box_to_world(box)
        self.assertEqual((back.min_x, back.min_y, back.max_x, back.max_y), (0, 0, 10, 5))

    def test_zoom_keeps_anchor(self):
        viewport = Viewport(offset_x=30, offset_y=-10, scale=1.5)
        anchor = Point(200, 120)
        world = viewport.screen_to_world(anchor)
        viewport.zoom_at(anchor, 2.0)
        self.assertEqual(viewport.scale, 3.0)
        after = viewport.world_to_screen(world)
        self.assertAlmostEqual(after.x, anchor.x)
        self.assertAlmostEqual(after.y, anchor.y)

    def test_zoom_is_clamped(self):
        viewport = Viewport(scale=200)
        viewport.zoom_at(Point(0, 0), 10)
        self.assertEqual(viewport.scale, MAX_SCALE)

    def test_pan(self):
        viewport = Viewport()
        self.assertTrue(viewport.start_pan(Point(10, 10)))
        self.assertFalse(viewport.start_pan(Point(0, 0)))
        viewport.update_pan(Point(25, 5))
        self.assertEqual((viewport.offset_x, viewport.offset_y), (15, -5))
        viewport.finish_pan(Point(30, 30))
        self.assertEqual((viewport.offset_x, viewport.offset_y), (20, 20))
        self.assertFalse(viewport.is_panning)

    def test_cancel_pan(self):
        viewport = Viewport(offset_x=5)
        viewport.start_pan(Point(0, 0))
        viewport.update_pan(Point(100, 100))
        viewport.cancel_pan()
        self.assertEqual((viewport.offset_x, viewport.offset_y), (5, 0))


if __name__ == '__main__':
    unittest.main()
