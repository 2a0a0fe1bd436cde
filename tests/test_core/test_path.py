"""
Tests for the path model.

Covers SVG path strings, corner rounding and node handle behaviour.
"""

import math
import unittest

from vectordraft.core.geometry import Point
from vectordraft.core.path import (
    PathNodeType, build_path_string, create_path_point, insert_point_on_segment,
    path_bounding_box, remove_path_point, round_path_corners, set_handle,
    set_node_type, update_handle_symmetry
)


def square(size=100.0):
    half = size / 2
    return [
        create_path_point(-half, -half),
        create_path_point(half, -half),
        create_path_point(half, half),
        create_path_point(-half, half),
    ]


class TestBuildPathString(unittest.TestCase):
    """Test SVG path data generation."""

    def test_corner_points_give_lines_only(self):
        path = build_path_string(square(), closed=True)
        self.assertTrue(path.startswith("M -50 -50"))
        self.assertNotIn("C", path)
        self.assertEqual(path.count("L"), 4)
        self.assertTrue(path.endswith("Z"))

    def test_open_path_has_no_close(self):
        path = build_path_string(square(), closed=False)
        self.assertEqual(path.count("L"), 3)
        self.assertNotIn("Z", path)

    def test_offset_handle_makes_curve(self):
        points = square()
        points[1] = set_handle(points[1], 'right', Point(60, -40))
        path = build_path_string(points)
        self.assertEqual(path.count("C"), 1)
        self.assertIn("C 60 -40 50 50 50 50", path)

    def test_handle_on_anchor_stays_straight(self):
        points = square()
        points[1] = set_handle(points[1], 'right', Point(50, -50))
        self.assertNotIn("C", build_path_string(points))

    def test_empty(self):
        self.assertEqual(build_path_string([]), "")


class TestRoundPathCorners(unittest.TestCase):
    """Test corner rounding."""

    def test_zero_radius_is_noop(self):
        points = square()
        self.assertEqual(round_path_corners(points, 0), points)

    def test_doubles_rounded_corners(self):
        rounded = round_path_corners(square(), 10)
        self.assertEqual(len(rounded), 8)
        corners = [p.anchor for p in square()]
        for index, corner in enumerate(corners):
            start, end = rounded[2 * index], rounded[2 * index + 1]
            self.assertAlmostEqual(start.anchor.distance_to(corner), 10)
            self.assertAlmostEqual(end.anchor.distance_to(corner), 10)
            self.assertEqual(start.type, PathNodeType.DISCONNECTED)

    def test_first_corner_positions(self):
        rounded = round_path_corners(square(), 10)
        self.assertAlmostEqual(rounded[0].x, -50)
        self.assertAlmostEqual(rounded[0].y, -40)
        self.assertAlmostEqual(rounded[1].x, -40)
        self.assertAlmostEqual(rounded[1].y, -50)

    def test_handle_length_for_right_angle(self):
        rounded = round_path_corners(square(), 10)
        expected = 10 * 4 / 3 * math.tan(math.pi / 8)
        start = rounded[0]
        self.assertAlmostEqual(start.anchor.distance_to(start.handles.right), expected)

    def test_radius_limited_by_half_edge(self):
        rounded = round_path_corners(square(10), 100)
        self.assertEqual(len(rounded), 8)
        # Each corner pulls back at most half of the 10 unit edges
        self.assertAlmostEqual(rounded[0].anchor.distance_to(Point(-5, -5)), 5)

    def test_points_with_handles_pass_through(self):
        points = square()
        points[0] = set_node_type(points[0], PathNodeType.SMOOTH)
        rounded = round_path_corners(points, 10)
        self.assertEqual(len(rounded), 7)
        self.assertEqual(rounded[0], points[0])

    def test_open_path_keeps_endpoints(self):
        points = square()
        rounded = round_path_corners(points, 10, closed=False)
        self.assertEqual(len(rounded), 6)
        self.assertEqual(rounded[0], points[0])
        self.assertEqual(rounded[-1], points[-1])

    def test_needs_three_points(self):
        points = square()[:2]
        self.assertEqual(round_path_corners(points, 10), points)


class TestNodeHandles(unittest.TestCase):
    """Test node types and handle symmetry."""

    def test_smooth_gets_default_handles(self):
        point = set_node_type(create_path_point(10, 10), PathNodeType.SMOOTH, offset=40)
        self.assertEqual(point.handles.left, Point(-30, 10))
        self.assertEqual(point.handles.right, Point(50, 10))

    def test_corner_drops_handles(self):
        point = set_node_type(create_path_point(0, 0, PathNodeType.SMOOTH,
                                                left=Point(-1, 0), right=Point(1, 0)),
                              PathNodeType.CORNER)
        self.assertIsNone(point.handles)

    def test_symmetry_mirrors_smooth(self):
        point = create_path_point(0, 0, PathNodeType.SMOOTH, left=Point(-10, 0), right=Point(10, 0))
        moved = update_handle_symmetry(set_handle(point, 'right', Point(0, 20)), 'right')
        self.assertEqual(moved.handles.left, Point(0, -20))

    def test_symmetry_ignores_disconnected(self):
        point = create_path_point(0, 0, PathNodeType.DISCONNECTED,
                                  left=Point(-10, 0), right=Point(0, 20))
        self.assertIs(update_handle_symmetry(point, 'right'), point)

    def test_unknown_type_parses_to_corner(self):
        self.assertEqual(PathNodeType.parse("bogus"), PathNodeType.CORNER)


class TestPointListEdits(unittest.TestCase):
    """Test insertion, removal and bounds."""

    def test_insert_midpoint(self):
        points = insert_point_on_segment(square(), 0)
        self.assertEqual(len(points), 5)
        self.assertEqual(points[1].anchor, Point(0, -50))

    def test_insert_wraps_to_first(self):
        points = insert_point_on_segment(square(), 3)
        self.assertEqual(points[4].anchor, Point(-50, 0))

    def test_remove_keeps_two_points(self):
        self.assertEqual(len(remove_path_point(square(), 1)), 3)
        two = square()[:2]
        self.assertEqual(len(remove_path_point(two, 0)), 2)

    def test_bounding_box(self):
        box = path_bounding_box(square())
        self.assertEqual((box.min_x, box.min_y, box.max_x, box.max_y), (-50, -50, 50, 50))
        self.assertIsNone(path_bounding_box([]))


if __name__ == '__main__':
    unittest.main()
