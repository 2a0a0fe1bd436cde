"""
Tests for selection state, marquee selection and moving shapes
between containers.
"""

import unittest

from vectordraft.core.document import ShapeStore
from vectordraft.core.geometry import Point
from vectordraft.core.shapes import Frame, Rectangle
from vectordraft.graphics.selection import MoveInteraction, SelectionManager
from vectordraft.graphics.tools import InteractionState
from vectordraft.graphics.viewport import Viewport


class SelectionTestCase(unittest.TestCase):
    def setUp(self):
        self.store = ShapeStore()
        self.selection = SelectionManager(self.store)

    def add(self, cls=Rectangle, x=0.0, y=0.0, size=100.0, **fields):
        shape = self.store.build_shape(cls, x=x, y=y, width=size, height=size, **fields)
        self.store.add_shape(shape)
        return shape


class TestSelectionState(SelectionTestCase):
    """Click selection and listeners."""

    def test_set_selection_ignores_unknown_ids(self):
        rect = self.add()
        self.assertTrue(self.selection.set_selection([rect.id, "missing", rect.id]))
        self.assertEqual(self.selection.selected_ids, [rect.id])
        self.assertFalse(self.selection.set_selection([rect.id]))

    def test_primary_is_first_selected(self):
        a = self.add()
        b = self.add(x=300)
        self.selection.set_selection([b.id, a.id])
        self.assertEqual(self.selection.primary_id, b.id)
        self.assertIs(self.selection.primary_shape, self.store.get_shape(b.id))

    def test_toggle(self):
        a = self.add()
        b = self.add(x=300)
        self.selection.set_selection([a.id])
        self.selection.toggle(b.id)
        self.assertEqual(self.selection.selected_ids, [a.id, b.id])
        self.selection.toggle(a.id)
        self.assertEqual(self.selection.selected_ids, [b.id])

    def test_select_at(self):
        rect = self.add()
        self.assertEqual(self.selection.select_at(Point(10, 10)), rect.id)
        self.assertTrue(self.selection.is_selected(rect.id))
        self.assertIsNone(self.selection.select_at(Point(500, 500)))
        self.assertEqual(self.selection.selected_ids, [])

    def test_click_on_group_child_selects_group(self):
        a = self.add()
        b = self.add(x=300)
        group_id = self.store.group_shapes([a.id, b.id])
        self.assertEqual(self.selection.select_at(Point(0, 0)), group_id)
        self.assertEqual(self.selection.selected_ids, [group_id])

    def test_select_all_skips_nested_and_locked(self):
        frame = self.add(Frame, size=200)
        self.add(parent_id=frame.id, size=20)
        self.add(x=500, locked=True)
        self.selection.select_all()
        self.assertEqual(self.selection.selected_ids, [frame.id])

    def test_callback_receives_primary(self):
        received = []
        self.selection.add_selection_callback(received.append)
        rect = self.add()
        self.selection.set_selection([rect.id])
        self.assertEqual(received[-1].id, rect.id)

    def test_removed_shapes_are_pruned(self):
        received = []
        rect = self.add()
        self.selection.set_selection([rect.id])
        self.selection.add_selection_callback(received.append)
        self.store.remove_shapes([rect.id])
        self.assertEqual(self.selection.selected_ids, [])
        self.assertEqual(received, [None])

    def test_delete_selection(self):
        rect = self.add()
        self.assertFalse(self.selection.delete_selection())
        self.selection.set_selection([rect.id])
        self.assertTrue(self.selection.delete_selection())
        self.assertEqual(self.store.shapes, ())


class TestMarquee(SelectionTestCase):
    """Rubber band selection."""

    def setUp(self):
        super().setUp()
        self.inside = self.add(x=100, y=100)
        self.outside = self.add(x=350, y=350)

    def run_marquee(self, start, end, additive=False):
        self.selection.start_marquee(start)
        self.selection.update_marquee(end)
        return self.selection.finish_marquee(end, additive=additive)

    def test_marquee_selects_intersecting(self):
        hits = self.run_marquee(Point(0, 0), Point(200, 200))
        self.assertEqual(hits, [self.inside.id])
        self.assertEqual(self.selection.selected_ids, [self.inside.id])
        self.assertEqual(self.selection.state, InteractionState.IDLE)
        self.assertIsNone(self.selection.marquee_rect)

    def test_marquee_rect_while_dragging(self):
        self.selection.start_marquee(Point(50, 60))
        self.selection.update_marquee(Point(10, 20))
        rect = self.selection.marquee_rect
        self.assertEqual((rect.min_x, rect.min_y, rect.max_x, rect.max_y), (10, 20, 50, 60))

    def test_additive_marquee_toggles(self):
        self.selection.set_selection([self.inside.id])
        self.run_marquee(Point(0, 0), Point(400, 400), additive=True)
        self.assertEqual(self.selection.selected_ids, [self.outside.id])

    def test_marquee_uses_screen_space(self):
        self.selection.viewport = Viewport(scale=0.5)
        hits = self.run_marquee(Point(0, 0), Point(200, 200))
        self.assertEqual(hits, [self.inside.id, self.outside.id])


class TestMoveInteraction(SelectionTestCase):
    """Dragging shapes and dropping them into containers."""

    def setUp(self):
        super().setUp()
        self.frame = self.add(Frame, x=200, y=200, size=200)
        self.rect = self.add(size=20)
        self.mover = MoveInteraction(self.store)

    def test_drop_into_frame(self):
        before = self.store.history.past_size
        self.assertTrue(self.mover.start_move([self.rect.id], Point(0, 0)))
        self.mover.update_move(Point(150, 150))
        self.assertEqual(self.mover.hover_container_id, self.frame.id)
        self.assertEqual(self.store.history.past_size, before)

        self.assertTrue(self.mover.finish_move(Point(200, 200)))
        moved = self.store.get_shape(self.rect.id)
        self.assertEqual((moved.x, moved.y), (200, 200))
        self.assertEqual(moved.parent_id, self.frame.id)
        self.assertEqual(self.store.history.past_size, before + 1)
        self.assertFalse(self.mover.is_active)

        self.store.undo()
        restored = self.store.get_shape(self.rect.id)
        self.assertEqual((restored.x, restored.y), (0, 0))
        self.assertIsNone(restored.parent_id)

    def test_drop_outside_moves_to_root(self):
        self.mover.start_move([self.rect.id], Point(0, 0))
        self.mover.finish_move(Point(200, 200))
        self.mover.start_move([self.rect.id], Point(200, 200))
        self.mover.finish_move(Point(600, 600))
        self.assertIsNone(self.store.get_shape(self.rect.id).parent_id)

    def test_container_never_receives_itself(self):
        self.mover.start_move([self.frame.id], Point(200, 200))
        self.mover.finish_move(Point(210, 210))
        self.assertIsNone(self.store.get_shape(self.frame.id).parent_id)

    def test_cancel_restores(self):
        self.mover.start_move([self.rect.id], Point(0, 0))
        self.mover.update_move(Point(50, 50))
        self.mover.cancel()
        self.assertEqual(self.store.get_shape(self.rect.id).x, 0)
        self.assertEqual(self.mover.state, InteractionState.IDLE)

    def test_unknown_ids(self):
        self.assertFalse(self.mover.start_move(["missing"], Point(0, 0)))


if __name__ == '__main__':
    unittest.main()
