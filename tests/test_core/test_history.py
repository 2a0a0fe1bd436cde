"""
Tests for the snapshot history manager.
"""

import unittest

from vectordraft.core.history import HistoryManager


class TestHistoryManager(unittest.TestCase):
    """Test undo/redo bookkeeping."""

    def setUp(self):
        self.history = HistoryManager(("a",), capacity=3)
        self.notified = []
        self.history.add_change_callback(self.notified.append)

    def test_identity_change_is_ignored(self):
        self.assertFalse(self.history.apply_change(lambda s: s))
        self.assertFalse(self.history.can_undo)
        self.assertFalse(self.history.undo())
        self.assertEqual(self.notified, [])

    def test_elementwise_identical_change_is_ignored(self):
        self.assertFalse(self.history.apply_change(lambda s: tuple(list(s))))
        self.assertEqual(self.history.past_size, 0)

    def test_undo_redo(self):
        self.history.apply_change(lambda s: s + ("b",))
        self.assertEqual(self.history.present, ("a", "b"))
        self.assertTrue(self.history.undo())
        self.assertEqual(self.history.present, ("a",))
        self.assertTrue(self.history.redo())
        self.assertEqual(self.history.present, ("a", "b"))
        self.assertEqual(len(self.notified), 3)

    def test_new_change_clears_future(self):
        self.history.apply_change(lambda s: s + ("b",))
        self.history.undo()
        self.history.apply_change(lambda s: s + ("c",))
        self.assertFalse(self.history.can_redo)

    def test_capacity_drops_oldest(self):
        for item in "bcde":
            self.history.apply_change(lambda s, item=item: s + (item,))
        self.assertEqual(self.history.past_size, 3)
        while self.history.undo():
            pass
        self.assertEqual(self.history.present, ("a", "b"))

    def test_preview_and_commit(self):
        baseline = self.history.present
        self.history.apply_change(lambda s: s + ("b",), record=False)
        self.history.apply_change(lambda s: baseline + ("c",), record=False)
        self.assertFalse(self.history.can_undo)
        self.assertTrue(self.history.commit(baseline))
        self.assertEqual(self.history.past_size, 1)
        self.history.undo()
        self.assertIs(self.history.present, baseline)

    def test_commit_without_change(self):
        self.assertFalse(self.history.commit(self.history.present))
        self.assertFalse(self.history.can_undo)

    def test_revert(self):
        baseline = self.history.present
        self.history.apply_change(lambda s: s + ("b",), record=False)
        self.assertTrue(self.history.revert(baseline))
        self.assertEqual(self.history.present, ("a",))
        self.assertFalse(self.history.can_undo)

    def test_previous_snapshot_override(self):
        self.history.apply_change(lambda s: ("x",), previous=("z",))
        self.history.undo()
        self.assertEqual(self.history.present, ("z",))

    def test_reset(self):
        self.history.apply_change(lambda s: s + ("b",))
        self.history.reset(("q",))
        self.assertEqual(self.history.present, ("q",))
        self.assertFalse(self.history.can_undo)

    def test_remove_callback(self):
        self.history.remove_change_callback(self.notified.append)
        self.history.apply_change(lambda s: s + ("b",))
        self.assertEqual(self.notified, [])


if __name__ == '__main__':
    unittest.main()
