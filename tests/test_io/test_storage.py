"""
Tests for the document storage backends.
"""

import os
import tempfile
import unittest

from vectordraft.io.storage import JsonFileStorage, MemoryStorage, QtSettingsStorage

try:
    from PyQt6.QtCore import QSettings  # noqa: F401
    HAS_QT = True
except ImportError:
    HAS_QT = False


class TestMemoryStorage(unittest.TestCase):
    def test_read_write(self):
        storage = MemoryStorage({'a': '1'})
        self.assertEqual(storage.read('a'), '1')
        self.assertIsNone(storage.read('b'))
        self.assertTrue(storage.write('b', '2'))
        self.assertEqual(storage.read('b'), '2')


class TestJsonFileStorage(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "nested", "storage.json")

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file(self):
        self.assertIsNone(JsonFileStorage(self.path).read('key'))

    def test_write_keeps_other_keys(self):
        storage = JsonFileStorage(self.path)
        self.assertTrue(storage.write('one', 'first'))
        self.assertTrue(storage.write('two', 'second'))
        reopened = JsonFileStorage(self.path)
        self.assertEqual(reopened.read('one'), 'first')
        self.assertEqual(reopened.read('two'), 'second')

    def test_corrupt_file(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write("{broken")
        storage = JsonFileStorage(self.path)
        with self.assertLogs('vectordraft.io.storage', level='WARNING'):
            self.assertIsNone(storage.read('key'))

    def test_non_string_values_are_ignored(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write('{"key": 5}')
        self.assertIsNone(JsonFileStorage(self.path).read('key'))


@unittest.skipIf(not HAS_QT, "PyQt6 not available")
class TestQtSettingsStorage(unittest.TestCase):
    def test_read_write(self):
        storage = QtSettingsStorage("VectorDraftTests", "storage")
        self.assertTrue(storage.write('document', '{"pages": []}'))
        self.assertEqual(storage.read('document'), '{"pages": []}')
        self.assertIsNone(storage.read('missing'))


if __name__ == '__main__':
    unittest.main()
