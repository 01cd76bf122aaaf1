# Copyright Red Hat
#
# tests/sandbox/test_differ.py - Tree differ tests.
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import os
from unittest.mock import patch

from tust import TustSystemError
from tust.sandbox.changes import ChangeSet, Create, Delete, Modify
from tust.sandbox.differ import compare_trees, file_differs
from tust.sandbox.treecopy import copy_tree

from ._util import make_tree

_TREE = {
    "a.txt": "hello",
    "b.txt": "world",
    "src/main.c": "int main(void) { return 0; }\n",
    "src/empty.h": "",
}


class TestCompareTrees(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.original = os.path.join(self._tmp.name, "original")
        self.modified = os.path.join(self._tmp.name, "modified")
        os.mkdir(self.original)
        make_tree(self.original, _TREE)
        copy_tree(self.original, self.modified)

    def tearDown(self):
        self._tmp.cleanup()

    def _path(self, root, rel_path):
        return os.path.join(root, *rel_path.split("/"))

    def test_compare_trees_identical(self):
        self.assertEqual(len(compare_trees(self.original, self.modified)), 0)

    def test_compare_trees_same_root(self):
        self.assertEqual(len(compare_trees(self.original, self.original)), 0)

    def test_compare_trees_empty(self):
        empty_a = os.path.join(self._tmp.name, "empty_a")
        empty_b = os.path.join(self._tmp.name, "empty_b")
        os.mkdir(empty_a)
        os.mkdir(empty_b)
        self.assertEqual(len(compare_trees(empty_a, empty_b)), 0)

    def test_compare_trees_create(self):
        make_tree(self.modified, {"src/new/file.c": "new"})
        changes = compare_trees(self.original, self.modified)
        self.assertEqual(list(changes), [Create("src/new/file.c")])

    def test_compare_trees_delete(self):
        os.unlink(self._path(self.modified, "src/main.c"))
        changes = compare_trees(self.original, self.modified)
        self.assertEqual(list(changes), [Delete("src/main.c")])

    def test_compare_trees_modify_same_size(self):
        make_tree(self.modified, {"a.txt": "HELLO"})
        changes = compare_trees(self.original, self.modified)
        self.assertEqual(list(changes), [Modify("a.txt")])

    def test_compare_trees_modify_size(self):
        make_tree(self.modified, {"b.txt": "world, again"})
        changes = compare_trees(self.original, self.modified)
        self.assertEqual(list(changes), [Modify("b.txt")])

    def test_compare_trees_truncate_to_empty(self):
        make_tree(self.modified, {"a.txt": ""})
        changes = compare_trees(self.original, self.modified)
        self.assertEqual(list(changes), [Modify("a.txt")])

    def test_compare_trees_empty_files_unchanged(self):
        make_tree(self.modified, {"src/empty.h": ""})
        self.assertEqual(len(compare_trees(self.original, self.modified)), 0)

    def test_compare_trees_ignores_timestamps(self):
        path = self._path(self.modified, "a.txt")
        os.utime(path, (1000000000, 1000000000))
        os.chmod(path, 0o600)
        self.assertEqual(len(compare_trees(self.original, self.modified)), 0)

    def test_compare_trees_ignores_empty_dirs(self):
        os.makedirs(os.path.join(self.modified, "new", "empty"))
        self.assertEqual(len(compare_trees(self.original, self.modified)), 0)

    def test_compare_trees_example(self):
        make_tree(self.modified, {"a.txt": "hello!", "c.txt": "new"})
        os.unlink(self._path(self.modified, "b.txt"))
        changes = compare_trees(self.original, self.modified)
        self.assertIsInstance(changes, ChangeSet)
        self.assertEqual(
            changes, ChangeSet([Modify("a.txt"), Delete("b.txt"), Create("c.txt")])
        )
        self.assertEqual(changes.created, [Create("c.txt")])
        self.assertEqual(changes.modified, [Modify("a.txt")])
        self.assertEqual(changes.deleted, [Delete("b.txt")])

    def test_compare_trees_file_replaced_by_dir(self):
        os.unlink(self._path(self.modified, "a.txt"))
        make_tree(self.modified, {"a.txt/inner": "x"})
        changes = compare_trees(self.original, self.modified)
        self.assertEqual(
            changes, ChangeSet([Delete("a.txt"), Create("a.txt/inner")])
        )

    def test_compare_trees_missing_root(self):
        with self.assertRaises(TustSystemError):
            compare_trees(self.original, os.path.join(self._tmp.name, "nosuchdir"))

    def test_compare_trees_unreadable_file(self):
        with patch(
            "tust.sandbox.differ._same_content",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            with self.assertRaisesRegex(TustSystemError, "Failed to compare"):
                compare_trees(self.original, self.modified)


class TestFileDiffers(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path_a = os.path.join(self._tmp.name, "a")
        self.path_b = os.path.join(self._tmp.name, "b")

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, path, data):
        with open(path, "wb") as fp:
            fp.write(data)

    def test_file_differs_equal(self):
        self._write(self.path_a, b"same")
        self._write(self.path_b, b"same")
        self.assertFalse(file_differs(self.path_a, self.path_b))

    def test_file_differs_empty(self):
        self._write(self.path_a, b"")
        self._write(self.path_b, b"")
        self.assertFalse(file_differs(self.path_a, self.path_b))

    def test_file_differs_size(self):
        self._write(self.path_a, b"short")
        self._write(self.path_b, b"longer")
        with patch("tust.sandbox.differ._same_content") as mock_same:
            self.assertTrue(file_differs(self.path_a, self.path_b))
            mock_same.assert_not_called()

    def test_file_differs_last_chunk(self):
        data = b"x" * (3 * 65536 + 17)
        self._write(self.path_a, data)
        self._write(self.path_b, data[:-1] + b"y")
        self.assertTrue(file_differs(self.path_a, self.path_b))

    def test_file_differs_large_equal(self):
        data = os.urandom(2 * 65536 + 5)
        self._write(self.path_a, data)
        self._write(self.path_b, data)
        self.assertFalse(file_differs(self.path_a, self.path_b))

    def test_file_differs_missing(self):
        self._write(self.path_a, b"a")
        with self.assertRaises(OSError):
            file_differs(self.path_a, self.path_b)
