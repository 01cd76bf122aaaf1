# Copyright Red Hat
#
# tests/sandbox/test_treewalk.py - Tree collector tests.
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import os
from unittest.mock import patch

from tust import TustSystemError
from tust.sandbox.treewalk import collect_files, rel_join

from ._util import make_tree


class TestCollectFiles(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_rel_join(self):
        self.assertEqual(rel_join("", "a.txt"), "a.txt")
        self.assertEqual(rel_join("sub", "a.txt"), "sub/a.txt")
        self.assertEqual(rel_join("sub/deeper", "a.txt"), "sub/deeper/a.txt")

    def test_collect_files_empty(self):
        self.assertEqual(collect_files(self.root), set())

    def test_collect_files_nested(self):
        make_tree(
            self.root,
            {
                "a.txt": "a",
                "sub/b.txt": "b",
                "sub/deeper/c.txt": "c",
            },
        )
        self.assertEqual(
            collect_files(self.root), {"a.txt", "sub/b.txt", "sub/deeper/c.txt"}
        )

    def test_collect_files_prefix(self):
        make_tree(self.root, {"a.txt": "a", "sub/b.txt": "b"})
        self.assertEqual(
            collect_files(self.root, prefix="top"), {"top/a.txt", "top/sub/b.txt"}
        )

    def test_collect_files_skips_empty_dirs(self):
        os.makedirs(os.path.join(self.root, "empty", "dirs"))
        make_tree(self.root, {"a.txt": ""})
        self.assertEqual(collect_files(self.root), {"a.txt"})

    def test_collect_files_excludes_symlinks(self):
        make_tree(self.root, {"a.txt": "a", "sub/b.txt": "b"})
        os.symlink("a.txt", os.path.join(self.root, "link.txt"))
        os.symlink("sub", os.path.join(self.root, "sublink"))
        os.symlink("missing", os.path.join(self.root, "dangling"))
        self.assertEqual(collect_files(self.root), {"a.txt", "sub/b.txt"})

    def test_collect_files_symlink_loop(self):
        os.mkdir(os.path.join(self.root, "sub"))
        os.symlink("..", os.path.join(self.root, "sub", "up"))
        self.assertEqual(collect_files(self.root), set())

    @unittest.skipIf(not hasattr(os, "mkfifo"), "requires os.mkfifo()")
    def test_collect_files_excludes_fifo(self):
        make_tree(self.root, {"a.txt": "a"})
        os.mkfifo(os.path.join(self.root, "fifo"))
        self.assertEqual(collect_files(self.root), {"a.txt"})

    def test_collect_files_missing_root(self):
        with self.assertRaises(TustSystemError):
            collect_files(os.path.join(self.root, "nosuchdir"))

    def test_collect_files_unreadable_subdir(self):
        make_tree(self.root, {"a.txt": "a", "sub/b.txt": "b"})
        real_scandir = os.scandir
        bad = os.path.join(self.root, "sub")

        def _scandir(path):
            if os.fspath(path) == bad:
                raise PermissionError(13, "Permission denied", bad)
            return real_scandir(path)

        with patch("os.scandir", side_effect=_scandir):
            with self.assertRaisesRegex(TustSystemError, "Permission denied"):
                collect_files(self.root)
