# Copyright Red Hat
#
# tests/sandbox/test_changes.py - Change record tests.
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import json
from dataclasses import FrozenInstanceError

from tust.sandbox.changes import Change, ChangeSet, Create, Delete, Modify
from tust.sandbox.difftypes import ChangeType


class TestChange(unittest.TestCase):
    def test_Change(self):
        change = Create("a/b.txt")
        self.assertEqual(change.change_type, ChangeType.CREATE)
        self.assertEqual(change.path, "a/b.txt")
        self.assertEqual(change, Change(ChangeType.CREATE, "a/b.txt"))
        self.assertNotEqual(change, Modify("a/b.txt"))

    def test_Change_frozen(self):
        change = Delete("a.txt")
        with self.assertRaises(FrozenInstanceError):
            change.path = "b.txt"

    def test_Change__str__(self):
        self.assertEqual(str(Modify("a.txt")), "modify a.txt")

    def test_Change_marker(self):
        self.assertEqual(Create("a").marker, "+")
        self.assertEqual(Modify("a").marker, "~")
        self.assertEqual(Delete("a").marker, "-")

    def test_Change_describe(self):
        self.assertEqual(Create("a.txt").describe(), "Would create: a.txt")
        self.assertEqual(Modify("a.txt").describe(), "Would modify: a.txt")
        self.assertEqual(Delete("a.txt").describe(), "Would delete: a.txt")

    def test_Change_to_dict(self):
        self.assertEqual(
            Delete("x/y").to_dict(), {"path": "x/y", "change_type": "delete"}
        )


class TestChangeSet(unittest.TestCase):
    def setUp(self):
        self.changes = ChangeSet(
            [Create("c.txt"), Delete("b.txt"), Modify("a.txt"), Create("a/new")]
        )

    def test_ChangeSet_empty(self):
        changes = ChangeSet()
        self.assertEqual(len(changes), 0)
        self.assertFalse(changes)
        self.assertEqual(changes.paths(), [])

    def test_ChangeSet_list_interface(self):
        self.assertEqual(len(self.changes), 4)
        self.assertTrue(self.changes)
        self.assertEqual(self.changes[0], Create("c.txt"))
        self.assertEqual(len(list(self.changes)), 4)

    def test_ChangeSet_views(self):
        self.assertEqual(self.changes.created, [Create("c.txt"), Create("a/new")])
        self.assertEqual(self.changes.modified, [Modify("a.txt")])
        self.assertEqual(self.changes.deleted, [Delete("b.txt")])

    def test_ChangeSet_sorted(self):
        self.assertEqual(
            [c.path for c in self.changes.sorted()],
            ["a.txt", "a/new", "b.txt", "c.txt"],
        )

    def test_ChangeSet_apply_order(self):
        self.assertEqual(
            self.changes.apply_order(),
            [Delete("b.txt"), Modify("a.txt"), Create("a/new"), Create("c.txt")],
        )

    def test_ChangeSet_eq_unordered(self):
        other = ChangeSet(list(reversed(list(self.changes))))
        self.assertEqual(self.changes, other)
        self.assertNotEqual(self.changes, ChangeSet([Create("c.txt")]))

    def test_ChangeSet_summary(self):
        self.assertEqual(self.changes.summary(), "2 created, 1 modified, 1 deleted")

    def test_ChangeSet_json(self):
        dicts = json.loads(self.changes.json())
        self.assertEqual(dicts[0], {"path": "a.txt", "change_type": "modify"})
        self.assertEqual(len(dicts), 4)
        self.assertIn("\n", self.changes.json(pretty=True))

    def test_ChangeSet__repr__(self):
        self.assertTrue(repr(ChangeSet()).startswith("ChangeSet("))
