# Copyright Red Hat
#
# tust/sandbox/__init__.py - Test-in-sandbox pipeline package
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Sandbox pipeline package.

Provides the snapshot, diff and apply stages used to preview a command's
effect on a directory tree: ``Sandbox`` and ``copy_tree()`` to build the
scratch copy, ``compare_trees()`` to find the file-level changes and
``apply_changes()`` to replay them. ``clean_sandboxes()`` removes sandbox
directories left behind by earlier runs.
"""
from .applier import apply_changes
from .changes import Change, ChangeSet, Create, Delete, Modify
from .differ import compare_trees
from .difftypes import ChangeType
from .tempdirs import CleanReport, Sandbox, clean_sandboxes
from .treecopy import copy_tree
from .treewalk import collect_files

__all__ = [
    "Change",
    "ChangeSet",
    "ChangeType",
    "CleanReport",
    "Create",
    "Delete",
    "Modify",
    "Sandbox",
    "apply_changes",
    "clean_sandboxes",
    "collect_files",
    "compare_trees",
    "copy_tree",
]
