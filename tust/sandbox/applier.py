# Copyright Red Hat
#
# tust/sandbox/applier.py - Test-in-sandbox change applier
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Replay changes from a modified sandbox onto the original tree.
"""
from typing import Iterable
import logging
import shutil
import os

from tust import TUST_SUBSYSTEM_SANDBOX, TustApplyError, TustPathError

from .changes import Change
from .difftypes import ChangeType

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_sandbox(msg, *args, **kwargs):
    """A wrapper for sandbox subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TUST_SUBSYSTEM_SANDBOX}, **kwargs)


def _remove_empty_tree(path: str):
    """
    Remove a directory tree containing nothing but directories. Fails with
    ``OSError`` if any other entry is found.
    """
    for dirpath, dirnames, _files in os.walk(path, topdown=False):
        for name in dirnames:
            os.rmdir(os.path.join(dirpath, name))
    os.rmdir(path)


def _check_parents(original: str, rel_path: str):
    """
    Raise ``TustPathError`` if any existing directory component of
    ``rel_path`` below ``original`` is a symbolic link.
    """
    parent = original
    for name in rel_path.split("/")[:-1]:
        parent = os.path.join(parent, name)
        if os.path.islink(parent):
            raise TustPathError(
                f"Refusing to write through symbolic link '{parent}'"
            )


def _copy_file(src: str, dest: str):
    """
    Copy the content and mode of ``src`` to ``dest``. A symbolic link at
    ``dest`` is replaced by a regular file, never written through.
    """
    if os.path.islink(dest):
        _log_debug_sandbox("Replacing symbolic link %s", dest)
        os.unlink(dest)
    shutil.copyfile(src, dest)
    shutil.copymode(src, dest)


def _apply_one(original: str, modified: str, change: Change):
    original_path = os.path.join(original, change.path)
    modified_path = os.path.join(modified, change.path)

    _check_parents(original, change.path)

    if change.change_type == ChangeType.CREATE:
        parent = os.path.dirname(original_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        # A directory emptied by earlier deletions gives way to a new file.
        if os.path.isdir(original_path) and not os.path.islink(original_path):
            _log_debug_sandbox("Removing empty directory tree %s", original_path)
            _remove_empty_tree(original_path)
        _copy_file(modified_path, original_path)
    elif change.change_type == ChangeType.MODIFY:
        _copy_file(modified_path, original_path)
    elif change.change_type == ChangeType.DELETE:
        os.unlink(original_path)
    else:
        raise ValueError(f"Unknown change type: {change.change_type}")


def apply_changes(original: str, modified: str, changes: Iterable[Change]) -> int:
    """
    Apply ``changes`` to the tree at ``original`` using the tree at
    ``modified`` as the source of file content.

    Changes are applied in the order given. Created files have their
    parent directories created first; modified files are overwritten in
    place and deleted files are removed. Created and modified files take
    the mode of the sandbox file. Directories left empty by deletions are
    not removed, unless a created file takes their place.
    Use ``ChangeSet.apply_order()`` to apply deletions before creations.

    Symbolic links in ``original`` are never followed: a link at a target
    path is replaced by a regular file, and a change below a linked
    directory fails.

    There is no rollback: if a change fails, the changes applied before it
    remain applied and the original tree may match neither the original
    nor the modified state.

    :param original: The root of the tree to modify.
    :type original: ``str``
    :param modified: The root of the tree holding the new content.
    :type modified: ``str``
    :param changes: The changes to apply, as returned by ``compare_trees()``
                    for the same pair of roots.
    :type changes: ``Iterable[Change]``
    :returns: The number of changes applied.
    :rtype: ``int``
    :raises TustApplyError: If any change cannot be applied.
    """
    original = os.fspath(original)
    modified = os.fspath(modified)

    applied = 0
    for change in changes:
        _log_debug_sandbox("Applying %s", change)
        try:
            _apply_one(original, modified, change)
        except (OSError, TustPathError) as err:
            raise TustApplyError(change, applied, str(err)) from err
        applied += 1

    _log_info("Applied %d changes to %s", applied, original)
    return applied


__all__ = [
    "apply_changes",
]
