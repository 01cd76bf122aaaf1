# Copyright Red Hat
#
# tust/sandbox/differ.py - Test-in-sandbox tree differ
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Compare an original tree with its modified sandbox copy.
"""
import logging
import os

from tust import TUST_SUBSYSTEM_SANDBOX, TustSystemError

from .changes import ChangeSet, Create, Delete, Modify
from .treewalk import collect_files

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Read size used when comparing file contents.
_CHUNK_SIZE = 65536


def _log_debug_sandbox(msg, *args, **kwargs):
    """A wrapper for sandbox subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TUST_SUBSYSTEM_SANDBOX}, **kwargs)


def _same_content(path_a: str, path_b: str) -> bool:
    """
    Compare the byte content of two files of equal size.

    :returns: ``True`` if the contents are identical.
    :rtype: ``bool``
    """
    with open(path_a, "rb") as fa, open(path_b, "rb") as fb:
        for chunk_a in iter(lambda: fa.read(_CHUNK_SIZE), b""):
            if chunk_a != fb.read(len(chunk_a)):
                return False
        # The files may have grown since they were stat'ed.
        return fb.read(1) == b""


def file_differs(path_a: str, path_b: str) -> bool:
    """
    Return ``True`` if the regular files at ``path_a`` and ``path_b`` differ
    in size or in byte content. Metadata such as timestamps and modes is
    ignored.

    :param path_a: The first file.
    :type path_a: ``str``
    :param path_b: The second file.
    :type path_b: ``str``
    :rtype: ``bool``
    :raises OSError: If either file cannot be read.
    """
    if os.stat(path_a).st_size != os.stat(path_b).st_size:
        return True
    return not _same_content(path_a, path_b)


def compare_trees(original: str, modified: str) -> ChangeSet:
    """
    Compare the trees at ``original`` and ``modified`` and return the
    changes that transform ``original`` into ``modified``.

    Paths only found in ``modified`` are ``Create`` changes, paths only
    found in ``original`` are ``Delete`` changes and paths found in both
    are ``Modify`` changes if their size or content differs. Unchanged
    paths are not included.

    :param original: The root of the original tree.
    :type original: ``str``
    :param modified: The root of the modified tree.
    :type modified: ``str``
    :returns: The changes found, in no particular order.
    :rtype: ``ChangeSet``
    :raises TustSystemError: If either tree cannot be collected, or the
                             metadata or content of a collected file cannot
                             be read.
    """
    original = os.fspath(original)
    modified = os.fspath(modified)

    original_files = collect_files(original)
    modified_files = collect_files(modified)

    changes = [Create(path) for path in modified_files - original_files]
    changes.extend(Delete(path) for path in original_files - modified_files)

    for path in original_files & modified_files:
        original_path = os.path.join(original, path)
        modified_path = os.path.join(modified, path)
        try:
            if file_differs(original_path, modified_path):
                changes.append(Modify(path))
        except OSError as err:
            raise TustSystemError(f"Failed to compare '{path}': {err}") from err

    _log_debug_sandbox(
        "Compared %s (%d files) with %s (%d files): %d changes",
        original,
        len(original_files),
        modified,
        len(modified_files),
        len(changes),
    )
    return ChangeSet(changes)


__all__ = [
    "compare_trees",
    "file_differs",
]
