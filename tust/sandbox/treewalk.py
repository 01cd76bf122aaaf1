# Copyright Red Hat
#
# tust/sandbox/treewalk.py - Test-in-sandbox tree collector
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree walking support for sandbox comparisons.
"""
from typing import Set
import logging
import posixpath
import os

from tust import TUST_SUBSYSTEM_SANDBOX, TustSystemError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_sandbox(msg, *args, **kwargs):
    """A wrapper for sandbox subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TUST_SUBSYSTEM_SANDBOX}, **kwargs)


def entry_type_desc(entry: os.DirEntry) -> str:
    """
    Return a string description of a directory entry's type without
    following symbolic links.

    :param entry: The directory entry to describe.
    :type entry: ``os.DirEntry``
    :returns: "symbolic link", "directory", "file" or "other".
    :rtype: ``str``
    """
    if entry.is_symlink():
        return "symbolic link"
    if entry.is_dir(follow_symlinks=False):
        return "directory"
    if entry.is_file(follow_symlinks=False):
        return "file"
    return "other"


def rel_join(prefix: str, name: str) -> str:
    """
    Join a relative path prefix and an entry name using "/" separators.

    :param prefix: The relative path of the containing directory, or "".
    :type prefix: ``str``
    :param name: The entry name.
    :type name: ``str``
    :returns: The relative path of the entry.
    :rtype: ``str``
    """
    return posixpath.join(prefix, name) if prefix else name


def _collect(base: str, prefix: str, files: Set[str]):
    with os.scandir(base) as it:
        for entry in it:
            rel_path = rel_join(prefix, entry.name)
            if entry.is_dir(follow_symlinks=False):
                _collect(entry.path, rel_path, files)
            elif entry.is_file(follow_symlinks=False):
                files.add(rel_path)
            else:
                _log_debug_sandbox(
                    "Excluding %s '%s'", entry_type_desc(entry), rel_path
                )


def collect_files(root: str, prefix: str = "") -> Set[str]:
    """
    Collect the relative paths of all regular files below ``root``.

    Directories are descended into and regular files recorded. Symbolic
    links (which are never followed), device nodes, FIFOs and sockets are
    excluded from the result.

    :param root: The directory to walk.
    :type root: ``str``
    :param prefix: A relative path prefix joined onto every result.
    :type prefix: ``str``
    :returns: A set of relative paths using "/" separators.
    :rtype: ``Set[str]``
    :raises TustSystemError: If ``root`` or any directory below it cannot
                             be read. No partial result is returned.
    """
    files = set()
    _log_debug_sandbox("Collecting files from %s", root)
    try:
        _collect(os.fspath(root), prefix, files)
    except OSError as err:
        raise TustSystemError(f"Failed to collect files from {root}: {err}") from err
    _log_debug_sandbox("Collected %d files from %s", len(files), root)
    return files


__all__ = [
    "collect_files",
    "entry_type_desc",
    "rel_join",
]
