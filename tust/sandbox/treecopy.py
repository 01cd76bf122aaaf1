# Copyright Red Hat
#
# tust/sandbox/treecopy.py - Test-in-sandbox tree copier
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree copying support for populating sandboxes.
"""
import logging
import shutil
import os

from tust import TUST_SUBSYSTEM_SANDBOX, TustPathError, TustSystemError

from .treewalk import entry_type_desc

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_sandbox(msg, *args, **kwargs):
    """A wrapper for sandbox subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TUST_SUBSYSTEM_SANDBOX}, **kwargs)


def _is_within(path: str, parent: str) -> bool:
    """
    Return ``True`` if ``path`` is ``parent`` or lies below it after
    resolving symbolic links.
    """
    path = os.path.realpath(path)
    parent = os.path.realpath(parent)
    return os.path.commonpath([path, parent]) == parent


def _copy(src: str, dest: str) -> int:
    copied = 0
    os.makedirs(dest, exist_ok=True)
    with os.scandir(src) as it:
        for entry in it:
            dest_path = os.path.join(dest, entry.name)
            if entry.is_dir(follow_symlinks=False):
                copied += _copy(entry.path, dest_path)
            elif entry.is_file(follow_symlinks=False):
                shutil.copy2(entry.path, dest_path)
                copied += 1
            else:
                _log_debug_sandbox(
                    "Skipping %s '%s'", entry_type_desc(entry), entry.path
                )
    return copied


def copy_tree(src: str, dest: str) -> int:
    """
    Copy the directory tree at ``src`` to ``dest``.

    Directories and regular file contents are reproduced below ``dest``,
    which is created along with any missing parents. File modes and
    timestamps are preserved. Entry types that are excluded from tree
    collection (symbolic links and special files) are skipped, so that the
    copy collects to the same set of files as the source.

    A destination equal to, or inside, the source tree is not supported.

    :param src: The source directory.
    :type src: ``str``
    :param dest: The destination directory.
    :type dest: ``str``
    :returns: The number of files copied.
    :rtype: ``int``
    :raises TustPathError: If ``dest`` lies within ``src``.
    :raises TustSystemError: If any source entry cannot be read or any
                             destination path cannot be written. The
                             partially populated destination is left in
                             place.
    """
    src = os.fspath(src)
    dest = os.fspath(dest)
    if _is_within(dest, src):
        raise TustPathError(f"Cannot copy {src} into itself ({dest})")

    _log_debug_sandbox("Copying tree %s to %s", src, dest)
    try:
        copied = _copy(src, dest)
    except OSError as err:
        raise TustSystemError(f"Failed to copy {src} to {dest}: {err}") from err
    _log_debug_sandbox("Copied %d files from %s to %s", copied, src, dest)
    return copied


__all__ = [
    "copy_tree",
]
