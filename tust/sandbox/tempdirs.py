# Copyright Red Hat
#
# tust/sandbox/tempdirs.py - Test-in-sandbox temporary directory lifecycle
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Sandbox directory creation and clean up.

Sandboxes are created below the standard temporary directory with a fixed
name prefix so that any left behind (for example when ``tust`` is killed)
can be found and removed later by ``clean_sandboxes()``.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union
from subprocess import run
import tempfile
import logging
import shutil
import shlex
import os

from tust import (
    TUST_SUBSYSTEM_SANDBOX,
    TUST_TEMP_PREFIX,
    TustArgumentError,
    TustCalloutError,
    TustStateError,
    TustSystemError,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_sandbox(msg, *args, **kwargs):
    """A wrapper for sandbox subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TUST_SUBSYSTEM_SANDBOX}, **kwargs)


class Sandbox:
    """
    An exclusively owned temporary directory used as a scratch copy of the
    tree under test.

    ``Sandbox`` is a context manager: the directory is created on entry
    and removed with all of its contents on exit, whether the block
    returns normally or raises, unless ``keep`` is set.
    """

    def __init__(
        self,
        prefix: str = TUST_TEMP_PREFIX,
        temp_root: Optional[str] = None,
        keep: bool = False,
    ):
        """
        Initialise a new ``Sandbox``.

        :param prefix: The directory name prefix.
        :type prefix: ``str``
        :param temp_root: The directory to create the sandbox in, or
                          ``None`` for the standard temporary directory.
        :type temp_root: ``Optional[str]``
        :param keep: Leave the sandbox on disk when the context exits.
        :type keep: ``bool``
        """
        self.prefix = prefix
        self.temp_root = temp_root
        self.keep = keep
        #: The sandbox directory path, set by ``create()``.
        self.path: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"Sandbox(prefix={self.prefix!r}, temp_root={self.temp_root!r}, "
            f"keep={self.keep!r})"
        )

    def __str__(self) -> str:
        return self.path or ""

    def __fspath__(self) -> str:
        if self.path is None:
            raise TustStateError("Sandbox has not been created")
        return self.path

    def create(self) -> str:
        """
        Create a new, empty, uniquely named sandbox directory.

        :returns: The path to the new directory.
        :rtype: ``str``
        :raises TustStateError: If this sandbox already has a directory.
        :raises TustSystemError: If the directory cannot be created.
        """
        if self.path is not None:
            raise TustStateError(f"Sandbox already created at {self.path}")
        try:
            self.path = tempfile.mkdtemp(prefix=self.prefix, dir=self.temp_root)
        except OSError as err:
            raise TustSystemError(
                f"Failed to create temporary directory: {err}"
            ) from err
        _log_info("Created temporary directory: %s", self.path)
        return self.path

    def cleanup(self):
        """
        Remove the sandbox directory and its contents. Failure to remove
        the directory is logged and otherwise ignored: a leftover sandbox
        can be removed later by ``clean_sandboxes()``.
        """
        if self.path is None:
            return
        path, self.path = self.path, None
        try:
            shutil.rmtree(path)
            _log_debug_sandbox("Removed temporary directory: %s", path)
        except OSError as err:
            _log_warn("Failed to remove temporary directory %s: %s", path, err)

    def exec(self, command: Union[str, Iterable[str]]) -> int:
        """
        Execute ``command`` with the sandbox as its working directory and
        wait for it to exit. No timeout is applied.

        :param command: A command and its arguments, either as a sequence
                        or as a string suitable for ``shlex.split()``.
        :returns: The exit status of the command. A command killed by
                  signal N returns ``-N``.
        :rtype: ``int``
        :raises TustStateError: If the sandbox has not been created.
        :raises TustArgumentError: If ``command`` is empty or cannot be
                                   parsed.
        :raises TustCalloutError: If the command cannot be executed.
        """
        if self.path is None:
            raise TustStateError("Sandbox has not been created")
        if isinstance(command, str):
            try:
                cmd_args = shlex.split(command)
            except ValueError as err:
                raise TustArgumentError(
                    f"Cannot parse command string: {command}"
                ) from err
        else:
            cmd_args = list(command)

        if not cmd_args:
            raise TustArgumentError("No command provided")

        _log_debug_sandbox(
            "Running command in %s: %s", self.path, " ".join(cmd_args)
        )
        try:
            status = run(cmd_args, cwd=self.path, check=False)
        except OSError as err:
            raise TustCalloutError(
                f"Failed to execute command {cmd_args[0]}: {err}"
            ) from err
        return status.returncode

    def __enter__(self) -> "Sandbox":
        self.create()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.keep:
            _log_info("Keeping temporary directory: %s", self.path)
        else:
            self.cleanup()
        return False


@dataclass
class CleanReport:
    """
    The outcome of a ``clean_sandboxes()`` scan.
    """

    #: The directory that was scanned.
    temp_root: str
    #: Sandbox directories that were removed.
    removed: List[str] = field(default_factory=list)
    #: ``(path, error message)`` pairs for directories that were not.
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def count(self) -> int:
        """
        The number of sandbox directories successfully removed.

        :rtype: ``int``
        """
        return len(self.removed)


def clean_sandboxes(
    temp_root: Optional[str] = None, prefix: str = TUST_TEMP_PREFIX
) -> CleanReport:
    """
    Remove all sandbox directories found directly below ``temp_root``.

    Every directory whose name starts with ``prefix`` is removed with its
    contents. Symbolic links and non-directory entries are never touched.
    Each removal is attempted independently: a failure is recorded in the
    returned report and the scan continues.

    :param temp_root: The directory to scan, or ``None`` for the standard
                      temporary directory.
    :type temp_root: ``Optional[str]``
    :param prefix: The sandbox directory name prefix.
    :type prefix: ``str``
    :returns: A report of removed and failed directories.
    :rtype: ``CleanReport``
    :raises TustSystemError: If ``temp_root`` cannot be listed.
    """
    temp_root = os.fspath(temp_root) if temp_root else tempfile.gettempdir()
    report = CleanReport(temp_root)

    _log_debug_sandbox("Scanning temporary directory: %s", temp_root)
    try:
        with os.scandir(temp_root) as it:
            candidates = [
                entry.path
                for entry in it
                if entry.name.startswith(prefix)
                and entry.is_dir(follow_symlinks=False)
            ]
    except OSError as err:
        raise TustSystemError(
            f"Failed to scan temporary directory {temp_root}: {err}"
        ) from err

    for path in sorted(candidates):
        _log_debug_sandbox("Found tust temporary directory: %s", path)
        try:
            shutil.rmtree(path)
        except OSError as err:
            _log_warn("Failed to delete temporary directory %s: %s", path, err)
            report.failed.append((path, str(err)))
            continue
        _log_info("Deleted temporary directory: %s", path)
        report.removed.append(path)

    _log_info("Cleaned up %d temporary directories", report.count)
    return report


__all__ = [
    "CleanReport",
    "Sandbox",
    "clean_sandboxes",
]
