# Copyright Red Hat
#
# tust/_tust.py - Test-in-sandbox global definitions
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level tust package.
"""
import logging

_log = logging.getLogger("tust")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Tust debugging subsystem mask
TUST_DEBUG_SANDBOX = 1
TUST_DEBUG_COMMAND = 2
TUST_DEBUG_ALL = TUST_DEBUG_SANDBOX | TUST_DEBUG_COMMAND

# Tust debugging subsystem names
TUST_SUBSYSTEM_SANDBOX = "tust.sandbox"
TUST_SUBSYSTEM_COMMAND = "tust.command"

_DEBUG_MASK_TO_SUBSYSTEM = {
    TUST_DEBUG_SANDBOX: TUST_SUBSYSTEM_SANDBOX,
    TUST_DEBUG_COMMAND: TUST_SUBSYSTEM_COMMAND,
}

_debug_subsystems = set()

#: Name prefix shared by sandbox creation and clean mode.
TUST_TEMP_PREFIX = "tust-"


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        if record.levelno != logging.DEBUG:
            return True

        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``tust`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    tust_log = logging.getLogger("tust")

    for handler in tust_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``tust`` package.

    :param mask: the logical OR of the ``TUST_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > TUST_DEBUG_ALL:
        raise ValueError(f"Invalid tust debug mask: {mask}")

    enabled_subsystems = []
    for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items():
        if mask & flag:
            enabled_subsystems.append(subsystem_name)

    tust_log = logging.getLogger("tust")
    for handler in tust_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


#
# Tust exception types
#


class TustError(Exception):
    """
    Base class for tust errors.
    """


class TustSystemError(TustError):
    """
    An error when calling the operating system.
    """


class TustCalloutError(TustError):
    """
    An error calling out to an external program.
    """


class TustPathError(TustError):
    """
    An invalid path was supplied, for example copying a tree into a
    subdirectory of itself.
    """


class TustArgumentError(TustError):
    """
    An invalid argument was passed to a tust API call.
    """


class TustStateError(TustError):
    """
    The state of an object does not allow an operation to proceed.
    """


class TustApplyError(TustError):
    """
    Applying a change set to the original tree stopped part way through.
    Changes applied before the failure are not rolled back.
    """

    def __init__(self, change, applied: int, reason: str):
        """
        Initialise a new `TustApplyError` exception.

        :param change: The change that could not be applied.
        :param applied: The number of changes applied before the failure.
        :param reason: The error message from the failed operation.
        """
        self.change, self.applied, self.reason = change, applied, reason
        msg = f"Failed to apply {change} after {applied} change(s): {reason}"
        super().__init__(msg)


__all__ = [
    "TUST_DEBUG_SANDBOX",
    "TUST_DEBUG_COMMAND",
    "TUST_DEBUG_ALL",
    "TUST_SUBSYSTEM_SANDBOX",
    "TUST_SUBSYSTEM_COMMAND",
    "TUST_TEMP_PREFIX",
    "SubsystemFilter",
    "get_debug_mask",
    "set_debug_mask",
    # Exception types
    "TustError",
    "TustSystemError",
    "TustCalloutError",
    "TustPathError",
    "TustArgumentError",
    "TustStateError",
    "TustApplyError",
]
