# Copyright Red Hat
#
# tust/command.py - Test-in-sandbox command interface
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``tust.command`` module provides the tust command line interface.

``tust COMMAND [ARGS...]`` copies the current directory into a temporary
sandbox, runs the command there and shows the files it would create,
modify or delete. If the operator confirms, the same changes are applied to
the current directory. ``tust --clean`` removes sandboxes left behind by
earlier runs.
"""
from argparse import ArgumentParser, REMAINDER
from typing import Optional, TextIO
from os.path import basename
import logging
import sys
import os

from tust import (
    TUST_DEBUG_SANDBOX,
    TUST_DEBUG_COMMAND,
    TUST_DEBUG_ALL,
    TUST_SUBSYSTEM_COMMAND,
    TustError,
    TustApplyError,
    TustArgumentError,
    TustCalloutError,
    TustSystemError,
    SubsystemFilter,
    set_debug_mask,
    __version__,
)
from .sandbox import (
    ChangeSet,
    ChangeType,
    CleanReport,
    Sandbox,
    apply_changes,
    clean_sandboxes,
    compare_trees,
    copy_tree,
)
from .termcontrol import COLOR_MODES, TermControl

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TUST_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None

#: Terminal colors used for each change marker.
_MARKER_COLORS = {
    ChangeType.CREATE: "GREEN",
    ChangeType.MODIFY: "YELLOW",
    ChangeType.DELETE: "RED",
}

#: Exit status base for a command killed by a signal.
_SIGNAL_STATUS_BASE = 128


def _exit_status(returncode: int) -> int:
    """
    Convert a ``subprocess`` return code into a process exit status.

    :param returncode: The child return code: ``-N`` for signal N.
    :type returncode: ``int``
    :returns: The exit status to propagate.
    :rtype: ``int``
    """
    if returncode < 0:
        return _SIGNAL_STATUS_BASE - returncode
    return returncode


def print_changes(
    changes: ChangeSet, term_control: TermControl, out: Optional[TextIO] = None
):
    """
    Print the changes in ``changes`` in presentation order, one line per
    change with a colored marker.

    :param changes: The changes to print.
    :type changes: ``ChangeSet``
    :param term_control: Terminal control for colored output.
    :type term_control: ``TermControl``
    :param out: The stream to print to (default ``sys.stdout``).
    :type out: ``Optional[TextIO]``
    """
    tc = term_control
    out = out or sys.stdout
    print(f"\n{tc.BLUE}{tc.BOLD}Changes that would be made:{tc.NORMAL}", file=out)
    for change in changes.sorted():
        _log_debug_command(change.describe())
        color = getattr(tc, _MARKER_COLORS[change.change_type])
        print(f"  {color}{change.marker} {tc.NORMAL}{change.path}", file=out)


def confirm(
    prompt: str,
    term_control: TermControl,
    stream: Optional[TextIO] = None,
    out: Optional[TextIO] = None,
) -> bool:
    """
    Print ``prompt`` and read one line of input from ``stream``.

    :param prompt: The question to ask.
    :type prompt: ``str``
    :param term_control: Terminal control for colored output.
    :type term_control: ``TermControl``
    :param stream: The input stream (default ``sys.stdin``).
    :type stream: ``Optional[TextIO]``
    :param out: The output stream (default ``sys.stdout``).
    :type out: ``Optional[TextIO]``
    :returns: ``True`` only if the answer is "y" or "Y", ignoring
              surrounding whitespace. End of input is a refusal.
    :rtype: ``bool``
    :raises OSError: If the input stream cannot be read.
    """
    tc = term_control
    stream = stream or sys.stdin
    out = out or sys.stdout
    print(f"\n{tc.YELLOW}{prompt} (y/n){tc.NORMAL}", file=out, flush=True)
    answer = stream.readline()
    return answer.strip().lower() == "y"


def print_clean_report(
    report: CleanReport,
    term_control: TermControl,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
):
    """
    Print the result of a clean mode scan.

    :param report: The report returned by ``clean_sandboxes()``.
    :type report: ``CleanReport``
    :param term_control: Terminal control for colored output.
    :type term_control: ``TermControl``
    :param out: The stream for removed directories and the final count.
    :type out: ``Optional[TextIO]``
    :param err: The stream for removal failures.
    :type err: ``Optional[TextIO]``
    """
    tc = term_control
    out = out or sys.stdout
    err = err or sys.stderr
    for path in report.removed:
        print(f"  {tc.RED}-{tc.NORMAL}{path}", file=out)
    for path, reason in report.failed:
        print(f"  {tc.YELLOW}!{tc.NORMAL}{path}: {reason}", file=err)
    print(
        f"{tc.BLUE}Cleaned up {report.count} temporary directories{tc.NORMAL}",
        file=out,
    )


def clean(term_control: TermControl, temp_root: Optional[str] = None) -> int:
    """
    Remove all leftover sandbox directories and print the result.

    :param term_control: Terminal control for colored output.
    :type term_control: ``TermControl``
    :param temp_root: The directory to scan (default: the standard
                      temporary directory).
    :type temp_root: ``Optional[str]``
    :returns: integer status code returned from ``main()``
    """
    _log_info("Starting cleanup of temporary directories")
    try:
        report = clean_sandboxes(temp_root)
    except TustError as err:
        _log_error("Failed to clean temporary directories: %s", err)
        return 1
    print_clean_report(report, term_control)
    return 0


def _apply(current_dir: str, sandbox: Sandbox, changes: ChangeSet, tc) -> int:
    """
    Apply ``changes`` from ``sandbox`` to ``current_dir`` and report the
    outcome.
    """
    _log_info("Applying %d changes", len(changes))
    try:
        apply_changes(current_dir, sandbox.path, changes.apply_order())
    except TustApplyError as err:
        _log_error("Failed to apply changes: %s", err)
        if err.applied:
            _log_error(
                "%d change(s) were applied before the failure and were "
                "not rolled back",
                err.applied,
            )
        return 1
    print(f"{tc.GREEN}Changes applied successfully{tc.NORMAL}")
    return 0


def _test_command(
    command,
    current_dir: str,
    sandbox: Sandbox,
    term_control: TermControl,
    assume_yes: bool,
    stream: Optional[TextIO],
    as_json: bool = False,
) -> int:
    """
    Populate ``sandbox``, run ``command`` in it and apply the resulting
    changes to ``current_dir`` if confirmed.
    """
    tc = term_control
    print(f"{tc.YELLOW}Testing command in temporary directory...{tc.NORMAL}")
    try:
        copy_tree(current_dir, sandbox.path)
    except TustError as err:
        _log_error("Failed to copy directory contents: %s", err)
        return 1

    _log_info("Running command in temporary directory: %s", " ".join(command))
    try:
        returncode = sandbox.exec(command)
    except (TustArgumentError, TustCalloutError) as err:
        _log_error("Failed to execute command: %s", err)
        return 1

    if returncode:
        status = _exit_status(returncode)
        _log_error("Command failed with exit code: %d", status)
        return status

    _log_info("Command executed successfully")

    try:
        changes = compare_trees(current_dir, sandbox.path)
    except TustError as err:
        _log_error("Failed to compare directories: %s", err)
        return 1

    _log_info("Found %d changes (%s)", len(changes), changes.summary())
    if not changes:
        print(f"{tc.GREEN}No changes would be made{tc.NORMAL}")
        return 0

    if as_json:
        print(changes.json(pretty=True))
    else:
        print_changes(changes, tc)

    if not assume_yes:
        try:
            confirmed = confirm(
                "Would you like to apply these changes?", tc, stream=stream
            )
        except OSError as err:
            _log_error("Failed to read input: %s", err)
            return 1
        if not confirmed:
            _log_info("User aborted the operation")
            print(f"{tc.RED}Aborted{tc.NORMAL}")
            return 0

    return _apply(current_dir, sandbox, changes, tc)


def run_in_sandbox(
    command,
    current_dir: str,
    term_control: TermControl,
    keep: bool = False,
    assume_yes: bool = False,
    stream: Optional[TextIO] = None,
    as_json: bool = False,
) -> int:
    """
    Run ``command`` in a sandbox copy of ``current_dir``, show the changes
    it makes and apply them to ``current_dir`` if confirmed.

    The original directory is only written to after the operator has
    confirmed the change list (or ``assume_yes`` is set).

    :param command: The command and its arguments.
    :type command: ``List[str]``
    :param current_dir: The directory to test the command against.
    :type current_dir: ``str``
    :param term_control: Terminal control for colored output.
    :type term_control: ``TermControl``
    :param keep: Leave the sandbox on disk after the run.
    :type keep: ``bool``
    :param assume_yes: Apply changes without asking.
    :type assume_yes: ``bool``
    :param stream: The confirmation input stream (default ``sys.stdin``).
    :type stream: ``Optional[TextIO]``
    :param as_json: Print the change list as JSON.
    :type as_json: ``bool``
    :returns: integer status code returned from ``main()``
    """
    sandbox = Sandbox(keep=keep)
    try:
        sandbox.create()
    except TustSystemError as err:
        _log_error("Failed to create temporary directory: %s", err)
        return 1

    try:
        return _test_command(
            command,
            current_dir,
            sandbox,
            term_control,
            assume_yes,
            stream,
            as_json=as_json,
        )
    finally:
        if keep:
            print(f"Temporary directory kept at {sandbox.path}")
        else:
            sandbox.cleanup()


def _clean_cmd(cmd_args):
    """
    Clean mode command handler.

    Remove all tust sandbox directories from the temporary directory.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    if cmd_args.command:
        _log_info("Ignoring command in clean mode: %s", " ".join(cmd_args.command))
    return clean(TermControl(color=cmd_args.color))


def _run_cmd(cmd_args):
    """
    Sandbox run command handler.

    Test the given command in a sandbox copy of the current directory.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    if not cmd_args.command:
        _log_error("No command provided")
        return 1

    try:
        current_dir = os.getcwd()
    except OSError as err:
        _log_error("Failed to get current directory: %s", err)
        return 1
    _log_info("Current directory: %s", current_dir)

    return run_in_sandbox(
        cmd_args.command,
        current_dir,
        TermControl(color=cmd_args.color),
        keep=cmd_args.keep_sandbox,
        assume_yes=cmd_args.yes,
        as_json=cmd_args.json,
    )


def setup_logging(cmd_args):
    """
    Set up tust logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    tust_log = logging.getLogger("tust")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    tust_log.setLevel(level)
    if tust_log.hasHandlers():
        tust_log.handlers.clear()

    _tust_subsystem_filter = SubsystemFilter("tust")

    _CONSOLE_HANDLER = logging.StreamHandler(sys.stderr)
    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(_tust_subsystem_filter)

    tust_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down tust logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "sandbox": TUST_DEBUG_SANDBOX,
        "command": TUST_DEBUG_COMMAND,
        "all": TUST_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _get_parser(prog):
    parser = ArgumentParser(
        description="Test a command in a temporary copy of the current directory",
        prog=prog,
    )
    parser.add_argument(
        "-c",
        "--clean",
        action="store_true",
        help="Clean up all tust temporary directories",
    )
    parser.add_argument(
        "-k",
        "--keep-sandbox",
        action="store_true",
        help="Do not remove the temporary directory on exit",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Apply changes without asking for confirmation",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Display the change list in JSON notation",
    )
    parser.add_argument(
        "--color",
        metavar="WHEN",
        choices=COLOR_MODES,
        default="auto",
        help="Colorize output: 'auto', 'always' or 'never'",
    )
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of tust",
        version=__version__,
    )
    parser.add_argument(
        "command",
        metavar="COMMAND",
        nargs=REMAINDER,
        help="The command and arguments to test",
    )
    return parser


def main(args):
    """
    Main entry point for tust.
    """
    parser = _get_parser(basename(args[0]))
    cmd_args = parser.parse_args(args[1:])

    if cmd_args.command and cmd_args.command[0] == "--":
        cmd_args.command = cmd_args.command[1:]

    status = 1

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    func = _clean_cmd if cmd_args.clean else _run_cmd

    if cmd_args.debug:
        status = func(cmd_args)
    else:
        try:
            status = func(cmd_args)
        # pylint: disable=broad-except
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
        except Exception as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


def console_main():
    """
    Console script entry point.
    """
    sys.exit(main(sys.argv))


# vim: set et ts=4 sw=4 :
