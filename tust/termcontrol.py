# Copyright Red Hat
#
# tust/termcontrol.py - Test-in-sandbox terminal control
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Terminal control for colored operator output.
"""
from typing import List, Optional, TextIO
import curses
import sys

#: Accepted values for the ``color`` argument.
COLOR_MODES = ["auto", "always", "never"]


class TermControl:
    """
    A class for portable colored terminal output.

    Uses the curses package to look up the control sequences for the
    current terminal. Each attribute holds the sequence for one action
    and may be included directly in output:

        >>> term = TermControl()
        >>> print("Created " + term.GREEN + "file" + term.NORMAL)

    If the terminal does not support an action, or the stream is not a
    tty and color was not forced, the attribute is the empty string so
    output degrades to plain text.
    """

    # Output modes:
    BOLD: str = ""  #: Turn on bold mode
    NORMAL: str = ""  #: Turn off all modes

    # Foreground colors:
    BLACK: str = ""  #: Black foreground color
    BLUE: str = ""  #: Blue foreground color
    GREEN: str = ""  #: Green foreground color
    CYAN: str = ""  #: Cyan foreground color
    RED: str = ""  #: Red foreground color
    MAGENTA: str = ""  #: Magenta foreground color
    YELLOW: str = ""  #: Yellow foreground color
    WHITE: str = ""  #: White foreground color

    _STRING_CAPABILITIES: List[str] = "BOLD:bold NORMAL:sgr0".split()
    _ANSI_COLORS: List[str] = "BLACK RED GREEN YELLOW BLUE MAGENTA CYAN WHITE".split()

    def _force_ansi(self):
        ansi_codes = {
            "BLACK": "\033[0;30m",
            "RED": "\033[0;31m",
            "GREEN": "\033[0;32m",
            "YELLOW": "\033[0;33m",
            "BLUE": "\033[0;34m",
            "MAGENTA": "\033[0;35m",
            "CYAN": "\033[0;36m",
            "WHITE": "\033[0;37m",
        }
        for color, code in ansi_codes.items():
            setattr(self, color, code)
        setattr(self, "BOLD", "\033[1m")
        setattr(self, "NORMAL", "\033[0m")

    def _init_colors(self):
        """
        Initialize terminal color codes.
        """
        set_fg_ansi = self._tigetstr("setaf")
        if set_fg_ansi:
            set_fg_ansi = set_fg_ansi.encode("utf8")
            for i, color in enumerate(self._ANSI_COLORS):
                setattr(self, color, curses.tparm(set_fg_ansi, i).decode("utf8") or "")

    def __init__(self, term_stream: Optional[TextIO] = None, color: str = "auto"):
        """
        Initialize terminal capabilities.

        :param term_stream: Output stream to probe for capabilities.
        :type term_stream: ``Optional[TextIO]``
        :param color: A string to control color rendering: "auto", "always", or
                      "never".
        :type color: ``str``
        """
        if color not in COLOR_MODES:
            raise ValueError(f"Invalid color mode: {color}")

        if term_stream is None:
            term_stream = sys.stdout

        self.term_stream = term_stream

        if color == "never":
            return

        if color != "always":
            if not hasattr(term_stream, "isatty") or not term_stream.isatty():
                return

        try:
            curses.setupterm()
        # curses.error cannot be named in an except clause before setupterm()
        # has initialised the module, so catch broadly and re-raise exits.
        except BaseException as err:  # pylint: disable=broad-exception-caught
            if isinstance(err, (KeyboardInterrupt, SystemExit)):  # pragma: no cover
                raise
            if color == "always":
                self._force_ansi()
            return

        for capability in self._STRING_CAPABILITIES:
            (attr, cap_name) = capability.split(":")
            setattr(self, attr, self._tigetstr(cap_name) or "")

        self._init_colors()

    def _tigetstr(self, cap_name):
        # Strip terminfo padding delays of the form "$<2>".
        cap = curses.tigetstr(cap_name)
        cap = cap.decode(encoding="utf8") if cap else ""
        return cap.split("$", maxsplit=1)[0]


__all__ = [
    "COLOR_MODES",
    "TermControl",
]
