"""A small logger that writes optionally coloured text to stdout or stderr."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO


class Color(Enum):
    """Output colours; each can be overridden by an environment variable."""

    DEFAULT = ("TASK_COLOR_RESET", 0)
    BLUE = ("TASK_COLOR_BLUE", 34)
    GREEN = ("TASK_COLOR_GREEN", 32)
    CYAN = ("TASK_COLOR_CYAN", 36)
    YELLOW = ("TASK_COLOR_YELLOW", 33)
    MAGENTA = ("TASK_COLOR_MAGENTA", 35)
    RED = ("TASK_COLOR_RED", 31)

    def __init__(self, env_var: str, default_code: int) -> None:
        self.env_var = env_var
        self.default_code = default_code

    @property
    def code(self) -> int:
        """The SGR code to use, taking the environment override into account."""
        try:
            return int(os.environ.get(self.env_var, ""))
        except ValueError:
            return self.default_code


def _colors_enabled(stream: TextIO) -> bool:
    if "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb":
        return False
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False


@dataclass
class Logger:
    """Prints messages to stdout or stderr, with optional colour."""

    stdout: TextIO | None = None
    stderr: TextIO | None = None
    verbose: bool = False
    color: bool = False

    @property
    def _stdout(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    @property
    def _stderr(self) -> TextIO:
        return self.stderr if self.stderr is not None else sys.stderr

    def out(self, color: Color, message: str, *args: object) -> None:
        """Print a line to stdout."""
        self.write(self._stdout, color, message + "\n", *args)

    def write(self, stream: TextIO, color: Color, message: str, *args: object) -> None:
        """Print to the given stream; ``message`` is printf-style when args are given."""
        text = message % args if args else message
        if not self.color:
            color = Color.DEFAULT
        if _colors_enabled(stream):
            text = f"\x1b[{color.code}m{text}\x1b[0m"
        stream.write(text)

    def verbose_out(self, color: Color, message: str, *args: object) -> None:
        """Print a line to stdout in verbose mode only."""
        if self.verbose:
            self.out(color, message, *args)

    def err(self, color: Color, message: str, *args: object) -> None:
        """Print a line to stderr."""
        self.write(self._stderr, color, message + "\n", *args)

    def verbose_err(self, color: Color, message: str, *args: object) -> None:
        """Print a line to stderr in verbose mode only."""
        if self.verbose:
            self.err(color, message, *args)