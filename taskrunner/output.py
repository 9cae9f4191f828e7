"""Output styles that wrap the stdout and stderr of running tasks."""

from __future__ import annotations

import io
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, TextIO

from .errors import TaskError

CloseFunc = Callable[[], None]


class OutputError(TaskError):
    """An output style is unknown or misconfigured."""


class _Replacer(Protocol):
    def replace(self, text: str) -> str: ...


def _flush_stream(stream: Any) -> None:
    flush = getattr(stream, "flush", None)
    if callable(flush):
        flush()


class Interleaved:
    """Pass output through unchanged."""

    def wrap_writer(
        self, stdout: TextIO, stderr: TextIO, prefix: str = "", templater: Any = None
    ) -> tuple[TextIO, TextIO, CloseFunc]:
        return stdout, stderr, lambda: None


class _GroupWriter:
    def __init__(self, target: TextIO, begin: str, end: str) -> None:
        self._target = target
        self._buffer = io.StringIO()
        self._begin = begin
        self._end = end

    def write(self, text: str) -> int:
        return self._buffer.write(text)

    def flush(self) -> None:
        """Flush the target; buffered group output stays held until close."""
        _flush_stream(self._target)

    def close(self) -> None:
        content = self._buffer.getvalue()
        if not content:
            return
        self._buffer = io.StringIO()
        self._target.write(self._begin + content + self._end)


@dataclass
class Group:
    """Buffer all output and print it at once, between optional begin/end lines."""

    begin: str = ""
    end: str = ""

    def wrap_writer(
        self,
        stdout: TextIO,
        stderr: TextIO,
        prefix: str = "",
        templater: _Replacer | None = None,
    ) -> tuple[Any, Any, CloseFunc]:
        begin = templater.replace(self.begin) + "\n" if self.begin and templater else ""
        end = templater.replace(self.end) + "\n" if self.end and templater else ""
        if self.begin and templater is None:
            begin = self.begin + "\n"
        if self.end and templater is None:
            end = self.end + "\n"
        writer = _GroupWriter(stdout, begin, end)
        return writer, writer, writer.close


class _PrefixWriter:
    def __init__(self, target: TextIO, prefix: str) -> None:
        self._target = target
        self._prefix = prefix
        self._pending = ""

    def write(self, text: str) -> int:
        self._pending += text
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self._write_line(line + "\n")
        return len(text)

    def flush(self) -> None:
        """Flush the target; an incomplete line stays pending until close."""
        _flush_stream(self._target)

    def close(self) -> None:
        pending, self._pending = self._pending, ""
        self._write_line(pending)

    def _write_line(self, line: str) -> None:
        if not line:
            return
        if not line.endswith("\n"):
            line += "\n"
        self._target.write(f"[{self._prefix}] {line}")


class Prefixed:
    """Prefix every output line with the task name."""

    def wrap_writer(
        self, stdout: TextIO, stderr: TextIO, prefix: str = "", templater: Any = None
    ) -> tuple[Any, Any, CloseFunc]:
        writer = _PrefixWriter(stdout, prefix)
        return writer, writer, writer.close


def build_for(
    name: str = "", group_begin: str = "", group_end: str = ""
) -> Interleaved | Group | Prefixed:
    """Build the output style with the given name."""
    group_set = bool(group_begin or group_end)
    if name in ("interleaved", ""):
        style: Interleaved | Group | Prefixed = Interleaved()
    elif name == "group":
        return Group(begin=group_begin, end=group_end)
    elif name == "prefixed":
        style = Prefixed()
    else:
        raise OutputError(f'task: output style "{name}" not recognized')
    if group_set:
        raise OutputError(
            f'task: output style "{name}" does not support the group begin/end parameter'
        )
    return style