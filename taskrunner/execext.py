"""Running shell commands and expanding shell words."""

from __future__ import annotations

import io
import os
import re
import shutil
import subprocess
from collections.abc import Iterable, Mapping
from typing import IO, Any

from .errors import ExitStatusError

EnvSpec = Mapping[str, str] | Iterable[str] | None


def _environ(env: EnvSpec) -> dict[str, str]:
    if not env:
        return dict(os.environ)
    if isinstance(env, Mapping):
        return {str(key): str(value) for key, value in env.items()}
    result = {}
    for item in env:
        key, _, value = item.partition("=")
        result[key] = value
    return result


def _fileno(stream: Any) -> int | None:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _output_target(stream: Any) -> Any:
    if stream is None:
        return subprocess.DEVNULL
    if _fileno(stream) is not None:
        flush = getattr(stream, "flush", None)
        if flush is not None:
            flush()
        return stream
    return subprocess.PIPE


def _write(stream: Any, data: bytes) -> None:
    if not data:
        return
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        stream.write(data)
    else:
        stream.write(data.decode(errors="replace"))


def run_command(
    command: str,
    directory: str = "",
    env: EnvSpec = None,
    stdin: IO[Any] | None = None,
    stdout: IO[Any] | None = None,
    stderr: IO[Any] | None = None,
) -> None:
    """Run ``command`` with ``sh -e``; raise ExitStatusError on a non-zero exit.

    Streams that are ``None`` are connected to the null device.
    """
    shell = shutil.which("sh")
    if shell is None:
        raise FileNotFoundError("execext: no POSIX shell found")

    kwargs: dict[str, Any] = {
        "env": _environ(env),
        "cwd": os.path.abspath(directory) if directory else None,
    }

    if stdin is None:
        kwargs["stdin"] = subprocess.DEVNULL
    elif _fileno(stdin) is not None:
        kwargs["stdin"] = stdin
    else:
        data = stdin.read()
        kwargs["input"] = data.encode() if isinstance(data, str) else data

    kwargs["stdout"] = _output_target(stdout)
    if stderr is not None and stderr is stdout:
        kwargs["stderr"] = subprocess.STDOUT
    else:
        kwargs["stderr"] = _output_target(stderr)

    completed = subprocess.run([shell, "-e", "-c", command], check=False, **kwargs)

    if kwargs["stdout"] is subprocess.PIPE:
        _write(stdout, completed.stdout)
    if kwargs["stderr"] is subprocess.PIPE:
        _write(stderr, completed.stderr)

    code = completed.returncode
    if code < 0:
        code = 128 - code
    if code != 0:
        raise ExitStatusError(code)


def is_exit_error(error: BaseException | None) -> bool:
    """Tell whether ``error`` reports a command's exit status."""
    return isinstance(error, ExitStatusError)


_WORD_PATTERN = re.compile(
    r"""
    \\(?P<escaped>.?)
    | '(?P<single>[^']*)'
    | "(?P<double>(?:[^"\\]|\\.)*)"
    | \$\{(?P<braced>[^}]*)\}
    | \$(?P<name>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<space>[ \t\n]+)
    | (?P<unclosed>['"])
    | (?P<literal>[^\\'"$ \t\n]+|\$)
    """,
    re.VERBOSE | re.DOTALL,
)
_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_WHITESPACE = re.compile(r"[ \t\n]+")
_DOUBLE_INNER = re.compile(
    r"\\(?P<escaped>[$`\"\\\n])|\$\{(?P<braced>[^}]*)\}|\$(?P<name>[A-Za-z_][A-Za-z0-9_]*)",
    re.DOTALL,
)


def _lookup(name: str) -> str:
    if not _NAME.fullmatch(name):
        raise ValueError(f"unsupported parameter expansion: ${{{name}}}")
    return os.environ.get(name, "")


def _expand_double(inner: str) -> str:
    def substitute(match: re.Match[str]) -> str:
        if match.group("escaped") is not None:
            return match.group("escaped")
        name = match.group("braced")
        return _lookup(name if name is not None else match.group("name"))

    return _DOUBLE_INNER.sub(substitute, inner)


def _expand_tilde(word: str) -> str:
    head, sep, tail = word.partition("/")
    return os.path.expanduser(head) + sep + tail


class _Fields:
    def __init__(self) -> None:
        self.fields: list[str] = []
        self.current: list[str] | None = None

    def add(self, text: str) -> None:
        if self.current is None:
            self.current = []
        self.current.append(text)

    def flush(self) -> None:
        if self.current is not None:
            self.fields.append("".join(self.current))
            self.current = None

    def add_split(self, value: str) -> None:
        for position, piece in enumerate(_WHITESPACE.split(value)):
            if position:
                self.flush()
            if piece:
                self.add(piece)


def _split_fields(text: str) -> list[str]:
    fields = _Fields()
    for match in _WORD_PATTERN.finditer(text):
        kind = match.lastgroup
        value = match.group(kind)
        if kind == "escaped":
            fields.add(value)
        elif kind == "single":
            fields.add(value)
        elif kind == "double":
            fields.add(_expand_double(value))
        elif kind in ("braced", "name"):
            fields.add_split(_lookup(value))
        elif kind == "space":
            fields.flush()
        elif kind == "unclosed":
            raise ValueError(f"reached end of input without closing quote {value}")
        elif fields.current is None and value.startswith("~"):
            fields.add(_expand_tilde(value))
        else:
            fields.add(value)
    fields.flush()
    return fields.fields


def expand(text: str) -> str:
    """Expand a shell word (tilde, variables, quotes) and return its first field."""
    if os.sep != "/":
        text = text.replace(os.sep, "/")
    text = text.replace(" ", "\\ ")
    fields = _split_fields(text)
    return fields[0] if fields else ""