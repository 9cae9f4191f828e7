"""A small text template engine for task variables.

Actions are written between ``{{`` and ``}}``. An action is a pipeline:
fields such as ``.NAME``, literals, function calls and ``|`` pipes, with
``{{-`` / ``-}}`` trim markers and ``{{/* comments */}}``.
"""

from __future__ import annotations

import json
import os
import platform
import re
import shlex
import sys
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import TaskError

NO_VALUE = "<no value>"


class TemplateError(TaskError):
    """A template could not be parsed or executed."""


_ARCHES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
}


def _os_name() -> str:
    if sys.platform.startswith("win"):
        return "windows"
    name = platform.system().lower()
    return name or sys.platform


def _arch() -> str:
    machine = platform.machine().lower()
    return _ARCHES.get(machine, machine)


def _cat_lines(text: str) -> str:
    return text.replace("\r\n", " ").replace("\n", " ")


def _split_lines(text: str) -> list[str]:
    return text.replace("\r\n", "\n").split("\n")


def _from_slash(path: str) -> str:
    return path.replace("/", os.sep)


def _to_slash(path: str) -> str:
    return path.replace(os.sep, "/")


def _exe_ext() -> str:
    return ".exe" if _os_name() == "windows" else ""


def _default(fallback: Any, value: Any = None) -> Any:
    return value if value not in (None, "", [], {}, False, 0) else fallback


FUNCTIONS: dict[str, Callable[..., Any]] = {
    "OS": _os_name,
    "ARCH": _arch,
    "catLines": _cat_lines,
    "splitLines": _split_lines,
    "fromSlash": _from_slash,
    "toSlash": _to_slash,
    "exeExt": _exe_ext,
    "shellQuote": shlex.quote,
    "IsSH": lambda: True,
    "FromSlash": _from_slash,
    "ToSlash": _to_slash,
    "ExeExt": _exe_ext,
    "upper": lambda s: str(s).upper(),
    "lower": lambda s: str(s).lower(),
    "trim": lambda s: str(s).strip(),
    "default": _default,
    "join": lambda sep, items: sep.join(str(i) for i in items),
}

_ACTION = re.compile(r"\{\{(-\s)?(.*?)(\s-)?\}\}", re.DOTALL)
_LEXEME = re.compile(
    r"""\s*(?:
      (?P<str>"(?:[^"\\]|\\.)*")
    | (?P<raw>`[^`]*`)
    | (?P<field>(?:\.[A-Za-z_][A-Za-z0-9_]*)+)
    | (?P<dot>\.)
    | (?P<num>-?\d+(?:\.\d+)?)
    | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<pipe>\|)
    | (?P<lp>\()
    | (?P<rp>\))
    )""",
    re.VERBOSE,
)
_KEYWORDS = {"if", "else", "end", "range", "with", "define", "template", "block"}


def _tokenize(source: str) -> list[tuple[str, str]]:
    lexemes = []
    pos = 0
    source = source.rstrip()
    while pos < len(source):
        match = _LEXEME.match(source, pos)
        if match is None or match.end() == pos:
            raise TemplateError(f"unexpected {source[pos:].strip()!r} in action")
        kind = match.lastgroup
        lexemes.append((kind, match.group(kind)))
        pos = match.end()
    return lexemes


class _Parser:
    def __init__(self, lexemes: list[tuple[str, str]]) -> None:
        self.lexemes = lexemes
        self.pos = 0

    def peek(self) -> tuple[str, str] | None:
        return self.lexemes[self.pos] if self.pos < len(self.lexemes) else None

    def pipeline(self) -> list[list[tuple]]:
        commands = [self.command()]
        while (item := self.peek()) is not None and item[0] == "pipe":
            self.pos += 1
            commands.append(self.command())
        return commands

    def command(self) -> list[tuple]:
        operands = []
        while (item := self.peek()) is not None and item[0] not in ("pipe", "rp"):
            self.pos += 1
            operands.append(self.operand(item))
        if not operands:
            raise TemplateError("missing value for command")
        return operands

    def operand(self, item: tuple[str, str]) -> tuple:
        kind, text = item
        if kind == "str":
            return ("lit", json.loads(text))
        if kind == "raw":
            return ("lit", text[1:-1])
        if kind == "field":
            return ("field", text.split(".")[1:])
        if kind == "dot":
            return ("dot",)
        if kind == "num":
            return ("lit", float(text) if "." in text else int(text))
        if kind == "lp":
            inner = self.pipeline()
            closing = self.peek()
            if closing is None or closing[0] != "rp":
                raise TemplateError("unclosed left paren")
            self.pos += 1
            return ("sub", inner)
        if kind == "ident":
            if text in ("true", "false"):
                return ("lit", text == "true")
            if text == "nil":
                return ("lit", None)
            if text in _KEYWORDS:
                raise TemplateError(f"unsupported action {text!r}")
            if text not in FUNCTIONS:
                raise TemplateError(f'function "{text}" not defined')
            return ("func", text)
        raise TemplateError(f"unexpected {text!r} in operand")


def _parse(text: str) -> list[Any]:
    nodes: list[Any] = []
    pos = 0
    trim_next = False
    for match in _ACTION.finditer(text):
        chunk = text[pos : match.start()]
        if trim_next:
            chunk = chunk.lstrip()
        if match.group(1):
            chunk = chunk.rstrip()
        if chunk:
            nodes.append(chunk)
        trim_next = bool(match.group(3))
        pos = match.end()
        body = match.group(2).strip()
        if body.startswith("/*"):
            if not body.endswith("*/"):
                raise TemplateError("unclosed comment")
            continue
        parser = _Parser(_tokenize(body))
        pipeline = parser.pipeline()
        if parser.peek() is not None:
            raise TemplateError(f"unexpected {parser.peek()[1]!r} in action")
        nodes.append(pipeline)
    rest = text[pos:]
    if trim_next:
        rest = rest.lstrip()
    if "{{" in rest:
        raise TemplateError("unclosed action")
    if rest:
        nodes.append(rest)
    return nodes


def _evaluate_operand(operand: tuple, data: Any) -> Any:
    kind = operand[0]
    if kind == "lit":
        return operand[1]
    if kind == "dot":
        return data
    if kind == "sub":
        return _evaluate_pipeline(operand[1], data)
    if kind == "field":
        current = data
        for name in operand[1]:
            if current is None:
                return None
            if not isinstance(current, Mapping):
                raise TemplateError(f"can't evaluate field {name} in type {type(current).__name__}")
            current = current.get(name)
        return current
    if kind == "func":
        return FUNCTIONS[operand[1]]()
    raise TemplateError(f"bad operand {operand!r}")


_MISSING = object()


def _evaluate_pipeline(pipeline: list[list[tuple]], data: Any) -> Any:
    value: Any = _MISSING
    for command in pipeline:
        head = command[0]
        if head[0] == "func":
            args = [_evaluate_operand(op, data) for op in command[1:]]
            if value is not _MISSING:
                args.append(value)
            try:
                value = FUNCTIONS[head[1]](*args)
            except TypeError as exc:
                raise TemplateError(f'error calling {head[1]}: {exc}') from exc
        else:
            if len(command) > 1 or value is not _MISSING:
                raise TemplateError("can't give argument to non-function")
            value = _evaluate_operand(head, data)
    return value


def _format(value: Any) -> str:
    if value is None:
        return NO_VALUE
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format(item) for item in value) + "]"
    return str(value)


def render(text: str, data: Any) -> str:
    """Render template ``text`` against ``data``; raise TemplateError on failure."""
    return "".join(
        node if isinstance(node, str) else _format(_evaluate_pipeline(node, data))
        for node in _parse(text)
    )


@dataclass
class Templater:
    """Renders strings against variables, remembering the first error.

    Once an error happened, every later call returns an empty result.
    """

    vars: Mapping[str, Any] | None = None
    remove_no_value: bool = False
    error: Exception | None = None
    _cache: dict[str, Any] | None = field(default=None, repr=False)

    def reset_cache(self) -> None:
        """Take a fresh snapshot of the variables."""
        self._cache = dict(self.vars or {})

    def replace(self, text: str) -> str:
        """Render ``text``; return "" on an empty string or after an error."""
        if self.error is not None or not text:
            return ""
        if self._cache is None:
            self.reset_cache()
        try:
            result = render(text, self._cache)
        except TemplateError as exc:
            self.error = exc
            return ""
        if self.remove_no_value:
            result = result.replace(NO_VALUE, "")
        return result

    def replace_list(self, texts: Iterable[str] | None) -> list[str] | None:
        """Render every string; None when empty or after an error."""
        items = list(texts or [])
        if self.error is not None or not items:
            return None
        return [self.replace(text) for text in items]

    def replace_vars(self, variables: Mapping[str, str] | None) -> dict[str, str] | None:
        """Render every variable value; None when empty or after an error."""
        if self.error is not None or not variables:
            return None
        return {name: self.replace(value) for name, value in variables.items()}