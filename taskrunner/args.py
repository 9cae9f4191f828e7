"""Parsing of command-line task names and variable assignments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Call:
    """A request to run a task, optionally with its own variables."""

    task: str
    vars: dict[str, str] | None = None


def _split_var(text: str) -> tuple[str, str]:
    name, _, value = text.partition("=")
    return name, value


def parse_v3(*args: str) -> tuple[list[Call], dict[str, str]]:
    """Parse tasks and global variables; every assignment is global."""
    calls: list[Call] = []
    global_vars: dict[str, str] = {}
    for arg in args:
        if "=" not in arg:
            calls.append(Call(task=arg))
            continue
        name, value = _split_var(arg)
        global_vars[name] = value
    if not calls:
        calls.append(Call(task="default"))
    return calls, global_vars


def parse_v2(*args: str) -> tuple[list[Call], dict[str, str]]:
    """Parse tasks and variables; assignments after a task belong to that task."""
    calls: list[Call] = []
    global_vars: dict[str, str] = {}
    for arg in args:
        if "=" not in arg:
            calls.append(Call(task=arg))
            continue
        name, value = _split_var(arg)
        if not calls:
            global_vars[name] = value
        else:
            last = calls[-1]
            if last.vars is None:
                last.vars = {}
            last.vars[name] = value
    if not calls:
        calls.append(Call(task="default"))
    return calls, global_vars