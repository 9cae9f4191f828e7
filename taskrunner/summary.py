"""Printing human-readable summaries of tasks."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .logger import Color, Logger


def _name(task: Any) -> str:
    return getattr(task, "label", "") or getattr(task, "task", "")


def print_tasks(logger: Logger, tasks: Mapping[str, Any], calls: Sequence[Any]) -> None:
    """Print the summary of every called task, separated by blank lines."""
    for index, call in enumerate(calls):
        print_space_between_summaries(logger, index)
        print_task(logger, tasks[call.task])


def print_space_between_summaries(logger: Logger, index: int) -> None:
    """Print two blank lines before every summary but the first."""
    if index > 0:
        logger.out(Color.DEFAULT, "")
        logger.out(Color.DEFAULT, "")


def print_task(logger: Logger, task: Any) -> None:
    """Print name, description or summary, dependencies, aliases and commands."""
    stdout = logger.stdout
    logger.write(stdout, Color.DEFAULT, "task: ")
    logger.write(stdout, Color.GREEN, "%s\n", _name(task))
    logger.out(Color.DEFAULT, "")

    summary = getattr(task, "summary", "")
    desc = getattr(task, "desc", "")
    if summary:
        lines = summary.split("\n")
        for position, line in enumerate(lines, 1):
            if position < len(lines) or line:
                logger.out(Color.DEFAULT, line)
    elif desc:
        logger.out(Color.DEFAULT, desc)
    else:
        logger.out(Color.DEFAULT, "(task does not have description or summary)")

    deps = getattr(task, "deps", None) or []
    if deps:
        logger.out(Color.DEFAULT, "")
        logger.out(Color.DEFAULT, "dependencies:")
        for dep in deps:
            logger.out(Color.DEFAULT, " - %s", dep.task)

    aliases = getattr(task, "aliases", None) or []
    if aliases:
        logger.out(Color.DEFAULT, "")
        logger.out(Color.DEFAULT, "aliases:")
        for alias in aliases:
            logger.write(stdout, Color.DEFAULT, " - ")
            logger.out(Color.CYAN, alias)

    cmds = getattr(task, "cmds", None) or []
    if cmds:
        logger.out(Color.DEFAULT, "")
        logger.out(Color.DEFAULT, "commands:")
        for cmd in cmds:
            logger.write(stdout, Color.DEFAULT, " - ")
            command = getattr(cmd, "cmd", "")
            if command:
                logger.write(stdout, Color.YELLOW, "%s\n", command)
            else:
                logger.write(stdout, Color.GREEN, "Task: %s\n", cmd.task)