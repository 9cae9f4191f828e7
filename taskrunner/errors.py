"""Exceptions raised while preparing and running tasks."""

from __future__ import annotations

import json


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class TaskError(Exception):
    """Base class for task errors."""


class TaskfileAlreadyExistsError(TaskError):
    """Raised on creating a Taskfile if one already exists."""

    def __init__(self) -> None:
        super().__init__("task: A Taskfile already exists")


class ExitStatusError(Exception):
    """A shell command exited with a non-zero status."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"exit status {status}")


class TaskNotFoundError(TaskError):
    """The requested task does not exist."""

    def __init__(self, task_name: str, did_you_mean: str = "") -> None:
        self.task_name = task_name
        self.did_you_mean = did_you_mean
        super().__init__(self._message())

    def _message(self) -> str:
        if self.did_you_mean:
            return (
                f"task: Task {_quote(self.task_name)} does not exist. "
                f"Did you mean {_quote(self.did_you_mean)}?"
            )
        if self.task_name == "default":
            return ""
        return f"task: Task {_quote(self.task_name)} does not exist"


class MultipleTasksWithAliasError(TaskError):
    """Several tasks share the requested alias."""

    def __init__(self, alias_name: str, task_names: list[str]) -> None:
        self.alias_name = alias_name
        self.task_names = list(task_names)
        super().__init__(
            f"task: Multiple tasks ({', '.join(self.task_names)}) "
            f"with alias {_quote(alias_name)} found"
        )


class TaskInternalError(TaskError):
    """An internal task was called directly."""

    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(f'task: Task "{task_name}" is internal')


class TaskRunError(TaskError):
    """A task failed while running."""

    def __init__(self, task_name: str, error: BaseException) -> None:
        self.task_name = task_name
        self.error = error
        super().__init__(f"task: Failed to run task {_quote(task_name)}: {error}")

    def exit_code(self) -> int:
        """The exit status of the failed command, or 1 if there is none."""
        if isinstance(self.error, ExitStatusError):
            return self.error.status
        return 1


class MaximumTaskCallExceededError(TaskError):
    """A task was called too many times, probably from a cyclic dependency."""

    def __init__(self, task: str, limit: int) -> None:
        self.task = task
        self.limit = limit
        super().__init__(
            f"task: maximum task call exceeded ({limit}) for task {_quote(task)}: "
            "probably an cyclic dep or infinite loop"
        )


class PreconditionFailedError(TaskError):
    """A task precondition was not met."""

    def __init__(self) -> None:
        super().__init__("task: precondition not met")