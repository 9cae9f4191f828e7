import pytest

from taskrunner.errors import (
    ExitStatusError,
    MaximumTaskCallExceededError,
    MultipleTasksWithAliasError,
    PreconditionFailedError,
    TaskError,
    TaskfileAlreadyExistsError,
    TaskInternalError,
    TaskNotFoundError,
    TaskRunError,
)


def test_task_not_found_message():
    assert str(TaskNotFoundError("foo")) == 'task: Task "foo" does not exist'


def test_task_not_found_suggestion():
    error = TaskNotFoundError("biuld", "build")
    assert str(error) == 'task: Task "biuld" does not exist. Did you mean "build"?'


def test_task_not_found_default_is_silent():
    assert str(TaskNotFoundError("default")) == ""


def test_multiple_tasks_with_alias():
    error = MultipleTasksWithAliasError("b", ["build", "bundle"])
    assert str(error) == 'task: Multiple tasks (build, bundle) with alias "b" found'


def test_internal_task():
    assert str(TaskInternalError("secret-step")) == 'task: Task "secret-step" is internal'


def test_run_error_message_and_exit_status():
    error = TaskRunError("default", ExitStatusError(130))
    assert str(error) == 'task: Failed to run task "default": exit status 130'
    assert error.exit_code() == 130


def test_run_error_exit_code_falls_back_to_one():
    error = TaskRunError("build", ValueError("boom"))
    assert error.exit_code() == 1
    assert str(error).endswith(": boom")


def test_maximum_task_call_exceeded():
    error = MaximumTaskCallExceededError("loop", 100)
    assert str(error) == (
        'task: maximum task call exceeded (100) for task "loop": '
        "probably an cyclic dep or infinite loop"
    )


def test_fixed_messages():
    assert str(TaskfileAlreadyExistsError()) == "task: A Taskfile already exists"
    assert str(PreconditionFailedError()) == "task: precondition not met"


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (TaskInternalError("x"), 'task: Task "x" is internal'),
        (TaskNotFoundError("foo"), 'task: Task "foo" does not exist'),
        (TaskfileAlreadyExistsError(), "task: A Taskfile already exists"),
        (PreconditionFailedError(), "task: precondition not met"),
        (
            TaskRunError("build", ExitStatusError(2)),
            'task: Failed to run task "build": exit status 2',
        ),
    ],
)
def test_task_errors_share_base_class(error, message):
    assert isinstance(error, TaskError)
    assert str(error) == message