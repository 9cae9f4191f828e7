# taskrunner

The pieces a Taskfile-style task runner is made of. Each one can be used on
its own.

## Modules

- `taskrunner.args` – `parse_v3(*args)` and `parse_v2(*args)` split
  command-line words into a list of `Call` objects and a dict of global
  variables. A word that contains `=` is a `NAME=value` assignment. With
  `parse_v3` every assignment is global. With `parse_v2` an assignment that
  follows a task name goes into that call's `vars`. When no task is named, a
  single call to `default` is returned.
- `taskrunner.execext` – `run_command(command, directory, env, stdin, stdout, stderr)`
  runs a command with `sh -e -c`, so a POSIX `sh` must be on `PATH`. `env`
  may be a mapping or a list of `NAME=value` strings. When it is empty, the
  current environment is used. Streams left as `None` are connected to the
  null device. A non-zero exit raises `ExitStatusError`; a command killed by
  a signal reports 128 plus the signal number. `expand(text)` expands `~`,
  `$NAME` / `${NAME}` and quotes in a shell word and returns its first field.
  `is_exit_error(error)` tells an exit-status failure apart from other errors.
- `taskrunner.templater` – `render(text, data)` and the `Templater` class
  render `{{ .VAR }}` templates.
  - The template language supports fields, string and number literals,
    function calls, `|` pipelines, parentheses, `{{-` / `-}}` trimming and
    `{{/* comments */}}`. Control actions such as `if` and `range` are not
    supported.
  - The functions available are `OS`, `ARCH`, `catLines`, `splitLines`,
    `fromSlash`, `toSlash`, `exeExt`, `shellQuote`, `IsSH`, `FromSlash`,
    `ToSlash`, `ExeExt`, `upper`, `lower`, `trim`, `default` and `join`.
  - A missing value renders as `<no value>`, unless the templater was created
    with `remove_no_value=True`.
  - `Templater` keeps the first `TemplateError` in `error`. Every later call
    then returns an empty result.
- `taskrunner.output` – output styles for the commands a task runs. Each
  style's `wrap_writer(stdout, stderr, prefix, templater)` returns the two
  writers to use and a close function.
  - `Interleaved` passes output through unchanged.
  - `Group` holds everything back until close. It then writes the output
    between optional begin/end lines, which are rendered with the templater.
    Nothing is written if there was no output.
  - `Prefixed` writes every line as `[prefix] line`.
  - `build_for(name, group_begin, group_end)` picks a style by name:
    `interleaved` (or empty), `group` or `prefixed`. It raises `OutputError`
    for an unknown name, or for begin/end lines given to a style other than
    `group`.
- `taskrunner.status` – decides whether a task is up to date. Each checker
  implements the `Checker` interface: `is_up_to_date()`, `value()`,
  `on_error()` and `kind()`.
  - `Checksum` compares an MD5 of the source files, names included, with the
    sum stored under `<temp_dir>/checksum/`. It writes the new sum there
    unless `dry` is set.
  - `Timestamp` compares the newest source mtime with the oldest generated
    file.
  - `NoneChecker` never reports a task as up to date.
  - `glob` and `globs` resolve source patterns, with `**` supported.
- `taskrunner.summary` – `print_task(logger, task)` and
  `print_tasks(logger, tasks, calls)` print a task's name, its summary or
  description, its dependencies, aliases and commands. Any object with
  `task`, `desc`, `summary`, `deps`, `aliases` and `cmds` attributes can be
  passed as a task.
- `taskrunner.initfile` – `init_taskfile(stream, directory)` writes a starter
  `Taskfile.yaml`. If one already exists, it raises
  `TaskfileAlreadyExistsError`.
- `taskrunner.logger` – `Logger` writes printf-style messages to stdout or
  stderr.
  - When `color` is on and the stream is a terminal, messages are coloured
    (`Color`).
  - Each colour code can be overridden with an environment variable:
    `TASK_COLOR_RESET`, `TASK_COLOR_BLUE`, `TASK_COLOR_GREEN`,
    `TASK_COLOR_CYAN`, `TASK_COLOR_YELLOW`, `TASK_COLOR_MAGENTA` and
    `TASK_COLOR_RED`.
  - `NO_COLOR` disables colour.
- `taskrunner.filepaths` – `smart_join` and `try_abs_to_rel`.
- `taskrunner.environ` – `get_environ()` returns a copy of the environment.
- `taskrunner.errors` – the exceptions raised by the modules above.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Example

```python
from taskrunner.args import parse_v3

calls, global_vars = parse_v3("build", "test", "MODE=release")
# calls == [Call(task="build"), Call(task="test")]
# global_vars == {"MODE": "release"}
```

## sleepit

The package installs a small `sleepit` command. It sleeps for a while and can
handle SIGINT. It is meant for checking how a runner passes signals on to the
programs it starts.

```
sleepit default -sleep=2s
sleepit handle -sleep=10s -cleanup=2s
sleepit handle -sleep=10s -cleanup=50ms -term-after=2
sleepit version
```

Once `sleepit: ready` has been printed, it is safe to send it signals.
`-term-after` cannot be 1.

| Code | Meaning |
|------|---------|
| 0 | The work finished. |
| 2 | Usage error. |
| 3 | Cleanup finished after a signal. |
| 4 | Terminated after the number of signals given by `-term-after`. |

## What this package does not do

This package does not include the following:

- a reader for Taskfile YAML files;
- an executor that resolves dependencies and runs tasks;
- file watching;
- a `task` command.

The modules above are the building blocks for such a program. You combine
them yourself.