"""Creation of a starter Taskfile."""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

from .errors import TaskfileAlreadyExistsError
from .filepaths import smart_join

DEFAULT_TASKFILE = """version: '3'

vars:
  GREETING: Hello, World!

tasks:
  default:
    cmds:
      - echo "{{.GREETING}}"
    silent: true
"""


def init_taskfile(stream: TextIO, directory: str) -> None:
    """Write a new Taskfile.yaml into ``directory`` and report it on ``stream``."""
    path = Path(smart_join(str(directory), "Taskfile.yaml"))
    if path.exists():
        raise TaskfileAlreadyExistsError()
    path.write_text(DEFAULT_TASKFILE, encoding="utf-8")
    stream.write("Taskfile.yaml created in the current directory\n")