"""Building blocks for a Taskfile-style task runner, plus the sleepit helper command."""

__version__ = "0.1.0"