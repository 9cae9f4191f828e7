"""Helpers for joining and relativising file system paths."""

from __future__ import annotations

import os


def smart_join(a: str, b: str) -> str:
    """Join two paths, unless the second one is already absolute.

    Empty elements are ignored and the result is normalised.
    """
    if os.path.isabs(b):
        return b
    parts = [part for part in (a, b) if part]
    if not parts:
        return ""
    return os.path.normpath(os.path.join(*parts))


def try_abs_to_rel(path: str) -> str:
    """Return ``path`` relative to the working directory, or unchanged if impossible."""
    try:
        cwd = os.getcwd()
    except OSError:
        return path
    try:
        return os.path.relpath(path, cwd)
    except ValueError:
        return path