"""Access to the process environment as task variables."""

from __future__ import annotations

import os


def get_environ() -> dict[str, str]:
    """Return a copy of all environment variables, by name."""
    return dict(os.environ)