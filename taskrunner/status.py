"""Up-to-date checks for tasks, based on checksums or timestamps of files."""

from __future__ import annotations

import glob as _globmodule
import hashlib
import os
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .execext import expand
from .filepaths import smart_join


class Checker(ABC):
    """Decides whether a task is up to date."""

    @abstractmethod
    def is_up_to_date(self) -> bool:
        """Tell whether the task can be skipped."""

    @abstractmethod
    def value(self) -> Any:
        """The value that describes the current state of the sources."""

    @abstractmethod
    def on_error(self) -> None:
        """Forget the recorded state after the task failed."""

    @abstractmethod
    def kind(self) -> str:
        """The name of the method this checker implements."""


def glob(directory: str, pattern: str) -> list[str]:
    """Return the files (not directories) that ``pattern`` matches under ``directory``.

    ``**`` matches any number of directories. The pattern is shell-expanded first.
    """
    expanded = expand(smart_join(directory, pattern))
    files = []
    for path in sorted(_globmodule.glob(expanded, recursive=True)):
        if os.path.isdir(path):
            continue
        os.stat(path)
        files.append(path)
    return files


def globs(directory: str, patterns: Iterable[str]) -> list[str]:
    """Return the sorted files matched by any pattern; bad patterns are skipped."""
    files: list[str] = []
    for pattern in patterns:
        try:
            files.extend(glob(directory, pattern))
        except (ValueError, OSError):
            continue
    return sorted(files)


_FILENAME_INVALID = re.compile(r"[^A-z0-9]")


@dataclass
class Checksum(Checker):
    """Treats a task as up to date while the checksum of its sources is unchanged."""

    temp_dir: str = ""
    task_dir: str = ""
    task: str = ""
    sources: list[str] = field(default_factory=list)
    generates: list[str] = field(default_factory=list)
    dry: bool = False

    def is_up_to_date(self) -> bool:
        if not self.sources:
            return False

        checksum_file = self._checksum_file_path()
        try:
            with open(checksum_file, "rb") as handle:
                old_md5 = handle.read().decode(errors="replace").strip()
        except OSError:
            old_md5 = ""

        sources = globs(self.task_dir, self.sources)
        try:
            new_md5 = self._checksum(sources)
        except OSError:
            return False

        if not self.dry:
            try:
                os.makedirs(smart_join(self.temp_dir, "checksum"), exist_ok=True)
            except OSError:
                pass
            with open(checksum_file, "w", encoding="utf-8") as handle:
                handle.write(new_md5 + "\n")

        for pattern in self.generates:
            try:
                generated = glob(self.task_dir, pattern)
            except FileNotFoundError:
                return False
            if not generated:
                return False

        return old_md5 == new_md5

    def _checksum(self, files: Iterable[str]) -> str:
        digest = hashlib.md5()
        for path in files:
            # the file name takes part too, so renaming a file changes the sum
            digest.update(os.path.basename(path).encode())
            with open(path, "rb") as handle:
                for chunk in iter(lambda: handle.read(65536), b""):
                    digest.update(chunk)
        return digest.hexdigest()

    def value(self) -> str:
        return self._checksum([])

    def on_error(self) -> None:
        if not self.sources:
            return
        os.remove(self._checksum_file_path())

    def kind(self) -> str:
        return "checksum"

    def _checksum_file_path(self) -> str:
        return os.path.join(self.temp_dir, "checksum", self.normalize_filename(self.task))

    def normalize_filename(self, name: str) -> str:
        """Replace characters that are unsafe in file names with "-"."""
        return _FILENAME_INVALID.sub("-", name)


def _max_mtime(files: Iterable[str]) -> int | None:
    latest: int | None = None
    for path in files:
        mtime = os.stat(path).st_mtime_ns
        if latest is None or mtime > latest:
            latest = mtime
    return latest


def _min_mtime(files: Iterable[str]) -> int | None:
    earliest: int | None = None
    for path in files:
        mtime = os.stat(path).st_mtime_ns
        if earliest is None or mtime < earliest:
            earliest = mtime
    return earliest


def _to_datetime(nanoseconds: int) -> datetime:
    return datetime.fromtimestamp(nanoseconds / 1e9, tz=timezone.utc)


@dataclass
class Timestamp(Checker):
    """Treats a task as up to date while no source is newer than any generated file."""

    dir: str = ""
    sources: list[str] = field(default_factory=list)
    generates: list[str] = field(default_factory=list)

    def is_up_to_date(self) -> bool:
        if not self.sources or not self.generates:
            return False

        sources = globs(self.dir, self.sources)
        generates = globs(self.dir, self.generates)

        try:
            sources_max = _max_mtime(sources)
        except OSError:
            return False
        if sources_max is None:
            return False

        try:
            generates_min = _min_mtime(generates)
        except OSError:
            return False
        if generates_min is None:
            return False

        return not generates_min < sources_max

    def value(self) -> datetime:
        sources_max = _max_mtime(globs(self.dir, self.sources))
        if sources_max is None:
            return datetime.fromtimestamp(0, tz=timezone.utc)
        return _to_datetime(sources_max)

    def on_error(self) -> None:
        return None

    def kind(self) -> str:
        return "timestamp"


class NoneChecker(Checker):
    """A checker that never considers a task up to date."""

    def is_up_to_date(self) -> bool:
        return False

    def value(self) -> str:
        return ""

    def on_error(self) -> None:
        return None

    def kind(self) -> str:
        return "none"