import os
from datetime import datetime, timezone

import pytest

from taskrunner.status import Checksum, NoneChecker, Timestamp, glob, globs


@pytest.mark.parametrize(
    "name, expected",
    [
        ("foobarbaz", "foobarbaz"),
        ("foo/bar/baz", "foo-bar-baz"),
        ("foo@bar/baz", "foo-bar-baz"),
        ("foo1bar2baz3", "foo1bar2baz3"),
    ],
)
def test_normalize_filename(name, expected):
    assert Checksum().normalize_filename(name) == expected


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def test_glob_skips_directories(tmp_path):
    _write(tmp_path / "a.txt", "a")
    (tmp_path / "dir.txt").mkdir()
    assert glob(str(tmp_path), "*.txt") == [str(tmp_path / "a.txt")]


def test_glob_double_star_is_recursive(tmp_path):
    _write(tmp_path / "top.go", "x")
    _write(tmp_path / "sub" / "deep" / "inner.go", "x")
    found = glob(str(tmp_path), "**/*.go")
    assert str(tmp_path / "top.go") in found
    assert str(tmp_path / "sub" / "deep" / "inner.go") in found


def test_glob_bad_pattern_raises(tmp_path):
    with pytest.raises(ValueError):
        glob(str(tmp_path), "'unclosed")


def test_globs_sorted_and_skips_bad_patterns(tmp_path):
    _write(tmp_path / "b.txt", "b")
    _write(tmp_path / "a.md", "a")
    result = globs(str(tmp_path), ["*.txt", "'bad", "*.md"])
    assert result == sorted([str(tmp_path / "b.txt"), str(tmp_path / "a.md")])


def _checksum(tmp_path, **kwargs):
    return Checksum(
        temp_dir=str(tmp_path / ".task"),
        task_dir=str(tmp_path),
        task="build:all",
        sources=kwargs.pop("sources", ["*.src"]),
        **kwargs,
    )


def test_checksum_without_sources_is_not_up_to_date(tmp_path):
    assert Checksum(temp_dir=str(tmp_path), task_dir=str(tmp_path)).is_up_to_date() is False


def test_checksum_detects_changes(tmp_path):
    source = _write(tmp_path / "main.src", "one")
    checker = _checksum(tmp_path)
    assert checker.is_up_to_date() is False
    assert checker.is_up_to_date() is True
    source.write_text("two")
    assert checker.is_up_to_date() is False
    assert checker.is_up_to_date() is True


def test_checksum_file_location(tmp_path):
    _write(tmp_path / "main.src", "one")
    checker = _checksum(tmp_path)
    checker.is_up_to_date()
    stored = tmp_path / ".task" / "checksum" / "build-all"
    assert stored.read_text().endswith("\n")
    assert len(stored.read_text().strip()) == 32


def test_checksum_rename_changes_sum(tmp_path):
    source = _write(tmp_path / "main.src", "one")
    checker = _checksum(tmp_path)
    checker.is_up_to_date()
    source.rename(tmp_path / "other.src")
    assert checker.is_up_to_date() is False


def test_checksum_dry_does_not_write(tmp_path):
    _write(tmp_path / "main.src", "one")
    checker = _checksum(tmp_path, dry=True)
    assert checker.is_up_to_date() is False
    assert checker.is_up_to_date() is False
    assert not (tmp_path / ".task" / "checksum").exists()


def test_checksum_missing_generates(tmp_path):
    _write(tmp_path / "main.src", "one")
    checker = _checksum(tmp_path, generates=["out.bin"])
    checker.is_up_to_date()
    assert checker.is_up_to_date() is False
    _write(tmp_path / "out.bin", "built")
    assert checker.is_up_to_date() is True


def test_checksum_on_error_removes_file(tmp_path):
    _write(tmp_path / "main.src", "one")
    checker = _checksum(tmp_path)
    checker.is_up_to_date()
    checker.on_error()
    assert not (tmp_path / ".task" / "checksum" / "build-all").exists()
    assert checker.is_up_to_date() is False


def test_checksum_on_error_without_sources_does_nothing(tmp_path):
    checker = Checksum(temp_dir=str(tmp_path), sources=[])
    assert checker.on_error() is None
    assert list(tmp_path.iterdir()) == []


def test_checksum_value_and_kind():
    checker = Checksum()
    assert checker.value() == "d41d8cd98f00b204e9800998ecf8427e"
    assert checker.kind() == "checksum"


def _set_mtime(path, seconds):
    os.utime(path, (seconds, seconds))


def test_timestamp_up_to_date_when_generated_newer(tmp_path):
    src = _write(tmp_path / "in.c", "x")
    out = _write(tmp_path / "out.o", "y")
    _set_mtime(src, 1000)
    _set_mtime(out, 2000)
    checker = Timestamp(dir=str(tmp_path), sources=["*.c"], generates=["*.o"])
    assert checker.is_up_to_date() is True


def test_timestamp_equal_times_are_up_to_date(tmp_path):
    src = _write(tmp_path / "in.c", "x")
    out = _write(tmp_path / "out.o", "y")
    _set_mtime(src, 1500)
    _set_mtime(out, 1500)
    checker = Timestamp(dir=str(tmp_path), sources=["*.c"], generates=["*.o"])
    assert checker.is_up_to_date() is True


def test_timestamp_stale_when_source_newer(tmp_path):
    src = _write(tmp_path / "in.c", "x")
    out = _write(tmp_path / "out.o", "y")
    _set_mtime(src, 3000)
    _set_mtime(out, 2000)
    checker = Timestamp(dir=str(tmp_path), sources=["*.c"], generates=["*.o"])
    assert checker.is_up_to_date() is False


def test_timestamp_requires_sources_and_generates(tmp_path):
    _write(tmp_path / "in.c", "x")
    assert Timestamp(dir=str(tmp_path), sources=["*.c"]).is_up_to_date() is False
    assert (
        Timestamp(dir=str(tmp_path), sources=["*.c"], generates=["*.o"]).is_up_to_date()
        is False
    )


def test_timestamp_value(tmp_path):
    src = _write(tmp_path / "in.c", "x")
    _set_mtime(src, 1000)
    checker = Timestamp(dir=str(tmp_path), sources=["*.c"])
    assert checker.value() == datetime.fromtimestamp(1000, tz=timezone.utc)
    assert checker.kind() == "timestamp"
    assert checker.on_error() is None


def test_timestamp_value_without_sources(tmp_path):
    checker = Timestamp(dir=str(tmp_path), sources=["*.none"])
    assert checker.value() == datetime.fromtimestamp(0, tz=timezone.utc)


def test_none_checker():
    checker = NoneChecker()
    assert checker.is_up_to_date() is False
    assert checker.value() == ""
    assert checker.kind() == "none"
    assert checker.on_error() is None