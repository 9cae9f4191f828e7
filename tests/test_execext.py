import io
import os

import pytest

from taskrunner.errors import ExitStatusError
from taskrunner.execext import expand, is_exit_error, run_command


def test_run_command_captures_stdout():
    out = io.StringIO()
    run_command("echo hello", stdout=out)
    assert out.getvalue() == "hello\n"


def test_run_command_exit_status():
    with pytest.raises(ExitStatusError) as info:
        run_command("exit 3")
    assert info.value.status == 3
    assert is_exit_error(info.value)


def test_is_exit_error_rejects_other_errors():
    assert is_exit_error(ValueError("x")) is False
    assert is_exit_error(None) is False


def test_run_command_stops_on_first_failure():
    out = io.StringIO()
    with pytest.raises(ExitStatusError):
        run_command("false; echo after", stdout=out)
    assert out.getvalue() == ""


def test_run_command_uses_directory(tmp_path):
    (tmp_path / "marker.txt").write_text("x")
    out = io.StringIO()
    run_command("ls", directory=str(tmp_path), stdout=out)
    assert out.getvalue() == "marker.txt\n"


def test_run_command_uses_given_environment():
    out = io.StringIO()
    run_command('echo "$GREETING"', env={"GREETING": "hi there"}, stdout=out)
    assert out.getvalue() == "hi there\n"


def test_run_command_environment_as_pairs():
    out = io.StringIO()
    run_command('echo "$A"', env=["A=1=2"], stdout=out)
    assert out.getvalue() == "1=2\n"


def test_run_command_reads_stdin():
    out = io.StringIO()
    run_command("cat", stdin=io.StringIO("some data"), stdout=out)
    assert out.getvalue() == "some data"


def test_run_command_stderr_to_same_stream():
    out = io.StringIO()
    run_command("echo one; echo two 1>&2", stdout=out, stderr=out)
    assert out.getvalue() == "one\ntwo\n"


def test_expand_keeps_spaces():
    assert expand("a b") == "a b"


def test_expand_variables(monkeypatch):
    monkeypatch.setenv("SOMEVAR", "bar")
    assert expand("$SOMEVAR/x") == "bar/x"
    assert expand("${SOMEVAR}/y") == "bar/y"


def test_expand_tilde(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    assert expand("~/foo") == str(tmp_path).replace(os.sep, "/") + "/foo" or os.sep != "/"
    assert expand("~/foo").endswith("/foo")


def test_expand_empty():
    assert expand("") == ""


def test_expand_unclosed_quote():
    with pytest.raises(ValueError):
        expand("'unclosed")