"""A helper program that sleeps, optionally handling SIGINT with a cleanup phase."""

from __future__ import annotations

import os
import queue
import re
import signal
import sys
import threading
import time
from collections.abc import Callable, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

USAGE = """sleepit: sleep for the specified duration, optionally handling signals
When the line "sleepit: ready" is printed, it means that it is safe to send signals to it

Usage: sleepit <command> [<args>]

Commands

  default     Use default action: on reception of SIGINT terminate abruptly
  handle      Handle signals: on reception of SIGINT perform cleanup before exiting
  version     Show the sleepit version"""

FULL_VERSION = "unknown"

_UNITS_NS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}
_DURATION_PART = re.compile(r"([0-9]*(?:\.[0-9]*)?)(ns|us|\u00b5s|\u03bcs|ms|s|m|h)")


def parse_duration(text: str) -> float:
    """Parse a duration such as "5s", "50ms" or "1h2m3.5s" into seconds."""
    error = ValueError(f'time: invalid duration "{text}"')
    rest = text
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return 0.0
    if not rest:
        raise error
    total = Decimal(0)
    pos = 0
    while pos < len(rest):
        match = _DURATION_PART.match(rest, pos)
        if match is None:
            if re.match(r"[0-9.]+$", rest[pos:]):
                raise ValueError(f'time: missing unit in duration "{text}"')
            raise error
        number = match.group(1)
        if not number.replace(".", ""):
            raise error
        try:
            total += Decimal(number) * _UNITS_NS[match.group(2)]
        except InvalidOperation as exc:
            raise error from exc
        pos = match.end()
    nanoseconds = int(total)
    return (-nanoseconds if negative else nanoseconds) / 1e9


def _fraction(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10**precision)
    digits = str(frac).rjust(precision, "0").rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def _format_duration(seconds: float) -> str:
    nanoseconds = round(seconds * 1e9)
    sign = "-" if nanoseconds < 0 else ""
    u = abs(nanoseconds)
    if u < 1_000_000_000:
        if u == 0:
            return "0s"
        if u < 1_000:
            return f"{sign}{u}ns"
        if u < 1_000_000:
            return f"{sign}{_fraction(u, 3)}\u00b5s"
        return f"{sign}{_fraction(u, 6)}ms"
    total_seconds, frac = divmod(u, 1_000_000_000)
    digits = str(frac).rjust(9, "0").rstrip("0")
    text = f"{total_seconds % 60}{'.' + digits if digits else ''}s"
    minutes = total_seconds // 60
    if minutes:
        text = f"{minutes % 60}m{text}"
        hours = minutes // 60
        if hours:
            text = f"{hours}h{text}"
    return sign + text


def _say(text: str) -> None:
    print(f"sleepit: {text}", flush=True)


def _do_some_work(deadline: float) -> bool:
    """Work for a moment; return True once the deadline has passed."""
    if time.monotonic() > deadline:
        return True
    time.sleep(0.1)
    return False


def _start_worker(
    canceled: threading.Event, how_long: float, name: str, done: queue.Queue
) -> threading.Thread:
    deadline = time.monotonic() + how_long

    def work() -> None:
        _say(f"{name} started")
        while True:
            if canceled.is_set():
                _say(f"{name} canceled")
                return
            if _do_some_work(deadline):
                _say(f"{name} done")
                done.put(name)
                return

    thread = threading.Thread(target=work, name=f"sleepit-{name}", daemon=True)
    thread.start()
    return thread


def supervisor(
    sleep: float, cleanup: float, term_after: int, signals: queue.Queue | None
) -> int:
    """Run the work phase and, on the first signal, the cleanup phase.

    Returns 0 when the work completes, 3 when the cleanup completes and 4 when
    ``term_after`` signals were received.
    """
    _say("ready")
    _say(
        f"PID={os.getpid()} sleep={_format_duration(sleep)} "
        f"cleanup={_format_duration(cleanup)}"
    )

    events: queue.Queue = queue.Queue()
    cancel_work = threading.Event()
    worker = _start_worker(cancel_work, sleep, "work", events)
    cancel_cleaner = threading.Event()
    cleaner: threading.Thread | None = None

    count = 0
    while True:
        if signals is not None:
            try:
                sig = signals.get_nowait()
            except queue.Empty:
                pass
            else:
                count += 1
                _say(f"got signal={sig} count={count}")
                if count == 1:
                    # wait for the worker to stop before the cleanup starts
                    cancel_work.set()
                    worker.join()
                    cleaner = _start_worker(cancel_cleaner, cleanup, "cleanup", events)
                if count == term_after:
                    cancel_cleaner.set()
                    if cleaner is not None:
                        cleaner.join()
                    return 4
                continue
        try:
            finished = events.get(timeout=0.01)
        except queue.Empty:
            continue
        return 0 if finished == "work" else 3


class _FlagError(Exception):
    pass


class _HelpRequested(Exception):
    pass


_FlagSpec = dict[str, tuple[Callable[[str], Any], Any, str]]


def _parse_flags(args: Sequence[str], spec: _FlagSpec) -> tuple[dict[str, Any], list[str]]:
    values = {name: default for name, (_, default, _) in spec.items()}
    remaining = list(args)
    while remaining:
        arg = remaining[0]
        if len(arg) < 2 or arg[0] != "-":
            break
        dashes = 1
        if arg[1] == "-":
            dashes = 2
            if len(arg) == 2:
                remaining.pop(0)
                break
        name = arg[dashes:]
        if not name or name[0] in "-=":
            raise _FlagError(f"bad flag syntax: {arg}")
        remaining.pop(0)
        name, has_value, value = name.partition("=")
        if name not in spec:
            if name in ("h", "help"):
                raise _HelpRequested()
            raise _FlagError(f"flag provided but not defined: -{name}")
        if not has_value:
            if not remaining:
                raise _FlagError(f"flag needs an argument: -{name}")
            value = remaining.pop(0)
        convert = spec[name][0]
        try:
            values[name] = convert(value)
        except ValueError as exc:
            raise _FlagError(f'invalid value "{value}" for flag -{name}: parse error') from exc
    return values, remaining


def _flag_usage(command: str, spec: _FlagSpec) -> str:
    lines = [f"Usage of {command}:"]
    for name, (_, default, help_text) in spec.items():
        shown = _format_duration(default) if isinstance(default, float) else default
        lines.append(f"  -{name}")
        lines.append(f"    \t{help_text} (default {shown})")
    return "\n".join(lines)


def _go_list(items: Sequence[str]) -> str:
    return "[" + " ".join(items) + "]"


def _parse_int(text: str) -> int:
    return int(text, 0)


def run(args: Sequence[str]) -> int:
    """Run the sleepit command line and return its exit status."""
    if not args:
        print(USAGE, file=sys.stderr)
        return 2

    specs: dict[str, _FlagSpec] = {
        "default": {"sleep": (parse_duration, 5.0, "Sleep duration")},
        "handle": {
            "sleep": (parse_duration, 5.0, "Sleep duration"),
            "cleanup": (parse_duration, 5.0, "Cleanup duration"),
            "term-after": (
                _parse_int,
                0,
                "Terminate immediately after N signals.\n"
                "Default is to terminate only when the cleanup phase has completed.",
            ),
        },
        "version": {},
    }

    command = args[0]
    spec = specs.get(command)
    if spec is None:
        print(USAGE, file=sys.stderr)
        return 2

    try:
        values, rest = _parse_flags(args[1:], spec)
    except _HelpRequested:
        print(_flag_usage(command, spec), file=sys.stderr)
        return 0
    except _FlagError as exc:
        print(exc, file=sys.stderr)
        print(_flag_usage(command, spec), file=sys.stderr)
        return 2

    if command == "default":
        if rest:
            print(f"default: unexpected arguments: {_go_list(rest)}", file=sys.stderr)
            return 2
        return supervisor(values["sleep"], 0.0, 0, None)

    if command == "handle":
        if values["term-after"] == 1:
            print("handle: term-after cannot be 1", file=sys.stderr)
            return 2
        if rest:
            print(f"handle: unexpected arguments: {_go_list(rest)}", file=sys.stderr)
            return 2
        received: queue.Queue = queue.Queue()
        previous = signal.signal(signal.SIGINT, lambda signum, frame: received.put("interrupt"))
        try:
            return supervisor(values["sleep"], values["cleanup"], values["term-after"], received)
        finally:
            signal.signal(signal.SIGINT, previous)

    if rest:
        print(f"version: unexpected arguments: {_go_list(rest)}", file=sys.stderr)
        return 2
    print(f"sleepit version {FULL_VERSION}")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point: run with the process arguments and exit with the status."""
    raise SystemExit(run(list(sys.argv[1:] if argv is None else argv)))