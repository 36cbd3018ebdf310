from __future__ import annotations

import os

from execdirs.output import Channel, Sink, directory_prefix
from execdirs.output.tee import SEPARATOR

from .types import (
    ExitCode,
    IOFailure,
    Outcome,
    RunResult,
    Signal,
    Success,
    TaskFailure,
)


def describe(outcome: Outcome) -> str | None:
    match outcome:
        case Success():
            return None
        case ExitCode(code=code):
            return f"exited {code}"
        case Signal(number=number):
            return f"signaled {number}"
        case IOFailure(message=message):
            return message
        case TaskFailure():
            return "failed"
        case _:
            raise AssertionError(f"Unknown outcome: {outcome!r}")


def report(run_result: RunResult, sink: Sink) -> int:
    exit_code = 0
    for result in run_result.results:
        message = describe(result.outcome)
        if message is None:
            continue

        exit_code = 1
        sink.write_line(
            Channel.ERR,
            (
                directory_prefix(result.directory),
                SEPARATOR,
                os.fsencode(message),
                b"\n",
            ),
        )

    return exit_code
