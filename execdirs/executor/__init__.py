from .executor import Executor
from .gate import ConcurrencyGate
from .job import run_job
from .report import describe, report
from .types import (
    Command,
    ExitCode,
    IOFailure,
    JobResult,
    Outcome,
    RunResult,
    Signal,
    Success,
    TaskFailure,
)

__all__ = [
    "Executor",
    "ConcurrencyGate",
    "run_job",
    "describe",
    "report",
    "Command",
    "Outcome",
    "Success",
    "ExitCode",
    "Signal",
    "IOFailure",
    "TaskFailure",
    "JobResult",
    "RunResult",
]
