from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Command:
    executable: str
    args: tuple[str, ...] = ()

    @classmethod
    def from_argv(cls, argv: list[str]) -> Command:
        if not argv:
            raise ValueError("command must not be empty")
        return cls(argv[0], tuple(argv[1:]))

    def argv(self) -> list[str]:
        return [self.executable, *self.args]


@dataclass(frozen=True)
class Success:
    ok = True


@dataclass(frozen=True)
class ExitCode:
    code: int
    ok = False


@dataclass(frozen=True)
class Signal:
    number: int
    ok = False


@dataclass(frozen=True)
class IOFailure:
    message: str
    ok = False


@dataclass(frozen=True)
class TaskFailure:
    reason: str = ""
    ok = False


Outcome = Union[Success, ExitCode, Signal, IOFailure, TaskFailure]


@dataclass(frozen=True)
class JobResult:
    directory: str
    outcome: Outcome


@dataclass(frozen=True)
class RunResult:
    results: list[JobResult]
    completed: list[str] = field(default_factory=list)

    @property
    def failed(self) -> list[str]:
        return [r.directory for r in self.results if not r.outcome.ok]
