from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from execdirs.config.types import DEFAULT_MAX_CONCURRENCY, PartialLine
from execdirs.output import Sink

from .gate import ConcurrencyGate
from .job import run_job
from .types import Command, JobResult, Outcome, RunResult, TaskFailure

logger = logging.getLogger(__name__)


class Executor:
    def __init__(
        self,
        command: Command,
        sink: Sink,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        partial: PartialLine = PartialLine.FLUSH,
    ):
        self.command = command
        self.sink = sink
        self.partial = partial
        self.gate = ConcurrencyGate(max_concurrency)

    def _run_one(self, directory: str) -> Outcome:
        with self.gate:
            return run_job(directory, self.command, self.sink, partial=self.partial)

    def run(self, directories: list[str]) -> RunResult:
        if not directories:
            raise ValueError("at least one directory is required")

        outcomes: list[Outcome | None] = [None] * len(directories)
        completed: list[str] = []

        logger.debug(
            "running %s in %d directories, at most %d at a time",
            self.command.argv(),
            len(directories),
            self.gate.capacity,
        )

        with ThreadPoolExecutor(
            max_workers=len(directories), thread_name_prefix="execdirs-job"
        ) as pool:
            slots: dict[Future[Outcome], int] = {
                pool.submit(self._run_one, directory): idx
                for idx, directory in enumerate(directories)
            }

            for future in as_completed(slots):
                idx = slots[future]
                directory = directories[idx]
                try:
                    outcome = future.result()
                except Exception as exc:
                    logger.exception("%s: job failed unexpectedly", directory)
                    outcome = TaskFailure(f"{type(exc).__name__}: {exc}")
                outcomes[idx] = outcome
                completed.append(directory)

        results = []
        for directory, outcome in zip(directories, outcomes):
            # as_completed yields every future, so no slot stays empty
            if outcome is None:
                raise AssertionError("Unreachable")
            results.append(JobResult(directory, outcome))

        return RunResult(results, completed)
