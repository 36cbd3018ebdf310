from __future__ import annotations

import logging
import os
import subprocess
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack
from typing import BinaryIO

from execdirs.config.types import PartialLine
from execdirs.output import Channel, Sink, directory_prefix, tee_lines

from .types import Command, ExitCode, IOFailure, Outcome, Signal, Success, TaskFailure

logger = logging.getLogger(__name__)


class _Pipe:
    """One OS pipe whose two ends are released independently."""

    def __init__(self) -> None:
        self.read_fd: int | None
        self.write_fd: int | None
        self.read_fd, self.write_fd = os.pipe()

    def close_write(self) -> None:
        if self.write_fd is not None:
            os.close(self.write_fd)
            self.write_fd = None

    def take_reader(self) -> BinaryIO:
        if self.read_fd is None:
            raise AssertionError("Read end already taken")
        reader = os.fdopen(self.read_fd, "rb")
        self.read_fd = None
        return reader

    def close(self) -> None:
        self.close_write()
        if self.read_fd is not None:
            os.close(self.read_fd)
            self.read_fd = None


def classify(returncode: int) -> Outcome:
    if returncode == 0:
        return Success()
    if returncode > 0:
        return ExitCode(returncode)
    # subprocess reports "killed by signal N" as -N
    return Signal(-returncode)


def run_job(
    directory: str,
    command: Command,
    sink: Sink,
    *,
    partial: PartialLine = PartialLine.FLUSH,
) -> Outcome:
    prefix = directory_prefix(directory)

    with ExitStack() as stack:
        pipes: list[_Pipe] = []
        for channel in (Channel.OUT, Channel.ERR):
            try:
                pipe = _Pipe()
            except OSError as exc:
                logger.debug("%s: %s pipe allocation failed: %s", directory, channel.value, exc)
                return IOFailure(str(exc))
            stack.callback(pipe.close)
            pipes.append(pipe)

        # Entered before the child exists so that reaping, registered after
        # spawn, always runs before the pool joins its readers
        pool = stack.enter_context(
            ThreadPoolExecutor(max_workers=2, thread_name_prefix="execdirs-tee")
        )

        out_pipe, err_pipe = pipes
        try:
            proc = subprocess.Popen(
                command.argv(),
                cwd=directory,
                stdout=out_pipe.write_fd,
                stderr=err_pipe.write_fd,
            )
        except OSError as exc:
            logger.debug("%s: spawn failed: %s", directory, exc)
            return IOFailure(str(exc))
        finally:
            # The child holds its own copies now; ours must go or readers never see EOF
            out_pipe.close_write()
            err_pipe.close_write()

        stack.callback(_reap, directory, proc)
        logger.debug("%s: started pid %d", directory, proc.pid)

        futures = {
            Channel.OUT: pool.submit(_drain, out_pipe, prefix, sink, Channel.OUT, partial),
            Channel.ERR: pool.submit(_drain, err_pipe, prefix, sink, Channel.ERR, partial),
        }

        try:
            outcome = classify(proc.wait())
        except OSError as exc:
            outcome = IOFailure(str(exc))

        forwarded: dict[Channel, int] = {}
        for channel, future in futures.items():
            exc = future.exception()
            if exc is None:
                forwarded[channel] = future.result()
                continue
            logger.error(
                "%s: %s reader failed", directory, channel.value, exc_info=exc
            )
            outcome = TaskFailure(f"{channel.value} reader failed: {exc}")

    logger.debug(
        "%s: finished with %s (%d stdout lines, %d stderr lines)",
        directory,
        outcome,
        forwarded.get(Channel.OUT, 0),
        forwarded.get(Channel.ERR, 0),
    )
    return outcome


def _reap(directory: str, proc: subprocess.Popen) -> None:
    if proc.poll() is None:
        logger.warning("%s: killing pid %d left behind by a failed job", directory, proc.pid)
        proc.kill()
    proc.wait()


def _drain(
    pipe: _Pipe,
    prefix: bytes,
    sink: Sink,
    channel: Channel,
    partial: PartialLine,
) -> int:
    with pipe.take_reader() as stream:
        return tee_lines(stream, prefix, sink, channel, partial=partial)
