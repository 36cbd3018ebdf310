from __future__ import annotations

import argparse
import dataclasses
import sys

from execdirs.config import ConfigError, PartialLine, RunConfig, load_config
from execdirs.executor import Command, Executor, report
from execdirs.output import Sink

from .args import build_parser, split_command
from .logging_config import setup_logging


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    options, command = split_command(sys.argv[1:] if argv is None else argv)
    try:
        args = parser.parse_args(options)
        if not command:
            parser.error("a command is required after '--'")

        config = resolve_config(args)
        setup_logging(config.log_level)
        return cmd_run(args, config, command)

    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def main() -> None:
    sys.exit(run_cli())


def resolve_config(args: argparse.Namespace) -> RunConfig:
    config = load_config(args.config) if args.config else RunConfig()

    overrides = {}
    if args.max_concurrency is not None:
        overrides["max_concurrency"] = args.max_concurrency
    if args.drop_partial_lines:
        overrides["partial_lines"] = PartialLine.DROP
    if args.verbose:
        overrides["log_level"] = "DEBUG"

    return dataclasses.replace(config, **overrides)


def cmd_run(args: argparse.Namespace, config: RunConfig, command: list[str]) -> int:
    sink = Sink.from_stdio()
    executor = Executor(
        Command.from_argv(command),
        sink,
        max_concurrency=config.max_concurrency,
        partial=config.partial_lines,
    )
    rr = executor.run(args.directories)
    return report(rr, sink)
