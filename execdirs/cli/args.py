from __future__ import annotations

import argparse

from execdirs.config.types import DEFAULT_MAX_CONCURRENCY

COMMAND_SEPARATOR = "--"


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="execute-in-dirs",
        description="Execute the same command in multiple directories.",
        usage="%(prog)s [options] DIRECTORY [DIRECTORY ...] -- COMMAND [ARG ...]",
    )

    parser.add_argument(
        "directories",
        nargs="+",
        metavar="DIRECTORY",
        help="Directories in which to execute the command",
    )
    parser.add_argument(
        "-c",
        "--max-concurrency",
        type=_positive_int,
        default=None,
        help=f"Maximum number of commands running at once (default: {DEFAULT_MAX_CONCURRENCY})",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to an optional config file (.yml/.yaml, .toml, .json)",
    )
    parser.add_argument(
        "--drop-partial-lines",
        action="store_true",
        help="Discard output that ends without a trailing newline",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug information to stderr",
    )

    return parser


def split_command(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first separator; everything after it is the command, untouched."""
    if COMMAND_SEPARATOR not in argv:
        return list(argv), []
    idx = argv.index(COMMAND_SEPARATOR)
    return list(argv[:idx]), list(argv[idx + 1 :])
