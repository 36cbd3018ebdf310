from dataclasses import dataclass
from enum import Enum


class PartialLine(Enum):
    FLUSH = "flush"
    DROP = "drop"


DEFAULT_MAX_CONCURRENCY = 8
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class RunConfig:
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    partial_lines: PartialLine = PartialLine.FLUSH
    log_level: str = "WARNING"


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
