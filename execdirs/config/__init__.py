from .loader import load_config
from .types import (
    DEFAULT_MAX_CONCURRENCY,
    ConfigError,
    PartialLine,
    RunConfig,
    UnsupportedConfigFormatError,
)

__all__ = [
    "load_config",
    "RunConfig",
    "PartialLine",
    "ConfigError",
    "UnsupportedConfigFormatError",
    "DEFAULT_MAX_CONCURRENCY",
]
