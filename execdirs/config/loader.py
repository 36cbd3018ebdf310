import json
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from .types import (
    LOG_LEVELS,
    ConfigError,
    PartialLine,
    RunConfig,
    UnsupportedConfigFormatError,
)


def load_config(path: str | Path) -> RunConfig:
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Config file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Config path is not a file: {pure_path}")

    fmt = _detect_format(pure_path)
    raw_file = _parse_file(pure_path, fmt)
    return _build_run_config(pure_path, raw_file)


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    match fmt:
        case "yaml":
            raw_file = _parse_yaml(path)
        case "toml":
            raw_file = _parse_toml(path)
        case "json":
            raw_file = _parse_json(path)
        case _:
            raise AssertionError("Unreachable")

    # An empty YAML document is an empty config
    if raw_file is None and fmt == "yaml":
        return {}

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: {fmt.upper()} parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _parse_yaml(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML") from exc


def _parse_toml(path: Path) -> Any:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: invalid TOML") from exc


def _parse_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON") from exc


def _build_run_config(path: Path, raw: Mapping[str, Any]) -> RunConfig:
    keys = {"max_concurrency", "partial_lines", "log_level"}
    defaults = RunConfig()

    for field in raw.keys():
        if field not in keys:
            raise ConfigError(f"{path}: Can't process: {field}")

    max_concurrency = defaults.max_concurrency
    if "max_concurrency" in raw:
        value = raw["max_concurrency"]
        # bool is an int subclass, reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{path}: 'max_concurrency' should be an integer")
        if value < 1:
            raise ConfigError(f"{path}: 'max_concurrency' must be at least 1, got {value}")
        max_concurrency = value

    partial_lines = defaults.partial_lines
    if "partial_lines" in raw:
        value = raw["partial_lines"]
        if not isinstance(value, str):
            raise ConfigError(f"{path}: 'partial_lines' should be a string")
        try:
            partial_lines = PartialLine(value.strip().lower())
        except ValueError:
            raise ConfigError(
                f"{path}: 'partial_lines' must be 'flush' or 'drop', got {value!r}"
            ) from None

    log_level = defaults.log_level
    if "log_level" in raw:
        value = raw["log_level"]
        if not isinstance(value, str):
            raise ConfigError(f"{path}: 'log_level' should be a string")
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ConfigError(
                f"{path}: 'log_level' must be one of {', '.join(LOG_LEVELS)}, got {value!r}"
            )
        log_level = level

    return RunConfig(max_concurrency, partial_lines, log_level)
