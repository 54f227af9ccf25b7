"""Configuration loading utilities for the path watcher."""
from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

import yaml # type: ignore

from .monitor import DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


class EmptyWatchSetError(ConfigError):
    """Raised when no path is left to watch."""


@dataclass
class WatchConfig:
    """Resolved settings for one watcher run."""

    files: List[str]
    command: List[str] = field(default_factory=list)
    silent: bool = False
    poll_interval: float = DEFAULT_POLL_INTERVAL


def load_config(path: Path) -> WatchConfig:
    """Load and validate a YAML configuration file.

    The file may leave ``watch.files`` empty when paths are supplied on the
    command line; :func:`build_config` performs the final non-empty check.
    """

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:  # pragma: no cover - logging helper
        raise ConfigError(f"Failed to parse YAML configuration: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    raw = data.get("watch", {})
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("'watch' section must be a mapping")

    files = [
        _resolve_path(item, config_path=path)
        for item in _ensure_str_list(raw.get("files", []), "watch.files")
    ]
    command = _ensure_str_list(raw.get("command", []), "watch.command")

    silent = raw.get("silent", False)
    if not isinstance(silent, bool):
        raise ConfigError("watch.silent must be a boolean")

    poll_interval = _parse_poll_interval(raw.get("poll_interval", DEFAULT_POLL_INTERVAL))

    logger.debug("Loaded configuration from %s", path)
    return WatchConfig(
        files=_dedupe(files),
        command=command,
        silent=silent,
        poll_interval=poll_interval,
    )


def build_config(
    files: Optional[Sequence[str]],
    command: Optional[Sequence[str]],
    *,
    silent: bool = False,
    base: Optional[WatchConfig] = None,
) -> WatchConfig:
    """Merge command-line values over ``base`` and validate the result."""

    base = base or WatchConfig(files=[])

    resolved_files = list(files) if files else list(base.files)
    resolved_files = _dedupe(resolved_files)
    if not resolved_files:
        raise EmptyWatchSetError("no files to watch, aborting")

    return WatchConfig(
        files=resolved_files,
        command=list(command) if command else list(base.command),
        silent=silent or base.silent,
        poll_interval=base.poll_interval,
    )


def _resolve_path(raw: str, *, config_path: Path) -> str:
    if os.path.isabs(raw):
        return raw
    return os.path.join(os.fspath(config_path.parent), raw)


def _dedupe(paths: Sequence[str]) -> List[str]:
    unique = list(dict.fromkeys(paths))
    if len(unique) != len(paths):
        logger.info("Ignoring %s duplicate path(s)", len(paths) - len(unique))
    return unique


def _parse_poll_interval(value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigError("watch.poll_interval must be numeric")
    try:
        interval = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError("watch.poll_interval must be numeric") from exc
    if not math.isfinite(interval):
        raise ConfigError("watch.poll_interval must be finite")
    if interval <= 0:
        raise ConfigError("watch.poll_interval must be positive")
    return interval


def _ensure_str_list(value: Any, field_name: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of strings")
    items: List[str] = []
    for elem in value:
        if not isinstance(elem, str):
            raise ConfigError(f"{field_name} must contain only strings")
        items.append(elem)
    return items
