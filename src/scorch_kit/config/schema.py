"""
scorch-kit — configuration schema and validation.

File: src/scorch_kit/config/schema.py

Purpose
- Built-in defaults for the `[meta]`, `[pause]`, `[sampling]` and `[observability]`
  sections, plus strict validation that reports every problem with its dotted path.
- Duration strings are rewritten to their canonical spelling (`"90s"` -> `"1m30s"`).
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, NotRequired, TypedDict

from scorch_kit.constants import CONFIG_SCHEMA_VERSION
from scorch_kit.domain.durations import Duration, DurationParseError, coerce_duration

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

_LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")

# Resolved against the directory holding the config file.
PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (("observability", "log_dir"),)


class MetaConfig(TypedDict):
    schema_version: int


class PauseConfig(TypedDict):
    default_duration: str
    tick_interval: str


class SamplingConfig(TypedDict):
    seed: NotRequired[int]


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    log_to_stdout: bool


class ScorchConfig(TypedDict):
    meta: MetaConfig
    pause: PauseConfig
    sampling: SamplingConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[ScorchConfig] = {
    "meta": {"schema_version": ConfigSchemaVersion},
    "pause": {
        "default_duration": "10s",
        "tick_interval": "1s",
    },
    "sampling": {},
    "observability": {
        "log_level": "INFO",
        "log_dir": "logs",
        "log_to_stdout": False,
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """One problem found in a config payload."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Normalized config, or the issues that prevented producing one."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised by ``assert_valid_config``; ``issues`` lists every problem found."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> ScorchConfig:
    """Fresh copy of ``DEFAULT_CONFIG`` that callers may mutate."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; nested mappings merge key by key."""

    merged = copy.deepcopy(dict(base))
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Check every section and key, collecting all issues rather than stopping at the first."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    _reject_unknown_keys(root, {"meta", "pause", "sampling", "observability"}, "", issues)
    normalized: dict[str, Any] = {
        "meta": _validate_meta(root.get("meta"), issues),
        "pause": _validate_pause(root.get("pause"), issues),
        "sampling": _validate_sampling(root.get("sampling"), issues),
        "observability": _validate_observability(root.get("observability"), issues),
    }

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def config_duration(config: Mapping[str, Any], section: str, key: str) -> Duration:
    """Read a validated duration field as a ``Duration``."""

    return coerce_duration(config[section][key])


def _validate_meta(value: object, issues: _IssueCollector) -> dict[str, Any]:
    section = _as_object(value, "meta", issues) or {}
    _reject_unknown_keys(section, {"schema_version"}, "meta", issues)
    version = section.get("schema_version", ConfigSchemaVersion)
    if isinstance(version, bool) or not isinstance(version, int):
        issues.add("meta.schema_version", "must be an integer")
    elif version != ConfigSchemaVersion:
        issues.add(
            "meta.schema_version",
            f"schema version {version} is not supported (expected {ConfigSchemaVersion})",
        )
    return {"schema_version": version}


def _validate_pause(value: object, issues: _IssueCollector) -> dict[str, Any]:
    section = _as_object(value, "pause", issues) or {}
    _reject_unknown_keys(section, {"default_duration", "tick_interval"}, "pause", issues)
    default_duration = _as_duration_text(
        section.get("default_duration", "10s"), "pause.default_duration", issues, minimum=0
    )
    tick_interval = _as_duration_text(
        section.get("tick_interval", "1s"), "pause.tick_interval", issues, minimum=1
    )
    return {"default_duration": default_duration, "tick_interval": tick_interval}


def _validate_sampling(value: object, issues: _IssueCollector) -> dict[str, Any]:
    section = _as_object(value, "sampling", issues) or {}
    _reject_unknown_keys(section, {"seed"}, "sampling", issues)
    normalized: dict[str, Any] = {}
    if "seed" in section:
        seed = section["seed"]
        if isinstance(seed, bool) or not isinstance(seed, int):
            issues.add("sampling.seed", "must be an integer")
        else:
            normalized["seed"] = seed
    return normalized


def _validate_observability(value: object, issues: _IssueCollector) -> dict[str, Any]:
    section = _as_object(value, "observability", issues) or {}
    _reject_unknown_keys(
        section, {"log_level", "log_dir", "log_to_stdout"}, "observability", issues
    )

    log_level = section.get("log_level", "INFO")
    if not isinstance(log_level, str) or log_level.strip().upper() not in _LOG_LEVELS:
        issues.add("observability.log_level", f"must be one of: {', '.join(_LOG_LEVELS)}")
        log_level = "INFO"

    log_dir = section.get("log_dir", "logs")
    if not isinstance(log_dir, str) or not log_dir.strip():
        issues.add("observability.log_dir", "must be a non-empty string")
        log_dir = "logs"

    log_to_stdout = section.get("log_to_stdout", False)
    if not isinstance(log_to_stdout, bool):
        issues.add("observability.log_to_stdout", "must be a boolean")
        log_to_stdout = False

    return {
        "log_level": log_level.strip().upper(),
        "log_dir": log_dir,
        "log_to_stdout": log_to_stdout,
    }


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        issues.add(path, "must be an object")
        return None
    return dict(value)


def _as_duration_text(
    value: object, path: str, issues: _IssueCollector, *, minimum: int
) -> str | None:
    try:
        duration = coerce_duration(value)
    except DurationParseError as exc:
        issues.add(path, str(exc))
        return None
    if duration.nanoseconds < minimum:
        issues.add(path, "must be positive" if minimum > 0 else "must not be negative")
        return None
    return str(duration)


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(f"{path}.{key}" if path else key, "unknown key")


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        current = target.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            _merge_into(current, value)
        else:
            target[key] = copy.deepcopy(value)


__all__ = [
    "DEFAULT_CONFIG",
    "PATH_FIELDS",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ObservabilityConfig",
    "PauseConfig",
    "SamplingConfig",
    "ScorchConfig",
    "assert_valid_config",
    "config_duration",
    "default_config",
    "merge_config",
    "validate_config",
]
