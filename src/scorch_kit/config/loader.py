"""
scorch-kit — runtime config loader.

File: src/scorch_kit/config/loader.py

Purpose
- Build the effective runtime config from four layers, lowest first:
  built-in defaults, ``scorch.toml``, ``SCORCH_*`` environment variables,
  and CLI flags.

Notes
- Every scalar default outside ``[meta]`` gets an environment variable named
  ``SCORCH_<SECTION>_<KEY>``; its type decides how the raw string is parsed.
- ``sampling.seed`` has no default but is still bound (``SCORCH_SAMPLING_SEED``).
- ``observability.log_dir`` is resolved against the directory of the config file.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import Any, Final

from scorch_kit.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "scorch.toml"
ENV_PREFIX: Final[str] = "SCORCH_"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

ConfigPath = tuple[str, ...]
_Parser = Callable[[str, str], object]


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config.

    Without ``config_path`` a ``scorch.toml`` in the working directory is used
    when present. An explicit path that does not exist is an error.

    ``cli_overrides`` keys may be dotted (``"pause.tick_interval"``) or name a
    whole section with a nested mapping. ``None`` values are skipped so parsed
    argparse namespaces can be passed through untouched.
    """

    if config_path is None:
        source = (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
        from_file = _read_toml(source) if source.exists() else {}
    else:
        source = Path(config_path).expanduser().resolve()
        if not source.exists():
            raise ConfigLoadError(f"config file not found: {source}")
        from_file = _read_toml(source)

    config = assert_valid_config(merge_config(default_config(), from_file))

    env = os.environ if environ is None else environ
    for layer in (_env_layer(config, env), _cli_layer(cli_overrides or {})):
        config = merge_config(config, layer)
    config = assert_valid_config(config)

    return normalize_paths(config, base_dir=source.parent)


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Return a copy of ``config`` with path fields made absolute against ``base_dir``."""

    result = merge_config({}, config)
    for path in PATH_FIELDS:
        section = result.get(path[0])
        if not isinstance(section, dict):
            continue
        raw = section.get(path[-1])
        if isinstance(raw, str):
            section[path[-1]] = _absolute(raw, base_dir)
    return result


def dump_effective_config(config: Mapping[str, object]) -> str:
    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def env_var_name(path: ConfigPath) -> str:
    """``("pause", "tick_interval")`` -> ``SCORCH_PAUSE_TICK_INTERVAL``."""

    return ENV_PREFIX + "_".join(part.upper() for part in path)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_layer(config: Mapping[str, object], environ: Mapping[str, str]) -> dict[str, Any]:
    bindings = dict(_env_bindings(config))
    layer: dict[str, Any] = {}
    for name in sorted(bindings):
        if name not in environ:
            continue
        path, parse = bindings[name]
        _assign(layer, path, parse(environ[name].strip(), f"{name} -> {'.'.join(path)}"))
    return layer


def _env_bindings(config: Mapping[str, object]) -> Iterator[tuple[str, tuple[ConfigPath, _Parser]]]:
    for path, value in _leaves(config):
        if path[0] == "meta":
            continue
        parse = _parser_for(value)
        if parse is not None:
            yield env_var_name(path), (path, parse)
    seed_path = ("sampling", "seed")
    yield env_var_name(seed_path), (seed_path, _parse_int)


def _leaves(payload: Mapping[str, object], prefix: ConfigPath = ()) -> Iterator[tuple[ConfigPath, object]]:
    for key in sorted(payload):
        value = payload[key]
        if isinstance(value, Mapping):
            yield from _leaves(value, (*prefix, key))
        else:
            yield (*prefix, key), value


def _parser_for(value: object) -> _Parser | None:
    # bool is checked first since it is also an int.
    if isinstance(value, bool):
        return _parse_bool
    if isinstance(value, int):
        return _parse_int
    if isinstance(value, str):
        return lambda raw, _label: raw
    return None


def _parse_int(raw: str, label: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigLoadError(f"{label} must be an integer") from exc


def _parse_bool(raw: str, label: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigLoadError(f"{label} must be a boolean (true/false/1/0/yes/no/on/off)")


def _cli_layer(overrides: Mapping[str, object]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for key in sorted(overrides):
        value = overrides[key]
        if value is None:
            continue
        path = tuple(part for part in key.split(".") if part)
        if not path:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        if len(path) == 1 and isinstance(value, Mapping):
            layer[key] = merge_config(layer.get(key, {}), value)
        else:
            _assign(layer, path, value)
    return layer


def _assign(target: dict[str, Any], path: ConfigPath, value: object) -> None:
    *parents, leaf = path
    for part in parents:
        child = target.get(part)
        if not isinstance(child, dict):
            child = target[part] = {}
        target = child
    target[leaf] = value


def _absolute(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "env_var_name",
    "load_config",
    "normalize_paths",
]
