"""
scorch-kit — configuration package.

File: src/scorch_kit/config/__init__.py

Purpose
- Public configuration API: defaults, strict validation, and layered loading.
"""

from scorch_kit.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    env_var_name,
    load_config,
    normalize_paths,
)
from scorch_kit.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    ScorchConfig,
    assert_valid_config,
    config_duration,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ScorchConfig",
    "assert_valid_config",
    "config_duration",
    "default_config",
    "dump_effective_config",
    "env_var_name",
    "load_config",
    "merge_config",
    "normalize_paths",
    "validate_config",
]
