"""UI package exports for the command-line interface."""

from scorch_kit.ui.cli import CLIError, build_parser, run_cli

__all__ = [
    "CLIError",
    "build_parser",
    "run_cli",
]
