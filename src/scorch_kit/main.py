"""Process entrypoint for ``scorch-kit``: runs the CLI and maps failures to exit codes."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    SUCCESS = 0
    RUNTIME_FAILURE = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 4
    CANCELLED = 130


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and always return one of the ``ExitCode`` values."""

    try:
        from scorch_kit.ui.cli import run_cli

        code: object = run_cli(argv)
    except SystemExit as exc:
        code = exc.code
    except KeyboardInterrupt:
        return ExitCode.CANCELLED.value
    except BaseException as exc:  # noqa: BLE001 - last line before the process exits.
        routed = classify_exception(exc)
        if routed is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            _stderr(str(exc).strip() or type(exc).__name__)
        return routed.value

    if code is None:
        return ExitCode.SUCCESS.value
    if isinstance(code, int) and code in ExitCode._value2member_map_:
        return code
    if isinstance(code, str) and code.strip():
        _stderr(code.strip())
    return ExitCode.INTERNAL_ERROR.value


def classify_exception(exc: BaseException) -> ExitCode:
    """Pick the exit code for the first recognised error in ``exc``'s chain."""

    from scorch_kit.config import ConfigLoadError, ConfigValidationError
    from scorch_kit.domain.errors import MetadataError, SimulatedFailureError

    routes: tuple[tuple[tuple[type[BaseException], ...], ExitCode], ...] = (
        ((ConfigLoadError, ConfigValidationError, MetadataError), ExitCode.CONFIG_ERROR),
        ((SimulatedFailureError,), ExitCode.RUNTIME_FAILURE),
        ((FileNotFoundError, NotADirectoryError, PermissionError), ExitCode.CONFIG_ERROR),
    )
    for link in _causes(exc):
        for types, code in routes:
            if isinstance(link, types):
                return code
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def _stderr(message: str) -> None:
    sys.stderr.write(message.rstrip("\n") + "\n")


__all__ = ["ExitCode", "classify_exception", "cli_entrypoint"]
