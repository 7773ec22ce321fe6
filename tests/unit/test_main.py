"""
scorch-kit — unit tests for the process entrypoint

File: tests/unit/test_main.py

Purpose
- Validate exit-code routing at the CLI boundary.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest

from scorch_kit.config import ConfigLoadError
from scorch_kit.domain.errors import EmptyChoiceSetError, SimulatedFailureError
from scorch_kit.main import ExitCode, classify_exception, cli_entrypoint
from scorch_kit.ui import cli


def _patch_run_cli(
    monkeypatch: pytest.MonkeyPatch, behaviour: Callable[[Sequence[str] | None], object]
) -> None:
    monkeypatch.setattr(cli, "run_cli", behaviour)


def test_return_codes_pass_through(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_run_cli(monkeypatch, lambda argv: 2)
    assert cli_entrypoint([]) == 2

    _patch_run_cli(monkeypatch, lambda argv: None)
    assert cli_entrypoint([]) == 0


def test_unknown_codes_become_internal_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def exit_with_text(argv: Sequence[str] | None) -> int:
        raise SystemExit("boom")

    _patch_run_cli(monkeypatch, exit_with_text)
    assert cli_entrypoint([]) == ExitCode.INTERNAL_ERROR
    assert "boom" in capsys.readouterr().err

    _patch_run_cli(monkeypatch, lambda argv: 77)
    assert cli_entrypoint([]) == ExitCode.INTERNAL_ERROR


def test_keyboard_interrupt_is_cancelled(monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(argv: Sequence[str] | None) -> int:
        raise KeyboardInterrupt

    _patch_run_cli(monkeypatch, interrupted)
    assert cli_entrypoint([]) == 130


def test_domain_failures_are_routed(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def failing(argv: Sequence[str] | None) -> int:
        raise SimulatedFailureError("stop")

    _patch_run_cli(monkeypatch, failing)
    assert cli_entrypoint([]) == ExitCode.RUNTIME_FAILURE
    assert "failing as instructed in stage 'stop'" in capsys.readouterr().err


def test_classification_follows_the_cause_chain() -> None:
    try:
        try:
            raise EmptyChoiceSetError("color")
        except EmptyChoiceSetError as exc:
            raise RuntimeError("wrapped") from exc
    except RuntimeError as outer:
        assert classify_exception(outer) is ExitCode.CONFIG_ERROR

    assert classify_exception(ConfigLoadError("x")) is ExitCode.CONFIG_ERROR
    assert classify_exception(FileNotFoundError("x")) is ExitCode.CONFIG_ERROR
    assert classify_exception(LookupError("x")) is ExitCode.INTERNAL_ERROR
