"""Command-line interface router for scorch-kit."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import signal
import sys
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console

from scorch_kit.config import (
    ConfigLoadError,
    ConfigValidationError,
    config_duration,
    load_config,
)
from scorch_kit.control_plane import PauseComponent
from scorch_kit.domain.errors import MetadataError, SimulatedFailureError
from scorch_kit.domain.models import ComponentOptions, PauseOutcome, Stage
from scorch_kit.observability import (
    ComponentUpdate,
    FanOutStatusSink,
    LoggingStatusSink,
    StatusRecorder,
    correlation_scope,
    setup_logging,
    shutdown_logging,
)
from scorch_kit.sampling import DistributionSampler
from scorch_kit.templating import render_component_metadata, resolve_replacements
from scorch_kit.utils import CancellationToken

EXIT_CANCELLED = 130


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="scorch-kit",
        description=(
            "scorch-kit — pause component and metadata templating for experiment pipelines.\n\n"
            "Common workflows:\n"
            "  scorch-kit render meta.yaml               Resolve replace blocks\n"
            "  scorch-kit pause meta.yaml --stage start  Run one pause stage\n"
            "  scorch-kit config                         Show effective config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to scorch TOML config (default: ./scorch.toml if present).",
    )
    common.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the sampler (overrides [sampling].seed).",
    )
    common.add_argument(
        "--log-level",
        dest="log_level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        type=str.upper,
        default=None,
        help="Log level (overrides [observability].log_level).",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # render --------------------------------------------------------------
    render_parser = subparsers.add_parser(
        "render",
        parents=[common],
        help="Resolve a metadata file's replace block and print the result",
        description=(
            "Resolve the `replace` block of a component metadata YAML file and apply it to\n"
            "the remaining keys.\n\n"
            "Examples:\n"
            "  scorch-kit render meta.yaml\n"
            "  scorch-kit render meta.yaml --base experiment.yaml --seed 7 --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    render_parser.add_argument("meta_path", help="Path to the component metadata YAML")
    render_parser.add_argument(
        "--base",
        dest="base_path",
        default=None,
        help="YAML file with an experiment-level replace block layered under the component's",
    )
    render_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    render_parser.set_defaults(handler=_cmd_render)

    # pause ---------------------------------------------------------------
    pause_parser = subparsers.add_parser(
        "pause",
        parents=[common],
        help="Run one lifecycle stage of a pause component",
        description=(
            "Run a pause component stage against a metadata YAML file. Ctrl-C cancels.\n\n"
            "Examples:\n"
            "  scorch-kit pause meta.yaml --stage start\n"
            "  scorch-kit pause meta.yaml --stage configure --timeout 5 --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    pause_parser.add_argument("meta_path", help="Path to the pause metadata YAML")
    pause_parser.add_argument(
        "--stage",
        required=True,
        choices=tuple(stage.value for stage in Stage),
        help="Lifecycle stage to run",
    )
    pause_parser.add_argument("--name", default="pause", help="Component name (default: pause)")
    pause_parser.add_argument(
        "--experiment", default="local", help="Experiment name (default: local)"
    )
    pause_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Cancel the pause after this many seconds",
    )
    pause_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    pause_parser.set_defaults(handler=_cmd_pause)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
        description=(
            "Display the fully-resolved configuration after applying\n"
            "defaults, file, environment, and CLI overrides.\n\n"
            "Examples:\n"
            "  scorch-kit config\n"
            "  scorch-kit config --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_render(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    sampler = _build_sampler(config)
    meta = _load_yaml_mapping(Path(args.meta_path), label="metadata")

    try:
        base = None
        if args.base_path is not None:
            raw_base = _load_yaml_mapping(Path(args.base_path), label="base")
            base = resolve_replacements(raw_base.get("replace", raw_base), sampler, path="base")
        rendered = render_component_metadata(meta, sampler, base=base)
    except MetadataError as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    if _flag(args, "json"):
        _emit_json({"command": "render", "meta": rendered.meta, "resolved": rendered.resolved})
        return 0

    sys.stdout.write(yaml.safe_dump(rendered.meta, sort_keys=True, default_flow_style=False))
    return 0


def _cmd_pause(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    stage = Stage.parse(args.stage)
    meta = _load_yaml_mapping(Path(args.meta_path), label="metadata")
    if args.timeout is not None and args.timeout < 0:
        raise CLIError("--timeout must be >= 0", exit_code=2)

    try:
        options = ComponentOptions(name=args.name, experiment_name=args.experiment, meta=meta)
    except ValueError as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    as_json = _flag(args, "json")
    console = Console(stderr=True, no_color=_flag(args, "no_color"))
    recorder = StatusRecorder(on_update=None if as_json else _print_update)
    component = PauseComponent(
        options,
        sink=FanOutStatusSink(recorder, LoggingStatusSink()),
        sampler=_build_sampler(config),
        default_duration=config_duration(config, "pause", "default_duration"),
        tick_seconds=config_duration(config, "pause", "tick_interval").total_seconds(),
        console=console,
    )

    run_id = _new_run_id()
    setup_logging(config["observability"], run_id=run_id)
    try:
        with correlation_scope(run_id=run_id):
            outcome, error = asyncio.run(_drive_pause(component, stage, args.timeout))
    except MetadataError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    finally:
        shutdown_logging()

    if as_json:
        _emit_json(
            {
                "command": "pause",
                "experiment": options.experiment_name,
                "component": options.name,
                "stage": stage.value,
                "outcome": outcome.value,
                "error": None if error is None else str(error),
                "updates": [update.to_dict() for update in recorder.updates],
            }
        )
    elif error is not None:
        print(f"error: {error}", file=sys.stderr)

    if outcome is PauseOutcome.FAILED:
        return 1
    if outcome is PauseOutcome.CANCELLED:
        return EXIT_CANCELLED
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)

    if _flag(args, "json"):
        _emit_json({"command": "config", "config": config})
        return 0

    print(json.dumps(config, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


async def _drive_pause(
    component: PauseComponent,
    stage: Stage,
    timeout_seconds: float | None,
) -> tuple[PauseOutcome, BaseException | None]:
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    timer = token.cancel_after(timeout_seconds) if timeout_seconds is not None else None

    entry = {
        Stage.CONFIGURE: component.configure,
        Stage.START: component.start,
        Stage.STOP: component.stop,
        Stage.CLEANUP: component.cleanup,
    }[stage]

    try:
        await entry(token)
    except SimulatedFailureError as exc:
        return PauseOutcome.FAILED, exc
    except (asyncio.CancelledError, TimeoutError) as exc:
        if exc is not token.cause:
            raise
        return PauseOutcome.CANCELLED, exc
    finally:
        if timer is not None:
            timer.cancel()
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(signal.SIGINT)
        await component.registry.shutdown()
    return PauseOutcome.COMPLETED, None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _print_update(update: ComponentUpdate) -> None:
    sys.stdout.write(update.output_text)
    sys.stdout.flush()


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, object] = {
        "sampling.seed": getattr(args, "seed", None),
        "observability.log_level": getattr(args, "log_level", None),
    }
    try:
        return load_config(getattr(args, "config_path", None), cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _build_sampler(config: Mapping[str, Any]) -> DistributionSampler:
    sampling = config.get("sampling", {})
    return DistributionSampler(seed=sampling.get("seed"))


def _load_yaml_mapping(path: Path, *, label: str) -> dict[str, Any]:
    resolved = path.expanduser().resolve()
    try:
        with resolved.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as exc:
        raise CLIError(f"unable to read {label} file {resolved}: {exc}", exit_code=2) from exc
    except yaml.YAMLError as exc:
        raise CLIError(f"invalid YAML in {resolved}: {exc}", exit_code=2) from exc

    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise CLIError(f"{label} file must contain a mapping: {resolved}", exit_code=2)
    return dict(payload)


def _new_run_id() -> str:
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"{stamp}-{uuid.uuid4().hex[:8]}"


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "EXIT_CANCELLED", "build_parser", "run_cli"]
