"""
scorch-kit — CLI subprocess smoke contracts

File: tests/integration/test_cli_smoke.py

Purpose
- Enforce CLI behavior for `python -m scorch_kit` render/pause/config.
- Verify exit codes, command output signals, and the per-run JSON log file.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"

_FAST_CONFIG = """
[pause]
tick_interval = "100ms"

[observability]
log_dir = "logs"
""".strip()


def _run_cli(workdir: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("SCORCH_")}
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}:{existing_pythonpath}"
    )
    return subprocess.run(
        [sys.executable, "-m", "scorch_kit", *args],
        cwd=workdir,
        text=True,
        capture_output=True,
        check=False,
        env=env,
        timeout=60,
    )


def _write(path: Path, contents: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")


def _workdir(tmp_path: Path) -> Path:
    _write(tmp_path / "scorch.toml", _FAST_CONFIG)
    return tmp_path


def test_cli_render_json_is_seeded_and_deterministic(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    _write(
        workdir / "meta.yaml",
        """
hosts: "node-$COUNT"
count: "$COUNT"
rate: "$RATE"
replace:
  $COUNT: [1, 2, 3]
  $RATE:
    type: int
    uniform: {minimum: 10, maximum: 20}
""".strip(),
    )

    first = _run_cli(workdir, "render", "meta.yaml", "--seed", "5", "--json")
    second = _run_cli(workdir, "render", "meta.yaml", "--seed", "5", "--json")

    assert first.returncode == 0, first.stderr
    assert first.stdout == second.stdout
    payload = json.loads(first.stdout)
    assert payload["command"] == "render"
    meta = payload["meta"]
    assert set(meta) == {"hosts", "count", "rate"}
    assert meta["count"] in {1, 2, 3}
    assert meta["hosts"] == f"node-{meta['count']}"
    assert isinstance(meta["rate"], int)
    assert 10 <= meta["rate"] <= 20


def test_cli_render_layers_base_replacements(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    _write(workdir / "meta.yaml", 'a: "$X"\nb: "$Y"\nreplace:\n  $X: [own]\n')
    _write(workdir / "base.yaml", "replace:\n  $X: [base]\n  $Y: [shared]\n")

    completed = _run_cli(workdir, "render", "meta.yaml", "--base", "base.yaml")

    assert completed.returncode == 0, completed.stderr
    assert completed.stdout.splitlines() == ["a: own", "b: shared"]


def test_cli_render_invalid_metadata_exits_two(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    _write(workdir / "meta.yaml", "replace:\n  $X: []\n")

    completed = _run_cli(workdir, "render", "meta.yaml")

    assert completed.returncode == 2
    assert "empty list" in completed.stderr


def test_cli_pause_updates_then_fails(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    _write(workdir / "meta.yaml", 'duration: "300ms"\nfailStages: [start]\n')

    completed = _run_cli(
        workdir, "pause", "meta.yaml", "--stage", "start", "--name", "wait", "--json"
    )

    assert completed.returncode == 1, completed.stderr
    assert "pausing for 300ms" in completed.stderr
    payload = json.loads(completed.stdout)
    assert payload["outcome"] == "failed"
    assert payload["component"] == "wait"
    assert [update["output"] for update in payload["updates"]] == [
        "pausing... (1s / 300ms)\n",
        "pausing... (2s / 300ms)\n",
    ]

    log_files = list((workdir / "logs").glob("*/scorch.jsonl"))
    assert len(log_files) == 1
    events = [
        json.loads(line)["message"]
        for line in log_files[0].read_text(encoding="utf-8").splitlines()
    ]
    assert events[0] == "pause_started"
    assert events.count("component_status_update") == 2
    assert "pause_finished" in events


def test_cli_pause_completes_and_streams_updates(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    _write(workdir / "meta.yaml", "duration: 150ms\n")

    completed = _run_cli(workdir, "pause", "meta.yaml", "--stage", "configure")

    assert completed.returncode == 0, completed.stderr
    assert completed.stdout == "pausing... (1s / 150ms)\n"


def test_cli_pause_timeout_exits_130(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    _write(workdir / "meta.yaml", "duration: 30s\n")

    completed = _run_cli(
        workdir, "pause", "meta.yaml", "--stage", "stop", "--timeout", "0.3", "--json"
    )

    assert completed.returncode == 130, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload["outcome"] == "cancelled"
    assert "timed out" in payload["error"]


def test_cli_pause_conflicting_metadata_exits_two(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    _write(workdir / "meta.yaml", "duration: 1s\nrandom: {uniform: {}}\n")

    completed = _run_cli(workdir, "pause", "meta.yaml", "--stage", "start")

    assert completed.returncode == 2
    assert "cannot specify both duration and random" in completed.stderr
    assert "pausing for" not in completed.stderr


def test_cli_config_json_has_stable_keys(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)

    completed = _run_cli(workdir, "config", "--json", "--seed", "8", "--log-level", "debug")

    assert completed.returncode == 0, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload["command"] == "config"
    config = payload["config"]
    assert sorted(config) == ["meta", "observability", "pause", "sampling"]
    assert config["pause"]["tick_interval"] == "100ms"
    assert config["sampling"] == {"seed": 8}
    assert config["observability"]["log_level"] == "DEBUG"


def test_cli_config_invalid_file_exits_two(tmp_path: Path) -> None:
    _write(tmp_path / "scorch.toml", "[pause]\nspeed = 3\n")

    completed = _run_cli(tmp_path, "config")

    assert completed.returncode == 2
    assert "pause.speed: unknown key" in completed.stderr
