"""Module entrypoint for ``python -m scorch_kit``."""

from __future__ import annotations

from scorch_kit.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
