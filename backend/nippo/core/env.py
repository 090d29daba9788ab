"""Process configuration.

All settings come from environment variables. A `.env` file at the repo root or
under `backend/` is merged in for local development; the real environment
always wins.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    value = value.strip()
    if not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return key, value


def _env_files() -> list[Path]:
    # backend/nippo/core/env.py -> repo root is three levels above `core`
    repo_root = Path(__file__).resolve().parents[3]
    return [repo_root / ".env", repo_root / "backend" / ".env"]


def load_env_if_present(*, override: bool = False) -> None:
    """Merge `.env` files into os.environ.

    Existing variables are kept unless override=True.
    """
    for p in _env_files():
        if not p.is_file():
            continue
        try:
            content = p.read_text(encoding="utf-8")
        except OSError:
            continue
        for raw in content.splitlines():
            parsed = _parse_env_line(raw)
            if parsed is None:
                continue
            k, v = parsed
            if not override and k in os.environ:
                continue
            os.environ[k] = v


def require_env(name: str, *, example: Optional[str] = None) -> str:
    """Return a required variable or fail loudly naming it."""
    load_env_if_present()
    value = os.environ.get(name)
    if not value:
        msg = f"Missing required env var {name}."
        if example:
            msg += f" Example: {example}"
        raise RuntimeError(msg)
    return value
