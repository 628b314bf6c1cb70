# src/danfe_tracking/config/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Tuple

from danfe_tracking.models import EnvCfg
from danfe_tracking.models.env_cfg import DEFAULT_GEMINI_MODEL, DEFAULT_SSW_BASE_URL

from dotenv import dotenv_values, find_dotenv, load_dotenv


class EnvError(RuntimeError):
    """Raised when required environment variables are missing or malformed."""


# Only the AI summary needs a secret; SSW tracking is unauthenticated.
REQUIRED_KEYS: Tuple[str, ...] = ("GEMINI_API_KEY",)
# Older names still honored for a required key; API_KEY is what the web front-end used.
KEY_ALIASES: Dict[str, Tuple[str, ...]] = {"GEMINI_API_KEY": ("API_KEY",)}


def load_project_dotenv(start: Optional[Path] = None, *, override: bool = False) -> Path:
    """
    Load the nearest `.env` (python-dotenv search from CWD, then upward from
    `start`). Existing process values win unless `override=True`.
    Returns the resolved path, or Path() when nothing was found.
    """
    found = find_dotenv(filename=".env", usecwd=True)
    dotenv_path = Path(found) if found else Path()

    if not found:
        start_path = Path.cwd() if start is None else Path(start)
        for p in (start_path, *start_path.parents):
            if (p / ".env").is_file():
                dotenv_path = p / ".env"
                break

    if not dotenv_path.is_file():
        return Path()

    load_dotenv(dotenv_path=dotenv_path, override=override)
    return dotenv_path.resolve()


def env(name: str, *, default: Optional[str] = None, required: bool = False, cast=None):
    """
    Test-friendly accessor.

    - `required=True` and missing -> KeyError(name).
    - `cast` is applied to the raw string; cast errors propagate.
    - Otherwise returns `default` when missing.
    """
    raw = os.getenv(name)
    if raw is None:
        if required:
            raise KeyError(name)
        return default
    return cast(raw) if cast is not None else raw


def load_env(
    dotenv_path: Optional[Path] = None,
    *,
    override: bool = False,
    required_keys: Tuple[str, ...] = (),
    strict: bool = False,
    discover: bool = True,
) -> Dict[str, str]:
    """
    Load a .env into the process environment and return the pairs it defined.

    - `dotenv_path` given: load exactly that file (if it exists).
    - Otherwise auto-discover via `load_project_dotenv` (unless `discover=False`).
    - `strict=True`: every name in `required_keys` (or one of its KEY_ALIASES)
      must be set afterwards.
    """
    if dotenv_path:
        path = Path(dotenv_path)
    else:
        path = load_project_dotenv(override=override) if discover else None
    loaded: Dict[str, str] = {}

    if path and path.is_file():
        if dotenv_path:
            load_dotenv(dotenv_path=path, override=override)
        loaded = {k: v for k, v in dotenv_values(path).items() if v is not None}

    if strict and required_keys:
        missing = [
            k for k in required_keys
            if not any(os.getenv(n) for n in (k, *KEY_ALIASES.get(k, ())))
        ]
        if missing:
            raise EnvError(
                f"Missing required environment variable(s): {', '.join(missing)}")

    return loaded


def get_app_env(dotenv_path: Path | str | None = ".env", *, strict: bool = False) -> EnvCfg:
    """
    Load settings and return a typed EnvCfg.

    - `dotenv_path=None` disables file loading (tests).
    - Process env wins over the file.
    - `strict=True` requires the Gemini key under either of its names.
    """
    load_env(
        Path(dotenv_path) if dotenv_path else None,
        override=False,
        required_keys=REQUIRED_KEYS,
        strict=strict,
        discover=dotenv_path is not None,
    )

    try:
        timeout = env("SSW_TIMEOUT", default=30, cast=int)
    except ValueError as e:
        raise EnvError(f"SSW_TIMEOUT must be an integer: {e}") from e

    return EnvCfg(
        SSW_BASE_URL=env("SSW_BASE_URL", default=DEFAULT_SSW_BASE_URL),
        SSW_TIMEOUT=timeout,
        GEMINI_API_KEY=env("GEMINI_API_KEY") or env("API_KEY") or "",
        GEMINI_MODEL=env("GEMINI_MODEL", default=DEFAULT_GEMINI_MODEL),
    )


__all__ = [
    "EnvError",
    "REQUIRED_KEYS",
    "KEY_ALIASES",
    "load_project_dotenv",
    "load_env",
    "env",
    "get_app_env",
]
