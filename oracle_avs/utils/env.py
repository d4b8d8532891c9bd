from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env once on import.
load_dotenv()


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name, default) or "").strip()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _env_str(name, str(default)).lower()
    return raw in {"y", "yes", "t", "true", "on", "1"}


def _raw_number(name: str, default: str) -> str:
    """With TESTING=true, a non-empty `TEST_<NAME>` wins over `<NAME>`."""
    if _env_bool("TESTING", False):
        override = _env_str(f"TEST_{name}", "")
        if override:
            return override
    return _env_str(name, default) or default


def _env_int(name: str, default: int = 0) -> int:
    return int(_raw_number(name, str(default)))


def _env_float(name: str, default: float = 0.0) -> float:
    return float(_raw_number(name, str(default)))
