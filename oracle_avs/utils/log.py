from __future__ import annotations

import bittensor as bt

from oracle_avs.utils.env import _env_str


def configure_logging() -> None:
    """Apply LOG_LEVEL (info | debug | trace) to bittensor's logger."""
    level = (_env_str("LOG_LEVEL", "info") or "info").lower()
    if level == "trace":
        bt.logging.set_trace(True)
    elif level == "debug":
        bt.logging.set_debug(True)
