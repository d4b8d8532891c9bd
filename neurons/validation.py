"""
Validation node: re-derives the reference for a proposed task result and
votes approve/reject. It never submits anything itself.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running as a script without requiring `PYTHONPATH=.`.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import bittensor as bt
import uvicorn
from fastapi import FastAPI

from oracle_avs.agents.farming import AgentFactory
from oracle_avs.config import ValidationEnvConfig, load_validation_env
from oracle_avs.errors import ConfigurationError
from oracle_avs.oracle.price_source import BinancePriceSource
from oracle_avs.utils.log import configure_logging
from oracle_avs.validator.app import create_app
from oracle_avs.validator.coordinator import VoteCoordinator
from oracle_avs.validator.engine import BoundValidator, SimilarityValidator


def build_app(config: ValidationEnvConfig) -> FastAPI:
    price_source = BinancePriceSource(config.oracle.price_api_url, timeout_s=config.oracle.timeout_s)
    coordinator = VoteCoordinator(
        bound=BoundValidator(price_source, config.oracle.symbol),
        similarity=SimilarityValidator(AgentFactory(config.llm)),
    )
    return create_app(coordinator, closers=[price_source.aclose])


def main() -> int:
    configure_logging()
    try:
        config = load_validation_env()
    except ConfigurationError as exc:
        bt.logging.error(str(exc))
        return 1

    bt.logging.info(f"Validation service starting on {config.host}:{config.port}")
    uvicorn.run(build_app(config), host=config.host, port=config.port, log_level="info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
