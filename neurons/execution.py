"""
Execution node: quotes prices / generates agent strategies, signs them and
submits the attestation to the aggregator.
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
from oracle_avs.config import ExecutionEnvConfig, load_execution_env
from oracle_avs.crypto.signer import Signer
from oracle_avs.errors import ConfigurationError
from oracle_avs.execution.app import create_app
from oracle_avs.execution.coordinator import TaskCoordinator
from oracle_avs.oracle.price_source import BinancePriceSource
from oracle_avs.rpc.aggregator import AggregatorClient
from oracle_avs.utils.log import configure_logging


def build_app(config: ExecutionEnvConfig) -> FastAPI:
    signer = Signer(config.private_key)
    submitter = AggregatorClient(config.aggregator_url, timeout_s=config.rpc_timeout_s)
    price_source = BinancePriceSource(config.oracle.price_api_url, timeout_s=config.oracle.timeout_s)
    coordinator = TaskCoordinator(
        signer=signer,
        submitter=submitter,
        price_source=price_source,
        agents=AgentFactory(config.llm),
        symbol=config.oracle.symbol,
    )
    bt.logging.info(f"Performer address: {signer.address}")
    return create_app(coordinator, closers=[submitter.aclose, price_source.aclose])


def main() -> int:
    configure_logging()
    try:
        config = load_execution_env()
        app = build_app(config)
    except ConfigurationError as exc:
        bt.logging.error(str(exc))
        return 1

    bt.logging.info(f"Execution service starting on {config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level="info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
