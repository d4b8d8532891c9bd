from __future__ import annotations

from dataclasses import dataclass
from typing import NoReturn, Optional

from oracle_avs.errors import ConfigurationError
from oracle_avs.utils.env import _env_float, _env_int, _env_str


DEFAULT_PRICE_API_URL = "https://api.binance.com/api/v3/ticker/price"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


@dataclass(frozen=True)
class OracleConfig:
    price_api_url: str
    symbol: str
    timeout_s: float


@dataclass(frozen=True)
class LlmConfig:
    # Checked lazily: only agent endpoints need it.
    api_key: Optional[str]
    base_url: str
    temperature: float
    timeout_s: float


@dataclass(frozen=True)
class ExecutionEnvConfig:
    private_key: str
    aggregator_url: str
    rpc_timeout_s: float
    oracle: OracleConfig
    llm: LlmConfig
    host: str
    port: int

    def __repr__(self) -> str:
        # Never print key material.
        return (
            f"ExecutionEnvConfig(aggregator_url={self.aggregator_url!r}, "
            f"symbol={self.oracle.symbol!r}, host={self.host!r}, port={self.port})"
        )


@dataclass(frozen=True)
class ValidationEnvConfig:
    oracle: OracleConfig
    llm: LlmConfig
    host: str
    port: int


def _die(msg: str) -> NoReturn:
    raise ConfigurationError(f"[oracle-avs] {msg}")


def _require_http(name: str, value: str) -> str:
    if not value.startswith("http"):
        _die(f"{name} must be http(s). Got: {value!r}")
    return value.rstrip("/")


def _load_oracle() -> OracleConfig:
    price_api_url = _require_http("PRICE_API_URL", _env_str("PRICE_API_URL", DEFAULT_PRICE_API_URL))
    symbol = (_env_str("ORACLE_SYMBOL", "ETHUSDT") or "ETHUSDT").upper()
    return OracleConfig(
        price_api_url=price_api_url,
        symbol=symbol,
        timeout_s=_env_float("PRICE_API_TIMEOUT_S", 10.0),
    )


def _load_llm() -> LlmConfig:
    base_url = _require_http("OPENAI_BASE_URL", _env_str("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL))
    return LlmConfig(
        api_key=_env_str("OPENAI_API_KEY", "") or None,
        base_url=base_url,
        temperature=_env_float("OPENAI_TEMPERATURE", 0.7),
        timeout_s=_env_float("OPENAI_TIMEOUT_S", 120.0),
    )


def load_execution_env() -> ExecutionEnvConfig:
    """
    Load execution node configuration from env/.env with strict validation.

    The signing key and aggregator endpoint are required; the node refuses to
    start without them.
    """
    private_key = _env_str("PRIVATE_KEY", "")
    if not private_key:
        _die("Missing required env var: PRIVATE_KEY.")

    aggregator_url = _env_str("OTHENTIC_CLIENT_RPC_ADDRESS", "")
    if not aggregator_url:
        _die("Missing required env var: OTHENTIC_CLIENT_RPC_ADDRESS.")
    aggregator_url = _require_http("OTHENTIC_CLIENT_RPC_ADDRESS", aggregator_url)

    return ExecutionEnvConfig(
        private_key=private_key,
        aggregator_url=aggregator_url,
        rpc_timeout_s=_env_float("RPC_TIMEOUT_S", 30.0),
        oracle=_load_oracle(),
        llm=_load_llm(),
        host=_env_str("EXECUTION_HOST", "0.0.0.0") or "0.0.0.0",
        port=_env_int("EXECUTION_PORT", 4003),
    )


def load_validation_env() -> ValidationEnvConfig:
    """Load validation node configuration from env/.env."""
    return ValidationEnvConfig(
        oracle=_load_oracle(),
        llm=_load_llm(),
        host=_env_str("VALIDATION_HOST", "0.0.0.0") or "0.0.0.0",
        port=_env_int("VALIDATION_PORT", 4002),
    )
