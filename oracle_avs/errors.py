"""Error taxonomy shared by the execution and validation nodes."""

from __future__ import annotations


class AvsError(Exception):
    """Base class for every failure surfaced by the AVS core."""


class ConfigurationError(AvsError):
    """Missing or malformed signing key, aggregator URL or API credentials."""


class UpstreamError(AvsError):
    """Price source, language model or aggregator unreachable or returned malformed data."""


class RpcError(AvsError):
    """The aggregator answered with a JSON-RPC error object."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"RPC Error {code}: {message}")
        self.code = code
        self.message = message


class ProtocolError(AvsError):
    """The aggregator answered with neither `result` nor `error`."""


class ValidationInputError(AvsError):
    """A proof could not be judged (unparseable value or unexpected shape)."""
