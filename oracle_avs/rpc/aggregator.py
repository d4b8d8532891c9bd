"""JSON-RPC client for the AVS aggregator.

Every call is a single attempt: the aggregator's behaviour under duplicate
`sendTask` submissions is unknown, so nothing here retries.
"""

from __future__ import annotations

from typing import Any, List, Optional

import bittensor as bt
import httpx

from oracle_avs.errors import ProtocolError, RpcError, UpstreamError
from oracle_avs.protocol import TaskProof

SEND_TASK_METHOD = "sendTask"


def interpret_rpc_response(payload: Any) -> Any:
    """
    Map a decoded JSON-RPC 2.0 response onto a result or an exception.

    - `{"result": X}` -> X
    - `{"error": {"code": c, "message": m}}` -> RpcError(c, m)
    - anything else -> ProtocolError("Unknown RPC response")
    """
    if isinstance(payload, dict):
        if payload.get("result") is not None:
            return payload["result"]
        error = payload.get("error")
        if isinstance(error, dict):
            try:
                code = int(error.get("code"))
            except (TypeError, ValueError):
                raise ProtocolError(f"Malformed RPC error object: {error!r}") from None
            raise RpcError(code, str(error.get("message", "")))
    raise ProtocolError("Unknown RPC response")


class AggregatorClient:
    def __init__(
        self,
        rpc_url: str,
        *,
        timeout_s: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.rpc_url = rpc_url
        if client is not None:
            self.client = client
            self._should_close = False
        else:
            self.client = httpx.AsyncClient(timeout=timeout_s)
            self._should_close = True

    async def aclose(self) -> None:
        if self._should_close:
            await self.client.aclose()

    async def send_task(self, proof: TaskProof) -> Any:
        """Submit a signed proof via `sendTask` and return the aggregator's result."""
        return await self.call(SEND_TASK_METHOD, proof.to_rpc_params())

    async def call(self, method: str, params: List[Any]) -> Any:
        body = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": 1,
        }
        bt.logging.info(f"Sending {method} with params: {params}")
        try:
            resp = await self.client.post(self.rpc_url, json=body)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Aggregator unreachable at {self.rpc_url}: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProtocolError(f"Aggregator returned non-JSON body (status {resp.status_code})") from exc

        result = interpret_rpc_response(payload)
        bt.logging.success(f"{method} accepted by aggregator: {result!r}")
        return result
