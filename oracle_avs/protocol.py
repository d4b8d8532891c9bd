"""Wire models shared by the execution and validation nodes.

This module is the canonical home for the AVS data model:

  - `TaskProof`: a signed attestation, exactly what is sent to the aggregator.
  - `PriceQuote`: what the price source hands back.
  - `AgentStrategyContext`: the caller-supplied basis of an agent strategy.
  - `ValidationVerdict`: the outcome of a vote.

The HTTP request bodies keep the exact JSON field names the aggregator and the
other operators use (`taskDefinitionId`, `proofOfTask`, ...).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from oracle_avs.errors import ValidationInputError

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

AGENT_PROOF_FIELDS = ("prices", "portfolio", "model_name", "agent_response")


def canon_json(obj: Dict[str, Any]) -> str:
    # Stable encoding: sorted keys, no whitespace, raw UTF-8.
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class TaskProof(BaseModel):
    """A task result bound to its performer by an ECDSA signature."""

    model_config = ConfigDict(frozen=True)

    task_definition_id: int = Field(ge=INT32_MIN, le=INT32_MAX)
    proof_of_task: str
    result: bytes
    # Checksummed 0x-prefixed 20-byte address.
    performer_address: str
    # 65 bytes, r || s || v.
    signature: bytes

    def to_rpc_params(self) -> List[Any]:
        """Positional params of the `sendTask` JSON-RPC call (order is fixed)."""
        return [
            self.proof_of_task,
            "0x" + self.result.hex(),
            self.task_definition_id,
            self.performer_address,
            "0x" + self.signature.hex(),
        ]


class PriceQuote(BaseModel):
    symbol: str
    # Decimal string as returned by the source, never converted to float here.
    price: str


class AgentStrategyContext(BaseModel):
    prices: str
    portfolio: str
    model_name: str

    def to_proof_of_task(self, agent_response: str) -> str:
        return canon_json(
            {
                "prices": self.prices,
                "portfolio": self.portfolio,
                "model_name": self.model_name,
                "agent_response": agent_response,
            }
        )

    @classmethod
    def from_proof_of_task(cls, proof_of_task: str) -> Tuple["AgentStrategyContext", str]:
        """Split an agent proof back into its context and the submitted response."""
        try:
            data = json.loads(proof_of_task)
        except ValueError as exc:
            raise ValidationInputError("proofOfTask is not a JSON object") from exc
        if not is_agent_proof(data):
            raise ValidationInputError(
                f"agent proofOfTask must carry string fields {', '.join(AGENT_PROOF_FIELDS)}"
            )
        ctx = cls(prices=data["prices"], portfolio=data["portfolio"], model_name=data["model_name"])
        return ctx, data["agent_response"]


def is_agent_proof(data: Any) -> bool:
    return isinstance(data, dict) and all(isinstance(data.get(k), str) for k in AGENT_PROOF_FIELDS)


class ValidationVerdict(BaseModel):
    approved: bool
    score: Optional[float] = None
    threshold: Optional[float] = None
    reason: str = ""


# ---------------------------------------------------------------------------
# HTTP request bodies
# ---------------------------------------------------------------------------


class ExecuteTaskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Omitted ids default to 0.
    task_definition_id: int = Field(default=0, alias="taskDefinitionId", ge=INT32_MIN, le=INT32_MAX)


class ExecuteAgentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    task_definition_id: int = Field(default=0, alias="taskDefinitionId", ge=INT32_MIN, le=INT32_MAX)
    prices: str
    portfolio: str
    model_name: str

    def context(self) -> AgentStrategyContext:
        return AgentStrategyContext(prices=self.prices, portfolio=self.portfolio, model_name=self.model_name)


class ValidateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    proof_of_task: str = Field(alias="proofOfTask")


class ValidateAgentRequest(BaseModel):
    prices: str
    portfolio: str
    model_name: str
    task_definition_id: int = Field(ge=INT32_MIN, le=INT32_MAX)
    agent_response: str

    def context(self) -> AgentStrategyContext:
        return AgentStrategyContext(prices=self.prices, portfolio=self.portfolio, model_name=self.model_name)
