"""Execution side: fetch -> build proof -> sign -> submit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import bittensor as bt

from oracle_avs.agents.base import ChatResponse
from oracle_avs.agents.farming import AgentProvider
from oracle_avs.crypto.proof import build_task_proof
from oracle_avs.crypto.signer import Signer
from oracle_avs.oracle.price_source import PriceSource
from oracle_avs.protocol import AgentStrategyContext, TaskProof
from oracle_avs.stages import StageTracker, TaskStage

# Fixed `result` payload of oracle tasks; the price itself travels as proofOfTask.
ORACLE_RESULT_MARKER = b"hello"


class TaskSubmitter(Protocol):
    async def send_task(self, proof: TaskProof) -> Any: ...


@dataclass(frozen=True)
class AgentExecution:
    proof: TaskProof
    response: ChatResponse


class TaskCoordinator:
    def __init__(
        self,
        *,
        signer: Signer,
        submitter: TaskSubmitter,
        price_source: PriceSource,
        agents: AgentProvider,
        symbol: str,
        result_marker: bytes = ORACLE_RESULT_MARKER,
    ) -> None:
        self.signer = signer
        self.submitter = submitter
        self.price_source = price_source
        self.agents = agents
        self.symbol = symbol
        self.result_marker = result_marker

    async def execute_oracle(self, task_definition_id: int = 0) -> TaskProof:
        """Quote the configured symbol and submit the price as a signed proof."""
        tracker = StageTracker(f"oracle task {task_definition_id}")
        try:
            tracker.advance(TaskStage.FETCHING)
            quote = await self.price_source.get_price(self.symbol)
            bt.logging.info(f"{quote.symbol} price: {quote.price}")
            proof = await self._sign_and_submit(
                tracker,
                proof_of_task=quote.price,
                result=self.result_marker,
                task_definition_id=task_definition_id,
            )
        except Exception as exc:
            tracker.fail(exc)
            raise
        tracker.succeed()
        return proof

    async def execute_agent(
        self,
        context: AgentStrategyContext,
        task_definition_id: int = 0,
    ) -> AgentExecution:
        """Generate a strategy for `context` and submit it, bound to its inputs, as a signed proof."""
        tracker = StageTracker(f"agent task {task_definition_id}")
        try:
            tracker.advance(TaskStage.FETCHING)
            agent = self.agents(context.model_name)
            chat = await agent.get_farming_strategy(context.prices, context.portfolio)
            bt.logging.debug(f"Input prompt: {chat.input_prompt}")
            bt.logging.info(f"Agent response ({context.model_name}): {chat.response}")
            proof = await self._sign_and_submit(
                tracker,
                proof_of_task=context.to_proof_of_task(chat.response),
                result=chat.response.encode("utf-8"),
                task_definition_id=task_definition_id,
            )
        except Exception as exc:
            tracker.fail(exc)
            raise
        tracker.succeed()
        return AgentExecution(proof=proof, response=chat)

    async def _sign_and_submit(
        self,
        tracker: StageTracker,
        *,
        proof_of_task: str,
        result: bytes,
        task_definition_id: int,
    ) -> TaskProof:
        tracker.advance(TaskStage.COMPUTING)
        proof = build_task_proof(
            self.signer,
            proof_of_task=proof_of_task,
            result=result,
            task_definition_id=task_definition_id,
        )
        tracker.advance(TaskStage.SIGNING)
        bt.logging.debug(f"Signed proof for performer {proof.performer_address}: 0x{proof.signature.hex()}")

        tracker.advance(TaskStage.SUBMITTING)
        await self.submitter.send_task(proof)
        return proof
