"""Validation side: parse the proposed proof, pick a rule by its shape, vote. Never submits."""

from __future__ import annotations

import json
from typing import Literal

import bittensor as bt

from oracle_avs.protocol import AgentStrategyContext, ValidationVerdict, is_agent_proof
from oracle_avs.stages import StageTracker, TaskStage
from oracle_avs.validator.engine import BoundValidator, SimilarityValidator

ProofKind = Literal["oracle", "agent"]


def classify_proof(proof_of_task: str) -> ProofKind:
    """Agent proofs are JSON objects carrying the strategy inputs and response; anything else is a price."""
    try:
        data = json.loads(proof_of_task)
    except ValueError:
        return "oracle"
    return "agent" if is_agent_proof(data) else "oracle"


class VoteCoordinator:
    def __init__(self, *, bound: BoundValidator, similarity: SimilarityValidator) -> None:
        self.bound = bound
        self.similarity = similarity

    async def vote(self, proof_of_task: str) -> ValidationVerdict:
        """Judge a raw proofOfTask as submitted to the aggregator."""
        tracker = StageTracker("vote")
        try:
            tracker.advance(TaskStage.PARSING)
            kind = classify_proof(proof_of_task)
            bt.logging.info(f"proofOfTask ({kind}): {proof_of_task}")
            if kind == "agent":
                context, agent_response = AgentStrategyContext.from_proof_of_task(proof_of_task)
                verdict = await self._score_agent(tracker, context, agent_response)
            else:
                tracker.advance(TaskStage.COMPUTING)
                verdict = await self.bound.validate(proof_of_task)
                tracker.advance(TaskStage.SCORING)
            tracker.advance(TaskStage.DONE)
        except Exception as exc:
            tracker.fail(exc)
            raise
        tracker.succeed()
        return verdict

    async def vote_agent(
        self,
        context: AgentStrategyContext,
        agent_response: str,
        task_definition_id: int,
    ) -> ValidationVerdict:
        tracker = StageTracker(f"agent vote {task_definition_id}")
        bt.logging.info(f"Validating agent response for task: {task_definition_id}")
        try:
            tracker.advance(TaskStage.PARSING)
            verdict = await self._score_agent(tracker, context, agent_response)
            tracker.advance(TaskStage.DONE)
        except Exception as exc:
            tracker.fail(exc)
            raise
        tracker.succeed()
        return verdict

    async def _score_agent(
        self,
        tracker: StageTracker,
        context: AgentStrategyContext,
        agent_response: str,
    ) -> ValidationVerdict:
        tracker.advance(TaskStage.COMPUTING)
        verdict = await self.similarity.validate(context, agent_response)
        tracker.advance(TaskStage.SCORING)
        return verdict
