"""
Voting rules for the two task kinds.

- Oracle tasks: the proposed price must sit within +/-5% of a freshly fetched
  reference price (both ends inclusive).
- Agent tasks: a reference strategy is regenerated from the same inputs and
  the two responses are compared by a character-length ratio.

The reference price is re-fetched at vote time and can drift from the price
the performer saw. That race is accepted, not special-cased.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Tuple

import bittensor as bt

from oracle_avs.agents.farming import AgentProvider
from oracle_avs.errors import ValidationInputError
from oracle_avs.oracle.price_source import PriceSource
from oracle_avs.protocol import AgentStrategyContext, ValidationVerdict

PRICE_TOLERANCE = Decimal("0.05")
SIMILARITY_THRESHOLD = 50.0


def parse_decimal(value: str, what: str) -> Decimal:
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationInputError(f"Invalid {what} value: {value!r}") from exc
    if not parsed.is_finite():
        raise ValidationInputError(f"Invalid {what} value: {value!r}")
    return parsed


def price_bounds(reference: Decimal, tolerance: Decimal = PRICE_TOLERANCE) -> Tuple[Decimal, Decimal]:
    return reference * (1 - tolerance), reference * (1 + tolerance)


def similarity_score(submitted: str, reference: str) -> float:
    """
    Length ratio of two trimmed responses, in percent.

    A crude proxy, not an edit distance; the 50% threshold was tuned against
    exactly this formula. Returns 0.0 when either side is empty.
    """
    a = submitted.strip()
    b = reference.strip()
    if not a or not b:
        return 0.0
    return (min(len(a), len(b)) / max(len(a), len(b))) * 100.0


class BoundValidator:
    def __init__(
        self,
        price_source: PriceSource,
        symbol: str,
        *,
        tolerance: Decimal = PRICE_TOLERANCE,
    ) -> None:
        self.price_source = price_source
        self.symbol = symbol
        self.tolerance = tolerance

    def check(self, task_result: str, reference_price: str) -> ValidationVerdict:
        """Approve iff lower <= task_result <= upper. Unparseable input raises ValidationInputError."""
        proposed = parse_decimal(task_result, "proofOfTask")
        reference = parse_decimal(reference_price, "oracle price")
        lower, upper = price_bounds(reference, self.tolerance)
        approved = lower <= proposed <= upper
        return ValidationVerdict(
            approved=approved,
            reason=f"{proposed} {'within' if approved else 'outside'} [{lower}, {upper}] of reference {reference}",
        )

    async def validate(self, task_result: str) -> ValidationVerdict:
        # Parse first so a malformed proof never costs an upstream call.
        parse_decimal(task_result, "proofOfTask")
        quote = await self.price_source.get_price(self.symbol)
        verdict = self.check(task_result, quote.price)
        bt.logging.info(f"Vote: {'Approve' if verdict.approved else 'Not Approved'} ({verdict.reason})")
        return verdict


class SimilarityValidator:
    def __init__(self, agents: AgentProvider, *, threshold: float = SIMILARITY_THRESHOLD) -> None:
        self.agents = agents
        self.threshold = threshold

    def score(self, agent_response: str, reference_response: str) -> ValidationVerdict:
        similarity = similarity_score(agent_response, reference_response)
        # An empty submission never passes, whatever the score.
        approved = bool(agent_response.strip()) and similarity >= self.threshold
        return ValidationVerdict(
            approved=approved,
            score=similarity,
            threshold=self.threshold,
            reason=f"similarity {similarity:.2f}% vs threshold {self.threshold:.2f}%",
        )

    async def validate(self, context: AgentStrategyContext, agent_response: str) -> ValidationVerdict:
        agent = self.agents(context.model_name)
        reference = await agent.get_farming_strategy(context.prices, context.portfolio)
        verdict = self.score(agent_response, reference.response)
        bt.logging.info(f"Agent validation result: {'Approved' if verdict.approved else 'Not Approved'}")
        bt.logging.info(f"Similarity score: {verdict.score:.2f}%, threshold: {self.threshold:.2f}%")
        return verdict
