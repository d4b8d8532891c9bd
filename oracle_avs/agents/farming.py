"""Yield-farming strategy agent used by both node roles.

The execution node asks it for a strategy; the validation node asks it again
with the same inputs and compares. Both sides must therefore build the prompt
from this one module.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

import httpx

from oracle_avs.agents.base import ChatAgent, ChatResponse, Message
from oracle_avs.agents.openai_agent import OpenAIChatAgent
from oracle_avs.config import LlmConfig
from oracle_avs.errors import ConfigurationError

FARMING_SYSTEM_PROMPT = (
    "You are a specialized financial advisor focused on stable yield farming strategies. "
    "Provide conservative, well-researched advice on DeFi protocols, yield optimization, "
    "risk assessment, and portfolio diversification. Always prioritize security and "
    "sustainability over high APYs. Include relevant warnings about smart contract risks, "
    "impermanent loss, and market volatility where appropriate."
)

FARMING_STRATEGY_PROMPT = """I have the following portfolio:

{portfolio}

Here is the current market price of the tokens in the portfolio:

{prices}

I want to optimize my yield farming strategy.

Please recommend a strategy that is delta neutral, meaning you should take both opposite positions between CEX and DEX. The Eisen portfolio is for DEX, and Binance is for CEX.
In Binance, you can only trade on BTC and ETH.
In Eisen, you can trade on all the tokens in the portfolio.
Here is an example of the output format. It must be JSON, do not print anything else:"""

FARMING_STRATEGY_JSON_EXAMPLE = """
{
    "exchanges": [
        {
            "target": "Binance",
            "positions": [
                {"position": "short", "token": "<token_symbol1>", "amount": "<amount>", "price": "<price>", "side": "sell"},
                {"position": "short", "token": "<token_symbol2>", "amount": "<amount>", "price": "<price>", "side": "sell"}
            ]
        },
        {
            "target": "Eisen",
            "positions": [
                {"position": "long", "token": "<token_symbol1>", "amount": "<amount>", "price": "<price>", "side": "buy"},
                {"position": "long", "token": "<token_symbol2>", "amount": "<amount>", "price": "<price>", "side": "buy"}
            ]
        }
    ]
}
"""


def farming_strategy_messages(prices: str, portfolio: str) -> List[Message]:
    prompt = FARMING_STRATEGY_PROMPT.format(portfolio=portfolio, prices=prices)
    return [Message(role="user", content=f"{prompt}\n{FARMING_STRATEGY_JSON_EXAMPLE}")]


class StableYieldFarmingAgent:
    """Wraps any chat backend with the yield-farming advisor persona."""

    def __init__(self, inner: ChatAgent, *, system_prompt: str = FARMING_SYSTEM_PROMPT) -> None:
        self.inner = inner
        self.system_prompt = system_prompt

    async def chat(self, messages: Sequence[Message]) -> ChatResponse:
        all_messages = [Message(role="system", content=self.system_prompt), *messages]
        return await self.inner.chat(all_messages)

    async def get_farming_strategy(self, prices: str, portfolio: str) -> ChatResponse:
        return await self.chat(farming_strategy_messages(prices, portfolio))


class AgentFactory:
    """
    Builds a farming agent for the model a request names.

    The API key is checked here, per request, so nodes that never serve agent
    tasks can start without one.
    """

    def __init__(self, llm: LlmConfig, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self.llm = llm
        self.client = client

    def __call__(self, model_name: str) -> StableYieldFarmingAgent:
        if not self.llm.api_key:
            raise ConfigurationError("OpenAI API key not configured")
        backend = OpenAIChatAgent(
            self.llm.api_key,
            model_name,
            temperature=self.llm.temperature,
            base_url=self.llm.base_url,
            timeout_s=self.llm.timeout_s,
            client=self.client,
        )
        return StableYieldFarmingAgent(backend)


AgentProvider = Callable[[str], StableYieldFarmingAgent]
