from oracle_avs.agents.base import ChatAgent, ChatResponse, Message
from oracle_avs.agents.farming import AgentFactory, StableYieldFarmingAgent
from oracle_avs.agents.openai_agent import OpenAIChatAgent

__all__ = [
    "AgentFactory",
    "ChatAgent",
    "ChatResponse",
    "Message",
    "OpenAIChatAgent",
    "StableYieldFarmingAgent",
]
