from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List

import httpx
import pytest

from oracle_avs.agents.base import ChatAgent, ChatResponse, Message, render_input_prompt
from oracle_avs.agents.farming import (
    FARMING_SYSTEM_PROMPT,
    AgentFactory,
    StableYieldFarmingAgent,
    farming_strategy_messages,
)
from oracle_avs.agents.openai_agent import OpenAIChatAgent
from oracle_avs.config import LlmConfig
from oracle_avs.errors import ConfigurationError, UpstreamError


class RecordingAgent(ChatAgent):
    def __init__(self):
        self.seen: List[Message] = []

    async def chat(self, messages):
        self.seen = list(messages)
        return ChatResponse(input_prompt=render_input_prompt(messages), response="ok")


def _completion(content: str) -> Dict[str, Any]:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def test_render_input_prompt():
    prompt = render_input_prompt([Message("system", "be nice"), Message("user", "hi")])
    assert prompt == "system:\nbe nice\n\nuser:\nhi"


def test_farming_prompt_contains_both_inputs_in_order():
    [msg] = farming_strategy_messages(prices="ETH: 2000", portfolio="10 ETH, 5000 USDC")
    assert msg.role == "user"
    assert msg.content.index("10 ETH, 5000 USDC") < msg.content.index("ETH: 2000")
    assert '"exchanges"' in msg.content


def test_farming_agent_prepends_system_prompt():
    inner = RecordingAgent()
    agent = StableYieldFarmingAgent(inner)

    asyncio.run(agent.get_farming_strategy("ETH: 2000", "10 ETH"))

    assert inner.seen[0] == Message("system", FARMING_SYSTEM_PROMPT)
    assert inner.seen[1].role == "user"
    assert len(inner.seen) == 2


def test_openai_agent_posts_chat_completion():
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_completion("delta neutral plan"))

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    agent = OpenAIChatAgent("sk-test", "gpt-4o", temperature=0.3, base_url="http://llm/v1/", client=http)
    messages = [Message("system", "s"), Message("assistant", "a"), Message("tool", "t")]

    out = asyncio.run(agent.chat(messages))

    assert out.response == "delta neutral plan"
    assert out.input_prompt == render_input_prompt(messages)
    [request] = seen
    assert str(request.url) == "http://llm/v1/chat/completions"
    assert request.headers["authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["model"] == "gpt-4o"
    assert body["temperature"] == 0.3
    # Unknown roles fall back to "user".
    assert [m["role"] for m in body["messages"]] == ["system", "assistant", "user"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"error": {"message": "bad key"}}),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, json={"choices": {"a": 1}}),
        httpx.Response(200, json={"choices": ["oops"]}),
        httpx.Response(200, json={"choices": [{"message": "plain string"}]}),
        httpx.Response(200, json={"choices": [{"message": {"content": ["parts"]}}]}),
    ],
)
def test_openai_agent_failures_are_upstream_errors(response):
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: response))
    agent = OpenAIChatAgent("sk-test", "gpt-4o", base_url="http://llm/v1", client=http)
    with pytest.raises(UpstreamError):
        asyncio.run(agent.chat([Message("user", "hi")]))


def _llm(api_key):
    return LlmConfig(api_key=api_key, base_url="http://llm/v1", temperature=0.7, timeout_s=5.0)


def test_agent_factory_requires_api_key():
    with pytest.raises(ConfigurationError):
        AgentFactory(_llm(None))("gpt-4o")


def test_agent_factory_builds_openai_backed_farming_agent():
    agent = AgentFactory(_llm("sk-test"))("gpt-4o-mini")
    assert isinstance(agent, StableYieldFarmingAgent)
    assert isinstance(agent.inner, OpenAIChatAgent)
    assert agent.inner.model == "gpt-4o-mini"
    assert agent.inner.temperature == 0.7
