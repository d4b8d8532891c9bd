from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import bittensor as bt
import httpx

from oracle_avs.agents.base import ChatAgent, ChatResponse, Message, render_input_prompt
from oracle_avs.config import DEFAULT_OPENAI_BASE_URL
from oracle_avs.errors import UpstreamError

_KNOWN_ROLES = ("system", "assistant")


class OpenAIChatAgent(ChatAgent):
    """Chat agent for any OpenAI-compatible `/chat/completions` endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        temperature: float = 0.7,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        timeout_s: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._client = client

    def _payload(self, messages: Sequence[Message]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": m.role if m.role in _KNOWN_ROLES else "user", "content": m.content}
                for m in messages
            ],
            "temperature": self.temperature,
            "stream": False,
        }

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        url = f"{self.base_url}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self._client is not None:
            return await self._client.post(url, json=payload, headers=headers)
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            return await client.post(url, json=payload, headers=headers)

    async def chat(self, messages: Sequence[Message]) -> ChatResponse:
        input_prompt = render_input_prompt(messages)
        bt.logging.debug(f"Sending {len(messages)} messages to {self.model}")
        for i, msg in enumerate(messages):
            bt.logging.trace(f"  Message {i}: role={msg.role}, content={msg.content}")

        try:
            resp = await self._post(self._payload(messages))
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Language model unreachable at {self.base_url}: {exc}") from exc
        if resp.status_code != 200:
            raise UpstreamError(f"Language model returned {resp.status_code}: {resp.text}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError("Language model returned a non-JSON body") from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise UpstreamError("No completion choices returned")
        if not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise UpstreamError("Malformed completion payload")
        message = choices[0].get("message") or {}
        if not isinstance(message, dict):
            raise UpstreamError("Malformed completion payload")
        content = message.get("content") or ""
        if not isinstance(content, str):
            raise UpstreamError("Malformed completion payload")
        return ChatResponse(input_prompt=input_prompt, response=content)
