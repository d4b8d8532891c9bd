from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Message:
    role: str
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ChatResponse:
    # Every message of the conversation rendered as "role:\ncontent", blank-line separated.
    input_prompt: str
    response: str


def render_input_prompt(messages: Sequence[Message]) -> str:
    return "\n\n".join(f"{m.role}:\n{m.content}" for m in messages)


class ChatAgent(ABC):
    """A chat-capable language model backend."""

    @abstractmethod
    async def chat(self, messages: Sequence[Message]) -> ChatResponse:
        """Send the ordered conversation and return the model's reply."""
        raise NotImplementedError
