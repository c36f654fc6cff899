"""
Completion provider seam.

The CV extractor only needs "list of {role, content} messages in, text out".
GeminiCompletionProvider is the production implementation; tests pass any
object with a matching complete() method.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from mailmind.llm.retry import call_llm


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str


@runtime_checkable
class CompletionProvider(Protocol):
    def complete(self, messages: Sequence[ChatMessage]) -> str: ...


class GeminiCompletionProvider:
    """
    Gemini-backed provider.

    System messages are joined into the model's system instruction; user and
    assistant messages become "user" / "model" turns.
    """

    def __init__(self, counter_prefix: str = "llm", json_output: bool = True):
        self.counter_prefix = counter_prefix
        self.json_output = json_output

    @staticmethod
    def to_gemini(messages: Sequence[ChatMessage]) -> tuple[str | None, list[dict]]:
        system = "\n\n".join(m.content for m in messages if m.role == "system") or None
        contents = [
            {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
            for m in messages
            if m.role != "system"
        ]
        return system, contents

    def complete(self, messages: Sequence[ChatMessage]) -> str:
        system, contents = self.to_gemini(messages)
        if not contents:
            raise ValueError("at least one user message is required")
        return call_llm(
            contents,
            counter_prefix=self.counter_prefix,
            system_instruction=system,
            json_output=self.json_output,
        )
