"""Ollama completion client for a locally managed model runtime.

API Documentation: https://github.com/ollama/ollama/blob/main/docs/api.md

Usage:
    async with OllamaClient(base_url="http://localhost:11434") as client:
        completion = await client.complete(Deadline.after(30), "Hello")
"""

from typing import Any

from pydantic import BaseModel

from eswriter.clients.base import BaseCompletionClient
from eswriter.models import Completion


class _OllamaMessage(BaseModel):
    role: str = "assistant"
    content: str = ""


class OllamaResponse(BaseModel):
    """Non-streaming /api/chat response."""

    message: _OllamaMessage | None = None
    done_reason: str | None = None


class OllamaClient(BaseCompletionClient):
    """Async client for Ollama's chat endpoint (no API key)."""

    provider = "ollama"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        timeout: float = 30.0,
        max_output_tokens: int = 512,
    ) -> None:
        super().__init__(
            base_url=base_url,
            model=model,
            timeout=timeout,
            max_output_tokens=max_output_tokens,
        )

    def _endpoint(self) -> str:
        return "/api/chat"

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "stream": False,
            "messages": [{"role": "user", "content": prompt}],
            "options": {"num_predict": self.max_output_tokens},
        }

    def _decode(self, data: Any) -> Completion:
        parsed = OllamaResponse.model_validate(data)
        return Completion(
            text=parsed.message.content if parsed.message else "",
            provider=self.provider,
            model=self.model,
            finish_reason=parsed.done_reason,
        )
