"""Anthropic Messages API client."""

from typing import Any

from pydantic import BaseModel, Field

from eswriter.clients.base import BaseCompletionClient
from eswriter.models import Completion


class _AnthropicBlock(BaseModel):
    type: str
    text: str = ""


class AnthropicResponse(BaseModel):
    content: list[_AnthropicBlock] = Field(default_factory=list)
    stop_reason: str | None = None


class AnthropicClient(BaseCompletionClient):
    """Async client for Anthropic's /messages endpoint."""

    provider = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        timeout: float = 30.0,
        max_output_tokens: int = 512,
    ) -> None:
        super().__init__(
            base_url="https://api.anthropic.com/v1",
            model=model,
            headers={
                "x-api-key": api_key,
                "anthropic-version": "2023-06-01",
            },
            timeout=timeout,
            max_output_tokens=max_output_tokens,
        )

    def _endpoint(self) -> str:
        return "/messages"

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_output_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    def _decode(self, data: Any) -> Completion:
        parsed = AnthropicResponse.model_validate(data)
        return Completion(
            text="".join(block.text for block in parsed.content if block.type == "text"),
            provider=self.provider,
            model=self.model,
            finish_reason=parsed.stop_reason,
        )
