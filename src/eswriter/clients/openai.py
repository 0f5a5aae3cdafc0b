"""OpenAI Chat Completions client."""

from typing import Any

from pydantic import BaseModel, Field

from eswriter.clients.base import BaseCompletionClient
from eswriter.models import Completion


class _OpenAIMessage(BaseModel):
    content: str | None = None


class _OpenAIChoice(BaseModel):
    message: _OpenAIMessage = Field(default_factory=_OpenAIMessage)
    finish_reason: str | None = None


class OpenAIResponse(BaseModel):
    choices: list[_OpenAIChoice] = Field(default_factory=list)


class OpenAIClient(BaseCompletionClient):
    """Async client for OpenAI's /chat/completions endpoint."""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        max_output_tokens: int = 512,
    ) -> None:
        super().__init__(
            base_url="https://api.openai.com/v1",
            model=model,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            max_output_tokens=max_output_tokens,
        )

    def _endpoint(self) -> str:
        return "/chat/completions"

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_output_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    def _decode(self, data: Any) -> Completion:
        parsed = OpenAIResponse.model_validate(data)
        if not parsed.choices:
            return Completion(text="", provider=self.provider, model=self.model)
        choice = parsed.choices[0]
        return Completion(
            text=choice.message.content or "",
            provider=self.provider,
            model=self.model,
            finish_reason=choice.finish_reason,
        )
