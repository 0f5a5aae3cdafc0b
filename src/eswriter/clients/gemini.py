"""Google Gemini (generative language API) completion client.

API Documentation: https://ai.google.dev/api/generate-content

Usage:
    from eswriter.clients.gemini import GeminiClient

    async with GeminiClient(api_key="your_key") as client:
        completion = await client.complete(Deadline.after(30), "Hello")
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from eswriter.clients.base import BaseCompletionClient
from eswriter.models import Completion


class _GeminiPart(BaseModel):
    text: str = ""


class _GeminiContent(BaseModel):
    parts: list[_GeminiPart] = Field(default_factory=list)


class _GeminiCandidate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: _GeminiContent = Field(default_factory=_GeminiContent)
    finish_reason: str | None = Field(default=None, alias="finishReason")


class GeminiResponse(BaseModel):
    """generateContent response; only the fields we read."""

    candidates: list[_GeminiCandidate] = Field(default_factory=list)


class GeminiClient(BaseCompletionClient):
    """Async client for the Gemini generateContent endpoint.

    Args:
        api_key: Google AI API key (sent as x-goog-api-key, never in the URL)
        model: Model ID (default: gemini-1.5-flash)
        timeout: Per-call timeout ceiling in seconds
        max_output_tokens: Generation limit
    """

    provider = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        timeout: float = 30.0,
        max_output_tokens: int = 512,
    ) -> None:
        super().__init__(
            base_url="https://generativelanguage.googleapis.com/v1",
            model=model,
            headers={"x-goog-api-key": api_key},
            timeout=timeout,
            max_output_tokens=max_output_tokens,
        )

    def _endpoint(self) -> str:
        return f"/models/{self.model}:generateContent"

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": self.max_output_tokens},
        }

    def _decode(self, data: Any) -> Completion:
        parsed = GeminiResponse.model_validate(data)
        if not parsed.candidates:
            return Completion(text="", provider=self.provider, model=self.model)
        candidate = parsed.candidates[0]
        return Completion(
            text="".join(part.text for part in candidate.content.parts),
            provider=self.provider,
            model=self.model,
            finish_reason=candidate.finish_reason,
        )
