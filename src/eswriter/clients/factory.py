"""Select a completion client from settings."""

from eswriter.clients.anthropic import AnthropicClient
from eswriter.clients.base import BaseCompletionClient
from eswriter.clients.gemini import GeminiClient
from eswriter.clients.ollama import OllamaClient
from eswriter.clients.openai import OpenAIClient
from eswriter.config import Settings


def create_completion_client(settings: Settings) -> BaseCompletionClient:
    """Build the adapter for ``settings.completion_provider``.

    The returned client still has to be entered with ``async with``.

    Raises:
        ValueError: Provider is unknown or its API key is missing
    """
    provider = settings.completion_provider
    options = {
        "timeout": settings.completion_timeout,
        "max_output_tokens": settings.max_output_tokens,
    }
    if settings.completion_model:
        options["model"] = settings.completion_model

    if provider == "gemini":
        if not settings.google_api_key:
            raise ValueError("google_api_key is required for the gemini provider")
        return GeminiClient(api_key=settings.google_api_key, **options)
    if provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("openai_api_key is required for the openai provider")
        return OpenAIClient(api_key=settings.openai_api_key, **options)
    if provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ValueError("anthropic_api_key is required for the anthropic provider")
        return AnthropicClient(api_key=settings.anthropic_api_key, **options)
    if provider == "ollama":
        return OllamaClient(base_url=settings.ollama_base_url, **options)
    raise ValueError(f"Unknown completion provider: {provider}")
