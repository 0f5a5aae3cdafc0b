"""Completion client layer for ES Writer.

Async HTTP adapters for text-completion providers, all behind the same
``complete(deadline, prompt)`` call:
- Gemini: generateContent API
- Ollama: local managed model runtime
- OpenAI: chat completions
- Anthropic: messages
"""

from eswriter.clients.base import (
    BaseCompletionClient,
    CompletionError,
    CompletionService,
    CompletionStatusError,
    CompletionTransportError,
    DeadlineExceededError,
    EmptyCompletionError,
    MalformedCompletionError,
)
from eswriter.clients.gemini import GeminiClient
from eswriter.clients.ollama import OllamaClient
from eswriter.clients.openai import OpenAIClient
from eswriter.clients.anthropic import AnthropicClient
from eswriter.clients.factory import create_completion_client

__all__ = [
    "BaseCompletionClient",
    "CompletionError",
    "CompletionService",
    "CompletionStatusError",
    "CompletionTransportError",
    "DeadlineExceededError",
    "EmptyCompletionError",
    "MalformedCompletionError",
    "GeminiClient",
    "OllamaClient",
    "OpenAIClient",
    "AnthropicClient",
    "create_completion_client",
]
