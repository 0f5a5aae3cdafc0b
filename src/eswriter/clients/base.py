"""Base async completion client with deadline handling and error classification.

Every provider adapter inherits from this base so that transport, deadline
handling and failure classification behave the same whatever the provider:
- One shared httpx.AsyncClient with connection pooling
- Exactly one outbound call per ``complete()``; no retries
- A deadline that has already passed fails without touching the network
- Every failure surfaces as a CompletionError subclass

Usage:
    class MyProviderClient(BaseCompletionClient):
        provider = "myprovider"

        def __init__(self, api_key: str, model: str = "small"):
            super().__init__(
                base_url="https://api.example.com",
                model=model,
                headers={"Authorization": f"Bearer {api_key}"},
            )

        def _endpoint(self) -> str:
            return "/generate"

        def _payload(self, prompt: str) -> dict:
            return {"model": self.model, "prompt": prompt}

        def _decode(self, data) -> Completion:
            parsed = MyResponse.model_validate(data)
            return Completion(text=parsed.output, provider=self.provider, model=self.model)
"""

import asyncio
import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from eswriter.models import Completion, Deadline

logger = logging.getLogger(__name__)


class CompletionError(Exception):
    """Base exception for a completion call that produced no text."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class CompletionTransportError(CompletionError):
    """Network or transport failure before a response arrived."""


class CompletionStatusError(CompletionError):
    """Provider answered with a non-success HTTP status."""


class EmptyCompletionError(CompletionError):
    """Well-formed response that carries no completion text."""


class MalformedCompletionError(CompletionError):
    """Response body is not JSON or does not match the provider's shape."""


class DeadlineExceededError(CompletionError):
    """Request deadline expired before or during the call."""


class CompletionService(Protocol):
    """Anything that turns a prompt into a Completion before a deadline."""

    async def complete(self, deadline: Deadline, prompt: str) -> Completion:
        ...


class BaseCompletionClient:
    """Base async completion client.

    Subclasses provide the request shape (``_endpoint``, ``_params``,
    ``_payload``) and the response decoder (``_decode``).

    Args:
        base_url: Base URL for all provider requests
        model: Model ID sent to the provider
        headers: Default headers for all requests
        timeout: Upper bound for a single call in seconds (default: 30)
        max_output_tokens: Generation limit passed to the provider
        max_connections: Connection pool size
    """

    provider = "base"

    def __init__(
        self,
        base_url: str,
        model: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        max_output_tokens: int = 512,
        max_connections: int = 16,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.headers = headers or {}
        self.timeout = timeout
        self.max_output_tokens = max_output_tokens
        self.max_connections = max_connections
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "BaseCompletionClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            limits=httpx.Limits(
                max_keepalive_connections=self.max_connections,
                max_connections=self.max_connections,
            ),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _endpoint(self) -> str:
        raise NotImplementedError

    def _params(self) -> dict[str, Any] | None:
        return None

    def _payload(self, prompt: str) -> dict[str, Any]:
        raise NotImplementedError

    def _decode(self, data: Any) -> Completion:
        raise NotImplementedError

    async def complete(self, deadline: Deadline, prompt: str) -> Completion:
        """Send one prompt and decode the provider's answer.

        Args:
            deadline: Shared request deadline
            prompt: Fully composed prompt

        Returns:
            Completion with non-empty text

        Raises:
            DeadlineExceededError: Deadline passed before or during the call
            CompletionTransportError: Network/transport failure
            CompletionStatusError: Non-2xx response
            MalformedCompletionError: Body is not JSON or has the wrong shape
            EmptyCompletionError: Body decoded but holds no text
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with context manager.")

        if deadline.expired:
            raise DeadlineExceededError("Deadline expired before dispatch")

        endpoint = self._endpoint()
        call_timeout = min(self.timeout, deadline.remaining())
        logger.debug("POST %s%s (model=%s, timeout=%.1fs)", self.base_url, endpoint, self.model, call_timeout)

        try:
            async with asyncio.timeout_at(deadline.expires_at):
                response = await self._client.post(
                    endpoint,
                    params=self._params(),
                    json=self._payload(prompt),
                    timeout=call_timeout,
                )
        except TimeoutError as e:
            raise DeadlineExceededError(f"Deadline expired during call: {e}") from e
        except httpx.TimeoutException as e:
            if deadline.expired:
                raise DeadlineExceededError(f"Deadline expired during call: {e}") from e
            raise CompletionTransportError(f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise CompletionTransportError(f"Transport error: {e}") from e

        logger.debug("Response: %d for %s", response.status_code, endpoint)

        if not response.is_success:
            raise CompletionStatusError(
                message=f"{self.provider} request failed: {response.status_code}",
                status_code=response.status_code,
                response_body=response.text[:500],
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedCompletionError(
                message=f"Invalid JSON response: {e}",
                status_code=response.status_code,
                response_body=response.text[:500],
            ) from e

        try:
            completion = self._decode(data)
        except ValidationError as e:
            raise MalformedCompletionError(
                message=f"Unexpected {self.provider} response shape: {e.error_count()} errors",
                status_code=response.status_code,
                response_body=response.text[:500],
            ) from e

        if not completion.text.strip():
            raise EmptyCompletionError(
                message=f"{self.provider} returned no completion text",
                status_code=response.status_code,
                response_body=response.text[:500],
            )

        return completion
