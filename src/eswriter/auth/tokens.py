"""Token resolvers — bearer credential → subject ID.

Issuing and validating credentials belongs to the identity provider. These
resolvers only ask it who the bearer is.

- UserInfoTokenResolver: calls an OAuth2/OIDC userinfo endpoint and reads
  the ``sub`` claim (e.g. Cognito's /oauth2/userInfo)
- StaticTokenResolver: fixed token table for development and tests

Usage:
    async with UserInfoTokenResolver("https://auth.example.com/oauth2/userInfo") as resolver:
        subject = await resolver.get_subject(request)
"""

import logging
from typing import Protocol

import httpx
from fastapi import Request

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Caller identity could not be resolved."""


class TokenResolver(Protocol):
    async def get_subject(self, request: Request) -> str:
        ...


def bearer_token(request: Request) -> str:
    """Return the bearer token from the Authorization header.

    Raises:
        AuthError: Header missing or not a bearer credential
    """
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Missing bearer token")
    return token.strip()


class StaticTokenResolver:
    """Resolves tokens from a fixed token → subject table."""

    def __init__(self, tokens: dict[str, str]) -> None:
        self.tokens = dict(tokens)

    async def get_subject(self, request: Request) -> str:
        token = bearer_token(request)
        subject = self.tokens.get(token)
        if subject is None:
            raise AuthError("Unknown token")
        return subject


class UserInfoTokenResolver:
    """Resolves the subject through an OAuth2 userinfo endpoint.

    Args:
        userinfo_url: Absolute URL of the userinfo endpoint
        timeout: HTTP timeout in seconds
    """

    def __init__(self, userinfo_url: str, timeout: float = 10.0) -> None:
        self.userinfo_url = userinfo_url
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "UserInfoTokenResolver":
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_subject(self, request: Request) -> str:
        """Ask the identity provider for the token's subject.

        Raises:
            AuthError: No token, provider rejected it, or no ``sub`` claim
            RuntimeError: Resolver used outside ``async with``
        """
        if not self._client:
            raise RuntimeError("Resolver not initialized. Use async with context manager.")

        token = bearer_token(request)
        try:
            response = await self._client.get(
                self.userinfo_url,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            logger.warning("userinfo request failed: %s", e)
            raise AuthError(f"Identity provider unreachable: {e}") from e

        if response.status_code != 200:
            logger.info("userinfo rejected token: %d", response.status_code)
            raise AuthError(f"Token rejected: {response.status_code}")

        try:
            subject = response.json().get("sub")
        except (ValueError, AttributeError) as e:
            raise AuthError("Invalid userinfo response") from e

        if not isinstance(subject, str) or not subject:
            raise AuthError("userinfo response has no 'sub' claim")
        return subject
