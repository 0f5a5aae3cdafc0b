"""Tests for bearer token resolution."""

import httpx
import pytest
from starlette.requests import Request

from eswriter.auth import (
    AuthError,
    StaticTokenResolver,
    UserInfoTokenResolver,
    bearer_token,
)

USERINFO_URL = "https://auth.example.com/oauth2/userInfo"


def make_request(authorization: str | None = None) -> Request:
    """Build a bare ASGI request carrying an Authorization header."""
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "POST", "path": "/getAnswers", "headers": headers})


class TestBearerToken:
    """Tests for Authorization header parsing."""

    def test_bearer(self):
        assert bearer_token(make_request("Bearer abc.def")) == "abc.def"

    def test_scheme_case_insensitive(self):
        assert bearer_token(make_request("bearer abc")) == "abc"

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic dXNlcjpwYXNz", "abc"])
    def test_rejects(self, header):
        with pytest.raises(AuthError, match="Missing bearer token"):
            bearer_token(make_request(header))


class TestStaticTokenResolver:
    """Tests for the fixed token table."""

    @pytest.mark.asyncio
    async def test_known_token(self):
        resolver = StaticTokenResolver({"tok": "user-1"})

        assert await resolver.get_subject(make_request("Bearer tok")) == "user-1"

    @pytest.mark.asyncio
    async def test_unknown_token(self):
        resolver = StaticTokenResolver({"tok": "user-1"})

        with pytest.raises(AuthError, match="Unknown token"):
            await resolver.get_subject(make_request("Bearer other"))


class TestUserInfoTokenResolver:
    """Tests for resolution through the userinfo endpoint."""

    @pytest.mark.asyncio
    async def test_returns_sub(self, respx_mock):
        """The sub claim is the subject; the token is forwarded."""
        route = respx_mock.get(USERINFO_URL).mock(
            return_value=httpx.Response(200, json={"sub": "a1b2-c3", "email": "x@example.com"})
        )

        async with UserInfoTokenResolver(USERINFO_URL) as resolver:
            subject = await resolver.get_subject(make_request("Bearer access-token"))

        assert subject == "a1b2-c3"
        assert route.calls[0].request.headers["Authorization"] == "Bearer access-token"

    @pytest.mark.asyncio
    async def test_rejected_token(self, respx_mock):
        respx_mock.get(USERINFO_URL).mock(return_value=httpx.Response(401, json={"error": "invalid_token"}))

        async with UserInfoTokenResolver(USERINFO_URL) as resolver:
            with pytest.raises(AuthError, match="401"):
                await resolver.get_subject(make_request("Bearer expired"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"sub": ""}, {"sub": 42}, ["sub"]])
    async def test_missing_sub(self, respx_mock, body):
        respx_mock.get(USERINFO_URL).mock(return_value=httpx.Response(200, json=body))

        async with UserInfoTokenResolver(USERINFO_URL) as resolver:
            with pytest.raises(AuthError):
                await resolver.get_subject(make_request("Bearer tok"))

    @pytest.mark.asyncio
    async def test_invalid_json(self, respx_mock):
        respx_mock.get(USERINFO_URL).mock(return_value=httpx.Response(200, text="<html>"))

        async with UserInfoTokenResolver(USERINFO_URL) as resolver:
            with pytest.raises(AuthError, match="Invalid userinfo response"):
                await resolver.get_subject(make_request("Bearer tok"))

    @pytest.mark.asyncio
    async def test_provider_unreachable(self, respx_mock):
        respx_mock.get(USERINFO_URL).mock(side_effect=httpx.ConnectError("refused"))

        async with UserInfoTokenResolver(USERINFO_URL) as resolver:
            with pytest.raises(AuthError, match="unreachable"):
                await resolver.get_subject(make_request("Bearer tok"))

    @pytest.mark.asyncio
    async def test_no_token_makes_no_call(self, respx_mock):
        """A request without a token is rejected locally."""
        async with UserInfoTokenResolver(USERINFO_URL) as resolver:
            with pytest.raises(AuthError):
                await resolver.get_subject(make_request())

        assert respx_mock.calls.call_count == 0

    @pytest.mark.asyncio
    async def test_requires_context_manager(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            await UserInfoTokenResolver(USERINFO_URL).get_subject(make_request("Bearer tok"))
