"""Caller identity resolution."""

from eswriter.auth.tokens import (
    AuthError,
    StaticTokenResolver,
    TokenResolver,
    UserInfoTokenResolver,
    bearer_token,
)

__all__ = [
    "AuthError",
    "StaticTokenResolver",
    "TokenResolver",
    "UserInfoTokenResolver",
    "bearer_token",
]
