"""Prompt composition from a user profile and a question."""

from eswriter.prompting.composer import compose_background, compose_prompt

__all__ = ["compose_background", "compose_prompt"]
