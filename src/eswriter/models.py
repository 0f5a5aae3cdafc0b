"""Core data types shared by the answering pipeline."""

import asyncio
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Question:
    """One question extracted from a form, in document order."""

    text: str
    index: int


@dataclass(frozen=True)
class UserProfile:
    """Free-text profile used to personalize answers. Read-only per request."""

    bio: str = ""
    experience: str = ""
    projects: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {
            "bio": self.bio,
            "experience": self.experience,
            "projects": self.projects,
        }


class AnswerStatus(str, Enum):
    """Terminal state of one question's task."""

    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class Answer:
    """Answer bound positionally to its Question by ``index``.

    ``answer`` is empty for FAILED and TIMED_OUT; callers that only see the
    serialized question/answer pair cannot tell those apart from a model that
    returned nothing.
    """

    question: str
    answer: str
    index: int
    status: AnswerStatus

    def to_dict(self, include_status: bool = False) -> dict[str, str]:
        """Convert to the response item shape."""
        data = {"question": self.question, "answer": self.answer}
        if include_status:
            data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class Completion:
    """Canonical completion result, whatever provider produced it."""

    text: str
    provider: str
    model: str
    finish_reason: str | None = None


@dataclass(frozen=True)
class Deadline:
    """Absolute deadline on the running event loop's clock.

    One instance is shared by every task spawned for a request.

    Usage:
        deadline = Deadline.after(30.0)
        async with asyncio.timeout_at(deadline.expires_at):
            ...
    """

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        """Deadline ``seconds`` from now."""
        return cls(asyncio.get_running_loop().time() + seconds)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - asyncio.get_running_loop().time())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0
