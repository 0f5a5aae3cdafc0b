"""Request and response bodies of the HTTP API."""

from pydantic import BaseModel, Field

from eswriter.models import UserProfile


class AnswerRequest(BaseModel):
    """Body of POST /getAnswers."""

    html: str = Field(..., description="Snapshot of the application form markup")


class AnswerItem(BaseModel):
    """One answered question; ``answer`` is empty if no text was produced."""

    question: str
    answer: str
    status: str | None = Field(
        default=None,
        description="completed / failed / timed_out (only with include_status=true)",
    )


class ProfileBody(BaseModel):
    """Body of GET and PUT /profile."""

    bio: str = ""
    experience: str = ""
    projects: str = ""

    def to_profile(self) -> UserProfile:
        return UserProfile(bio=self.bio, experience=self.experience, projects=self.projects)

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "ProfileBody":
        return cls(**profile.to_dict())


class HealthStatus(BaseModel):
    """Health check response."""

    status: str
    version: str
    provider: str
