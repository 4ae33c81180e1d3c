"""
Shared data models for the BookBot Relay service.

This module defines the core domain models used across multiple layers
of the application (pipeline, CLI, API).
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Mood(str, Enum):
    """Coarse emotional tone of a user message."""

    HAPPY = "happy"
    NEUTRAL = "neutral"
    CONFUSED = "confused"
    FRUSTRATED = "frustrated"

    @classmethod
    def parse(cls, value: str) -> "Mood | None":
        """Return the matching mood, or None for an unrecognized token."""
        try:
            return cls(value)
        except ValueError:
            return None


DEFAULT_MOOD = Mood.NEUTRAL


class ChatMessage(BaseModel):
    """A single turn sent to the inference API."""

    role: Literal["system", "user", "assistant"]
    content: str


class ChatOutcome(BaseModel):
    """Successful reply from one candidate model."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_used: str = Field(
        ..., alias="modelUsed", description="Identifier of the model that replied"
    )
    reply: str = Field(..., description="Reply text produced by the model")


class AttemptResult(BaseModel):
    """Result of one attempt against one candidate model."""

    model: str
    ok: bool
    reply: str | None = None
    status_code: int | None = None
    reason: str | None = None


class GenerationReport(BaseModel):
    """All attempts of one generation run and the outcome they produced."""

    attempts: list[AttemptResult] = Field(default_factory=list)
    outcome: ChatOutcome | None = None

    @property
    def exhausted(self) -> bool:
        return self.outcome is None
