# server/schemas.py
"""
Pydantic schemas for the Nexis backend.

This file defines:
- /nexis inbound payload       (PlanIn)
- outbound completion request  (ChatMessage, CompletionRequest)
- error bodies                 (ErrorOut)
- the handler's tagged result  (ParsedPlan | RawText | PlanError)
"""

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# /nexis
# ---------------------------------------------------------------------------

class PlanIn(BaseModel):
    """
    Business idea submitted by the client.

    Every field is optional: an empty idea still produces a (vaguer) plan.
    """
    idea: Optional[str] = None
    audience: Optional[str] = None
    budget: Optional[str] = None
    timeline: Optional[str] = None
    goal: Optional[str] = None

    @field_validator("idea", "audience", "budget", "timeline", "goal", mode="before")
    @classmethod
    def _numbers_as_text(cls, v):
        # forms often send budget as a bare number
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


# ---------------------------------------------------------------------------
# Upstream chat completion
# ---------------------------------------------------------------------------

class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class CompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]
    temperature: float = 0.3


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ErrorOut(BaseModel):
    error: str
    status: Optional[int] = None
    message: Optional[str] = None
    details: Optional[Any] = None


# ---------------------------------------------------------------------------
# Handler outcome
# ---------------------------------------------------------------------------

class ParsedPlan(BaseModel):
    kind: Literal["parsed"] = "parsed"
    # usually a dict shaped like the system prompt asks, but any JSON value passes
    plan: Any = None


class RawText(BaseModel):
    """Model answered, but not with valid JSON. Still a success for the caller."""
    kind: Literal["raw"] = "raw"
    raw: str


class PlanError(BaseModel):
    kind: Literal["error"] = "error"
    status_code: int = 500
    body: ErrorOut

    @classmethod
    def of(cls, status_code: int, error: str, **extra: Any) -> "PlanError":
        return cls(status_code=status_code, body=ErrorOut(error=error, **extra))


PlanOutcome = Union[ParsedPlan, RawText, PlanError]


class HealthOut(BaseModel):
    ok: bool = True
    ts: str = Field(..., description="UTC ISO timestamp")
