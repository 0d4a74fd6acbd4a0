"""Pydantic models for API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field


class VoiceCommandRequest(BaseModel):
    """A voice or text command to process."""

    command: str | None = None
    user_id: str = "anonymous"
    language_code: str = "de-DE"


class FollowUpRequest(BaseModel):
    """The user's answer to a follow-up question."""

    initial_query: str
    user_response: str | None = None
    dialog_context: dict[str, Any] = Field(default_factory=dict)
    user_id: str = "anonymous"
    language_code: str = "de-DE"


class WorkflowResponse(BaseModel):
    """Result of a workflow."""

    status: str  # "success" or "error"
    workflow_id: str
    response: str
    intent: str
    confidence: float
    generated_content: dict[str, Any] | None = None
    requires_follow_up: bool = False
    follow_up_questions: list[str] = Field(default_factory=list)
    dialog_context: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class ErrorResponse(BaseModel):
    """Structured failure body."""

    success: bool = False
    response: str
    error: str
