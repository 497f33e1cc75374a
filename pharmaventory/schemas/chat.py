"""Pydantic schemas for chat functionality."""

from pydantic import Field

from pharmaventory.schemas.common import BaseSchema


class ChatRequest(BaseSchema):
    """Schema for a chat message from the dashboard widget.

    A blank message is accepted here; the assistant answers it with a prompt
    for input instead of a validation error.
    """

    message: str = Field(..., max_length=4000)
    session_id: str | None = Field(default=None, max_length=128)


class ChatResponse(BaseSchema):
    """Schema for the assistant's reply."""

    response: str
    session_id: str
    intent: str
    suggestions: list[str] = Field(default_factory=list, max_length=3)
