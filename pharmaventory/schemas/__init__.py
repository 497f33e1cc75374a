"""Pydantic schemas for request/response validation."""

from pharmaventory.schemas.chat import ChatRequest, ChatResponse
from pharmaventory.schemas.common import BaseSchema, HealthResponse

__all__ = [
    "BaseSchema",
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
]
