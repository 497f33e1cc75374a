"""LangGraph chat state definition."""

from typing import Any

from typing_extensions import TypedDict

from pharmaventory.services.session_store import ChatTurn


class ChatState(TypedDict, total=False):
    """State that flows through the chat fallback workflow.

    Attributes:
        message: Normalized (trimmed, lower-cased) user message
        raw_message: The message as the user typed it
        session_id: Chat session identifier
        user_id: Authenticated user, if any
        history: Turns recorded before this message
        turn_count: Number of turns in the session including this message
        remote_reply: Text from the remote model, None when it failed or was skipped
        intent: Intent label of the reply
        confidence: Classifier confidence (0-1)
        medicine: Medicine name extracted by the classifier
        reply: Final reply text
        fault: Data fault raised inside a rule handler, if any
        suggestions: Follow-up phrases for the reply
    """

    message: str
    raw_message: str
    session_id: str
    user_id: str | None
    history: list[ChatTurn]
    turn_count: int
    remote_reply: str | None
    intent: str
    confidence: float
    medicine: str | None
    reply: str
    fault: Any
    suggestions: list[str]
