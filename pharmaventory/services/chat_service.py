"""Chat service orchestrating the assistant's fallback chain."""

import logging
import secrets
from collections.abc import Callable
from datetime import datetime

from pharmaventory.core.logging_config import chat_session_var
from pharmaventory.schemas.chat import ChatResponse
from pharmaventory.services.chatbot.completion_client import RemoteCompletionClient
from pharmaventory.services.chatbot.context_retriever import ContextRetriever
from pharmaventory.services.chatbot.handlers import RuleBasedResponder
from pharmaventory.services.chatbot.intents import IntentClassifier, IntentType
from pharmaventory.services.chatbot.prompts import EMPTY_MESSAGE_REPLY, INTERNAL_ERROR_REPLY
from pharmaventory.services.chatbot.suggestions import suggestions_for
from pharmaventory.services.chatbot.vocabulary import Vocabulary
from pharmaventory.services.graph.workflow import create_chat_graph
from pharmaventory.services.inventory_repository import InventoryDataSource
from pharmaventory.services.session_store import SessionStore, TurnRole

logger = logging.getLogger(__name__)

MAX_HISTORY_TURNS = 8  # Turns forwarded to the remote model


def generate_session_id() -> str:
    return secrets.token_urlsafe(16)


class ChatService:
    """Service for the pharmacy assistant.

    Tries the remote model with a retrieved inventory context first (when a
    completion client is configured) and falls back to intent classification
    plus rule-based handlers. ``process_message`` never raises.
    """

    def __init__(
        self,
        data_source: InventoryDataSource,
        session_store: SessionStore,
        completion_client: RemoteCompletionClient | None = None,
        vocabulary: Vocabulary | None = None,
        clock: Callable[[], datetime] | None = None,
        history_turns: int = MAX_HISTORY_TURNS,
    ) -> None:
        self.session_store = session_store
        self.history_turns = history_turns

        vocabulary = vocabulary or Vocabulary.from_settings()
        self.classifier = IntentClassifier(vocabulary=vocabulary)
        self.responder = RuleBasedResponder(data_source, clock=clock)
        self.retriever = ContextRetriever(data_source, vocabulary=vocabulary, clock=clock)
        self.graph = create_chat_graph(
            classifier=self.classifier,
            responder=self.responder,
            retriever=self.retriever,
            completion_client=completion_client,
        )

    async def process_message(
        self,
        message: str,
        session_id: str | None = None,
        user_id: str | None = None,
    ) -> ChatResponse:
        """Process a chat message and generate a response.

        This is the main entry point for chat. It:
        1. Gets or creates the session and records the user turn
        2. Short-circuits blank messages with a prompt for input
        3. Runs the LangGraph workflow (remote attempt -> rule-based fallback)
        4. Records the bot turn and returns the reply with suggestions

        Args:
            message: The user's message as typed
            session_id: Existing session id; a new one is generated when absent
            user_id: Authenticated user id, for logging only

        Returns:
            Chat response with reply, session id, intent and suggestions
        """
        session_id = session_id or generate_session_id()
        token = chat_session_var.set(session_id)
        try:
            return await self._process(message, session_id, user_id)
        except Exception:
            logger.exception("Unhandled error while answering chat message")
            return ChatResponse(
                response=INTERNAL_ERROR_REPLY,
                session_id=session_id,
                intent=IntentType.ERROR.value,
                suggestions=suggestions_for(IntentType.GENERAL),
            )
        finally:
            chat_session_var.reset(token)

    async def _process(self, message: str, session_id: str, user_id: str | None) -> ChatResponse:
        session = await self.session_store.get_or_create(session_id)
        history = session.recent_turns(self.history_turns)

        session = await self.session_store.append_turns(session_id, [(TurnRole.USER, message)])

        normalized = message.strip().lower()
        if not normalized:
            return ChatResponse(
                response=EMPTY_MESSAGE_REPLY,
                session_id=session_id,
                intent=IntentType.ERROR.value,
                suggestions=suggestions_for(IntentType.GENERAL),
            )

        logger.debug("Processing chat message for user=%s", user_id)
        result = await self.graph.ainvoke(
            {
                "message": normalized,
                "raw_message": message.strip(),
                "session_id": session_id,
                "user_id": user_id,
                "history": history,
                "turn_count": len(session.turns),
                "remote_reply": None,
                "fault": None,
            }
        )

        reply = result["reply"]
        intent = result["intent"]
        await self.session_store.append_turns(
            session_id, [(TurnRole.BOT, reply)], last_intent=intent
        )

        return ChatResponse(
            response=reply,
            session_id=session_id,
            intent=intent,
            suggestions=result.get("suggestions", []),
        )

    async def clear_session(self, session_id: str) -> bool:
        """Forget a session's history. Returns False when it did not exist."""
        cleared = await self.session_store.clear(session_id)
        logger.info("Chat session cleared: %s (existed=%s)", session_id, cleared)
        return cleared
