"""LangGraph node functions for the chat fallback workflow."""

import logging
from typing import Any

from pharmaventory.services.chatbot.completion_client import RemoteCompletionClient
from pharmaventory.services.chatbot.context_formatter import (
    build_system_prompt,
    format_inventory_context,
)
from pharmaventory.services.chatbot.context_retriever import ContextRetriever
from pharmaventory.services.chatbot.handlers import RuleBasedResponder
from pharmaventory.services.chatbot.intents import Intent, IntentClassifier, IntentType
from pharmaventory.services.chatbot.suggestions import suggestions_for
from pharmaventory.services.graph.state import ChatState

logger = logging.getLogger(__name__)


async def remote_attempt(
    state: ChatState,
    retriever: ContextRetriever,
    client: RemoteCompletionClient,
) -> dict[str, Any]:
    """Answer from the remote model with a freshly retrieved inventory context.

    Any fault, including a failed retrieval, yields ``remote_reply=None`` so the
    router falls through to the rule-based path.
    """
    try:
        snapshot = await retriever.retrieve(state["raw_message"])
    except Exception as e:
        logger.warning("Inventory retrieval for remote completion failed: %s", e)
        return {"remote_reply": None}

    system_prompt = build_system_prompt(format_inventory_context(snapshot))
    reply = await client.complete(system_prompt, state.get("history", []), state["raw_message"])
    if reply is None:
        logger.info("Remote completion unavailable, using rule-based responder")
    return {"remote_reply": reply}


def rule_classify(state: ChatState, classifier: IntentClassifier) -> dict[str, Any]:
    """Classify the normalized message into an intent."""
    intent = classifier.classify(state["message"])
    logger.info(
        "Intent classified: %s (confidence=%.2f, medicine=%s)",
        intent.type.value,
        intent.confidence,
        intent.medicine,
    )
    return {
        "intent": intent.type.value,
        "confidence": intent.confidence,
        "medicine": intent.medicine,
    }


async def rule_respond(state: ChatState, responder: RuleBasedResponder) -> dict[str, Any]:
    """Run the handler for the classified intent."""
    intent = Intent(
        IntentType(state["intent"]),
        state.get("confidence", 0.0),
        medicine=state.get("medicine"),
    )
    result = await responder.respond(intent, state["message"], state.get("turn_count", 0))
    return {
        "intent": result.intent.value,
        "reply": result.render(),
        "fault": result.fault,
    }


def respond(state: ChatState) -> dict[str, Any]:
    """Settle the final reply, intent label and suggestions."""
    remote_reply = state.get("remote_reply")
    if remote_reply:
        return {
            "reply": remote_reply,
            "intent": IntentType.GENERAL.value,
            "suggestions": suggestions_for(None, remote=True),
        }

    intent = IntentType(state.get("intent", IntentType.GENERAL.value))
    return {
        "reply": state.get("reply", ""),
        "intent": intent.value,
        "suggestions": suggestions_for(intent),
    }
