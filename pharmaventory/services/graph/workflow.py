"""LangGraph workflow definition for the chat fallback chain."""

import logging
from typing import Any

from langgraph.graph import END, START, StateGraph

from pharmaventory.services.chatbot.completion_client import RemoteCompletionClient
from pharmaventory.services.chatbot.context_retriever import ContextRetriever
from pharmaventory.services.chatbot.handlers import RuleBasedResponder
from pharmaventory.services.chatbot.intents import IntentClassifier
from pharmaventory.services.graph.nodes import (
    remote_attempt,
    respond,
    rule_classify,
    rule_respond,
)
from pharmaventory.services.graph.router import route_after_remote, route_start
from pharmaventory.services.graph.state import ChatState

logger = logging.getLogger(__name__)


def create_chat_graph(
    classifier: IntentClassifier,
    responder: RuleBasedResponder,
    retriever: ContextRetriever | None = None,
    completion_client: RemoteCompletionClient | None = None,
) -> Any:
    """Build and compile the chat workflow.

    START -> remote_attempt -> respond when the remote model answers, otherwise
    remote_attempt -> rule_classify -> rule_respond -> respond. Without a
    completion client the graph starts at rule_classify.

    Args:
        classifier: Intent classifier for the rule-based path
        responder: Rule-based handlers
        retriever: Inventory context retriever for the remote path
        completion_client: Remote completion client; None disables the remote path

    Returns:
        Compiled LangGraph workflow
    """
    remote_enabled = completion_client is not None and retriever is not None

    # Create node functions with bound arguments
    async def _remote_attempt(state: ChatState) -> dict[str, Any]:
        return await remote_attempt(state, retriever=retriever, client=completion_client)  # type: ignore[arg-type]

    def _rule_classify(state: ChatState) -> dict[str, Any]:
        return rule_classify(state, classifier=classifier)

    async def _rule_respond(state: ChatState) -> dict[str, Any]:
        return await rule_respond(state, responder=responder)

    def _route_start(state: ChatState) -> str:
        return route_start(state, remote_enabled=remote_enabled)

    # Build the graph
    graph = StateGraph(ChatState)

    graph.add_node("remote_attempt", _remote_attempt)
    graph.add_node("rule_classify", _rule_classify)
    graph.add_node("rule_respond", _rule_respond)
    graph.add_node("respond", respond)

    graph.add_conditional_edges(
        START,
        _route_start,
        {"remote_attempt": "remote_attempt", "rule_classify": "rule_classify"},
    )
    graph.add_conditional_edges(
        "remote_attempt",
        route_after_remote,
        {"respond": "respond", "rule_classify": "rule_classify"},
    )
    graph.add_edge("rule_classify", "rule_respond")
    graph.add_edge("rule_respond", "respond")
    graph.add_edge("respond", END)

    logger.debug("Chat graph compiled (remote_enabled=%s)", remote_enabled)
    return graph.compile()
