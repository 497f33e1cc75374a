"""LangGraph conditional routing logic."""

from pharmaventory.services.graph.state import ChatState


def route_start(state: ChatState, remote_enabled: bool) -> str:
    """Pick the first node: the remote model when configured, else the rules."""
    return "remote_attempt" if remote_enabled else "rule_classify"


def route_after_remote(state: ChatState) -> str:
    """Finish with the remote reply, or fall through to the rule-based path.

    Returns:
        The name of the next node to execute.
    """
    if state.get("remote_reply"):
        return "respond"
    return "rule_classify"
