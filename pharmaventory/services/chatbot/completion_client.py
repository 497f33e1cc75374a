"""Single-attempt client for the remote text-completion endpoint."""

import asyncio
import logging
from collections.abc import Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from pharmaventory.core.config import Settings, settings
from pharmaventory.services.session_store import ChatTurn, TurnRole

logger = logging.getLogger(__name__)

APP_REFERER = "https://pharmaventory.com"
APP_TITLE = "Pharmaventory Assistant"


class RemoteCompletionClient:
    """Calls an OpenAI-compatible chat endpoint once per message.

    ``complete`` never raises: HTTP errors, malformed payloads, empty text and
    timeouts all come back as ``None`` so the caller can fall through to the
    rule-based path.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 1500,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "RemoteCompletionClient":
        return cls(
            api_key=config.openrouter_api_key,
            base_url=config.openrouter_base_url,
            model=config.chat_model,
            temperature=config.chat_temperature,
            max_tokens=config.chat_max_tokens,
            timeout_seconds=config.chat_timeout_seconds,
        )

    def _get_llm(self) -> ChatOpenAI:
        """Create a ChatOpenAI instance with retries disabled."""
        return ChatOpenAI(
            model=self.model,
            api_key=self.api_key,
            base_url=self.base_url,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout_seconds,
            max_retries=0,
            default_headers={"HTTP-Referer": APP_REFERER, "X-Title": APP_TITLE},
        )

    @staticmethod
    def build_messages(
        system_prompt: str, history: Sequence[ChatTurn], user_message: str
    ) -> list[BaseMessage]:
        messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
        for turn in history:
            if turn.role == TurnRole.USER:
                messages.append(HumanMessage(content=turn.text))
            else:
                messages.append(AIMessage(content=turn.text))
        messages.append(HumanMessage(content=user_message))
        return messages

    async def complete(
        self, system_prompt: str, history: Sequence[ChatTurn], user_message: str
    ) -> str | None:
        """Generate a reply, or return None on any fault."""
        messages = self.build_messages(system_prompt, history, user_message)

        try:
            response = await asyncio.wait_for(
                self._get_llm().ainvoke(messages),
                timeout=self.timeout_seconds,
            )
        except TimeoutError:
            logger.warning("Remote completion timed out after %.1fs", self.timeout_seconds)
            return None
        except Exception as e:
            logger.warning("Remote completion failed: %s", e)
            return None

        content = getattr(response, "content", None)
        if not isinstance(content, str) or not content.strip():
            logger.warning("Remote completion returned no usable text")
            return None

        return content.strip()
