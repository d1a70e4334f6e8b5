import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Message = Dict[str, Any]


@dataclass(frozen=True)
class ConversationMemory:
    """
    Compact stand-in for the older part of a long conversation.

    Derived data only: it is recomputed from the message list on every
    run and never stored.
    """

    summary: str
    key_facts: List[str] = field(default_factory=list)
    summarised_count: int = 0


class ConversationMemoryManager:
    """
    Keeps the prompt bounded as a conversation grows.

    Once the history exceeds `threshold` messages, the newest
    `keep_recent` are sent verbatim and everything older is folded into a
    deterministic ConversationMemory.

    A tool_use message and its tool_result reply always stay on the same
    side of the boundary: when the verbatim tail would start with a
    tool_result message, the boundary moves one message earlier.
    """

    SNIPPET_MIN_CHARS = 20
    SNIPPET_MAX_CHARS = 100
    INPUT_MAX_CHARS = 80
    SUMMARY_SNIPPETS = 10
    SUMMARY_ACTIONS = 10
    KEY_FACTS = 5

    def __init__(self, threshold: int = 30, keep_recent: int = 20) -> None:
        if keep_recent <= 0 or threshold <= 0:
            raise ValueError("threshold and keep_recent must be positive.")
        if keep_recent >= threshold:
            raise ValueError("keep_recent must be smaller than threshold.")
        self._threshold = threshold
        self._keep_recent = keep_recent

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compact(self, messages: List[Message]) -> Tuple[List[Message], Optional[ConversationMemory]]:
        if len(messages) <= self._threshold:
            return list(messages), None

        boundary = len(messages) - self._keep_recent
        if boundary > 0 and self._is_tool_result_message(messages[boundary]):
            boundary -= 1

        older = messages[:boundary]
        recent = list(messages[boundary:])

        memory = self._summarise(older)

        logger.info(
            "[MEMORY] Compacted history | summarised=%d | verbatim=%d",
            len(older),
            len(recent),
        )
        return recent, memory

    # ------------------------------------------------------------------
    # Summarisation
    # ------------------------------------------------------------------

    def _summarise(self, older: List[Message]) -> ConversationMemory:
        snippets: List[str] = []
        actions: List[str] = []

        for message in older:
            role = message.get("role")

            if role == "user":
                text = self._user_text(message.get("content"))
                if len(text) > self.SNIPPET_MIN_CHARS:
                    snippet = text[:self.SNIPPET_MAX_CHARS]
                    if len(text) > self.SNIPPET_MAX_CHARS:
                        snippet += "…"
                    snippets.append(f'User asked: "{snippet}"')

            elif role == "assistant" and isinstance(message.get("content"), list):
                for block in message["content"]:
                    if isinstance(block, dict) and block.get("type") == "tool_use":
                        rendered = json.dumps(
                            block.get("input", {}),
                            separators=(",", ":"),
                            ensure_ascii=False,
                        )
                        actions.append(
                            f"Called {block.get('name')}({rendered[:self.INPUT_MAX_CHARS]})"
                        )

        lines = [f"Earlier in this conversation ({len(older)} messages summarised):"]
        lines.extend(snippets[-self.SUMMARY_SNIPPETS:])
        if actions:
            lines.append(f"Actions taken: {'; '.join(actions[-self.SUMMARY_ACTIONS:])}")

        return ConversationMemory(
            summary="\n".join(lines),
            key_facts=snippets[-self.KEY_FACTS:],
            summarised_count=len(older),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _user_text(content: Any) -> str:
        """Typed user text; tool_result blocks are not user intent."""
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            return "\n".join(
                block.get("text", "")
                for block in content
                if isinstance(block, dict) and block.get("type") == "text"
            )
        return ""

    @staticmethod
    def _is_tool_result_message(message: Message) -> bool:
        content = message.get("content")
        return (
            message.get("role") == "user"
            and isinstance(content, list)
            and any(
                isinstance(block, dict) and block.get("type") == "tool_result"
                for block in content
            )
        )
