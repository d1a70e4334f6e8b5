from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...models import ToolCall


@dataclass(frozen=True)
class LLMResponse:
    """
    One completion as returned by the Messages API.

    `content` holds the raw assistant blocks so the exact message can be
    echoed back into the conversation.
    """

    content: List[Dict[str, Any]] = field(default_factory=list)
    stop_reason: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)

    def text(self) -> str:
        """Concatenated text blocks."""
        return "".join(
            block.get("text", "")
            for block in self.content
            if block.get("type") == "text"
        )

    def tool_calls(self) -> List[ToolCall]:
        """tool_use blocks in the order the model emitted them."""
        return [
            ToolCall.from_block(block)
            for block in self.content
            if block.get("type") == "tool_use"
        ]

    def to_message(self) -> Dict[str, Any]:
        return {"role": "assistant", "content": list(self.content)}


class LLMClient(ABC):
    """
    Abstract LLM transport interface.

    Responsible only for:
        • Sending one Messages API request
        • Returning the parsed completion
        • Mapping transport failures onto the LLMError taxonomy

    Retries belong to the caller, which owns the iteration budget.
    """

    @property
    def name(self) -> str:
        """Return backend identity."""
        return self.__class__.__name__

    @abstractmethod
    def create_message(
        self,
        system: str,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
    ) -> LLMResponse:
        """
        Execute a single completion.

        Parameters
        ----------
        system : str
            Fully constructed system prompt.

        messages : list
            Conversation in Messages API shape.

        tools : list
            Tool manifest (`{name, description, input_schema}` entries).

        Raises
        ------
        TransientLLMError
            Retryable failure (429 / 503 / 529, timeouts, dropped connections).
        LLMServiceError
            Any other non-success status.
        LLMProtocolError
            A success status with an unusable body.
        """
        raise NotImplementedError
