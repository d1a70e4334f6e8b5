from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from .continuation import Continuation
from .tool_call import ToolCall


@dataclass(frozen=True)
class FinalResponse:
    """
    Terminal outcome of a run (natural end, cap, protocol or upstream failure).

    status : {"done", "failed"}
        done   → the conversation turn completed (possibly at the cap)
        failed → the upstream service failed fatally
    """

    text: str
    actions: List[Dict[str, Any]] = field(default_factory=list)
    iterations_used: int = 0
    max_iterations_reached: bool = False
    error: Optional[str] = None
    status: Literal["done", "failed"] = "done"
    messages: List[Dict[str, Any]] = field(default_factory=list, repr=False, compare=False)
    """Conversation closed by the final assistant message; kept out of `to_dict`."""

    type = "final"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "text": self.text,
            "actions": self.actions,
            "iterations_used": self.iterations_used,
        }
        if self.max_iterations_reached:
            data["max_iterations_reached"] = True
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class NeedsToolResponse:
    """
    Suspension outcome: the canvas must run `tool_call` before the loop
    can progress. `continuation` is what the caller resubmits.
    """

    tool_call: ToolCall
    continuation: Continuation
    iterations_used: int = 0
    partial_text: Optional[str] = None

    type = "needs_tool"
    status = "suspended"

    @property
    def queued_tool_calls(self) -> List[ToolCall]:
        return self.continuation.queued_tool_calls

    @property
    def partial_messages(self) -> List[Dict[str, Any]]:
        return self.continuation.messages

    @property
    def actions(self) -> List[Dict[str, Any]]:
        return self.continuation.actions

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "tool_call": self.tool_call.to_dict(),
            "queued_tool_calls": [c.to_dict() for c in self.queued_tool_calls],
            "partial_messages": self.partial_messages,
            "actions": self.actions,
            "iterations_used": self.iterations_used,
        }
        if self.partial_text:
            data["partial_text"] = self.partial_text
        return data


AgentOutcome = Union[FinalResponse, NeedsToolResponse]
