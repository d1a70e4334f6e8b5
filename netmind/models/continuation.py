import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .tool_call import ToolCall


@dataclass(frozen=True)
class Continuation:
    """
    Serializable token that lets the loop resume after a client round trip.

    Created when a turn first needs a client tool; consumed once the
    caller resubmits `messages` together with the matching tool result(s).
    It is data only: nothing about the paused loop stays in memory
    between requests.
    """

    messages: List[Dict[str, Any]] = field(default_factory=list)
    queued_tool_calls: List[ToolCall] = field(default_factory=list)
    actions: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messages": copy.deepcopy(self.messages),
            "queued_tool_calls": [c.to_dict() for c in self.queued_tool_calls],
            "actions": copy.deepcopy(self.actions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Continuation":
        return cls(
            messages=copy.deepcopy(data.get("messages") or []),
            queued_tool_calls=[
                ToolCall.from_dict(c) for c in data.get("queued_tool_calls") or []
            ],
            actions=copy.deepcopy(data.get("actions") or []),
        )
