import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

AGENT_START = "agent_start"
ITERATION_START = "iteration_start"
TEXT = "text"
TOOL_START = "tool_start"
TOOL_RESULT = "tool_result"
NEEDS_TOOL = "needs_tool"
RETRY = "retry"
ERROR = "error"
AGENT_END = "agent_end"

TERMINAL_EVENTS = frozenset({NEEDS_TOOL, AGENT_END})


@dataclass(frozen=True)
class AgentEvent:
    """
    One named transition of the orchestration loop.

    `data` mirrors the fields of the non-streaming outcome so a stream
    consumer can rebuild the same result from `needs_tool` or
    `agent_end`.
    """

    name: str
    data: Dict[str, Any] = field(default_factory=dict)
    outcome: Optional[Any] = field(default=None, repr=False, compare=False)
    """The AgentOutcome behind a terminal event; never serialized."""

    @property
    def is_terminal(self) -> bool:
        return self.name in TERMINAL_EVENTS

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "data": self.data}

    def to_sse(self) -> str:
        """Server-Sent Events frame: `event: <name>` + `data: <json>` + blank line."""
        return f"event: {self.name}\ndata: {json.dumps(self.data, ensure_ascii=False)}\n\n"
