import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from ..models import NetworkSnapshot, ToolCall, ToolResult

logger = logging.getLogger(__name__)


class LoopState(Enum):
    RUNNING = "running"
    TOOL_BATCH = "tool_batch"
    SUSPENDED = "suspended"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({LoopState.SUSPENDED, LoopState.DONE, LoopState.FAILED})


@dataclass
class RunState:
    """
    Mutable runtime state of a single agent run.

    This is NOT persisted. Everything that must survive a suspension is
    copied into the Continuation handed back to the caller.
    """

    # ------------------------------------------------------------------
    # Conversation Context
    # ------------------------------------------------------------------

    messages: List[Dict[str, Any]]
    """Working copy of the conversation as the model sees it; the caller's list is never touched."""

    archived: List[Dict[str, Any]] = field(default_factory=list)
    """Older messages compacted out of the model's view, kept for the outcome."""

    snapshot: NetworkSnapshot = field(default_factory=NetworkSnapshot)

    # ------------------------------------------------------------------
    # Execution Context
    # ------------------------------------------------------------------

    actions: List[Dict[str, Any]] = field(default_factory=list)
    """Action log, extended across resumed requests."""

    iteration: int = 0
    """Model calls made so far in this request."""

    state: LoopState = LoopState.RUNNING

    # ------------------------------------------------------------------
    # State Update Helpers
    # ------------------------------------------------------------------

    def transition(self, new_state: LoopState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Run already finished in state {self.state.value}")
        logger.debug("[AGENT] %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def history(self) -> List[Dict[str, Any]]:
        """Full conversation: archived head plus the working messages."""
        return self.archived + self.messages

    def record_server_action(self, call: ToolCall, result: ToolResult) -> None:
        if call.name == "think":
            return
        self.actions.append({
            "tool": call.name,
            "input": call.input,
            "result_summary": result.summary,
        })

    def record_client_action(self, call: ToolCall) -> None:
        self.actions.append({
            "tool": call.name,
            "input": call.input,
            "side": "client",
        })
