"""
Core runtime data models for the NetMind agent.

These dataclasses are the packets that move between the LLM client,
the orchestration loop, the tool executor and the HTTP boundary.
"""

from .tool_call import ToolCall
from .tool_result import ToolResult
from .snapshot import NetworkSnapshot
from .continuation import Continuation
from .outcome import AgentOutcome, FinalResponse, NeedsToolResponse

__all__ = [
    "ToolCall",
    "ToolResult",
    "NetworkSnapshot",
    "Continuation",
    "AgentOutcome",
    "FinalResponse",
    "NeedsToolResponse",
]
