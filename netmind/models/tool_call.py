from dataclasses import dataclass, field
from typing import Dict, Any


@dataclass(frozen=True)
class ToolCall:
    """
    A tool invocation requested by the model.

    This is the *intent packet* that flows from the LLM response into
    the Agent. It carries no execution logic; whether the call is
    resolved in-process or forwarded to the canvas is decided by the
    ToolRegistry from `name` alone.

    Architectural Role
    ------------------
    LLMResponse → ToolCall → ToolExecutor (server)
                           → needs_tool outcome (client)
    """

    id: str
    """Call identifier assigned by the model. Results correlate on it."""

    name: str
    """Name of the requested tool."""

    input: Dict[str, Any] = field(default_factory=dict)
    """Raw arguments as produced by the model."""

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    @classmethod
    def from_block(cls, block: Dict[str, Any]) -> "ToolCall":
        """Build from an Anthropic `tool_use` content block."""
        tool_input = block.get("input")
        if not isinstance(tool_input, dict):
            tool_input = {}
        return cls(
            id=str(block.get("id", "")),
            name=str(block.get("name", "")),
            input=tool_input,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolCall":
        """Inverse of `to_dict` (accepts `params` or `input`)."""
        params = data.get("params", data.get("input"))
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            input=params if isinstance(params, dict) else {},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Client-facing shape: `{id, name, params}`."""
        return {"id": self.id, "name": self.name, "params": self.input}

    def __repr__(self) -> str:
        return f"ToolCall(id={self.id[:12]}, tool='{self.name}')"
