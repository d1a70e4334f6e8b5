import json
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ToolResult:
    """
    Immutable outcome of one tool call, correlated by `tool_use_id`.

    Server tools produce these in-process; client tools produce them on
    the canvas and the caller hands them back on the next request.

    Attributes
    ----------
    tool_use_id : str
        Identifier of the ToolCall this result answers.

    content : Any
        JSON-compatible payload. Opaque to the loop: a canvas result
        (created / already-existed / updated / removed ...) is forwarded
        to the model verbatim.
    """

    tool_use_id: str
    content: Any

    # ------------------------------------------------------------------
    # Convenience Properties
    # ------------------------------------------------------------------

    @property
    def is_error(self) -> bool:
        return isinstance(self.content, dict) and self.content.get("status") == "error"

    @property
    def summary(self) -> str:
        """Short status used in the action log."""
        if isinstance(self.content, dict):
            return str(self.content.get("status") or "computed")
        return "ok"

    # ------------------------------------------------------------------
    # Serialization Boundary
    # ------------------------------------------------------------------

    def to_block(self) -> Dict[str, Any]:
        """Anthropic `tool_result` content block."""
        content = self.content
        if not isinstance(content, str):
            content = json.dumps(content)
        return {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": content,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolResult":
        if not isinstance(data, dict) or not data.get("tool_use_id"):
            raise ValueError("Tool result requires a 'tool_use_id'.")
        return cls(tool_use_id=str(data["tool_use_id"]), content=data.get("content"))

    @staticmethod
    def error(tool_use_id: str, message: str) -> "ToolResult":
        return ToolResult(
            tool_use_id=tool_use_id,
            content={"status": "error", "message": message},
        )
