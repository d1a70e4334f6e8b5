from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Literal, Optional, Tuple

from ..models.snapshot import NetworkSnapshot

ServerHandler = Callable[[Dict[str, Any], NetworkSnapshot], Any]

SERVER = "server"
CLIENT = "client"


@dataclass(frozen=True)
class Tool:
    """
    Declarative contract describing one capability offered to the model.

    The resolution decides who answers a call:

        server → handler runs in-process against the diagram snapshot
        client → the call is forwarded to the canvas and the loop suspends

    A Tool is immutable. The model sees `name`, `description` and
    `input_schema` through the registry manifest; `handler` and `tags`
    never leave the process.
    """

    # ------------------------------------------------------------------
    # Core Identity
    # ------------------------------------------------------------------

    name: str
    description: str

    # ------------------------------------------------------------------
    # Schema (Contract Layer)
    # ------------------------------------------------------------------

    input_schema: Dict[str, Any]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    resolution: Literal["server", "client"] = CLIENT
    handler: Optional[ServerHandler] = field(default=None, compare=False)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    # NOTE: Tuple used instead of List to preserve immutability
    tags: Tuple[str, ...] = field(default_factory=tuple)

    # ------------------------------------------------------------------
    # Validation Layer
    # ------------------------------------------------------------------

    def __post_init__(self):
        """Raises early if the contract is malformed."""

        if not self.name or not isinstance(self.name, str):
            raise ValueError("Tool name must be a non-empty string.")

        if not isinstance(self.input_schema, dict):
            raise TypeError("input_schema must be a dictionary.")

        if self.input_schema.get("type", "object") != "object":
            raise ValueError(f"Tool '{self.name}' input_schema must describe an object.")

        if self.resolution not in (SERVER, CLIENT):
            raise ValueError(
                f"Tool '{self.name}' has unknown resolution '{self.resolution}'."
            )

        if self.resolution == SERVER and not callable(self.handler):
            raise ValueError(f"Server tool '{self.name}' requires a callable handler.")

        if self.resolution == CLIENT and self.handler is not None:
            raise ValueError(f"Client tool '{self.name}' must not carry a handler.")

    # ------------------------------------------------------------------
    # Derived Properties
    # ------------------------------------------------------------------

    @property
    def is_server(self) -> bool:
        return self.resolution == SERVER

    @property
    def is_client(self) -> bool:
        return self.resolution == CLIENT

    def to_manifest_entry(self) -> Dict[str, Any]:
        """Anthropic `tools[]` entry."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }

    def to_debug_string(self) -> str:
        return (
            f"[TOOL] {self.name} | resolution={self.resolution} | "
            f"tags={list(self.tags)}"
        )
