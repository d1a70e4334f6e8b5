from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class NetworkSnapshot:
    """
    Read-only per-request view of the canvas.

    The canvas owns node/link state. A fresh snapshot arrives with every
    request and nothing in this package mutates it; canvas mutations
    happen on the client and show up in the next snapshot.
    """

    nodes: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)
    links: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)
    groups: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)
    selected_node_id: Optional[str] = None
    selected_link_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NetworkSnapshot":
        if not data or not isinstance(data, dict):
            return cls()

        def _items(key):
            value = data.get(key)
            if not isinstance(value, (list, tuple)):
                return ()
            return tuple(item for item in value if isinstance(item, dict))

        return cls(
            nodes=_items("nodes"),
            links=_items("links"),
            groups=_items("groups"),
            selected_node_id=data.get("selected_node_id"),
            selected_link_id=data.get("selected_link_id"),
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.links

    def node_ids(self) -> Tuple[str, ...]:
        return tuple(n["id"] for n in self.nodes if n.get("id") is not None)

    def labels(self) -> Dict[str, str]:
        """Map node id → display label (falls back to the id)."""
        return {
            n["id"]: n.get("label") or n["id"]
            for n in self.nodes
            if n.get("id") is not None
        }

    @staticmethod
    def endpoints(link: Dict[str, Any]) -> Tuple[Any, Any]:
        """Link endpoints; `source`/`target` win over legacy `a`/`b`."""
        return link.get("source") or link.get("a"), link.get("target") or link.get("b")
