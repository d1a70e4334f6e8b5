from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from ..models.snapshot import NetworkSnapshot


@dataclass(frozen=True)
class Neighbor:
    """One side of an undirected link as seen from a node."""

    node: str
    link: Mapping[str, Any]
    edge: int
    """Position of the link in the snapshot; identifies parallel links."""


Adjacency = Dict[str, List[Neighbor]]


def build_adjacency(snapshot: NetworkSnapshot) -> Adjacency:
    """
    Undirected adjacency list from a snapshot.

    Every node gets an entry (isolated nodes keep an empty list). Parallel
    links and self loops are kept. Links whose endpoints are not both
    known nodes are skipped so the structure stays symmetric.
    """
    adj: Adjacency = {node_id: [] for node_id in snapshot.node_ids()}

    for index, link in enumerate(snapshot.links):
        source, target = NetworkSnapshot.endpoints(link)
        if source not in adj or target not in adj:
            continue
        adj[source].append(Neighbor(node=target, link=link, edge=index))
        adj[target].append(Neighbor(node=source, link=link, edge=index))

    return adj


def link_label(link: Mapping[str, Any], labels: Mapping[str, str], with_name: bool = False) -> str:
    """Human readable `A ↔ B` description of a link."""
    source, target = NetworkSnapshot.endpoints(link)
    text = f"{labels.get(source, source or '')} ↔ {labels.get(target, target or '')}"
    if with_name and link.get("label"):
        text += f" ({link['label']})"
    return text
