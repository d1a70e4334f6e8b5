from dataclasses import dataclass, field
from typing import Dict, List

from .adjacency import Adjacency


@dataclass(frozen=True)
class DegreeDistribution:
    """
    Degree summary of an undirected multigraph.

    Degrees count link ends, so a parallel link adds one to each endpoint
    and a self loop adds two to its node.
    """

    degrees: Dict[str, int] = field(default_factory=dict)
    min: int = 0
    max: int = 0
    average: float = 0.0
    leaf_nodes: List[str] = field(default_factory=list)
    isolated_nodes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "min": self.min,
            "max": self.max,
            "average": self.average,
            "leaf_nodes": len(self.leaf_nodes),
            "isolated_nodes": len(self.isolated_nodes),
        }


def degree_distribution(adj: Adjacency) -> DegreeDistribution:
    degrees = {node: len(neighbors) for node, neighbors in adj.items()}
    if not degrees:
        return DegreeDistribution()

    values = list(degrees.values())
    return DegreeDistribution(
        degrees=degrees,
        min=min(values),
        max=max(values),
        average=round(sum(values) / len(values), 1),
        leaf_nodes=[n for n, d in degrees.items() if d == 1],
        isolated_nodes=[n for n, d in degrees.items() if d == 0],
    )


def min_connected_degree(distribution: DegreeDistribution) -> int:
    """Smallest degree among nodes that have at least one link."""
    connected = [d for d in distribution.degrees.values() if d > 0]
    return min(connected) if connected else 0


def redundancy_score(distribution: DegreeDistribution) -> str:
    """
    Coarse redundancy heuristic.

    "good"    every linked node has at least two link ends
    "partial" some linked node hangs off a single link
    "none"    nothing is linked at all
    """
    lowest = min_connected_degree(distribution)
    if lowest >= 2:
        return "good"
    if lowest == 1:
        return "partial"
    return "none"
