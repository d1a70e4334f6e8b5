from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .adjacency import Adjacency, Neighbor


def connected_components(adj: Adjacency) -> List[List[str]]:
    """Breadth-first connected components, O(V + E)."""
    visited = set()
    components: List[List[str]] = []

    for start in adj:
        if start in visited:
            continue

        component = []
        queue = deque([start])
        visited.add(start)

        while queue:
            current = queue.popleft()
            component.append(current)
            for neighbor in adj[current]:
                if neighbor.node not in visited:
                    visited.add(neighbor.node)
                    queue.append(neighbor.node)

        components.append(component)

    return components


@dataclass(frozen=True)
class CutAnalysis:
    """Single points of failure found by one depth-first pass."""

    articulation_points: List[str] = field(default_factory=list)
    bridges: List[Mapping[str, Any]] = field(default_factory=list)


# A DFS frame: node, the neighbor entry used to reach it, remaining neighbors.
_Frame = Tuple[str, Optional[Neighbor], Iterator[Neighbor]]


def articulation_points_and_bridges(adj: Adjacency) -> CutAnalysis:
    """
    Tarjan's discovery-order / low-link pass with an explicit stack.

    - A non-root node u is an articulation point if some DFS child v has
      low[v] >= disc[u].
    - A DFS root is an articulation point only with more than one child.
    - The tree edge (u, v) is a bridge if low[v] > disc[u].

    The edge used to enter a node is skipped by link identity rather than
    by parent node, so a parallel link back to the parent still counts as
    a back edge and a doubled link is never reported as a bridge.

    Articulation points come back in discovery order; bridges in the
    order their subtrees finish.
    """
    disc: Dict[str, int] = {}
    low: Dict[str, int] = {}
    cut_nodes = set()
    bridges: List[Mapping[str, Any]] = []
    timer = 0

    for root in adj:
        if root in disc:
            continue

        disc[root] = low[root] = timer
        timer += 1
        root_children = 0
        stack: List[_Frame] = [(root, None, iter(adj[root]))]

        while stack:
            u, entry, neighbors = stack[-1]
            descended = False

            for neighbor in neighbors:
                if entry is not None and neighbor.edge == entry.edge:
                    continue

                v = neighbor.node
                if v not in disc:
                    disc[v] = low[v] = timer
                    timer += 1
                    if u == root:
                        root_children += 1
                    stack.append((v, neighbor, iter(adj[v])))
                    descended = True
                    break

                low[u] = min(low[u], disc[v])

            if descended:
                continue

            stack.pop()
            if not stack:
                break

            parent = stack[-1][0]
            low[parent] = min(low[parent], low[u])

            if low[u] > disc[parent]:
                bridges.append(entry.link)

            if parent != root and low[u] >= disc[parent]:
                cut_nodes.add(parent)

        if root_children > 1:
            cut_nodes.add(root)

    return CutAnalysis(
        articulation_points=sorted(cut_nodes, key=disc.__getitem__),
        bridges=bridges,
    )


def articulation_points(adj: Adjacency) -> List[str]:
    return articulation_points_and_bridges(adj).articulation_points


def bridges(adj: Adjacency) -> List[Mapping[str, Any]]:
    return articulation_points_and_bridges(adj).bridges
