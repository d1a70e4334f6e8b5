from collections import deque
from typing import Dict, List, Optional, Set, Tuple

from .adjacency import Adjacency

DEFAULT_MAX_ATTEMPTS = 20

APPROXIMATION_NOTE = (
    "Approximate count of link-disjoint paths found by repeated shortest-path "
    "search. This is not a capacity-weighted max-flow."
)


def _shortest_path_edges(
    adj: Adjacency,
    source: str,
    target: str,
    used: Set[int],
) -> Optional[List[int]]:
    """BFS over links not yet in `used`; returns the path as edge indices."""
    parent: Dict[str, Tuple[Optional[str], Optional[int]]] = {source: (None, None)}
    queue = deque([source])

    while queue:
        current = queue.popleft()
        if current == target:
            break
        for neighbor in adj[current]:
            if neighbor.edge in used or neighbor.node in parent:
                continue
            parent[neighbor.node] = (current, neighbor.edge)
            queue.append(neighbor.node)

    if target not in parent:
        return None

    edges = []
    node = target
    while True:
        previous, edge = parent[node]
        if previous is None:
            break
        edges.append(edge)
        node = previous
    return edges


def link_disjoint_paths(
    adj: Adjacency,
    source: str,
    target: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> int:
    """
    Greedy count of link-disjoint paths between two nodes.

    Each round takes a BFS shortest path and retires its links. Greedy
    choices can undercount compared to a true max-flow, hence the
    "approximate" label wherever the number is reported.
    """
    if source == target or source not in adj or target not in adj:
        return 0

    used: Set[int] = set()
    count = 0

    for _ in range(max_attempts):
        path = _shortest_path_edges(adj, source, target, used)
        if not path:
            break
        used.update(path)
        count += 1

    return count
