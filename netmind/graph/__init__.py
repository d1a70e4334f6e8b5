"""
Pure graph analysis over a NetworkSnapshot.

Every function here is side-effect free and reads numeric fields through
`as_number`, so partially filled diagrams still produce finite results.
"""

from .numeric import as_number
from .adjacency import Adjacency, Neighbor, build_adjacency, link_label
from .connectivity import (
    CutAnalysis,
    articulation_points,
    articulation_points_and_bridges,
    bridges,
    connected_components,
)
from .degree import DegreeDistribution, degree_distribution, redundancy_score
from .flow import APPROXIMATION_NOTE, link_disjoint_paths
from .cost import cost_efficiency
from .geo import estimate_fiber_latency, haversine_km

__all__ = [
    "as_number",
    "Adjacency",
    "Neighbor",
    "build_adjacency",
    "link_label",
    "CutAnalysis",
    "articulation_points",
    "articulation_points_and_bridges",
    "bridges",
    "connected_components",
    "DegreeDistribution",
    "degree_distribution",
    "redundancy_score",
    "APPROXIMATION_NOTE",
    "link_disjoint_paths",
    "cost_efficiency",
    "estimate_fiber_latency",
    "haversine_km",
]
