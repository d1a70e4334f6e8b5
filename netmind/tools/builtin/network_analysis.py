"""
Handlers for the server-resolved tools.

Each handler has the fixed signature `(tool_input, snapshot) -> result`
and is a pure function of its arguments: nothing here touches the canvas,
the network or any shared state. Results are JSON-compatible dicts that
are forwarded to the model verbatim.
"""

from collections import Counter
from typing import Any, Callable, Dict, List

from ...graph import (
    APPROXIMATION_NOTE,
    articulation_points_and_bridges,
    as_number,
    build_adjacency,
    connected_components,
    cost_efficiency,
    degree_distribution,
    estimate_fiber_latency,
    link_disjoint_paths,
    link_label,
    redundancy_score,
)
from ...graph.degree import min_connected_degree
from ...graph.numeric import tidy
from ...models import NetworkSnapshot

Handler = Callable[[Dict[str, Any], NetworkSnapshot], Dict[str, Any]]

EMPTY_LINKS = {"status": "empty", "message": "No links in the diagram to analyse."}

DESIGN_INSTRUCTION = (
    "Based on this analysis and the stated goal, provide specific, actionable "
    "design recommendations. Reference specific nodes by label when suggesting "
    "new links or modifications. If the user needs new nodes, specify "
    "recommended labels, types, and connections."
)


def _bandwidth(link) -> float:
    return as_number(link.get("bandwidth_gbps"))


def _price(link) -> float:
    return as_number(link.get("price_usd"))


def _tags(item) -> List[str]:
    tags = item.get("tags")
    if not isinstance(tags, list):
        return []
    return [t for t in tags if isinstance(t, str)]


def _text(value) -> str:
    return value.lower() if isinstance(value, str) else ""


# ============================================================
# REASONING
# ============================================================

def think(tool_input: Dict[str, Any], snapshot: NetworkSnapshot) -> Dict[str, Any]:
    return {"status": "ok", "message": "Internal reasoning noted. Proceed with your plan."}


# ============================================================
# STATISTICS
# ============================================================

def get_diagram_stats(tool_input: Dict[str, Any], snapshot: NetworkSnapshot) -> Dict[str, Any]:
    nodes, links = snapshot.nodes, snapshot.links

    total_latency = sum(as_number(l.get("latency_ms")) for l in links)
    average_latency = round(total_latency / len(links), 1) if links else 0

    unique_tags: Dict[str, None] = {}
    for item in nodes + links:
        for tag in _tags(item):
            unique_tags.setdefault(tag, None)

    # actual links / n*(n-1)/2
    max_links = len(nodes) * (len(nodes) - 1) / 2 if len(nodes) > 1 else 0
    density = round(len(links) / max_links, 3) if max_links else 0

    return {
        "node_count": len(nodes),
        "link_count": len(links),
        "group_count": len(snapshot.groups),
        "total_bandwidth_gbps": tidy(sum(_bandwidth(l) for l in links)),
        "average_latency_ms": tidy(average_latency),
        "total_monthly_cost_usd": tidy(sum(_price(l) for l in links)),
        "network_density": tidy(density),
        "technologies": dict(Counter(l.get("technology") or "unspecified" for l in links)),
        "node_types": dict(Counter(n.get("type") or "city" for n in nodes)),
        "unique_tags": list(unique_tags),
    }


# ============================================================
# TOPOLOGY
# ============================================================

def analyse_topology(tool_input: Dict[str, Any], snapshot: NetworkSnapshot) -> Dict[str, Any]:
    labels = snapshot.labels()
    adj = build_adjacency(snapshot)
    components = connected_components(adj)
    cuts = articulation_points_and_bridges(adj)
    degrees = degree_distribution(adj)
    min_degree = min_connected_degree(degrees)

    cut_labels = [labels.get(n, n) for n in cuts.articulation_points]
    bridge_labels = [link_label(l, labels, with_name=True) for l in cuts.bridges]

    result: Dict[str, Any] = {
        "is_connected": len(components) <= 1,
        "connected_components": len(components),
        "component_sizes": [len(c) for c in components],
        "articulation_points": cut_labels,
        "articulation_point_count": len(cut_labels),
        "bridge_links": bridge_labels,
        "bridge_count": len(bridge_labels),
        "degree_distribution": degrees.to_dict(),
        "redundancy_score": redundancy_score(degrees),
        "min_node_degree": min_degree,
    }

    if tool_input.get("include_recommendations") is False:
        return result

    recommendations = []
    if not result["is_connected"]:
        recommendations.append(
            f"Network is disconnected ({len(components)} components). "
            "Add links to connect isolated segments."
        )
    if cut_labels:
        recommendations.append(
            f"{len(cut_labels)} single points of failure: {', '.join(cut_labels)}. "
            "Add bypass links to eliminate these."
        )
    if bridge_labels:
        recommendations.append(
            f"{len(bridge_labels)} bridge link(s) with no redundancy: "
            f"{'; '.join(bridge_labels)}. Add parallel paths."
        )
    if degrees.leaf_nodes:
        leaves = [labels.get(n, n) for n in degrees.leaf_nodes]
        recommendations.append(
            f"{len(leaves)} leaf node(s) (single connection): {', '.join(leaves)}. "
            "Consider adding second links for resilience."
        )
    if min_degree >= 2 and not cut_labels and not bridge_labels:
        recommendations.append(
            "Network topology has good redundancy. No single points of failure detected."
        )

    result["recommendations"] = recommendations
    return result


# ============================================================
# CAPACITY
# ============================================================

def analyse_capacity(tool_input: Dict[str, Any], snapshot: NetworkSnapshot) -> Dict[str, Any]:
    links = snapshot.links
    if not links:
        return dict(EMPTY_LINKS)

    labels = snapshot.labels()
    with_bandwidth = [l for l in links if _bandwidth(l) > 0]

    total = sum(_bandwidth(l) for l in links)
    average = round(total / len(links), 1)

    by_technology: Dict[str, float] = {}
    for link in links:
        tech = link.get("technology") or "unspecified"
        by_technology[tech] = tidy(by_technology.get(tech, 0) + _bandwidth(link))

    def _row(link) -> Dict[str, Any]:
        bandwidth = _bandwidth(link)
        return {
            "link": link_label(link, labels),
            "bandwidth_gbps": tidy(bandwidth),
            "ratio_to_avg": round(bandwidth / average, 1) if average else 0,
        }

    bottlenecks = sorted(with_bandwidth, key=_bandwidth)[:5]

    result: Dict[str, Any] = {
        "total_bandwidth_gbps": tidy(total),
        "average_bandwidth_gbps": tidy(average),
        "links_with_bandwidth": len(with_bandwidth),
        "links_without_bandwidth": len(links) - len(with_bandwidth),
        "bottleneck_links": [
            {
                "link": link_label(l, labels),
                "label": l.get("label") or "",
                "bandwidth_gbps": tidy(_bandwidth(l)),
            }
            for l in bottlenecks
        ],
        "bandwidth_by_technology": by_technology,
        "overprovisioned_links": [
            _row(l) for l in with_bandwidth if _bandwidth(l) > average * 10
        ],
        "underprovisioned_links": [
            _row(l) for l in with_bandwidth if _bandwidth(l) < average * 0.1
        ],
    }

    source = tool_input.get("source_node_id")
    target = tool_input.get("target_node_id")
    if source and target:
        result["max_flow_estimate"] = {
            "source": labels.get(source, source),
            "target": labels.get(target, target),
            "link_disjoint_paths": link_disjoint_paths(build_adjacency(snapshot), source, target),
            "method": APPROXIMATION_NOTE,
        }

    return result


# ============================================================
# COST
# ============================================================

def analyse_cost(tool_input: Dict[str, Any], snapshot: NetworkSnapshot) -> Dict[str, Any]:
    links = snapshot.links
    if not links:
        return dict(EMPTY_LINKS)

    labels = snapshot.labels()
    priced = [l for l in links if _price(l) > 0]
    total_cost = sum(_price(l) for l in priced)
    priced_bandwidth = sum(_bandwidth(l) for l in priced)

    by_technology: Dict[str, float] = {}
    for link in priced:
        tech = link.get("technology") or "unspecified"
        by_technology[tech] = tidy(by_technology.get(tech, 0) + _price(link))

    efficiency = cost_efficiency(priced, labels)

    return {
        "total_monthly_cost_usd": tidy(total_cost),
        "total_annual_cost_usd": tidy(total_cost * 12),
        "links_with_cost_data": len(priced),
        "links_without_cost_data": len(links) - len(priced),
        "average_cost_per_gbps": (
            round(total_cost / priced_bandwidth, 2) if priced_bandwidth > 0 else None
        ),
        "cost_by_technology": by_technology,
        "most_cost_effective": efficiency[:3],
        "least_cost_effective": list(reversed(efficiency[-3:])),
    }


# ============================================================
# GEOGRAPHY
# ============================================================

def estimate_latency(tool_input: Dict[str, Any], snapshot: NetworkSnapshot) -> Dict[str, Any]:
    return estimate_fiber_latency(
        tool_input.get("lat1"),
        tool_input.get("lon1"),
        tool_input.get("lat2"),
        tool_input.get("lon2"),
        route_factor=tool_input.get("cable_route_factor"),
        route=tool_input.get("route_type") or "terrestrial",
    )


# ============================================================
# SEARCH
# ============================================================

def find_nodes(tool_input: Dict[str, Any], snapshot: NetworkSnapshot) -> Dict[str, Any]:
    matches = list(snapshot.nodes)

    query = _text(tool_input.get("query"))
    if query:
        matches = [
            n for n in matches
            if query in _text(n.get("label")) or query in _text(n.get("id"))
        ]

    node_type = tool_input.get("type")
    if node_type:
        matches = [n for n in matches if (n.get("type") or "city") == node_type]

    tag = tool_input.get("tag")
    if tag:
        matches = [n for n in matches if tag in _tags(n)]

    datacenter = _text(tool_input.get("datacenter"))
    if datacenter:
        matches = [n for n in matches if datacenter in _text(n.get("datacenter"))]

    return {
        "count": len(matches),
        "nodes": [
            {
                "id": n.get("id"),
                "label": n.get("label"),
                "type": n.get("type") or "city",
                "tags": _tags(n),
                "datacenter": n.get("datacenter") or None,
            }
            for n in matches
        ],
    }


# ============================================================
# DESIGN
# ============================================================

def suggest_design(tool_input: Dict[str, Any], snapshot: NetworkSnapshot) -> Dict[str, Any]:
    labels = snapshot.labels()
    links = snapshot.links
    adj = build_adjacency(snapshot)
    components = connected_components(adj)
    cuts = articulation_points_and_bridges(adj)
    degrees = degree_distribution(adj)

    technologies: Dict[str, None] = {}
    for link in links:
        if link.get("technology"):
            technologies.setdefault(link["technology"], None)

    return {
        "goal": tool_input.get("goal"),
        "constraints": tool_input.get("constraints") or {},
        "current_analysis": {
            "node_count": len(snapshot.nodes),
            "link_count": len(links),
            "is_connected": len(components) <= 1,
            "components": len(components),
            "articulation_points": [labels.get(n, n) for n in cuts.articulation_points],
            "bridges": [link_label(l, labels) for l in cuts.bridges],
            "degree_distribution": degrees.to_dict(),
            "redundancy_score": redundancy_score(degrees),
            "total_bandwidth_gbps": tidy(sum(_bandwidth(l) for l in links)),
            "total_monthly_cost_usd": tidy(sum(_price(l) for l in links)),
            "technologies_used": list(technologies),
        },
        "instruction": DESIGN_INSTRUCTION,
    }


HANDLERS: Dict[str, Handler] = {
    "think": think,
    "get_diagram_stats": get_diagram_stats,
    "analyse_topology": analyse_topology,
    "analyse_capacity": analyse_capacity,
    "analyse_cost": analyse_cost,
    "estimate_latency": estimate_latency,
    "find_nodes": find_nodes,
    "suggest_design": suggest_design,
}
