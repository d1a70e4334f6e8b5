"""
Declarations of the server-resolved tools.

Only the model-facing contract lives here; the handlers are in
`network_analysis` and are joined with these declarations by
`build_default_registry`.
"""

from typing import Any, Dict, List

_EMPTY: Dict[str, Any] = {"type": "object", "properties": {}, "required": []}


SERVER_TOOL_DECLARATIONS: List[Dict[str, Any]] = [
    # -------------------------
    # Planning
    # -------------------------
    {
        "name": "think",
        "description": (
            "Internal reasoning scratchpad. Use this to plan multi-step actions, "
            "analyse the diagram state, or reason about complex network design "
            "decisions BEFORE taking action. The user does not see this. Use it "
            "when the request is complex and requires planning."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "reasoning": {
                    "type": "string",
                    "description": "Your internal reasoning, analysis, or step-by-step plan",
                },
            },
            "required": ["reasoning"],
        },
        "tags": ("planning",),
    },
    # -------------------------
    # Network analysis
    # -------------------------
    {
        "name": "analyse_topology",
        "description": (
            "Deep server-side topology analysis. Returns connectivity (is the graph "
            "connected?), redundancy score, single points of failure (articulation "
            "points and bridges) and degree distribution. Use when the user asks "
            "about network resilience, redundancy, or topology quality."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "include_recommendations": {
                    "type": "boolean",
                    "description": "Include improvement recommendations (default true)",
                },
            },
            "required": [],
        },
        "tags": ("analysis", "topology"),
    },
    {
        "name": "analyse_capacity",
        "description": (
            "Analyse network capacity: identify bottleneck links, aggregate bandwidth "
            "by technology, find over/under-provisioned segments, and estimate the "
            "number of link-disjoint paths between two nodes. Use when the user asks "
            "about capacity planning, bottlenecks, or bandwidth."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "source_node_id": {
                    "type": "string",
                    "description": "Optional: estimate disjoint paths from this node",
                },
                "target_node_id": {
                    "type": "string",
                    "description": "Optional: estimate disjoint paths to this node",
                },
            },
            "required": [],
        },
        "tags": ("analysis", "capacity"),
    },
    {
        "name": "analyse_cost",
        "description": (
            "Analyse network cost: total monthly cost, cost per Gbps, cost "
            "distribution by technology, and the most/least cost-effective links."
        ),
        "input_schema": _EMPTY,
        "tags": ("analysis", "cost"),
    },
    {
        "name": "estimate_latency",
        "description": (
            "Estimate fiber-optic latency between two geographic coordinates using "
            "great-circle distance and standard fiber propagation delay (4.9 µs/km). "
            "Useful when the user wants to set realistic latency values for new links."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "lat1": {"type": "number", "description": "Latitude of point A"},
                "lon1": {"type": "number", "description": "Longitude of point A"},
                "lat2": {"type": "number", "description": "Latitude of point B"},
                "lon2": {"type": "number", "description": "Longitude of point B"},
                "cable_route_factor": {
                    "type": "number",
                    "description": (
                        "Multiplier for cable route vs straight line "
                        "(default 1.3 for terrestrial, 1.5 for subsea)"
                    ),
                },
                "route_type": {
                    "type": "string",
                    "enum": ["terrestrial", "subsea"],
                    "description": "Selects the default route factor (default terrestrial)",
                },
            },
            "required": ["lat1", "lon1", "lat2", "lon2"],
        },
        "tags": ("analysis", "geo"),
    },
    {
        "name": "get_diagram_stats",
        "description": (
            "Return diagram statistics: node count, link count, total bandwidth, "
            "average latency, technology breakdown, tag distribution, and network "
            "density metrics."
        ),
        "input_schema": _EMPTY,
        "tags": ("analysis",),
    },
    {
        "name": "find_nodes",
        "description": (
            "Search for nodes in the current diagram by label, type, tag, or "
            "datacenter. Returns matching node IDs and labels. Use this to resolve "
            "user references like \"all European cities\" or \"nodes tagged "
            "backbone\" before performing operations."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search text matched against label and id"},
                "type": {"type": "string", "description": "Filter by node type"},
                "tag": {"type": "string", "description": "Filter by tag"},
                "datacenter": {"type": "string", "description": "Filter by datacenter name"},
            },
            "required": [],
        },
        "tags": ("search",),
    },
    {
        "name": "suggest_design",
        "description": (
            "Generate network design suggestions based on requirements. Analyses the "
            "current topology and returns the context needed to recommend "
            "improvements: where to add redundancy, where to place a new PoP, link "
            "capacities, and cost-effective architectures. Use when the user asks "
            "\"what should I do\" or \"how to improve\" the network."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "goal": {
                    "type": "string",
                    "description": (
                        "The design goal (e.g. \"add redundancy to Europe\", "
                        "\"connect to Asia with < 200ms\", \"minimize cost\")"
                    ),
                },
                "constraints": {
                    "type": "object",
                    "description": "Optional constraints",
                    "properties": {
                        "max_latency_ms": {"type": "number"},
                        "min_bandwidth_gbps": {"type": "number"},
                        "max_monthly_cost_usd": {"type": "number"},
                        "required_regions": {"type": "array", "items": {"type": "string"}},
                        "technology_preference": {"type": "string"},
                    },
                },
            },
            "required": ["goal"],
        },
        "tags": ("design",),
    },
]
