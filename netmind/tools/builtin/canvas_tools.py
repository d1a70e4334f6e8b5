"""
Declarations of the client-resolved (canvas) tools.

These tools have no server-side implementation. A call is validated
against its schema and then handed to the canvas, which reports the
outcome back on the next request.
"""

from typing import Any, Dict, List


def _object(properties: Dict[str, Any], required=()) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": list(required)}


_STRING = {"type": "string"}
_NUMBER = {"type": "number"}
_BOOLEAN = {"type": "boolean"}
_STRINGS = {"type": "array", "items": {"type": "string"}}

_PATH_FILTERS = {
    "requiredNodeTags": _STRINGS,
    "excludedNodeTags": _STRINGS,
    "requiredLinkTags": _STRINGS,
    "excludedLinkTags": _STRINGS,
    "mustUseNodes": _STRINGS,
}


CLIENT_TOOL_DECLARATIONS: List[Dict[str, Any]] = [
    # -------------------------
    # Routing
    # -------------------------
    {
        "name": "run_pathfinder",
        "description": (
            "Headless pathfinder: compute K-shortest primary paths and optionally a "
            "fully-diverse protection path. Returns detailed route data. Use whenever "
            "the user asks for routes, connectivity, paths, or latency analysis "
            "between two points."
        ),
        "input_schema": _object(
            {
                "originNodeId": {"type": "string", "description": "Source node ID"},
                "destNodeId": {"type": "string", "description": "Destination node ID"},
                "k": {"type": "number", "description": "Number of shortest paths (default 3)"},
                "calculateProtection": {
                    "type": "boolean",
                    "description": "Compute link-diverse protection path (default false)",
                },
                "primaryFilters": {
                    "type": "object",
                    "description": "Optional filters for primary paths",
                    "properties": dict(
                        _PATH_FILTERS,
                        mustUseLinks=_STRINGS,
                        minCapacityGbps=_NUMBER,
                        maxLatencyMs=_NUMBER,
                        preferMLG=_BOOLEAN,
                        optimizeCost=_BOOLEAN,
                    ),
                },
                "protectionFilters": {
                    "type": "object",
                    "description": "Optional filters for protection path",
                    "properties": dict(
                        _PATH_FILTERS,
                        enforceFullDiversity={
                            "type": "boolean",
                            "description": "100% link-disjoint from primary (default true)",
                        },
                    ),
                },
            },
            required=("originNodeId", "destNodeId"),
        ),
        "tags": ("routing",),
    },
    # -------------------------
    # Canvas editing
    # -------------------------
    {
        "name": "create_node",
        "description": "Create a new node on the canvas. Returns the new node ID.",
        "input_schema": _object(
            {
                "label": {"type": "string", "description": "Display name"},
                "type": {
                    "type": "string",
                    "enum": [
                        "city",
                        "datacenter",
                        "submarine_cable_landing",
                        "exchange_point",
                        "custom",
                    ],
                },
                "x": {"type": "number", "description": "Canvas X (optional, auto-positions)"},
                "y": {"type": "number", "description": "Canvas Y (optional, auto-positions)"},
                "tags": _STRINGS,
                "datacenter": _STRING,
                "address": _STRING,
            },
            required=("label",),
        ),
        "tags": ("canvas", "edit"),
    },
    {
        "name": "create_link",
        "description": "Create a link between two existing nodes.",
        "input_schema": _object(
            {
                "sourceNodeId": _STRING,
                "targetNodeId": _STRING,
                "label": _STRING,
                "latency_ms": _NUMBER,
                "bandwidth_gbps": _NUMBER,
                "price_usd": _NUMBER,
                "technology": {
                    "type": "string",
                    "enum": ["fiber", "subsea", "microwave", "satellite"],
                },
                "tags": _STRINGS,
            },
            required=("sourceNodeId", "targetNodeId"),
        ),
        "tags": ("canvas", "edit"),
    },
    {
        "name": "edit_node",
        "description": "Edit properties of an existing node.",
        "input_schema": _object(
            {
                "nodeId": _STRING,
                "label": _STRING,
                "type": _STRING,
                "x": _NUMBER,
                "y": _NUMBER,
                "tags": _STRINGS,
                "datacenter": _STRING,
                "address": _STRING,
            },
            required=("nodeId",),
        ),
        "tags": ("canvas", "edit"),
    },
    {
        "name": "edit_link",
        "description": "Edit properties of an existing link.",
        "input_schema": _object(
            {
                "linkId": _STRING,
                "label": _STRING,
                "latency_ms": _NUMBER,
                "bandwidth_gbps": _NUMBER,
                "price_usd": _NUMBER,
                "technology": _STRING,
                "tags": _STRINGS,
            },
            required=("linkId",),
        ),
        "tags": ("canvas", "edit"),
    },
    {
        "name": "delete_node",
        "description": "Delete a node and all its connected links.",
        "input_schema": _object({"nodeId": _STRING}, required=("nodeId",)),
        "tags": ("canvas", "edit"),
    },
    {
        "name": "delete_link",
        "description": "Delete a specific link.",
        "input_schema": _object({"linkId": _STRING}, required=("linkId",)),
        "tags": ("canvas", "edit"),
    },
    {
        "name": "create_full_mesh",
        "description": "Create links between ALL pairs of given nodes (full mesh topology).",
        "input_schema": _object(
            {
                "nodeIds": _STRINGS,
                "default_bandwidth_gbps": _NUMBER,
                "default_latency_ms": _NUMBER,
                "technology": _STRING,
            },
            required=("nodeIds",),
        ),
        "tags": ("canvas", "edit"),
    },
    {
        "name": "assign_datacenter",
        "description": "Assign a datacenter to a node.",
        "input_schema": _object(
            {"nodeId": _STRING, "datacenter_name": _STRING},
            required=("nodeId", "datacenter_name"),
        ),
        "tags": ("canvas", "edit"),
    },
    # -------------------------
    # Visualisation
    # -------------------------
    {
        "name": "show_heatmap",
        "description": "Activate a heatmap overlay (bandwidth, cost) or turn it off.",
        "input_schema": _object(
            {"mode": {"type": "string", "enum": ["bandwidth", "cost", "off"]}},
            required=("mode",),
        ),
        "tags": ("canvas", "view"),
    },
    {
        "name": "highlight_path",
        "description": "Highlight a path on the canvas with colour-coded links and nodes.",
        "input_schema": _object(
            {
                "node_sequence": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Ordered node IDs forming the path",
                },
                "color": {"type": "string", "description": "Hex colour (e.g. \"#22c55e\")"},
                "label": _STRING,
                "is_protection": _BOOLEAN,
            },
            required=("node_sequence",),
        ),
        "tags": ("canvas", "view"),
    },
    # -------------------------
    # Panels
    # -------------------------
    {
        "name": "open_cable_visor",
        "description": "Open the Cable Visor panel to browse submarine cable systems.",
        "input_schema": _object(
            {"cable_name": {"type": "string", "description": "Optional cable name filter"}}
        ),
        "tags": ("panel",),
    },
    {
        "name": "open_datacenter_visor",
        "description": "Open the Datacenter Visor to browse and add datacenters.",
        "input_schema": _object({"search": _STRING}),
        "tags": ("panel",),
    },
    {
        "name": "open_pathfinder",
        "description": (
            "LEGACY: opens the Pathfinder UI panel. Prefer run_pathfinder for "
            "headless computation."
        ),
        "input_schema": _object(
            {"origin": _STRING, "destination": _STRING, "run_calculation": _BOOLEAN}
        ),
        "tags": ("panel",),
    },
    {
        "name": "open_kml_studio",
        "description": "Open the KML Studio for importing KML/GeoJSON data.",
        "input_schema": _object({}),
        "tags": ("panel",),
    },
    # -------------------------
    # Filters
    # -------------------------
    {
        "name": "filter_by_tag",
        "description": "Filter the diagram to show only nodes/links with specific tags.",
        "input_schema": _object(
            {"tags": _STRINGS, "mode": {"type": "string", "enum": ["include", "exclude"]}},
            required=("tags",),
        ),
        "tags": ("filter",),
    },
    {
        "name": "filter_by_cable_system",
        "description": "Filter diagram to show nodes/links in a specific cable system.",
        "input_schema": _object(
            {"cable_system_name": _STRING}, required=("cable_system_name",)
        ),
        "tags": ("filter",),
    },
    {
        "name": "filter_by_nodes_or_containers",
        "description": "Filter diagram by node type or container.",
        "input_schema": _object({"node_types": _STRINGS, "container_id": _STRING}),
        "tags": ("filter",),
    },
    {
        "name": "filter_map",
        "description": "Apply map filters (region, technology, provider).",
        "input_schema": _object(
            {"region": _STRING, "technology": _STRING, "provider": _STRING}
        ),
        "tags": ("filter",),
    },
    {
        "name": "clear_all_filters",
        "description": "Clear all active filters and show the full diagram.",
        "input_schema": _object({}),
        "tags": ("filter",),
    },
    # -------------------------
    # Information
    # -------------------------
    {
        "name": "show_route_map",
        "description": "Show or toggle the geographic map view.",
        "input_schema": _object({}),
        "tags": ("view",),
    },
    {
        "name": "get_link_info",
        "description": "Get detailed information about a specific link.",
        "input_schema": _object({"link_id": _STRING}, required=("link_id",)),
        "tags": ("info",),
    },
    {
        "name": "get_network_summary",
        "description": "Get a high-level network diagram summary.",
        "input_schema": _object({}),
        "tags": ("info",),
    },
    {
        "name": "show_route_price",
        "description": "Show pricing for a route between two nodes.",
        "input_schema": _object({"origin": _STRING, "destination": _STRING}),
        "tags": ("info",),
    },
    {
        "name": "create_network_diagram",
        "description": "Open the network data table editor.",
        "input_schema": _object({}),
        "tags": ("panel",),
    },
]
