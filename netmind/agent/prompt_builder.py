from typing import Any, List, Optional

from ..graph.numeric import as_number, tidy
from ..memory import ConversationMemory
from ..models import NetworkSnapshot


SYSTEM_PROMPT_BASE = """You are NetMind, an expert AI solutions architect and network engineer embedded in a professional network diagram, submarine cable mapping, and topology design studio.

You are a PROACTIVE agent that ALWAYS executes actions rather than merely describing them. When asked to create, modify, analyse, or route, you DO it immediately with tool calls.

## Core Identity
- You think step-by-step for complex tasks, breaking them into a clear plan before executing
- You can handle multi-step, multi-tool workflows autonomously
- You reflect on results and correct course if something fails
- You provide expert-level network engineering analysis

## Capabilities

### Canvas Operations
- Create, edit, delete nodes (cities, datacenters, submarine cable landings, exchange points)
- Create, edit, delete links with latency, bandwidth, pricing, and technology attributes
- Create full mesh topologies between node sets
- Assign datacenters to nodes

### Routing & Analysis
- Run headless K-shortest-path computations with constraint-based filtering
- Compute fully link-diverse protection paths
- Analyse network topology (redundancy, single points of failure, capacity bottlenecks)
- Estimate latency based on geographic distance

### Visualisation
- Show bandwidth or cost heatmap overlays on the canvas
- Highlight computed paths with colour-coding (primary vs protection)
- Open Cable Visor (submarine cable map), Datacenter Visor, KML Studio

### Network Intelligence (server-side)
- Topology analysis: connectivity, redundancy score, single points of failure
- Capacity planning: bottleneck detection, aggregate bandwidth by technology
- Cost optimisation: cost per Gbps, total network cost
- Geographic analysis: estimate fiber latency from coordinates

## Tool Usage Rules
1. ALWAYS use node IDs (not labels) in tool parameters
2. Use the diagram state to resolve user references ("Madrid", "the Frankfurt node") to node IDs
3. For nodes without specified positions, omit x/y; the frontend auto-positions them
4. When asked for a route, identify matching node IDs first, then call run_pathfinder
5. For complex multi-step tasks, execute tools sequentially and confirm each step before proceeding
6. If a tool fails, analyse the error and try an alternative approach

## Narrating Results
- Pathfinder: list hops by node LABEL (not ID), total latency, hop count, diversity confirmation
- Topology analysis: explain findings in network engineering terms with actionable recommendations
- After canvas actions: confirm what was done in a brief, professional sentence

## Multi-Step Task Handling
For complex requests (e.g. "design a ring topology connecting 5 European cities"):
1. State the plan briefly
2. Execute each step with tool calls
3. Confirm completion with a summary

## Error Recovery
- If a tool call fails, analyse why and attempt an alternative
- If a node referenced by the user doesn't exist, offer to create it
- If pathfinder returns no path, explain the topology gap and suggest fixes"""

EMPTY_CANVAS = "The canvas is empty. No nodes or links yet."


def _num(value: Any) -> Any:
    return tidy(as_number(value))


def _tag_list(item) -> str:
    tags = item.get("tags")
    if not isinstance(tags, list) or not tags:
        return ""
    return ",".join(str(t) for t in tags)


class SystemPromptBuilder:
    """
    Builds the system prompt for one run: base instructions, then the
    compacted conversation memory, then a line-oriented rendering of the
    diagram snapshot.
    """

    def __init__(self, base: str = SYSTEM_PROMPT_BASE) -> None:
        self._base = base

    def build(
        self,
        snapshot: NetworkSnapshot,
        memory: Optional[ConversationMemory] = None,
    ) -> str:

        sections = [self._base]

        if memory is not None and memory.summary:
            sections.append(f"## Conversation Memory\n{memory.summary}")
        if memory is not None and memory.key_facts:
            facts = "\n".join(f"- {fact}" for fact in memory.key_facts)
            sections.append(f"Key facts from this session:\n{facts}")

        if snapshot.is_empty:
            sections.append(f"## Current Diagram State\n{EMPTY_CANVAS}")
            return "\n\n".join(sections)

        node_lines = [self._node_line(n) for n in snapshot.nodes]
        link_lines = [self._link_line(l) for l in snapshot.links]

        state = (
            "## Current Diagram State\n\n"
            f"Nodes ({len(node_lines)}):\n"
            + ("\n".join(node_lines) or "  (none)")
            + f"\n\nLinks ({len(link_lines)}):\n"
            + ("\n".join(link_lines) or "  (none)")
        )
        sections.append(state)

        if snapshot.groups:
            group_lines = "\n".join(self._group_line(g) for g in snapshot.groups)
            sections.append(f"Groups ({len(snapshot.groups)}):\n{group_lines}")

        sections.append(f"Selected: {self._selection(snapshot)}")

        return "\n\n".join(sections)

    # ------------------------------------------------------------------
    # Line Renderers
    # ------------------------------------------------------------------

    @staticmethod
    def _node_line(node) -> str:
        line = f"  {node.get('id')}|{node.get('label')}|{node.get('type') or 'city'}"

        tags = _tag_list(node)
        if tags:
            line += f"|tags:[{tags}]"
        if node.get("datacenter"):
            line += f" dc:{node['datacenter']}"
        if node.get("x") is not None and node.get("y") is not None:
            line += f" pos:({round(as_number(node['x']))},{round(as_number(node['y']))})"

        return line

    @staticmethod
    def _link_line(link) -> str:
        source, target = NetworkSnapshot.endpoints(link)
        parts: List[str] = [f"{link.get('id')}|{source}→{target}"]

        if link.get("label"):
            parts.append(str(link["label"]))
        if as_number(link.get("latency_ms")):
            parts.append(f"lat:{_num(link['latency_ms'])}ms")
        if as_number(link.get("bandwidth_gbps")):
            parts.append(f"bw:{_num(link['bandwidth_gbps'])}G")
        if as_number(link.get("price_usd")):
            parts.append(f"${_num(link['price_usd'])}/mo")
        if link.get("technology"):
            parts.append(str(link["technology"]))

        tags = _tag_list(link)
        if tags:
            parts.append(f"tags:[{tags}]")

        return "  " + "|".join(parts)

    @staticmethod
    def _group_line(group) -> str:
        members = group.get("nodes") if isinstance(group.get("nodes"), list) else []
        return (
            f"  {group.get('id')}|{group.get('label')}|{group.get('type')}"
            f"|members:[{','.join(str(m) for m in members)}]"
        )

    @staticmethod
    def _selection(snapshot: NetworkSnapshot) -> str:
        selected = []
        if snapshot.selected_node_id:
            selected.append(f"node={snapshot.selected_node_id}")
        if snapshot.selected_link_id:
            selected.append(f"link={snapshot.selected_link_id}")
        return ", ".join(selected) if selected else "none"
