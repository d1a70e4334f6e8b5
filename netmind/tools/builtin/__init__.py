"""
Built-in tool catalogue.

Joins the declarative tool contracts with the server handlers and
produces the immutable ToolRegistry the agent is built with.

Usage
-----
from netmind.tools.builtin import build_default_registry

registry = build_default_registry()
"""

import logging
from typing import Any, Dict, Iterable, Mapping

from ..registry import RegistryError, ToolRegistry
from ..schema import CLIENT, SERVER, Tool
from ..validator import unsupported_keywords
from .canvas_tools import CLIENT_TOOL_DECLARATIONS
from .network_analysis import HANDLERS
from .server_tools import SERVER_TOOL_DECLARATIONS

logger = logging.getLogger(__name__)


def _tool(declaration: Dict[str, Any], resolution: str, handler=None) -> Tool:
    return Tool(
        name=declaration["name"],
        description=declaration["description"],
        input_schema=declaration["input_schema"],
        resolution=resolution,
        handler=handler,
        tags=tuple(declaration.get("tags", ())),
    )


def build_registry(
    server_declarations: Iterable[Dict[str, Any]],
    handlers: Mapping[str, Any],
    client_declarations: Iterable[Dict[str, Any]],
) -> ToolRegistry:
    """
    Assemble a registry and enforce that server declarations and
    handlers match one to one.

    Raises
    ------
    RegistryError
        A declared server tool has no handler, a handler has no
        declaration, or a name is declared twice.
    """
    server_declarations = list(server_declarations)
    declared = [d["name"] for d in server_declarations]

    missing = [name for name in declared if name not in handlers]
    if missing:
        raise RegistryError(f"Server tools without a handler: {missing}")

    orphaned = [name for name in handlers if name not in declared]
    if orphaned:
        raise RegistryError(f"Handlers without a server tool declaration: {orphaned}")

    tools = [_tool(d, SERVER, handlers[d["name"]]) for d in server_declarations]
    tools += [_tool(d, CLIENT) for d in client_declarations]

    for tool in tools:
        unchecked = unsupported_keywords(tool.input_schema)
        if unchecked:
            logger.warning(
                "[TOOL REGISTRY] %s uses schema keywords the validator ignores: %s",
                tool.name,
                unchecked,
            )

    try:
        return ToolRegistry(tools)
    except ValueError as e:
        raise RegistryError(str(e)) from e


def build_default_registry() -> ToolRegistry:
    return build_registry(SERVER_TOOL_DECLARATIONS, HANDLERS, CLIENT_TOOL_DECLARATIONS)


__all__ = [
    "CLIENT_TOOL_DECLARATIONS",
    "HANDLERS",
    "SERVER_TOOL_DECLARATIONS",
    "build_default_registry",
    "build_registry",
]
