from __future__ import annotations

from copy import deepcopy
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping
import logging

from .schema import Tool

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when a registry cannot be assembled consistently."""


class ToolRegistry:
    """
    Authoritative, immutable catalogue of the tools offered to the model.

    This forms the capability boundary: if a tool is not registered here,
    the model cannot call it and the executor refuses it. The registry is
    built once and injected; there is no registration after construction.
    """

    def __init__(self, tools: Iterable[Tool]) -> None:
        table: Dict[str, Tool] = {}

        for tool in tools:
            if not isinstance(tool, Tool):
                raise TypeError(f"Expected Tool, got {type(tool).__name__}.")
            if tool.name in table:
                raise ValueError(f"Tool '{tool.name}' is already registered.")
            table[tool.name] = tool
            logger.debug(tool.to_debug_string())

        self._tools: Mapping[str, Tool] = MappingProxyType(table)

        logger.info(
            "[TOOL REGISTRY] Initialized | total=%d | server=%d | client=%d",
            len(table),
            len(self.server_tool_names()),
            len(self.client_tool_names()),
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, tool_name: str) -> Tool:
        try:
            return self._tools[tool_name]
        except KeyError:
            logger.error(
                "[TOOL REGISTRY] Lookup FAILED: %s | available=%d tools",
                tool_name,
                len(self._tools),
            )
            raise KeyError(f"Tool '{tool_name}' is not registered.") from None

    def has_tool(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def list_tools(self) -> List[Tool]:
        return list(self._tools.values())

    def list_tool_names(self) -> List[str]:
        return list(self._tools)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolution_of(self, tool_name: str) -> str:
        return self.get(tool_name).resolution

    def is_server_tool(self, tool_name: str) -> bool:
        tool = self._tools.get(tool_name)
        return tool is not None and tool.is_server

    def is_client_tool(self, tool_name: str) -> bool:
        tool = self._tools.get(tool_name)
        return tool is not None and tool.is_client

    def server_tool_names(self) -> List[str]:
        return [t.name for t in self._tools.values() if t.is_server]

    def client_tool_names(self) -> List[str]:
        return [t.name for t in self._tools.values() if t.is_client]

    # ------------------------------------------------------------------
    # Schema Access
    # ------------------------------------------------------------------

    def get_input_schema(self, tool_name: str) -> Dict[str, Any]:
        return deepcopy(self.get(tool_name).input_schema)

    # ------------------------------------------------------------------
    # LLM Integration
    # ------------------------------------------------------------------

    def llm_manifest(self) -> List[Dict[str, Any]]:
        """Tool list in declaration order, shaped for the Messages API."""
        return [deepcopy(tool.to_manifest_entry()) for tool in self._tools.values()]
