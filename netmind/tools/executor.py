from __future__ import annotations

import time
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from .registry import ToolRegistry
from ..models import NetworkSnapshot, ToolCall, ToolResult
from .validator import ArgumentValidator, ArgumentValidationError

logger = logging.getLogger(__name__)


class ToolExecutor:
    """
    Server-side resolution boundary for tool calls.

    Nothing raised by lookup, validation or a handler escapes `execute`:
    every failure becomes a `{"status": "error", "message": ...}` result
    the model can read and react to.
    """

    def __init__(self, registry: ToolRegistry, max_parallel_tools: int = 5) -> None:
        if max_parallel_tools <= 0:
            raise ValueError("max_parallel_tools must be positive.")
        self._registry = registry
        self._arg_validator = ArgumentValidator(registry)
        self._max_parallel = max_parallel_tools

    # ============================================================
    # PRE-FLIGHT
    # ============================================================

    def check(self, call: ToolCall) -> Optional[ToolResult]:
        """
        Error result for a call that must not proceed (unknown tool or
        invalid arguments), None when the call is well-formed.
        """
        if not self._registry.has_tool(call.name):
            logger.warning("[EXECUTOR] Unknown tool requested: %s", call.name)
            return self._error_result(call, f"Unknown tool: {call.name}")

        try:
            self._arg_validator.validate(call.name, call.input)
        except ArgumentValidationError as e:
            logger.warning("[EXECUTOR] Invalid arguments for %s: %s", call.name, e)
            return self._error_result(call, f"Invalid arguments: {e}")

        return None

    # ============================================================
    # MAIN EXECUTION
    # ============================================================

    def execute(self, call: ToolCall, snapshot: NetworkSnapshot) -> ToolResult:

        start = time.monotonic()

        rejected = self.check(call)
        if rejected is not None:
            return rejected

        tool = self._registry.get(call.name)
        if not tool.is_server:
            return self._error_result(
                call,
                f"Tool '{call.name}' runs on the canvas and cannot be resolved by the server.",
            )

        try:
            output = tool.handler(dict(call.input), snapshot)
        except Exception as e:
            logger.warning(
                "[EXECUTOR] %s raised %s", call.name, type(e).__name__, exc_info=True
            )
            return self._error_result(call, f"Tool '{call.name}' failed: {e}")

        logger.info(
            "[EXECUTOR] %s completed | latency=%dms",
            call.name,
            self._latency_ms(start),
        )
        return ToolResult(tool_use_id=call.id, content=output)

    def execute_batch(
        self,
        calls: Sequence[ToolCall],
        snapshot: NetworkSnapshot,
    ) -> Dict[str, ToolResult]:
        """
        Resolve several independent calls, keyed by call id.

        Handlers may finish in any order; the mapping follows `calls`.
        """
        calls = list(calls)
        if not calls:
            return {}

        if len(calls) == 1 or self._max_parallel == 1:
            return {call.id: self.execute(call, snapshot) for call in calls}

        workers = min(self._max_parallel, len(calls))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="netmind-tool") as pool:
            futures = [pool.submit(self.execute, call, snapshot) for call in calls]
            results: List[ToolResult] = [future.result() for future in futures]

        logger.info("[EXECUTOR] Batch resolved | calls=%d | workers=%d", len(calls), workers)
        return {call.id: result for call, result in zip(calls, results)}

    # ============================================================
    # RESULT BUILDERS
    # ============================================================

    def _error_result(self, call: ToolCall, error: str) -> ToolResult:
        return ToolResult.error(call.id, error)

    @staticmethod
    def _latency_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def registry(self) -> ToolRegistry:
        return self._registry
