import copy
import logging
import time
from typing import Any, Callable, Dict, Generator, Iterable, Iterator, List, Optional, Union

from ..config import AgentConfig
from ..memory import ConversationMemoryManager
from ..models import (
    AgentOutcome,
    Continuation,
    FinalResponse,
    NeedsToolResponse,
    NetworkSnapshot,
    ToolCall,
    ToolResult,
)
from ..tools.executor import ToolExecutor
from . import events as ev
from .events import AgentEvent
from .llm import LLMClient, LLMError, LLMResponse, TransientLLMError
from .prompt_builder import SystemPromptBuilder
from .state import LoopState, RunState

logger = logging.getLogger(__name__)

Message = Dict[str, Any]
ToolResultsInput = Union[None, ToolResult, Dict[str, Any], Iterable[Union[ToolResult, Dict[str, Any]]]]

# A generator that streams events and returns its result when exhausted.
Steps = Generator[AgentEvent, None, Any]

DONE_TEXT = "(Done)"
CAP_TEXT = "I completed the requested operations."
NO_RESPONSE_TEXT = "I wasn't able to produce a response. Please try again."
INTERNAL_ERROR_TEXT = "An internal error occurred. Please try again."
ERROR_DETAIL_CHARS = 200


class Agent:
    """
    Orchestration loop between the conversation, the model and the canvas.

    Each request runs until the model finishes, the iteration cap is hit,
    the upstream fails, or a canvas tool has to run. In the last case the
    run ends with a NeedsToolResponse whose continuation the caller sends
    back together with the canvas result; nothing stays in memory between
    requests.

    `run` returns the outcome; `stream` yields every transition as an
    AgentEvent. Both drive the same generator.
    """

    def __init__(
        self,
        llm: LLMClient,
        executor: ToolExecutor,
        config: Optional[AgentConfig] = None,
        memory: Optional[ConversationMemoryManager] = None,
        prompt_builder: Optional[SystemPromptBuilder] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.llm = llm
        self.executor = executor
        self.registry = executor.registry
        self.config = config or AgentConfig()

        self.memory = memory or ConversationMemoryManager(
            threshold=self.config.memory_summary_threshold,
            keep_recent=self.config.memory_keep_recent,
        )
        self.prompt_builder = prompt_builder or SystemPromptBuilder()
        self._sleep = sleep

    # ============================================================
    # PUBLIC ENTRY POINTS
    # ============================================================

    def run(
        self,
        messages: List[Message],
        snapshot: Union[NetworkSnapshot, Dict[str, Any], None] = None,
        tool_results: ToolResultsInput = None,
        actions: Optional[List[Dict[str, Any]]] = None,
    ) -> AgentOutcome:
        steps = self._drive(messages, snapshot, tool_results, actions)
        while True:
            try:
                next(steps)
            except StopIteration as stop:
                return stop.value

    def stream(
        self,
        messages: List[Message],
        snapshot: Union[NetworkSnapshot, Dict[str, Any], None] = None,
        tool_results: ToolResultsInput = None,
        actions: Optional[List[Dict[str, Any]]] = None,
    ) -> Iterator[AgentEvent]:
        yield from self._drive(messages, snapshot, tool_results, actions)

    def resume(
        self,
        continuation: Continuation,
        tool_results: ToolResultsInput,
        snapshot: Union[NetworkSnapshot, Dict[str, Any], None] = None,
    ) -> AgentOutcome:
        """Convenience for `run` fed from a previous NeedsToolResponse."""
        return self.run(
            continuation.messages,
            snapshot=snapshot,
            tool_results=tool_results,
            actions=continuation.actions,
        )

    # ============================================================
    # RUN LIFECYCLE
    # ============================================================

    def _drive(self, messages, snapshot, tool_results, actions) -> Steps:

        start = time.monotonic()
        run = RunState(messages=[])

        yield AgentEvent(ev.AGENT_START, {"max_iterations": self.config.max_iterations})

        try:
            run.messages = copy.deepcopy(list(messages or []))
            run.actions = copy.deepcopy(list(actions or []))
            run.snapshot = self._snapshot(snapshot)

            logger.info(
                "[AGENT] Run started | messages=%d | nodes=%d | links=%d",
                len(run.messages),
                len(run.snapshot.nodes),
                len(run.snapshot.links),
            )

            outcome = yield from self._loop(run, tool_results)
        except Exception:
            logger.exception("[AGENT] Unexpected failure in iteration %d", run.iteration)
            run.state = LoopState.FAILED
            outcome = FinalResponse(
                text=INTERNAL_ERROR_TEXT,
                actions=run.actions,
                iterations_used=run.iteration,
                error="internal_error",
                status="failed",
                messages=self._closed(run.history(), INTERNAL_ERROR_TEXT),
            )

        logger.info(
            "[AGENT] Run finished | outcome=%s | state=%s | iterations=%d | %.2fs",
            outcome.type,
            run.state.value,
            run.iteration,
            time.monotonic() - start,
        )

        terminal = ev.NEEDS_TOOL if isinstance(outcome, NeedsToolResponse) else ev.AGENT_END
        yield AgentEvent(terminal, outcome.to_dict(), outcome=outcome)
        return outcome

    def _loop(self, run: RunState, tool_results: ToolResultsInput) -> Steps:

        if tool_results is not None:
            self._merge_results(run, self._parse_results(tool_results))

        pending = self._pending_calls(run.messages)
        if pending:
            logger.info("[AGENT] Resuming with %d unanswered tool call(s)", len(pending))
            outcome = yield from self._resolve_batch(run, pending, partial_text=None)
            if outcome is not None:
                return outcome

        recent, memory = self.memory.compact(run.messages)
        run.archived = run.messages[:len(run.messages) - len(recent)]
        run.messages = recent
        system = self.prompt_builder.build(run.snapshot, memory)
        tools = self.registry.llm_manifest()

        while run.iteration < self.config.max_iterations:
            run.iteration += 1
            yield AgentEvent(ev.ITERATION_START, {"iteration": run.iteration})

            response = yield from self._call_llm(run, system, tools)
            if isinstance(response, FinalResponse):
                return response

            text = response.text()
            if text:
                yield AgentEvent(ev.TEXT, {"content": text})

            calls = response.tool_calls()

            if response.stop_reason == "end_turn":
                closing = response.to_message() if response.content else None
                return self._finish(run, text or DONE_TEXT, closing=closing)

            if response.stop_reason == "tool_use" and calls:
                run.transition(LoopState.TOOL_BATCH)
                run.messages.append(response.to_message())

                outcome = yield from self._resolve_batch(run, calls, partial_text=text)
                if outcome is not None:
                    return outcome

                run.transition(LoopState.RUNNING)
                continue

            logger.warning(
                "[AGENT] Unexpected stop_reason=%s | tool_calls=%d",
                response.stop_reason,
                len(calls),
            )
            return self._finish(run, text or NO_RESPONSE_TEXT)

        logger.warning("[AGENT] Iteration cap reached (%d)", self.config.max_iterations)
        return self._finish(run, CAP_TEXT, max_iterations_reached=True)

    # ============================================================
    # MODEL CALL + RETRY
    # ============================================================

    def _call_llm(self, run: RunState, system: str, tools: List[Dict[str, Any]]) -> Steps:
        """
        One model call with bounded retries on transient failures.

        Returns the LLMResponse, or a failed FinalResponse once the
        failure is fatal or the retry allowance is spent. Retries never
        exceed the iterations left after the current one, so a transient
        failure on the last iteration ends the run without a retry.
        """
        cfg = self.config
        attempt = 0

        while True:
            try:
                response: LLMResponse = self.llm.create_message(system, run.messages, tools)
                return response

            except TransientLLMError as e:
                yield AgentEvent(ev.ERROR, self._error_payload(e))

                allowance = min(cfg.max_retries, cfg.max_iterations - run.iteration)
                if attempt >= allowance:
                    return self._upstream_failure(run, e)

                wait = min(cfg.backoff_base_seconds * (2 ** attempt), cfg.backoff_max_seconds)
                attempt += 1

                logger.warning(
                    "[AGENT] Transient upstream failure (status=%s) | retry %d/%d in %.2fs",
                    e.status,
                    attempt,
                    allowance,
                    wait,
                )
                yield AgentEvent(ev.RETRY, {"attempt": attempt, "wait_ms": int(wait * 1000)})
                self._sleep(wait)

            except LLMError as e:
                yield AgentEvent(ev.ERROR, self._error_payload(e))
                return self._upstream_failure(run, e)

    def _upstream_failure(self, run: RunState, error: LLMError) -> FinalResponse:
        status = error.status if error.status is not None else "(no response)"
        detail = (error.body or str(error))[:ERROR_DETAIL_CHARS]

        logger.error("[AGENT] Upstream failure | status=%s | %s", status, detail)

        return self._finish(
            run,
            f"API error {status}. Please try again.",
            state=LoopState.FAILED,
            error=detail,
        )

    @staticmethod
    def _error_payload(error: LLMError) -> Dict[str, Any]:
        return {
            "status": error.status,
            "message": (error.body or str(error))[:ERROR_DETAIL_CHARS],
        }

    # ============================================================
    # TOOL BATCH
    # ============================================================

    def _resolve_batch(
        self,
        run: RunState,
        calls: List[ToolCall],
        partial_text: Optional[str],
    ) -> Steps:
        """
        Answer every server-resolvable call of a batch in place.

        Rejected calls (unknown tool, invalid input) are answered with an
        error result. Returns None when the batch is fully answered, or a
        NeedsToolResponse for the first canvas call with the rest queued.
        """
        results: Dict[str, ToolResult] = {}
        server_calls: List[ToolCall] = []
        client_calls: List[ToolCall] = []

        for call in calls:
            rejected = self.executor.check(call)
            if rejected is not None:
                results[call.id] = rejected
            elif self.registry.is_server_tool(call.name):
                server_calls.append(call)
            else:
                client_calls.append(call)

        server_ids = {call.id for call in server_calls}
        answered = [call for call in calls if call.id in results or call.id in server_ids]

        for call in answered:
            yield AgentEvent(ev.TOOL_START, {"name": call.name, "input": call.input})

        results.update(self.executor.execute_batch(server_calls, run.snapshot))

        for call in answered:
            result = results[call.id]
            if call.id in server_ids:
                run.record_server_action(call, result)
            yield AgentEvent(ev.TOOL_RESULT, {"name": call.name, "result": result.content})

        logger.info(
            "[AGENT] Tool batch | server=%d | rejected=%d | client=%d",
            len(server_calls),
            len(answered) - len(server_calls),
            len(client_calls),
        )

        if answered:
            self._merge_results(run, [results[call.id] for call in answered])

        if client_calls:
            return self._suspend(run, client_calls, partial_text)

        return None

    def _suspend(
        self,
        run: RunState,
        client_calls: List[ToolCall],
        partial_text: Optional[str],
    ) -> NeedsToolResponse:

        first, queued = client_calls[0], client_calls[1:]
        run.record_client_action(first)
        run.transition(LoopState.SUSPENDED)

        logger.info(
            "[AGENT] Suspended for canvas tool %s | queued=%d",
            first.name,
            len(queued),
        )

        return NeedsToolResponse(
            tool_call=first,
            continuation=Continuation(
                messages=copy.deepcopy(run.history()),
                queued_tool_calls=list(queued),
                actions=copy.deepcopy(run.actions),
            ),
            iterations_used=run.iteration,
            partial_text=partial_text or None,
        )

    def _finish(
        self,
        run: RunState,
        text: str,
        state: LoopState = LoopState.DONE,
        closing: Optional[Message] = None,
        max_iterations_reached: bool = False,
        error: Optional[str] = None,
    ) -> FinalResponse:

        run.transition(state)

        if closing is not None:
            messages = copy.deepcopy(run.history()) + [closing]
        else:
            messages = self._closed(run.history(), text)

        return FinalResponse(
            text=text,
            actions=run.actions,
            iterations_used=self.config.max_iterations if max_iterations_reached else run.iteration,
            max_iterations_reached=max_iterations_reached,
            error=error,
            status="failed" if state == LoopState.FAILED else "done",
            messages=messages,
        )

    @staticmethod
    def _closed(messages: List[Message], text: str) -> List[Message]:
        """Copy of the conversation ending in an assistant message with `text`."""
        return copy.deepcopy(messages) + [{"role": "assistant", "content": text}]

    # ============================================================
    # TOOL RESULT PAIRING
    # ============================================================

    def _merge_results(self, run: RunState, results: List[ToolResult]) -> None:
        """
        File results under the last assistant tool_use message.

        They join the tool_result message that directly follows it when
        one exists, otherwise a new one is inserted there. Blocks are kept
        in the order the model requested the tools. Results for unknown or
        already answered ids are dropped.
        """
        messages = run.messages
        index = self._last_assistant_index(messages)
        order = self._tool_use_ids(messages[index]) if index is not None else []

        if not order:
            if results:
                logger.warning(
                    "[AGENT] Dropping %d tool result(s): no pending tool_use message",
                    len(results),
                )
            return

        rank = {tool_use_id: i for i, tool_use_id in enumerate(order)}
        answered = self._answered_ids(messages[index + 1:])

        fresh = []
        for result in results:
            if result.tool_use_id not in rank:
                logger.warning("[AGENT] Dropping result for unknown tool_use_id %s", result.tool_use_id)
                continue
            if result.tool_use_id in answered:
                logger.warning("[AGENT] Dropping duplicate result for %s", result.tool_use_id)
                continue
            answered.add(result.tool_use_id)
            fresh.append(result.to_block())

        if not fresh:
            return

        target = index + 1
        if target < len(messages) and self._is_tool_result_message(messages[target]):
            blocks = list(messages[target]["content"]) + fresh
        else:
            blocks = fresh
            messages.insert(target, {"role": "user", "content": []})

        def _position(block):
            if isinstance(block, dict) and block.get("type") == "tool_result":
                return (0, rank.get(block.get("tool_use_id"), len(rank)))
            return (1, 0)

        messages[target] = {"role": "user", "content": sorted(blocks, key=_position)}

    def _pending_calls(self, messages: List[Message]) -> List[ToolCall]:
        """
        tool_use calls of the last assistant message still without a
        result, in request order. Only a history that ends in that
        assistant message (plus its tool_result reply) can be pending.
        """
        index = self._last_assistant_index(messages)
        if index is None:
            return []

        tail = messages[index + 1:]
        if any(not self._is_tool_result_message(m) for m in tail):
            return []

        answered = self._answered_ids(tail)
        content = messages[index].get("content")
        if not isinstance(content, list):
            return []

        return [
            ToolCall.from_block(block)
            for block in content
            if isinstance(block, dict)
            and block.get("type") == "tool_use"
            and block.get("id") not in answered
        ]

    # ============================================================
    # HELPERS
    # ============================================================

    @staticmethod
    def _snapshot(snapshot) -> NetworkSnapshot:
        if isinstance(snapshot, NetworkSnapshot):
            return snapshot
        return NetworkSnapshot.from_dict(snapshot)

    @staticmethod
    def _parse_results(tool_results: ToolResultsInput) -> List[ToolResult]:
        if isinstance(tool_results, (ToolResult, dict)):
            tool_results = [tool_results]
        return [
            item if isinstance(item, ToolResult) else ToolResult.from_dict(item)
            for item in tool_results
        ]

    @staticmethod
    def _last_assistant_index(messages: List[Message]) -> Optional[int]:
        for i in range(len(messages) - 1, -1, -1):
            if messages[i].get("role") == "assistant":
                return i
        return None

    @staticmethod
    def _tool_use_ids(message: Message) -> List[str]:
        content = message.get("content")
        if not isinstance(content, list):
            return []
        return [
            block.get("id")
            for block in content
            if isinstance(block, dict) and block.get("type") == "tool_use"
        ]

    @staticmethod
    def _answered_ids(messages: List[Message]) -> set:
        answered = set()
        for message in messages:
            content = message.get("content")
            if not isinstance(content, list):
                continue
            for block in content:
                if isinstance(block, dict) and block.get("type") == "tool_result":
                    answered.add(block.get("tool_use_id"))
        return answered

    @staticmethod
    def _is_tool_result_message(message: Message) -> bool:
        content = message.get("content")
        return (
            message.get("role") == "user"
            and isinstance(content, list)
            and bool(content)
            and all(
                isinstance(block, dict) and block.get("type") == "tool_result"
                for block in content
            )
        )
