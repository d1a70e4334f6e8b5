import logging
import os
from typing import Any, Dict, Iterator, List, Optional, Union

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from netmind import __version__
from netmind.agent.core import INTERNAL_ERROR_TEXT, Agent
from netmind.agent.events import ERROR, AgentEvent
from netmind.agent.llm import LLMClient
from netmind.app import NetMindApp
from netmind.config import AgentConfig
from netmind.models import AgentOutcome, NeedsToolResponse
from netmind.sessions import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
    build_session,
)
from netmind.tools.builtin import build_default_registry

# ============================================================
# LOGGING
# ============================================================

logger = logging.getLogger("netmind.server")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

SESSION_HISTORY_LIMIT = 50

CAPABILITIES = [
    "multi-step-reasoning",
    "parallel-tool-execution",
    "server-side-topology-analysis",
    "capacity-planning",
    "cost-analysis",
    "latency-estimation",
    "conversation-memory",
    "streaming-sse",
    "session-persistence",
    "error-recovery",
    "design-suggestions",
]

# ============================================================
# Agent Manager
# ============================================================

class AgentManager:
    """
    Owns the process-wide pieces: config, tool registry, session store
    and the agent. The agent is built on first use so the service can
    start (and answer /health) before ANTHROPIC_API_KEY is configured.
    """

    def __init__(
        self,
        config: Optional[AgentConfig] = None,
        llm: Optional[LLMClient] = None,
        store: Optional[SessionStore] = None,
    ):
        logger.info("[AGENT MANAGER] Initializing...")
        self.config = config or AgentConfig.from_env()
        self.registry = build_default_registry()
        self.store = store or self._default_store()
        self._llm = llm
        self._agent: Optional[Agent] = None
        logger.info(
            "[AGENT MANAGER] Ready | model=%s | tool_count=%d | store=%s",
            self.config.model,
            len(self.registry),
            type(self.store).__name__,
        )

    def _default_store(self) -> SessionStore:
        redis_url = os.getenv("REDIS_URL")
        if redis_url:
            return RedisSessionStore(redis_url, ttl_seconds=self.config.session_ttl_seconds)
        return InMemorySessionStore(ttl_seconds=self.config.session_ttl_seconds)

    def get_agent(self) -> Agent:
        """
        Raises
        ------
        RuntimeError
            The model client cannot be built (missing API key).
        """
        if self._agent is None:
            logger.info("[AGENT MANAGER] Building agent")
            self._agent = NetMindApp.create(
                config=self.config,
                llm=self._llm,
                registry=self.registry,
            )
        return self._agent


# ============================================================
# Instantiate Manager
# ============================================================

manager = AgentManager()

# ============================================================
# FastAPI App
# ============================================================

app = FastAPI(title="NetMind Agent", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================
# Models
# ============================================================

class ChatRequest(BaseModel):
    message: Optional[str] = None
    conversation_history: List[Dict[str, Any]] = Field(default_factory=list)
    diagram_state: Optional[Dict[str, Any]] = None
    tool_result: Optional[Union[List[Dict[str, Any]], Dict[str, Any]]] = None
    session_id: Optional[str] = None
    stream: bool = False
    actions: Optional[List[Dict[str, Any]]] = None


# ============================================================
# Sessions
# ============================================================

def _load_history(request: ChatRequest) -> List[Dict[str, Any]]:
    history = list(request.conversation_history)

    if request.session_id:
        session = manager.store.get(request.session_id)
        if session is not None:
            logger.info("[SESSION] Loaded session %s", request.session_id)
            history = list(session.get("conversation_history") or [])

    if request.message:
        history.append({"role": "user", "content": request.message})

    return history


def _save_session(session_id: Optional[str], outcome: AgentOutcome) -> None:
    if not session_id:
        return

    if isinstance(outcome, NeedsToolResponse):
        data = build_session(outcome.partial_messages)
    else:
        data = build_session(outcome.messages, limit=SESSION_HISTORY_LIMIT)

    manager.store.put(session_id, data)


# ============================================================
# Health
# ============================================================

@app.get("/health")
def health():
    config = manager.config
    return {
        "status": "ok",
        "version": __version__,
        "model": config.model,
        "max_iterations": config.max_iterations,
        "capabilities": CAPABILITIES,
        "server_tools": manager.registry.server_tool_names(),
        "client_tools": manager.registry.client_tool_names(),
    }


# ============================================================
# Chat
# ============================================================

def _event_stream(agent: Agent, request: ChatRequest, history: List[Dict[str, Any]]) -> Iterator[str]:
    try:
        for event in agent.stream(
            history,
            snapshot=request.diagram_state,
            tool_results=request.tool_result,
            actions=request.actions,
        ):
            if event.is_terminal and event.outcome is not None:
                _save_session(request.session_id, event.outcome)
            yield event.to_sse()

    except Exception as e:
        logger.exception("[SERVER] Stream failed")
        yield AgentEvent(ERROR, {"message": str(e)}).to_sse()


@app.post("/")
@app.post("/chat")
def chat_endpoint(request: ChatRequest, x_stream: Optional[str] = Header(default=None)):
    try:
        agent = manager.get_agent()
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))

    try:
        history = _load_history(request)

        if request.stream or (x_stream or "").lower() == "true":
            logger.info("[SERVER] Streaming chat | messages=%d", len(history))
            return StreamingResponse(
                _event_stream(agent, request, history),
                media_type="text/event-stream",
                headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
            )

        logger.info("[SERVER] Chat | messages=%d", len(history))
        outcome = agent.run(
            history,
            snapshot=request.diagram_state,
            tool_results=request.tool_result,
            actions=request.actions,
        )
        _save_session(request.session_id, outcome)
        return outcome.to_dict()

    except Exception as e:
        logger.exception("[SERVER] Chat failed")
        return JSONResponse(
            status_code=500,
            content={"type": "final", "text": INTERNAL_ERROR_TEXT, "error": str(e)},
        )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
