"""HTTP tests for the FastAPI transport."""

import pytest
from conftest import ScriptedLLM, text_response, tool_response
from fastapi.testclient import TestClient

import netmind.server.app as server_app
from netmind.config import AgentConfig
from netmind.sessions import InMemorySessionStore


@pytest.fixture
def install(monkeypatch):
    """Swap the module-level manager for one driven by a scripted model."""

    def _install(script=(), llm=True):
        manager = server_app.AgentManager(
            config=AgentConfig(),
            llm=ScriptedLLM(script) if llm else None,
            store=InMemorySessionStore(),
        )
        monkeypatch.setattr(server_app, "manager", manager)
        return manager

    return _install


@pytest.fixture
def client():
    return TestClient(server_app.app)


def test_health(client, install):
    install()

    data = client.get("/health").json()

    assert data["status"] == "ok"
    assert data["max_iterations"] == 15
    assert "streaming-sse" in data["capabilities"]
    assert "analyse_topology" in data["server_tools"]
    assert "create_node" in data["client_tools"]
    assert len(data["server_tools"]) == 8


def test_missing_api_key(client, install, monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    install(llm=False)

    response = client.post("/", json={"message": "hi"})

    assert response.status_code == 503
    assert "ANTHROPIC_API_KEY" in response.json()["detail"]


def test_chat_returns_final(client, install):
    install([text_response("Hello from NetMind.")])

    response = client.post("/chat", json={"message": "hi"})

    assert response.status_code == 200
    assert response.json() == {
        "type": "final",
        "text": "Hello from NetMind.",
        "actions": [],
        "iterations_used": 1,
    }


def test_session_is_saved_and_reused(client, install):
    manager = install([text_response("First answer."), text_response("Second answer.")])

    client.post("/", json={"message": "first", "session_id": "abc"})
    stored = manager.store.get("abc")["conversation_history"]
    assert stored[0] == {"role": "user", "content": "first"}
    assert stored[-1]["role"] == "assistant"

    client.post("/", json={
        "message": "second",
        "session_id": "abc",
        "conversation_history": [{"role": "user", "content": "ignored"}],
    })

    sent = manager._llm.calls[1]["messages"]
    assert [m["content"] for m in sent if m["role"] == "user"] == ["first", "second"]
    assert len(manager.store.get("abc")["conversation_history"]) == 4


def test_long_session_survives_compaction(client, install):
    manager = install([text_response("Noted."), text_response("Still here.")])
    history = [
        {"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i} about the backbone"}
        for i in range(40)
    ]

    client.post("/", json={"message": "next", "session_id": "long", "conversation_history": history})

    stored = manager.store.get("long")["conversation_history"]
    assert len(stored) == 42
    assert stored[:40] == history
    assert len(manager._llm.calls[0]["messages"]) == 20

    client.post("/", json={"message": "and again", "session_id": "long"})

    assert "## Conversation Memory" in manager._llm.calls[1]["system"]
    assert len(manager.store.get("long")["conversation_history"]) == 44


def test_suspend_and_resume_over_http(client, install):
    manager = install([
        tool_response(("c1", "create_node", {"label": "Madrid"})),
        text_response("Madrid is on the canvas."),
    ])

    first = client.post("/", json={"message": "add Madrid", "session_id": "s1"}).json()

    assert first["type"] == "needs_tool"
    assert first["tool_call"]["name"] == "create_node"
    assert manager.store.get("s1")["conversation_history"] == first["partial_messages"]

    second = client.post("/", json={
        "conversation_history": first["partial_messages"],
        "tool_result": {"tool_use_id": "c1", "content": {"status": "created", "id": "n1"}},
        "actions": first["actions"],
    }).json()

    assert second["type"] == "final"
    assert second["text"] == "Madrid is on the canvas."
    assert second["actions"][0]["tool"] == "create_node"


def test_streaming(client, install):
    manager = install([text_response("Streamed.")])

    response = client.post("/", json={"message": "hi", "stream": True, "session_id": "st"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    body = response.text
    assert body.startswith("event: agent_start\n")
    assert "event: text\ndata: {\"content\": \"Streamed.\"}\n\n" in body
    assert body.count("event: agent_end") == 1
    assert manager.store.get("st")["conversation_history"][-1]["role"] == "assistant"


def test_stream_header(client, install):
    install([text_response("Streamed.")])

    response = client.post("/chat", json={"message": "hi"}, headers={"X-Stream": "true"})

    assert "event: agent_end" in response.text


def test_upstream_failure_is_a_final_response(client, install):
    from netmind.agent.llm import LLMServiceError

    install([LLMServiceError("bad", status=401, body="invalid x-api-key")])

    data = client.post("/", json={"message": "hi"}).json()

    assert data["type"] == "final"
    assert data["text"] == "API error 401. Please try again."
    assert data["error"] == "invalid x-api-key"
