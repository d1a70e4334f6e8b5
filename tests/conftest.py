import copy
import os

# Server tests use the in-process session store.
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402

from netmind.agent.core import Agent  # noqa: E402
from netmind.agent.llm import LLMClient, LLMResponse  # noqa: E402
from netmind.config import AgentConfig  # noqa: E402
from netmind.models import NetworkSnapshot  # noqa: E402
from netmind.tools.builtin import build_default_registry  # noqa: E402
from netmind.tools.executor import ToolExecutor  # noqa: E402


class ScriptedLLM(LLMClient):
    """Replays canned responses (or raises canned errors) in order."""

    def __init__(self, script=()):
        self.script = list(script)
        self.calls = []

    def create_message(self, system, messages, tools):
        self.calls.append({
            "system": system,
            "messages": copy.deepcopy(messages),
            "tools": tools,
        })
        if not self.script:
            raise AssertionError("model called more often than scripted")
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step


def text_response(text, stop_reason="end_turn"):
    content = [{"type": "text", "text": text}] if text else []
    return LLMResponse(content=content, stop_reason=stop_reason)


def tool_response(*calls, text=None):
    """calls: (id, name, input) triples, emitted in order."""
    content = [{"type": "text", "text": text}] if text else []
    for call_id, name, tool_input in calls:
        content.append({"type": "tool_use", "id": call_id, "name": name, "input": tool_input})
    return LLMResponse(content=content, stop_reason="tool_use")


def user(text):
    return {"role": "user", "content": text}


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def make_agent(registry):
    """Build an Agent around a ScriptedLLM; returns (agent, llm, sleeps)."""

    def _make(script, **config):
        llm = ScriptedLLM(script)
        sleeps = []
        agent = Agent(
            llm,
            ToolExecutor(registry),
            config=AgentConfig(**config),
            sleep=sleeps.append,
        )
        return agent, llm, sleeps

    return _make


@pytest.fixture
def path_snapshot():
    """A - B - C: B is a cut node, both links are bridges."""
    return NetworkSnapshot.from_dict({
        "nodes": [
            {"id": "a", "label": "A"},
            {"id": "b", "label": "B"},
            {"id": "c", "label": "C"},
        ],
        "links": [
            {"id": "l1", "source": "a", "target": "b", "bandwidth_gbps": 10, "price_usd": 1000},
            {"id": "l2", "source": "b", "target": "c", "bandwidth_gbps": 100, "price_usd": 2000},
        ],
    })


@pytest.fixture
def ring_snapshot():
    """Four node ring: fully two-connected."""
    nodes = [{"id": n, "label": n.upper()} for n in "abcd"]
    links = [
        {"id": f"l{i}", "source": s, "target": t, "bandwidth_gbps": 10}
        for i, (s, t) in enumerate([("a", "b"), ("b", "c"), ("c", "d"), ("d", "a")])
    ]
    return NetworkSnapshot.from_dict({"nodes": nodes, "links": links})
