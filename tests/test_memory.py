import pytest

from netmind.agent.prompt_builder import EMPTY_CANVAS, SystemPromptBuilder
from netmind.memory import ConversationMemory, ConversationMemoryManager
from netmind.models import NetworkSnapshot


def _chat(count):
    return [
        {"role": "user" if i % 2 == 0 else "assistant", "content": f"message number {i} " * 3}
        for i in range(count)
    ]


class TestCompaction:

    def test_short_history_is_untouched(self):
        messages = _chat(30)
        recent, memory = ConversationMemoryManager().compact(messages)

        assert recent == messages
        assert memory is None

    def test_long_history_keeps_recent_tail(self):
        messages = _chat(35)
        recent, memory = ConversationMemoryManager().compact(messages)

        assert recent == messages[15:]
        assert memory.summarised_count == 15
        assert memory.summary.startswith("Earlier in this conversation (15 messages summarised):")
        assert 'User asked: "message number 0' in memory.summary

    def test_tool_pair_is_not_split(self):
        messages = _chat(31)
        messages[10] = {
            "role": "assistant",
            "content": [{"type": "tool_use", "id": "t1", "name": "create_node", "input": {"label": "Madrid"}}],
        }
        messages[11] = {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": "t1", "content": "{}"}],
        }

        recent, memory = ConversationMemoryManager().compact(messages)

        assert len(recent) == 21
        assert recent[0] is messages[10]
        assert memory.summarised_count == 10

    def test_actions_are_summarised(self):
        messages = _chat(31)
        messages[1] = {
            "role": "assistant",
            "content": [{"type": "tool_use", "id": "t1", "name": "create_node", "input": {"label": "Madrid"}}],
        }

        _, memory = ConversationMemoryManager().compact(messages)

        assert 'Called create_node({"label":"Madrid"})' in memory.summary

    def test_long_user_text_is_truncated(self):
        messages = _chat(31)
        messages[0] = {"role": "user", "content": "x" * 150}

        _, memory = ConversationMemoryManager().compact(messages)

        assert f'User asked: "{"x" * 100}…"' in memory.summary

    def test_short_user_text_is_skipped(self):
        messages = _chat(31)
        messages[0] = {"role": "user", "content": "ok"}

        _, memory = ConversationMemoryManager().compact(messages)

        assert '"ok"' not in memory.summary

    def test_keep_recent_must_be_below_threshold(self):
        with pytest.raises(ValueError):
            ConversationMemoryManager(threshold=10, keep_recent=10)


class TestSystemPrompt:

    def test_empty_canvas(self):
        prompt = SystemPromptBuilder(base="BASE").build(NetworkSnapshot())
        assert prompt == f"BASE\n\n## Current Diagram State\n{EMPTY_CANVAS}"

    def test_diagram_lines(self):
        snapshot = NetworkSnapshot.from_dict({
            "nodes": [{"id": "n1", "label": "Madrid", "type": "datacenter", "tags": ["core"], "x": 10.4, "y": 20}],
            "links": [{"id": "l1", "source": "n1", "target": "n2", "latency_ms": 5.0, "bandwidth_gbps": 100}],
            "groups": [{"id": "g1", "label": "Iberia", "type": "region", "nodes": ["n1"]}],
            "selected_node_id": "n1",
        })

        prompt = SystemPromptBuilder(base="BASE").build(snapshot)

        assert "  n1|Madrid|datacenter|tags:[core] pos:(10,20)" in prompt
        assert "  l1|n1→n2|lat:5ms|bw:100G" in prompt
        assert "  g1|Iberia|region|members:[n1]" in prompt
        assert prompt.endswith("Selected: node=n1")

    def test_memory_section(self):
        memory = ConversationMemory(summary="Earlier stuff", key_facts=['User asked: "hello there"'])
        prompt = SystemPromptBuilder(base="BASE").build(NetworkSnapshot(), memory)

        assert "## Conversation Memory\nEarlier stuff" in prompt
        assert '- User asked: "hello there"' in prompt
