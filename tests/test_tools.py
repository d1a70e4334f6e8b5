"""Tests for tool contracts, the registry, argument validation and the executor."""

import pytest

from netmind.models import NetworkSnapshot, ToolCall
from netmind.tools import (
    ArgumentValidationError,
    ArgumentValidator,
    RegistryError,
    Tool,
    ToolExecutor,
    ToolRegistry,
)
from netmind.tools.builtin import (
    CLIENT_TOOL_DECLARATIONS,
    HANDLERS,
    SERVER_TOOL_DECLARATIONS,
    build_registry,
)
from netmind.tools.validator import unsupported_keywords

SERVER_TOOLS = {
    "think",
    "get_diagram_stats",
    "analyse_topology",
    "analyse_capacity",
    "analyse_cost",
    "estimate_latency",
    "find_nodes",
    "suggest_design",
}


def _handler(tool_input, snapshot):
    return {"status": "ok", "echo": tool_input}


def _server(name, schema=None, handler=_handler):
    return Tool(
        name=name,
        description=f"{name} tool",
        input_schema=schema or {"type": "object", "properties": {}},
        resolution="server",
        handler=handler,
    )


def _client(name, schema=None):
    return Tool(
        name=name,
        description=f"{name} tool",
        input_schema=schema or {"type": "object", "properties": {}},
    )


class TestToolContract:

    def test_server_tool_requires_handler(self):
        with pytest.raises(ValueError):
            Tool(name="x", description="", input_schema={"type": "object"}, resolution="server")

    def test_client_tool_rejects_handler(self):
        with pytest.raises(ValueError):
            Tool(name="x", description="", input_schema={"type": "object"}, handler=_handler)

    def test_unknown_resolution(self):
        with pytest.raises(ValueError):
            Tool(name="x", description="", input_schema={"type": "object"}, resolution="edge")

    def test_schema_must_describe_object(self):
        with pytest.raises(ValueError):
            _client("x", schema={"type": "array"})


class TestRegistry:

    def test_default_catalogue(self, registry):
        assert set(registry.server_tool_names()) == SERVER_TOOLS
        assert len(registry.client_tool_names()) == 25
        assert not set(registry.server_tool_names()) & set(registry.client_tool_names())

    def test_resolution_lookup(self, registry):
        assert registry.is_server_tool("analyse_topology")
        assert registry.is_client_tool("create_node")
        assert registry.resolution_of("run_pathfinder") == "client"
        assert not registry.is_server_tool("nope")
        assert not registry.is_client_tool("nope")

    def test_manifest_only_exposes_model_facing_fields(self, registry):
        manifest = registry.llm_manifest()

        assert len(manifest) == len(registry)
        assert all(set(entry) == {"name", "description", "input_schema"} for entry in manifest)

    def test_schema_access_returns_a_copy(self, registry):
        schema = registry.get_input_schema("create_node")
        schema["required"].append("mutated")
        assert "mutated" not in registry.get_input_schema("create_node")["required"]

    def test_unknown_tool_lookup(self, registry):
        with pytest.raises(KeyError):
            registry.get("nope")

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError):
            ToolRegistry([_client("a"), _client("a")])

    def test_non_tool_rejected(self):
        with pytest.raises(TypeError):
            ToolRegistry([{"name": "a"}])


class TestCatalogueExhaustiveness:

    def test_declaration_without_handler(self):
        handlers = dict(HANDLERS)
        del handlers["think"]

        with pytest.raises(RegistryError, match="without a handler"):
            build_registry(SERVER_TOOL_DECLARATIONS, handlers, CLIENT_TOOL_DECLARATIONS)

    def test_handler_without_declaration(self):
        handlers = dict(HANDLERS, orphan=_handler)

        with pytest.raises(RegistryError, match="orphan"):
            build_registry(SERVER_TOOL_DECLARATIONS, handlers, CLIENT_TOOL_DECLARATIONS)

    def test_name_declared_on_both_sides(self):
        clashing = CLIENT_TOOL_DECLARATIONS + [dict(SERVER_TOOL_DECLARATIONS[0])]

        with pytest.raises(RegistryError):
            build_registry(SERVER_TOOL_DECLARATIONS, HANDLERS, clashing)


class TestArgumentValidator:

    @pytest.fixture
    def validator(self):
        schema = {
            "type": "object",
            "properties": {
                "count": {"type": "integer"},
                "ratio": {"type": "number"},
                "mode": {"type": "string", "enum": ["bandwidth", "cost"]},
                "ids": {"type": "array", "items": {"type": "string"}},
                "filters": {
                    "type": "object",
                    "properties": {"maxLatencyMs": {"type": "number"}},
                    "additionalProperties": False,
                },
            },
            "required": ["mode"],
            "additionalProperties": False,
        }
        return ArgumentValidator(ToolRegistry([_client("plan_route", schema)]))

    def test_valid_arguments(self, validator):
        args = {"mode": "cost", "count": 3, "ratio": 1, "ids": ["a"], "filters": {"maxLatencyMs": 5.5}}
        assert validator.validate("plan_route", args) is args

    @pytest.mark.parametrize(
        "args, fragment",
        [
            ({}, "Missing required"),
            ({"mode": "cost", "extra": 1}, "Unknown arguments"),
            ({"mode": "heat"}, "must be one of"),
            ({"mode": "cost", "count": True}, "expected type integer"),
            ({"mode": "cost", "ratio": False}, "expected type number"),
            ({"mode": "cost", "count": 1.5}, "expected type integer"),
            ({"mode": "cost", "ids": ["a", 2]}, "ids[1]"),
            ({"mode": "cost", "filters": {"maxLatencyMs": "5"}}, "filters.maxLatencyMs"),
            ({"mode": "cost", "filters": {"other": 1}}, "in 'filters'"),
        ],
    )
    def test_invalid_arguments(self, validator, args, fragment):
        with pytest.raises(ArgumentValidationError) as exc:
            validator.validate("plan_route", args)
        assert fragment in str(exc.value)

    def test_non_dict_arguments(self, validator):
        with pytest.raises(ArgumentValidationError):
            validator.validate("plan_route", ["cost"])


class TestToolExecutor:

    @pytest.fixture
    def executor(self):
        def _boom(tool_input, snapshot):
            raise ZeroDivisionError("kaboom")

        tools = [
            _server("echo"),
            _server("boom", handler=_boom),
            _server("needs_name", schema={
                "type": "object",
                "properties": {"name": {"type": "string"}},
                "required": ["name"],
            }),
            _client("paint"),
        ]
        return ToolExecutor(ToolRegistry(tools), max_parallel_tools=3)

    def test_successful_call(self, executor):
        result = executor.execute(ToolCall("t1", "echo", {"x": 1}), NetworkSnapshot())

        assert result.tool_use_id == "t1"
        assert result.content == {"status": "ok", "echo": {"x": 1}}
        assert not result.is_error

    def test_handler_failure_becomes_error_result(self, executor):
        result = executor.execute(ToolCall("t1", "boom", {}), NetworkSnapshot())

        assert result.is_error
        assert result.content["message"] == "Tool 'boom' failed: kaboom"

    def test_unknown_tool(self, executor):
        result = executor.execute(ToolCall("t1", "ghost", {}), NetworkSnapshot())
        assert result.content == {"status": "error", "message": "Unknown tool: ghost"}

    def test_invalid_arguments(self, executor):
        result = executor.execute(ToolCall("t1", "needs_name", {}), NetworkSnapshot())
        assert result.content["message"].startswith("Invalid arguments:")

    def test_canvas_tool_is_not_run_on_the_server(self, executor):
        result = executor.execute(ToolCall("t1", "paint", {}), NetworkSnapshot())
        assert result.is_error
        assert "canvas" in result.content["message"]

    def test_check_passes_well_formed_calls(self, executor):
        assert executor.check(ToolCall("t1", "paint", {})) is None

    def test_batch_is_keyed_by_call_id(self, executor):
        calls = [ToolCall(f"t{i}", name, {}) for i, name in enumerate(["echo", "boom", "echo", "ghost"])]
        results = executor.execute_batch(calls, NetworkSnapshot())

        assert list(results) == ["t0", "t1", "t2", "t3"]
        assert not results["t0"].is_error
        assert results["t1"].is_error
        assert results["t3"].is_error

    def test_empty_batch(self, executor):
        assert executor.execute_batch([], NetworkSnapshot()) == {}

    def test_parallelism_must_be_positive(self):
        with pytest.raises(ValueError):
            ToolExecutor(ToolRegistry([]), max_parallel_tools=0)


class TestUnsupportedSchemaKeywords:

    def test_default_catalogue_is_fully_checked(self, caplog):
        with caplog.at_level("WARNING", logger="netmind.tools.builtin"):
            build_registry(SERVER_TOOL_DECLARATIONS, HANDLERS, CLIENT_TOOL_DECLARATIONS)
        assert caplog.records == []

    def test_unchecked_keywords_are_reported(self):
        schema = {
            "type": "object",
            "properties": {
                "k": {"type": "integer", "minimum": 1},
                "ids": {"type": "array", "items": {"type": "uuid"}},
            },
            "oneOf": [],
        }
        assert unsupported_keywords(schema) == ["$:oneOf", "k:minimum", "ids[]:type=uuid"]

    def test_registry_build_warns(self, caplog):
        declaration = {
            "name": "paint",
            "description": "Paint a node.",
            "input_schema": {"type": "object", "properties": {"k": {"type": "integer", "minimum": 1}}},
        }

        with caplog.at_level("WARNING", logger="netmind.tools.builtin"):
            build_registry(SERVER_TOOL_DECLARATIONS, HANDLERS, CLIENT_TOOL_DECLARATIONS + [declaration])

        assert "paint" in caplog.text
        assert "k:minimum" in caplog.text
