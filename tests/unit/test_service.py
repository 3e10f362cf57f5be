"""Unit tests for the tool registry and tool service."""
from unittest.mock import AsyncMock, patch

import pytest

from models.config import Config
from models.tool_schema import ToolResult
from tools import (LocalToolClient, RegisteredCommand, ToolInvocationError,
                   ToolRegistry, ToolService)


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_register_and_get(self):
        registry = ToolRegistry()
        entry = RegisteredCommand(name="kubectl", command="kubectl", description="d")
        registry.register(entry)

        assert registry.get("kubectl") is entry
        assert "kubectl" in registry
        assert len(registry) == 1

    def test_duplicate_name_rejected(self):
        registry = ToolRegistry()
        registry.register(RegisteredCommand(name="kubectl", command="kubectl", description="d"))

        with pytest.raises(ValueError, match="already registered"):
            registry.register(
                RegisteredCommand(name="kubectl", command="other", description="d")
            )

    def test_unknown_name_returns_none(self):
        assert ToolRegistry().get("helm") is None

    def test_definitions_declare_single_required_string(self):
        registry = ToolRegistry()
        registry.register(
            RegisteredCommand(
                name="k8sgpt",
                command="k8sgpt",
                description="Analyze",
                argument_description="The arguments to pass to the k8sgpt command",
            )
        )

        [definition] = registry.definitions()
        schema = definition.input_schema
        assert definition.name == "k8sgpt"
        assert definition.description == "Analyze"
        assert schema["required"] == ["arguments"]
        assert schema["properties"]["arguments"]["type"] == "string"
        assert (
            schema["properties"]["arguments"]["description"]
            == "The arguments to pass to the k8sgpt command"
        )

    def test_default_argument_description_names_command(self):
        entry = RegisteredCommand(name="kubectl", command="kubectl", description="d")
        schema = entry.definition().input_schema

        assert "kubectl" in schema["properties"]["arguments"]["description"]

    def test_from_config_preserves_order_and_timeouts(self, sample_config):
        registry = ToolRegistry.from_config(Config(**sample_config))

        assert [d.name for d in registry.definitions()] == ["kubectl", "k8sgpt"]
        assert registry.get("kubectl").timeout == 30
        assert registry.get("k8sgpt").command == "k8sgpt"


class TestToolServiceValidation:
    """Payload validation happens before any process is spawned."""

    @pytest.fixture
    def service(self):
        registry = ToolRegistry()
        registry.register(RegisteredCommand(name="kubectl", command="kubectl", description="d"))
        registry.register(RegisteredCommand(name="k8sgpt", command="k8sgpt", description="d"))
        return ToolService(registry)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tool", ["kubectl", "k8sgpt"])
    @pytest.mark.parametrize(
        "payload",
        [{}, {"args": "get pods"}, {"arguments": 42}, {"arguments": None}, {"arguments": ["get"]}],
    )
    @patch("tools.executor.asyncio.create_subprocess_exec")
    async def test_missing_or_invalid_arguments_never_spawn(
        self, mock_subprocess, service, tool, payload
    ):
        result = await service.call_tool(tool, payload)

        assert result.success is False
        assert result.error_category == "invalid_arguments"
        assert "invalid arguments" in result.error
        mock_subprocess.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [None, "get pods", ["get", "pods"]])
    @patch("tools.executor.asyncio.create_subprocess_exec")
    async def test_non_mapping_payload_rejected(self, mock_subprocess, service, payload):
        result = await service.call_tool("kubectl", payload)

        assert result.error == "invalid arguments format"
        assert result.error_category == "invalid_arguments"
        mock_subprocess.assert_not_called()

    @pytest.mark.asyncio
    @patch("tools.executor.asyncio.create_subprocess_exec")
    async def test_unknown_tool_never_spawns(self, mock_subprocess, service):
        result = await service.call_tool("helm", {"arguments": "list"})

        assert result.success is False
        assert result.error_category == "unknown_tool"
        assert "Unknown tool: helm" in result.error
        mock_subprocess.assert_not_called()


class TestToolServiceDispatch:
    """Dispatch of valid payloads to the executor."""

    @pytest.mark.asyncio
    async def test_tokens_and_timeout_passed_to_executor(self):
        registry = ToolRegistry()
        registry.register(
            RegisteredCommand(name="kubectl", command="kubectl", description="d", timeout=30)
        )
        executor = AsyncMock()
        executor.run.return_value = ToolResult.ok("kubectl", "ok")
        service = ToolService(registry, executor=executor)

        result = await service.call_tool(
            "kubectl", {"arguments": "  get pods\t-n   kube-system \n"}
        )

        assert result.output == "ok"
        executor.run.assert_awaited_once_with(
            "kubectl", ["get", "pods", "-n", "kube-system"], 30, tool_name="kubectl"
        )

    @pytest.mark.asyncio
    async def test_empty_argument_string_yields_no_tokens(self):
        registry = ToolRegistry()
        registry.register(RegisteredCommand(name="k8sgpt", command="k8sgpt", description="d"))
        executor = AsyncMock()
        executor.run.return_value = ToolResult.ok("k8sgpt", "ok")
        service = ToolService(registry, executor=executor)

        await service.call_tool("k8sgpt", {"arguments": ""})

        assert executor.run.await_args[0][1] == []

    @pytest.mark.asyncio
    async def test_extra_payload_fields_ignored(self):
        registry = ToolRegistry()
        registry.register(RegisteredCommand(name="kubectl", command="kubectl", description="d"))
        executor = AsyncMock()
        executor.run.return_value = ToolResult.ok("kubectl", "ok")
        service = ToolService(registry, executor=executor)

        result = await service.call_tool(
            "kubectl", {"arguments": "version", "reason": "check"}
        )

        assert result.success is True

    @pytest.mark.asyncio
    async def test_runs_real_command(self, python_service):
        result = await python_service.call_tool("python", {"arguments": "-c print(42)"})

        assert result.success is True
        assert result.output == "42"
        assert result.tool_name == "python"

    @pytest.mark.asyncio
    async def test_missing_binary_surfaces_execution_error(self, python_service):
        result = await python_service.call_tool("missing", {"arguments": "get pods"})

        assert result.error_category == "execution_error"

    def test_list_tools(self, python_service):
        assert [d.name for d in python_service.list_tools()] == ["python", "missing"]


class TestLocalToolClient:
    """Tests for the in-process tool client."""

    @pytest.mark.asyncio
    async def test_success_returns_text(self, python_service):
        client = LocalToolClient(python_service)

        assert await client.call_tool("python", {"arguments": "-c print('hi')"}) == "hi"

    @pytest.mark.asyncio
    async def test_failure_raises_with_result(self, python_service):
        client = LocalToolClient(python_service)

        with pytest.raises(ToolInvocationError) as exc_info:
            await client.call_tool("python", {"arguments": "-c import(sys"})

        assert exc_info.value.result.error_category == "non_zero_exit"
        assert "exited with code 1" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_list_tools(self, python_service):
        client = LocalToolClient(python_service)

        tools = await client.list_tools()
        assert {t.name for t in tools} == {"python", "missing"}
