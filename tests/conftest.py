"""Pytest fixtures for all test modules."""
import sys
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest

from models.config import AgentConfig
from models.schema import ChatMessage, OracleResponse, ToolCallIntent
from models.tool_schema import ToolDefinition
from tools import RegisteredCommand, ToolRegistry, ToolService

PYTHON = sys.executable


class MockOracle:
    """Oracle double; records a snapshot of the conversation on every call."""

    def __init__(self):
        self.complete_mock = AsyncMock(return_value=OracleResponse(content="done"))

    async def complete(
        self,
        messages: List[ChatMessage],
        tools: List[ToolDefinition],
        model: str,
        seed: Optional[int] = None,
    ) -> OracleResponse:
        return await self.complete_mock(list(messages), list(tools), model, seed)


class MockToolClient:
    """Tool client double with kubectl and k8sgpt definitions."""

    def __init__(self):
        self.definitions = [
            ToolDefinition(name="kubectl", description="Inspect the cluster"),
            ToolDefinition(name="k8sgpt", description="Analyze the cluster"),
        ]
        self.list_tools_mock = AsyncMock(side_effect=lambda: list(self.definitions))
        self.call_tool_mock = AsyncMock(return_value="NAME   READY\npod-1  1/1")

    async def list_tools(self) -> List[ToolDefinition]:
        return await self.list_tools_mock()

    async def call_tool(self, name: str, arguments: dict) -> str:
        return await self.call_tool_mock(name, arguments)


def tool_call(
    name: str = "kubectl",
    arguments: str = '{"arguments": "get pods -n kube-system"}',
    call_id: str = "call_1",
) -> ToolCallIntent:
    return ToolCallIntent(id=call_id, name=name, arguments=arguments)


@pytest.fixture
def make_tool_call():
    return tool_call


@pytest.fixture
def mock_oracle():
    return MockOracle()


@pytest.fixture
def mock_tools():
    return MockToolClient()


@pytest.fixture
def agent_config():
    """Loop bounds used by most tests; retry delay patched out separately."""
    return AgentConfig(max_iterations=5, tool_call_timeout=30, retry_delay=2)


@pytest.fixture
def python_registry():
    """
    Registry whose tools run the current Python interpreter.

    'arguments' such as "-c print(42)" exercise real process execution without
    depending on kubectl or k8sgpt being installed.
    """
    registry = ToolRegistry()
    registry.register(
        RegisteredCommand(
            name="python",
            command=PYTHON,
            description="Run the Python interpreter",
            timeout=10,
        )
    )
    registry.register(
        RegisteredCommand(
            name="missing",
            command="definitely-not-a-real-binary-k8s",
            description="A binary that is not installed",
            timeout=10,
        )
    )
    return registry


@pytest.fixture
def python_service(python_registry):
    return ToolService(python_registry)


@pytest.fixture
def sample_config():
    """
    Sample configuration for testing.

    Returns:
        dict: Sample configuration dict
    """
    return {
        "version": "1.0",
        "server": {"name": "kubernetes-troubleshooter", "version": "1.0.0"},
        "tools": {
            "kubectl": {
                "command": "kubectl",
                "description": "Use 'kubectl' command to check if there are any issues.",
                "argument_description": "The arguments to pass to the kubectl command",
                "timeout": 30,
            },
            "k8sgpt": {
                "command": "k8sgpt",
                "description": "Execute 'k8sgpt' command to interact with a Kubernetes cluster.",
            },
        },
        "oracle": {
            "type": "openai",
            "base_url": "https://api.openai.com/v1",
            "api_key": "sk-test",
            "model": "gpt-4o-mini",
        },
        "agent": {"max_iterations": 5, "tool_call_timeout": 30, "retry_delay": 2},
    }
