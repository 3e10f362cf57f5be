"""Transport-agnostic tool service and its in-process client."""
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from models.tool_schema import (CommandArguments, ToolCallRequest, ToolDefinition,
                                ToolResult)
from tools.executor import CommandExecutor
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolInvocationError(Exception):
    """Raised by tool clients when a tool call does not succeed."""

    def __init__(self, message: str, result: Optional[ToolResult] = None):
        super().__init__(message)
        self.result = result


class ToolService:
    """
    Dispatches tool calls to registered external commands.

    Holds no per-call state: every call decodes its own payload and spawns its
    own process, so concurrent callers never share buffers.
    """

    def __init__(
        self, registry: ToolRegistry, executor: Optional[CommandExecutor] = None
    ):
        self.registry = registry
        self.executor = executor or CommandExecutor()

    def list_tools(self) -> List[ToolDefinition]:
        return self.registry.definitions()

    async def call_tool(self, name: str, arguments: Any) -> ToolResult:
        """
        Validate the payload and run the tool's command.

        Args:
            name: Registered tool name
            arguments: Payload; must be a mapping with a string 'arguments' field

        Returns:
            ToolResult; invalid payloads and unknown tools fail without spawning
        """
        return await self.invoke(ToolCallRequest(name=name, arguments=arguments))

    async def invoke(self, request: ToolCallRequest) -> ToolResult:
        name, arguments = request.name, request.arguments
        entry = self.registry.get(name)
        if entry is None:
            logger.error(f"Unknown tool: {name}")
            return ToolResult.failure(name, "unknown_tool", f"Unknown tool: {name}")

        if not isinstance(arguments, dict):
            logger.error(f"Invalid payload for {name}: {type(arguments).__name__}")
            return ToolResult.failure(
                name, "invalid_arguments", "invalid arguments format"
            )

        try:
            payload = CommandArguments.model_validate(arguments)
        except ValidationError as e:
            logger.error(f"Invalid payload for {name}: {e.errors()}")
            return ToolResult.failure(
                name,
                "invalid_arguments",
                f"invalid arguments: missing or invalid 'arguments' for {entry.command}",
            )

        return await self.executor.run(
            entry.command, payload.tokens(), entry.timeout, tool_name=name
        )


class LocalToolClient:
    """Exposes a ToolService in-process through the tool client contract."""

    def __init__(self, service: ToolService):
        self.service = service

    async def list_tools(self) -> List[ToolDefinition]:
        return self.service.list_tools()

    async def call_tool(self, name: str, arguments: dict) -> str:
        result = await self.service.call_tool(name, arguments)
        if not result.success:
            raise ToolInvocationError(result.error or "tool call failed", result)
        return result.output or ""
