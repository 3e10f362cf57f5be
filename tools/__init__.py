"""External command tools: executor, registry and service."""
from tools.executor import CommandExecutor
from tools.registry import RegisteredCommand, ToolRegistry
from tools.service import LocalToolClient, ToolInvocationError, ToolService

__all__ = [
    "CommandExecutor",
    "LocalToolClient",
    "RegisteredCommand",
    "ToolInvocationError",
    "ToolRegistry",
    "ToolService",
]
