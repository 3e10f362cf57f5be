"""Registry of external commands exposed as tools."""
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, TYPE_CHECKING

from models.tool_schema import ToolDefinition, arguments_schema

if TYPE_CHECKING:
    from models.config import Config

logger = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT = 30.0


@dataclass(frozen=True)
class RegisteredCommand:
    """
    One external command exposed as a tool.

    kubectl and k8sgpt are both instances of this record; they differ only in
    name, binary and description.
    """

    name: str
    command: str
    description: str
    argument_description: Optional[str] = None
    timeout: float = DEFAULT_TOOL_TIMEOUT

    def definition(self) -> ToolDefinition:
        """Discovery view of this tool."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=arguments_schema(
                self.argument_description
                or f"The arguments to pass to the {self.command} command"
            ),
        )


class ToolRegistry:
    """Maps tool names to their registered commands."""

    def __init__(self):
        self._commands: Dict[str, RegisteredCommand] = {}

    def register(self, entry: RegisteredCommand) -> None:
        """
        Register a command.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if entry.name in self._commands:
            raise ValueError(f"Tool '{entry.name}' is already registered")
        self._commands[entry.name] = entry
        logger.info(f"Registered tool: {entry.name} (command: {entry.command})")

    def get(self, name: str) -> Optional[RegisteredCommand]:
        return self._commands.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[RegisteredCommand]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def definitions(self) -> List[ToolDefinition]:
        """Tool definitions in registration order."""
        return [entry.definition() for entry in self._commands.values()]

    @classmethod
    def from_config(cls, config: "Config") -> "ToolRegistry":
        """Build a registry from the ``tools`` section of the configuration."""
        registry = cls()
        for name, tool_config in config.tools.items():
            registry.register(
                RegisteredCommand(
                    name=name,
                    command=tool_config.command,
                    description=tool_config.description,
                    argument_description=tool_config.argument_description,
                    timeout=tool_config.timeout,
                )
            )
        return registry
