"""Tool definition, request and result models for the troubleshooting tools."""
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr

NO_OUTPUT_PLACEHOLDER = "Command executed successfully with no output"

ErrorCategory = Literal[
    "invalid_arguments",
    "unknown_tool",
    "non_zero_exit",
    "timeout",
    "execution_error",
]


def arguments_schema(description: str) -> Dict[str, Any]:
    """JSON schema for the single required ``arguments`` string parameter."""
    return {
        "type": "object",
        "properties": {
            "arguments": {
                "type": "string",
                "description": description,
            }
        },
        "required": ["arguments"],
    }


class ToolDefinition(BaseModel):
    """A tool as advertised to callers during discovery."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique tool name")
    description: str = Field(
        ..., description="Tells the oracle when to invoke the tool"
    )
    input_schema: Dict[str, Any] = Field(
        default_factory=lambda: arguments_schema("The arguments to pass to the command"),
        description="JSON schema of the accepted payload",
    )


class CommandArguments(BaseModel):
    """Typed decode of an incoming tool payload."""

    arguments: StrictStr = Field(
        ..., description="Raw command-line argument string, e.g. 'get pods -n kube-system'"
    )

    def tokens(self) -> list[str]:
        """Split on runs of whitespace; an empty string yields no tokens."""
        return self.arguments.split()


class ToolCallRequest(BaseModel):
    """Model for a tool invocation request."""

    name: str = Field(..., description="Tool name to invoke")
    arguments: Any = Field(
        default=None, description="Payload, expected to be a mapping with 'arguments'"
    )


class ToolResult(BaseModel):
    """Model for a tool execution result."""

    tool_name: str = Field(..., description="Name of the tool that was executed")
    success: bool = Field(..., description="Whether execution succeeded")
    output: Optional[str] = Field(None, description="Tool output (if successful)")
    error: Optional[str] = Field(None, description="Error message (if failed)")
    error_category: Optional[ErrorCategory] = Field(
        None, description="Failure classification (if failed)"
    )
    exit_code: Optional[int] = Field(
        None, description="Process exit code for non-zero exits"
    )

    @classmethod
    def ok(cls, tool_name: str, output: str) -> "ToolResult":
        return cls(tool_name=tool_name, success=True, output=output)

    @classmethod
    def failure(
        cls,
        tool_name: str,
        category: ErrorCategory,
        error: str,
        exit_code: Optional[int] = None,
    ) -> "ToolResult":
        return cls(
            tool_name=tool_name,
            success=False,
            error=error,
            error_category=category,
            exit_code=exit_code,
        )
