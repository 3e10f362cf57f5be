"""Pydantic models for the troubleshooting conversation."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """Single message in the conversation sent to the oracle."""

    role: Literal["system", "user", "assistant"] = Field(
        ..., description="Message author role"
    )
    content: str = Field(..., description="Message text")


class ToolCallIntent(BaseModel):
    """A tool call proposed by the oracle."""

    id: str = Field(default="", description="Oracle-assigned call identifier")
    name: str = Field(..., description="Tool name to invoke")
    arguments: str = Field(
        default="", description="JSON-encoded argument payload, exactly as emitted"
    )


class OracleResponse(BaseModel):
    """One completion from the oracle: final text, tool calls, or neither."""

    content: str = Field(default="", description="Final text content, may be empty")
    tool_calls: List[ToolCallIntent] = Field(
        default_factory=list, description="Tool calls in the order returned"
    )


class AgentResult(BaseModel):
    """Outcome of one agent loop run."""

    status: Literal["answered", "completed", "exhausted"] = Field(
        ...,
        description=(
            "answered: oracle returned final text; "
            "completed: oracle stopped calling tools without text; "
            "exhausted: iteration cap reached"
        ),
    )
    answer: Optional[str] = Field(None, description="Final answer text, if any")
    iterations: int = Field(
        ..., ge=0, description="Rounds in which tool calls were dispatched"
    )
    tool_calls: int = Field(
        default=0, ge=0, description="Tool invocations attempted during the run"
    )
    messages: List[ChatMessage] = Field(
        default_factory=list, description="Conversation at termination"
    )
