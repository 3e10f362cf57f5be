"""Conversation state owned by a single agent loop run."""
from dataclasses import dataclass, field
from typing import List

from models.schema import ChatMessage
from models.tool_schema import ToolDefinition


@dataclass
class ConversationState:
    """
    Messages, available tools and the iteration counter for one question.

    The counter starts at 1 and only moves forward; the run is exhausted once
    it reaches max_iterations.
    """

    max_iterations: int
    tools: List[ToolDefinition] = field(default_factory=list)
    messages: List[ChatMessage] = field(default_factory=list)
    iteration: int = 1

    @classmethod
    def start(
        cls,
        system_prompt: str,
        question: str,
        tools: List[ToolDefinition],
        max_iterations: int,
    ) -> "ConversationState":
        state = cls(max_iterations=max_iterations, tools=list(tools))
        state.append("system", system_prompt)
        state.append("user", question)
        return state

    def append(self, role: str, content: str) -> None:
        self.messages.append(ChatMessage(role=role, content=content))

    def append_system(self, content: str) -> None:
        self.append("system", content)

    def append_assistant(self, content: str) -> None:
        self.append("assistant", content)

    def advance(self) -> None:
        self.iteration += 1

    @property
    def exhausted(self) -> bool:
        return self.iteration >= self.max_iterations

    @property
    def rounds_completed(self) -> int:
        return self.iteration - 1
