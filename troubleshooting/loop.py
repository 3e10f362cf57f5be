"""Agent loop that lets the oracle drive tool calls until the question is answered."""
import asyncio
import json
import logging
from typing import List, Optional, Protocol

from adapters.base_http import BaseHTTPAdapter
from models.config import AgentConfig
from models.schema import AgentResult, ToolCallIntent
from models.tool_schema import ToolDefinition
from troubleshooting.conversation import ConversationState
from troubleshooting.prompts import (SYSTEM_PROMPT, TOOL_RESULT_HINT,
                                     argument_parse_error_message,
                                     tool_failure_message)

logger = logging.getLogger(__name__)


class ToolClient(Protocol):
    """What the loop needs from the tool service, local or remote."""

    async def list_tools(self) -> List[ToolDefinition]: ...

    async def call_tool(self, name: str, arguments: dict) -> str: ...


class AgentLoop:
    """
    Drives rounds of oracle request, tool dispatch and result feedback.

    Each round sends the whole conversation and the tool catalog to the
    oracle. Final text ends the run, even when tool calls accompany it; a
    response with neither text nor tool calls ends it silently; otherwise
    every requested call is executed in order and its outcome appended to
    the conversation. The run is abandoned once the iteration counter
    reaches the configured maximum.

    Tool failures never escape: they become conversation content. Oracle
    failures propagate to the caller.
    """

    def __init__(
        self,
        oracle: BaseHTTPAdapter,
        tools: ToolClient,
        model: str,
        seed: Optional[int] = None,
        config: Optional[AgentConfig] = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        """
        Initialize the agent loop.

        Args:
            oracle: Chat-completion adapter
            tools: Tool client (MCPToolClient or LocalToolClient)
            model: Model identifier passed to the oracle
            seed: Optional sampling seed
            config: Loop bounds (defaults: 5 iterations, 35s per call, 2s retry delay)
            system_prompt: Instructions opening every conversation
        """
        self.oracle = oracle
        self.tools = tools
        self.model = model
        self.seed = seed
        self.config = config or AgentConfig()
        self.system_prompt = system_prompt
        self._definitions: Optional[List[ToolDefinition]] = None

    async def tool_definitions(self) -> List[ToolDefinition]:
        """Tool catalog, discovered once and reused for every question."""
        if self._definitions is None:
            self._definitions = await self.tools.list_tools()
            logger.info(
                f"Discovered {len(self._definitions)} tools: "
                f"{', '.join(t.name for t in self._definitions)}"
            )
        return self._definitions

    async def run(self, question: str) -> AgentResult:
        """
        Answer one question.

        Returns:
            AgentResult with status answered, completed or exhausted

        Raises:
            OracleError: If the oracle request fails
        """
        state = ConversationState.start(
            self.system_prompt,
            question,
            await self.tool_definitions(),
            self.config.max_iterations,
        )
        tool_calls = 0

        while not state.exhausted:
            logger.info(f"Iteration {state.iteration}: requesting next step")
            response = await self.oracle.complete(
                state.messages, state.tools, model=self.model, seed=self.seed
            )

            if response.content:
                if response.tool_calls:
                    logger.info(
                        f"Dropping {len(response.tool_calls)} tool calls returned with final text"
                    )
                logger.info(
                    f"Task completed after {state.rounds_completed} iterations"
                )
                return self._result(state, "answered", tool_calls, response.content)

            if not response.tool_calls:
                logger.info(
                    f"No more tool calls, task completed after {state.rounds_completed} iterations"
                )
                return self._result(state, "completed", tool_calls)

            for intent in response.tool_calls:
                if await self._dispatch(state, intent):
                    tool_calls += 1

            state.advance()

        logger.warning(
            f"Reached maximum iterations ({state.max_iterations}) without completing the task"
        )
        return self._result(state, "exhausted", tool_calls)

    async def _dispatch(self, state: ConversationState, intent: ToolCallIntent) -> bool:
        """
        Execute one tool-call intent and record its outcome.

        Returns:
            True if the tool was invoked, False if the arguments were rejected
        """
        logger.info(f"Iteration {state.iteration} - Tool call: {intent.name}")
        logger.info(f"Tool call arguments: {intent.arguments}")

        try:
            arguments = json.loads(intent.arguments)
            if not isinstance(arguments, dict):
                raise ValueError(
                    f"expected a JSON object, got {type(arguments).__name__}"
                )
        except ValueError as e:
            logger.warning(f"Error parsing tool arguments for {intent.name}: {e}")
            state.append_system(argument_parse_error_message(e))
            return False

        timeout = self.config.tool_call_timeout
        try:
            text = await asyncio.wait_for(
                self.tools.call_tool(intent.name, arguments), timeout=timeout
            )
        except asyncio.TimeoutError:
            await self._record_failure(
                state, f"{intent.name} call timed out after {timeout:g}s"
            )
            return True
        except Exception as e:
            await self._record_failure(state, e)
            return True

        if text:
            logger.debug(f"Tool result content: {text[:500]}")
            state.append_assistant(text)
            state.append_system(TOOL_RESULT_HINT)
        return True

    async def _record_failure(self, state: ConversationState, error: object) -> None:
        logger.error(f"tool execution failed or timeout: {error}")
        logger.info(f"sleeping for {self.config.retry_delay:g} seconds, before retrying")
        await asyncio.sleep(self.config.retry_delay)
        state.append_system(tool_failure_message(error))

    @staticmethod
    def _result(
        state: ConversationState,
        status: str,
        tool_calls: int,
        answer: Optional[str] = None,
    ) -> AgentResult:
        return AgentResult(
            status=status,
            answer=answer,
            iterations=state.rounds_completed,
            tool_calls=tool_calls,
            messages=list(state.messages),
        )
