"""OpenAI chat-completions oracle adapter."""
from typing import List, Optional, Tuple

from adapters.base_http import BaseHTTPAdapter
from models.schema import ChatMessage, OracleResponse, ToolCallIntent
from models.tool_schema import ToolDefinition


def tool_declaration(tool: ToolDefinition) -> dict:
    """
    Declare a tool as a callable function for the oracle.

    Every tool takes exactly one required string parameter, 'arguments'.
    """
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": {
                "type": "object",
                "properties": {
                    "arguments": {"type": "string"},
                },
                "required": ["arguments"],
            },
        },
    }


class OpenAIAdapter(BaseHTTPAdapter):
    """
    Adapter for the OpenAI chat completions API.

    API Reference: https://platform.openai.com/docs/api-reference/chat
    Default endpoint: https://api.openai.com/v1
    """

    def build_request(
        self,
        messages: List[ChatMessage],
        tools: List[ToolDefinition],
        model: str,
        seed: Optional[int] = None,
    ) -> Tuple[str, dict[str, str], dict]:
        """
        Build a chat completions request with function tools.

        POST /chat/completions
        Authorization: Bearer <api_key>
        """
        endpoint = "/chat/completions"

        headers = {"Content-Type": "application/json", **self.default_headers}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        body: dict = {
            "model": model,
            "messages": [message.model_dump() for message in messages],
        }
        if tools:
            body["tools"] = [tool_declaration(tool) for tool in tools]
        if seed is not None:
            body["seed"] = seed

        return (endpoint, headers, body)

    def parse_response(self, response_json: dict) -> OracleResponse:
        """
        Parse an OpenAI chat completion.

        Only the first choice is used:
        {
          "choices": [{
            "message": {
              "role": "assistant",
              "content": null,
              "tool_calls": [{
                "id": "call_abc",
                "type": "function",
                "function": {"name": "kubectl", "arguments": "{\\"arguments\\": \\"get pods\\"}"}
              }]
            }
          }]
        }

        Raises:
            KeyError: If response doesn't contain expected fields
            IndexError: If choices array is empty
        """
        if "choices" not in response_json:
            raise KeyError(
                f"Response missing 'choices' field. "
                f"Received keys: {list(response_json.keys())}"
            )

        if len(response_json["choices"]) == 0:
            raise IndexError("Response has empty 'choices' array")

        choice = response_json["choices"][0]

        if "message" not in choice:
            raise KeyError(
                f"Choice missing 'message' field. "
                f"Received keys: {list(choice.keys())}"
            )

        message = choice["message"]
        tool_calls = [
            ToolCallIntent(
                id=call.get("id") or "",
                name=call["function"]["name"],
                arguments=call["function"].get("arguments") or "",
            )
            for call in message.get("tool_calls") or []
        ]

        return OracleResponse(content=message.get("content") or "", tool_calls=tool_calls)
