"""HTTP transport shared by the chat-completion oracles."""
import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import httpx
from tenacity import (retry, retry_if_exception, stop_after_attempt,
                      wait_exponential)

from models.schema import ChatMessage, OracleResponse
from models.tool_schema import ToolDefinition

logger = logging.getLogger(__name__)

RETRYABLE_TRANSPORT_ERRORS = (
    httpx.ConnectError,
    httpx.TimeoutException,
    httpx.NetworkError,
)


class OracleError(Exception):
    """Raised when the oracle cannot produce a usable completion."""


def is_retryable_http_error(exception: BaseException) -> bool:
    """
    Whether a failed completion request is worth sending again.

    Server-side failures (5xx), rate limiting (429) and transport failures are
    transient. Any other status, such as a rejected API key, fails at once.
    """
    if isinstance(exception, httpx.HTTPStatusError):
        status = exception.response.status_code
        return status == 429 or status >= 500
    return isinstance(exception, RETRYABLE_TRANSPORT_ERRORS)


class BaseHTTPAdapter(ABC):
    """
    Base class for oracles reached over an HTTP JSON API.

    Subclasses translate the conversation into a provider request in
    build_request() and turn the provider reply into an OracleResponse in
    parse_response(). This class owns the POST, the retry policy and the
    mapping of every transport or decoding failure onto OracleError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 60,
        max_retries: int = 3,
        api_key: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        """
        Args:
            base_url: API root, e.g. "https://api.openai.com/v1"; a trailing
                slash is dropped
            timeout: Per-request timeout in seconds
            max_retries: Total attempts for transient failures
            api_key: Bearer token, if the provider needs one
            headers: Extra headers sent with every request
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.api_key = api_key
        self.default_headers = headers or {}

    @abstractmethod
    def build_request(
        self,
        messages: List[ChatMessage],
        tools: List[ToolDefinition],
        model: str,
        seed: Optional[int] = None,
    ) -> Tuple[str, dict[str, str], dict]:
        """Return (endpoint path, headers, JSON body) for one completion."""

    @abstractmethod
    def parse_response(self, response_json: dict) -> OracleResponse:
        """
        Extract final text and tool calls from a provider reply.

        May raise KeyError, IndexError, TypeError or ValueError on a body
        that does not have the expected shape.
        """

    async def complete(
        self,
        messages: List[ChatMessage],
        tools: List[ToolDefinition],
        model: str,
        seed: Optional[int] = None,
    ) -> OracleResponse:
        """
        Ask the oracle for the next step of the conversation.

        Raises:
            OracleError: If the request still fails after retries, is rejected,
                or the reply cannot be parsed
        """
        endpoint, headers, body = self.build_request(messages, tools, model, seed)
        url = f"{self.base_url}{endpoint}"
        logger.debug(
            f"Oracle request to {url}: model={model}, messages={len(messages)}, "
            f"tools={len(tools)}, body_size={len(json.dumps(body))} bytes"
        )

        try:
            reply = await self._post_with_retry(url, headers, body)
        except httpx.HTTPStatusError as e:
            raise OracleError(
                f"failed to create chat completion: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise OracleError(f"failed to create chat completion: {e}") from e
        except ValueError as e:
            raise OracleError(f"malformed chat completion response: {e}") from e

        try:
            return self.parse_response(reply)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise OracleError(f"malformed chat completion response: {e}") from e

    async def _post_with_retry(
        self, url: str, headers: dict[str, str], body: dict
    ) -> dict:
        """POST the body, backing off exponentially between transient failures."""

        @retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception(is_retryable_http_error),
            reraise=True,
        )
        async def attempt() -> dict:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, headers=headers, json=body)
                if 400 <= response.status_code < 500:
                    logger.error(
                        f"Oracle rejected request with HTTP {response.status_code}: "
                        f"{response.text}"
                    )
                response.raise_for_status()
                return response.json()

        return await attempt()
