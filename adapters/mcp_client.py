"""MCP client adapter: reaches the tool server over SSE or stdio."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from mcp import ClientSession, StdioServerParameters
from mcp.client.sse import sse_client
from mcp.client.stdio import stdio_client
from mcp.types import Implementation

from models.tool_schema import ToolDefinition
from tools.service import ToolInvocationError

logger = logging.getLogger(__name__)

CLIENT_INFO = Implementation(name="mcphost", version="0.1.0")
DEFAULT_INIT_TIMEOUT = 30.0


class MCPToolClient:
    """
    Tool client backed by an initialized MCP session.

    Use connect_sse() or connect_stdio() to open one; both close the session
    and transport on exit.
    """

    def __init__(
        self, session: ClientSession, server_info: Optional[Implementation] = None
    ):
        self.session = session
        self.server_info = server_info

    @classmethod
    async def _initialize(
        cls, session: ClientSession, init_timeout: float
    ) -> "MCPToolClient":
        result = await asyncio.wait_for(session.initialize(), timeout=init_timeout)
        logger.info(
            f"Initialized with server: {result.serverInfo.name} {result.serverInfo.version}"
        )
        return cls(session, result.serverInfo)

    @classmethod
    @asynccontextmanager
    async def connect_sse(
        cls, url: str, init_timeout: float = DEFAULT_INIT_TIMEOUT
    ) -> AsyncIterator["MCPToolClient"]:
        """Connect to a server's SSE endpoint (e.g. http://localhost:8090/sse)."""
        logger.info(f"Connecting to MCP server over SSE: {url}")
        async with sse_client(url) as (read_stream, write_stream):
            async with ClientSession(
                read_stream, write_stream, client_info=CLIENT_INFO
            ) as session:
                yield await cls._initialize(session, init_timeout)

    @classmethod
    @asynccontextmanager
    async def connect_stdio(
        cls,
        command: str,
        args: Optional[List[str]] = None,
        cwd: Optional[str] = None,
        init_timeout: float = DEFAULT_INIT_TIMEOUT,
    ) -> AsyncIterator["MCPToolClient"]:
        """Spawn a server subprocess and talk to it over stdio."""
        params = StdioServerParameters(command=command, args=args or [], cwd=cwd)
        logger.info(f"Starting MCP server over stdio: {command} {' '.join(params.args)}")
        async with stdio_client(params) as (read_stream, write_stream):
            async with ClientSession(
                read_stream, write_stream, client_info=CLIENT_INFO
            ) as session:
                yield await cls._initialize(session, init_timeout)

    async def list_tools(self) -> List[ToolDefinition]:
        result = await self.session.list_tools()
        return [
            ToolDefinition(
                name=tool.name,
                description=tool.description or "",
                input_schema=tool.inputSchema,
            )
            for tool in result.tools
        ]

    async def call_tool(self, name: str, arguments: dict) -> str:
        """
        Invoke a tool and return its text content.

        Raises:
            ToolInvocationError: If the server flags the result as an error
        """
        result = await self.session.call_tool(name, arguments)

        parts: list[str] = []
        for item in result.content or []:
            if hasattr(item, "text"):
                parts.append(item.text)
            else:
                parts.append(str(item))
        text = "\n".join(parts)

        if result.isError:
            raise ToolInvocationError(text or f"{name} call failed")
        return text
