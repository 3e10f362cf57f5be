"""Kubernetes Troubleshooter MCP Server.

This MCP server exposes one tool per configured external command. By default:
1. k8sgpt - AI-powered analysis of cluster problems
2. kubectl - direct cluster inspection and patching

Each tool takes a single string parameter, "arguments", which is split on
whitespace and passed to the command. The server runs either over stdio
(one client, line-oriented) or over SSE (many networked clients).
"""
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
import uvicorn
from mcp.server import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Mount, Route

from models.config import Config, LoggingConfig, load_config
from tools import ToolRegistry, ToolService

# Project directory (where server.py is located) - for config and logs
PROJECT_DIR = Path(__file__).parent.absolute()

logger = logging.getLogger(__name__)


class ToolExecutionError(Exception):
    """Raised inside the MCP handler so the client receives an error result."""


def configure_logging(settings: Optional[LoggingConfig] = None) -> None:
    """Log to a file in the project directory and to stderr.

    stdout stays untouched because the stdio transport owns it.
    """
    settings = settings or LoggingConfig()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.file:
        log_file = Path(settings.file)
        if not log_file.is_absolute():
            log_file = PROJECT_DIR / log_file
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, settings.level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def create_server(
    service: ToolService,
    name: str = "kubernetes-troubleshooter",
    version: str = "1.0.0",
) -> Server:
    """
    Build an MCP server around a tool service.

    Args:
        service: Service that owns the registered tools
        name: Server name reported at initialization
        version: Server version reported at initialization

    Returns:
        Low-level MCP server with list_tools and call_tool handlers
    """
    app = Server(name, version=version)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List registered command tools."""
        return [
            Tool(
                name=definition.name,
                description=definition.description,
                inputSchema=definition.input_schema,
            )
            for definition in service.list_tools()
        ]

    # The service validates payloads itself so callers see its error messages.
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        """
        Handle tool calls from MCP clients.

        Raises:
            ToolExecutionError: If the tool is unknown, the payload is invalid,
                or the command fails; the message carries the classification
        """
        logger.info(f"Tool call received: {name} with arguments: {arguments}")

        result = await service.call_tool(name, arguments)
        if not result.success:
            logger.error(f"Tool call failed ({result.error_category}): {result.error}")
            raise ToolExecutionError(result.error)

        return [TextContent(type="text", text=result.output or "")]

    return app


def create_sse_app(app: Server) -> Starlette:
    """Starlette app serving the SSE stream at /sse and client posts at /messages/."""
    sse = SseServerTransport("/messages/")

    async def handle_sse(request: Request) -> Response:
        async with sse.connect_sse(
            request.scope, request.receive, request._send
        ) as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())
        return Response()

    return Starlette(
        routes=[
            Route("/sse", endpoint=handle_sse, methods=["GET"]),
            Mount("/messages/", app=sse.handle_post_message),
        ]
    )


async def run_stdio(app: Server) -> None:
    """Serve one client over stdin/stdout."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


async def run_sse(app: Server, host: str, port: int) -> None:
    """Serve any number of clients over SSE until interrupted."""
    server = uvicorn.Server(
        uvicorn.Config(create_sse_app(app), host=host, port=port, log_level="info")
    )
    await server.serve()


def build_service(config: Config) -> ToolService:
    return ToolService(ToolRegistry.from_config(config))


@click.command()
@click.option(
    "--sse/--stdio",
    "sse_mode",
    default=None,
    help="Run in SSE mode instead of stdio mode (default: from config, sse)",
)
@click.option("--host", default=None, help="SSE bind host")
@click.option("--port", default=None, type=int, help="SSE bind port")
@click.option(
    "--config",
    "config_path",
    default=str(PROJECT_DIR / "config.yaml"),
    show_default=True,
    help="Path to config.yaml",
)
def main(
    sse_mode: Optional[bool],
    host: Optional[str],
    port: Optional[int],
    config_path: str,
):
    """Run the Kubernetes troubleshooting MCP server."""
    config = load_config(config_path)
    configure_logging(config.logging)
    logger.info(f"Configuration loaded from: {config_path}")

    app = create_server(build_service(config), config.server.name, config.server.version)

    if sse_mode is None:
        sse_mode = config.server.transport == "sse"

    if sse_mode:
        host = host or config.server.host
        port = port or config.server.port
        logger.info(f"Starting SSE server on {host}:{port}")
        asyncio.run(run_sse(app, host, port))
    else:
        logger.info("Starting stdio server")
        asyncio.run(run_stdio(app))


if __name__ == "__main__":
    main()
