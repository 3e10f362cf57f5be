"""Interactive troubleshooting console.

Connects to the tool server, then answers one question at a time by running
the agent loop until the oracle responds, stops calling tools, or the
iteration limit is hit.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import click

from adapters import MCPToolClient, OracleError, create_adapter
from models.config import Config, load_config
from models.schema import AgentResult
from server import PROJECT_DIR, build_service, configure_logging
from tools import LocalToolClient
from troubleshooting import AgentLoop, ToolClient

logger = logging.getLogger(__name__)

QUESTION_PROMPT = (
    "\nEnter your question about the Kubernetes cluster (type 'quit' to exit):"
)


@asynccontextmanager
async def open_tool_client(
    config: Config, transport: str, server_url: Optional[str] = None
) -> AsyncIterator[ToolClient]:
    """Open the tool client for the chosen transport and report the server."""
    if transport == "local":
        click.echo(
            f"Initialized with server: {config.server.name} "
            f"{config.server.version} (in-process)"
        )
        yield LocalToolClient(build_service(config))
        return

    if transport == "stdio":
        connection = MCPToolClient.connect_stdio(
            config.client.server_command,
            config.client.server_args,
            cwd=str(PROJECT_DIR),
        )
    else:
        connection = MCPToolClient.connect_sse(server_url or config.client.server_url)

    async with connection as client:
        if client.server_info:
            click.echo(
                f"Initialized with server: {client.server_info.name} "
                f"{client.server_info.version}"
            )
        yield client


def format_result(result: AgentResult, max_iterations: int) -> str:
    """Render a loop outcome for the console."""
    if result.status == "answered":
        return (
            f"\nGot LLM response: {result.answer}\n"
            f"Task completed after {result.iterations} iterations"
        )
    if result.status == "completed":
        return (
            f"\nNo more tool calls, task completed after {result.iterations} iterations"
        )
    return (
        f"\nReached maximum iterations ({max_iterations}) without completing the task"
    )


def read_question() -> str:
    click.echo(QUESTION_PROMPT)
    return input()


async def console(agent: AgentLoop, max_iterations: int) -> None:
    """Prompt for questions until 'quit' or end of input."""
    tools = await agent.tool_definitions()
    click.echo("Available tools:")
    for tool in tools:
        click.echo(f"- {tool.name}: {tool.description}")

    while True:
        try:
            question = await asyncio.to_thread(read_question)
        except EOFError:
            click.echo("Exiting.")
            return

        question = question.strip()
        if question.lower() == "quit":
            click.echo("Exiting.")
            return
        if not question:
            continue

        click.echo(f"> {question}")
        try:
            result = await agent.run(question)
        except OracleError as e:
            logger.error(f"Error running prompt: {e}")
            click.echo(f"Error running prompt: {e}", err=True)
            continue
        except Exception as e:
            logger.error(f"Error running prompt: {type(e).__name__}: {e}", exc_info=True)
            click.echo(f"Error running prompt: {e}", err=True)
            continue

        click.echo(format_result(result, max_iterations))


async def run_console(config: Config, transport: str, server_url: Optional[str]) -> None:
    oracle = create_adapter(config.oracle)
    async with open_tool_client(config, transport, server_url) as tools:
        agent = AgentLoop(
            oracle,
            tools,
            model=config.oracle.model,
            seed=config.oracle.seed,
            config=config.agent,
        )
        await console(agent, config.agent.max_iterations)


@click.command()
@click.option(
    "--config",
    "config_path",
    default=str(PROJECT_DIR / "config.yaml"),
    show_default=True,
    help="Path to config.yaml",
)
@click.option(
    "--transport",
    type=click.Choice(["sse", "stdio", "local"]),
    default=None,
    help="How to reach the tool server (default: from config, sse)",
)
@click.option("--server-url", default=None, help="SSE endpoint of the tool server")
def main(config_path: str, transport: Optional[str], server_url: Optional[str]):
    """Ask questions about a Kubernetes cluster."""
    config = load_config(config_path)
    configure_logging(config.logging)

    if not config.oracle.api_key:
        raise click.ClickException(
            f"{config.oracle.api_key_env} environment variable is not set"
        )

    asyncio.run(run_console(config, transport or config.client.transport, server_url))


if __name__ == "__main__":
    main()
