"""Oracle and tool-server adapter factory and exports."""
from typing import Type

from adapters.base_http import BaseHTTPAdapter, OracleError
from adapters.mcp_client import MCPToolClient
from adapters.openai import OpenAIAdapter
from adapters.openrouter import OpenRouterAdapter
from models.config import OracleConfig


def create_adapter(config: OracleConfig) -> BaseHTTPAdapter:
    """
    Factory function to create the configured oracle adapter.

    Args:
        config: Oracle configuration

    Returns:
        Adapter instance for config.type

    Raises:
        ValueError: If the oracle type is not supported
    """
    http_adapters: dict[str, Type[BaseHTTPAdapter]] = {
        "openai": OpenAIAdapter,
        "openrouter": OpenRouterAdapter,
    }

    if config.type not in http_adapters:
        raise ValueError(
            f"Unknown oracle adapter: '{config.type}'. "
            f"Supported adapters: {', '.join(http_adapters.keys())}"
        )

    return http_adapters[config.type](
        base_url=config.base_url,
        timeout=config.timeout,
        max_retries=config.max_retries,
        api_key=config.api_key,
        headers=config.headers,
    )


__all__ = [
    "BaseHTTPAdapter",
    "MCPToolClient",
    "OpenAIAdapter",
    "OpenRouterAdapter",
    "OracleError",
    "create_adapter",
]
