"""Configuration loading and validation."""
import os
import re
from pathlib import Path
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_REFERENCE = re.compile(r"\$\{([^}]+)\}")


def unset_env_vars(value: str) -> list[str]:
    """Names of ${VAR} references in value that are not set."""
    return [name for name in ENV_REFERENCE.findall(value) if os.getenv(name) is None]


def expand_env_vars(value: str) -> str:
    return ENV_REFERENCE.sub(lambda match: os.environ[match.group(1)], value)


class ServerConfig(BaseModel):
    """MCP server identity and transport settings."""

    name: str = "kubernetes-troubleshooter"
    version: str = "1.0.0"
    transport: Literal["sse", "stdio"] = "sse"
    host: str = "localhost"
    port: int = Field(default=8090, ge=1, le=65535)


class ToolConfig(BaseModel):
    """Configuration for one registered external command."""

    command: str = Field(..., min_length=1, description="Binary looked up on PATH")
    description: str = Field(..., description="Guidance for the oracle")
    argument_description: Optional[str] = Field(
        None, description="Description of the 'arguments' parameter"
    )
    timeout: float = Field(
        default=30, gt=0, description="Per-call timeout in seconds"
    )


class OracleConfig(BaseModel):
    """Configuration for the chat-completion oracle."""

    type: Literal["openai", "openrouter"] = "openai"
    base_url: str = "https://api.openai.com/v1"
    api_key: Optional[str] = None
    api_key_env: str = Field(
        default="OPENAI_API_KEY",
        description="Variable named in the error when no API key is available",
    )
    model: str = "gpt-4o-mini"
    seed: Optional[int] = 0
    timeout: int = Field(default=60, ge=1)
    max_retries: int = Field(default=3, ge=1)
    headers: Optional[dict[str, str]] = None

    @field_validator("base_url")
    @classmethod
    def expand_base_url(cls, v: str) -> str:
        missing = unset_env_vars(v)
        if missing:
            raise ValueError(
                f"Environment variable '{missing[0]}' referenced by base_url is not set"
            )
        return expand_env_vars(v)

    @field_validator("api_key")
    @classmethod
    def expand_api_key(cls, v: Optional[str]) -> Optional[str]:
        """An unset variable leaves the key empty so the console can report it."""
        if v is None or unset_env_vars(v):
            return None
        return expand_env_vars(v) or None


class AgentConfig(BaseModel):
    """Agent loop bounds."""

    max_iterations: int = Field(
        default=5, ge=2, description="Counter value at which the loop gives up"
    )
    tool_call_timeout: float = Field(
        default=35,
        gt=0,
        description="Bound on one tool invocation, in seconds; above the per-command timeout",
    )
    retry_delay: float = Field(
        default=2, ge=0, description="Pause after a failed tool call, in seconds"
    )


class ClientConfig(BaseModel):
    """How the console reaches the tool server."""

    transport: Literal["sse", "stdio", "local"] = "sse"
    server_url: str = "http://localhost:8090/sse"
    server_command: str = "python"
    server_args: list[str] = Field(default_factory=lambda: ["server.py", "--stdio"])


class LoggingConfig(BaseModel):
    """Logging destination and level."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    file: Optional[str] = "troubleshooter.log"


class Config(BaseModel):
    """Root configuration model."""

    version: str
    server: ServerConfig = Field(default_factory=ServerConfig)
    tools: dict[str, ToolConfig]
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("tools")
    @classmethod
    def validate_tools(cls, v: dict[str, ToolConfig]) -> dict[str, ToolConfig]:
        if not v:
            raise ValueError("Configuration must register at least one tool")
        return v


def load_config(path: str = "config.yaml") -> Config:
    """
    Read and validate the YAML configuration.

    Variables from a .env file in the working directory are loaded first so
    ${VAR} references in oracle settings can use them.

    Raises:
        FileNotFoundError: If path does not exist
        ValidationError: If a section holds invalid values
    """
    load_dotenv()

    config_file = Path(path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = yaml.safe_load(config_file.read_text()) or {}
    return Config.model_validate(data)
