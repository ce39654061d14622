"""Environment and render configuration.

The environment is read-only during a render: components may consult it (for
example to adapt output to the target LLM provider) but never change it.
`RenderOptions` bundles the knobs of a single render call.
"""

import getpass
import os
import socket
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Deepest element nesting a walk can reach within the default interpreter
# recursion limit
MAX_RENDER_DEPTH = 150


class Provider(Enum):
    anthropic = "anthropic"
    google = "google"
    openai = "openai"


class OutputFormat(Enum):
    xml = "xml"
    markdown = "markdown"
    json = "json"
    text = "text"


class LlmConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str = "claude-3-sonnet"
    provider: Provider = Provider.anthropic
    max_tokens: int | None = None
    temperature: float | None = None


class OutputConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: OutputFormat = OutputFormat.xml
    trim: bool = True
    indent: str = "  "


class CodeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    language: str = "typescript"


class RuntimeConfig(BaseModel):
    """Values gathered from the machine at render time."""

    model_config = ConfigDict(frozen=True, extra="allow")

    hostname: str = "localhost"
    username: str = "anonymous"
    cwd: str = "/"
    timestamp: int = 0
    date: str = ""
    time: str = ""
    uuid: str = ""


class EnvironmentContext(BaseModel):
    """All environment configuration visible to components."""

    model_config = ConfigDict(frozen=True)

    llm: LlmConfig = Field(default_factory=LlmConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    code: CodeConfig = Field(default_factory=CodeConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)


DEFAULT_ENVIRONMENT = EnvironmentContext()


def create_environment(**overrides: Any) -> EnvironmentContext:
    """Create an environment with section overrides.

    Params:
        overrides: Section name -> model instance or mapping of field values
            (e.g. `llm={"provider": "openai", "model": "gpt-4o"}`)

    Returns:
        New EnvironmentContext
    """
    return EnvironmentContext.model_validate(
        {**DEFAULT_ENVIRONMENT.model_dump(), **_dump_sections(overrides)}
    )


def _dump_sections(overrides: dict[str, Any]) -> dict[str, Any]:
    return {
        name: value.model_dump() if isinstance(value, BaseModel) else value
        for name, value in overrides.items()
    }


def create_runtime_config() -> RuntimeConfig:
    """Collect runtime values (host, user, working directory, clock, uuid)."""
    now = datetime.now(timezone.utc)
    try:
        username = getpass.getuser()
    except (KeyError, OSError):
        username = "anonymous"
    return RuntimeConfig(
        hostname=socket.gethostname(),
        username=username,
        cwd=os.getcwd(),
        timestamp=int(now.timestamp() * 1000),
        date=now.date().isoformat(),
        time=now.strftime("%H:%M:%S"),
        uuid=str(uuid.uuid4()),
    )


class RenderOptions(BaseModel):
    """
    Options for a single render call.

    Params:
        env: Environment configuration; runtime values are filled in per render
        trim: Strip leading/trailing whitespace from the final text
        max_depth: Deepest element nesting rendered before the subtree is cut off
            (at most MAX_RENDER_DEPTH)
        validate_props: Validate props against component schemas
        throw_on_warnings: Promote `warn_*` issues to hard errors
        ignore_warnings: Warning codes to drop entirely
    """

    model_config = ConfigDict(frozen=True)

    env: EnvironmentContext = DEFAULT_ENVIRONMENT
    trim: bool = True
    max_depth: int = Field(default=100, ge=1, le=MAX_RENDER_DEPTH)
    validate_props: bool = True
    throw_on_warnings: bool = False
    ignore_warnings: frozenset[str] = frozenset()
