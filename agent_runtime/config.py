"""Typed agent configuration.

Loading and schema validation of config files happen upstream; these models
are what the executor, strategies and tool factory consume.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from agent_runtime.exceptions import ConfigError


class LLMConfig(BaseModel):
    # Names the adaptor a caller should build; the engine takes a ready ModelAdaptor
    provider: str = "anthropic"
    model: str
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4096, gt=0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class ExecutionConfig(BaseModel):
    strategy: str = "react"
    max_iterations: int = Field(default=10, gt=0)
    timeout: str = "30s"
    stop_sequences: list[str] = Field(default_factory=list)


class HttpToolConfig(BaseModel):
    url: str
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: str = "30s"


class FileSystemToolConfig(BaseModel):
    base_dir: Optional[str] = None
    read_only: bool = False


class HttpToolDefinition(BaseModel):
    type: Literal["builtin.http"] = "builtin.http"
    name: str
    description: Optional[str] = None
    config: HttpToolConfig


class FileSystemToolDefinition(BaseModel):
    type: Literal["builtin.filesystem"] = "builtin.filesystem"
    name: str
    description: Optional[str] = None
    config: FileSystemToolConfig = Field(default_factory=FileSystemToolConfig)


ToolConfig = Annotated[
    Union[HttpToolDefinition, FileSystemToolDefinition],
    Field(discriminator="type"),
]


class AgentConfig(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    version: str = "0.1.0"
    description: Optional[str] = None
    system_prompt: str = ""
    llm: LLMConfig
    tools: list[ToolConfig] = Field(default_factory=list)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    metadata: dict[str, str] = Field(default_factory=dict)


def parse_duration(value: str) -> float:
    """Parse ``"30s"``, ``"1500ms"`` or bare seconds into seconds.

    Raises:
        ConfigError: If the string is not a non-negative integer with an
            optional ``s``/``ms`` suffix.
    """
    text = value.strip()
    # "ms" must be checked before "s"
    if text.endswith("ms"):
        number, scale = text[:-2], 0.001
    elif text.endswith("s"):
        number, scale = text[:-1], 1.0
    else:
        number, scale = text, 1.0

    if not number.strip().isdecimal():
        raise ConfigError(f"Invalid timeout format: {value!r}")
    return int(number) * scale
