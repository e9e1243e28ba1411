"""Build a tool registry from agent configuration."""

import logging

from agent_runtime.config import (
    AgentConfig,
    FileSystemToolDefinition,
    HttpToolDefinition,
    ToolConfig,
    parse_duration,
)
from agent_runtime.exceptions import ConfigError
from agent_runtime.tools import (
    CalculatorTool,
    ConfiguredHttpTool,
    FileSystemTool,
    StringTool,
    Tool,
    ToolRegistry,
)

logger = logging.getLogger(__name__)


def build_tool(tool_config: ToolConfig) -> Tool:
    if isinstance(tool_config, HttpToolDefinition):
        cfg = tool_config.config
        return ConfiguredHttpTool(
            name=tool_config.name,
            base_url=cfg.url,
            method=cfg.method,
            headers=cfg.headers,
            timeout=parse_duration(cfg.timeout),
            description=tool_config.description,
        )

    if isinstance(tool_config, FileSystemToolDefinition):
        cfg = tool_config.config
        tool = FileSystemTool.local(cfg.base_dir, read_only=cfg.read_only, name=tool_config.name)
        if tool_config.description:
            tool.description = tool_config.description
        return tool

    raise ConfigError(f"Unsupported tool type: {type(tool_config).__name__}")


def build_tools(config: AgentConfig) -> ToolRegistry:
    """Return the built-in generic tools plus every configured tool.

    ``calculator`` and ``string`` are always available; a configured tool
    with the same name replaces the built-in.
    """
    registry = ToolRegistry([CalculatorTool(), StringTool()])
    for tool_config in config.tools:
        registry.register(build_tool(tool_config))
    logger.debug("Built tools for agent '%s': %s", config.name, registry.names())
    return registry
