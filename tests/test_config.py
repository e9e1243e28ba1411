import pytest
from pydantic import ValidationError

from agent_runtime.config import (
    AgentConfig,
    FileSystemToolDefinition,
    HttpToolDefinition,
    parse_duration,
)
from agent_runtime.exceptions import ConfigError


class TestParseDuration:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("30s", 30.0),
            ("1500ms", 1.5),
            ("0s", 0.0),
            ("45", 45.0),
            (" 2s ", 2.0),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "soon", "1.5s", "-3s", "10m", "ms", "²s", "³"])
    def test_invalid(self, value):
        with pytest.raises(ConfigError, match="Invalid timeout format"):
            parse_duration(value)


class TestAgentConfig:
    def test_defaults(self):
        config = AgentConfig(name="agent", llm={"model": "claude-3-5-sonnet-20241022"})

        assert config.system_prompt == ""
        assert config.llm.provider == "anthropic"
        assert config.llm.temperature == 0.7
        assert config.llm.max_tokens == 4096
        assert config.execution.strategy == "react"
        assert config.execution.max_iterations == 10
        assert config.execution.timeout == "30s"
        assert config.tools == []

    def test_tool_definitions_discriminated_by_type(self):
        config = AgentConfig.model_validate(
            {
                "name": "agent",
                "llm": {"model": "m"},
                "tools": [
                    {
                        "type": "builtin.http",
                        "name": "weather",
                        "config": {"url": "https://api.example.com/weather"},
                    },
                    {
                        "type": "builtin.filesystem",
                        "name": "files",
                        "config": {"base_dir": "/tmp/agent", "read_only": True},
                    },
                ],
            }
        )

        assert isinstance(config.tools[0], HttpToolDefinition)
        assert config.tools[0].config.method == "GET"
        assert isinstance(config.tools[1], FileSystemToolDefinition)
        assert config.tools[1].config.read_only is True

    def test_unknown_tool_type_rejected(self):
        with pytest.raises(ValidationError):
            AgentConfig.model_validate(
                {
                    "name": "agent",
                    "llm": {"model": "m"},
                    "tools": [{"type": "mcp", "name": "x", "config": {}}],
                }
            )

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"llm": {"model": "m", "temperature": 3.0}},
            {"llm": {"model": "m", "max_tokens": 0}},
            {"execution": {"max_iterations": 0}},
        ],
    )
    def test_invalid_values(self, overrides):
        data = {"name": "agent", "llm": {"model": "m"}, **overrides}
        with pytest.raises(ValidationError):
            AgentConfig.model_validate(data)

    def test_llm_config_fields(self):
        config = AgentConfig(name="agent", llm={"provider": "openai", "model": "gpt-4o-mini"})

        assert config.llm.provider == "openai"
        assert "stream" not in config.llm.model_dump()
