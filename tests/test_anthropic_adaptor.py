"""Tests for the Anthropic adaptor."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from agent_runtime.exceptions import (
    ConfigError,
    LLMApiError,
    LLMAuthenticationError,
    LLMInvalidRequest,
    LLMRateLimited,
    LLMStreamError,
    LLMTimeout,
)
from agent_runtime.execution import Message
from agent_runtime.model import FinishReason, LLMRequest


# --- Test fixtures ---


def make_text_block(text):
    block = MagicMock()
    block.type = "text"
    block.text = text
    return block


def make_response(content_blocks, stop_reason="end_turn", input_tokens=12, output_tokens=7):
    response = MagicMock()
    response.id = "msg_123"
    response.model = "claude-3-5-sonnet-20241022"
    response.stop_reason = stop_reason
    response.content = content_blocks
    response.usage = SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens)
    return response


def make_request(**kwargs):
    defaults = {
        "messages": [
            Message.system("You are helpful."),
            Message.user("What is 2+2?"),
            Message.assistant("TOOL: calculator(2+2)"),
            Message.user("Tool Result from calculator: 2+2 = 4"),
        ],
        "model": "claude-3-5-sonnet-20241022",
    }
    defaults.update(kwargs)
    return LLMRequest(**defaults)


def http_response(status, headers=None):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    return httpx.Response(status, request=request, headers=headers or {})


async def event_stream(events):
    for event in events:
        yield event


@pytest.fixture
def adaptor():
    with patch("agent_runtime.adaptors.anthropic.AsyncAnthropic") as mock_cls:
        mock_client = MagicMock()
        mock_client.messages = MagicMock()
        mock_client.messages.create = AsyncMock()
        mock_cls.return_value = mock_client

        from agent_runtime.adaptors.anthropic import AnthropicAdaptor

        a = AnthropicAdaptor(api_key="test-key")
        yield a, mock_client


# --- Constructor tests ---


class TestAnthropicAdaptorInit:
    def test_missing_api_key_raises(self):
        with patch.dict("os.environ", {}, clear=True):
            with patch("agent_runtime.adaptors.anthropic.AsyncAnthropic"):
                from agent_runtime.adaptors.anthropic import AnthropicAdaptor

                with pytest.raises(ConfigError, match="Anthropic API key"):
                    AnthropicAdaptor()

    def test_env_api_key(self):
        with patch.dict("os.environ", {"ANTHROPIC_API_KEY": "env-key"}):
            with patch("agent_runtime.adaptors.anthropic.AsyncAnthropic") as mock_cls:
                from agent_runtime.adaptors.anthropic import AnthropicAdaptor

                a = AnthropicAdaptor()
                assert a.api_key == "env-key"
                assert a.provider_name == "anthropic"
                mock_cls.assert_called_once_with(api_key="env-key", timeout=60.0)


# --- generate ---


class TestGenerate:
    @pytest.mark.asyncio
    async def test_request_params(self, adaptor):
        a, client = adaptor
        client.messages.create.return_value = make_response([make_text_block("ANSWER: 4")])

        await a.generate(make_request(temperature=0.3, stop_sequences=["Observation:"]))

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-3-5-sonnet-20241022"
        assert kwargs["system"] == "You are helpful."
        assert kwargs["max_tokens"] == 4096
        assert kwargs["temperature"] == 0.3
        assert kwargs["stop_sequences"] == ["Observation:"]
        assert "top_p" not in kwargs
        assert kwargs["messages"] == [
            {"role": "user", "content": "What is 2+2?"},
            {"role": "assistant", "content": "TOOL: calculator(2+2)"},
            {"role": "user", "content": "Tool Result from calculator: 2+2 = 4"},
        ]

    @pytest.mark.asyncio
    async def test_no_system_message(self, adaptor):
        a, client = adaptor
        client.messages.create.return_value = make_response([make_text_block("hi")])

        await a.generate(make_request(messages=[Message.user("hi")], max_tokens=100))

        kwargs = client.messages.create.call_args.kwargs
        assert "system" not in kwargs
        assert kwargs["max_tokens"] == 100

    @pytest.mark.asyncio
    async def test_response(self, adaptor):
        a, client = adaptor
        client.messages.create.return_value = make_response(
            [make_text_block("ANSWER: "), make_text_block("4")], stop_reason="max_tokens"
        )

        response = await a.generate(make_request())

        assert response.content == "ANSWER: 4"
        assert response.usage.input_tokens == 12
        assert response.usage.output_tokens == 7
        assert response.finish_reason is FinishReason.LENGTH
        assert response.metadata["id"] == "msg_123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, expected",
        [
            (
                anthropic.AuthenticationError("bad key", response=http_response(401), body=None),
                LLMAuthenticationError,
            ),
            (
                anthropic.BadRequestError("bad request", response=http_response(400), body=None),
                LLMInvalidRequest,
            ),
            (
                anthropic.InternalServerError("overloaded", response=http_response(529), body=None),
                LLMApiError,
            ),
            (
                anthropic.APITimeoutError(
                    request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
                ),
                LLMTimeout,
            ),
        ],
    )
    async def test_error_mapping(self, adaptor, error, expected):
        a, client = adaptor
        client.messages.create.side_effect = error

        with pytest.raises(expected):
            await a.generate(make_request())

    @pytest.mark.asyncio
    async def test_rate_limit_retry_after(self, adaptor):
        a, client = adaptor
        client.messages.create.side_effect = anthropic.RateLimitError(
            "slow down", response=http_response(429, {"retry-after": "20"}), body=None
        )

        with pytest.raises(LLMRateLimited) as exc_info:
            await a.generate(make_request())

        assert exc_info.value.retry_after == 20.0

    @pytest.mark.asyncio
    async def test_status_error_keeps_status(self, adaptor):
        a, client = adaptor
        client.messages.create.side_effect = anthropic.InternalServerError(
            "overloaded", response=http_response(529), body=None
        )

        with pytest.raises(LLMApiError) as exc_info:
            await a.generate(make_request())

        assert exc_info.value.status == 529


# --- stream ---


class TestStream:
    @pytest.mark.asyncio
    async def test_text_deltas_then_final_chunk(self, adaptor):
        a, client = adaptor
        client.messages.create.return_value = event_stream(
            [
                SimpleNamespace(
                    type="message_start",
                    message=SimpleNamespace(usage=SimpleNamespace(input_tokens=20)),
                ),
                SimpleNamespace(
                    type="content_block_delta",
                    delta=SimpleNamespace(type="text_delta", text="ANSWER: "),
                ),
                SimpleNamespace(
                    type="content_block_delta",
                    delta=SimpleNamespace(type="text_delta", text="4"),
                ),
                SimpleNamespace(
                    type="message_delta",
                    delta=SimpleNamespace(stop_reason="end_turn"),
                    usage=SimpleNamespace(output_tokens=3),
                ),
                SimpleNamespace(type="message_stop"),
            ]
        )

        chunks = [chunk async for chunk in a.stream(make_request())]

        assert [c.content for c in chunks] == ["ANSWER: ", "4", ""]
        assert [c.is_final for c in chunks] == [False, False, True]
        assert chunks[-1].usage.input_tokens == 20
        assert chunks[-1].usage.output_tokens == 3
        assert chunks[-1].finish_reason is FinishReason.STOP
        assert client.messages.create.call_args.kwargs["stream"] is True

    @pytest.mark.asyncio
    async def test_stream_without_stop(self, adaptor):
        a, client = adaptor
        client.messages.create.return_value = event_stream(
            [
                SimpleNamespace(
                    type="content_block_delta",
                    delta=SimpleNamespace(type="text_delta", text="partial"),
                )
            ]
        )

        with pytest.raises(LLMStreamError):
            [chunk async for chunk in a.stream(make_request())]


# --- pricing ---


class TestPricing:
    @pytest.mark.parametrize(
        "model, expected",
        [
            ("claude-3-5-sonnet-20241022", 3.0 + 15.0),
            ("claude-3-opus-20240229", 15.0 + 75.0),
            ("claude-3-sonnet-20240229", 3.0 + 15.0),
            ("claude-3-haiku-20240307", 0.25 + 1.25),
            ("claude-unknown", 3.0 + 15.0),
        ],
    )
    def test_estimate_cost(self, adaptor, model, expected):
        a, _ = adaptor
        assert a.estimate_cost(1_000_000, 1_000_000, model) == pytest.approx(expected)

    def test_context_window(self, adaptor):
        a, _ = adaptor
        assert a.max_context_tokens("claude-3-haiku-20240307") == 200_000
        assert a.supports_streaming() is True
