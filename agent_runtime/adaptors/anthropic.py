"""Anthropic API adaptor for agent-runtime."""

import logging
import os
from typing import AsyncIterator, Optional

import anthropic
from anthropic import AsyncAnthropic

from agent_runtime.exceptions import (
    ConfigError,
    LLMApiError,
    LLMAuthenticationError,
    LLMError,
    LLMInvalidRequest,
    LLMRateLimited,
    LLMStreamError,
    LLMTimeout,
)
from agent_runtime.execution import Message, TokenUsage
from agent_runtime.model import FinishReason, LLMRequest, LLMResponse, ModelAdaptor, StreamChunk

logger = logging.getLogger(__name__)

# USD per million tokens (input, output); first matching substring wins
PRICING = [
    ("claude-3-5-sonnet", 3.0, 15.0),
    ("claude-3-opus", 15.0, 75.0),
    ("claude-3-sonnet", 3.0, 15.0),
    ("claude-3-haiku", 0.25, 1.25),
]
DEFAULT_PRICING = (3.0, 15.0)

CONTEXT_WINDOW = 200_000

STOP_REASONS = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "max_tokens": FinishReason.LENGTH,
    "tool_use": FinishReason.TOOL_CALLS,
}


class AnthropicAdaptor(ModelAdaptor):
    """Anthropic model adaptor using the official SDK.

    Args:
        api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY environment variable.
        max_tokens: Used when the request does not set max_tokens (default: 4096).
        timeout: Request timeout in seconds (default: 60).
    """

    provider_name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        max_tokens: int = 4096,
        timeout: float = 60.0,
    ):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ConfigError(
                "Anthropic API key not provided. "
                "Pass api_key argument or set ANTHROPIC_API_KEY environment variable."
            )

        self.max_tokens = max_tokens
        self.client = AsyncAnthropic(api_key=self.api_key, timeout=timeout)

    async def generate(self, request: LLMRequest) -> LLMResponse:
        try:
            response = await self.client.messages.create(**self._build_params(request))
        except anthropic.APIError as e:
            raise self._convert_error(e) from e

        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        usage = TokenUsage(
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return LLMResponse(
            content=text,
            usage=usage,
            finish_reason=STOP_REASONS.get(response.stop_reason, FinishReason.OTHER),
            metadata={"id": response.id, "model": response.model},
        )

    async def stream(self, request: LLMRequest) -> AsyncIterator[StreamChunk]:
        params = self._build_params(request)
        params["stream"] = True

        input_tokens = 0
        output_tokens = 0
        finish_reason = FinishReason.STOP
        try:
            events = await self.client.messages.create(**params)
            async for event in events:
                if event.type == "message_start":
                    input_tokens = event.message.usage.input_tokens
                elif event.type == "content_block_delta":
                    if event.delta.type == "text_delta":
                        yield StreamChunk(content=event.delta.text)
                elif event.type == "message_delta":
                    output_tokens = event.usage.output_tokens
                    finish_reason = STOP_REASONS.get(
                        event.delta.stop_reason, FinishReason.OTHER
                    )
                elif event.type == "message_stop":
                    yield StreamChunk(
                        content="",
                        is_final=True,
                        usage=TokenUsage(
                            input_tokens=input_tokens, output_tokens=output_tokens
                        ),
                        finish_reason=finish_reason,
                    )
                    return
        except anthropic.APIError as e:
            raise self._convert_error(e) from e

        raise LLMStreamError("Stream ended without message_stop")

    def max_context_tokens(self, model: str) -> Optional[int]:
        return CONTEXT_WINDOW

    def estimate_cost(self, input_tokens: int, output_tokens: int, model: str) -> Optional[float]:
        input_price, output_price = DEFAULT_PRICING
        for prefix, in_price, out_price in PRICING:
            if prefix in model:
                input_price, output_price = in_price, out_price
                break
        return (input_tokens * input_price + output_tokens * output_price) / 1_000_000

    def _build_params(self, request: LLMRequest) -> dict:
        system, messages = self._convert_messages(request.messages)
        params = {
            "model": request.model,
            "max_tokens": request.max_tokens or self.max_tokens,
            "messages": messages,
        }
        if system:
            params["system"] = system
        if request.temperature is not None:
            params["temperature"] = request.temperature
        if request.top_p is not None:
            params["top_p"] = request.top_p
        if request.stop_sequences:
            params["stop_sequences"] = request.stop_sequences
        params.update(request.extra)
        return params

    def _convert_messages(self, messages: list[Message]) -> tuple[str, list[dict]]:
        """Split out system prompts; tool observations go back as user turns."""
        system_parts = []
        anthropic_messages = []
        for msg in messages:
            if msg.role == "system":
                system_parts.append(msg.content)
            elif msg.role == "assistant":
                anthropic_messages.append({"role": "assistant", "content": msg.content})
            else:
                anthropic_messages.append({"role": "user", "content": msg.content})
        return "\n\n".join(system_parts), anthropic_messages

    def _convert_error(self, error: "anthropic.APIError") -> LLMError:
        if isinstance(error, anthropic.APITimeoutError):
            return LLMTimeout(str(error))
        if isinstance(error, anthropic.AuthenticationError):
            return LLMAuthenticationError(str(error))
        if isinstance(error, anthropic.RateLimitError):
            retry_after = error.response.headers.get("retry-after", "")
            return LLMRateLimited(
                str(error),
                retry_after=float(retry_after) if retry_after.isdigit() else None,
            )
        if isinstance(error, anthropic.BadRequestError):
            return LLMInvalidRequest(str(error))
        if isinstance(error, anthropic.APIStatusError):
            return LLMApiError(str(error), status=error.status_code)
        logger.debug("Anthropic request failed: %r", error)
        return LLMApiError(str(error))
