"""OpenAI API adaptor for agent-runtime."""

import json
import logging
import os
from typing import AsyncIterator, Optional

import httpx

from agent_runtime.exceptions import (
    ConfigError,
    LLMApiError,
    LLMAuthenticationError,
    LLMError,
    LLMInvalidRequest,
    LLMRateLimited,
    LLMResponseError,
    LLMStreamError,
    LLMTimeout,
)
from agent_runtime.execution import Message, TokenUsage
from agent_runtime.model import FinishReason, LLMRequest, LLMResponse, ModelAdaptor, StreamChunk

logger = logging.getLogger(__name__)

# USD per million tokens (input, output); first matching prefix wins
PRICING = [
    ("gpt-4o-mini", 0.15, 0.6),
    ("gpt-4o", 2.5, 10.0),
    ("gpt-4-turbo", 10.0, 30.0),
    ("gpt-4", 30.0, 60.0),
    ("gpt-3.5-turbo", 0.5, 1.5),
]

CONTEXT_WINDOWS = [
    ("gpt-4o", 128_000),
    ("gpt-4-turbo", 128_000),
    ("gpt-4", 8_192),
    ("gpt-3.5-turbo", 16_385),
]

FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "tool_calls": FinishReason.TOOL_CALLS,
    "content_filter": FinishReason.CONTENT_FILTER,
}


class OpenAIAdaptor(ModelAdaptor):
    """OpenAI-compatible model adaptor.

    Supports OpenAI API and compatible endpoints (local models, proxies, etc.).

    Args:
        api_key: OpenAI API key. Falls back to OPENAI_API_KEY environment variable.
        base_url: Base URL for the API (default: https://api.openai.com/v1).
        timeout: Request timeout in seconds (default: 60).
        transport: Optional httpx transport, mainly for tests.
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise ConfigError(
                "OpenAI API key not provided. "
                "Pass api_key argument or set OPENAI_API_KEY environment variable."
            )

        self.base_url = (base_url or "https://api.openai.com/v1").rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Call the chat completions endpoint.

        Raises:
            LLMError: If the request fails or the response is malformed.
        """
        payload = self._build_payload(request)

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                )
        except httpx.TimeoutException as e:
            raise LLMTimeout(f"OpenAI request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise LLMApiError(f"OpenAI request failed: {e}") from e

        if response.status_code != 200:
            raise self._status_error(response.status_code, response.text, response.headers)

        try:
            data = response.json()
        except ValueError as e:
            raise LLMResponseError(f"OpenAI response is not JSON: {e}") from e
        return self._parse_response(data)

    async def stream(self, request: LLMRequest) -> AsyncIterator[StreamChunk]:
        """Stream server-sent events from the chat completions endpoint."""
        payload = self._build_payload(request)
        payload["stream"] = True
        payload["stream_options"] = {"include_usage": True}

        usage: Optional[TokenUsage] = None
        finish_reason = FinishReason.STOP
        try:
            async with self._client() as client:
                async with client.stream(
                    "POST",
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                ) as response:
                    if response.status_code != 200:
                        body = (await response.aread()).decode(errors="replace")
                        raise self._status_error(response.status_code, body, response.headers)

                    async for line in response.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:"):].strip()
                        if data == "[DONE]":
                            yield StreamChunk(
                                content="",
                                is_final=True,
                                usage=usage or TokenUsage(),
                                finish_reason=finish_reason,
                            )
                            return

                        try:
                            event = json.loads(data)
                        except json.JSONDecodeError as e:
                            raise LLMStreamError(f"Malformed stream event: {data!r}") from e

                        if event.get("usage"):
                            usage = self._parse_usage(event["usage"])
                        for choice in event.get("choices", []):
                            if choice.get("finish_reason"):
                                finish_reason = FINISH_REASONS.get(
                                    choice["finish_reason"], FinishReason.OTHER
                                )
                            text = choice.get("delta", {}).get("content")
                            if text:
                                yield StreamChunk(content=text)
        except httpx.TimeoutException as e:
            raise LLMTimeout(f"OpenAI stream timed out: {e}") from e
        except httpx.HTTPError as e:
            raise LLMStreamError(f"OpenAI stream failed: {e}") from e

        raise LLMStreamError("Stream ended without [DONE]")

    def max_context_tokens(self, model: str) -> Optional[int]:
        for prefix, tokens in CONTEXT_WINDOWS:
            if model.startswith(prefix):
                return tokens
        return None

    def estimate_cost(self, input_tokens: int, output_tokens: int, model: str) -> Optional[float]:
        for prefix, input_price, output_price in PRICING:
            if model.startswith(prefix):
                return (input_tokens * input_price + output_tokens * output_price) / 1_000_000
        return None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _build_payload(self, request: LLMRequest) -> dict:
        payload = {
            "model": request.model,
            "messages": self._convert_messages(request.messages),
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        if request.top_p is not None:
            payload["top_p"] = request.top_p
        if request.stop_sequences:
            payload["stop"] = request.stop_sequences
        payload.update(request.extra)
        return payload

    def _convert_messages(self, messages: list[Message]) -> list[dict]:
        openai_messages = []
        for msg in messages:
            openai_msg = {"role": msg.role, "content": msg.content}
            if msg.name:
                openai_msg["name"] = msg.name
            if msg.tool_call_id:
                openai_msg["tool_call_id"] = msg.tool_call_id
            openai_messages.append(openai_msg)
        return openai_messages

    def _parse_usage(self, usage: dict) -> TokenUsage:
        return TokenUsage(
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
        )

    def _parse_response(self, data: dict) -> LLMResponse:
        if not data.get("choices"):
            raise LLMResponseError("OpenAI response missing 'choices' field")

        choice = data["choices"][0]
        message = choice.get("message", {})
        return LLMResponse(
            content=message.get("content") or "",
            usage=self._parse_usage(data.get("usage") or {}),
            finish_reason=FINISH_REASONS.get(choice.get("finish_reason"), FinishReason.OTHER),
            metadata={"id": data.get("id"), "model": data.get("model")},
        )

    def _status_error(self, status: int, body: str, headers: httpx.Headers) -> LLMError:
        try:
            message = json.loads(body).get("error", {}).get("message", body)
        except (ValueError, AttributeError):
            message = body
        message = f"OpenAI API error ({status}): {message}"

        if status == 401:
            return LLMAuthenticationError(message)
        if status == 429:
            retry_after = headers.get("retry-after", "")
            return LLMRateLimited(
                message,
                retry_after=float(retry_after) if retry_after.isdigit() else None,
            )
        if status == 400:
            return LLMInvalidRequest(message)
        logger.debug("OpenAI returned status %d: %s", status, body)
        return LLMApiError(message, status=status)
