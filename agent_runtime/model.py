from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Optional

from agent_runtime.execution import Message, TokenUsage


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    OTHER = "other"


@dataclass
class LLMRequest:
    messages: list[Message]
    model: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    stop_sequences: Optional[list[str]] = None
    stream: bool = False
    extra: dict[str, Any] = field(default_factory=dict)  # provider-specific


@dataclass
class LLMResponse:
    content: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: FinishReason = FinishReason.STOP
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class StreamChunk:
    content: str
    is_final: bool = False
    usage: Optional[TokenUsage] = None  # only on the final chunk
    finish_reason: Optional[FinishReason] = None


class ModelAdaptor:
    """Uniform contract over LLM providers.

    Adaptors are shared read-only across concurrent runs.
    """

    provider_name: str = "unknown"

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Return the complete response for a request."""
        raise NotImplementedError

    async def stream(self, request: LLMRequest) -> AsyncIterator[StreamChunk]:
        """Yield incremental chunks; the last one has ``is_final=True``."""
        raise NotImplementedError
        yield  # pragma: no cover

    def supports_streaming(self) -> bool:
        return True

    def max_context_tokens(self, model: str) -> Optional[int]:
        return None

    def estimate_cost(
        self, input_tokens: int, output_tokens: int, model: str
    ) -> Optional[float]:
        """Estimated USD cost of a call, or None when pricing is unknown."""
        return None
