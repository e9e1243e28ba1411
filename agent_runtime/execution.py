import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


@dataclass
class Message:
    role: str  # "system" | "user" | "assistant" | "tool"
    content: str
    name: Optional[str] = None
    tool_call_id: Optional[str] = None

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role="assistant", content=content)

    @classmethod
    def tool(cls, content: str, tool_call_id: str) -> "Message":
        return cls(role="tool", content=content, tool_call_id=tool_call_id)


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cost: Optional[float] = None  # USD, when the provider reports it

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class ToolCallRecord:
    tool_name: str
    input: dict
    output: Optional[str]
    success: bool
    execution_time_ms: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)


class StopReasonKind(str, Enum):
    COMPLETED = "completed"
    MAX_ITERATIONS = "max_iterations"
    TIMEOUT = "timeout"
    ERROR = "error"
    USER_STOP = "user_stop"


@dataclass(frozen=True)
class StopReason:
    """Why a run ended. Only ``ERROR`` carries a message."""

    kind: StopReasonKind
    message: Optional[str] = None

    @classmethod
    def completed(cls) -> "StopReason":
        return cls(StopReasonKind.COMPLETED)

    @classmethod
    def max_iterations(cls) -> "StopReason":
        return cls(StopReasonKind.MAX_ITERATIONS)

    @classmethod
    def timeout(cls) -> "StopReason":
        return cls(StopReasonKind.TIMEOUT)

    @classmethod
    def error(cls, message: str) -> "StopReason":
        return cls(StopReasonKind.ERROR, message)

    @classmethod
    def user_stop(cls) -> "StopReason":
        return cls(StopReasonKind.USER_STOP)

    @property
    def is_success(self) -> bool:
        return self.kind is StopReasonKind.COMPLETED

    def __str__(self) -> str:
        if self.message is not None:
            return f"{self.kind.value}: {self.message}"
        return self.kind.value


class ExecutionContext:
    """Mutable state of a single run.

    The transcript, tool-call and thought trails only ever grow; they are
    exposed as tuples so callers cannot reorder or drop entries.
    """

    def __init__(self, max_iterations: int, timeout: float):
        self.id = str(uuid.uuid4())
        self.iteration = 0
        self.max_iterations = max_iterations
        self.timeout = timeout
        self.started_at = time.monotonic()
        self.token_usage = TokenUsage()
        self.total_cost = 0.0
        self.metadata: dict[str, Any] = {}
        self._messages: list[Message] = []
        self._tool_calls: list[ToolCallRecord] = []
        self._thoughts: list[str] = []

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def tool_calls(self) -> tuple[ToolCallRecord, ...]:
        return tuple(self._tool_calls)

    @property
    def thoughts(self) -> tuple[str, ...]:
        return tuple(self._thoughts)

    def add_message(self, message: Message) -> None:
        self._messages.append(message)

    def increment_iteration(self) -> None:
        self.iteration += 1

    def is_max_iterations_reached(self) -> bool:
        return self.iteration >= self.max_iterations

    def is_timed_out(self) -> bool:
        return self.elapsed() >= self.timeout

    def add_tokens(self, usage: TokenUsage) -> None:
        self.token_usage.input_tokens += usage.input_tokens
        self.token_usage.output_tokens += usage.output_tokens

    def add_cost(self, cost: float) -> None:
        self.total_cost += cost

    def record_tool_call(self, record: ToolCallRecord) -> None:
        self._tool_calls.append(record)

    def record_thought(self, thought: str) -> None:
        self._thoughts.append(thought)

    def elapsed(self) -> float:
        """Seconds since the context was created."""
        return time.monotonic() - self.started_at

    def elapsed_ms(self) -> int:
        return int(self.elapsed() * 1000)

    def total_tokens(self) -> int:
        return self.token_usage.total_tokens


@dataclass(frozen=True)
class ExecutionResult:
    id: str
    response: str
    success: bool
    iterations: int
    tool_calls: tuple[ToolCallRecord, ...]
    total_tokens: int
    total_cost: float
    execution_time_ms: int
    stop_reason: StopReason
    thoughts: tuple[str, ...]

    @classmethod
    def from_context(
        cls,
        context: ExecutionContext,
        stop_reason: StopReason,
        response: str = "",
    ) -> "ExecutionResult":
        """Snapshot a context into a result. Partial progress is kept on failure."""
        return cls(
            id=context.id,
            response=response,
            success=stop_reason.is_success,
            iterations=context.iteration,
            tool_calls=context.tool_calls,
            total_tokens=context.total_tokens(),
            total_cost=context.total_cost,
            execution_time_ms=context.elapsed_ms(),
            stop_reason=stop_reason,
            thoughts=context.thoughts,
        )

    @property
    def error_message(self) -> Optional[str]:
        return self.stop_reason.message

    def to_dict(self) -> dict:
        """Plain-data form for the persistence layer.

        Sequence numbers are the in-memory indices of each trail.
        """
        return {
            "id": self.id,
            "response": self.response,
            "success": self.success,
            "iterations": self.iterations,
            "total_tokens": self.total_tokens,
            "total_cost": self.total_cost,
            "execution_time_ms": self.execution_time_ms,
            "stop_reason": self.stop_reason.kind.value,
            "error_message": self.error_message,
            "tool_calls": [
                {"sequence_number": i, **record.to_dict()}
                for i, record in enumerate(self.tool_calls)
            ],
            "thoughts": [
                {"sequence_number": i, "content": thought}
                for i, thought in enumerate(self.thoughts)
            ],
        }
