from typing import Optional


class AgentRuntimeError(Exception):
    """Base exception for agent-runtime errors."""


class ConfigError(AgentRuntimeError):
    """Raised when configuration is malformed or a required input is missing."""


# --- LLM errors ---


class LLMError(AgentRuntimeError):
    """Raised when the model provider call fails."""


class LLMAuthenticationError(LLMError):
    """Raised when the provider rejects the credentials."""


class LLMRateLimited(LLMError):
    """Raised when the provider rate-limits the request."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class LLMInvalidRequest(LLMError):
    """Raised when the provider rejects the request payload."""


class LLMApiError(LLMError):
    """Raised for any other non-success provider status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class LLMTimeout(LLMError):
    """Raised when the provider call times out."""


class LLMStreamError(LLMError):
    """Raised when a streaming response breaks mid-way."""


class LLMResponseError(LLMError):
    """Raised when the provider response cannot be parsed."""


# --- Dispatch errors ---


class ToolNotFound(AgentRuntimeError):
    """Raised when model calls a tool that doesn't exist."""


class InvalidToolCall(AgentRuntimeError):
    """Raised when model output is neither a tool call nor a final answer."""


# --- Tool errors ---


class ToolError(AgentRuntimeError):
    """Base class for failures raised by a tool's execute()."""


class ToolInvalidInput(ToolError):
    """Raised when tool input fails validation."""


class ToolExecutionError(ToolError):
    """Raised when tool execution fails critically."""


class ToolHttpError(ToolError):
    """Raised when an HTTP request made by a tool fails."""


class ToolFilesystemError(ToolError):
    """Raised when a filesystem operation fails."""


class ToolPermissionDenied(ToolError):
    """Raised when a tool refuses an operation (sandbox, read-only)."""


# --- Expected terminations ---


class MaxIterationsReached(AgentRuntimeError):
    """Raised when agent hits max_iterations without completing."""

    def __init__(self, max_iterations: int):
        super().__init__(f"Max iterations reached: {max_iterations}")
        self.max_iterations = max_iterations


class ExecutionTimeout(AgentRuntimeError):
    """Raised when the run exceeds its wall-clock timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"Execution timeout after {timeout:g}s")
        self.timeout = timeout


class RunStopped(AgentRuntimeError):
    """Raised by a strategy or hook to end the run on user request."""
