"""Hook system for agent-runtime.

Hooks observe a run without changing it: trace exporters, metrics and audit
loggers attach here. Handler return values are ignored and handler
exceptions are logged, never propagated into the run, except RunStopped:
a handler raises it to end the run with a user stop.

Architecture:
- HookRegistry is the CORE implementation
- Decorator (@hooks.on) and Middleware are convenience wrappers
- Everything goes through HookRegistry
"""

import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List

from agent_runtime.exceptions import RunStopped

logger = logging.getLogger(__name__)


class HookEvent(str, Enum):
    """Available hook points in a run."""

    BEFORE_RUN = "before_run"
    AFTER_RUN = "after_run"

    BEFORE_ITERATION = "before_iteration"

    BEFORE_MODEL_CALL = "before_model_call"
    AFTER_MODEL_CALL = "after_model_call"

    BEFORE_TOOL_CALL = "before_tool_call"
    AFTER_TOOL_CALL = "after_tool_call"


# ============================================================================
# Hook Event Data Classes
# ============================================================================


@dataclass
class BeforeRunEventData:
    """Called once the context is seeded, before the strategy starts."""

    context: Any  # ExecutionContext
    input: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AfterRunEventData:
    """Called with the final result, whatever the stop reason."""

    result: Any  # ExecutionResult
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class BeforeIterationEventData:
    """Called once the guards pass and the iteration counter has moved."""

    context: Any
    iteration: int


@dataclass
class BeforeModelCallEventData:
    context: Any
    request: Any  # LLMRequest


@dataclass
class AfterModelCallEventData:
    context: Any
    response: Any  # LLMResponse
    response_time_ms: float
    cost: float


@dataclass
class BeforeToolCallEventData:
    context: Any
    tool_name: str
    input: Dict[str, Any]
    tool_index: int
    iteration: int


@dataclass
class AfterToolCallEventData:
    """Called after a tool returned and its record was appended."""

    context: Any
    record: Any  # ToolCallRecord


# ============================================================================
# Hook Registry
# ============================================================================


class HookRegistry:
    """Central registry for all hooks.

    Usage:
        hooks = HookRegistry()

        @hooks.on('after_tool_call')
        async def log_tool(event):
            print(f"Tool: {event.record.tool_name}")

        # Or direct registration
        hooks.register_handler('after_run', my_hook)
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {
            event.value: [] for event in HookEvent
        }

    def on(self, hook_name: str):
        """Decorator for registering hook handlers."""

        def decorator(func: Callable) -> Callable:
            self.register_handler(hook_name, func)
            return func

        return decorator

    def register_handler(self, hook_name: str, handler: Callable) -> None:
        """Register an async handler.

        Raises:
            ValueError: If hook_name is not valid
        """
        if hook_name not in self._handlers:
            valid_hooks = [e.value for e in HookEvent]
            raise ValueError(
                f"Invalid hook name '{hook_name}'. Valid hooks: {valid_hooks}"
            )
        self._handlers[hook_name].append(handler)

    def add_middleware(self, middleware: "Middleware") -> None:
        """Register every hook method a middleware overrides."""
        for event in HookEvent:
            handler = getattr(middleware, event.value, None)
            if handler is not None and inspect.iscoroutinefunction(handler):
                self.register_handler(event.value, handler)

    async def trigger(self, hook_name: str, event_data: Any) -> None:
        for handler in self._handlers.get(hook_name, []):
            try:
                await handler(event_data)
            except RunStopped:
                raise
            except Exception as e:
                # Log but don't fail execution
                logger.warning(f"Hook '{hook_name}' raised exception: {e}")

    def has_handlers(self, hook_name: str) -> bool:
        return len(self._handlers.get(hook_name, [])) > 0

    def clear(self) -> None:
        """Clear all handlers (useful for testing)."""
        for hook_name in self._handlers:
            self._handlers[hook_name] = []


# ============================================================================
# Middleware Base Class (Optional, for stateful handlers)
# ============================================================================


class Middleware:
    """Base class for stateful hook handlers.

    Override methods for hooks you want to handle.

    Usage:
        class CostTracker(Middleware):
            async def after_model_call(self, event):
                self.total += event.cost

        hooks = HookRegistry()
        hooks.add_middleware(CostTracker())
    """

    async def before_run(self, event: BeforeRunEventData) -> None:
        pass

    async def after_run(self, event: AfterRunEventData) -> None:
        pass

    async def before_iteration(self, event: BeforeIterationEventData) -> None:
        pass

    async def before_model_call(self, event: BeforeModelCallEventData) -> None:
        pass

    async def after_model_call(self, event: AfterModelCallEventData) -> None:
        pass

    async def before_tool_call(self, event: BeforeToolCallEventData) -> None:
        pass

    async def after_tool_call(self, event: AfterToolCallEventData) -> None:
        pass
