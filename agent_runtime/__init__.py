from agent_runtime.adaptors import AnthropicAdaptor, OpenAIAdaptor
from agent_runtime.config import (
    AgentConfig,
    ExecutionConfig,
    FileSystemToolConfig,
    FileSystemToolDefinition,
    HttpToolConfig,
    HttpToolDefinition,
    LLMConfig,
    parse_duration,
)
from agent_runtime.exceptions import (
    AgentRuntimeError,
    ConfigError,
    ExecutionTimeout,
    InvalidToolCall,
    LLMError,
    MaxIterationsReached,
    RunStopped,
    ToolError,
    ToolNotFound,
)
from agent_runtime.execution import (
    ExecutionContext,
    ExecutionResult,
    Message,
    StopReason,
    StopReasonKind,
    TokenUsage,
    ToolCallRecord,
)
from agent_runtime.executor import AgentExecutor, AgentExecutorBuilder
from agent_runtime.hooks import (
    AfterModelCallEventData,
    AfterRunEventData,
    AfterToolCallEventData,
    BeforeIterationEventData,
    BeforeModelCallEventData,
    BeforeRunEventData,
    BeforeToolCallEventData,
    HookEvent,
    HookRegistry,
    Middleware,
)
from agent_runtime.model import FinishReason, LLMRequest, LLMResponse, ModelAdaptor, StreamChunk
from agent_runtime.strategy import ReActStrategy, Strategy, create_strategy
from agent_runtime.tool_factory import build_tools
from agent_runtime.tools import (
    CalculatorTool,
    ConfiguredHttpTool,
    FileSystemTool,
    HttpTool,
    StringTool,
    Tool,
    ToolInput,
    ToolOutput,
    ToolRegistry,
)

__all__ = [
    # Core
    "AgentExecutor",
    "AgentExecutorBuilder",
    "ExecutionContext",
    "ExecutionResult",
    "Message",
    "StopReason",
    "StopReasonKind",
    "TokenUsage",
    "ToolCallRecord",
    # Config
    "AgentConfig",
    "ExecutionConfig",
    "LLMConfig",
    "HttpToolConfig",
    "HttpToolDefinition",
    "FileSystemToolConfig",
    "FileSystemToolDefinition",
    "parse_duration",
    # Models
    "ModelAdaptor",
    "LLMRequest",
    "LLMResponse",
    "StreamChunk",
    "FinishReason",
    "AnthropicAdaptor",
    "OpenAIAdaptor",
    # Strategies
    "Strategy",
    "ReActStrategy",
    "create_strategy",
    # Tools
    "Tool",
    "ToolInput",
    "ToolOutput",
    "ToolRegistry",
    "CalculatorTool",
    "StringTool",
    "HttpTool",
    "ConfiguredHttpTool",
    "FileSystemTool",
    "build_tools",
    # Hooks
    "HookRegistry",
    "HookEvent",
    "Middleware",
    # Hook Event Data
    "BeforeRunEventData",
    "AfterRunEventData",
    "BeforeIterationEventData",
    "BeforeModelCallEventData",
    "AfterModelCallEventData",
    "BeforeToolCallEventData",
    "AfterToolCallEventData",
    # Exceptions
    "AgentRuntimeError",
    "ConfigError",
    "ExecutionTimeout",
    "InvalidToolCall",
    "LLMError",
    "MaxIterationsReached",
    "RunStopped",
    "ToolError",
    "ToolNotFound",
]
