import asyncio
import logging
from typing import Iterable, Optional, Union

from agent_runtime.config import AgentConfig, parse_duration
from agent_runtime.exceptions import (
    ConfigError,
    ExecutionTimeout,
    MaxIterationsReached,
    RunStopped,
)
from agent_runtime.execution import ExecutionContext, ExecutionResult, Message, StopReason
from agent_runtime.hooks import AfterRunEventData, BeforeRunEventData, HookRegistry
from agent_runtime.model import ModelAdaptor
from agent_runtime.strategy import Strategy, create_strategy
from agent_runtime.tool_factory import build_tools
from agent_runtime.tools import Tool, ToolRegistry

logger = logging.getLogger(__name__)


class AgentExecutor:
    """Runs an agent: seeds a context, drives the strategy, reports a result.

    One executor can serve many concurrent ``execute`` calls; each call owns
    its own ``ExecutionContext`` and only reads the shared config, adaptor
    and tool registry.
    """

    def __init__(
        self,
        config: AgentConfig,
        llm: ModelAdaptor,
        tools: Union[ToolRegistry, Iterable[Tool]],
        strategy: Strategy,
        hooks: Optional[HookRegistry] = None,
    ):
        self.config = config
        self.llm = llm
        self.tools = tools if isinstance(tools, ToolRegistry) else ToolRegistry(tools)
        self.strategy = strategy
        self.hooks = hooks or HookRegistry()
        self.timeout = parse_duration(config.execution.timeout)

    def new_context(self, input: str) -> ExecutionContext:
        context = ExecutionContext(
            max_iterations=self.config.execution.max_iterations,
            timeout=self.timeout,
        )
        if self.config.system_prompt:
            context.add_message(Message.system(self.config.system_prompt))
        context.add_message(Message.user(input))
        return context

    def run(self, input: str) -> ExecutionResult:
        """Run agent synchronously."""
        return asyncio.run(self.execute(input))

    async def execute(self, input: str) -> ExecutionResult:
        """Run the agent on ``input``.

        Never raises: every failure is reported through the result's
        ``stop_reason`` together with the metrics gathered so far.
        """
        context = self.new_context(input)
        logger.info(
            "Starting run %s for agent '%s' with strategy '%s'",
            context.id,
            self.config.name,
            self.strategy.name,
        )

        response = ""
        try:
            await self.hooks.trigger(
                "before_run", BeforeRunEventData(context=context, input=input)
            )
            response = await self.strategy.execute(
                self.config, self.llm, self.tools, context
            )
            stop_reason = StopReason.completed()
        except MaxIterationsReached:
            stop_reason = StopReason.max_iterations()
        except ExecutionTimeout:
            stop_reason = StopReason.timeout()
        except RunStopped:
            stop_reason = StopReason.user_stop()
        except Exception as e:
            logger.warning("Run %s failed: %s", context.id, e)
            stop_reason = StopReason.error(str(e))

        result = ExecutionResult.from_context(context, stop_reason, response)
        logger.info(
            "Run %s finished: %s after %d iteration(s), %d tool call(s), %d tokens, %dms",
            result.id,
            result.stop_reason,
            result.iterations,
            len(result.tool_calls),
            result.total_tokens,
            result.execution_time_ms,
        )

        try:
            await self.hooks.trigger("after_run", AfterRunEventData(result=result))
        except RunStopped:
            # The run is already over
            pass
        return result


class AgentExecutorBuilder:
    """Fluent construction of an ``AgentExecutor``.

    Usage:
        executor = (
            AgentExecutorBuilder()
            .config(config)
            .llm(AnthropicAdaptor())
            .tool(CalculatorTool())
            .build()
        )
    """

    def __init__(self):
        self._config: Optional[AgentConfig] = None
        self._llm: Optional[ModelAdaptor] = None
        self._tools: list[Tool] = []
        self._strategy: Optional[Strategy] = None
        self._hooks: Optional[HookRegistry] = None

    def config(self, config: AgentConfig) -> "AgentExecutorBuilder":
        self._config = config
        return self

    def llm(self, llm: ModelAdaptor) -> "AgentExecutorBuilder":
        self._llm = llm
        return self

    def tool(self, tool: Tool) -> "AgentExecutorBuilder":
        self._tools.append(tool)
        return self

    def tools(self, tools: Iterable[Tool]) -> "AgentExecutorBuilder":
        self._tools.extend(tools)
        return self

    def strategy(self, strategy: Strategy) -> "AgentExecutorBuilder":
        self._strategy = strategy
        return self

    def hooks(self, hooks: HookRegistry) -> "AgentExecutorBuilder":
        self._hooks = hooks
        return self

    def build(self) -> AgentExecutor:
        """Build the executor.

        Without an explicit strategy the one named by the config is used,
        sharing the builder's hooks. Without explicit tools the registry is
        built from the config.

        Raises:
            ConfigError: If config or llm is missing, the strategy name is
                unknown, or the timeout is malformed.
        """
        if self._config is None:
            raise ConfigError("Agent config is required")
        if self._llm is None:
            raise ConfigError("LLM client is required")

        hooks = self._hooks or HookRegistry()
        strategy = self._strategy or create_strategy(
            self._config.execution.strategy, hooks=hooks
        )
        tools = ToolRegistry(self._tools) if self._tools else build_tools(self._config)

        return AgentExecutor(
            config=self._config,
            llm=self._llm,
            tools=tools,
            strategy=strategy,
            hooks=hooks,
        )
