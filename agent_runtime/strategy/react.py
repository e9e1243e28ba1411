"""ReAct strategy (Reasoning and Acting).

Each iteration the model either asks for a tool with
``TOOL: name(argument)`` or answers. Tool results are fed back as an
observation and the loop continues until an answer, a limit, or an error.
"""

import json
import logging
import time
from typing import Optional

from agent_runtime.config import AgentConfig
from agent_runtime.exceptions import ExecutionTimeout, InvalidToolCall, MaxIterationsReached
from agent_runtime.execution import ExecutionContext, Message, ToolCallRecord
from agent_runtime.hooks import (
    AfterModelCallEventData,
    AfterToolCallEventData,
    BeforeIterationEventData,
    BeforeModelCallEventData,
    BeforeToolCallEventData,
    HookRegistry,
)
from agent_runtime.model import LLMRequest, ModelAdaptor
from agent_runtime.strategy.base import Strategy
from agent_runtime.tools import ToolRegistry

logger = logging.getLogger(__name__)

TOOL_MARKER = "TOOL:"
ANSWER_MARKER = "ANSWER:"


class ReActStrategy(Strategy):
    name = "react"

    def __init__(self, hooks: Optional[HookRegistry] = None):
        self.hooks = hooks or HookRegistry()

    def extract_tool_call(self, response: str) -> Optional[tuple[str, str]]:
        """Return ``(tool_name, argument)`` for ``TOOL: name(argument)``.

        The argument ends at the first closing parenthesis.
        """
        start = response.find(TOOL_MARKER)
        if start == -1:
            return None

        tool_part = response[start + len(TOOL_MARKER):].strip()
        open_paren = tool_part.find("(")
        if open_paren == -1:
            return None
        close_paren = tool_part.find(")", open_paren + 1)
        if close_paren == -1:
            return None

        tool_name = tool_part[:open_paren].strip()
        argument = tool_part[open_paren + 1:close_paren].strip()
        return tool_name, argument

    def is_final_answer(self, response: str) -> bool:
        return ANSWER_MARKER in response or TOOL_MARKER not in response

    def extract_answer(self, response: str) -> str:
        answer_pos = response.find(ANSWER_MARKER)
        if answer_pos != -1:
            return response[answer_pos + len(ANSWER_MARKER):].strip()
        return response.strip()

    def parse_tool_input(self, argument: str) -> dict:
        """Turn the raw argument into the tool's input object.

        ``{...}`` is parsed as JSON, falling back to ``{"input": raw}`` when
        it does not parse; anything else becomes ``{"expression": raw}``.
        """
        if argument.startswith("{"):
            try:
                return json.loads(argument)
            except json.JSONDecodeError:
                return {"input": argument}
        return {"expression": argument}

    def build_request(self, config: AgentConfig, context: ExecutionContext) -> LLMRequest:
        return LLMRequest(
            messages=list(context.messages),
            model=config.llm.model,
            temperature=config.llm.temperature,
            max_tokens=config.llm.max_tokens,
            top_p=config.llm.top_p,
            stop_sequences=config.execution.stop_sequences or None,
        )

    async def execute(
        self,
        config: AgentConfig,
        llm: ModelAdaptor,
        tools: ToolRegistry,
        context: ExecutionContext,
    ) -> str:
        while True:
            # Guards run before any model call
            if context.is_max_iterations_reached():
                raise MaxIterationsReached(context.max_iterations)
            if context.is_timed_out():
                raise ExecutionTimeout(context.timeout)

            context.increment_iteration()
            logger.debug(
                "Run %s iteration %d/%d",
                context.id,
                context.iteration,
                context.max_iterations,
            )
            await self.hooks.trigger(
                "before_iteration",
                BeforeIterationEventData(context=context, iteration=context.iteration),
            )

            # THINK
            request = self.build_request(config, context)
            await self.hooks.trigger(
                "before_model_call",
                BeforeModelCallEventData(context=context, request=request),
            )
            model_start = time.perf_counter()
            response = await llm.generate(request)
            model_time = (time.perf_counter() - model_start) * 1000

            usage = response.usage
            context.add_tokens(usage)
            cost = llm.estimate_cost(usage.input_tokens, usage.output_tokens, config.llm.model)
            context.add_cost(cost or 0.0)
            await self.hooks.trigger(
                "after_model_call",
                AfterModelCallEventData(
                    context=context,
                    response=response,
                    response_time_ms=model_time,
                    cost=cost or 0.0,
                ),
            )

            content = response.content
            context.record_thought(content)
            context.add_message(Message.assistant(content))

            # ACT: a tool call wins over an answer in the same output
            tool_call = self.extract_tool_call(content)
            if tool_call is not None:
                tool_name, argument = tool_call
                tool = tools.get(tool_name)
                tool_input = self.parse_tool_input(argument)

                await self.hooks.trigger(
                    "before_tool_call",
                    BeforeToolCallEventData(
                        context=context,
                        tool_name=tool_name,
                        input=tool_input,
                        tool_index=len(context.tool_calls),
                        iteration=context.iteration,
                    ),
                )
                logger.debug("Calling tool '%s' with %r", tool_name, tool_input)

                timestamp = time.time()
                tool_start = time.perf_counter()
                output = await tool.execute(tool_input)
                tool_time = int((time.perf_counter() - tool_start) * 1000)

                record = ToolCallRecord(
                    tool_name=tool_name,
                    input=tool_input,
                    output=output.content,
                    success=output.success,
                    execution_time_ms=tool_time,
                    timestamp=timestamp,
                )
                context.record_tool_call(record)
                await self.hooks.trigger(
                    "after_tool_call",
                    AfterToolCallEventData(context=context, record=record),
                )

                # OBSERVE
                context.add_message(
                    Message.user(f"Tool Result from {tool_name}: {output.content}")
                )
                continue

            if self.is_final_answer(content):
                logger.debug("Run %s answered on iteration %d", context.id, context.iteration)
                return self.extract_answer(content)

            raise InvalidToolCall("Response contained neither tool call nor final answer")
