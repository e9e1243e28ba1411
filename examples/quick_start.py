"""Minimal agent-runtime example with a custom tool and a hook. Requires ANTHROPIC_API_KEY."""

import logging

from pydantic import Field

from agent_runtime import (
    AgentConfig,
    AgentExecutorBuilder,
    AnthropicAdaptor,
    CalculatorTool,
    HookRegistry,
    Tool,
    ToolInput,
    ToolOutput,
)

SYSTEM_PROMPT = """You can use these tools:
- get_population(city): approximate population of a city
- calculator(expression): arithmetic with + - * /

To call a tool reply with exactly one line: TOOL: tool_name(argument)
When you know the answer reply with: ANSWER: <your answer>"""


class CityInput(ToolInput):
    # Plain TOOL arguments arrive under "expression"
    expression: str = Field(description="City name")


class GetPopulation(Tool):
    name = "get_population"
    description = "Returns the approximate population of a city"
    input_model = CityInput

    async def run(self, input):
        populations = {"tokyo": "14M", "paris": "2.1M", "new york": "8.3M"}
        return ToolOutput.ok(populations.get(input.expression.lower(), "unknown"))


hooks = HookRegistry()


@hooks.on("after_tool_call")
async def on_tool_call(event):
    record = event.record
    print(f"[hook] {record.tool_name}({record.input}) -> {record.output}")


config = AgentConfig(
    name="population-agent",
    system_prompt=SYSTEM_PROMPT,
    llm={"model": "claude-3-5-sonnet-20241022", "temperature": 0.0},
    execution={"max_iterations": 6, "timeout": "60s"},
)

executor = (
    AgentExecutorBuilder()
    .config(config)
    .llm(AnthropicAdaptor())
    .tools([GetPopulation(), CalculatorTool()])
    .hooks(hooks)
    .build()
)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    result = executor.run("What's the combined population of Tokyo and Paris?")
    print(result.response or result.stop_reason)
