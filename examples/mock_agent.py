#!/usr/bin/env python3
"""Minimal working example of agent-runtime with mocked model responses.

This example runs the ReAct loop WITHOUT an API key. A scripted
ModelAdaptor plays the model so you can see tool dispatch, observations
and the execution result.

Run:
    python examples/mock_agent.py
"""

import logging
import sys

from agent_runtime import (
    AgentConfig,
    AgentExecutorBuilder,
    LLMResponse,
    ModelAdaptor,
    TokenUsage,
)


class MockModelAdaptor(ModelAdaptor):
    """Replays a fixed ReAct conversation."""

    provider_name = "mock"

    def __init__(self):
        self.call_count = 0
        self.responses = [
            "I should add the numbers first.\nTOOL: calculator(25 + 17)",
            'Now shout the city name.\nTOOL: string({"operation": "uppercase", "text": "São Paulo"})',
            "TOOL: calculator(100 * 2)",
            "ANSWER: 25 + 17 = 42, the city is SÃO PAULO and 100 * 2 = 200.",
        ]

    async def generate(self, request):
        if self.call_count >= len(self.responses):
            return LLMResponse(content="ANSWER: (mock ran out of responses)")

        content = self.responses[self.call_count]
        self.call_count += 1
        return LLMResponse(
            content=content,
            usage=TokenUsage(input_tokens=40 * self.call_count, output_tokens=15),
        )

    def estimate_cost(self, input_tokens, output_tokens, model):
        return (input_tokens + output_tokens) / 1_000_000


def print_result(result) -> None:
    print(f"\n{'=' * 70}\n  Execution {result.id}\n{'=' * 70}")
    print(f"  Stop reason: {result.stop_reason}")
    print(f"  Iterations:  {result.iterations}")
    print(f"  Tokens:      {result.total_tokens}")
    print(f"  Cost:        ${result.total_cost:.6f}")
    print(f"  Time:        {result.execution_time_ms}ms")

    for i, record in enumerate(result.tool_calls, 1):
        print(f"\n  {i}. {record.tool_name}({record.input})")
        print(f"     -> {record.output}")

    print(f"\n  Response: {result.response}\n")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = AgentConfig(
        name="mock-agent",
        system_prompt="Use TOOL: name(argument) to call tools and ANSWER: to finish.",
        llm={"provider": "mock", "model": "mock-1"},
    )
    executor = AgentExecutorBuilder().config(config).llm(MockModelAdaptor()).build()

    result = executor.run(
        "What is 25 + 17? Write São Paulo in capitals. Then calculate 100 * 2."
    )
    print_result(result)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
