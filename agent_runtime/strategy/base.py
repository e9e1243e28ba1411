from agent_runtime.config import AgentConfig
from agent_runtime.execution import ExecutionContext
from agent_runtime.model import ModelAdaptor
from agent_runtime.tools import ToolRegistry


class Strategy:
    """Policy that drives one run to a final answer.

    Implementations mutate ``context`` (transcript, counters, trails) and
    either return the final answer or raise an ``AgentRuntimeError``. The
    config, adaptor and registry are shared between runs and must not be
    mutated.
    """

    name: str

    async def execute(
        self,
        config: AgentConfig,
        llm: ModelAdaptor,
        tools: ToolRegistry,
        context: ExecutionContext,
    ) -> str:
        raise NotImplementedError
