import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional

from pydantic import BaseModel, ValidationError

from agent_runtime.exceptions import ToolError, ToolExecutionError, ToolInvalidInput, ToolNotFound

logger = logging.getLogger(__name__)


class ToolInput(BaseModel):
    """Subclass this for tool-specific input validation."""


@dataclass
class ToolOutput:
    content: str
    success: bool = True
    metadata: Optional[dict[str, Any]] = None
    execution_time_ms: int = 0

    @classmethod
    def ok(
        cls,
        content: str,
        metadata: Optional[dict[str, Any]] = None,
        execution_time_ms: int = 0,
    ) -> "ToolOutput":
        return cls(content, True, metadata, execution_time_ms)

    @classmethod
    def failure(
        cls,
        content: str,
        metadata: Optional[dict[str, Any]] = None,
        execution_time_ms: int = 0,
    ) -> "ToolOutput":
        return cls(content, False, metadata, execution_time_ms)


class Tool:
    """A named capability the model can invoke.

    Subclasses set ``name``, ``description`` and ``input_model`` and
    implement ``run``. ``execute`` is the dispatch contract: it takes the raw
    JSON-like input, validates it, and only ever raises ``ToolError``.
    """

    name: str
    description: str
    input_model: type[BaseModel] = ToolInput

    def parameters(self) -> dict:
        """Return JSON schema from Pydantic model."""
        return self.input_model.model_json_schema()

    def definition(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters(),
        }

    async def execute(self, input: dict[str, Any]) -> ToolOutput:
        start = time.perf_counter()
        try:
            validated = self.input_model.model_validate(input)
        except ValidationError as e:
            raise ToolInvalidInput(f"Invalid input for '{self.name}': {e}") from e

        try:
            output = await self.run(validated)
        except ToolError:
            raise
        except Exception as e:
            logger.debug("Tool '%s' raised %s", self.name, type(e).__name__)
            raise ToolExecutionError(f"Tool '{self.name}' failed: {e}") from e

        if not output.execution_time_ms:
            output.execution_time_ms = int((time.perf_counter() - start) * 1000)
        return output

    async def run(self, input: BaseModel) -> ToolOutput:
        """Do the work on already-validated input."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class ToolRegistry:
    """Name-keyed tool lookup shared read-only across runs."""

    def __init__(self, tools: Optional[Iterable[Tool]] = None):
        self._tools: dict[str, Tool] = {}
        for tool in tools or ():
            self.register(tool)

    def register(self, tool: Tool, name: Optional[str] = None) -> None:
        key = name or tool.name
        if key in self._tools:
            logger.debug("Replacing tool '%s'", key)
        self._tools[key] = tool

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFound(f"Tool '{name}' not found") from None

    def names(self) -> list[str]:
        return sorted(self._tools)

    def definitions(self) -> list[dict]:
        return [self._tools[name].definition() for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())
