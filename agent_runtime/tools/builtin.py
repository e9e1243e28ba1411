"""Built-in utility tools (calculator, string operations).

Both are pure: no I/O, deterministic output for a given input.
"""

import ast
import operator
from typing import Literal, Optional, Union

from pydantic import Field

from agent_runtime.exceptions import ToolInvalidInput
from agent_runtime.tools.base import Tool, ToolInput, ToolOutput

Number = Union[int, float]

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def _unsupported(expression: str) -> ToolInvalidInput:
    return ToolInvalidInput(
        f"Unable to evaluate expression: {expression}. "
        "Supported: simple arithmetic with +, -, *, /"
    )


def evaluate(expression: str) -> float:
    """Evaluate an arithmetic expression without ``eval``.

    Raises:
        ToolInvalidInput: On syntax errors, unsupported constructs or
            division by zero.
    """
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError:
        raise _unsupported(expression) from None

    def _eval(node: ast.AST) -> Number:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
                return node.value
            raise _unsupported(expression)
        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
            left = _eval(node.left)
            right = _eval(node.right)
            if isinstance(node.op, ast.Div) and right == 0:
                raise ToolInvalidInput(f"Division by zero in expression: {expression}")
            return _BINARY_OPS[type(node.op)](left, right)
        if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
            return _UNARY_OPS[type(node.op)](_eval(node.operand))
        raise _unsupported(expression)

    return float(_eval(tree.body))


def format_number(value: float) -> str:
    """Render integral floats without a trailing ``.0``."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


class CalculatorInput(ToolInput):
    expression: str = Field(
        ...,
        description="Mathematical expression to evaluate (e.g., '2 + 2', '10 * 5', '100 / 4')",
    )


class CalculatorTool(Tool):
    name = "calculator"
    description = (
        "Perform arithmetic calculations. "
        "Supports: addition (+), subtraction (-), multiplication (*), division (/)."
    )
    input_model = CalculatorInput

    async def run(self, input: CalculatorInput) -> ToolOutput:
        result = evaluate(input.expression)
        return ToolOutput.ok(
            f"{input.expression} = {format_number(result)}",
            metadata={
                "expression": input.expression,
                "result": result,
                "operation": "calculate",
            },
        )


class StringInput(ToolInput):
    operation: Literal["uppercase", "lowercase", "reverse", "length", "trim", "replace"] = Field(
        ..., description="String operation to perform"
    )
    text: str = Field(..., description="Input text")
    find: Optional[str] = Field(None, description="Text to find (for 'replace' operation)")
    replace_with: Optional[str] = Field(
        None, description="Replacement text (for 'replace' operation)"
    )


class StringTool(Tool):
    name = "string"
    description = (
        "String manipulation operations. "
        "Supports: uppercase, lowercase, reverse, length, trim, replace."
    )
    input_model = StringInput

    async def run(self, input: StringInput) -> ToolOutput:
        text = input.text
        if input.operation == "uppercase":
            result = text.upper()
        elif input.operation == "lowercase":
            result = text.lower()
        elif input.operation == "reverse":
            result = text[::-1]
        elif input.operation == "length":
            result = str(len(text))
        elif input.operation == "trim":
            result = text.strip()
        else:
            if input.find is None or input.replace_with is None:
                raise ToolInvalidInput(
                    "Missing 'find' or 'replace_with' field for replace operation"
                )
            result = text.replace(input.find, input.replace_with)

        return ToolOutput.ok(
            result,
            metadata={
                "operation": input.operation,
                "input_length": len(text),
                "output_length": len(result),
            },
        )
