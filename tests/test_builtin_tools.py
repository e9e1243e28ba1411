import pytest

from agent_runtime.exceptions import ToolInvalidInput
from agent_runtime.tools import CalculatorTool, StringTool
from agent_runtime.tools.builtin import evaluate, format_number


class TestEvaluate:
    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("2+2", 4.0),
            ("10 * 5", 50.0),
            ("100 / 4", 25.0),
            ("7 - 10", -3.0),
            ("(1 + 2) * 3", 9.0),
            ("-4 + 1", -3.0),
            ("1 / 4", 0.25),
            ("2.5 * 2", 5.0),
        ],
    )
    def test_arithmetic(self, expression, expected):
        assert evaluate(expression) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "expression",
        ["", "2 +", "abc", "__import__('os')", "2 ** 3", "True + 1", "'a' * 3"],
    )
    def test_unsupported(self, expression):
        with pytest.raises(ToolInvalidInput, match="Unable to evaluate expression"):
            evaluate(expression)

    def test_division_by_zero(self):
        with pytest.raises(ToolInvalidInput, match="Division by zero"):
            evaluate("1 / (2 - 2)")


class TestFormatNumber:
    def test_integral(self):
        assert format_number(4.0) == "4"
        assert format_number(-3.0) == "-3"

    def test_fractional(self):
        assert format_number(0.25) == "0.25"


class TestCalculatorTool:
    @pytest.mark.asyncio
    async def test_calculate(self):
        output = await CalculatorTool().execute({"expression": "2+2"})

        assert output.content == "2+2 = 4"
        assert output.success is True
        assert output.metadata["result"] == 4.0
        assert output.metadata["expression"] == "2+2"

    @pytest.mark.asyncio
    async def test_missing_expression(self):
        with pytest.raises(ToolInvalidInput):
            await CalculatorTool().execute({"input": "2+2"})

    def test_schema(self):
        assert CalculatorTool().parameters()["required"] == ["expression"]


class TestStringTool:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "operation, text, expected",
        [
            ("uppercase", "Hello", "HELLO"),
            ("lowercase", "Hello", "hello"),
            ("reverse", "abc", "cba"),
            ("length", "héllo", "5"),
            ("trim", "  padded  ", "padded"),
        ],
    )
    async def test_operations(self, operation, text, expected):
        output = await StringTool().execute({"operation": operation, "text": text})
        assert output.content == expected
        assert output.metadata["operation"] == operation

    @pytest.mark.asyncio
    async def test_replace(self):
        output = await StringTool().execute(
            {"operation": "replace", "text": "a-b-c", "find": "-", "replace_with": "+"}
        )
        assert output.content == "a+b+c"

    @pytest.mark.asyncio
    async def test_replace_requires_find_and_replacement(self):
        with pytest.raises(ToolInvalidInput, match="Missing 'find' or 'replace_with'"):
            await StringTool().execute({"operation": "replace", "text": "abc", "find": "a"})

    @pytest.mark.asyncio
    async def test_unknown_operation(self):
        with pytest.raises(ToolInvalidInput):
            await StringTool().execute({"operation": "shout", "text": "abc"})
