"""switchboard/tools/calculator.py

Four-operation arithmetic tool.

Accepts an ``expression``, an explicit ``operation`` + ``numbers`` pair, or
a free-text ``task``. Expressions are evaluated by a small recursive-descent
parser that only understands numbers, ``+ - * /``, unary signs and
parentheses; nothing is ever handed to ``eval``.
"""

from __future__ import annotations

# Standard Library
import math
import re
from collections.abc import Sequence
from typing import Any

# Local Modules
from switchboard.tools.base import Tool, ToolParameter

OPERATIONS: tuple[str, ...] = ("add", "subtract", "multiply", "divide")

# An optionally signed operand. The guards stop a match from starting or
# ending inside a longer number such as "1,5" or "2.5.1".
_NUM = r"(?<![\d.,])(-?\d+(?:\.\d+)?)(?![\d.,]?\d)"

_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")

_PREFIX_PATTERN = re.compile(
    r"^\s*(?:calculate|compute|what\s+is|what'?s|find)\b\s*:?\s*",
    re.IGNORECASE,
)
_TRAILING_PATTERN = re.compile(r"\s*[?.!]*\s*$")
_EXPRESSION_CHARS = re.compile(r"^[\d\s+\-*/().×÷]+$")

# (pattern, operation, operands reversed). Verb-led phrasings go first so
# "multiply 3 and 4" is not read as an addition.
_OPERATION_PATTERNS: tuple[tuple[re.Pattern[str], str, bool], ...] = (
    (re.compile(rf"multiply\s+{_NUM}\s+(?:by|and|with)\s+{_NUM}", re.I), "multiply", False),
    (re.compile(rf"divide\s+{_NUM}\s+by\s+{_NUM}", re.I), "divide", False),
    (re.compile(rf"subtract\s+{_NUM}\s+from\s+{_NUM}", re.I), "subtract", True),
    (re.compile(rf"add\s+{_NUM}\s+(?:and|to)\s+{_NUM}", re.I), "add", False),
    (re.compile(rf"{_NUM}\s*(?:\+|\bplus\b|\band\b)\s*{_NUM}", re.I), "add", False),
    (re.compile(rf"{_NUM}\s*(?:-|\bminus\b)\s*{_NUM}", re.I), "subtract", False),
    (re.compile(rf"{_NUM}\s*(?:\*|×|\btimes\b|\bx\b)\s*{_NUM}", re.I), "multiply", False),
    (re.compile(rf"{_NUM}\s*(?:/|÷|\bdivided\s+by\b|\bover\b)\s*{_NUM}", re.I), "divide", False),
)

_TOKEN_PATTERN = re.compile(r"\s*(?:(\d+(?:\.\d*)?|\.\d+)|(\S))")


class ExpressionError(ValueError):
    """The expression is not valid under the arithmetic grammar."""


class _ExpressionParser:
    """expr := term (("+"|"-") term)* ; term := factor (("*"|"/") factor)* ;
    factor := ("+"|"-") factor | number | "(" expr ")"
    """

    def __init__(self, text: str) -> None:
        self.tokens: list[str] = []
        position = 0
        text = text.replace("×", "*").replace("÷", "/")
        while position < len(text):
            match = _TOKEN_PATTERN.match(text, position)
            if match is None:
                break
            self.tokens.append(match.group(1) or match.group(2))
            position = match.end()
        self.index = 0

    def parse(self) -> float:
        if not self.tokens:
            raise ExpressionError("empty expression")
        value = self._expr()
        if self.index != len(self.tokens):
            raise ExpressionError(f"unexpected token {self.tokens[self.index]!r}")
        return value

    def _peek(self) -> str | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise ExpressionError("unexpected end of expression")
        self.index += 1
        return token

    def _expr(self) -> float:
        value = self._term()
        while self._peek() in ("+", "-"):
            if self._take() == "+":
                value += self._term()
            else:
                value -= self._term()
        return value

    def _term(self) -> float:
        value = self._factor()
        while self._peek() in ("*", "/"):
            if self._take() == "*":
                value *= self._factor()
            else:
                divisor = self._factor()
                if divisor == 0:
                    raise ZeroDivisionError("division by zero")
                value /= divisor
        return value

    def _factor(self) -> float:
        token = self._take()
        if token == "+":
            return self._factor()
        if token == "-":
            return -self._factor()
        if token == "(":
            value = self._expr()
            if self._take() != ")":
                raise ExpressionError("missing closing parenthesis")
            return value
        try:
            return float(token)
        except ValueError:
            raise ExpressionError(f"unexpected token {token!r}") from None


def evaluate_expression(expression: str) -> float:
    """Evaluate an arithmetic expression.

    Raises:
        ExpressionError: If the expression does not fit the grammar.
        ZeroDivisionError: If any divisor evaluates to zero.
    """
    return _ExpressionParser(expression).parse()


def _coerce_numbers(numbers: Any) -> list[float]:
    if isinstance(numbers, str):
        numbers = [part for part in re.split(r"[,\s]+", numbers) if part]
    elif not isinstance(numbers, Sequence):
        numbers = [numbers]
    values: list[float] = []
    for number in numbers:
        try:
            values.append(float(number))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid number {number!r}.") from None
    return values


class CalculatorTool(Tool):
    """Add, subtract, multiply or divide."""

    name = "calculate"
    description = "Perform arithmetic calculations"
    parameters = {
        "operation": ToolParameter(
            type="string",
            description="The operation to perform: add, subtract, multiply, or divide",
        ),
        "numbers": ToolParameter(
            type="array",
            description="The numbers to operate on",
            items={"type": "number", "description": "A numeric value"},
        ),
        "expression": ToolParameter(
            type="string",
            description='Mathematical expression like "25 * 8" or "15 + 27"',
        ),
    }

    def extract_arguments(self, task: str) -> dict[str, Any]:
        cleaned = _PREFIX_PATTERN.sub("", task)
        cleaned = _TRAILING_PATTERN.sub("", cleaned)
        cleaned = _THOUSANDS_SEPARATOR.sub("", cleaned)
        if _EXPRESSION_CHARS.match(cleaned) and re.search(r"\d", cleaned):
            return {"expression": cleaned.strip()}

        for pattern, operation, reversed_operands in _OPERATION_PATTERNS:
            match = pattern.search(cleaned)
            if match:
                first, second = float(match.group(1)), float(match.group(2))
                if reversed_operands:
                    first, second = second, first
                return {"operation": operation, "numbers": [first, second]}
        return {}

    def _run(self, arguments: dict[str, Any]) -> str:
        expression = arguments.get("expression")
        if isinstance(expression, str) and expression.strip():
            return self.evaluate(expression.strip())

        operation = arguments.get("operation")
        if operation:
            return self.perform_operation(str(operation), arguments.get("numbers") or [])

        return "Error: Unable to parse mathematical expression from input."

    def evaluate(self, expression: str) -> str:
        try:
            result = evaluate_expression(expression)
        except ZeroDivisionError:
            return "Error: Cannot divide by zero."
        except ExpressionError:
            return "Error: Unable to parse mathematical expression from input."
        if not math.isfinite(result):
            return "Error: Result is not a finite number."
        return f"{expression} = {result}"

    def perform_operation(self, operation: str, numbers: Any) -> str:
        """Apply ``operation`` left to right over ``numbers``.

        Args:
            operation: One of ``add``, ``subtract``, ``multiply``, ``divide``.
            numbers: Operands; coerced to float.

        Returns:
            ``"a <op> b ... = result"`` or an ``"Error: ..."`` message.
        """
        try:
            values = _coerce_numbers(numbers)
        except ValueError as exc:
            return f"Error: {exc}"
        if not values:
            return "Error: No numbers provided for calculation."

        operation = operation.strip().lower()
        if operation == "add":
            result = math.fsum(values)
            symbol = "+"
        elif operation == "subtract":
            result = values[0]
            for value in values[1:]:
                result -= value
            symbol = "-"
        elif operation == "multiply":
            result = 1.0
            for value in values:
                result *= value
            symbol = "×"
        elif operation == "divide":
            if len(values) < 2:
                return "Error: Division requires at least two numbers."
            if any(value == 0 for value in values[1:]):
                return "Error: Cannot divide by zero."
            result = values[0]
            for value in values[1:]:
                result /= value
            symbol = "÷"
        else:
            return (
                f"Error: Unknown operation '{operation}'. "
                "Use add, subtract, multiply, or divide."
            )

        if not math.isfinite(result):
            return "Error: Result is not a finite number."
        equation = f" {symbol} ".join(str(value) for value in values)
        return f"{equation} = {result}"
