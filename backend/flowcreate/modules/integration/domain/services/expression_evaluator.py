"""Restricted expression evaluator for computed field mappings.

Grammar (a subset of Python expression syntax)::

    expr    := expr ('+' | '-' | '*' | '/' | '//' | '%') expr
             | ('-' | '+') expr
             | '(' expr ')'
             | literal
             | field
    literal := number | string | True | False | None
    field   := name ('.' name)*

Field references resolve against the source record; dotted references walk
nested objects. ``+`` adds numbers or concatenates two strings. Anything else
(calls, subscripts, comparisons, lambdas, comprehensions) is rejected, so
evaluation cannot reach arbitrary code.
"""

import ast
import operator
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from flowcreate.modules.integration.domain.errors import ExpressionError

_BINARY_OPERATORS: dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_UNARY_OPERATORS: dict[type, Callable[[Any], Any]] = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

_LITERAL_TYPES = (int, float, str, bool, type(None))
MAX_EXPRESSION_LENGTH = 500
PARSE_CACHE_SIZE = 1024


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


@lru_cache(maxsize=PARSE_CACHE_SIZE)
def _parse_checked(expression: str) -> ast.Expression:
    """Parse and whitelist-check; only successful parses are cached."""
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ExpressionError(expression, f"syntax error: {e.msg}") from e

    for node in ast.walk(tree):
        _check_node(expression, node)
    return tree


def _check_node(expression: str, node: ast.AST) -> None:
    if isinstance(node, ast.Expression | ast.Load | ast.Name):
        return
    if isinstance(node, ast.BinOp):
        if type(node.op) not in _BINARY_OPERATORS:
            raise ExpressionError(
                expression, f"operator '{type(node.op).__name__}' is not allowed"
            )
        return
    if isinstance(node, ast.UnaryOp):
        if type(node.op) not in _UNARY_OPERATORS:
            raise ExpressionError(
                expression, f"operator '{type(node.op).__name__}' is not allowed"
            )
        return
    if isinstance(node, ast.Constant):
        if not isinstance(node.value, _LITERAL_TYPES):
            raise ExpressionError(expression, "unsupported literal")
        return
    if isinstance(node, ast.Attribute):
        target = node.value
        while isinstance(target, ast.Attribute):
            target = target.value
        if not isinstance(target, ast.Name):
            raise ExpressionError(expression, "only field paths may use '.'")
        return
    if isinstance(node, ast.operator | ast.unaryop):
        return
    raise ExpressionError(expression, f"'{type(node).__name__}' syntax is not allowed")


class ExpressionEvaluator:
    """Parses and evaluates mapping expressions against a record."""

    def parse(self, expression: str) -> ast.Expression:
        """Parse and whitelist-check an expression.

        Raises:
            ExpressionError: If the expression is empty, malformed or uses
                syntax outside the grammar
        """
        if not isinstance(expression, str) or not expression.strip():
            raise ExpressionError(str(expression), "expression is empty")
        if len(expression) > MAX_EXPRESSION_LENGTH:
            raise ExpressionError(
                expression[:50] + "...",
                f"expression exceeds {MAX_EXPRESSION_LENGTH} characters",
            )
        return _parse_checked(expression)

    def validate(self, expression: str) -> str | None:
        """Return an error message for an invalid expression, None when valid."""
        try:
            self.parse(expression)
        except ExpressionError as e:
            return e.message
        return None

    def field_references(self, expression: str) -> list[str]:
        """Dotted field paths referenced by an expression, in source order."""
        tree = self.parse(expression)
        references: list[str] = []
        self._collect_references(tree.body, references)
        return references

    def _collect_references(self, node: ast.AST, references: list[str]) -> None:
        if isinstance(node, ast.Name | ast.Attribute):
            references.append(self._path_of(node))
            return
        for child in ast.iter_child_nodes(node):
            self._collect_references(child, references)

    @staticmethod
    def _path_of(node: ast.AST) -> str:
        parts: list[str] = []
        while isinstance(node, ast.Attribute):
            parts.append(node.attr)
            node = node.value
        parts.append(node.id)
        return ".".join(reversed(parts))

    def evaluate(self, expression: str, record: dict[str, Any]) -> Any:
        """Evaluate ``expression`` against ``record``.

        Raises:
            ExpressionError: On invalid syntax, unknown fields, type mismatches
                or division by zero
        """
        tree = self.parse(expression)
        return self._eval(expression, tree.body, record)

    def _eval(self, expression: str, node: ast.AST, record: dict[str, Any]) -> Any:
        if isinstance(node, ast.Constant):
            return node.value

        if isinstance(node, ast.Name | ast.Attribute):
            return self._resolve(expression, self._path_of(node), record)

        if isinstance(node, ast.UnaryOp):
            operand = self._eval(expression, node.operand, record)
            if not _is_number(operand):
                raise ExpressionError(expression, "unary operators require a number")
            return _UNARY_OPERATORS[type(node.op)](operand)

        left = self._eval(expression, node.left, record)
        right = self._eval(expression, node.right, record)
        return self._apply(expression, node.op, left, right)

    def _apply(self, expression: str, op: ast.operator, left: Any, right: Any) -> Any:
        if isinstance(op, ast.Add) and isinstance(left, str) and isinstance(right, str):
            return left + right
        if not (_is_number(left) and _is_number(right)):
            raise ExpressionError(
                expression,
                f"cannot apply '{type(op).__name__}' to "
                f"{type(left).__name__} and {type(right).__name__}",
            )
        try:
            return _BINARY_OPERATORS[type(op)](left, right)
        except ZeroDivisionError as e:
            raise ExpressionError(expression, "division by zero") from e

    @staticmethod
    def _resolve(expression: str, path: str, record: dict[str, Any]) -> Any:
        current: Any = record
        for part in path.split("."):
            if not isinstance(current, dict) or part not in current:
                raise ExpressionError(expression, f"unknown field '{path}'")
            current = current[part]
        if current is None:
            raise ExpressionError(expression, f"field '{path}' is null")
        return current
