"""
Expression Evaluator

Evaluates user arithmetic expressions against a single option contract.

Every contract gets a fresh, read-only evaluation context of 30 variables:
- 10 unsided variables (Volume, Gamma, ...) equal to the contract's values
- 10 call-sided variables (CVolume, CGamma, ...) equal to the contract's
  values for calls and zero for puts
- 10 put-sided variables (PVolume, PGamma, ...) with the reverse rule

So "(CVolume - COpenInterest) * CGamma" only contributes on call legs.

Expressions are parsed with the ast module and interpreted by a whitelisting
walker. Failures never escape evaluate(): they are reported to the error sink
and the contract contributes 0.

Usage:
    evaluator = ExpressionEvaluator(sink)
    value = evaluator.evaluate("CVolume + PVolume", contract)
"""

import ast
import math
import operator
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional

from loguru import logger

from src.chainviz.alerts.notifier import ErrorSink
from src.chainviz.core.models import OptionContract, OptionSide


# Variable suffix -> contract attribute
FIELDS = {
    "Volume": "volume",
    "Volatility": "volatility",
    "OpenInterest": "open_interest",
    "IntrinsicValue": "intrinsic_value",
    "BidSize": "bid_size",
    "AskSize": "ask_size",
    "Vega": "vega",
    "Gamma": "gamma",
    "Theta": "theta",
    "Delta": "delta",
}

CALL_PREFIX = "C"
PUT_PREFIX = "P"

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCTIONS = {
    "abs": abs,
    "min": min,
    "max": max,
    "sqrt": math.sqrt,
}


class ExpressionError(ValueError):
    """Expression could not be parsed or evaluated."""


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """
    Outcome of evaluating one expression against one contract.

    Exactly one of value/error is meaningful: failed results carry the
    error text and a value of 0.0.
    """

    value: float = 0.0
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def build_context(contract: OptionContract) -> Mapping[str, float]:
    """
    Build the evaluation context for one contract.

    Args:
        contract: Contract to bind

    Returns:
        Read-only mapping of the 30 variable names to floats
    """
    is_call = contract.side == OptionSide.CALL
    context: dict[str, float] = {}

    for suffix, attr in FIELDS.items():
        value = float(getattr(contract, attr) or 0.0)
        context[suffix] = value
        context[CALL_PREFIX + suffix] = value if is_call else 0.0
        context[PUT_PREFIX + suffix] = 0.0 if is_call else value

    return MappingProxyType(context)


@lru_cache(maxsize=256)
def compile_expression(expression: str) -> ast.Expression:
    """
    Parse an expression once and cache the tree.

    Raises:
        ExpressionError: If the text is empty or not valid syntax
    """
    if expression is None or not str(expression).strip():
        raise ExpressionError("expression is empty")

    try:
        return ast.parse(str(expression).strip(), mode="eval")
    except SyntaxError as e:
        raise ExpressionError(f"syntax error in {expression!r}: {e.msg}") from e
    except (RecursionError, MemoryError) as e:
        raise ExpressionError("expression is nested too deeply") from e


def _interpret(node: ast.AST, context: Mapping[str, float]) -> float:
    if isinstance(node, ast.Expression):
        return _interpret(node.body, context)

    if isinstance(node, ast.Constant):
        # bool is an int subclass, reject it explicitly
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ExpressionError(f"unsupported literal {node.value!r}")
        return float(node.value)

    if isinstance(node, ast.Name):
        if node.id not in context:
            raise ExpressionError(f"unknown variable '{node.id}'")
        return context[node.id]

    if isinstance(node, ast.BinOp):
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"unsupported operator {type(node.op).__name__}")
        left = _interpret(node.left, context)
        right = _interpret(node.right, context)
        if isinstance(node.op, ast.Div) and right == 0:
            raise ExpressionError("division by zero")
        result = op(left, right)
        # negative base with a fractional exponent
        if isinstance(result, complex):
            raise ExpressionError(f"non-real result of {ast.unparse(node)}")
        return result

    if isinstance(node, ast.UnaryOp):
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"unsupported operator {type(node.op).__name__}")
        return op(_interpret(node.operand, context))

    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in _FUNCTIONS:
            raise ExpressionError(f"unknown function '{ast.unparse(node.func)}'")
        if node.keywords:
            raise ExpressionError("keyword arguments are not supported")
        args = [_interpret(arg, context) for arg in node.args]
        return _FUNCTIONS[node.func.id](*args)

    raise ExpressionError(f"unsupported syntax: {ast.unparse(node)}")


def try_evaluate(expression: str, contract: OptionContract) -> EvaluationResult:
    """
    Evaluate an expression against a contract without side effects.

    Args:
        expression: Arithmetic expression text
        contract: Contract supplying the variable values

    Returns:
        EvaluationResult with the value, or the error text if evaluation failed
    """
    try:
        tree = compile_expression(expression)
        value = float(_interpret(tree, build_context(contract)))
    except ExpressionError as e:
        return EvaluationResult(error=str(e))
    except (RecursionError, MemoryError):
        return EvaluationResult(error="expression is nested too deeply")
    except (ArithmeticError, TypeError, ValueError) as e:
        # math domain errors, overflow, bad function arity
        return EvaluationResult(error=str(e) or type(e).__name__)

    if not math.isfinite(value):
        return EvaluationResult(error=f"non-finite result {value}")

    return EvaluationResult(value=value)


class ExpressionEvaluator:
    """
    Soft-failing evaluator used by the chart builders.

    Holds only the error sink; each call builds its own context, so one
    instance can be shared across thousands of contracts.

    Attributes:
        sink: Receives one notification per failed evaluation
    """

    def __init__(self, sink: ErrorSink):
        self.sink = sink

    def evaluate(self, expression: str, contract: OptionContract) -> float:
        """
        Evaluate an expression, returning 0.0 on failure.

        Args:
            expression: Arithmetic expression text
            contract: Contract supplying the variable values

        Returns:
            float: Evaluated value, or 0.0 if the expression failed
        """
        result = try_evaluate(expression, contract)

        if result.failed:
            logger.debug(f"Expression {expression!r} failed at strike {contract.strike}: {result.error}")
            self.sink.notify(f"Invalid expression: {result.error}")
            return 0.0

        return result.value

    def total(self, expression: str, contracts) -> float:
        """Sum an expression over a sequence of contracts."""
        return sum(self.evaluate(expression, contract) for contract in contracts)
