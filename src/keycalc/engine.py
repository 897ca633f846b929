"""
Arithmetic engine for keycalc.

Pure binary operations plus an operator dispatcher. Failures are returned
as tagged results instead of raised, so the state machine inspects them
explicitly.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from keycalc.models import Operator


class EngineError(str, Enum):
    """Failure kinds reported by the engine."""
    INVALID_OPERAND = "invalid_operand"
    DIVISION_BY_ZERO = "division_by_zero"
    UNKNOWN_OPERATOR = "unknown_operator"


@dataclass(frozen=True)
class OperationResult:
    """Result of an engine operation: a value or a tagged error."""
    value: float | None = None
    error: EngineError | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: float) -> "OperationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: EngineError, message: str) -> "OperationResult":
        return cls(error=error, message=message)


def _is_operand(value: object) -> bool:
    """Check for a well-formed finite number (bool is not a number here)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _check_operands(a: object, b: object) -> OperationResult | None:
    if not (_is_operand(a) and _is_operand(b)):
        return OperationResult.failure(
            EngineError.INVALID_OPERAND,
            f"Both operands must be finite numbers, got {a!r} and {b!r}",
        )
    return None


def add(a: float, b: float) -> OperationResult:
    """Add two numbers."""
    return _check_operands(a, b) or OperationResult.success(a + b)


def subtract(a: float, b: float) -> OperationResult:
    """Subtract b from a."""
    return _check_operands(a, b) or OperationResult.success(a - b)


def multiply(a: float, b: float) -> OperationResult:
    """Multiply two numbers."""
    return _check_operands(a, b) or OperationResult.success(a * b)


def divide(a: float, b: float) -> OperationResult:
    """Divide a by b."""
    invalid = _check_operands(a, b)
    if invalid:
        return invalid
    if b == 0:
        return OperationResult.failure(EngineError.DIVISION_BY_ZERO, "Cannot divide by zero")
    return OperationResult.success(a / b)


OPERATIONS: dict[Operator, Callable[[float, float], OperationResult]] = {
    Operator.ADD: add,
    Operator.SUBTRACT: subtract,
    Operator.MULTIPLY: multiply,
    Operator.DIVIDE: divide,
}


def dispatch(op: str | Operator, a: float, b: float) -> OperationResult:
    """
    Apply the operation named by ``op`` to ``a`` and ``b``.

    Operands are validated before the operator is looked up.
    """
    invalid = _check_operands(a, b)
    if invalid:
        return invalid

    try:
        operator = Operator(op)
    except ValueError:
        return OperationResult.failure(EngineError.UNKNOWN_OPERATOR, f"Invalid operator: {op!r}")

    return OPERATIONS[operator](a, b)
