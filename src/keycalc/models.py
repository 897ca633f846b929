"""
Core data models for keycalc.

Defines the operator and input-event vocabulary consumed by the state
machine, and the session state it mutates.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


DIGIT_SYMBOLS = "0123456789."


# =============================================================================
# Enums
# =============================================================================

class Operator(str, Enum):
    """Binary operators understood by the arithmetic engine."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


class InputKind(str, Enum):
    """The four abstract input events."""
    DIGIT = "digit"
    OPERATOR = "operator"
    EQUALS = "equals"
    CLEAR = "clear"


# =============================================================================
# Input Events
# =============================================================================

class InputEvent(BaseModel):
    """
    A single input delivered to the state machine.

    Digit and operator events carry a one-character symbol; equals and
    clear carry none. Use the named constructors rather than building
    instances by hand.
    """
    model_config = ConfigDict(frozen=True)

    kind: InputKind
    symbol: str | None = None

    @model_validator(mode="after")
    def _check_symbol(self) -> "InputEvent":
        if self.kind == InputKind.DIGIT:
            if self.symbol is None or len(self.symbol) != 1 or self.symbol not in DIGIT_SYMBOLS:
                raise ValueError(f"digit must be one of {DIGIT_SYMBOLS!r}, got {self.symbol!r}")
        elif self.kind == InputKind.OPERATOR:
            if self.symbol not in {op.value for op in Operator}:
                raise ValueError(f"operator must be one of '+-*/', got {self.symbol!r}")
        elif self.symbol is not None:
            raise ValueError(f"{self.kind.value} takes no symbol")
        return self

    @classmethod
    def digit(cls, symbol: str) -> "InputEvent":
        return cls(kind=InputKind.DIGIT, symbol=symbol)

    @classmethod
    def operator(cls, symbol: str | Operator) -> "InputEvent":
        if isinstance(symbol, Operator):
            symbol = symbol.value
        return cls(kind=InputKind.OPERATOR, symbol=symbol)

    @classmethod
    def equals(cls) -> "InputEvent":
        return cls(kind=InputKind.EQUALS)

    @classmethod
    def clear(cls) -> "InputEvent":
        return cls(kind=InputKind.CLEAR)


# =============================================================================
# Session State
# =============================================================================

class SessionState(BaseModel):
    """
    Mutable calculator session.

    The (operand, operator, flags) tuple is the machine state; there is no
    separate state enum. Defaults are the initial configuration that
    ``clear`` restores.
    """
    model_config = ConfigDict(validate_assignment=True)

    entry_buffer: str = "0"
    pending_operand: float | None = None
    pending_operator: Operator | None = None
    is_fresh_entry: bool = True
    is_result_shown: bool = False

    @property
    def has_pending(self) -> bool:
        return self.pending_operand is not None and self.pending_operator is not None
