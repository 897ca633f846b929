"""
keycalc - keypad calculator core

An input-driven calculator state machine: digit, operator, equals and clear
events go in, a display string comes out after every transition. Evaluation
is strictly left-to-right, one binary operation at a time.
"""

__version__ = "1.0.0"
__author__ = "keycalc Team"

from keycalc.engine import EngineError, OperationResult, dispatch
from keycalc.formatter import format_result, parse_number, render_number
from keycalc.machine import CalculatorError, CalculatorStateMachine, InvalidInputError
from keycalc.models import InputEvent, InputKind, Operator, SessionState

__all__ = [
    "CalculatorError",
    "CalculatorStateMachine",
    "EngineError",
    "InputEvent",
    "InputKind",
    "InvalidInputError",
    "OperationResult",
    "Operator",
    "SessionState",
    "dispatch",
    "format_result",
    "parse_number",
    "render_number",
]
