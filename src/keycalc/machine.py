"""
Calculator state machine for keycalc.

Owns the session state and applies the four input events to it. After
every state-changing transition the display text is recomputed and pushed
to the render callback.
"""

import threading
from typing import Callable, Iterable

import structlog

from keycalc.config import Settings, settings
from keycalc.engine import dispatch
from keycalc.formatter import format_result, parse_number, render_number
from keycalc.models import DIGIT_SYMBOLS, InputEvent, InputKind, Operator, SessionState

logger = structlog.get_logger()

Renderer = Callable[[str], None]


class CalculatorError(Exception):
    """Base exception for calculator errors."""
    pass


class InvalidInputError(CalculatorError):
    """Raised when the host delivers an input outside the event vocabulary."""
    pass


class CalculatorStateMachine:
    """
    Input-driven calculator.

    Evaluation is strictly left-to-right: pressing an operator while an
    operation is pending evaluates it first and chains the result into the
    new operation. Engine failures never escape; they put the machine into
    the error display with the pending pair cleared.

    Handlers are serialized with a re-entrant lock, so a render callback may
    safely read ``current_display()`` or ``state``.
    """

    def __init__(self, render: Renderer | None = None, config: Settings | None = None):
        self.config = config or settings
        self._render = render
        self._lock = threading.RLock()
        self._state = SessionState()
        self._display = ""
        self._refresh()

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def state(self) -> SessionState:
        """A copy of the current session state."""
        with self._lock:
            return self._state.model_copy()

    def current_display(self) -> str:
        with self._lock:
            return self._display

    # =========================================================================
    # Input Events
    # =========================================================================

    def digit(self, d: str) -> str:
        """Type a digit or the decimal point."""
        if not isinstance(d, str) or len(d) != 1 or d not in DIGIT_SYMBOLS:
            raise InvalidInputError(f"Not a digit: {d!r}")

        with self._lock:
            state = self._state
            if state.is_result_shown:
                state.entry_buffer = d
                state.is_result_shown = False
                state.is_fresh_entry = False
            elif state.is_fresh_entry:
                state.entry_buffer = d
                state.is_fresh_entry = False
            elif d == "." and "." in state.entry_buffer:
                logger.debug("Duplicate decimal point ignored", buffer=state.entry_buffer)
            elif len(state.entry_buffer) >= self.config.max_entry_length:
                logger.debug("Entry buffer full", buffer=state.entry_buffer)
            elif state.entry_buffer == "0" and d != ".":
                state.entry_buffer = d
            else:
                state.entry_buffer += d
            return self._refresh()

    def operator(self, op: str | Operator) -> str:
        """Select an operator, evaluating any pending operation first."""
        try:
            next_operator = Operator(op)
        except ValueError:
            raise InvalidInputError(f"Not an operator: {op!r}") from None

        with self._lock:
            state = self._state
            if state.pending_operand is None:
                state.pending_operand = parse_number(state.entry_buffer)
                state.pending_operator = next_operator
            elif state.pending_operator is not None:
                text = self._evaluate()
                if text is None:
                    self._fail()
                else:
                    state.entry_buffer = text
                    state.pending_operand = parse_number(text)
                    state.pending_operator = next_operator

            state.is_fresh_entry = True
            state.is_result_shown = False
            return self._refresh()

    def equals(self) -> str:
        """Evaluate the pending operation, if a second operand was entered."""
        with self._lock:
            state = self._state
            if not state.has_pending or state.is_fresh_entry:
                logger.debug("Equals ignored", has_pending=state.has_pending)
                return self._display

            text = self._evaluate()
            if text is None:
                self._fail()
            else:
                state.entry_buffer = text
                state.pending_operand = None
                state.pending_operator = None
                state.is_fresh_entry = True
                state.is_result_shown = True
            return self._refresh()

    def clear(self) -> str:
        """Reset to the initial session state."""
        with self._lock:
            self._state = SessionState()
            logger.debug("Calculator cleared")
            return self._refresh()

    def handle(self, event: InputEvent) -> str:
        """Apply a single input event."""
        if event.kind == InputKind.DIGIT:
            return self.digit(event.symbol)
        if event.kind == InputKind.OPERATOR:
            return self.operator(event.symbol)
        if event.kind == InputKind.EQUALS:
            return self.equals()
        if event.kind == InputKind.CLEAR:
            return self.clear()
        raise InvalidInputError(f"Unknown event kind: {event.kind!r}")

    def feed(self, events: Iterable[InputEvent]) -> str:
        """Apply events in order and return the final display."""
        with self._lock:
            for event in events:
                self.handle(event)
            return self._display

    # =========================================================================
    # Helpers
    # =========================================================================

    def _evaluate(self) -> str | None:
        """Evaluate the pending operation; None on any failure."""
        state = self._state
        result = dispatch(state.pending_operator, state.pending_operand, parse_number(state.entry_buffer))
        if not result.ok:
            logger.warning(
                "Calculation failed",
                operator=state.pending_operator.value,
                error=result.error.value,
                message=result.message,
            )
            return None

        text = format_result(result.value, self.config)
        if text == self.config.error_marker:
            logger.warning("Result not representable", operator=state.pending_operator.value)
            return None
        return text

    def _fail(self) -> None:
        state = self._state
        state.entry_buffer = self.config.error_marker
        state.pending_operand = None
        state.pending_operator = None
        state.is_fresh_entry = True
        state.is_result_shown = False

    def _compose_display(self) -> str:
        state = self._state
        if state.pending_operator is not None and not state.is_fresh_entry:
            return f"{render_number(state.pending_operand)} {state.pending_operator.value} {state.entry_buffer}"
        return state.entry_buffer

    def _refresh(self) -> str:
        self._display = self._compose_display()
        if self._render is not None:
            self._render(self._display)
        return self._display
