"""
Tests for the calculator state machine.
"""

import math
import random
import threading

import pytest

from keycalc.config import Settings
from keycalc.machine import CalculatorStateMachine, InvalidInputError
from keycalc.models import InputEvent, Operator, SessionState


def press(machine, keys):
    """Drive the machine with a compact key string such as '7+2*3='."""
    for key in keys:
        if key in "+-*/":
            machine.operator(key)
        elif key == "=":
            machine.equals()
        elif key == "C":
            machine.clear()
        else:
            machine.digit(key)
    return machine.current_display()


class TestInitialState:
    """Test construction and rendering at startup."""
    
    def test_initial_display(self):
        assert CalculatorStateMachine().current_display() == "0"
    
    def test_initial_state(self):
        assert CalculatorStateMachine().state == SessionState()
    
    def test_renders_once_at_startup(self):
        rendered = []
        CalculatorStateMachine(render=rendered.append)
        assert rendered == ["0"]


class TestDigits:
    """Test entry buffer accumulation."""
    
    def setup_method(self):
        self.calc = CalculatorStateMachine()
    
    def test_first_digit_replaces_zero(self):
        assert press(self.calc, "5") == "5"
        assert not self.calc.state.is_fresh_entry
    
    def test_digits_append(self):
        assert press(self.calc, "123") == "123"
    
    def test_leading_zero_replaced(self):
        assert press(self.calc, "007") == "7"
    
    def test_decimal_after_zero(self):
        assert press(self.calc, "0.5") == "0.5"
    
    def test_fresh_decimal_point(self):
        assert press(self.calc, ".5") == ".5"
    
    def test_duplicate_decimal_point_ignored(self):
        assert press(self.calc, "1.2.3") == "1.23"
    
    def test_length_cap(self):
        assert press(self.calc, "1234567890123456") == "123456789012"
    
    def test_length_cap_applies_to_point(self):
        assert press(self.calc, "123456789012.") == "123456789012"
    
    def test_digit_always_renders(self):
        rendered = []
        calc = CalculatorStateMachine(render=rendered.append)
        press(calc, "1..")
        assert rendered == ["0", "1", "1.", "1."]
    
    @pytest.mark.parametrize("bad", ["a", "", "12", "+", None, 5])
    def test_rejects_non_digit(self, bad):
        with pytest.raises(InvalidInputError):
            self.calc.digit(bad)
    
    @pytest.mark.parametrize("seed", range(25))
    def test_buffer_invariants_hold_for_any_sequence(self, seed):
        rng = random.Random(seed)
        calc = CalculatorStateMachine()
        for _ in range(rng.randint(1, 40)):
            calc.digit(rng.choice("0123456789.."))
            buffer = calc.state.entry_buffer
            assert len(buffer) <= 12
            assert buffer.count(".") <= 1


class TestOperators:
    """Test operator selection and chaining."""
    
    def setup_method(self):
        self.calc = CalculatorStateMachine()
    
    def test_captures_pending_pair(self):
        press(self.calc, "5+")
        state = self.calc.state
        assert state.pending_operand == 5
        assert state.pending_operator == Operator.ADD
        assert state.is_fresh_entry
        assert self.calc.current_display() == "5"
    
    def test_expression_display(self):
        assert press(self.calc, "5+3") == "5 + 3"
    
    def test_chained_operator_evaluates(self):
        press(self.calc, "7+2*")
        state = self.calc.state
        assert state.pending_operand == 9
        assert state.pending_operator == Operator.MULTIPLY
        assert self.calc.current_display() == "9"
        assert press(self.calc, "3") == "9 * 3"
    
    def test_left_to_right_evaluation(self):
        assert press(self.calc, "2+3*4=") == "20"
    
    def test_repeated_operator_uses_buffer_as_operand(self):
        press(self.calc, "5++")
        assert self.calc.state.pending_operand == 10
    
    def test_operand_rendered_canonically(self):
        assert press(self.calc, "5.+2") == "5 + 2"
    
    def test_chained_division_by_zero(self):
        assert press(self.calc, "8/0+") == "Error"
        state = self.calc.state
        assert state.pending_operand is None
        assert state.pending_operator is None
        assert state.is_fresh_entry
        assert not state.is_result_shown
    
    def test_accepts_operator_enum(self):
        self.calc.digit("4")
        self.calc.operator(Operator.DIVIDE)
        assert self.calc.state.pending_operator == Operator.DIVIDE
    
    @pytest.mark.parametrize("bad", ["%", "x", "", None])
    def test_rejects_unknown_operator(self, bad):
        with pytest.raises(InvalidInputError):
            self.calc.operator(bad)


class TestEquals:
    """Test evaluation with equals."""
    
    def setup_method(self):
        self.calc = CalculatorStateMachine()
    
    def test_addition(self):
        assert press(self.calc, "5+3=") == "8"
        state = self.calc.state
        assert state.pending_operand is None
        assert state.pending_operator is None
        assert state.is_fresh_entry
        assert state.is_result_shown
    
    def test_no_floating_point_noise(self):
        assert press(self.calc, "0.1+0.2=") == "0.3"
    
    def test_division_by_zero(self):
        assert press(self.calc, "1/0=") == "Error"
        state = self.calc.state
        assert state.pending_operand is None
        assert state.pending_operator is None
        assert state.is_fresh_entry
        assert not state.is_result_shown
    
    def test_overflow_is_error(self):
        assert press(self.calc, "12345.123+0.000456789=") == "Error"
        assert self.calc.state.pending_operator is None
    
    def test_large_result_in_scientific_notation(self):
        assert press(self.calc, "1234567*1000000=") == "1.234567e+12"
    
    def test_ignored_without_pending_operation(self):
        rendered = []
        calc = CalculatorStateMachine(render=rendered.append)
        press(calc, "5=")
        assert calc.current_display() == "5"
        assert rendered == ["0", "5"]
    
    def test_ignored_before_second_operand(self):
        press(self.calc, "5+")
        before = self.calc.state
        press(self.calc, "=")
        assert self.calc.state == before
    
    def test_repeated_equals_ignored(self):
        assert press(self.calc, "5+3==") == "8"
    
    def test_digit_after_result_starts_new_entry(self):
        press(self.calc, "5+3=")
        assert press(self.calc, "2") == "2"
        assert not self.calc.state.is_result_shown
    
    def test_result_feeds_next_operation(self):
        assert press(self.calc, "5+3=*2=") == "16"
    
    def test_digit_after_error_starts_fresh(self):
        press(self.calc, "1/0=")
        assert press(self.calc, "7") == "7"
    
    def test_operator_after_error_fails_on_next_evaluation(self):
        press(self.calc, "1/0=")
        press(self.calc, "+")
        assert math.isnan(self.calc.state.pending_operand)
        assert press(self.calc, "2=") == "Error"
        assert self.calc.state.pending_operand is None


class TestClear:
    """Test clear from reachable states."""
    
    @pytest.mark.parametrize("keys", ["", "123", "5+", "5+3", "5+3=", "1/0=", "7+2*3", "0.", "1/0=+"])
    def test_clear_restores_initial_state(self, keys):
        calc = CalculatorStateMachine()
        press(calc, keys)
        assert calc.clear() == "0"
        assert calc.state == SessionState()


class TestEvents:
    """Test event-driven input."""
    
    def test_feed(self):
        calc = CalculatorStateMachine()
        events = [
            InputEvent.digit("7"),
            InputEvent.operator("+"),
            InputEvent.digit("2"),
            InputEvent.operator(Operator.MULTIPLY),
            InputEvent.digit("3"),
        ]
        assert calc.feed(events) == "9 * 3"
        assert calc.feed([InputEvent.equals()]) == "27"
        assert calc.handle(InputEvent.clear()) == "0"
    
    def test_event_validation(self):
        with pytest.raises(ValueError):
            InputEvent.digit("12")
        with pytest.raises(ValueError):
            InputEvent.operator("%")
    
    def test_render_sequence(self):
        rendered = []
        calc = CalculatorStateMachine(render=rendered.append)
        press(calc, "5+3=")
        assert rendered == ["0", "5", "5", "5 + 3", "8"]


class TestConfiguration:
    """Test machine behaviour under custom settings."""
    
    def test_custom_entry_length(self):
        calc = CalculatorStateMachine(config=Settings(max_entry_length=4))
        assert press(calc, "123456") == "1234"
    
    def test_custom_error_marker(self):
        calc = CalculatorStateMachine(config=Settings(error_marker="E"))
        assert press(calc, "1/0=") == "E"


class TestConcurrency:
    """Handlers never interleave."""
    
    def test_parallel_digits_respect_cap(self):
        calc = CalculatorStateMachine()
        threads = [threading.Thread(target=press, args=(calc, "1" * 20)) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert calc.current_display() == "1" * 12
    
    def test_render_callback_can_read_state(self):
        seen = []
        calc = None
        
        def render(text):
            if calc is not None:
                seen.append((text, calc.current_display()))
        
        calc = CalculatorStateMachine(render=render)
        press(calc, "42")
        assert seen == [("4", "4"), ("42", "42")]
