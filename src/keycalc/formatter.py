"""
Number parsing and display formatting for keycalc.

``render_number`` produces the canonical shortest decimal text for a float
(fixed notation between 1e-7 and 1e21, exponential outside). ``format_result``
bounds that text to the display width, rounding away floating-point noise
and substituting the error marker for unrepresentable results.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext

from keycalc.config import Settings, settings


_NUMERIC_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Fixed notation is used while the decimal point position stays in this range.
_FIXED_MIN_POINT = -6
_FIXED_MAX_POINT = 21


def parse_number(text: str) -> float:
    """Parse the leading numeric prefix of ``text``; NaN when there is none."""
    match = _NUMERIC_PREFIX.match(text)
    if not match:
        return math.nan
    return float(match.group(0))


def _shortest_digits(value: float) -> tuple[str, int]:
    """
    Split a positive finite float into its shortest round-trip digits and
    the decimal point position ``n`` such that value == 0.DIGITS * 10**n.
    """
    normalized = Decimal(repr(value)).normalize()
    _, digits, exponent = normalized.as_tuple()
    text = "".join(str(d) for d in digits)
    return text, exponent + len(text)


def render_number(value: float) -> str:
    """Render a float as canonical decimal text."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    digits, point = _shortest_digits(abs(float(value)))
    k = len(digits)

    if k <= point <= _FIXED_MAX_POINT:
        return sign + digits + "0" * (point - k)
    if 0 < point <= _FIXED_MAX_POINT:
        return sign + digits[:point] + "." + digits[point:]
    if _FIXED_MIN_POINT < point <= 0:
        return sign + "0." + "0" * -point + digits

    exponent = point - 1
    mantissa = digits[0] + ("." + digits[1:] if k > 1 else "")
    return f"{sign}{mantissa}e{exponent:+d}"


def to_fixed(value: float, places: int) -> Decimal:
    """Round the exact binary value to ``places`` fractional digits, ties away from zero."""
    with localcontext() as ctx:
        ctx.prec = 64
        return Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def to_exponential(value: float, places: int) -> str:
    """Render ``value`` in scientific notation with ``places`` mantissa digits."""
    if value == 0:
        return "0" + ("." + "0" * places if places else "") + "e+0"

    with localcontext() as ctx:
        ctx.prec = 64
        exact = Decimal(value)
        exponent = exact.adjusted()
        quantum = Decimal(1).scaleb(-places)
        mantissa = exact.scaleb(-exponent).quantize(quantum, rounding=ROUND_HALF_UP)
        if abs(mantissa) >= 10:
            exponent += 1
            mantissa = exact.scaleb(-exponent).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{mantissa}e{exponent:+d}"


def format_result(value: float, config: Settings | None = None) -> str:
    """
    Convert a computed value to its display form.

    Non-finite values and results too long for the display (outside the
    scientific-notation ranges) become the error marker.
    """
    config = config or settings

    if not math.isfinite(value):
        return config.error_marker

    text = render_number(value)

    # Strip floating-point noise such as 0.30000000000000004
    if "." in text and abs(value) < 1e21:
        text = render_number(float(to_fixed(value, config.result_precision)))

    if len(text) > config.max_display_length:
        magnitude = abs(value)
        if magnitude < config.scientific_lower_bound or magnitude > config.scientific_upper_bound:
            return to_exponential(value, config.exponent_digits)
        return config.error_marker

    return text
