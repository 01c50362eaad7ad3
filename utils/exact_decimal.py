"""
Exact fixed-point decimal type used for unit conversion.

An ExactDecimal stores ``±magnitude / 10**exponent`` with an unsigned 64-bit
magnitude and an unsigned 32-bit exponent. Parsing and multiplication are
exact; division goes through a float quotient and is the one inexact
operation. Errors (unparseable input, overflow, division by zero) are kept
as state on the value instead of being raised, so a bad input travels
through a chain of conversions and surfaces at the end.
"""

import enum
import logging
import math
import re
from typing import Union

from .constants import DEFAULT_FLOAT_PRECISION

logger = logging.getLogger("viscocorrect-mcp.exact_decimal")

MAX_MAGNITUDE = 2 ** 64 - 1
MAX_EXPONENT = 2 ** 32 - 1

# Exponents past this many digits are far below double range
_MAX_PLAIN_EXPONENT = 400

_DECIMAL_PATTERN = re.compile(r"([+-]?)([0-9]*)(?:\.([0-9]*))?(?:[eE]([+-]?[0-9]+))?")


class DecimalError(enum.Enum):
    """Error state carried by an ExactDecimal."""

    NONE = "none"
    NOT_A_NUMBER = "not_a_number"
    INFINITE = "infinite"


class ExactDecimal:
    """Immutable signed decimal ``±magnitude / 10**exponent``.

    Equality compares (magnitude, exponent, negative) as stored. Two values
    that are numerically equal but normalized differently, e.g. ``6.00``
    produced by ``100 * 0.06`` and ``6`` parsed from a string, compare
    unequal. Invalid values never compare equal to anything.
    """

    __slots__ = ("_magnitude", "_exponent", "_negative", "_error")

    def __init__(self, magnitude: int = 0, exponent: int = 0, negative: bool = False,
                 error: DecimalError = DecimalError.NONE):
        if error is DecimalError.NONE:
            if magnitude < 0 or exponent < 0:
                raise ValueError("magnitude and exponent must be non-negative")
            if magnitude > MAX_MAGNITUDE or exponent > MAX_EXPONENT:
                error = DecimalError.INFINITE
        if error is not DecimalError.NONE:
            magnitude, exponent, negative = 0, 0, False
        self._magnitude = magnitude
        self._exponent = exponent
        self._negative = bool(negative) and magnitude != 0
        self._error = error

    # --- Construction ---

    @classmethod
    def not_a_number(cls) -> "ExactDecimal":
        return cls(error=DecimalError.NOT_A_NUMBER)

    @classmethod
    def infinite(cls) -> "ExactDecimal":
        return cls(error=DecimalError.INFINITE)

    @classmethod
    def from_string(cls, text: str) -> "ExactDecimal":
        """Parse ``[+-]?[0-9]*(\\.[0-9]*)?([eE][+-]?[0-9]+)?``.

        Leading zeros of the integer part and trailing zeros of the fraction
        are dropped, so ``"0.500"`` parses to magnitude 5, exponent 1. A
        positive scientific exponent is taken off the decimal exponent; if
        that would go below zero the value is INFINITE. An empty mantissa
        (``""``, ``"."``) is zero.
        """
        match = _DECIMAL_PATTERN.fullmatch(text)
        if match is None:
            return cls.not_a_number()

        sign, integer_part, fraction, sci_exponent = match.groups()
        fraction = (fraction or "").rstrip("0")
        digits = (integer_part + fraction).lstrip("0")
        if not digits:
            return cls()

        if len(digits) > len(str(MAX_MAGNITUDE)):
            return cls.infinite()
        magnitude = int(digits)
        if magnitude > MAX_MAGNITUDE:
            return cls.infinite()

        sci_digits = (sci_exponent or "0").lstrip("+-").lstrip("0")
        if len(sci_digits) > len(str(MAX_EXPONENT)):
            return cls.infinite()
        exponent = len(fraction) - int(sci_exponent or 0)
        if exponent < 0 or exponent > MAX_EXPONENT:
            return cls.infinite()

        return cls(magnitude, exponent, sign == "-")

    @classmethod
    def from_double(cls, value: float, precision: int = DEFAULT_FLOAT_PRECISION) -> "ExactDecimal":
        """Convert a float through its ``%.<precision>g`` representation."""
        if math.isnan(value):
            return cls.not_a_number()
        if math.isinf(value):
            return cls.infinite()
        return cls.from_string("%.*g" % (precision, value))

    @classmethod
    def coerce(cls, value: Union["ExactDecimal", str, int, float],
               precision: int = DEFAULT_FLOAT_PRECISION) -> "ExactDecimal":
        """Turn any supported input into an ExactDecimal.

        Integers are converted exactly, floats via ``from_double``.
        """
        if isinstance(value, ExactDecimal):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        if isinstance(value, bool):
            raise TypeError("bool is not a decimal value")
        if isinstance(value, int):
            if abs(value) > MAX_MAGNITUDE:
                return cls.infinite()
            return cls.from_string(str(value))
        if isinstance(value, float):
            return cls.from_double(value, precision)
        raise TypeError(f"Cannot convert {type(value).__name__} to ExactDecimal")

    # --- Accessors ---

    @property
    def magnitude(self) -> int:
        return self._magnitude

    @property
    def exponent(self) -> int:
        return self._exponent

    @property
    def negative(self) -> bool:
        return self._negative

    @property
    def error(self) -> DecimalError:
        return self._error

    @property
    def valid(self) -> bool:
        return self._error is DecimalError.NONE

    def is_zero(self) -> bool:
        return self.valid and self._magnitude == 0

    def to_double(self) -> float:
        if self._error is DecimalError.NOT_A_NUMBER:
            return math.nan
        if self._error is DecimalError.INFINITE:
            return math.inf
        if self._exponent - len(str(self._magnitude)) > _MAX_PLAIN_EXPONENT:
            result = 0.0
        else:
            # int / int is correctly rounded
            result = self._magnitude / 10 ** self._exponent
        return -result if self._negative else result

    def __float__(self) -> float:
        return self.to_double()

    # --- Arithmetic ---

    def __mul__(self, other: "ExactDecimal") -> "ExactDecimal":
        if not isinstance(other, ExactDecimal):
            return NotImplemented
        if not self.valid:
            return self
        if not other.valid:
            return other

        a_mag, a_exp = self._magnitude, self._exponent
        b_mag, b_exp = other._magnitude, other._exponent
        product = a_mag * b_mag
        dropped = 0
        while product > MAX_MAGNITUDE:
            if a_exp == 0 and b_exp == 0:
                return ExactDecimal.infinite()
            # Give up low-order digits of the operand with more decimals
            if a_exp >= b_exp:
                a_mag //= 10
                a_exp -= 1
            else:
                b_mag //= 10
                b_exp -= 1
            dropped += 1
            product = a_mag * b_mag

        if dropped:
            logger.debug("Truncated %d decimal digit(s) multiplying %s by %s", dropped, self, other)

        return ExactDecimal(product, a_exp + b_exp, self._negative != other._negative)

    def __truediv__(self, other: "ExactDecimal") -> "ExactDecimal":
        return self.divide(other)

    def divide(self, other: "ExactDecimal", precision: int = DEFAULT_FLOAT_PRECISION) -> "ExactDecimal":
        """Divide by ``other``.

        Not exact: the aligned magnitudes are divided as floats and the
        quotient is parsed back with ``from_double`` at ``precision``
        significant digits. Dividing by zero gives INFINITE.
        """
        if not isinstance(other, ExactDecimal):
            return NotImplemented
        if not self.valid:
            return self
        if not other.valid:
            return other
        if other._magnitude == 0:
            return ExactDecimal.infinite()
        if self._magnitude == 0:
            return ExactDecimal()

        a_mag, a_exp = self._magnitude, self._exponent
        b_mag, b_exp = other._magnitude, other._exponent

        # Bring both operands to the same exponent. When scaling up the one
        # with fewer decimals overflows, drop decimals from the other instead.
        if a_exp < b_exp:
            shift = min(b_exp - a_exp, _headroom(a_mag))
            b_mag = _drop_digits(b_mag, b_exp - a_exp - shift)
            if b_mag == 0:
                return ExactDecimal.infinite()
            a_mag *= 10 ** shift
        elif a_exp > b_exp:
            shift = min(a_exp - b_exp, _headroom(b_mag))
            a_mag = _drop_digits(a_mag, a_exp - b_exp - shift)
            b_mag *= 10 ** shift

        quotient = a_mag / b_mag
        if self._negative != other._negative:
            quotient = -quotient
        return ExactDecimal.from_double(quotient, precision)

    # --- Comparison and representation ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExactDecimal):
            return NotImplemented
        if not (self.valid and other.valid):
            return False
        return (self._magnitude, self._exponent, self._negative) == \
            (other._magnitude, other._exponent, other._negative)

    def __hash__(self) -> int:
        if not self.valid:
            return hash(self._error)
        return hash((self._magnitude, self._exponent, self._negative))

    def __str__(self) -> str:
        if self._error is DecimalError.NOT_A_NUMBER:
            return "nan"
        if self._error is DecimalError.INFINITE:
            return "inf"

        digits = str(self._magnitude)
        if self._exponent > _MAX_PLAIN_EXPONENT:
            digits = f"{digits}e-{self._exponent}"
        elif self._exponent:
            digits = digits.rjust(self._exponent + 1, "0")
            digits = f"{digits[:-self._exponent]}.{digits[-self._exponent:]}"
        return f"-{digits}" if self._negative else digits

    def __repr__(self) -> str:
        if not self.valid:
            return f"ExactDecimal(<{self._error.name}>)"
        return f"ExactDecimal('{self}')"


def _headroom(magnitude: int) -> int:
    """Decimal places ``magnitude`` can be shifted left without overflowing."""
    shift = 0
    while magnitude * 10 ** (shift + 1) <= MAX_MAGNITUDE:
        shift += 1
    return shift


def _drop_digits(magnitude: int, count: int) -> int:
    if count <= 0:
        return magnitude
    if count > len(str(magnitude)):
        return 0
    return magnitude // 10 ** count
