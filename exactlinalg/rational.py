#!/usr/bin/env python3
#
# Copyright 2022 Max Planck Insitute Magdeburg
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
#
"""Exact rational scalar (Rational)

Rational numbers with arbitrary precision numerator and denominator. Python's
fractions.Fraction is used as the underlying implementation: it keeps every
value in lowest terms with a positive denominator, and Python ints never
overflow. Rational wraps it with named arithmetic methods, typed errors and
exact conversions from and to integers, floats, decimal text and transport
records.

Decimal text uses parentheses for the repeating part of a recurring decimal,
e.g. 1/3 is written "0.(3)" and 1/6 is "0.1(6)". Both directions are exact.
"""

import math
import re
from fractions import Fraction
from typing import NamedTuple, Optional, Union
from exactlinalg.errors import DivisionByZero, PrecisionLoss
from exactlinalg.names import *

_DECIMAL_RE = re.compile(r'^\s*(?P<sign>[+-])?(?P<int>\d*)(?:\.(?P<frac>\d*)(?:\((?P<rep>\d+)\))?)?'
                         r'(?:[eE](?P<exp>[+-]?\d+))?\s*$')
_FRACTION_RE = re.compile(r'^\s*(?P<num>[+-]?\d+)\s*/\s*(?P<den>[+-]?\d+)\s*$')


class DecimalText(NamedTuple):
    """Decimal rendering of a Rational with a fixed number of places

    Attributes:
        text (str): Digits truncated toward zero.
        exact (bool): False if non-zero digits were dropped.
    """
    text: str
    exact: bool


def _to_fraction(value) -> Fraction:
    """Promote int, Fraction or Rational to Fraction. Floats and strings are rejected."""
    if isinstance(value, Rational):
        return value._fraction
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    raise TypeError(f"Cannot use {type(value).__name__} as an exact rational operand")


class Rational:
    """Exact rational number in lowest terms

    Args:
        numerator (int, Fraction or Rational):
            Numerator, or the complete value if no denominator is given.

        denominator (optional (int, Fraction or Rational)):
            Denominator. Must not be zero.

    Raises:
        DivisionByZero: If the denominator is zero.
        TypeError: For floats, strings and other non-exact inputs. Use
            from_float, from_decimal or value_of for these.

    Example:
        >>> Rational(6, -4)
        Rational(-3, 2)
    """
    __slots__ = ('_fraction',)

    def __init__(self, numerator: Union[int, Fraction, 'Rational'] = 0, denominator=None):
        num = _to_fraction(numerator)
        if denominator is None:
            self._fraction = num
            return
        den = _to_fraction(denominator)
        if den == 0:
            raise DivisionByZero(f"Zero denominator in {numerator}/{denominator}")
        self._fraction = num / den

    @classmethod
    def _wrap(cls, fraction: Fraction) -> 'Rational':
        obj = object.__new__(cls)
        obj._fraction = fraction
        return obj

    # Construction
    @staticmethod
    def from_int(value: int, bits: Optional[int] = None) -> 'Rational':
        """Exact conversion from an integer, optionally checked against a signed bit width"""
        if not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        _check_width(value, bits)
        return Rational._wrap(Fraction(value))

    @staticmethod
    def from_float(value: float) -> 'Rational':
        """Exact value of a binary float, e.g. 0.1 becomes 3602879701896397/36028797018963968

        Raises:
            PrecisionLoss: For nan and infinities.
        """
        if math.isnan(value) or math.isinf(value):
            raise PrecisionLoss(f"{value} has no rational value")
        return Rational._wrap(Fraction(value))

    @staticmethod
    def from_decimal(text: str) -> 'Rational':
        """Parse integer, decimal, fraction or recurring decimal text

        Accepted forms: "-12", "3.25", "-.5", "2.5E+2", "7/3", "0.(3)", "1.2(34)".

        Raises:
            PrecisionLoss: If the text is not one of the accepted forms.
            DivisionByZero: For fraction text with a zero denominator.
        """
        if not isinstance(text, str):
            raise TypeError(f"Expected str, got {type(text).__name__}")
        match = _FRACTION_RE.match(text)
        if match:
            return Rational(int(match.group('num')), int(match.group('den')))
        match = _DECIMAL_RE.match(text)
        if match is None or not (match.group('int') or match.group('frac') or match.group('rep')):
            raise PrecisionLoss(f"Cannot read {text!r} as an exact number")
        int_digits = match.group('int') or '0'
        frac_digits = match.group('frac') or ''
        value = Fraction(int(int_digits + frac_digits), 10**len(frac_digits))
        if match.group('rep'):
            rep = match.group('rep')
            value += Fraction(int(rep), 10**len(frac_digits) * (10**len(rep) - 1))
        if match.group('exp'):
            value *= Fraction(10)**int(match.group('exp'))
        if match.group('sign') == '-':
            value = -value
        return Rational._wrap(value)

    @staticmethod
    def from_record(record: dict) -> 'Rational':
        """Inverse of to_record"""
        try:
            num = int(record[NUM])
            den = int(record[DEN])
        except (KeyError, TypeError, ValueError) as exc:
            raise PrecisionLoss(f"Malformed rational record {record!r}") from exc
        return Rational(num, den)

    @staticmethod
    def value_of(value) -> 'Rational':
        """Create a Rational from a Rational, int, Fraction, str or float"""
        if isinstance(value, Rational):
            return value
        if isinstance(value, str):
            return Rational.from_decimal(value)
        if isinstance(value, float):
            return Rational.from_float(value)
        if isinstance(value, (int, Fraction)):
            return Rational._wrap(Fraction(value))
        if hasattr(value, 'numerator') and hasattr(value, 'denominator'):
            # numpy integers, sympy.Rational and other exact number types
            return Rational(int(value.numerator), int(value.denominator))
        if hasattr(value, 'is_integer') and hasattr(value, '__float__'):
            # numpy floats
            return Rational.from_float(float(value))
        raise TypeError(f"Cannot convert {type(value).__name__} to Rational")

    # Accessors
    @property
    def numerator(self) -> int:
        return self._fraction.numerator

    @property
    def denominator(self) -> int:
        return self._fraction.denominator

    def to_fraction(self) -> Fraction:
        return self._fraction

    # Arithmetic
    def add(self, other) -> 'Rational':
        """Sum of this and other"""
        return Rational._wrap(self._fraction + _to_fraction(other))

    def subtract(self, other) -> 'Rational':
        """Difference of this and other"""
        return Rational._wrap(self._fraction - _to_fraction(other))

    def multiply(self, other) -> 'Rational':
        """Product of this and other"""
        return Rational._wrap(self._fraction * _to_fraction(other))

    def divide(self, other) -> 'Rational':
        """Quotient of this and other

        Raises:
            DivisionByZero: If other is zero.
        """
        divisor = _to_fraction(other)
        if divisor == 0:
            raise DivisionByZero(f"Division of {self} by zero")
        return Rational._wrap(self._fraction / divisor)

    def negate(self) -> 'Rational':
        return Rational._wrap(-self._fraction)

    def abs(self) -> 'Rational':
        return Rational._wrap(abs(self._fraction))

    def invert(self) -> 'Rational':
        """Multiplicative inverse (1/this)"""
        if self._fraction == 0:
            raise DivisionByZero("Zero has no multiplicative inverse")
        return Rational._wrap(1 / self._fraction)

    def pow(self, exponent: int) -> 'Rational':
        """This raised to an integer power"""
        if not isinstance(exponent, int):
            raise TypeError("Exponent must be an integer")
        if exponent < 0 and self._fraction == 0:
            raise DivisionByZero("Zero raised to a negative power")
        return Rational._wrap(self._fraction**exponent)

    def floor(self) -> int:
        return math.floor(self._fraction)

    def ceil(self) -> int:
        return math.ceil(self._fraction)

    # Queries
    def signum(self) -> int:
        """Return sign: -1, 0, or 1"""
        if self._fraction < 0:
            return -1
        elif self._fraction > 0:
            return 1
        return 0

    def is_zero(self) -> bool:
        return self._fraction == 0

    def is_one(self) -> bool:
        return self._fraction == 1

    def is_negative(self) -> bool:
        return self._fraction < 0

    def is_integer(self) -> bool:
        return self._fraction.denominator == 1

    def is_finite_decimal(self) -> bool:
        """True if the decimal expansion terminates (denominator of the form 2^a 5^b)"""
        den = self._fraction.denominator
        for p in (2, 5):
            while den % p == 0:
                den //= p
        return den == 1

    def compare_to(self, other) -> int:
        """Compare to another value: -1 if less, 0 if equal, 1 if greater"""
        other = _to_fraction(other)
        if self._fraction < other:
            return -1
        elif self._fraction > other:
            return 1
        return 0

    # Conversion
    def to_int(self, bits: Optional[int] = None) -> int:
        """Exact conversion to int, optionally checked against a signed bit width

        Raises:
            PrecisionLoss: If the value is not an integer or does not fit.
        """
        if not self.is_integer():
            raise PrecisionLoss(f"{self} is not an integer")
        _check_width(self.numerator, bits)
        return self.numerator

    def to_decimal(self) -> str:
        """Exact decimal text, the repetend of a recurring decimal in parentheses"""
        num, den = self.numerator, self.denominator
        sign = '-' if num < 0 else ''
        whole, rem = divmod(abs(num), den)
        if rem == 0:
            return sign + str(whole)
        digits = []
        seen = {}
        while rem and rem not in seen:
            seen[rem] = len(digits)
            digit, rem = divmod(rem * 10, den)
            digits.append(str(digit))
        if rem == 0:
            return f"{sign}{whole}.{''.join(digits)}"
        start = seen[rem]
        return f"{sign}{whole}.{''.join(digits[:start])}({''.join(digits[start:])})"

    def to_fixed(self, places: int, strict: bool = False) -> DecimalText:
        """Decimal text with a fixed number of places, truncated toward zero

        Args:
            places (int):
                Number of fractional digits.

            strict (optional (bool)): (Default: False)
                Raise instead of returning an inexact result.

        Returns:
            (DecimalText):
                The text and a flag telling whether it is exact.

        Raises:
            PrecisionLoss: If strict and digits beyond places are non-zero.
        """
        if places < 0:
            raise ValueError("Number of places must be non-negative")
        scaled, rem = divmod(abs(self.numerator) * 10**places, self.denominator)
        exact = rem == 0
        if strict and not exact:
            raise PrecisionLoss(f"{self.to_decimal()} does not fit into {places} decimal places")
        sign = '-' if self.is_negative() else ''
        if places == 0:
            return DecimalText(sign + str(scaled), exact)
        whole, frac = divmod(scaled, 10**places)
        return DecimalText(f"{sign}{whole}.{frac:0{places}d}", exact)

    def to_record(self) -> dict:
        """Numerator/denominator record with decimal-string integers for JSON transport"""
        return {NUM: str(self.numerator), DEN: str(self.denominator)}

    # Python protocol
    def __eq__(self, other) -> bool:
        if isinstance(other, (Rational, Fraction, int)):
            return self._fraction == _to_fraction(other)
        return NotImplemented

    def __lt__(self, other) -> bool:
        if isinstance(other, (Rational, Fraction, int)):
            return self._fraction < _to_fraction(other)
        return NotImplemented

    def __le__(self, other) -> bool:
        if isinstance(other, (Rational, Fraction, int)):
            return self._fraction <= _to_fraction(other)
        return NotImplemented

    def __gt__(self, other) -> bool:
        if isinstance(other, (Rational, Fraction, int)):
            return self._fraction > _to_fraction(other)
        return NotImplemented

    def __ge__(self, other) -> bool:
        if isinstance(other, (Rational, Fraction, int)):
            return self._fraction >= _to_fraction(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._fraction)

    def __bool__(self) -> bool:
        return self._fraction != 0

    def __str__(self) -> str:
        if self._fraction.denominator == 1:
            return str(self._fraction.numerator)
        return f"{self._fraction.numerator}/{self._fraction.denominator}"

    def __repr__(self) -> str:
        return f"Rational({self._fraction.numerator}, {self._fraction.denominator})"

    def __reduce__(self):
        return (Rational, (self.numerator, self.denominator))

    # Operators delegate to the named methods. Only exact scalars are accepted.
    def __add__(self, other):
        if not isinstance(other, (Rational, Fraction, int)):
            return NotImplemented
        return self.add(other)

    __radd__ = __add__

    def __sub__(self, other):
        if not isinstance(other, (Rational, Fraction, int)):
            return NotImplemented
        return self.subtract(other)

    def __rsub__(self, other):
        if not isinstance(other, (Rational, Fraction, int)):
            return NotImplemented
        return Rational.value_of(other).subtract(self)

    def __mul__(self, other):
        if not isinstance(other, (Rational, Fraction, int)):
            return NotImplemented
        return self.multiply(other)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if not isinstance(other, (Rational, Fraction, int)):
            return NotImplemented
        return self.divide(other)

    def __rtruediv__(self, other):
        if not isinstance(other, (Rational, Fraction, int)):
            return NotImplemented
        return Rational.value_of(other).divide(self)

    def __pow__(self, exponent):
        if not isinstance(exponent, int):
            return NotImplemented
        return self.pow(exponent)

    def __neg__(self):
        return self.negate()

    def __abs__(self):
        return self.abs()


def _check_width(value: int, bits: Optional[int]):
    if bits is None:
        return
    if bits < 1:
        raise ValueError("Bit width must be positive")
    if not -(1 << (bits - 1)) <= value < (1 << (bits - 1)):
        raise PrecisionLoss(f"{value} does not fit into a signed {bits}-bit integer")


# Constants
Rational.ZERO = Rational(0)
Rational.ONE = Rational(1)
Rational.TWO = Rational(2)
Rational.TEN = Rational(10)
