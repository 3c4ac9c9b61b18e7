"""Safe integer wrapper for pool arithmetic.

Reserves, share supplies and swap amounts are plain non-negative integers.
SafeInt makes the arithmetic on them fail loudly instead of silently
producing an invalid result:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow

Both errors are ArithmeticFault, so they surface through the pool's error
taxonomy unchanged.

Usage pattern:
    from cpamm.safe_int import S

    def shares_for(amount: int, supply: int, reserve: int) -> int:
        # Wrap at entry
        sa, ss, sr = S(amount), S(supply), S(reserve)

        # Natural arithmetic - floors, raises on a zero divisor
        result = (sa * ss) // sr

        # Unwrap at exit
        return result.value
"""

from __future__ import annotations

from cpamm.errors import ArithmeticFault


class DivisionByZero(ArithmeticFault):
    """Division by zero."""

    code = "division_by_zero"


class Underflow(ArithmeticFault):
    """Subtraction would produce a negative result."""

    code = "underflow"


class SafeInt:
    """Integer with safe arithmetic operations.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt (bools are rejected too)
        """
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other + self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        result = other - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other} - {self._value} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, rounding toward negative infinity.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __rfloordiv__(self, other: int) -> SafeInt:
        if self._value == 0:
            raise DivisionByZero(f"Division by zero: {other} // 0")
        return SafeInt(other // self._value)

    def __truediv__(self, other: object) -> SafeInt:
        raise TypeError("SafeInt does not support true division; use // instead")

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
