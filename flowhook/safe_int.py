"""Safe integer wrapper for book quantities, prices and deltas.

SafeInt makes the arithmetic used by matching fail loudly instead of
producing values the ledger could never hold:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Values outside uint256 / int128 raise on conversion

Usage pattern:
    from flowhook.safe_int import S

    def notional(quantity: int, price: int) -> int:
        return S(quantity).mul_div(price, PRICE_SCALE).value
"""

from __future__ import annotations

from flowhook.constants import INT128_MAX, INT128_MIN
from flowhook.models.types import UINT256_MAX


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce a negative result."""

    pass


class Uint256Overflow(SafeIntError):
    """Value is negative or exceeds the uint256 maximum."""

    pass


class Int128Overflow(SafeIntError):
    """Value does not fit in a signed 128-bit delta leg."""

    pass


class SafeInt:
    """Integer with checked arithmetic.

    Quantities and prices in the book are unsigned; subtraction therefore
    refuses to go below zero. Deltas are signed and are produced with
    unary negation, which is unchecked, then narrowed with to_int128().

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
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

    def __hash__(self) -> int:
        return hash(self._value)

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

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division rounding toward zero for non-negative operands.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __neg__(self) -> SafeInt:
        return SafeInt(-self._value)

    def __abs__(self) -> SafeInt:
        return SafeInt(abs(self._value))

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

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division (rounds up).

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-(-self._value // other_val))

    def mul_div(self, numerator: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """Compute self * numerator // denominator (FullMath.mulDiv)."""
        return (self * numerator) // denominator

    def mul_div_up(self, numerator: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """Compute ceil(self * numerator / denominator) (FullMath.mulDivRoundingUp)."""
        return (self * numerator).ceiling_div(denominator)

    def min(self, other: SafeInt | int) -> SafeInt:
        """Return minimum of self and other."""
        return SafeInt(min(self._value, _extract_value(other)))

    def to_uint256(self) -> int:
        """Convert to int, validating uint256 bounds.

        Raises:
            Uint256Overflow: If value is negative or exceeds 2^256-1
        """
        if self._value < 0:
            raise Uint256Overflow(f"Negative value cannot be uint256: {self._value}")
        if self._value > UINT256_MAX:
            raise Uint256Overflow(f"Value exceeds uint256 max: {self._value}")
        return self._value

    def to_int128(self) -> int:
        """Convert to int, validating it fits one leg of a packed delta.

        Raises:
            Int128Overflow: If value is outside [-2^127, 2^127-1]
        """
        if not INT128_MIN <= self._value <= INT128_MAX:
            raise Int128Overflow(f"Value does not fit int128: {self._value}")
        return self._value

    @classmethod
    def zero(cls) -> SafeInt:
        """Create a SafeInt with value 0."""
        return cls(0)


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
