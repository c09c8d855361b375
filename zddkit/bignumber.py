"""Arbitrary-size unsigned counters used when counting diagram solutions."""

from __future__ import annotations

_WORD_BITS = 63


def _as_int(value: object) -> int:
    if isinstance(value, (BigNumber, FixedBigNumber)):
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise ValueError("BigNumber values must be non-negative")
        return value
    raise TypeError(f"unsupported operand: {value!r}")


class BigNumber:
    """Unsigned integer of unbounded size, stored in 63-bit words.

    Mutating operations return the number of words the result occupies.
    """

    __hash__ = None  # mutable

    def __init__(self, value: int | BigNumber = 0) -> None:
        self._value = _as_int(value)

    def size(self) -> int:
        """Number of 63-bit words needed to hold the value (at least one)."""
        return max(1, (self._value.bit_length() + _WORD_BITS - 1) // _WORD_BITS)

    def store(self, other: int | BigNumber) -> int:
        """Replace the value and return the new word count."""
        self._value = _as_int(other)
        return self.size()

    def add(self, other: int | BigNumber) -> int:
        """Add ``other`` in place and return the new word count."""
        self._value += _as_int(other)
        return self.size()

    def divide(self, n: int) -> int:
        """Divide in place by ``n`` and return the remainder."""
        if n <= 0:
            raise ValueError("divisor must be positive")
        self._value, remainder = divmod(self._value, n)
        return remainder

    def shift_left(self, k: int) -> int:
        """Multiply in place by ``2**k`` and return the new word count."""
        if k < 0:
            raise ValueError("shift must be non-negative")
        self._value <<= k
        return self.size()

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"BigNumber({self._value})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BigNumber):
            return self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == other
        return NotImplemented


class FixedBigNumber:
    """Unsigned integer limited to ``size`` 32-bit words."""

    __hash__ = None  # mutable

    def __init__(self, size: int, value: int = 0) -> None:
        if size < 1:
            raise ValueError("size must be at least one word")
        self._size = size
        self._limit = 1 << (32 * size)
        value = _as_int(value)
        if value >= self._limit:
            raise OverflowError("FixedBigNumber overflow!")
        self._value = value

    @property
    def words(self) -> int:
        """Number of 32-bit words available."""
        return self._size

    def _operand(self, other: object) -> int:
        if isinstance(other, FixedBigNumber) and other._size != self._size:
            raise ValueError("FixedBigNumber sizes differ")
        return _as_int(other)

    def __iadd__(self, other: int | FixedBigNumber) -> FixedBigNumber:
        total = self._value + self._operand(other)
        if total >= self._limit:
            raise OverflowError("FixedBigNumber overflow!")
        self._value = total
        return self

    def __add__(self, other: int | FixedBigNumber) -> FixedBigNumber:
        result = FixedBigNumber(self._size, self._value)
        result += other
        return result

    def divide(self, n: int) -> int:
        """Divide in place by ``n`` and return the remainder."""
        if n <= 0:
            raise ValueError("divisor must be positive")
        self._value, remainder = divmod(self._value, n)
        return remainder

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"FixedBigNumber({self._size}, {self._value})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FixedBigNumber):
            return self._size == other._size and self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == other
        return NotImplemented