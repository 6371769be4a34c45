"""A pair of doubles with element-wise arithmetic."""

from __future__ import annotations

import math
from dataclasses import dataclass


def _div(a: float, b: float) -> float:
    """IEEE division: dividing by zero yields an infinity or NaN instead of raising."""
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _sqrt(x: float) -> float:
    return math.sqrt(x) if x >= 0 else math.nan


@dataclass(frozen=True)
class F128:
    """Two doubles, first and second, combined lane by lane."""

    first: float = 0.0
    second: float = 0.0

    @classmethod
    def broadcast(cls, x: float) -> F128:
        return cls(x, x)

    @classmethod
    def zero(cls) -> F128:
        return cls(0.0, 0.0)

    def __add__(self, other: F128) -> F128:
        if not isinstance(other, F128):
            return NotImplemented
        return F128(self.first + other.first, self.second + other.second)

    def __sub__(self, other: F128) -> F128:
        if not isinstance(other, F128):
            return NotImplemented
        return F128(self.first - other.first, self.second - other.second)

    def __mul__(self, other: F128) -> F128:
        if not isinstance(other, F128):
            return NotImplemented
        return F128(self.first * other.first, self.second * other.second)

    def __truediv__(self, other: F128) -> F128:
        if not isinstance(other, F128):
            return NotImplemented
        return F128(_div(self.first, other.first), _div(self.second, other.second))

    def __neg__(self) -> F128:
        return F128(0.0 - self.first, 0.0 - self.second)

    def add_scalar(self, s: float) -> F128:
        return self + F128.broadcast(s)

    def sub_scalar(self, s: float) -> F128:
        return self - F128.broadcast(s)

    def mul_scalar(self, s: float) -> F128:
        return self * F128.broadcast(s)

    def div_scalar(self, s: float) -> F128:
        return self / F128.broadcast(s)

    def scalar_div(self, s: float) -> F128:
        """s divided by each lane."""
        return F128(_div(s, self.first), _div(s, self.second))

    def sqrt(self) -> F128:
        return F128(_sqrt(self.first), _sqrt(self.second))

    def madd(self, b: F128, c: F128) -> F128:
        """self + b * c."""
        return self + b * c

    def __str__(self) -> str:
        return f"({self.first:g}, {self.second:g})"