"""Reverse-mode automatic differentiation over scalars and score pairs."""

from __future__ import annotations

import math
import threading
from typing import Callable, Optional, Union

from .f128 import F128

Number = Union[int, float]
Node = Union["Value", "Pair"]

_local = threading.local()


def _is_number(x: object) -> bool:
    return isinstance(x, (int, float))


def _div(a: float, b: float) -> float:
    """IEEE division: dividing by zero yields an infinity or NaN instead of raising."""
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _log(x: float) -> float:
    if x == 0:
        return -math.inf
    if x < 0 or math.isnan(x):
        return math.nan
    return math.log(x)


def _pow(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return math.inf
    except ValueError:
        if base == 0:
            return math.inf
        return math.nan


class Tape:
    """Per-thread record of every node created, in creation order."""

    def __init__(self) -> None:
        self.nodes: list[Node] = []

    @classmethod
    def get(cls) -> Tape:
        """The tape of the current thread."""
        tape = getattr(_local, "tape", None)
        if tape is None:
            tape = cls()
            _local.tape = tape
        return tape

    def register(self, node: Node) -> None:
        self.nodes.append(node)

    def clear(self) -> None:
        self.nodes.clear()

    def __len__(self) -> int:
        return len(self.nodes)


class Value:
    """A scalar with a gradient and a rule to push the gradient to its inputs."""

    __slots__ = ("value", "gradient", "_backward_fn")

    def __init__(self, data: float) -> None:
        self.value = float(data)
        self.gradient = 0.0
        self._backward_fn: Optional[Callable[[Value], None]] = None

    @classmethod
    def create(cls, data: float) -> Value:
        """Make a value and record it on the current tape."""
        node = cls(data)
        Tape.get().register(node)
        return node

    @classmethod
    def _node(cls, data: float, backward: Callable[[Value], None]) -> Value:
        node = cls.create(data)
        node._backward_fn = backward
        return node

    @classmethod
    def sum(cls, inputs: list[Value]) -> Value:
        """Compensated sum of many values as a single node."""
        if not inputs:
            return cls.create(0.0)
        total = 0.0
        compensation = 0.0
        for v in inputs:
            y = v.value - compensation
            t = total + y
            compensation = (t - total) - y
            total = t
        items = list(inputs)

        def backward(out: Value) -> None:
            for v in items:
                v.gradient += out.gradient

        return cls._node(total, backward)

    def exp(self) -> Value:
        def backward(out: Value) -> None:
            self.gradient += out.value * out.gradient

        return Value._node(_exp(self.value), backward)

    def log(self) -> Value:
        def backward(out: Value) -> None:
            self.gradient += _div(1.0, self.value) * out.gradient

        return Value._node(_log(self.value), backward)

    def sigmoid(self) -> Value:
        def backward(out: Value) -> None:
            self.gradient += out.value * (1 - out.value) * out.gradient

        return Value._node(_div(1.0, 1.0 + _exp(-self.value)), backward)

    def pow(self, exponent: Union[Value, Number]) -> Value:
        if isinstance(exponent, Value):
            exp_node = exponent

            def backward(out: Value) -> None:
                self.gradient += (
                    exp_node.value * _pow(self.value, exp_node.value - 1) * out.gradient
                )
                exp_node.gradient += out.value * _log(self.value) * out.gradient

            return Value._node(_pow(self.value, exp_node.value), backward)

        e = float(exponent)

        def backward_const(out: Value) -> None:
            self.gradient += e * _pow(self.value, e - 1) * out.gradient

        return Value._node(_pow(self.value, e), backward_const)

    def add_gradient(self, amount: float) -> None:
        self.gradient += amount

    def zero_grad(self) -> None:
        self.gradient = 0.0

    def backward(self) -> None:
        """Push this node's gradient into its inputs."""
        if self._backward_fn is not None:
            self._backward_fn(self)

    def __neg__(self) -> Value:
        def backward(out: Value) -> None:
            self.gradient -= out.gradient

        return Value._node(-self.value, backward)

    def __add__(self, other: Union[Value, Number]) -> Value:
        if isinstance(other, Value):
            def backward(out: Value) -> None:
                self.gradient += out.gradient
                other.gradient += out.gradient

            return Value._node(self.value + other.value, backward)
        if _is_number(other):
            def backward_const(out: Value) -> None:
                self.gradient += out.gradient

            return Value._node(self.value + other, backward_const)
        return NotImplemented

    def __radd__(self, other: Number) -> Value:
        if not _is_number(other):
            return NotImplemented
        return self + other

    def __sub__(self, other: Union[Value, Number]) -> Value:
        if isinstance(other, Value):
            def backward(out: Value) -> None:
                self.gradient += out.gradient
                other.gradient -= out.gradient

            return Value._node(self.value - other.value, backward)
        if _is_number(other):
            def backward_const(out: Value) -> None:
                self.gradient += out.gradient

            return Value._node(self.value - other, backward_const)
        return NotImplemented

    def __rsub__(self, other: Number) -> Value:
        if not _is_number(other):
            return NotImplemented

        def backward(out: Value) -> None:
            self.gradient -= out.gradient

        return Value._node(other - self.value, backward)

    def __mul__(self, other: Union[Value, Number]) -> Value:
        if isinstance(other, Value):
            def backward(out: Value) -> None:
                self.gradient += other.value * out.gradient
                other.gradient += self.value * out.gradient

            return Value._node(self.value * other.value, backward)
        if _is_number(other):
            factor = float(other)

            def backward_const(out: Value) -> None:
                self.gradient += factor * out.gradient

            return Value._node(self.value * factor, backward_const)
        return NotImplemented

    def __rmul__(self, other: Number) -> Value:
        if not _is_number(other):
            return NotImplemented
        return self * other

    def __truediv__(self, other: Union[Value, Number]) -> Value:
        if isinstance(other, Value):
            def backward(out: Value) -> None:
                self.gradient += _div(1.0, other.value) * out.gradient
                other.gradient += (
                    _div(-self.value, other.value * other.value) * out.gradient
                )

            return Value._node(_div(self.value, other.value), backward)
        if _is_number(other):
            divisor = float(other)

            def backward_const(out: Value) -> None:
                self.gradient += _div(1.0, divisor) * out.gradient

            return Value._node(_div(self.value, divisor), backward_const)
        return NotImplemented

    def __rtruediv__(self, other: Number) -> Value:
        if not _is_number(other):
            return NotImplemented
        numerator = float(other)

        def backward(out: Value) -> None:
            self.gradient += _div(-numerator, self.value * self.value) * out.gradient

        return Value._node(_div(numerator, self.value), backward)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: Value) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: Value) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: Value) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: Value) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.value >= other.value

    def __repr__(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return f"Value(data={self.value:g}, grad={self.gradient:g})"


class Pair:
    """A (midgame, endgame) pair of differentiable values."""

    __slots__ = ("values", "gradients", "constant", "_backward_fn")

    def __init__(self, values: F128, constant: bool = False) -> None:
        self.values = values
        self.gradients = F128.zero()
        self.constant = constant
        self._backward_fn: Optional[Callable[[Pair], None]] = None

    @classmethod
    def create(cls, first: Union[F128, float], second: Optional[float] = None) -> Pair:
        """Make a constant pair and record it on the current tape."""
        values = first if isinstance(first, F128) else F128(float(first), float(second))
        node = cls(values, True)
        Tape.get().register(node)
        return node

    @classmethod
    def _node(cls, values: F128, backward: Callable[[Pair], None]) -> Pair:
        node = cls.create(values)
        node._backward_fn = backward
        return node

    def first(self) -> float:
        return self.values.first

    def second(self) -> float:
        return self.values.second

    def grad_first(self) -> float:
        return self.gradients.first

    def grad_second(self) -> float:
        return self.gradients.second

    def zero_grad(self) -> None:
        self.gradients = F128.zero()

    def set_values(self, first: Union[F128, float], second: Optional[float] = None) -> None:
        self.values = first if isinstance(first, F128) else F128(float(first), float(second))

    def backward(self) -> None:
        """Push this node's gradients into its inputs."""
        if self._backward_fn is not None:
            self._backward_fn(self)

    def phase(self, alpha: float, max_alpha: int) -> Value:
        """Interpolate: alpha == max_alpha gives first, alpha == 0 gives second."""
        weight = alpha / max_alpha

        def backward(out: Value) -> None:
            self.gradients = self.gradients + F128(
                weight * out.gradient, (1.0 - weight) * out.gradient
            )

        result = weight * self.first() + (1.0 - weight) * self.second()
        return Value._node(result, backward)

    def __add__(self, other: Pair) -> Pair:
        if not isinstance(other, Pair):
            return NotImplemented

        def backward(out: Pair) -> None:
            self.gradients = self.gradients + out.gradients
            other.gradients = other.gradients + out.gradients

        return Pair._node(self.values + other.values, backward)

    def __sub__(self, other: Pair) -> Pair:
        if not isinstance(other, Pair):
            return NotImplemented

        def backward(out: Pair) -> None:
            self.gradients = self.gradients + out.gradients
            other.gradients = other.gradients - out.gradients

        return Pair._node(self.values - other.values, backward)

    def __mul__(self, other: Union[Value, Number]) -> Pair:
        if isinstance(other, Value):
            def backward(out: Pair) -> None:
                self.gradients = self.gradients + out.gradients.mul_scalar(other.value)
                contribution = self.values * out.gradients
                other.add_gradient(contribution.first + contribution.second)

            return Pair._node(self.values.mul_scalar(other.value), backward)
        if _is_number(other):
            scalar = float(other)

            def backward_const(out: Pair) -> None:
                self.gradients = self.gradients + out.gradients.mul_scalar(scalar)

            return Pair._node(self.values.mul_scalar(scalar), backward_const)
        return NotImplemented

    def __rmul__(self, other: Union[Value, Number]) -> Pair:
        return self.__mul__(other)

    def __truediv__(self, other: Union[Value, Number]) -> Pair:
        if isinstance(other, Value):
            def backward(out: Pair) -> None:
                v = other.value
                self.gradients = self.gradients + out.gradients.div_scalar(v)
                numerator = self.values * out.gradients
                other.add_gradient(_div(-(numerator.first + numerator.second), v * v))

            return Pair._node(self.values.div_scalar(other.value), backward)
        if _is_number(other):
            scalar = float(other)

            def backward_const(out: Pair) -> None:
                self.gradients = self.gradients + out.gradients.div_scalar(scalar)

            return Pair._node(self.values.div_scalar(scalar), backward_const)
        return NotImplemented

    def __rtruediv__(self, other: Union[Value, Number]) -> Pair:
        if isinstance(other, Value):
            def backward(out: Pair) -> None:
                v = other.value
                squared = self.values * self.values
                self.gradients = self.gradients + (-squared.scalar_div(v)) * out.gradients
                contribution = out.gradients / self.values
                other.add_gradient(contribution.first + contribution.second)

            return Pair._node(self.values.scalar_div(other.value), backward)
        if _is_number(other):
            scalar = float(other)

            def backward_const(out: Pair) -> None:
                squared = self.values * self.values
                self.gradients = self.gradients + (-squared.scalar_div(scalar)) * out.gradients

            return Pair._node(self.values.scalar_div(scalar), backward_const)
        return NotImplemented

    def __neg__(self) -> Pair:
        def backward(out: Pair) -> None:
            self.gradients = self.gradients - out.gradients

        return Pair._node(-self.values, backward)

    def __repr__(self) -> str:
        return str(self)

    def __str__(self) -> str:
        prefix = "CS" if self.constant else "S"
        return f"{prefix}({int(self.first() + 0.5)}, {int(self.second() + 0.5)})"