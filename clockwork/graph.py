"""Parameter registry, parameter snapshots and the per-thread computation graph."""

from __future__ import annotations

import threading
import weakref
from dataclasses import dataclass, field
from typing import Optional, Union

from .f128 import F128
from .value import Pair, Tape, Value


@dataclass(frozen=True)
class ParameterCountInfo:
    """How many scalar and pair parameters are registered."""

    parameter_count: int
    pair_parameter_count: int


@dataclass
class Parameters:
    """A snapshot of every parameter (or every gradient) in registration order."""

    parameters: list[float] = field(default_factory=list)
    pair_parameters: list[F128] = field(default_factory=list)

    @classmethod
    def zeros(cls, counts: ParameterCountInfo) -> Parameters:
        return cls(
            [0.0] * counts.parameter_count,
            [F128.zero()] * counts.pair_parameter_count,
        )

    def _check_shape(self, other: Parameters) -> None:
        if len(other.parameters) != len(self.parameters) or len(other.pair_parameters) != len(
            self.pair_parameters
        ):
            raise ValueError("parameter sets differ in size")

    def accumulate(self, other: Parameters) -> None:
        """Add other into self, element by element."""
        self._check_shape(other)
        self.parameters[:] = [a + b for a, b in zip(self.parameters, other.parameters)]
        self.pair_parameters[:] = [
            a + b for a, b in zip(self.pair_parameters, other.pair_parameters)
        ]

    def weighted_accumulate(self, weight: float, other: Parameters) -> None:
        """Add weight * other into self, element by element."""
        self._check_shape(other)
        self.parameters[:] = [a + weight * b for a, b in zip(self.parameters, other.parameters)]
        w = F128.broadcast(weight)
        self.pair_parameters[:] = [
            a.madd(w, b) for a, b in zip(self.pair_parameters, other.pair_parameters)
        ]


class Globals:
    """Registry of parameter placeholders; locked once it has been read."""

    _default: Optional[Globals] = None
    _default_lock = threading.Lock()

    def __init__(self) -> None:
        self._locked = False
        self._mutex = threading.Lock()
        self._parameters: list[ValuePlaceholder] = []
        self._pair_parameters: list[PairPlaceholder] = []

    @classmethod
    def get(cls) -> Globals:
        """The process-wide default registry."""
        with cls._default_lock:
            if cls._default is None:
                cls._default = cls()
            return cls._default

    def register_param(self, param: Union[ValuePlaceholder, PairPlaceholder]) -> int:
        """Record a placeholder and return its index among those of its kind."""
        with self._mutex:
            if self._locked:
                raise RuntimeError(
                    "Attempted to register new global parameter after Globals has been locked"
                )
            if isinstance(param, PairPlaceholder):
                target = self._pair_parameters
            elif isinstance(param, ValuePlaceholder):
                target = self._parameters
            else:
                raise TypeError(f"cannot register {type(param).__name__}")
            target.append(param)
            return len(target) - 1

    def _lock(self) -> None:
        with self._mutex:
            self._locked = True

    def get_parameters(self) -> list[ValuePlaceholder]:
        self._lock()
        return list(self._parameters)

    def get_pair_parameters(self) -> list[PairPlaceholder]:
        self._lock()
        return list(self._pair_parameters)

    def get_parameter_counts(self) -> ParameterCountInfo:
        self._lock()
        return ParameterCountInfo(len(self._parameters), len(self._pair_parameters))

    def is_parameter_constant(self, index: int) -> bool:
        return self._parameters[index].constant

    def is_pair_parameter_constant(self, index: int) -> bool:
        return self._pair_parameters[index].constant


class ValuePlaceholder:
    """A registered scalar parameter; resolves to a Value of a graph."""

    def __init__(
        self, default_value: float, constant: bool = False, registry: Optional[Globals] = None
    ) -> None:
        self._registry = registry if registry is not None else Globals.get()
        self.default_value = float(default_value)
        self.constant = constant
        self.index = self._registry.register_param(self)

    @classmethod
    def create_tunable(cls, a: float) -> ValuePlaceholder:
        return cls(a, False)

    @classmethod
    def create(cls, a: float) -> ValuePlaceholder:
        return cls(a, True)

    def resolve(self, graph: Optional[Graph] = None) -> Value:
        """The parameter node in graph, or in this thread's graph for the registry."""
        if graph is None:
            graph = Graph._for_registry(self._registry)
        return graph.get_parameter(self.index)

    def __neg__(self) -> Value:
        return -self.resolve()

    def __add__(self, other: ValuePlaceholder) -> Value:
        if not isinstance(other, ValuePlaceholder):
            return NotImplemented
        return self.resolve() + other.resolve()

    def __sub__(self, other: ValuePlaceholder) -> Value:
        if not isinstance(other, ValuePlaceholder):
            return NotImplemented
        return self.resolve() - other.resolve()

    def __mul__(self, factor: int) -> Value:
        return self.resolve() * factor

    def __truediv__(self, divisor: int) -> Value:
        return self.resolve() / divisor

    def __repr__(self) -> str:
        return f"ValuePlaceholder({self.default_value:g}, constant={self.constant})"


class PairPlaceholder:
    """A registered (midgame, endgame) parameter; resolves to a Pair of a graph."""

    def __init__(
        self, default_value: F128, constant: bool = False, registry: Optional[Globals] = None
    ) -> None:
        self._registry = registry if registry is not None else Globals.get()
        self.default_value = default_value
        self.constant = constant
        self.index = self._registry.register_param(self)

    @classmethod
    def create_tunable(cls, a: float, b: float) -> PairPlaceholder:
        return cls(F128(float(a), float(b)), False)

    @classmethod
    def create(cls, a: float, b: float) -> PairPlaceholder:
        return cls(F128(float(a), float(b)), True)

    def resolve(self, graph: Optional[Graph] = None) -> Pair:
        """The parameter node in graph, or in this thread's graph for the registry."""
        if graph is None:
            graph = Graph._for_registry(self._registry)
        return graph.get_pair_parameter(self.index)

    def __neg__(self) -> Pair:
        return -self.resolve()

    def __add__(self, other: PairPlaceholder) -> Pair:
        if not isinstance(other, PairPlaceholder):
            return NotImplemented
        return self.resolve() + other.resolve()

    def __sub__(self, other: PairPlaceholder) -> Pair:
        if not isinstance(other, PairPlaceholder):
            return NotImplemented
        return self.resolve() - other.resolve()

    def __mul__(self, factor: int) -> Pair:
        return self.resolve() * factor

    def __truediv__(self, divisor: int) -> Pair:
        return self.resolve() / divisor

    def __repr__(self) -> str:
        prefix = "CS" if self.constant else "S"
        return f"{prefix}{self.default_value}"


class Graph:
    """Parameter nodes built from a registry plus the tape of the current thread."""

    _local = threading.local()

    def __init__(self, registry: Optional[Globals] = None) -> None:
        registry = registry if registry is not None else Globals.get()
        self.tape = Tape.get()
        self.parameters: list[Value] = [
            Value(placeholder.default_value) for placeholder in registry.get_parameters()
        ]
        self.pair_parameters: list[Pair] = [
            Pair(placeholder.default_value, placeholder.constant)
            for placeholder in registry.get_pair_parameters()
        ]

    @classmethod
    def get(cls) -> Graph:
        """This thread's graph for the default registry."""
        return cls._for_registry(Globals.get())

    @classmethod
    def _for_registry(cls, registry: Globals) -> Graph:
        graphs = getattr(cls._local, "graphs", None)
        if graphs is None:
            graphs = weakref.WeakKeyDictionary()
            cls._local.graphs = graphs
        graph = graphs.get(registry)
        if graph is None:
            graph = cls(registry)
            graphs[registry] = graph
        return graph

    def register_value(self, node: Union[Value, Pair]) -> None:
        self.tape.register(node)

    def copy_parameter_values(self, source: Parameters) -> None:
        if len(source.parameters) != len(self.parameters) or len(source.pair_parameters) != len(
            self.pair_parameters
        ):
            raise RuntimeError("Graph parameters count have desynced")
        for param, value in zip(self.parameters, source.parameters):
            param.value = float(value)
        for pair, values in zip(self.pair_parameters, source.pair_parameters):
            pair.set_values(values)

    def get_all_parameter_values(self) -> Parameters:
        return Parameters(
            [param.value for param in self.parameters],
            [pair.values for pair in self.pair_parameters],
        )

    def get_all_parameter_gradients(self) -> Parameters:
        return Parameters(
            [param.gradient for param in self.parameters],
            [pair.gradients for pair in self.pair_parameters],
        )

    def backward(self) -> None:
        """Seed the last recorded node with gradient 1 and run the tape in reverse."""
        nodes = self.tape.nodes
        if not nodes:
            return
        last = nodes[-1]
        if not isinstance(last, Value):
            raise TypeError("the last recorded node must be a scalar Value")
        last.gradient = 1.0
        for node in reversed(nodes):
            node.backward()

    def cleanup(self) -> None:
        """Zero parameter gradients and forget every recorded node."""
        for param in self.parameters:
            param.zero_grad()
        for pair in self.pair_parameters:
            pair.zero_grad()
        self.tape.clear()

    def init_zeros(self) -> None:
        for param in self.parameters:
            param.value = 0.0
        for pair in self.pair_parameters:
            pair.set_values(0.0, 0.0)
        self.cleanup()

    def get_parameter(self, index: int) -> Value:
        return self.parameters[index]

    def get_pair_parameter(self, index: int) -> Pair:
        return self.pair_parameters[index]