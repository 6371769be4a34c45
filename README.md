# clockwork

Tools for tuning the evaluation parameters of a chess engine. It provides a
small reverse-mode autograd over scalars and (midgame, endgame) pairs, a
registry of tunable parameters, optimizers, and a few helpers.

## Modules

- `clockwork.f128`: `F128` is a frozen pair of floats (`first`, `second`) with
  element-wise `+ - * /`, negation, and the scalar helpers `add_scalar`,
  `sub_scalar`, `mul_scalar`, `div_scalar` and `scalar_div`. It also has
  `sqrt` and `madd` (`self + b * c`). Division by zero gives an infinity or
  NaN instead of raising.
- `clockwork.value`: autograd nodes.
  - `Tape` keeps the nodes created on the current thread, in creation order.
    `Tape.get()` returns it; it also has `register(node)` and `clear()`.
  - `Value` is a scalar node. `Value.create(x)` records a node on the tape.
    A node supports arithmetic with other values and with plain numbers,
    `exp`, `log`, `sigmoid` and `pow`, and can be compared. `Value.sum(inputs)`
    is a compensated sum that produces a single node.
  - `Pair` is a two-component node. It supports `+`, `-` and negation with
    other pairs, and `*` and `/` with numbers or `Value`s on either side.
    `phase(alpha, max_alpha)` interpolates to a `Value`. When `alpha` equals
    `max_alpha` the result is `first`; when `alpha` is 0 it is `second`.
    `str()` gives `S(a, b)`, or `CS(a, b)` for a constant pair.
- `clockwork.graph`:
  - `Globals` is a registry of parameter placeholders. `Globals.get()` is the
    process-wide one. Reading a registry locks it; registering after that
    raises `RuntimeError`.
  - `ValuePlaceholder` and `PairPlaceholder` register themselves in a
    registry. `create_tunable` makes a tunable placeholder and `create` a
    constant one. `resolve(graph)` returns the matching parameter node.
  - `Graph(registry)` builds one parameter node per placeholder.
    `backward()` seeds the last recorded `Value` with gradient 1 and runs the
    tape in reverse. `cleanup()` zeroes the gradients and clears the tape.
    `init_zeros()` sets every parameter to zero. It can also copy parameter
    values in and out and take snapshots of values or gradients.
  - `Parameters` and `ParameterCountInfo` hold those snapshots.
    `Parameters.zeros`, `accumulate` and `weighted_accumulate` work on them.
- `clockwork.optim`: `SGD` with momentum and `AdamW` with decoupled weight
  decay. `step(values, gradients)` updates a `Parameters` snapshot in place.
  Parameters registered as constant are skipped.
- `clockwork.static_vector`: `StaticVector(capacity, items)`, a list that
  raises `IndexError` when it would grow past its capacity. It compares
  lexicographically.
- `clockwork.pretty`: `format_progress(current, total, bar_width=40)` returns a
  text progress bar line. `print_progress(...)` writes that line to a stream
  and flushes it.

## Example

```python
from clockwork.f128 import F128
from clockwork.graph import Globals, Graph, PairPlaceholder
from clockwork.optim import SGD

registry = Globals()
param = PairPlaceholder(F128(1.0, 2.0), False, registry)
graph = Graph(registry)

out = param.resolve(graph).phase(24, 24)   # equals first: 1.0
graph.backward()

values = graph.get_all_parameter_values()
grads = graph.get_all_parameter_gradients()  # pair gradient (1.0, 0.0)
SGD(registry.get_parameter_counts(), lr=0.1, registry=registry).step(values, grads)
graph.copy_parameter_values(values)          # pair is now (0.9, 2.0)
graph.cleanup()
```

## What it does not do

The package has no chess board, no move generation, no search and no
evaluation function. It has no loss functions either: you build losses
yourself from `Value` arithmetic, for example with `Value.sum`. There is no
command-line program and no data loading.

## Tests

```
pip install -e .[test]
pytest
```