import math

import pytest

from clockwork.f128 import F128
from clockwork.value import Pair, Tape, Value


@pytest.fixture(autouse=True)
def fresh_tape():
    Tape.get().clear()
    yield
    Tape.get().clear()


def run_backward(out):
    if isinstance(out, Pair):
        out.gradients = F128(1.0, 1.0)
    else:
        out.gradient = 1.0
    for node in reversed(Tape.get().nodes):
        node.backward()


def test_create_registers_but_constructor_does_not():
    Value(1.0)
    assert len(Tape.get()) == 0
    v = Value.create(2.0)
    assert Tape.get().nodes == [v]
    p = Pair.create(1.0, 2.0)
    assert Tape.get().nodes[-1] is p
    Tape.get().clear()
    assert len(Tape.get()) == 0


def test_add_gradients():
    a, b = Value.create(2.0), Value.create(5.0)
    out = a + b
    assert out.value == 7.0
    run_backward(out)
    assert a.gradient == 1.0
    assert b.gradient == 1.0


def test_sub_gradients():
    a, b = Value.create(2.0), Value.create(5.0)
    out = a - b
    assert out.value == 2.0 - 5.0
    run_backward(out)
    assert a.gradient == 1.0
    assert b.gradient == -1.0


def test_mul_gradients_swap():
    a, b = Value.create(3.0), Value.create(4.0)
    out = a * b
    run_backward(out)
    assert out.value == 3.0 * 4.0
    assert a.gradient == 4.0
    assert b.gradient == 3.0


def test_div_gradients():
    a, b = Value.create(6.0), Value.create(3.0)
    out = a / b
    run_backward(out)
    assert out.value == pytest.approx(6.0 / 3.0)
    assert a.gradient == pytest.approx(1 / 3.0)
    assert b.gradient == pytest.approx(-6.0 / 9.0)


def test_div_by_zero_is_infinite():
    out = Value.create(1.0) / 0
    assert out.value == math.inf


def test_reflected_operations():
    v = Value.create(4.0)
    s = 10 - v
    d = 8 / v
    a = 3 + v
    m = 2 * v
    assert s.value == 10 - 4.0
    assert d.value == 8 / 4.0
    assert a.value == 3 + 4.0
    assert m.value == 2 * 4.0
    run_backward(s)
    assert v.gradient == -1.0


def test_rtruediv_gradient():
    v = Value.create(2.0)
    out = 8 / v
    run_backward(out)
    assert v.gradient == pytest.approx(-8 / 4.0)


def test_negation():
    v = Value.create(2.5)
    out = -v
    run_backward(out)
    assert out.value == -2.5
    assert v.gradient == -1.0


def test_exp_gradient_is_output():
    v = Value.create(1.3)
    out = v.exp()
    run_backward(out)
    assert out.value == pytest.approx(math.exp(1.3))
    assert v.gradient == pytest.approx(out.value)


def test_log_gradient_and_zero():
    v = Value.create(4.0)
    out = v.log()
    run_backward(out)
    assert out.value == pytest.approx(math.log(4.0))
    assert v.gradient == pytest.approx(1 / 4.0)
    assert Value.create(0.0).log().value == -math.inf


def test_sigmoid():
    v = Value.create(0.0)
    out = v.sigmoid()
    run_backward(out)
    assert out.value == 0.5
    assert v.gradient == pytest.approx(out.value * (1 - out.value))
    assert Value.create(-1000.0).sigmoid().value == 0.0


def test_pow_constant_exponent():
    v = Value.create(2.0)
    out = v.pow(3.0)
    run_backward(out)
    assert out.value == 2.0**3
    assert v.gradient == pytest.approx(3.0 * 2.0**2)


def test_pow_value_exponent():
    base, exponent = Value.create(2.0), Value.create(3.0)
    out = base.pow(exponent)
    run_backward(out)
    assert exponent.gradient == pytest.approx(out.value * math.log(2.0))
    assert base.gradient == pytest.approx(3.0 * 2.0**2)


def test_pow_negative_base_fractional_is_nan():
    out = Value.create(-2.0).pow(0.5)
    assert repr(out.value) == "nan"


def test_sum_empty():
    out = Value.sum([])
    assert out.value == 0.0
    assert Tape.get().nodes == [out]


def test_comparisons_by_value():
    a, b, c = Value(1.0), Value(2.0), Value(1.0)
    assert a == c
    assert a < b and a <= c and b > a and b >= a
    assert not (a == b)


def test_gradient_helpers():
    v = Value.create(1.0)
    v.add_gradient(2.5)
    v.add_gradient(2.5)
    assert v.gradient == 5.0
    v.zero_grad()
    assert v.gradient == 0.0


def test_value_str():
    v = Value(1.5)
    assert str(v) == "Value(data=1.5, grad=0)"


def test_pair_add_sub_gradients():
    a, b = Pair.create(1.0, 2.0), Pair.create(10.0, 20.0)
    out = a - b
    assert (out.first(), out.second()) == (1.0 - 10.0, 2.0 - 20.0)
    run_backward(out)
    assert (a.grad_first(), a.grad_second()) == (1.0, 1.0)
    assert (b.grad_first(), b.grad_second()) == (-1.0, -1.0)
    Tape.get().clear()
    a.zero_grad()
    s = a + b
    run_backward(s)
    assert a.gradients == F128(1.0, 1.0)


def test_pair_times_scalar_both_sides():
    a = Pair.create(1.0, 2.0)
    left, right = a * 3.0, 3.0 * a
    assert left.values == right.values == F128(3.0, 6.0)
    run_backward(left)
    assert a.gradients == F128(3.0, 3.0)


def test_pair_times_value():
    a = Pair.create(2.0, 5.0)
    v = Value.create(3.0)
    out = v * a
    assert out.values == F128(6.0, 15.0)
    run_backward(out)
    assert a.gradients == F128(3.0, 3.0)
    assert v.gradient == pytest.approx(2.0 + 5.0)


def test_pair_divided_by_value():
    a = Pair.create(2.0, 4.0)
    v = Value.create(2.0)
    out = a / v
    assert out.values == F128(1.0, 2.0)
    run_backward(out)
    assert a.gradients == F128(0.5, 0.5)
    assert v.gradient == pytest.approx(-(2.0 + 4.0) / 4.0)


def test_scalar_and_value_divided_by_pair():
    a = Pair.create(2.0, 4.0)
    out = 8.0 / a
    assert out.values == F128(4.0, 2.0)
    run_backward(out)
    assert a.gradients.first == pytest.approx(-8.0 / 4.0)
    assert a.gradients.second == pytest.approx(-8.0 / 16.0)

    Tape.get().clear()
    b = Pair.create(2.0, 4.0)
    v = Value.create(8.0)
    out2 = v / b
    run_backward(out2)
    assert v.gradient == pytest.approx(1 / 2.0 + 1 / 4.0)


def test_pair_divided_by_zero():
    out = Pair.create(1.0, -1.0) / 0.0
    assert out.first() == math.inf
    assert out.second() == -math.inf


def test_pair_negation():
    a = Pair.create(1.0, -2.0)
    out = -a
    assert out.values == F128(-1.0, 2.0)
    run_backward(out)
    assert a.gradients == F128(-1.0, -1.0)


def test_pair_phase():
    p = Pair.create(10.0, 20.0)
    assert p.phase(4, 4).value == 10.0
    assert p.phase(0, 4).value == 20.0
    Tape.get().clear()
    out = p.phase(1, 4)
    run_backward(out)
    assert p.grad_first() == pytest.approx(1 / 4)
    assert p.grad_second() == pytest.approx(3 / 4)


def test_pair_set_values():
    p = Pair(F128(0.0, 0.0))
    p.set_values(3.0, 4.0)
    assert p.values == F128(3.0, 4.0)
    p.set_values(F128(5.0, 6.0))
    assert (p.first(), p.second()) == (5.0, 6.0)


def test_pair_str_constant_and_tunable():
    assert str(Pair.create(2.0, 3.0)) == "CS(2, 3)"
    assert str(Pair(F128(2.0, -3.0))) == "S(2, -2)"


def test_value_plus_pair_rejected():
    with pytest.raises(TypeError):
        Value.create(1.0) + Pair.create(1.0, 2.0)