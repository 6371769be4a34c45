import math

import pytest

from clockwork.f128 import F128


def test_zero_and_broadcast():
    assert F128.zero() == F128(0.0, 0.0)
    assert F128.broadcast(2.5) == F128(2.5, 2.5)


def test_elementwise_ops():
    a = F128(1.5, -2.0)
    b = F128(0.5, 4.0)
    assert (a + b).first == a.first + b.first
    assert (a + b).second == a.second + b.second
    assert (a - b) + b == a
    assert (a * b).second == a.second * b.second
    assert (a / b).first == a.first / b.first


def test_negation():
    a = F128(3.0, -7.25)
    assert -a == F128(-3.0, 7.25)
    assert a + (-a) == F128.zero()


def test_scalar_ops_match_broadcast():
    a = F128(6.0, -9.0)
    assert a.add_scalar(2.0) == a + F128.broadcast(2.0)
    assert a.sub_scalar(2.0) == a - F128.broadcast(2.0)
    assert a.mul_scalar(2.0) == a * F128.broadcast(2.0)
    assert a.div_scalar(3.0) == a / F128.broadcast(3.0)
    assert a.scalar_div(3.0) == F128.broadcast(3.0) / a


def test_madd():
    a, b, c = F128(1.0, 2.0), F128(3.0, 4.0), F128(0.5, -1.0)
    assert a.madd(b, c) == a + b * c


def test_sqrt_invariant():
    a = F128(2.0, 12.25)
    r = a.sqrt()
    assert r.first * r.first == pytest.approx(a.first)
    assert r.second * r.second == pytest.approx(a.second)
    assert math.isnan(F128(-1.0, 0.0).sqrt().first)


def test_division_by_zero_is_ieee():
    result = F128(1.0, -1.0) / F128.zero()
    assert result.first == math.inf
    assert result.second == -math.inf
    assert math.isnan((F128.zero() / F128.zero()).first)
    assert F128(0.0, 2.0).scalar_div(1.0).first == math.inf


def test_str():
    assert str(F128(1.0, 2.5)) == "(1, 2.5)"