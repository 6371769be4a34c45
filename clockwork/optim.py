"""Optimizers that update parameter snapshots from their gradients."""

from __future__ import annotations

import math
from typing import Optional

from .f128 import F128
from .graph import Globals, ParameterCountInfo, Parameters


def _div(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


class SGD:
    """Stochastic gradient descent with momentum; constant parameters are left alone."""

    def __init__(
        self,
        counts: ParameterCountInfo,
        lr: float,
        momentum: float = 0.9,
        registry: Optional[Globals] = None,
    ) -> None:
        self.counts = counts
        self.lr = lr
        self.momentum = momentum
        self._registry = registry if registry is not None else Globals.get()
        self._value_velocity = [0.0] * counts.parameter_count
        self._pair_velocity = [F128.zero()] * counts.pair_parameter_count

    def step(self, values: Parameters, gradients: Parameters) -> None:
        """Update values in place."""
        for i, grad in enumerate(gradients.parameters[: self.counts.parameter_count]):
            if self._registry.is_parameter_constant(i):
                continue
            velocity = self.momentum * self._value_velocity[i] - self.lr * grad
            self._value_velocity[i] = velocity
            values.parameters[i] += velocity

        for i, grad in enumerate(gradients.pair_parameters[: self.counts.pair_parameter_count]):
            if self._registry.is_pair_parameter_constant(i):
                continue
            lr_grad = grad.mul_scalar(self.lr)
            velocity = self._pair_velocity[i].mul_scalar(self.momentum) + (-lr_grad)
            self._pair_velocity[i] = velocity
            values.pair_parameters[i] = values.pair_parameters[i] + velocity


class AdamW:
    """Adam with decoupled weight decay; constant parameters are left alone."""

    def __init__(
        self,
        counts: ParameterCountInfo,
        lr: float = 1e-3,
        beta1: float = 0.9,
        beta2: float = 0.999,
        eps: float = 1e-8,
        weight_decay: float = 0.01,
        registry: Optional[Globals] = None,
    ) -> None:
        self.counts = counts
        self.lr = lr
        self.beta1 = beta1
        self.beta2 = beta2
        self.eps = eps
        self.weight_decay = weight_decay
        self._registry = registry if registry is not None else Globals.get()
        self._t = 0
        self._m = [0.0] * counts.parameter_count
        self._v = [0.0] * counts.parameter_count
        self._pair_m = [F128.zero()] * counts.pair_parameter_count
        self._pair_v = [F128.zero()] * counts.pair_parameter_count

    def step(self, values: Parameters, gradients: Parameters) -> None:
        """Update values in place."""
        self._t += 1
        inv1mb1t = 1.0 / (1.0 - self.beta1**self._t)
        inv1mb2t = 1.0 / (1.0 - self.beta2**self._t)
        decay = self.lr * self.weight_decay

        for i, g in enumerate(gradients.parameters[: self.counts.parameter_count]):
            if self._registry.is_parameter_constant(i):
                continue
            m = self.beta1 * self._m[i] + (1.0 - self.beta1) * g
            v = self.beta2 * self._v[i] + (1.0 - self.beta2) * g * g
            self._m[i], self._v[i] = m, v
            m_hat = m * inv1mb1t
            v_hat = v * inv1mb2t
            adam_update = _div(self.lr * m_hat, math.sqrt(v_hat) + self.eps)
            p = values.parameters[i]
            values.parameters[i] = p + -(adam_update + decay * p)

        for i, g in enumerate(gradients.pair_parameters[: self.counts.pair_parameter_count]):
            if self._registry.is_pair_parameter_constant(i):
                continue
            g2 = g * g
            m = self._pair_m[i].mul_scalar(self.beta1) + g.mul_scalar(1.0 - self.beta1)
            v = self._pair_v[i].mul_scalar(self.beta2) + g2.mul_scalar(1.0 - self.beta2)
            self._pair_m[i], self._pair_v[i] = m, v
            m_hat = m.mul_scalar(inv1mb1t)
            v_hat = v.mul_scalar(inv1mb2t)
            adam_update = m_hat.mul_scalar(self.lr) / v_hat.sqrt().add_scalar(self.eps)
            p = values.pair_parameters[i]
            total = adam_update + p.mul_scalar(decay)
            values.pair_parameters[i] = p + F128(-total.first, -total.second)