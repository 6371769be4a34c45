"""Autograd over scalars and score pairs, parameter registration and optimizers for evaluation tuning."""

__version__ = "0.1.0"