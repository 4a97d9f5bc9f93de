"""Activation utilities for ABCDNet."""

from __future__ import annotations

import numpy as np

from .types import Array


def activation(x: Array) -> Array:
    """Return the hyperbolic tangent of ``x``."""

    return np.tanh(x)


def activation_derivative(x: Array) -> Array:
    """Derivative of :func:`activation` evaluated at the pre-activation ``x``."""

    # large |x| overflows cosh to inf and the derivative to 0
    with np.errstate(over="ignore"):
        c = np.cosh(x)
        return 1.0 / (c * c)
