"""Activation utilities for backpropnet."""

from __future__ import annotations

import numpy as np

from .types import Array


def tanh(x: Array) -> Array:
    """Return the tanh activation."""

    return np.tanh(x)


def tanh_deriv(x: Array) -> Array:
    """Return ``1 - tanh(x)**2``.

    The network feeds post-activation node values into this, so the
    derivative is taken of values that already went through ``tanh``.
    """

    t = np.tanh(x)
    return 1.0 - t * t
