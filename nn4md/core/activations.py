"""Activation utilities for nn4md."""

from __future__ import annotations

import numpy as np

from .types import Array


def logistic(x: Array) -> Array:
    """Return the logistic (sigmoid) activation ``1 / (1 + e^-x)``."""

    return 1.0 / (1.0 + np.exp(-x))


def logistic_deriv(y: Array) -> Array:
    """Derivative of the logistic expressed through its output ``y``."""

    return y * (1.0 - y)
