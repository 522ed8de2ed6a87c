"""Forward and backward propagation for :class:`~nn4md.core.network.Network`."""

from __future__ import annotations

import numpy as np

from .activations import logistic, logistic_deriv
from .network import Network
from .types import Array


def forward(network: Network, inputs: Array) -> Array:
    """Propagate ``inputs`` through ``network`` and return the output layer.

    The returned array is the network's own output activation buffer and is
    overwritten by the next call.
    """

    values = np.asarray(inputs, dtype=np.float64).reshape(-1)
    if values.shape[0] != network.input_size:
        raise ValueError(
            f"Expected {network.input_size} inputs, got {values.shape[0]}"
        )
    network.input_activation[: network.input_size] = values
    network.hidden_activation[: network.hidden_size] = logistic(
        network.input_activation @ network.hidden_weights
    )
    network.output_activation[:] = logistic(
        network.hidden_activation @ network.output_weights
    )
    return network.output_activation


def backpropagate(network: Network, targets: Array, learning_rate: float) -> float:
    """Apply one gradient-descent step against ``targets``.

    Must follow a :func:`forward` call on the matching inputs.  Output weights
    are updated first and the hidden deltas are then accumulated through the
    already updated output weights.  Returns the squared error of the
    activations seen on entry.
    """

    targets = np.asarray(targets, dtype=np.float64).reshape(-1)
    if targets.shape[0] != network.output_size:
        raise ValueError(
            f"Expected {network.output_size} targets, got {targets.shape[0]}"
        )
    out_act = network.output_activation
    hid_act = network.hidden_activation

    output_delta = logistic_deriv(out_act) * (out_act - targets)
    network.output_weights -= learning_rate * np.outer(hid_act, output_delta)

    hidden_error = network.output_weights[: network.hidden_size] @ output_delta
    hidden_delta = logistic_deriv(hid_act[: network.hidden_size]) * hidden_error
    network.hidden_weights -= learning_rate * np.outer(
        network.input_activation, hidden_delta
    )

    return float(np.sum((targets - out_act) ** 2))


__all__ = ["backpropagate", "forward"]
