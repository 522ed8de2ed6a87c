"""Three-layer feed-forward network state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping

import numpy as np

from .types import Array

WEIGHT_RANGE = 0.1


@dataclass
class Network:
    """Activations and weights of an input/hidden/output network.

    The last slot of ``input_activation`` and ``hidden_activation`` is the
    bias unit and always holds ``1.0``.  Weights are stored with one row per
    source unit (bias row last) and one column per destination unit.
    """

    input_size: int
    hidden_size: int
    output_size: int
    input_activation: Array = field(init=False, repr=False)
    hidden_activation: Array = field(init=False, repr=False)
    output_activation: Array = field(init=False, repr=False)
    hidden_weights: Array = field(init=False, repr=False)
    output_weights: Array = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("input_size", "hidden_size", "output_size"):
            value = int(getattr(self, name))
            if value < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")
            setattr(self, name, value)
        self.input_activation = np.ones(self.input_size + 1, dtype=np.float64)
        self.hidden_activation = np.ones(self.hidden_size + 1, dtype=np.float64)
        self.output_activation = np.ones(self.output_size, dtype=np.float64)
        self.hidden_weights = np.zeros(
            (self.input_size + 1, self.hidden_size), dtype=np.float64
        )
        self.output_weights = np.zeros(
            (self.hidden_size + 1, self.output_size), dtype=np.float64
        )
        self._check_shapes()

    def reset(self, rng: np.random.Generator, weight_range: float = WEIGHT_RANGE) -> None:
        """Draw every weight uniformly from ``[-weight_range, weight_range]``."""

        self.hidden_weights[...] = rng.uniform(
            -weight_range, weight_range, size=self.hidden_weights.shape
        )
        self.output_weights[...] = rng.uniform(
            -weight_range, weight_range, size=self.output_weights.shape
        )

    def describe(self) -> List[int]:
        return [self.input_size, self.hidden_size, self.output_size]

    def state_dict(self) -> Mapping[str, Array]:
        return {
            "hidden_weights": self.hidden_weights.copy(),
            "output_weights": self.output_weights.copy(),
        }

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        for key in ("hidden_weights", "output_weights"):
            if key not in state:
                raise KeyError(f"Missing weight {key} in state dict")
            value = np.asarray(state[key], dtype=np.float64)
            current = getattr(self, key)
            if value.shape != current.shape:
                raise ValueError(
                    f"{key} has shape {value.shape}, expected {current.shape}"
                )
            current[...] = value

    def parameter_count(self) -> int:
        return int(self.hidden_weights.size + self.output_weights.size)

    def _check_shapes(self) -> None:
        assert self.input_activation.shape == (self.input_size + 1,)
        assert self.hidden_activation.shape == (self.hidden_size + 1,)
        assert self.output_activation.shape == (self.output_size,)
        assert self.hidden_weights.shape == (self.input_size + 1, self.hidden_size)
        assert self.output_weights.shape == (self.hidden_size + 1, self.output_size)


def build(
    input_size: int,
    hidden_size: int,
    output_size: int,
    rng: np.random.Generator | None = None,
    *,
    seed: int = 0,
    weight_range: float = WEIGHT_RANGE,
) -> Network:
    """Allocate a network and randomise its weights.

    ``rng`` is consumed for the weight draws; when omitted a generator seeded
    with ``seed`` is created so construction never touches global state.
    """

    network = Network(input_size, hidden_size, output_size)
    network.reset(rng if rng is not None else np.random.default_rng(seed), weight_range)
    return network


__all__ = ["Network", "WEIGHT_RANGE", "build"]
