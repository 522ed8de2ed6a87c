"""Classification and error metrics for the trainer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from ..core.engine import forward
from ..core.network import Network
from ..core.types import Array, Dataset


def argmax_class(values: Sequence[float] | Array) -> int:
    """Index of the largest strictly positive value, ``0`` otherwise.

    The running maximum starts at ``0.0`` and only moves on a strictly greater
    value, so all non-positive vectors map to class 0 and ties keep the
    earliest index.
    """

    best = 0
    best_value = 0.0
    for idx, value in enumerate(np.asarray(values, dtype=np.float64).reshape(-1)):
        if value > best_value:
            best_value = float(value)
            best = idx
    return best


def squared_error(predictions: Array, targets: Array) -> float:
    diff = np.asarray(targets, dtype=np.float64) - np.asarray(predictions, dtype=np.float64)
    return float(np.sum(diff**2))


@dataclass(frozen=True)
class Evaluation:
    """Result of forwarding every sample of a split."""

    sse: float
    size: int
    predicted: List[int] = field(default_factory=list)
    expected: List[int] = field(default_factory=list)

    @property
    def mse(self) -> float:
        return self.sse / self.size if self.size else 0.0

    @property
    def correct(self) -> int:
        return sum(1 for p, e in zip(self.predicted, self.expected) if p == e)

    @property
    def accuracy(self) -> float:
        return self.correct / self.size * 100.0 if self.size else 0.0


def evaluate(network: Network, dataset: Dataset) -> Evaluation:
    """Forward every sample of ``dataset`` without touching the weights."""

    sse = 0.0
    predicted: List[int] = []
    expected: List[int] = []
    for sample in dataset:
        outputs = forward(network, sample.inputs)
        sse += squared_error(outputs, sample.targets)
        predicted.append(argmax_class(outputs))
        expected.append(argmax_class(sample.targets))
    return Evaluation(sse=sse, size=len(dataset), predicted=predicted, expected=expected)


__all__ = ["Evaluation", "argmax_class", "evaluate", "squared_error"]
