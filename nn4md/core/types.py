"""Core typing contracts for nn4md."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class Sample:
    """A single scaled training or validation record."""

    inputs: Array
    targets: Array


@dataclass(frozen=True)
class Dataset:
    """Ordered samples of one split stored as stacked arrays."""

    inputs: Array
    targets: Array

    def __post_init__(self) -> None:
        if self.inputs.ndim != 2 or self.targets.ndim != 2:
            raise ValueError("Dataset arrays must be two-dimensional")
        if self.inputs.shape[0] != self.targets.shape[0]:
            raise ValueError(
                f"Dataset has {self.inputs.shape[0]} input rows but "
                f"{self.targets.shape[0]} target rows"
            )

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    def __getitem__(self, idx: int) -> Sample:
        return Sample(inputs=self.inputs[idx], targets=self.targets[idx])

    def __iter__(self):
        for idx in range(len(self)):
            yield self[idx]

    @property
    def input_size(self) -> int:
        return int(self.inputs.shape[1])

    @property
    def output_size(self) -> int:
        return int(self.targets.shape[1])


@dataclass(frozen=True)
class EpochReport:
    """Progress reported at every epoch boundary."""

    epoch: int
    train_mse: float
    valid_mse: float
    correct: int
    valid_size: int

    @property
    def accuracy(self) -> float:
        """Validation accuracy in percent."""

        if self.valid_size == 0:
            return 0.0
        return self.correct / self.valid_size * 100.0

    def as_metrics(self) -> Dict[str, float]:
        return {
            "train_mse": self.train_mse,
            "valid_mse": self.valid_mse,
            "correct": float(self.correct),
            "accuracy": self.accuracy,
        }


@dataclass
class TrainingState:
    """Mutable counters of the training loop, reset at every epoch boundary."""

    epoch: int = 0
    iteration: int = 0
    sse: float = 0.0

    def reset_epoch(self) -> None:
        self.iteration = 0
        self.sse = 0.0

