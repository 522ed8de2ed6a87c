"""Per-sample gradient-descent training with a convergence state machine."""

from __future__ import annotations

import enum
import warnings
from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

from ..core.engine import backpropagate, forward
from ..core.network import Network
from ..core.types import Dataset, EpochReport, TrainingState
from .metrics import evaluate

ERROR_THRESHOLD = 0.01
DEFAULT_LEARNING_RATE = 0.1


class TrainerState(str, enum.Enum):
    RUNNING = "running"
    EPOCH_BOUNDARY = "epoch_boundary"
    CONVERGED = "converged"
    MAX_EPOCHS_EXCEEDED = "max_epochs_exceeded"

    @property
    def terminal(self) -> bool:
        return self in (TrainerState.CONVERGED, TrainerState.MAX_EPOCHS_EXCEEDED)


@dataclass
class TrainResult:
    """Outcome of :meth:`Trainer.run`."""

    state: TrainerState
    epochs: int
    steps: int
    history: List[EpochReport] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.state is TrainerState.CONVERGED

    @property
    def last(self) -> EpochReport | None:
        return self.history[-1] if self.history else None


class Trainer:
    """Train a :class:`Network` one sample at a time until validation converges.

    The training split is consumed in its given order every epoch; shuffle it
    beforehand.  At each epoch boundary the whole validation split is
    evaluated and an :class:`EpochReport` is passed to every callback (objects
    with ``on_epoch(epoch, metrics)`` or plain callables).
    """

    def __init__(
        self,
        network: Network,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        *,
        error_threshold: float = ERROR_THRESHOLD,
        max_epochs: int | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        if learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {learning_rate}")
        if error_threshold <= 0:
            raise ValueError(f"error_threshold must be positive, got {error_threshold}")
        if max_epochs is not None and max_epochs < 1:
            raise ValueError(f"max_epochs must be >= 1, got {max_epochs}")
        self.network = network
        self.learning_rate = float(learning_rate)
        self.error_threshold = float(error_threshold)
        self.max_epochs = max_epochs
        self.callbacks = list(callbacks or [])
        self.state = TrainerState.RUNNING
        self.counters = TrainingState()

    def run(self, train: Dataset, valid: Dataset) -> TrainResult:
        self._check_shapes(train, "training")
        self._check_shapes(valid, "validation")
        if len(train) == 0 or len(valid) == 0:
            raise ValueError("Training and validation splits must not be empty")
        if self.max_epochs is None:
            warnings.warn(
                "Training without max_epochs runs until convergence and may never stop",
                RuntimeWarning,
                stacklevel=2,
            )

        self.state = TrainerState.RUNNING
        self.counters = TrainingState()
        history: List[EpochReport] = []
        steps = 0
        while not self.state.terminal:
            if self.state is TrainerState.RUNNING:
                self._step(train)
                steps += 1
                if self.counters.iteration == len(train):
                    self.state = TrainerState.EPOCH_BOUNDARY
            else:
                report = self._epoch_boundary(len(train), valid)
                history.append(report)
                self.state = self._next_state(report)
                if self.state is TrainerState.RUNNING:
                    self.counters.reset_epoch()

        return TrainResult(
            state=self.state,
            epochs=self.counters.epoch,
            steps=steps,
            history=history,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _step(self, train: Dataset) -> None:
        sample = train[self.counters.iteration]
        forward(self.network, sample.inputs)
        self.counters.sse += backpropagate(
            self.network, sample.targets, self.learning_rate
        )
        self.counters.iteration += 1

    def _epoch_boundary(self, train_size: int, valid: Dataset) -> EpochReport:
        self.counters.epoch += 1
        evaluation = evaluate(self.network, valid)
        report = EpochReport(
            epoch=self.counters.epoch,
            train_mse=self.counters.sse / train_size,
            valid_mse=evaluation.mse,
            correct=evaluation.correct,
            valid_size=evaluation.size,
        )
        self._emit_epoch(report.epoch, report.as_metrics())
        return report

    def _next_state(self, report: EpochReport) -> TrainerState:
        if report.valid_mse < self.error_threshold:
            return TrainerState.CONVERGED
        if self.max_epochs is not None and report.epoch >= self.max_epochs:
            return TrainerState.MAX_EPOCHS_EXCEEDED
        return TrainerState.RUNNING

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)

    def _check_shapes(self, dataset: Dataset, split: str) -> None:
        if dataset.input_size != self.network.input_size:
            raise ValueError(
                f"{split} split has {dataset.input_size} inputs, "
                f"network expects {self.network.input_size}"
            )
        if dataset.output_size != self.network.output_size:
            raise ValueError(
                f"{split} split has {dataset.output_size} targets, "
                f"network expects {self.network.output_size}"
            )


__all__ = ["ERROR_THRESHOLD", "TrainResult", "Trainer", "TrainerState"]
