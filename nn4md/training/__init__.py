"""Training loop, metrics and pipelines."""

from .metrics import argmax_class, evaluate
from .trainer import Trainer, TrainerState, TrainResult

__all__ = ["TrainResult", "Trainer", "TrainerState", "argmax_class", "evaluate"]
