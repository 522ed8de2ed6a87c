"""nn4md public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.engine import backpropagate, forward
from .core.network import Network, build
from .reporting.export import export_document, load_model, write_model
from .training.metrics import argmax_class
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer, TrainerState

__version__ = "0.1.0"

__all__ = [
    "Network",
    "Trainer",
    "TrainerState",
    "activations",
    "argmax_class",
    "backpropagate",
    "build",
    "export_document",
    "forward",
    "load_model",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
    "write_model",
]
