"""Dataset loaders for nn4md."""

from . import synthetic, tsv  # noqa: F401  (registers the factories)
from .registry import DatasetError, DatasetSpec, available_datasets, get_dataset
from .utils import seeded_shuffle

__all__ = [
    "DatasetError",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "seeded_shuffle",
]
