"""Utility helpers for dataset loaders."""

from __future__ import annotations

import hashlib
from pathlib import Path

import numpy as np

from ..core.types import Dataset

DEFAULT_SHUFFLE_SEED = 7777


def shuffle_dataset(dataset: Dataset, rng: np.random.Generator) -> Dataset:
    """Return ``dataset`` permuted by a Fisher-Yates pass driven by ``rng``."""

    order = np.arange(len(dataset))
    for i in range(len(dataset) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        order[i], order[j] = order[j], order[i]
    return Dataset(inputs=dataset.inputs[order], targets=dataset.targets[order])


def seeded_shuffle(dataset: Dataset, seed: int = DEFAULT_SHUFFLE_SEED) -> Dataset:
    """Shuffle ``dataset`` with a dedicated generator seeded by ``seed``."""

    return shuffle_dataset(dataset, np.random.default_rng(seed))


def checksum_path(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


__all__ = ["DEFAULT_SHUFFLE_SEED", "checksum_path", "seeded_shuffle", "shuffle_dataset"]
