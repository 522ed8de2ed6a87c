"""Pure in-memory synthetic detector readings."""

from __future__ import annotations

import numpy as np

from ..core.types import Dataset
from .registry import DatasetSpec, register_dataset
from .tsv import INPUT_SCALE, INPUT_SIZE, OUTPUT_SIZE, TRAIN_SIZE, VALID_SIZE

_DECAY_PER_CHANNEL = 8.0
_NOISE = 20.0


def make_readings(
    n: int,
    *,
    input_size: int = INPUT_SIZE,
    output_size: int = OUTPUT_SIZE,
    rng: np.random.Generator,
) -> Dataset:
    """Return ``n`` scaled, linearly separable readings with one-hot targets.

    Every class owns a distinct signal level; each channel of a reading
    follows that level with a slow decay plus bounded uniform noise, so the
    classes never overlap.
    """

    levels = np.linspace(120.0, 940.0, output_size) if output_size > 1 else np.array([530.0])
    labels = rng.permutation(np.arange(n) % output_size)
    channels = np.arange(input_size, dtype=np.float64)
    raw = (
        levels[labels][:, None]
        - _DECAY_PER_CHANNEL * channels[None, :]
        + rng.uniform(-_NOISE, _NOISE, size=(n, input_size))
    )
    raw = np.clip(np.round(raw), 0.0, INPUT_SCALE - 1)
    targets = np.eye(output_size, dtype=np.float64)[labels]
    return Dataset(inputs=raw / INPUT_SCALE, targets=targets)


def _factory(
    *,
    train_size: int = TRAIN_SIZE,
    valid_size: int = VALID_SIZE,
    input_size: int = INPUT_SIZE,
    output_size: int = OUTPUT_SIZE,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    rng = np.random.default_rng(seed)
    shape = {"input_size": input_size, "output_size": output_size}
    train = make_readings(train_size, rng=rng, **shape)
    valid = make_readings(valid_size, rng=rng, **shape)
    provenance = {
        "type": "synthetic",
        "train_size": train_size,
        "valid_size": valid_size,
        "seed": seed,
    }
    return DatasetSpec(name="synthetic", train=train, valid=valid, provenance=provenance)


register_dataset("synthetic", _factory)

__all__ = ["make_readings"]
