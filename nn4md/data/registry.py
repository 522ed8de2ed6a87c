"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping

from ..core.types import Dataset


class DatasetError(ValueError):
    """Raised when a dataset file is missing, short or malformed."""


@dataclass(frozen=True)
class DatasetSpec:
    """Training and validation splits of a registered dataset.

    Attributes
    ----------
    name:
        Registry identifier the spec was produced by.
    train, valid:
        Scaled samples in file order.  Shuffling is the caller's job.
    provenance:
        Free-form metadata (paths, checksums, seeds) recorded in the run
        manifest so experiments remain reproducible.
    """

    name: str
    train: Dataset
    valid: Dataset
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def input_size(self) -> int:
        return self.train.input_size

    @property
    def output_size(self) -> int:
        return self.train.output_size

    @property
    def splits(self) -> Dict[str, int]:
        return {"train": len(self.train), "valid": len(self.valid)}


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("tsv")
        def load_tsv_dataset(**kwargs):
            ...

    or directly::

        register_dataset("synthetic", make_synthetic)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` produced by the ``dataset`` factory."""

    if dataset not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset: {dataset!r}. Available datasets: {available}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if len(spec.train) == 0:
        raise DatasetError(f"Dataset {spec.name!r} has an empty training split")
    if len(spec.valid) == 0:
        raise DatasetError(f"Dataset {spec.name!r} has an empty validation split")
    if spec.train.input_size != spec.valid.input_size:
        raise DatasetError("Training and validation splits disagree on input size")
    if spec.train.output_size != spec.valid.output_size:
        raise DatasetError("Training and validation splits disagree on output size")


__all__ = [
    "DatasetError",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
