"""Tab-separated detector reading files.

Each line holds ``input_size`` raw input fields followed by ``output_size``
target fields.  Inputs are divided by :data:`INPUT_SCALE` and targets by
:data:`OUTPUT_SCALE` when parsed.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from ..core.types import Dataset
from .registry import DatasetError, DatasetSpec, register_dataset
from .utils import checksum_path

INPUT_SCALE = 1024.0
OUTPUT_SCALE = 1.0
TRAIN_FILE = "train.dat"
VALID_FILE = "test.dat"
TRAIN_SIZE = 110
VALID_SIZE = 40
INPUT_SIZE = 8
OUTPUT_SIZE = 2


def load_tsv(
    path: str | Path,
    *,
    records: int,
    input_size: int = INPUT_SIZE,
    output_size: int = OUTPUT_SIZE,
    input_scale: float = INPUT_SCALE,
    output_scale: float = OUTPUT_SCALE,
) -> Dataset:
    """Parse exactly ``records`` lines of ``path`` into a scaled dataset.

    Lines beyond ``records`` are ignored.  A missing or undecodable file,
    fewer lines than ``records``, a wrong field count or a non-numeric field
    raise :class:`DatasetError`.
    """

    path = Path(path)
    n_fields = input_size + output_size
    try:
        frame = pd.read_csv(
            path,
            sep="\t",
            header=None,
            nrows=records,
            dtype=str,
            keep_default_na=False,
        )
    except FileNotFoundError as exc:
        raise DatasetError(f"Dataset file not found: {path}") from exc
    except pd.errors.EmptyDataError as exc:
        raise DatasetError(f"Dataset file is empty: {path}") from exc
    except pd.errors.ParserError as exc:
        raise DatasetError(f"Malformed dataset file {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise DatasetError(f"{path} is not valid UTF-8 text: {exc}") from exc
    except OSError as exc:
        raise DatasetError(f"Unable to read dataset file {path}: {exc}") from exc

    if len(frame) < records:
        raise DatasetError(
            f"{path}: expected {records} records, found only {len(frame)}"
        )
    if frame.shape[1] != n_fields:
        raise DatasetError(
            f"{path}: expected {n_fields} tab-separated fields per line, "
            f"found {frame.shape[1]}"
        )

    values = frame.apply(
        lambda column: pd.to_numeric(column.astype(str).str.strip(), errors="coerce")
    )
    bad = values.isna().to_numpy()
    if bad.any():
        row, col = (int(v) for v in np.argwhere(bad)[0])
        raise DatasetError(
            f"{path}:{row + 1}: field {col + 1} is not a number: {frame.iat[row, col]!r}"
        )

    data = values.to_numpy(dtype=np.float64)
    return Dataset(
        inputs=data[:, :input_size] / input_scale,
        targets=data[:, input_size:] / output_scale,
    )


def write_tsv(
    path: str | Path,
    dataset: Dataset,
    *,
    input_scale: float = INPUT_SCALE,
    output_scale: float = OUTPUT_SCALE,
) -> Path:
    """Write ``dataset`` back in raw (unscaled) tab-separated form."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    raw = np.hstack([dataset.inputs * input_scale, dataset.targets * output_scale])
    pd.DataFrame(raw).to_csv(
        path, sep="\t", header=False, index=False, float_format="%.10g"
    )
    return path


@register_dataset("tsv")
def load_tsv_dataset(
    *,
    train_path: str | Path = TRAIN_FILE,
    valid_path: str | Path = VALID_FILE,
    train_size: int = TRAIN_SIZE,
    valid_size: int = VALID_SIZE,
    input_size: int = INPUT_SIZE,
    output_size: int = OUTPUT_SIZE,
    **_: object,
) -> DatasetSpec:
    """Load the training and validation files of a detector recording."""

    train_path = Path(train_path)
    valid_path = Path(valid_path)
    shape = {"input_size": input_size, "output_size": output_size}
    train = load_tsv(train_path, records=train_size, **shape)
    valid = load_tsv(valid_path, records=valid_size, **shape)

    provenance = {
        "type": "tsv",
        "train_path": str(train_path),
        "valid_path": str(valid_path),
        "train_sha256": checksum_path(train_path),
        "valid_sha256": checksum_path(valid_path),
        "input_scale": INPUT_SCALE,
        "output_scale": OUTPUT_SCALE,
    }
    return DatasetSpec(name="tsv", train=train, valid=valid, provenance=provenance)


__all__ = [
    "INPUT_SCALE",
    "OUTPUT_SCALE",
    "load_tsv",
    "load_tsv_dataset",
    "write_tsv",
]
