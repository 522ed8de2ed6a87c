from pathlib import Path

import numpy as np
import pytest

from nn4md.core.types import Dataset
from nn4md.data import DatasetError, get_dataset, seeded_shuffle
from nn4md.data.registry import available_datasets
from nn4md.data.synthetic import make_readings
from nn4md.data.tsv import INPUT_SCALE, load_tsv, write_tsv


def _write_lines(path: Path, lines) -> Path:
    path.write_text("".join(line + "\n" for line in lines))
    return path


def _row(inputs, targets) -> str:
    return "\t".join(str(v) for v in [*inputs, *targets])


def test_input_scale_applied_once(tmp_path):
    path = _write_lines(tmp_path / "one.dat", [_row([1024] * 8, [1, 0])])
    data = load_tsv(path, records=1)
    assert data.inputs.shape == (1, 8)
    assert data.inputs[0, 0] == 1.0
    assert np.array_equal(data.targets[0], [1.0, 0.0])


def test_extra_lines_beyond_expected_count_are_ignored(tmp_path):
    lines = [_row([i] * 8, [0, 1]) for i in range(5)]
    data = load_tsv(_write_lines(tmp_path / "many.dat", lines), records=3)
    assert len(data) == 3
    assert data.inputs[2, 0] == pytest.approx(2 / INPUT_SCALE)


def test_missing_file_raises(tmp_path):
    with pytest.raises(DatasetError, match="not found"):
        load_tsv(tmp_path / "absent.dat", records=1)


def test_short_file_raises(tmp_path):
    path = _write_lines(tmp_path / "short.dat", [_row([1] * 8, [1, 0])] * 2)
    with pytest.raises(DatasetError, match="expected 3 records"):
        load_tsv(path, records=3)


def test_empty_file_raises(tmp_path):
    path = tmp_path / "empty.dat"
    path.write_text("")
    with pytest.raises(DatasetError):
        load_tsv(path, records=1)


def test_non_numeric_field_reports_line(tmp_path):
    lines = [_row([1] * 8, [1, 0]), _row([1] * 7 + ["abc"], [1, 0])]
    with pytest.raises(DatasetError, match=r":2: field 8"):
        load_tsv(_write_lines(tmp_path / "bad.dat", lines), records=2)


def test_undecodable_file_raises(tmp_path):
    path = tmp_path / "binary.dat"
    path.write_bytes(_row([1] * 8, [1, 0]).encode() + b"\n\xff\xfe\x00\x01\n")
    with pytest.raises(DatasetError, match="UTF-8"):
        load_tsv(path, records=2)


def test_wrong_field_count_raises(tmp_path):
    path = _write_lines(tmp_path / "narrow.dat", [_row([1] * 6, [1, 0])])
    with pytest.raises(DatasetError, match="fields"):
        load_tsv(path, records=1)


def test_write_tsv_reproduces_raw_values(tmp_path):
    data = make_readings(10, rng=np.random.default_rng(0))
    path = write_tsv(tmp_path / "out.dat", data)
    raw = path.read_text().splitlines()[0].split("\t")
    assert len(raw) == 10
    assert float(raw[0]) == pytest.approx(data.inputs[0, 0] * INPUT_SCALE)
    loaded = load_tsv(path, records=10)
    assert np.allclose(loaded.inputs, data.inputs)
    assert np.array_equal(loaded.targets, data.targets)


def test_tsv_dataset_factory(tmp_path):
    rng = np.random.default_rng(1)
    train = write_tsv(tmp_path / "train.dat", make_readings(110, rng=rng))
    valid = write_tsv(tmp_path / "test.dat", make_readings(40, rng=rng))
    spec = get_dataset("tsv", train_path=train, valid_path=valid)
    assert spec.splits == {"train": 110, "valid": 40}
    assert spec.input_size == 8 and spec.output_size == 2
    assert len(spec.provenance["train_sha256"]) == 64


def test_synthetic_readings_are_separable_and_balanced():
    data = make_readings(110, rng=np.random.default_rng(0))
    assert data.inputs.shape == (110, 8)
    assert np.all((data.inputs >= 0) & (data.inputs < 1))
    labels = data.targets.argmax(axis=1)
    assert set(np.bincount(labels)) == {55}
    assert data.inputs[labels == 0].max() < data.inputs[labels == 1].min()


def test_registry_lists_builtin_datasets():
    assert {"synthetic", "tsv"} <= set(available_datasets())
    with pytest.raises(KeyError):
        get_dataset("mnist")


def test_seeded_shuffle_is_a_deterministic_permutation():
    data = Dataset(inputs=np.arange(20.0).reshape(10, 2), targets=np.eye(10))
    first = seeded_shuffle(data, 7777)
    second = seeded_shuffle(data, 7777)
    assert np.array_equal(first.inputs, second.inputs)
    assert sorted(first.inputs[:, 0].tolist()) == data.inputs[:, 0].tolist()
    assert not np.array_equal(first.inputs, data.inputs)
    assert np.array_equal(first.inputs[:, 0] / 2, first.targets.argmax(axis=1))


def test_dataset_rejects_mismatched_rows():
    with pytest.raises(ValueError):
        Dataset(inputs=np.zeros((3, 2)), targets=np.zeros((2, 2)))
