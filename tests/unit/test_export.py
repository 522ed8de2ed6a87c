import json
from pathlib import Path

import numpy as np
import pytest

from nn4md.core.engine import forward
from nn4md.core.network import build
from nn4md.reporting.export import export_document, load_model, write_model


def test_export_document_layers():
    net = build(8, 3, 2, np.random.default_rng(0))
    doc = export_document(net)
    assert [layer["type"] for layer in doc["layers"]] == ["input", "hidden", "output"]
    assert doc["layers"][0] == {"type": "input", "activation": "linear", "neurons": 8}
    hidden, output = doc["layers"][1], doc["layers"][2]
    assert hidden["activation"] == output["activation"] == "logistic"
    assert np.asarray(hidden["weights"]).shape == (9, 3)
    assert np.asarray(output["weights"]).shape == (4, 2)


def test_written_model_reloads_identically(tmp_path):
    net = build(8, 4, 2, np.random.default_rng(1))
    path = write_model(tmp_path / "nested" / "nn4md.json", net)
    assert json.loads(Path(path).read_text()) == export_document(net)
    clone = load_model(path)
    inputs = np.linspace(0, 1, 8)
    assert forward(clone, inputs).tolist() == forward(net, inputs).tolist()


def test_load_model_rejects_incomplete_document(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"layers": [{"type": "input", "neurons": 8}]}))
    with pytest.raises(ValueError):
        load_model(path)
