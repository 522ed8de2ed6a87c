"""Model document export."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

import numpy as np

from ..core.network import Network

MODEL_FILE = "nn4md.json"


def export_document(network: Network) -> Dict[str, List[Dict[str, Any]]]:
    """Describe ``network`` as three layer records with plain-list weights."""

    return {
        "layers": [
            {
                "type": "input",
                "activation": "linear",
                "neurons": network.input_size,
            },
            {
                "type": "hidden",
                "activation": "logistic",
                "neurons": network.hidden_size,
                "weights": network.hidden_weights.tolist(),
            },
            {
                "type": "output",
                "activation": "logistic",
                "neurons": network.output_size,
                "weights": network.output_weights.tolist(),
            },
        ]
    }


def write_model(path: str | Path, network: Network) -> str:
    """Write the export document of ``network`` to ``path``."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(export_document(network), separators=(",", ":")))
    return str(path)


def network_from_document(document: Mapping[str, Any]) -> Network:
    """Rebuild a :class:`Network` from an export document."""

    layers = {layer.get("type"): layer for layer in document.get("layers", [])}
    missing = {"input", "hidden", "output"} - set(layers)
    if missing:
        raise ValueError(f"Model document lacks layers: {sorted(missing)}")
    network = Network(
        int(layers["input"]["neurons"]),
        int(layers["hidden"]["neurons"]),
        int(layers["output"]["neurons"]),
    )
    network.load_state_dict(
        {
            "hidden_weights": np.asarray(layers["hidden"]["weights"], dtype=np.float64),
            "output_weights": np.asarray(layers["output"]["weights"], dtype=np.float64),
        }
    )
    return network


def load_model(path: str | Path) -> Network:
    return network_from_document(json.loads(Path(path).read_text()))


__all__ = ["MODEL_FILE", "export_document", "load_model", "network_from_document", "write_model"]
