"""Pipeline assembly: config presets, dataset loading, training and export."""

from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping

import numpy as np

from ..core.network import Network, build
from ..core.types import Dataset, EpochReport
from ..data import get_dataset, seeded_shuffle
from ..data.utils import DEFAULT_SHUFFLE_SEED
from ..reporting.artifacts import write_manifest
from ..reporting.export import MODEL_FILE, write_model
from ..reporting.metrics import CsvSink, JsonlSink, ProgressPrinter
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import DEFAULT_LEARNING_RATE, ERROR_THRESHOLD, Trainer, TrainerState

DEFAULT_HIDDEN = 3

_DEFAULTS: Mapping[str, Mapping[str, object]] = {
    "data": {"name": "tsv", "options": {}},
    "model": {"hidden": DEFAULT_HIDDEN, "seed": 0},
    "train": {
        "lr": DEFAULT_LEARNING_RATE,
        "error_threshold": ERROR_THRESHOLD,
        "max_epochs": None,
        "shuffle_seed": DEFAULT_SHUFFLE_SEED,
        "run_dir": "runs/detector",
        "model_file": MODEL_FILE,
        "enable_plots": False,
        "print_every": 1,
    },
}

_PRESETS: Dict[str, Mapping[str, object]] = {
    "detector": {
        "data": {
            "name": "tsv",
            "options": {
                "train_path": "train.dat",
                "valid_path": "test.dat",
                "train_size": 110,
                "valid_size": 40,
                "input_size": 8,
                "output_size": 2,
            },
        },
        "model": {"hidden": DEFAULT_HIDDEN, "seed": 0},
        "train": {
            "lr": DEFAULT_LEARNING_RATE,
            "error_threshold": ERROR_THRESHOLD,
            "max_epochs": None,
            "run_dir": "runs/detector",
            "model_file": MODEL_FILE,
        },
    },
    "synthetic-demo": {
        "data": {
            "name": "synthetic",
            "options": {"train_size": 110, "valid_size": 40, "seed": 0},
        },
        "model": {"hidden": DEFAULT_HIDDEN, "seed": 0},
        "train": {
            "lr": DEFAULT_LEARNING_RATE,
            "error_threshold": ERROR_THRESHOLD,
            "max_epochs": 20000,
            "run_dir": "runs/synthetic-demo",
            "model_file": "runs/synthetic-demo/nn4md.json",
        },
    },
}


def presets() -> Mapping[str, Mapping[str, object]]:
    return deepcopy(_PRESETS)


def load_preset(name: str) -> Dict[str, object]:
    try:
        return deepcopy(_PRESETS[name])  # type: ignore[return-value]
    except KeyError as exc:
        available = ", ".join(sorted(_PRESETS))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from exc


def merge_config(base: dict, override: Mapping[str, object]) -> dict:
    """Recursively merge ``override`` into ``base`` and return ``base``."""

    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            base[key] = merge_config(dict(base[key]), value)
        else:
            base[key] = value
    return base


def resolve_config(config: Mapping[str, object]) -> Dict[str, object]:
    """Fill defaults into ``config`` and validate the training knobs."""

    resolved = merge_config(json.loads(json.dumps(_DEFAULTS)), json.loads(json.dumps(config)))
    model_cfg = resolved["model"]
    train_cfg = resolved["train"]

    hidden = int(model_cfg["hidden"])
    if hidden < 1:
        raise ValueError(f"model.hidden must be >= 1, got {hidden}")
    model_cfg["hidden"] = hidden
    model_cfg["seed"] = int(model_cfg["seed"])

    lr = float(train_cfg["lr"])
    if lr <= 0:
        raise ValueError(f"train.lr must be positive, got {lr}")
    train_cfg["lr"] = lr

    threshold = float(train_cfg["error_threshold"])
    if threshold <= 0:
        raise ValueError(f"train.error_threshold must be positive, got {threshold}")
    train_cfg["error_threshold"] = threshold

    max_epochs = train_cfg.get("max_epochs")
    if max_epochs is not None:
        max_epochs = int(max_epochs)
        if max_epochs < 1:
            raise ValueError(f"train.max_epochs must be >= 1, got {max_epochs}")
    train_cfg["max_epochs"] = max_epochs
    train_cfg["shuffle_seed"] = int(train_cfg["shuffle_seed"])
    return resolved


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`run_pipeline`: trainer outcome plus artifact paths."""

    state: TrainerState
    epochs: int
    steps: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    model_path: str = ""
    history: List[EpochReport] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.state is TrainerState.CONVERGED


@dataclass(frozen=True)
class PipelineRun:
    """Everything a caller needs after training: outcome, network, validation split."""

    result: RunResult
    network: Network
    valid: Dataset


def execute(config: Mapping[str, object]) -> PipelineRun:
    config = resolve_config(config)
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    train = seeded_shuffle(dataset.train, train_cfg["shuffle_seed"])
    network = build(
        dataset.input_size,
        model_cfg["hidden"],
        dataset.output_size,
        np.random.default_rng(model_cfg["seed"]),
    )

    run_dir = Path(str(train_cfg["run_dir"]))
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        splits=dataset.splits,
        dims=network.describe(),
        seed=model_cfg["seed"],
        lr=train_cfg["lr"],
        threshold=train_cfg["error_threshold"],
        max_epochs=train_cfg["max_epochs"],
        param_count=network.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=model_cfg["seed"])
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    printer = ProgressPrinter(every=int(train_cfg.get("print_every", 1)))

    print("--- TRAINING ---")
    trainer = Trainer(
        network,
        train_cfg["lr"],
        error_threshold=train_cfg["error_threshold"],
        max_epochs=train_cfg["max_epochs"],
        callbacks=[printer, jsonl, csv_sink, plots],
    )
    outcome = trainer.run(train, dataset.valid)
    plots.close()

    model_path = ""
    if outcome.converged:
        model_path = write_model(str(train_cfg["model_file"]), network)

    last = outcome.last
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=config,
        dataset_provenance=dataset.provenance,
        outcome={
            "state": outcome.state.value,
            "epochs": outcome.epochs,
            "steps": outcome.steps,
            "valid_mse": last.valid_mse if last else None,
            "model_file": model_path,
        },
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json")
    (run_dir / "config.json").write_text(json.dumps(config, indent=2))

    result = RunResult(
        state=outcome.state,
        epochs=outcome.epochs,
        steps=outcome.steps,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        model_path=model_path,
        history=list(outcome.history),
    )
    return PipelineRun(result=result, network=network, valid=dataset.valid)


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train according to ``config`` and return the run summary."""

    return execute(config).result


def _print_startup_summary(
    *,
    dataset_name: str,
    splits: Mapping[str, int],
    dims,
    seed: int,
    lr: float,
    threshold: float,
    max_epochs: int | None,
    param_count: int,
) -> None:
    print("=== nn4md run ===")
    print(f"Dataset        : {dataset_name} {dict(splits)}")
    print(f"Seed           : {seed}")
    print(f"Dimensions     : {dims}")
    print(f"Hidden Neurons : {dims[1]}")
    print(f"Learning Rate  : {lr}")
    print(f"MSE threshold  : {threshold}")
    print(f"Max epochs     : {max_epochs if max_epochs is not None else 'unbounded'}")
    print(f"Parameters     : {param_count}")
    print("=================")


__all__ = [
    "PipelineRun",
    "RunResult",
    "execute",
    "load_preset",
    "merge_config",
    "presets",
    "resolve_config",
    "run_pipeline",
]
