"""Train the metal detector classifier and query it interactively."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

import click

from nn4md.data import DatasetError
from nn4md.inference import format_results, interactive_loop
from nn4md.reporting.export import load_model
from nn4md.reporting.metrics import format_epoch
from nn4md.training import pipelines


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__, add_help=False)
    parser.add_argument(
        "--help", action="help", help="Show this help message and exit"
    )
    parser.add_argument("-s", "--seed", type=int, help="Weight initialisation seed (default 0)")
    parser.add_argument(
        "-h", "--hidden", type=int, help="Number of hidden neurons (default 3)"
    )
    parser.add_argument("-r", "--rate", type=float, help="Learning rate (default 0.1)")
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="detector",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument("--train-file", type=Path, help="Training data file")
    parser.add_argument("--valid-file", type=Path, help="Validation data file")
    parser.add_argument("--model-file", type=Path, help="Where to write the trained model")
    parser.add_argument("--run-dir", type=Path, help="Directory for metrics and manifest")
    parser.add_argument(
        "--max-epochs", type=int, help="Stop with an error after this many epochs"
    )
    parser.add_argument(
        "--threshold", type=float, help="Validation MSE that ends training"
    )
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write a loss curve to the run dir"
    )
    parser.add_argument(
        "--interactive",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Prompt for readings after training",
    )
    parser.add_argument(
        "--load-model",
        type=Path,
        help="Skip training and query a previously exported model",
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        import yaml

        return yaml.safe_load(text) or {}
    return json.loads(text)


def build_config(args: argparse.Namespace) -> dict:
    """Resolve preset, override file and command-line flags, in that order."""

    config = pipelines.load_preset(args.preset)
    if args.config:
        config = pipelines.merge_config(config, _load_override(args.config))

    model_cfg = config.setdefault("model", {})
    train_cfg = config.setdefault("train", {})
    options = config.setdefault("data", {}).setdefault("options", {})
    if args.seed is not None:
        model_cfg["seed"] = args.seed
    if args.hidden is not None:
        model_cfg["hidden"] = args.hidden
    if args.rate is not None:
        train_cfg["lr"] = args.rate
    if args.train_file is not None:
        options["train_path"] = str(args.train_file)
    if args.valid_file is not None:
        options["valid_path"] = str(args.valid_file)
    if args.model_file is not None:
        train_cfg["model_file"] = str(args.model_file)
    if args.run_dir is not None:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.max_epochs is not None:
        train_cfg["max_epochs"] = args.max_epochs
    if args.threshold is not None:
        train_cfg["error_threshold"] = args.threshold
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return pipelines.resolve_config(config)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.load_model:
        try:
            network = load_model(args.load_model)
        except (OSError, ValueError, KeyError) as exc:
            raise SystemExit(f"Cannot load model: {exc}") from None
        interactive_loop(network)
        return

    try:
        config = build_config(args)
    except (KeyError, ValueError) as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from None

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    try:
        run = pipelines.execute(config)
    except DatasetError as exc:
        raise SystemExit(f"Dataset error: {exc}") from None

    result = run.result
    click.echo("Test results:")
    for line in format_results(run.network, run.valid):
        click.echo(line)
    if result.history:
        last = result.history[-1]
        click.echo(format_epoch(last.epoch, last.as_metrics()))

    if not result.converged:
        raise SystemExit(
            f"Validation MSE did not fall below {config['train']['error_threshold']} "
            f"within {result.epochs} epochs; no model written"
        )
    click.echo(f"Model written to {result.model_path}")

    if args.interactive:
        interactive_loop(run.network)


if __name__ == "__main__":
    main()
