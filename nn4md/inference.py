"""Inference helpers: validation listing and the interactive prompt."""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple

import click
import numpy as np

from .core.engine import forward
from .core.network import Network
from .core.types import Array, Dataset
from .data.tsv import INPUT_SCALE
from .training.metrics import argmax_class, evaluate

EXIT_COMMANDS = frozenset({"q", "quit", "exit"})


def predict(
    network: Network, raw_inputs: Sequence[float], input_scale: float = INPUT_SCALE
) -> Tuple[Array, int]:
    """Scale raw detector readings, forward them and return outputs and class."""

    scaled = np.asarray(raw_inputs, dtype=np.float64) / input_scale
    outputs = forward(network, scaled).copy()
    return outputs, argmax_class(outputs)


def format_results(network: Network, valid: Dataset) -> List[str]:
    """``expected -> predicted`` lines for every validation sample.

    Correct lines are green, wrong ones red.
    """

    evaluation = evaluate(network, valid)
    lines = []
    for expected, predicted in zip(evaluation.expected, evaluation.predicted):
        colour = "green" if expected == predicted else "red"
        lines.append(click.style(f"{expected}  ->  {predicted}", fg=colour))
    return lines


def interactive_loop(
    network: Network,
    *,
    input_fn: Callable[[str], str] | None = None,
    output_fn: Callable[[str], None] = click.echo,
    input_scale: float = INPUT_SCALE,
) -> int:
    """Prompt for readings until an exit command or EOF; return queries answered."""

    input_fn = input_fn or input
    answered = 0
    output_fn("--- TESTING ---")
    output_fn(f"Enter {network.input_size} readings per query, 'q' to quit.")
    while True:
        output_fn("Input test data:")
        readings: List[float] = []
        while len(readings) < network.input_size:
            try:
                text = input_fn(f"{len(readings) + 1}:").strip()
            except EOFError:
                return answered
            if text.lower() in EXIT_COMMANDS:
                return answered
            try:
                readings.append(float(text))
            except ValueError:
                output_fn(click.style(f"Not a number: {text!r}", fg="yellow"))
        outputs, answer = predict(network, readings, input_scale)
        output_fn("Outputs:")
        output_fn(np.array2string(outputs, precision=6))
        output_fn(f"Answer: {answer}")
        answered += 1


__all__ = ["EXIT_COMMANDS", "format_results", "interactive_loop", "predict"]
