import click
import numpy as np

from nn4md.core.network import build
from nn4md.core.types import Dataset
from nn4md.inference import format_results, interactive_loop, predict


def _network():
    return build(8, 3, 2, np.random.default_rng(0))


def test_predict_scales_raw_readings():
    net = _network()
    outputs, answer = predict(net, [1024] * 8)
    assert net.input_activation[:8].tolist() == [1.0] * 8
    assert outputs.shape == (2,)
    assert answer in (0, 1)


def test_interactive_loop_reprompts_on_bad_value_and_exits():
    net = _network()
    answers = iter(["abc"] + ["512"] * 8 + ["512", "quit"])
    lines = []
    count = interactive_loop(net, input_fn=lambda prompt: next(answers), output_fn=lines.append)
    assert count == 1
    assert any("Not a number" in click.unstyle(line) for line in lines)
    assert sum(1 for line in lines if line.startswith("Answer: ")) == 1


def test_interactive_loop_stops_on_eof():
    def _eof(prompt):
        raise EOFError

    assert interactive_loop(_network(), input_fn=_eof, output_fn=lambda line: None) == 0


def test_format_results_marks_each_sample():
    net = _network()
    valid = Dataset(inputs=np.full((3, 8), 0.5), targets=np.eye(2)[[0, 1, 0]])
    lines = [click.unstyle(line) for line in format_results(net, valid)]
    assert len(lines) == 3
    assert [line.split("->")[0].strip() for line in lines] == ["0", "1", "0"]
