import numpy as np
import pytest

from nn4md.core.activations import logistic, logistic_deriv
from nn4md.core.engine import backpropagate, forward
from nn4md.core.network import WEIGHT_RANGE, Network, build


def _network(seed: int = 0, dims=(8, 3, 2)) -> Network:
    return build(*dims, np.random.default_rng(seed))


def test_build_allocates_bias_terminated_layers():
    net = _network()
    assert net.input_activation.shape == (9,)
    assert net.hidden_activation.shape == (4,)
    assert net.output_activation.shape == (2,)
    assert net.hidden_weights.shape == (9, 3)
    assert net.output_weights.shape == (4, 2)
    assert net.input_activation[-1] == 1.0
    assert net.hidden_activation[-1] == 1.0
    assert net.parameter_count() == 9 * 3 + 4 * 2


def test_build_draws_weights_from_symmetric_range():
    net = _network(seed=3, dims=(16, 12, 4))
    for weights in (net.hidden_weights, net.output_weights):
        assert np.all(np.abs(weights) <= WEIGHT_RANGE)
    assert np.any(net.hidden_weights < 0) and np.any(net.hidden_weights > 0)


def test_build_is_reproducible_per_seed():
    a, b, c = _network(0), _network(0), _network(1)
    assert np.array_equal(a.hidden_weights, b.hidden_weights)
    assert np.array_equal(a.output_weights, b.output_weights)
    assert not np.array_equal(a.hidden_weights, c.hidden_weights)


def test_build_without_rng_uses_seed_keyword():
    assert np.array_equal(
        build(8, 3, 2, seed=5).hidden_weights, _network(5).hidden_weights
    )


@pytest.mark.parametrize("dims", [(0, 3, 2), (8, 0, 2), (8, 3, 0)])
def test_network_rejects_empty_layers(dims):
    with pytest.raises(ValueError):
        Network(*dims)


def test_state_dict_roundtrip_and_shape_check():
    net = _network(0)
    state = net.state_dict()
    other = _network(1)
    other.load_state_dict(state)
    assert np.array_equal(other.hidden_weights, net.hidden_weights)
    state["hidden_weights"][0, 0] = 42.0
    assert net.hidden_weights[0, 0] != 42.0
    with pytest.raises(ValueError):
        other.load_state_dict(
            {"hidden_weights": np.zeros((3, 3)), "output_weights": np.zeros((4, 2))}
        )
    with pytest.raises(KeyError):
        other.load_state_dict({"hidden_weights": np.zeros((9, 3))})


def test_logistic_and_derivative():
    assert logistic(np.array(0.0)) == 0.5
    assert logistic_deriv(np.array(0.5)) == 0.25
    assert logistic(np.array([-50.0, 50.0])).tolist() == pytest.approx([0.0, 1.0], abs=1e-12)


def test_forward_matches_manual_computation():
    net = _network(2)
    inputs = np.linspace(0.1, 0.8, 8)
    hidden = [
        1.0 / (1.0 + np.exp(-sum(a * net.hidden_weights[i, h] for i, a in enumerate([*inputs, 1.0]))))
        for h in range(3)
    ]
    expected = [
        1.0 / (1.0 + np.exp(-sum(a * net.output_weights[j, o] for j, a in enumerate([*hidden, 1.0]))))
        for o in range(2)
    ]
    outputs = forward(net, inputs)
    assert outputs.tolist() == pytest.approx(expected, rel=1e-12)
    assert outputs is net.output_activation


def test_forward_is_deterministic():
    net = _network(4)
    inputs = np.full(8, 0.5)
    first = forward(net, inputs).copy()
    forward(net, np.zeros(8))
    second = forward(net, inputs).copy()
    assert np.array_equal(first, second)


def test_forward_rejects_wrong_input_length():
    with pytest.raises(ValueError):
        forward(_network(), np.zeros(7))


def test_backpropagate_reduces_error_on_same_example():
    net = _network(6)
    inputs = np.linspace(0.0, 1.0, 8)
    targets = np.array([1.0, 0.0])
    forward(net, inputs)
    before = backpropagate(net, targets, learning_rate=0.05)
    after = float(np.sum((targets - forward(net, inputs)) ** 2))
    assert before > 0
    assert after < before


def test_backpropagate_returns_pre_update_error():
    net = _network(7)
    inputs = np.full(8, 0.25)
    targets = np.array([0.0, 1.0])
    outputs = forward(net, inputs).copy()
    sse = backpropagate(net, targets, learning_rate=0.5)
    assert sse == pytest.approx(float(np.sum((targets - outputs) ** 2)))


def test_backpropagate_uses_updated_output_weights_for_hidden_deltas():
    net = _network(8)
    inputs = np.linspace(0.2, 0.9, 8)
    targets = np.array([1.0, 0.0])
    lr = 0.3
    forward(net, inputs)
    in_act = net.input_activation.copy()
    hid_act = net.hidden_activation.copy()
    out_act = net.output_activation.copy()
    out_w = net.output_weights.copy()
    hid_w = net.hidden_weights.copy()

    out_delta = out_act * (1 - out_act) * (out_act - targets)
    for h in range(4):
        for o in range(2):
            out_w[h, o] -= lr * out_delta[o] * hid_act[h]
    for h in range(3):
        total = sum(out_delta[o] * out_w[h, o] for o in range(2))
        hid_delta = hid_act[h] * (1 - hid_act[h]) * total
        for i in range(9):
            hid_w[i, h] -= lr * hid_delta * in_act[i]

    backpropagate(net, targets, lr)
    assert np.allclose(net.output_weights, out_w, rtol=0, atol=1e-12)
    assert np.allclose(net.hidden_weights, hid_w, rtol=0, atol=1e-12)


def test_bias_slots_survive_training_steps():
    net = _network(9)
    rng = np.random.default_rng(0)
    for _ in range(50):
        forward(net, rng.uniform(0, 1, size=8))
        backpropagate(net, np.eye(2)[rng.integers(0, 2)], 0.5)
    assert net.input_activation[-1] == 1.0
    assert net.hidden_activation[-1] == 1.0
