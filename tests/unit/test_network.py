import numpy as np
import pytest

from sigmanet.core.activations import sigmoid, sigmoid_prime, sigmoid_scalar
from sigmanet.core.errors import DimensionError, TopologyError
from sigmanet.core.matrix import Matrix, map_elements
from sigmanet.training.costs import cross_entropy_cost, get_pairing, mean_square_error
from sigmanet.training.layer import Layer
from sigmanet.training.network import Network


def _column(values):
    return Matrix(np.asarray(values, dtype=float).reshape(-1, 1))


def _set_weight(net, layer_idx, i, j, value):
    layer = net.layers[layer_idx]
    weights = layer.weights.to_numpy()
    weights[i, j] = value
    layer.update(Matrix(weights), layer.bias)


@pytest.mark.parametrize(
    "inputs, sizes, expected",
    [(3, [6, 2], 3), (3, [1], 2), (3, [1, 50, 9, 1000, 2], 6)],
)
def test_layer_count(inputs, sizes, expected):
    net = Network(inputs, sizes, rng=0)
    assert net.layer_count == expected
    assert net.input_nodes == inputs
    assert net.output_nodes == sizes[-1]


@pytest.mark.parametrize("sizes", [[0], [3, 4, 0, 9], []])
def test_invalid_topology_fails_at_construction(sizes):
    with pytest.raises(TopologyError):
        Network(3, sizes)


def test_from_layers_checks_that_shapes_chain():
    first = Layer.initialise(3, 4, rng=0)
    with pytest.raises(TopologyError):
        Network.from_layers([first, Layer.initialise(5, 2, rng=0)])
    net = Network.from_layers([first, Layer.initialise(4, 2, rng=0)])
    assert net.describe() == [3, 4, 2]


def test_layer_initialisation_scale():
    layer = Layer.initialise(400, 300, rng=np.random.default_rng(0))
    weights = layer.weights.to_numpy()
    assert layer.weights.shape == (300, 400)
    assert layer.bias.shape == (300, 1)
    assert abs(weights.mean()) < 0.01
    assert weights.std() == pytest.approx(1 / np.sqrt(400), rel=0.05)


def test_layer_rejects_mismatched_bias():
    with pytest.raises(TopologyError):
        Layer(Matrix.zeros(2, 3), Matrix.zeros(3, 1))


def test_sigmoid_helpers_agree():
    z = Matrix([[-800.0, 0.0, 2.0]])
    out = sigmoid(z)
    assert np.all(np.isfinite(out.to_numpy()))
    assert out[0, 1] == pytest.approx(0.5)
    assert map_elements(sigmoid_scalar, z) == out
    assert sigmoid_prime(Matrix([[0.0]]))[0, 0] == pytest.approx(0.25)


def test_forward_returns_output_column_and_context():
    net = Network(3, [5, 4], rng=1)
    output, context = net.forward(_column([0.1, 0.2, 0.3]))
    assert output.shape == (4, 1)
    assert len(context.pre_activations) == 2
    assert len(context.activations) == 3
    assert context.output == output
    assert net.forward_prop(_column([0.1, 0.2, 0.3])) == output
    values = output.to_numpy()
    assert np.all((values > 0) & (values < 1))


def test_forward_rejects_wrong_input_shape():
    net = Network(3, [2], rng=0)
    with pytest.raises(DimensionError):
        net.forward(_column([1.0, 2.0]))


def test_mean_square_error_matches_reference_values():
    m1 = Matrix([[11.0, 5.0, 19.0, 3.6]])
    m2 = Matrix([[8.0, 7.0, 14.5, 3.3]])
    zeros = Matrix.zeros(1, 4)
    assert mean_square_error(m1, m2) == pytest.approx(16.67)
    assert mean_square_error(m1, zeros) == pytest.approx(259.98)
    assert mean_square_error(zeros, m1) == pytest.approx(259.98)


def test_cross_entropy_is_clamped_for_saturated_outputs():
    bad = cross_entropy_cost(Matrix([[1.0]]), Matrix([[0.0]]))
    assert np.isfinite(bad)
    assert bad > 20.0
    assert cross_entropy_cost(Matrix([[1.0]]), Matrix([[1.0]])) < 1e-9
    with pytest.raises(DimensionError):
        cross_entropy_cost(Matrix([[0.5, 0.5]]), Matrix([[1.0]]))


def test_unknown_cost_is_rejected():
    with pytest.raises(ValueError):
        get_pairing("hinge")
    with pytest.raises(ValueError):
        Network(2, [2], cost="hinge")


@pytest.mark.parametrize("cost", ["cross_entropy", "quadratic"])
def test_back_prop_matches_numerical_gradient_of_reported_cost(cost):
    net = Network(3, [4, 2], cost=cost, rng=np.random.default_rng(3))
    x = _column([0.5, -0.2, 0.9])
    y = _column([0.0, 1.0])
    pairing = get_pairing(cost)

    _, context = net.forward(x)
    grads = net.back_prop(context, y)
    assert [g.weights.shape for g in grads] == [(4, 3), (2, 4)]
    assert [g.bias.shape for g in grads] == [(4, 1), (2, 1)]

    eps = 1e-6
    for layer_idx, (i, j) in [(0, (1, 2)), (1, (0, 3))]:
        original = net.layers[layer_idx].weights[i, j]
        _set_weight(net, layer_idx, i, j, original + eps)
        plus = pairing.cost(net.forward_prop(x), y)
        _set_weight(net, layer_idx, i, j, original - eps)
        minus = pairing.cost(net.forward_prop(x), y)
        _set_weight(net, layer_idx, i, j, original)
        numeric = (plus - minus) / (2 * eps)
        assert grads[layer_idx].weights[i, j] == pytest.approx(numeric, rel=1e-4, abs=1e-8)


def test_back_prop_is_reentrant_across_contexts():
    net = Network(2, [3, 2], rng=4)
    xa, ya = _column([0.1, 0.9]), _column([1.0, 0.0])
    xb = _column([0.8, 0.3])
    _, context_a = net.forward(xa)
    expected = net.back_prop(context_a, ya)
    net.forward(xb)
    again = net.back_prop(context_a, ya)
    for first, second in zip(expected, again):
        assert first.weights == second.weights
        assert first.bias == second.bias


def test_update_with_batch_changes_every_layer():
    net = Network(3, [4, 2], rng=5)
    before = [(layer.weights, layer.bias) for layer in net.layers]
    batch = [(_column([0.2, 0.4, 0.6]), _column([1.0, 0.0])), (_column([0.9, 0.1, 0.3]), _column([0.0, 1.0]))]
    net.update_with_batch(batch, alpha=0.5, lam=0.0, n=2)
    for (weights, bias), layer in zip(before, net.layers):
        assert weights != layer.weights or bias != layer.bias


def test_update_with_empty_batch_only_applies_weight_decay():
    net = Network(2, [3], rng=6)
    weights, bias = net.layers[0].weights, net.layers[0].bias
    net.update_with_batch([], alpha=0.1, lam=1.0, n=10)
    assert net.layers[0].weights == weights * 0.99
    assert net.layers[0].bias == bias


def test_evaluate_cost_adds_l2_penalty_over_all_layers():
    net = Network(2, [3, 2], rng=7)
    data = [(_column([0.2, 0.7]), _column([0.0, 1.0])), (_column([0.6, 0.1]), _column([1.0, 0.0]))]
    squared = sum(float(np.sum(layer.weights.to_numpy() ** 2)) for layer in net.layers)
    base = net.evaluate_cost(data, 0.0)
    regularised = net.evaluate_cost(data, 0.4)
    assert regularised - base == pytest.approx(0.5 * 0.4 / len(data) * squared)


def test_accuracy_and_predict():
    net = Network(2, [2], rng=8)
    x = _column([0.3, 0.3])
    guess = int(np.argmax(net.forward_prop(x).to_numpy()))
    right = np.zeros((2, 1))
    right[guess] = 1.0
    wrong = 1.0 - right
    data = [(x, Matrix(right)), (x, Matrix(wrong))]

    assert net.evaluate_accuracy(data[:1]) == 1.0
    assert net.evaluate_accuracy(data) == 0.5
    predictions = net.predict(data)
    assert [p.predicted for p in predictions] == [guess, guess]
    assert [p.label for p in predictions] == [guess, 1 - guess]


def test_evaluation_of_empty_dataset_fails():
    net = Network(2, [2], rng=0)
    with pytest.raises(ValueError):
        net.evaluate_accuracy([])
    with pytest.raises(ValueError):
        net.evaluate_cost([], 0.1)


@pytest.mark.parametrize("n", [0, -5])
def test_update_with_batch_rejects_non_positive_set_size(n):
    net = Network(2, [3], rng=6)
    weights = net.layers[0].weights
    with pytest.raises(ValueError):
        net.update_with_batch([], alpha=0.1, lam=1.0, n=n)
    assert net.layers[0].weights == weights
