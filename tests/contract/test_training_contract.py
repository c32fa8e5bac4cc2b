import numpy as np
import pytest

from sigmanet.core.types import EpochRecord
from sigmanet.data.synthetic import make_blobs
from sigmanet.data.vectorize import vectorize
from sigmanet.reporting.metrics import MetricsCapture
from sigmanet.training.network import Network


def _blobs(n=200, classes=2, seed=0):
    return vectorize(make_blobs(n, 2, classes, spread=0.4, seed=seed), classes)


def test_training_improves_cost_and_accuracy():
    data = _blobs()
    train, val = data[:160], data[160:]
    net = Network(2, [8, 2], rng=0)
    history = net.train(train, epochs=30, batch_size=10, alpha=0.3, lam=0.0, validation_set=val, rng=1)

    assert len(history) == 30
    assert all(isinstance(record, EpochRecord) for record in history)
    assert [record.epoch for record in history] == list(range(30))
    assert history[-1].training_cost < history[0].training_cost
    assert history[-1].training_accuracy > 0.85
    assert history[-1].validation_accuracy > 0.8
    for record in history:
        assert 0.0 <= record.training_accuracy <= 1.0
        assert 0.0 <= record.validation_accuracy <= 1.0


def test_training_is_reproducible_with_seeds():
    data = _blobs(n=60, classes=3, seed=2)

    def run():
        net = Network(2, [5, 3], rng=np.random.default_rng(9))
        history = net.train(
            data, epochs=3, batch_size=7, alpha=0.2, lam=0.01, validation_set=data[:10], rng=4
        )
        return history, net.forward_prop(data[0].features)

    first_history, first_out = run()
    second_history, second_out = run()
    assert first_history == second_history
    assert first_out == second_out


def test_training_does_not_reorder_callers_dataset():
    data = _blobs(n=30)
    before = [id(example) for example in data]
    Network(2, [2], rng=0).train(data, epochs=2, batch_size=4, alpha=0.1, lam=0.0, rng=0)
    assert [id(example) for example in data] == before


@pytest.mark.parametrize(
    "drop_remainder, expected",
    [(True, [3, 3]), (False, [3, 3, 1])],
)
def test_remainder_batch_policy(monkeypatch, drop_remainder, expected):
    data = _blobs(n=7)
    net = Network(2, [2], rng=0)
    seen = []

    def record(batch, alpha, lam, n):
        seen.append(len(batch))
        assert n == 7

    monkeypatch.setattr(net, "update_with_batch", record)
    net.train(data, epochs=1, batch_size=3, alpha=0.1, lam=0.0, rng=0, drop_remainder=drop_remainder)
    assert seen == expected


def test_missing_validation_set_reports_nan():
    history = Network(2, [2], rng=0).train(_blobs(n=20), epochs=1, batch_size=5, alpha=0.1, lam=0.0)
    assert np.isnan(history[0].validation_cost)
    assert np.isnan(history[0].validation_accuracy)
    assert np.isfinite(history[0].training_cost)


def test_callbacks_receive_epoch_metrics():
    capture = MetricsCapture()
    calls = []
    Network(2, [2], rng=0).train(
        _blobs(n=20),
        epochs=2,
        batch_size=5,
        alpha=0.1,
        lam=0.0,
        validation_set=_blobs(n=10, seed=3),
        callbacks=[capture, lambda epoch, metrics: calls.append(epoch)],
    )
    assert [epoch for epoch, _ in capture.history] == [0, 1]
    assert set(capture.last) == {"train_cost", "val_cost", "train_accuracy", "val_accuracy"}
    assert calls == [0, 1]


@pytest.mark.parametrize(
    "kwargs",
    [{"epochs": -1, "batch_size": 2}, {"epochs": 1, "batch_size": 0}],
)
def test_invalid_hyper_parameters(kwargs):
    net = Network(2, [2], rng=0)
    with pytest.raises(ValueError):
        net.train(_blobs(n=10), alpha=0.1, lam=0.0, **kwargs)


def test_malformed_batch_aborts_training():
    from sigmanet.core.errors import DimensionError
    from sigmanet.core.matrix import Matrix

    data = _blobs(n=10)
    data[4] = (Matrix.zeros(3, 1), data[4].label)
    with pytest.raises(DimensionError):
        Network(2, [2], rng=0).train(data, epochs=1, batch_size=10, alpha=0.1, lam=0.0)
