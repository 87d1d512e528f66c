"""Tests for models.py - backend factory and the three backends."""

import numpy as np
import pytest

from regression_engine.config import EpochProgress, ModelType, NeuralNetParams, TreeEnsembleParams
from regression_engine.errors import ConfigurationError, TrainingCancelled, TrainingError
from regression_engine.models import (
    LinearBackend,
    NeuralNetBackend,
    TreeEnsembleBackend,
    create_backend,
)


@pytest.fixture
def regression_data():
    rng = np.random.default_rng(7)
    X = rng.normal(size=(40, 3))
    y = 1.5 * X[:, 0] - 0.5 * X[:, 1] + 0.1 * rng.normal(size=40)
    return X, y


# ============================================================================
# Factory
# ============================================================================

@pytest.mark.parametrize('tag, cls', [
    ('linear', LinearBackend),
    ('tree-ensemble', TreeEnsembleBackend),
    ('neural-net', NeuralNetBackend),
    ('random-forest', TreeEnsembleBackend),
])
def test_create_backend_dispatch(tag, cls):
    backend = create_backend(tag)
    assert isinstance(backend, cls)
    assert backend.model_type is ModelType.parse(tag)


def test_create_backend_unknown_tag():
    with pytest.raises(ConfigurationError):
        create_backend('gradient-boosting')


def test_create_backend_applies_hyperparameters():
    backend = create_backend('tree-ensemble', {'numTrees': 7, 'treeDepth': 3})
    assert backend.params == TreeEnsembleParams(num_trees=7, tree_depth=3)


# ============================================================================
# Linear
# ============================================================================

def test_linear_uses_every_feature(regression_data):
    X, y = regression_data
    backend = LinearBackend().fit(X, y)
    assert backend.model_.coef_.shape == (3,)
    assert backend.model_.coef_[0] == pytest.approx(1.5, abs=0.1)
    assert backend.model_.coef_[1] == pytest.approx(-0.5, abs=0.1)


def test_linear_exact_fit():
    X = np.arange(10, dtype=float).reshape(-1, 1)
    y = 3 * X.ravel() - 2
    predictions = LinearBackend().fit(X, y).predict(np.array([[20.0], [21.0]]))
    np.testing.assert_allclose(predictions, [58.0, 61.0])


def test_non_finite_predictions_raise(regression_data, monkeypatch):
    X, y = regression_data
    backend = LinearBackend().fit(X, y)
    monkeypatch.setattr(LinearBackend, '_predict', lambda self, X: np.full(len(X), np.nan))
    with pytest.raises(TrainingError, match='non-finite'):
        backend.predict(X)


def test_mismatched_shapes_raise():
    with pytest.raises(TrainingError):
        LinearBackend().fit(np.zeros((4, 2)), np.zeros(3))


# ============================================================================
# Tree ensemble
# ============================================================================

def test_tree_ensemble_configuration(regression_data):
    X, y = regression_data
    backend = TreeEnsembleBackend(TreeEnsembleParams(num_trees=15, tree_depth=4)).fit(X, y)
    forest = backend.model_
    assert forest.n_estimators == 15
    assert forest.max_depth == 4
    assert forest.max_features == 1  # floor(sqrt(3))
    assert forest.bootstrap is True
    assert len(forest.estimators_) == 15


def test_tree_ensemble_is_reproducible(regression_data):
    X, y = regression_data
    params = TreeEnsembleParams(num_trees=10, tree_depth=5)
    first = TreeEnsembleBackend(params).fit(X, y).predict(X[:5])
    second = TreeEnsembleBackend(params).fit(X, y).predict(X[:5])
    np.testing.assert_array_equal(first, second)


# ============================================================================
# Neural net
# ============================================================================

def test_neural_net_emits_progress_each_epoch(regression_data):
    X, y = regression_data
    seen = []
    backend = NeuralNetBackend(NeuralNetParams(epochs=4, batch_size=8, hidden_layers=[8, 4]), on_epoch=seen.append)
    backend.fit(X, y)

    assert [p.epoch for p in seen] == [1, 2, 3, 4]
    assert all(isinstance(p, EpochProgress) and p.epochs == 4 for p in seen)
    assert all(p.val_loss is not None for p in seen)
    assert seen[-1].fraction == 1.0
    assert backend.history_ == seen

    predictions = backend.predict(X)
    assert predictions.shape == (40,)
    assert np.all(np.isfinite(predictions))


def test_neural_net_architecture_with_dropout():
    backend = NeuralNetBackend(NeuralNetParams(epochs=1, hidden_layers=[6, 3], dropout=0.25))
    backend.fit(np.random.default_rng(1).normal(size=(10, 2)), np.arange(10, dtype=float))
    kinds = [type(layer).__name__ for layer in backend.network_]
    assert kinds == ['Linear', 'ReLU', 'Dropout', 'Linear', 'ReLU', 'Dropout', 'Linear']
    assert backend.network_[0].in_features == 2
    assert backend.network_[-1].out_features == 1
    assert len(backend.kernels_) == 2


def test_neural_net_without_dropout_has_no_dropout_layers():
    backend = NeuralNetBackend(NeuralNetParams(epochs=1, hidden_layers=[4]))
    backend.fit(np.ones((5, 1)), np.arange(5, dtype=float))
    assert [type(layer).__name__ for layer in backend.network_] == ['Linear', 'ReLU', 'Linear']


def test_neural_net_learns_linear_signal(regression_data):
    X, y = regression_data
    backend = NeuralNetBackend(NeuralNetParams(epochs=150, batch_size=8, learning_rate=0.01, hidden_layers=[16]))
    backend.fit(X, y)
    assert backend.history_[-1].loss < backend.history_[0].loss


def test_neural_net_is_reproducible(regression_data):
    X, y = regression_data
    params = NeuralNetParams(epochs=3, batch_size=16, hidden_layers=[8])
    first = NeuralNetBackend(params).fit(X, y).predict(X[:5])
    second = NeuralNetBackend(params).fit(X, y).predict(X[:5])
    np.testing.assert_allclose(first, second)


def test_neural_net_cancellation_between_epochs(regression_data):
    X, y = regression_data
    seen = []
    backend = NeuralNetBackend(
        NeuralNetParams(epochs=10, hidden_layers=[4]),
        on_epoch=seen.append,
        should_stop=lambda: len(seen) >= 2,
    )
    with pytest.raises(TrainingCancelled) as excinfo:
        backend.fit(X, y)
    assert excinfo.value.epoch == 2
    assert len(seen) == 2


def test_neural_net_single_row_skips_validation():
    seen = []
    backend = NeuralNetBackend(NeuralNetParams(epochs=2, hidden_layers=[2]), on_epoch=seen.append)
    backend.fit(np.array([[0.5]]), np.array([1.0]))
    assert [p.val_loss for p in seen] == [None, None]
