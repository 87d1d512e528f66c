"""Tests for config.py - model tags, hyperparameter records and TrainingConfig."""

import pytest

from regression_engine.config import (
    LinearParams,
    ModelType,
    NeuralNetParams,
    TrainingConfig,
    TreeEnsembleParams,
    calculate_split_percentages,
    resolve_hyperparameters,
)
from regression_engine.errors import ConfigurationError, ValidationError


@pytest.mark.parametrize('tag, expected', [
    ('linear', ModelType.LINEAR),
    ('tree-ensemble', ModelType.TREE_ENSEMBLE),
    ('neural-net', ModelType.NEURAL_NET),
    ('linear-regression', ModelType.LINEAR),
    ('random-forest', ModelType.TREE_ENSEMBLE),
    ('Neural-Network', ModelType.NEURAL_NET),
    (ModelType.LINEAR, ModelType.LINEAR),
])
def test_model_type_parse(tag, expected):
    assert ModelType.parse(tag) is expected


def test_unknown_model_type():
    with pytest.raises(ConfigurationError, match='svm'):
        ModelType.parse('svm')


def test_defaults_per_family():
    assert resolve_hyperparameters('linear') == LinearParams()
    assert resolve_hyperparameters('tree-ensemble') == TreeEnsembleParams(num_trees=100, tree_depth=10)
    assert resolve_hyperparameters('neural-net') == NeuralNetParams(
        epochs=50, batch_size=32, learning_rate=0.001, hidden_layers=[64, 32], dropout=0.0
    )


def test_camel_case_keys_and_foreign_keys_ignored():
    params = resolve_hyperparameters('tree-ensemble', {'numTrees': 20, 'treeDepth': 4, 'epochs': 9})
    assert params == TreeEnsembleParams(num_trees=20, tree_depth=4)

    params = resolve_hyperparameters('neural-net', {
        'hiddenLayers': [16], 'learningRate': '0.01', 'batchSize': 8, 'dropout': 0.2, 'numTrees': 5,
    })
    assert params.hidden_layers == [16]
    assert params.learning_rate == 0.01
    assert params.batch_size == 8
    assert params.dropout == 0.2


def test_values_are_clamped():
    params = resolve_hyperparameters('tree-ensemble', {'num_trees': 10_000, 'tree_depth': 0})
    assert params.num_trees == 500
    assert params.tree_depth == 1

    params = resolve_hyperparameters('neural-net', {'epochs': 50_000, 'batch_size': 0, 'hidden_layers': [0, 3]})
    assert params.epochs == 1000
    assert params.batch_size == 1
    assert params.hidden_layers == [1, 3]


def test_none_values_take_defaults():
    params = resolve_hyperparameters('neural-net', {'epochs': None, 'dropout': None})
    assert params.epochs == 50
    assert params.dropout == 0.0


@pytest.mark.parametrize('overrides', [
    {'epochs': 'many'},
    {'hidden_layers': '64,32'},
    {'hidden_layers': []},
    {'dropout': 1.0},
    {'learning_rate': 0},
    {'batch_size': True},
])
def test_bad_neural_net_values(overrides):
    with pytest.raises(ValidationError):
        resolve_hyperparameters('neural-net', overrides)


def test_record_of_wrong_family():
    with pytest.raises(ConfigurationError):
        resolve_hyperparameters('linear', TreeEnsembleParams())


def test_record_passes_through_with_clamping():
    params = resolve_hyperparameters(ModelType.TREE_ENSEMBLE, TreeEnsembleParams(num_trees=900, tree_depth=5))
    assert params == TreeEnsembleParams(num_trees=500, tree_depth=5)


def test_training_config_build():
    config = TrainingConfig.build('y', ['a', 'b', 'a'], 'random-forest', 0.7, {'numTrees': 3})
    assert config.features == ['a', 'b']
    assert config.model_type is ModelType.TREE_ENSEMBLE
    assert config.hyperparameters.num_trees == 3
    assert config.split_ratio == 0.7
    assert config.coercion == 'lenient'


def test_training_config_rejects_unknown_coercion():
    with pytest.raises(ConfigurationError, match='coercion'):
        TrainingConfig.build('y', ['a'], 'linear', coercion='sloppy')


def test_calculate_split_percentages():
    assert calculate_split_percentages(0.8) == (80, 20)
    assert calculate_split_percentages(1.0) == (100, 0)
