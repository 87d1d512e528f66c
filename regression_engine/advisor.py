"""Heuristic model advisor.

Looks at the raw (unnormalized, unsplit) data and recommends a model family,
a ranked feature subset and hyperparameters without training anything. The
signals are cheap: per-feature Pearson correlation with the target and a
curvature proxy comparing linear and squared Gram projections.
"""

import logging
import math
from dataclasses import asdict
from typing import Any, Dict, Mapping, Sequence

import numpy as np

from .config import (
    LENIENT,
    MAX_RANKED_FEATURES,
    LinearParams,
    ModelSuggestion,
    ModelType,
    NeuralNetParams,
    TreeEnsembleParams,
)
from .preprocessing import coerce_numeric

logger = logging.getLogger(__name__)

LINEAR_MAX_NONLINEARITY = 0.3
LINEAR_MIN_CORRELATION = 0.7
NEURAL_MIN_FEATURES = 5
NEURAL_MIN_NONLINEARITY = 0.7


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson r, or 0.0 when either series is constant."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    x_centered = x - x.mean()
    y_centered = y - y.mean()
    denominator = math.sqrt(float(np.sum(x_centered ** 2)) * float(np.sum(y_centered ** 2)))
    if denominator == 0 or not math.isfinite(denominator):
        return 0.0
    return float(np.sum(x_centered * y_centered) / denominator)


def feature_correlations(X: np.ndarray, y: np.ndarray) -> np.ndarray:
    return np.array([pearson_correlation(X[:, i], y) for i in range(X.shape[1])])


def non_linearity(X: np.ndarray, y: np.ndarray) -> float:
    """Curvature proxy in [0, 1]; a branching heuristic, not a statistic.

    Each Gram matrix (``X·Xᵀ`` and ``X²·Xᵀ``) is reduced to its row means and
    correlated with the target; the proxy is the absolute difference of the
    two correlations.
    """
    # row mean of A·Xᵀ equals A·mean(X), which avoids building the n×n matrix
    column_means = X.mean(axis=0)
    linear = X @ column_means
    squared = (X ** 2) @ column_means
    return min(1.0, abs(pearson_correlation(squared, y) - pearson_correlation(linear, y)))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def suggest_hyperparameters(model_type: ModelType, feature_count: int, nonlinearity: float) -> Dict[str, Any]:
    """Deterministic hyperparameters for the chosen family, clamped to safe ranges."""
    if model_type is ModelType.NEURAL_NET:
        params = NeuralNetParams(
            epochs=min(100, 50 + feature_count * 10),
            batch_size=32,
            learning_rate=0.001 if nonlinearity > 0.5 else 0.01,
            hidden_layers=[
                max(1, min(256, _round_half_up(feature_count * 8))),
                max(1, min(128, _round_half_up(feature_count * 4))),
            ],
            dropout=0.3 if nonlinearity > 0.5 else 0.1,
        )
    elif model_type is ModelType.TREE_ENSEMBLE:
        params = TreeEnsembleParams(
            num_trees=min(200, 100 + feature_count * 10),
            tree_depth=min(20, 10 + _round_half_up(feature_count / 2)),
        )
    else:
        params = LinearParams()
    return asdict(params)


def suggest(rows: Sequence[Mapping[str, Any]], candidate_features: Sequence[str], target: str) -> ModelSuggestion:
    """Recommend a model family, top features and hyperparameters for ``target``."""
    features = list(dict.fromkeys(candidate_features))
    numeric = coerce_numeric(rows, features + [target], mode=LENIENT)
    X = numeric[features].to_numpy(dtype=float)
    y = numeric[target].to_numpy(dtype=float)

    correlations = feature_correlations(X, y)
    mean_correlation = float(np.mean(np.abs(correlations)))
    nonlinearity = non_linearity(X, y)
    feature_count = len(features)

    if nonlinearity < LINEAR_MAX_NONLINEARITY and mean_correlation > LINEAR_MIN_CORRELATION:
        model_type, confidence = ModelType.LINEAR, 0.8
        rationale = 'Strong linear correlations detected with low non-linearity'
    elif feature_count > NEURAL_MIN_FEATURES or nonlinearity > NEURAL_MIN_NONLINEARITY:
        model_type, confidence = ModelType.NEURAL_NET, 0.75
        rationale = 'Complex relationships detected, suggesting deep learning approach'
    else:
        model_type, confidence = ModelType.TREE_ENSEMBLE, 0.85
        rationale = 'Moderate complexity with potential non-linear relationships'

    # stable sort keeps the caller's order among equally correlated features
    order = sorted(range(feature_count), key=lambda i: -abs(correlations[i]))
    ranked_features = [features[i] for i in order[:MAX_RANKED_FEATURES]]

    logger.info(
        "Suggested %s (confidence %.2f): mean |r| = %.3f, non-linearity = %.3f, %d features",
        model_type.value, confidence, mean_correlation, nonlinearity, feature_count,
    )

    return {
        'model_type': model_type.value,
        'confidence': confidence,
        'rationale': rationale,
        'ranked_features': ranked_features,
        'hyperparameters': suggest_hyperparameters(model_type, feature_count, nonlinearity),
    }


# ---------------------------------------------------------------------------
# Features implemented in this module
# - Pearson correlation with constant-column guard
# - Gram-projection non-linearity proxy
# - First-match decision rule over linear / neural-net / tree-ensemble
# - Top-5 feature ranking by absolute correlation
# - Clamped hyperparameter derivation per model family
# ---------------------------------------------------------------------------
