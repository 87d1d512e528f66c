"""Caller-facing training, advisory and reporting entry points.

Each call works on its own snapshot of rows and returns a fresh result; no
state is kept between calls, so concurrent calls need no coordination.
"""

import logging
import time
from typing import Any, Mapping, Optional, Sequence, Union

import numpy as np

from . import advisor, insights
from .config import (
    DEFAULT_SPLIT_RATIO,
    LENIENT,
    HyperParams,
    ModelSuggestion,
    ModelType,
    TrainingConfig,
    TrainingResult,
)
from .errors import NumericDegeneracyError, TrainingError, ValidationError
from .metrics import compute_metrics
from .models import ProgressCallback, StopCheck, create_backend
from .preprocessing import denormalize, normalize
from .utils import ensure_valid_config

logger = logging.getLogger(__name__)


def train_model(rows: Sequence[Mapping[str, Any]], target: str, features: Sequence[str],
                model_type: Union[str, ModelType], split_ratio: float = DEFAULT_SPLIT_RATIO,
                hyperparameters: Optional[Union[Mapping[str, Any], HyperParams]] = None, *,
                coercion: str = LENIENT,
                on_epoch: Optional[ProgressCallback] = None,
                should_stop: Optional[StopCheck] = None) -> TrainingResult:
    """Train one model on the leading rows and evaluate it on the rest.

    Raises ``ValidationError`` for empty rows/features, a target listed among
    the features or a bad split ratio, ``ConfigurationError`` for an unknown
    model type and ``TrainingError`` when the backend fails.
    """
    ensure_valid_config(rows, target, features, split_ratio)
    config = TrainingConfig.build(target, features, model_type, split_ratio, hyperparameters, coercion)

    logger.info(
        "Starting training with target: %s, model: %s, features: %s, split: %.2f",
        config.target, config.model_type.value, config.features, config.split_ratio,
    )
    start_time = time.time()

    try:
        data = normalize(rows, config.target, config.features, config.split_ratio, config.coercion)
    except NumericDegeneracyError as e:
        raise TrainingError(str(e)) from e
    backend = create_backend(config.model_type, config.hyperparameters,
                             on_epoch=on_epoch, should_stop=should_stop)
    backend.fit(data.train_x, data.train_y)
    predictions = denormalize(backend.predict(data.test_x), data.target_stats)
    if not np.all(np.isfinite(predictions)):
        raise TrainingError(
            f"{config.model_type.value} predictions overflow when mapped back to '{config.target}' units"
        )
    metrics = compute_metrics(data.test_y_raw, predictions)

    logger.info(
        "%s completed - R2: %.3f, RMSE: %.4f, Time: %.2fs",
        config.model_type.value, metrics['r2'], metrics['rmse'], time.time() - start_time,
    )

    return {
        'model_type': config.model_type.value,
        'metrics': metrics,
        'predictions': [float(p) for p in predictions],
        'actuals': [float(a) for a in data.test_y_raw],
    }


def get_model_suggestions(rows: Sequence[Mapping[str, Any]], candidate_features: Sequence[str],
                          target: str) -> ModelSuggestion:
    """Recommend a model family, features and hyperparameters without training."""
    ensure_valid_config(rows, target, candidate_features)
    return advisor.suggest(rows, candidate_features, target)


def analyze_results(model_type: Union[str, ModelType], metrics: Mapping[str, float],
                    predictions: Sequence[float], actuals: Sequence[float]) -> str:
    """Rule-based commentary for a finished run."""
    if len(predictions) != len(actuals):
        raise ValidationError(
            f"Predictions and actuals lengths differ: {len(predictions)} vs {len(actuals)}"
        )
    return insights.analyze_results(model_type, metrics, predictions, actuals)
