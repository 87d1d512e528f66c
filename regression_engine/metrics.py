"""Regression metrics on the original target scale."""

import logging
from typing import Sequence

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from .config import MetricSet
from .errors import NumericDegeneracyError, ValidationError

logger = logging.getLogger(__name__)


def _as_pair(actual: Sequence[float], predicted: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    actual = np.asarray(actual, dtype=float).ravel()
    predicted = np.asarray(predicted, dtype=float).ravel()
    if actual.shape != predicted.shape:
        raise ValidationError(
            f"Actual and predicted lengths differ: {actual.shape[0]} vs {predicted.shape[0]}"
        )
    if actual.size == 0:
        raise ValidationError("Cannot compute metrics on an empty test set")
    return actual, predicted


def compute_metrics(actual: Sequence[float], predicted: Sequence[float], strict: bool = False) -> MetricSet:
    """Compute MSE, RMSE, R² and MAE.

    R² is clamped to [0, 1]. When ``actual`` has no variance R² is 1 for an
    exact fit and 0 otherwise; with ``strict=True`` that case raises
    ``NumericDegeneracyError`` instead.
    """
    actual, predicted = _as_pair(actual, predicted)

    mse = float(mean_squared_error(actual, predicted))
    mae = float(mean_absolute_error(actual, predicted))

    ss_total = float(np.sum((actual - actual.mean()) ** 2))
    if ss_total == 0:
        if strict:
            raise NumericDegeneracyError("R² is undefined for a zero-variance target")
        logger.warning("Target has zero variance over %d test rows; R² falls back to exact-fit check", actual.size)
    # force_finite maps the zero-variance case to 1.0 (exact) or 0.0
    r2 = float(r2_score(actual, predicted)) if actual.size > 1 else float(ss_total == 0 and mse == 0)

    return {
        'mse': mse,
        'rmse': float(np.sqrt(mse)),
        'r2': min(1.0, max(0.0, r2)),
        'mae': mae,
    }


def accuracy_percentage(mse: float, actual: Sequence[float]) -> float:
    """Range-normalized accuracy used only to rank runs against each other.

    ``clamp(0, 100, (1 - mse / range²) * 100)``. This is a display heuristic,
    not a metric of record; use R² for model quality.
    """
    actual = np.asarray(actual, dtype=float)
    if actual.size == 0:
        return 0.0
    value_range = float(actual.max() - actual.min())
    if value_range == 0:
        return 100.0 if mse == 0 else 0.0
    return float(min(100.0, max(0.0, (1 - mse / value_range ** 2) * 100)))


# ---------------------------------------------------------------------------
# Features implemented in this module
# - compute_metrics: MSE, RMSE, clamped R², MAE with length/empty checks
# - Optional strict mode signalling zero-variance targets
# - accuracy_percentage: display-only range-normalized accuracy
# ---------------------------------------------------------------------------
