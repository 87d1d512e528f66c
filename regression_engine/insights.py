"""Rule-based commentary on a finished training run."""

from typing import Mapping, Sequence, Union

import numpy as np

from .config import ModelType
from .errors import ConfigurationError

IMPROVEMENT_THRESHOLD = 0.7

_IMPROVEMENT_HINTS = {
    ModelType.LINEAR: "Consider using non-linear models like Random Forest or Neural Network.",
    ModelType.NEURAL_NET: "Try adjusting the network architecture or increasing training epochs.",
    ModelType.TREE_ENSEMBLE: "Consider feature engineering or gathering more training data.",
}


def error_variance(predictions: Sequence[float], actuals: Sequence[float]) -> float:
    """Population variance of the absolute prediction errors."""
    errors = np.abs(np.asarray(predictions, dtype=float) - np.asarray(actuals, dtype=float))
    if errors.size == 0:
        return 0.0
    return float(np.var(errors))


def analyze_results(model_type: Union[str, ModelType], metrics: Mapping[str, float],
                    predictions: Sequence[float], actuals: Sequence[float]) -> str:
    """Summarize fit quality, error consistency and a next step, one remark per line."""
    r2 = metrics['r2']
    analysis = []

    if r2 > 0.8:
        analysis.append("The model shows strong predictive performance with high R² value.")
    elif r2 > 0.6:
        analysis.append("The model shows moderate predictive performance.")
    else:
        analysis.append("The model's predictive performance could be improved.")

    if error_variance(predictions, actuals) > metrics['mae'] * 2:
        analysis.append("High variance in prediction errors suggests inconsistent performance.")

    if r2 < IMPROVEMENT_THRESHOLD:
        try:
            hint = _IMPROVEMENT_HINTS[ModelType.parse(model_type)]
        except ConfigurationError:
            hint = _IMPROVEMENT_HINTS[ModelType.TREE_ENSEMBLE]
        analysis.append(hint)

    return "\n".join(analysis)
