"""Cross-run comparison ranked by the display-only accuracy percentage."""

import math
from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Sequence, TypedDict

from .config import MetricSet, TrainingResult
from .errors import ValidationError
from .metrics import accuracy_percentage


class ModelRun(TypedDict):
    """One finished training run, as kept by the caller for comparison."""
    model_type: str
    target: str
    features: List[str]
    metrics: MetricSet
    accuracy: float


class TargetComparison(TypedDict):
    target: str
    results: List[ModelRun]
    best_accuracy: float
    average_accuracy: float


def make_run(result: TrainingResult, target: str, features: Sequence[str]) -> ModelRun:
    """Attach target, features and accuracy percentage to a training result."""
    return {
        'model_type': result['model_type'],
        'target': target,
        'features': list(features),
        'metrics': result['metrics'],
        'accuracy': accuracy_percentage(result['metrics']['mse'], result['actuals']),
    }


def _check_run(index: int, run: Any) -> None:
    if not isinstance(run, Mapping):
        raise ValidationError(f"Run {index} must be an object")
    missing = [key for key in ('target', 'accuracy') if key not in run]
    if missing:
        raise ValidationError(f"Run {index} is missing {missing}")
    if not isinstance(run['target'], str):
        raise ValidationError(f"Run {index} target must be a column name")
    accuracy = run['accuracy']
    if isinstance(accuracy, bool) or not isinstance(accuracy, (int, float)) or not math.isfinite(accuracy):
        raise ValidationError(f"Run {index} accuracy must be a finite number, got {accuracy!r}")


def compare_by_target(runs: Sequence[Mapping[str, Any]]) -> List[TargetComparison]:
    """Group runs by target; within each group sort by accuracy, best first.

    Raises ``ValidationError`` when a run lacks ``target`` or a numeric ``accuracy``.
    """
    if not isinstance(runs, Sequence) or isinstance(runs, (str, bytes)):
        raise ValidationError("'runs' must be a list of run objects")
    for index, run in enumerate(runs):
        _check_run(index, run)

    grouped: Dict[str, List[ModelRun]] = OrderedDict()
    for run in runs:
        grouped.setdefault(run['target'], []).append(dict(run))

    comparisons = []
    for target, results in grouped.items():
        results.sort(key=lambda r: r['accuracy'], reverse=True)
        accuracies = [r['accuracy'] for r in results]
        comparisons.append({
            'target': target,
            'results': results,
            'best_accuracy': max(accuracies),
            'average_accuracy': sum(accuracies) / len(accuracies),
        })
    return comparisons
