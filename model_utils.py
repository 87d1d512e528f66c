"""
Function-level API of the regression engine used by the Flask app.
Thin wrappers over the regression_engine package with the request shapes the
browser client sends (camelCase hyperparameters, string model tags).
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

# Import from our modules
from regression_engine import (
    train_model,
    get_model_suggestions,
    analyze_results,
    make_run,
    compare_by_target,
    build_assistant_context,
    describe_columns,
    correlation_matrix,
    calculate_split_percentages,
    safe_json_convert,
    validate_training_config as _validate_training_config,
)
from regression_engine.config import DEFAULT_SPLIT_RATIO, LENIENT

# ============================================================================
# MAIN API FUNCTIONS
# ============================================================================

def train_and_analyze(rows: Sequence[Mapping[str, Any]], target: str, features: Sequence[str],
                      model_type: str, split_ratio: float = DEFAULT_SPLIT_RATIO,
                      hyperparameters: Optional[Mapping[str, Any]] = None,
                      coercion: str = LENIENT) -> Dict[str, Any]:
    """Train one model and attach its commentary and comparison record."""
    result = train_model(rows, target, features, model_type, split_ratio, hyperparameters,
                         coercion=coercion)
    analysis = analyze_results(result['model_type'], result['metrics'],
                               result['predictions'], result['actuals'])
    return {
        'result': result,
        'analysis': analysis,
        'run': make_run(result, target, features),
    }


def suggest_model(rows: Sequence[Mapping[str, Any]], target: str,
                  candidate_features: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    """Model suggestion; with no candidates every non-target column is considered."""
    if not candidate_features:
        candidate_features = [c for c in (rows[0].keys() if rows else []) if c != target]
    return get_model_suggestions(rows, candidate_features, target)


def compare_runs(runs: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Rank previously returned runs per target by accuracy."""
    return compare_by_target(runs)


def dataset_context(rows: Sequence[Mapping[str, Any]], sample_size: int = 5) -> Dict[str, Any]:
    """Summary and sample rows for the assistant collaborator."""
    return build_assistant_context(rows, sample_size=sample_size)


def dataset_statistics(rows: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Descriptive statistics and correlation matrix of the numeric columns."""
    return {
        'statistics': describe_columns(rows),
        'correlation_data': correlation_matrix(rows),
    }


def validate_training_config(rows: Sequence[Mapping[str, Any]], target: str, features: Sequence[str],
                             split_ratio: float) -> Dict[str, Any]:
    """Validate training configuration."""
    return _validate_training_config(rows, target, features, split_ratio)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

__all__ = [
    'train_and_analyze',
    'suggest_model',
    'compare_runs',
    'dataset_context',
    'dataset_statistics',
    'validate_training_config',
    'analyze_results',
    'calculate_split_percentages',
    'safe_json_convert'
]
