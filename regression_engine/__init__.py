"""
Tabular regression engine: preprocessing, interchangeable model backends,
metrics, a heuristic model advisor and rule-based result commentary.
"""

from .config import (
    ModelType, TrainingConfig, LinearParams, TreeEnsembleParams, NeuralNetParams,
    EpochProgress, MetricSet, TrainingResult, ModelSuggestion,
    resolve_hyperparameters, calculate_split_percentages
)
from .errors import (
    RegressionEngineError, ValidationError, ConfigurationError,
    NumericDegeneracyError, TrainingError, TrainingCancelled
)
from .preprocessing import NormalizationStats, normalize, denormalize
from .models import create_backend, LinearBackend, TreeEnsembleBackend, NeuralNetBackend
from .metrics import compute_metrics, accuracy_percentage
from .advisor import suggest
from .comparison import make_run, compare_by_target
from .eda import summarize_dataset, build_assistant_context, build_prompt, describe_columns, correlation_matrix
from .engine import train_model, get_model_suggestions, analyze_results
from .utils import safe_json_convert, validate_training_config

__all__ = [
    'ModelType',
    'TrainingConfig',
    'LinearParams',
    'TreeEnsembleParams',
    'NeuralNetParams',
    'EpochProgress',
    'MetricSet',
    'TrainingResult',
    'ModelSuggestion',
    'resolve_hyperparameters',
    'calculate_split_percentages',
    'RegressionEngineError',
    'ValidationError',
    'ConfigurationError',
    'NumericDegeneracyError',
    'TrainingError',
    'TrainingCancelled',
    'NormalizationStats',
    'normalize',
    'denormalize',
    'create_backend',
    'LinearBackend',
    'TreeEnsembleBackend',
    'NeuralNetBackend',
    'compute_metrics',
    'accuracy_percentage',
    'suggest',
    'make_run',
    'compare_by_target',
    'summarize_dataset',
    'build_assistant_context',
    'build_prompt',
    'describe_columns',
    'correlation_matrix',
    'train_model',
    'get_model_suggestions',
    'analyze_results',
    'safe_json_convert',
    'validate_training_config'
]
