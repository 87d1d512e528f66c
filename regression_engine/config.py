"""Configuration and typed result structures for the regression engine."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, TypedDict, Union

from .errors import ConfigurationError, ValidationError


DEFAULT_SPLIT_RATIO = 0.8
RANDOM_SEED = 42
L2_PENALTY = 0.01
VALIDATION_SPLIT = 0.2
MAX_RANKED_FEATURES = 5

LENIENT = 'lenient'
STRICT = 'strict'
COERCION_MODES = (LENIENT, STRICT)

# (min, max) bounds applied when hyperparameters are resolved
NUM_TREES_RANGE = (1, 500)
TREE_DEPTH_RANGE = (1, 50)
EPOCHS_RANGE = (1, 1000)


class ModelType(str, Enum):
    """Closed set of model families the engine can train."""
    LINEAR = 'linear'
    TREE_ENSEMBLE = 'tree-ensemble'
    NEURAL_NET = 'neural-net'

    @classmethod
    def parse(cls, value: Union[str, 'ModelType']) -> 'ModelType':
        """Map a tag (or one of the legacy UI tags) to a ModelType."""
        if isinstance(value, cls):
            return value
        tag = str(value).strip().lower()
        tag = _MODEL_TYPE_ALIASES.get(tag, tag)
        try:
            return cls(tag)
        except ValueError:
            valid = [m.value for m in cls]
            raise ConfigurationError(f"Unknown model type '{value}'. Must be one of {valid}") from None


_MODEL_TYPE_ALIASES = {
    'linear-regression': 'linear',
    'random-forest': 'tree-ensemble',
    'neural-network': 'neural-net',
}


@dataclass
class LinearParams:
    """Ordinary least squares has nothing to tune."""


@dataclass
class TreeEnsembleParams:
    """Hyperparameters for the bagged regression tree ensemble."""
    num_trees: int = 100
    tree_depth: int = 10


@dataclass
class NeuralNetParams:
    """Hyperparameters for the feed-forward network."""
    epochs: int = 50
    batch_size: int = 32
    learning_rate: float = 0.001
    hidden_layers: List[int] = field(default_factory=lambda: [64, 32])
    dropout: float = 0.0


HyperParams = Union[LinearParams, TreeEnsembleParams, NeuralNetParams]

PARAMS_BY_MODEL = {
    ModelType.LINEAR: LinearParams,
    ModelType.TREE_ENSEMBLE: TreeEnsembleParams,
    ModelType.NEURAL_NET: NeuralNetParams,
}

# camelCase keys used by the browser client
_PARAM_ALIASES = {
    'numTrees': 'num_trees',
    'treeDepth': 'tree_depth',
    'batchSize': 'batch_size',
    'learningRate': 'learning_rate',
    'hiddenLayers': 'hidden_layers',
}


def _clamp(value, bounds):
    low, high = bounds
    return max(low, min(high, value))


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Hyperparameter '{name}' must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Hyperparameter '{name}' must be an integer, got {value!r}") from None


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"Hyperparameter '{name}' must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Hyperparameter '{name}' must be a number, got {value!r}") from None


def resolve_hyperparameters(model_type: Union[str, ModelType],
                            hyperparameters: Optional[Union[Mapping[str, Any], HyperParams]] = None) -> HyperParams:
    """Build the hyperparameter record for ``model_type``.

    Accepts a ready-made record or a loose mapping with camelCase or snake_case
    keys. Missing keys take their defaults, keys belonging to another family
    are ignored, and every value is clamped to its safe range.
    """
    model_type = ModelType.parse(model_type)
    params_cls = PARAMS_BY_MODEL[model_type]

    if isinstance(hyperparameters, (LinearParams, TreeEnsembleParams, NeuralNetParams)):
        if not isinstance(hyperparameters, params_cls):
            raise ConfigurationError(
                f"{type(hyperparameters).__name__} cannot configure a '{model_type.value}' model"
            )
        raw = {f.name: getattr(hyperparameters, f.name) for f in fields(hyperparameters)}
    else:
        raw = {}
        for key, value in (hyperparameters or {}).items():
            if value is not None:
                raw[_PARAM_ALIASES.get(key, key)] = value

    if params_cls is TreeEnsembleParams:
        params = TreeEnsembleParams()
        if 'num_trees' in raw:
            params.num_trees = _as_int('num_trees', raw['num_trees'])
        if 'tree_depth' in raw:
            params.tree_depth = _as_int('tree_depth', raw['tree_depth'])
        params.num_trees = _clamp(params.num_trees, NUM_TREES_RANGE)
        params.tree_depth = _clamp(params.tree_depth, TREE_DEPTH_RANGE)
        return params

    if params_cls is NeuralNetParams:
        params = NeuralNetParams()
        if 'epochs' in raw:
            params.epochs = _as_int('epochs', raw['epochs'])
        if 'batch_size' in raw:
            params.batch_size = _as_int('batch_size', raw['batch_size'])
        if 'learning_rate' in raw:
            params.learning_rate = _as_float('learning_rate', raw['learning_rate'])
        if 'hidden_layers' in raw:
            layers = raw['hidden_layers']
            if isinstance(layers, (str, bytes)) or not isinstance(layers, Sequence):
                raise ValidationError(f"Hyperparameter 'hidden_layers' must be a list of integers, got {layers!r}")
            params.hidden_layers = [_as_int('hidden_layers', units) for units in layers]
        if 'dropout' in raw:
            params.dropout = _as_float('dropout', raw['dropout'])

        params.epochs = _clamp(params.epochs, EPOCHS_RANGE)
        params.batch_size = max(1, params.batch_size)
        if params.learning_rate <= 0:
            raise ValidationError(f"Learning rate must be positive, got {params.learning_rate}")
        if not params.hidden_layers:
            raise ValidationError("Neural network needs at least one hidden layer")
        params.hidden_layers = [max(1, units) for units in params.hidden_layers]
        if not 0.0 <= params.dropout < 1.0:
            raise ValidationError(f"Dropout must be in [0, 1), got {params.dropout}")
        return params

    return LinearParams()


@dataclass
class TrainingConfig:
    """Everything one training invocation needs besides the rows."""
    target: str
    features: List[str]
    model_type: ModelType
    hyperparameters: HyperParams
    split_ratio: float = DEFAULT_SPLIT_RATIO
    coercion: str = LENIENT

    @classmethod
    def build(cls, target: str, features: Sequence[str], model_type: Union[str, ModelType],
              split_ratio: float = DEFAULT_SPLIT_RATIO,
              hyperparameters: Optional[Union[Mapping[str, Any], HyperParams]] = None,
              coercion: str = LENIENT) -> 'TrainingConfig':
        """Parse the model tag, apply hyperparameter defaults and de-duplicate features."""
        model_type = ModelType.parse(model_type)
        if coercion not in COERCION_MODES:
            raise ConfigurationError(f"Unknown coercion mode '{coercion}'. Must be one of {list(COERCION_MODES)}")
        return cls(
            target=target,
            features=list(dict.fromkeys(features)),
            model_type=model_type,
            hyperparameters=resolve_hyperparameters(model_type, hyperparameters),
            split_ratio=float(split_ratio),
            coercion=coercion,
        )


@dataclass(frozen=True)
class EpochProgress:
    """Progress observation emitted after every neural-net epoch."""
    epoch: int
    epochs: int
    loss: float
    val_loss: Optional[float] = None

    @property
    def fraction(self) -> float:
        return self.epoch / self.epochs


class MetricSet(TypedDict):
    """Regression metrics on the original target scale."""
    mse: float
    rmse: float
    r2: float
    mae: float


class TrainingResult(TypedDict):
    """Outcome of one training invocation."""
    model_type: str
    metrics: MetricSet
    predictions: List[float]
    actuals: List[float]


class ModelSuggestion(TypedDict):
    """Advisor recommendation; can be fed back as a training config."""
    model_type: str
    confidence: float
    rationale: str
    ranked_features: List[str]
    hyperparameters: Dict[str, Any]


def calculate_split_percentages(split_ratio: float) -> tuple[int, int]:
    """Calculate train/test split percentages."""
    train_percent = int(split_ratio * 100)
    test_percent = 100 - train_percent
    return train_percent, test_percent


# ---------------------------------------------------------------------------
# Features implemented in this module
# - ModelType enum with legacy tag aliases and ConfigurationError on unknown tags
# - One hyperparameter dataclass per model family, with defaults and clamping
# - TrainingConfig builder used by the training facade
# - Typed dictionaries for metrics, training results and model suggestions
# - Utility to convert split ratio into train/test percentages
# ---------------------------------------------------------------------------
