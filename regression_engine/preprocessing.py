"""Preprocessing for tabular regression input.

Coerces raw row values to floats, z-score normalizes features and target with
statistics taken over the whole dataset, and splits rows positionally into
train/test partitions so time-ordered input keeps its order.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence

import numpy as np
import pandas as pd

from .config import LENIENT, STRICT
from .errors import NumericDegeneracyError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizationStats:
    """Mean and divisor used to z-score one column.

    ``std_dev`` is never zero: constant columns store 1 so their normalized
    values collapse to 0 instead of dividing by zero.
    """
    mean: float
    std_dev: float

    @classmethod
    def from_values(cls, values: np.ndarray, column: str = 'column') -> 'NormalizationStats':
        """Raises ``NumericDegeneracyError`` when the mean or std overflows."""
        values = np.asarray(values, dtype=float)
        with np.errstate(over='ignore', invalid='ignore'):
            mean = float(np.mean(values))
            std = float(np.std(values))  # population std, divides by n
        if not (math.isfinite(mean) and math.isfinite(std)):
            raise NumericDegeneracyError(
                f"Values of '{column}' are too large to normalize (mean={mean}, std={std})"
            )
        return cls(mean=mean, std_dev=std if std != 0 else 1.0)

    def normalize(self, values: np.ndarray) -> np.ndarray:
        return (np.asarray(values, dtype=float) - self.mean) / self.std_dev

    def denormalize(self, values: np.ndarray) -> np.ndarray:
        return np.asarray(values, dtype=float) * self.std_dev + self.mean


@dataclass
class PreparedData:
    """Normalized train/test arrays plus the stats needed to undo them."""
    train_x: np.ndarray
    train_y: np.ndarray
    test_x: np.ndarray
    test_y_raw: np.ndarray
    feature_stats: List[NormalizationStats]
    target_stats: NormalizationStats


def coerce_numeric(rows: Sequence[Mapping[str, Any]], columns: Sequence[str], mode: str = LENIENT) -> pd.DataFrame:
    """Convert the requested columns of ``rows`` to a float DataFrame.

    Lenient mode fills unparseable, missing and non-finite cells with 0.0;
    strict mode raises ``ValidationError`` naming the offending columns.
    """
    frame = pd.DataFrame.from_records(list(rows))
    missing = [col for col in columns if col not in frame.columns]
    if missing:
        raise ValidationError(f"Columns not found in dataset: {missing}")

    numeric = frame[list(columns)].apply(pd.to_numeric, errors='coerce').astype(float)
    numeric = numeric.replace([np.inf, -np.inf], np.nan)

    bad_counts = numeric.isna().sum()
    bad_counts = bad_counts[bad_counts > 0]
    if not bad_counts.empty:
        detail = ", ".join(f"{col} ({count})" for col, count in bad_counts.items())
        if mode == STRICT:
            raise ValidationError(f"Non-numeric values found in columns: {detail}")
        logger.warning("Coercing non-numeric values to 0.0 in columns: %s", detail)
        numeric = numeric.fillna(0.0)

    return numeric


def split_index(row_count: int, split_ratio: float) -> int:
    """Index of the first test row for a positional split."""
    return int(math.floor(row_count * split_ratio))


def normalize(rows: Sequence[Mapping[str, Any]], target: str, features: Sequence[str],
              split_ratio: float, coercion: str = LENIENT) -> PreparedData:
    """Coerce, normalize and positionally split ``rows``.

    Rows ``[0, split)`` train the model and ``[split, n)`` test it. Test targets
    are returned in original units.
    """
    numeric = coerce_numeric(rows, list(features) + [target], mode=coercion)

    X = numeric[list(features)].to_numpy(dtype=float)
    y = numeric[target].to_numpy(dtype=float)

    feature_stats = [NormalizationStats.from_values(X[:, i], name) for i, name in enumerate(features)]
    target_stats = NormalizationStats.from_values(y, target)

    X_normalized = np.column_stack([stats.normalize(X[:, i]) for i, stats in enumerate(feature_stats)])
    y_normalized = target_stats.normalize(y)

    split = split_index(len(y), split_ratio)
    if split == 0:
        raise ValidationError(
            f"Split ratio {split_ratio} leaves no training rows for a dataset of {len(y)} rows"
        )
    if split == len(y):
        raise ValidationError(
            f"Split ratio {split_ratio} leaves no test rows for a dataset of {len(y)} rows"
        )
    logger.debug("Split %d rows into %d train / %d test", len(y), split, len(y) - split)

    return PreparedData(
        train_x=X_normalized[:split],
        train_y=y_normalized[:split],
        test_x=X_normalized[split:],
        test_y_raw=y[split:],
        feature_stats=feature_stats,
        target_stats=target_stats,
    )


def denormalize(values: np.ndarray, stats: NormalizationStats) -> np.ndarray:
    """Map normalized target values back to original units."""
    return stats.denormalize(values)


# ---------------------------------------------------------------------------
# Features implemented in this module
# - Lenient (zero-fill) and strict numeric coercion of raw row values
# - Whole-dataset z-score stats with zero-std guard
# - Deterministic positional train/test split
# - Denormalization of predictions back to target units
# ---------------------------------------------------------------------------
