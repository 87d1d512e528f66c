"""Utility helpers for JSON safety and input validation."""

import dataclasses
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .errors import ValidationError


JSONSafe = Union[int, float, list, Dict[str, Any], str, None]

def safe_json_convert(obj: Any) -> JSONSafe:
    """Convert engine results to JSON-safe values.

    Rules:
    - numpy scalars/arrays → native ints/floats/lists
    - NaN/inf → None
    - enums → their value, dataclasses → dicts
    - mappings/iterables → recursively converted
    """
    if isinstance(obj, Enum):
        return obj.value
    if obj is None or isinstance(obj, (bool, str)):
        return obj
    if isinstance(obj, (np.integer, int)):
        return int(obj)
    if isinstance(obj, (np.floating, float)):
        return float(obj) if np.isfinite(obj) else None
    if isinstance(obj, np.ndarray):
        return [safe_json_convert(x) for x in obj.tolist()]
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return safe_json_convert(dataclasses.asdict(obj))
    if isinstance(obj, Mapping):
        return {str(k): safe_json_convert(v) for k, v in obj.items()}
    if isinstance(obj, Iterable) and not isinstance(obj, bytes):
        return [safe_json_convert(x) for x in obj]
    if pd.isna(obj):
        return None
    return str(obj)


def validate_training_config(rows: Sequence[Mapping[str, Any]], target: Optional[str],
                             features: Optional[Sequence[str]], split_ratio: Any = None) -> Dict[str, Any]:
    """Validate a training/advisory request with comprehensive checks."""
    errors: List[str] = []

    if not rows:
        errors.append("Dataset is empty. Provide at least one row")
    if not target:
        errors.append("Target column must be specified")
    if not features:
        errors.append("At least one feature column must be selected")
    elif target and target in features:
        errors.append(f"Target column '{target}' cannot also be a feature")

    if split_ratio is not None:
        try:
            ratio = float(split_ratio)
            if not 0 < ratio <= 1:
                errors.append("Split ratio must be in (0, 1]")
        except (ValueError, TypeError):
            errors.append("Split ratio must be a valid number")

    # a column counts as present if any row carries it
    if rows and target and features:
        seen = set()
        for row in rows:
            seen.update(row.keys())
        missing = [col for col in [target, *features] if col not in seen]
        if missing:
            errors.append(f"Columns not found in dataset: {missing}")

    return {
        'valid': len(errors) == 0,
        'errors': errors
    }


def ensure_valid_config(rows, target, features, split_ratio=None) -> None:
    """Raise ``ValidationError`` listing every problem found by ``validate_training_config``."""
    result = validate_training_config(rows, target, features, split_ratio)
    if not result['valid']:
        raise ValidationError("; ".join(result['errors']))


# ---------------------------------------------------------------------------
# Features implemented in this module
# - safe_json_convert: normalize numpy/enum/dataclass objects to JSON-safe values
# - validate_training_config: guardrails for training and advisory inputs
# - ensure_valid_config: raising variant used by the public API
# ---------------------------------------------------------------------------
