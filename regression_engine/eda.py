"""Dataset statistics, correlations and the assistant context built from them.

The assistant itself (an external generative-text service) is a collaborator;
this module only builds the text it receives, so the engine stays usable
without it.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


MAX_CORRELATION_COLUMNS = 25


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def _numeric_frame(rows: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """Columns with at least one parseable number, unparseable cells left as NaN."""
    frame = pd.DataFrame.from_records(list(rows))
    if frame.empty:
        return frame
    numeric = frame.apply(pd.to_numeric, errors='coerce').astype(float)
    numeric = numeric.replace([np.inf, -np.inf], np.nan)
    return numeric.loc[:, numeric.notna().any()]


def describe_columns(rows: Sequence[Mapping[str, Any]]) -> Dict[str, Dict[str, float]]:
    """Mean, median, population std, min and max of every numeric column."""
    numeric = _numeric_frame(rows)
    stats = {}
    for column in numeric.columns:
        values = numeric[column].dropna()
        described = values.describe()
        stats[str(column)] = {
            'count': int(described['count']),
            'mean': float(described['mean']),
            'median': float(described['50%']),
            'std_dev': float(values.std(ddof=0)),
            'min': float(described['min']),
            'max': float(described['max']),
        }
    return stats


def correlation_matrix(rows: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Pairwise Pearson correlations between numeric columns using pandas corr()."""
    numeric = _numeric_frame(rows)
    numeric_cols = [str(c) for c in numeric.columns]

    if len(numeric_cols) < 2:
        return {}

    # limit columns to keep the payload small
    capped_cols = numeric_cols[:MAX_CORRELATION_COLUMNS]
    corr_matrix = numeric.iloc[:, :len(capped_cols)].corr().fillna(0.0)

    correlation_data = {
        'columns': capped_cols,
        'values': [[float(x) for x in row] for row in corr_matrix.values.tolist()]
    }

    if len(numeric_cols) > MAX_CORRELATION_COLUMNS:
        correlation_data['truncated'] = True
        logger.debug("Correlation matrix capped at %d of %d columns", MAX_CORRELATION_COLUMNS, len(numeric_cols))

    return correlation_data


def summarize_columns(rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Per-column type, range, average and uniqueness.

    A column is numeric when at least one of its values parses as a number;
    the statistics then cover only the parseable values.
    """
    frame = pd.DataFrame.from_records(list(rows))
    summary = []
    for column in frame.columns:
        values = frame[column]
        numeric = pd.to_numeric(values, errors='coerce').dropna()
        if not numeric.empty:
            summary.append({
                'column': str(column),
                'type': 'numeric',
                'min': float(numeric.min()),
                'max': float(numeric.max()),
                'mean': float(numeric.mean()),
            })
        else:
            summary.append({
                'column': str(column),
                'type': 'categorical',
                'unique': int(values.nunique(dropna=False)),
            })
    return summary


def summarize_dataset(rows: Sequence[Mapping[str, Any]]) -> str:
    """Plain-text dataset summary, one block per column."""
    lines = ["Dataset Summary:"]
    for stats in summarize_columns(rows):
        lines.append("")
        lines.append(f"{stats['column']}:")
        if stats['type'] == 'numeric':
            lines.append("- Type: Numeric")
            lines.append(f"- Range: {_format_number(stats['min'])} to {_format_number(stats['max'])}")
            lines.append(f"- Average: {stats['mean']:.2f}")
        else:
            lines.append("- Type: Text/Categorical")
            lines.append(f"- Unique values: {stats['unique']}")
    return "\n".join(lines) + "\n"


def build_assistant_context(rows: Sequence[Mapping[str, Any]], sample_size: int = 5) -> Dict[str, Any]:
    """Summary, column list and leading sample rows for an assistant call."""
    rows = list(rows)
    columns = list(rows[0].keys()) if rows else []
    sample = [dict(row) for row in rows[:sample_size]]
    summary = summarize_dataset(rows) if rows else "Dataset Summary:\n"
    context = (
        f"File Analysis:\n{summary}\n"
        f"Sample Data (first {len(sample)} rows):\n{json.dumps(sample, indent=2, default=str)}"
    )
    return {
        'columns': columns,
        'row_count': len(rows),
        'summary': summary,
        'sample_data': sample,
        'context': context,
    }


def build_prompt(question: str, context: Optional[str]) -> str:
    """Combine the assistant context with a user question."""
    return (
        f"Context:\n{context or ''}\n\n"
        f"User question:\n{question}\n\n"
        "Please analyze the data and provide a clear, concise response focusing on relevant insights."
    )


# ---------------------------------------------------------------------------
# Features implemented in this module
# - summarize_columns: numeric range/mean or categorical unique counts
# - summarize_dataset: text summary for the assistant
# - build_assistant_context / build_prompt: context payload, no network call
# - describe_columns: mean, median, std, min, max per numeric column
# - correlation_matrix: pandas corr() with column cap and truncation flag
# ---------------------------------------------------------------------------
