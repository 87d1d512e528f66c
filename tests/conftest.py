import numpy as np
import pytest


@pytest.fixture
def linear_rows():
    """Ten rows where the target equals the single feature."""
    return [{'x': i, 'y': i} for i in range(1, 11)]


@pytest.fixture
def string_rows():
    """Rows as the CSV collaborator delivers them: every value is text."""
    return [{'x': str(i), 'z': str(2 * i), 'y': str(3 * i + 1)} for i in range(1, 21)]


@pytest.fixture
def correlated_rows():
    """Six features that all move linearly with the target."""
    return [
        {**{f'f{k}': i + k for k in range(6)}, 'target': 2 * i + 1}
        for i in range(1, 21)
    ]


@pytest.fixture
def nonlinear_rows():
    """Two informative features with an interaction, plus noise."""
    rng = np.random.default_rng(0)
    rows = []
    for _ in range(60):
        a, b = rng.uniform(-3, 3, size=2)
        rows.append({'a': float(a), 'b': float(b), 'y': float(a * b + np.sin(a) + rng.normal(0, 0.05))})
    return rows
