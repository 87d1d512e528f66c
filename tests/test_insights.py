"""Tests for insights.py - rule-based commentary."""

import pytest

from regression_engine.insights import analyze_results, error_variance


def _metrics(r2, mae=1.0):
    return {'mse': mae ** 2, 'rmse': mae, 'r2': r2, 'mae': mae}


def test_strong_fit_has_single_line():
    text = analyze_results('linear', _metrics(0.9), [1.0, 2.0], [1.5, 2.5])
    assert text == "The model shows strong predictive performance with high R² value."


def test_moderate_linear_fit_suggests_non_linear_models():
    lines = analyze_results('linear', _metrics(0.65), [1.0, 2.0], [1.5, 2.5]).split("\n")
    assert lines[0] == "The model shows moderate predictive performance."
    assert lines[-1] == "Consider using non-linear models like Random Forest or Neural Network."


def test_moderate_above_improvement_threshold_has_no_hint():
    lines = analyze_results('neural-net', _metrics(0.75), [1.0], [1.5]).split("\n")
    assert lines == ["The model shows moderate predictive performance."]


@pytest.mark.parametrize('model_type, hint', [
    ('neural-net', "Try adjusting the network architecture or increasing training epochs."),
    ('neural-network', "Try adjusting the network architecture or increasing training epochs."),
    ('tree-ensemble', "Consider feature engineering or gathering more training data."),
    ('something-else', "Consider feature engineering or gathering more training data."),
])
def test_weak_fit_hints(model_type, hint):
    lines = analyze_results(model_type, _metrics(0.2), [1.0, 2.0], [1.5, 2.5]).split("\n")
    assert lines[0] == "The model's predictive performance could be improved."
    assert lines[-1] == hint


def test_high_error_variance_is_flagged():
    predictions = [0.0, 0.0, 0.0, 10.0]
    actuals = [0.0, 0.0, 0.0, 0.0]
    # |errors| = [0, 0, 0, 10]: variance 18.75 > 2 * mae (5.0)
    assert error_variance(predictions, actuals) == pytest.approx(18.75)
    text = analyze_results('tree-ensemble', _metrics(0.9, mae=2.5), predictions, actuals)
    assert "High variance in prediction errors" in text


def test_uniform_errors_are_not_flagged():
    text = analyze_results('tree-ensemble', _metrics(0.9, mae=1.0), [1.0, 2.0, 3.0], [2.0, 3.0, 4.0])
    assert "High variance" not in text


def test_error_variance_empty():
    assert error_variance([], []) == 0.0
