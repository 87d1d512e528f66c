"""
Helper functions and decorators for the Flask app
Request parsing and error mapping shared by every JSON endpoint
"""

import functools
from typing import Any, Callable, Dict, List

from flask import current_app, jsonify, request

from regression_engine import ConfigurationError, TrainingError, ValidationError, safe_json_convert
from regression_engine.config import DEFAULT_SPLIT_RATIO


def api_response(func: Callable) -> Callable:
    """Decorator for standardized API responses with error handling"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
            if isinstance(result, (dict, list)):
                return jsonify(safe_json_convert(result))
            return result
        except (ValidationError, ConfigurationError) as e:
            current_app.logger.warning(f"Rejected request to {func.__name__}: {str(e)}")
            return jsonify({'success': False, 'error': str(e)}), 400
        except TrainingError as e:
            current_app.logger.error(f"Training failed in {func.__name__}: {str(e)}")
            return jsonify({'success': False, 'error': str(e)}), 500
        except Exception as e:
            current_app.logger.exception(f"API Error in {func.__name__}: {str(e)}")
            return jsonify({'success': False, 'error': str(e)}), 500
    return wrapper


def require_json(func: Callable) -> Callable:
    """Decorator to ensure the request carries a JSON object body"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({
                'success': False,
                'error': 'Request body must be a JSON object.'
            }), 400
        return func(data, *args, **kwargs)
    return wrapper


def get_rows(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Extract the inline dataset rows from a request body"""
    rows = data.get('rows', [])
    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise ValidationError("'rows' must be a list of objects")
    return rows


def handle_training(data: Dict[str, Any]) -> Dict[str, Any]:
    """Centralized training logic"""
    from model_utils import train_and_analyze
    target = data.get('target')
    features = data.get('features') or []
    model_type = data.get('model_type') or data.get('modelType')
    if not model_type:
        raise ValidationError("Model type must be specified")
    split_ratio = data.get('split_ratio', data.get('splitRatio', DEFAULT_SPLIT_RATIO))
    coercion = data.get('coercion', current_app.config['COERCION_MODE'])

    current_app.logger.info(f"Training config: target={target}, model={model_type}, split={split_ratio}")
    outcome = train_and_analyze(
        get_rows(data), target, features, model_type, split_ratio,
        data.get('hyperparameters') or {}, coercion=coercion
    )
    return {
        'success': True,
        'training_results': outcome['result'],
        'analysis': outcome['analysis'],
        'run': outcome['run'],
        'message': f"Training completed! R2: {outcome['result']['metrics']['r2']:.3f}"
    }


def handle_suggestion(data: Dict[str, Any]) -> Dict[str, Any]:
    """Advisor request: target plus optional candidate features"""
    from model_utils import suggest_model
    rows = get_rows(data)
    suggestion = suggest_model(rows, data.get('target'), data.get('features'))
    return {'success': True, 'suggestion': suggestion}


def handle_analysis(data: Dict[str, Any]) -> Dict[str, Any]:
    """Commentary for a result the client already holds"""
    from model_utils import analyze_results
    metrics = data.get('metrics') or {}
    if not isinstance(metrics, dict) or 'r2' not in metrics or 'mae' not in metrics:
        raise ValidationError("'metrics' must include r2 and mae")
    for key in ('r2', 'mae'):
        value = metrics[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"'metrics.{key}' must be a number, got {value!r}")
    analysis = analyze_results(
        data.get('model_type', ''), metrics,
        data.get('predictions') or [], data.get('actuals') or []
    )
    return {'success': True, 'analysis': analysis}
