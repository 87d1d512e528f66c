"""
Flask JSON API for the regression engine
Stateless: every request carries its rows inline and gets an independent result
"""

import os

from flask import Flask, request

from model_utils import (
    calculate_split_percentages, compare_runs, dataset_context, dataset_statistics, validate_training_config
)
from app_helpers import (
    api_response, require_json, get_rows, handle_training, handle_suggestion, handle_analysis
)


def create_app(config=None) -> Flask:
    """Application factory; ``config`` overrides the defaults below."""
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = 50 * 1024 * 1024  # 50MB max request size
    app.config['COERCION_MODE'] = os.environ.get('REGRESSION_COERCION_MODE', 'lenient')
    app.config['ASSISTANT_SAMPLE_SIZE'] = 5
    if config:
        app.config.update(config)

    @app.route('/train', methods=['POST'])
    @api_response
    @require_json
    def train(data):
        """Train one model and return metrics, predictions and commentary."""
        return handle_training(data)

    @app.route('/suggest', methods=['POST'])
    @api_response
    @require_json
    def suggest(data):
        """Recommend a model family, features and hyperparameters."""
        return handle_suggestion(data)

    @app.route('/analyze', methods=['POST'])
    @api_response
    @require_json
    def analyze(data):
        """Rule-based commentary for a finished run."""
        return handle_analysis(data)

    @app.route('/compare', methods=['POST'])
    @api_response
    @require_json
    def compare(data):
        """Rank runs per target by accuracy percentage."""
        runs = data.get('runs', [])
        return {'success': True, 'comparison': compare_runs(runs)}

    @app.route('/summary', methods=['POST'])
    @api_response
    @require_json
    def summary(data):
        """Dataset summary and sample rows for the assistant."""
        context = dataset_context(get_rows(data), sample_size=app.config['ASSISTANT_SAMPLE_SIZE'])
        return {'success': True, **context}

    @app.route('/statistics', methods=['POST'])
    @api_response
    @require_json
    def statistics(data):
        """Per-column descriptive statistics and numeric correlation matrix."""
        return {'success': True, **dataset_statistics(get_rows(data))}

    @app.route('/validate_training_config', methods=['POST'])
    @api_response
    @require_json
    def validate_training_config_endpoint(data):
        """Validate training configuration before starting training"""
        validation_result = validate_training_config(
            get_rows(data), data.get('target'), data.get('features') or [],
            data.get('split_ratio', 0.8)
        )
        return {'success': True, 'validation_result': validation_result}

    @app.route('/calculate_split', methods=['POST'])
    @api_response
    def calculate_split():
        """Calculate train/test split percentages"""
        data = request.get_json(silent=True) or {}
        split_ratio = float(data.get('split_ratio', 0.8))
        train_percent, test_percent = calculate_split_percentages(split_ratio)
        return {
            'success': True,
            'train_percent': train_percent,
            'test_percent': test_percent,
            'split_ratio': split_ratio
        }

    return app


if __name__ == "__main__":
    create_app().run(host='127.0.0.1', port=5002)
