"""Regression backends behind a single fit/predict contract.

Every backend works on normalized inputs and returns predictions on the
normalized target scale; the caller denormalizes them.
"""

import logging
import math
from typing import Callable, Dict, List, Optional, Type

import numpy as np
import torch
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import LinearRegression
from torch import nn

from .config import (
    L2_PENALTY,
    RANDOM_SEED,
    VALIDATION_SPLIT,
    EpochProgress,
    LinearParams,
    ModelType,
    NeuralNetParams,
    TreeEnsembleParams,
    resolve_hyperparameters,
)
from .errors import TrainingCancelled, TrainingError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[EpochProgress], None]
StopCheck = Callable[[], bool]


class RegressionBackend(RegressorMixin, BaseEstimator):
    """Shared fit/predict wrapper: input coercion, error wrapping, finiteness checks."""

    model_type: ModelType

    def fit(self, X, y) -> 'RegressionBackend':
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float).ravel()
        if X.ndim != 2 or X.shape[0] != y.shape[0]:
            raise TrainingError(f"Feature matrix {X.shape} does not match {y.shape[0]} targets")
        try:
            self._fit(X, y)
        except TrainingError:
            raise
        except (ValueError, ArithmeticError, RuntimeError) as e:
            raise TrainingError(f"{self.model_type.value} backend failed to fit: {e}") from e
        return self

    def predict(self, X) -> np.ndarray:
        X = np.asarray(X, dtype=float)
        predictions = np.asarray(self._predict(X), dtype=float).ravel()
        if not np.all(np.isfinite(predictions)):
            raise TrainingError(f"{self.model_type.value} backend produced non-finite predictions")
        return predictions

    def _fit(self, X: np.ndarray, y: np.ndarray) -> None:
        raise NotImplementedError

    def _predict(self, X: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class LinearBackend(RegressionBackend):
    """Multivariate ordinary least squares over every configured feature."""

    model_type = ModelType.LINEAR

    def __init__(self, params: Optional[LinearParams] = None):
        self.params = params

    def _fit(self, X, y):
        self.model_ = LinearRegression().fit(X, y)
        if not np.all(np.isfinite(self.model_.coef_)):
            raise TrainingError("Least squares produced non-finite coefficients")

    def _predict(self, X):
        return self.model_.predict(X)


class TreeEnsembleBackend(RegressionBackend):
    """Bagged regression trees with sqrt-width feature subsampling per split."""

    model_type = ModelType.TREE_ENSEMBLE

    def __init__(self, params: Optional[TreeEnsembleParams] = None):
        self.params = params

    def _fit(self, X, y):
        params = self.params if self.params is not None else TreeEnsembleParams()
        self.model_ = RandomForestRegressor(
            n_estimators=params.num_trees,
            max_depth=params.tree_depth,
            max_features=max(1, int(math.floor(math.sqrt(X.shape[1])))),
            bootstrap=True,
            min_samples_split=2,
            random_state=RANDOM_SEED,
        )
        self.model_.fit(X, y)

    def _predict(self, X):
        return self.model_.predict(X)


class NeuralNetBackend(RegressionBackend):
    """Feed-forward ReLU network trained with Adam on an L2-penalized MSE loss.

    The last ``VALIDATION_SPLIT`` share of the training rows is held out to
    report a validation loss each epoch. After every epoch an
    :class:`EpochProgress` goes to ``on_epoch`` and ``should_stop`` is polled;
    a true result raises :class:`TrainingCancelled`.
    """

    model_type = ModelType.NEURAL_NET

    def __init__(self, params: Optional[NeuralNetParams] = None,
                 on_epoch: Optional[ProgressCallback] = None,
                 should_stop: Optional[StopCheck] = None):
        self.params = params
        self.on_epoch = on_epoch
        self.should_stop = should_stop

    def _build_network(self, n_features: int, params: NeuralNetParams, generator: torch.Generator) -> nn.Sequential:
        layers: List[nn.Module] = []
        self.kernels_ = []
        in_units = n_features
        for units in params.hidden_layers:
            dense = nn.Linear(in_units, units)
            nn.init.kaiming_normal_(dense.weight, nonlinearity='relu', generator=generator)
            nn.init.zeros_(dense.bias)
            self.kernels_.append(dense.weight)
            layers.extend([dense, nn.ReLU()])
            if params.dropout > 0:
                layers.append(nn.Dropout(params.dropout))
            in_units = units
        output = nn.Linear(in_units, 1)
        nn.init.xavier_uniform_(output.weight, generator=generator)
        nn.init.zeros_(output.bias)
        layers.append(output)
        return nn.Sequential(*layers)

    def _penalty(self) -> torch.Tensor:
        return L2_PENALTY * sum(torch.sum(kernel ** 2) for kernel in self.kernels_)

    def _fit(self, X, y):
        params = self.params if self.params is not None else NeuralNetParams()
        generator = torch.Generator().manual_seed(RANDOM_SEED)

        X_all = torch.as_tensor(X, dtype=torch.float32)
        y_all = torch.as_tensor(y, dtype=torch.float32).view(-1, 1)

        # hold out the tail of the training rows, keeping their order
        split_at = int(math.floor(len(X) * (1.0 - VALIDATION_SPLIT)))
        if 0 < split_at < len(X):
            X_train, y_train = X_all[:split_at], y_all[:split_at]
            X_val, y_val = X_all[split_at:], y_all[split_at:]
        else:
            X_train, y_train = X_all, y_all
            X_val = y_val = None

        self.network_ = self._build_network(X.shape[1], params, generator)
        optimizer = torch.optim.Adam(self.network_.parameters(), lr=params.learning_rate)
        loss_fn = nn.MSELoss()
        self.history_: List[EpochProgress] = []

        n_train = len(X_train)
        for epoch in range(1, params.epochs + 1):
            self.network_.train()
            order = torch.randperm(n_train, generator=generator)
            running = 0.0
            for start in range(0, n_train, params.batch_size):
                batch = order[start:start + params.batch_size]
                optimizer.zero_grad()
                loss = loss_fn(self.network_(X_train[batch]), y_train[batch]) + self._penalty()
                loss.backward()
                optimizer.step()
                running += loss.item() * len(batch)
            epoch_loss = running / n_train
            if not math.isfinite(epoch_loss):
                raise TrainingError(f"Training loss diverged at epoch {epoch}")

            val_loss = None
            if X_val is not None:
                self.network_.eval()
                with torch.no_grad():
                    val_loss = (loss_fn(self.network_(X_val), y_val) + self._penalty()).item()

            progress = EpochProgress(epoch=epoch, epochs=params.epochs, loss=epoch_loss, val_loss=val_loss)
            self.history_.append(progress)
            logger.debug("Epoch %d/%d: loss = %.6f, val_loss = %s", epoch, params.epochs, epoch_loss, val_loss)
            if self.on_epoch is not None:
                self.on_epoch(progress)
            if self.should_stop is not None and self.should_stop():
                raise TrainingCancelled(epoch)

    def _predict(self, X):
        self.network_.eval()
        with torch.no_grad():
            output = self.network_(torch.as_tensor(X, dtype=torch.float32))
        return np.asarray(output.view(-1).tolist(), dtype=float)


BACKENDS: Dict[ModelType, Type[RegressionBackend]] = {
    ModelType.LINEAR: LinearBackend,
    ModelType.TREE_ENSEMBLE: TreeEnsembleBackend,
    ModelType.NEURAL_NET: NeuralNetBackend,
}


def create_backend(model_type, hyperparameters=None,
                   on_epoch: Optional[ProgressCallback] = None,
                   should_stop: Optional[StopCheck] = None) -> RegressionBackend:
    """Instantiate the backend for ``model_type`` with resolved hyperparameters.

    Raises ``ConfigurationError`` for an unknown tag.
    """
    model_type = ModelType.parse(model_type)
    params = resolve_hyperparameters(model_type, hyperparameters)
    if model_type is ModelType.NEURAL_NET:
        return NeuralNetBackend(params, on_epoch=on_epoch, should_stop=should_stop)
    return BACKENDS[model_type](params)


# ---------------------------------------------------------------------------
# Features implemented in this module
# - RegressionBackend base: sklearn estimator API, error wrapping, NaN guard
# - Linear (multivariate OLS) and bagged tree ensemble via scikit-learn
# - PyTorch feed-forward net with L2 kernels, dropout, validation hold-out
# - Per-epoch progress callback and cooperative cancellation
# - Tag -> backend factory
# ---------------------------------------------------------------------------
