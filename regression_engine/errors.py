"""Exception hierarchy for the regression engine."""


class RegressionEngineError(Exception):
    """Base class for all errors raised by the engine."""


class ValidationError(RegressionEngineError, ValueError):
    """Malformed or missing input: rows, target, features or split ratio."""


class ConfigurationError(RegressionEngineError, ValueError):
    """Unrecognized model type or unusable hyperparameter set."""


class NumericDegeneracyError(RegressionEngineError, ArithmeticError):
    """A statistic is undefined for the given data (e.g. zero-variance target)."""


class TrainingError(RegressionEngineError, RuntimeError):
    """A backend failed to fit or produced non-finite output."""


class TrainingCancelled(TrainingError):
    """Training was stopped by the caller between epochs."""

    def __init__(self, epoch: int):
        super().__init__(f"Training cancelled after epoch {epoch}")
        self.epoch = epoch
