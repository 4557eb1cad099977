# backend/forecaster/errors.py


class ForecastError(Exception):
    """Base class for forecasting errors."""


class TrainingFailure(ForecastError):
    """Model construction or fitting failed (numeric or runtime error)."""


class ModelDisposedError(ForecastError):
    """A trained model was used after its resources were released."""
