# backend/forecaster/predictor.py
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence

import numpy as np
import torch

from forecaster.config import ForecastConfig
from forecaster.errors import ModelDisposedError, TrainingFailure
from forecaster.evaluate import display_confidence, evaluate_fit
from forecaster.normalizer import MaxScaler
from forecaster.records import InsufficientData, Prediction, TransactionRecord
from forecaster.train import TrainingHistory, forward, train_model
from forecaster.windowing import build_training_examples, category_vector

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 5


class TrainedModel:
    """
    A fitted network plus everything needed to use it consistently:
    the category order its vectors are indexed by and the scaling factor
    fitted on its training data.

    Owns the torch module. Call dispose() (or use it as a context manager)
    when the model is superseded; a disposed model refuses to predict.
    """

    def __init__(
        self,
        module: torch.nn.Module,
        category_order: Sequence[str],
        scaling_factor: float,
        fit_quality: float,
        training_error: float,
        mae: float,
        confidence: int,
        example_count: int,
        history: TrainingHistory | None = None,
    ):
        self._module = module
        self.category_order = list(category_order)
        self.scaling_factor = float(scaling_factor)
        self.fit_quality = float(fit_quality)
        self.training_error = float(training_error)
        self.mae = float(mae)
        self.confidence = int(confidence)
        self.example_count = int(example_count)
        self.history = history or TrainingHistory()
        self.trained_at = datetime.now(timezone.utc)

    def __repr__(self):
        state = "disposed" if self.disposed else f"r2={self.fit_quality:.3f}"
        return f"<TrainedModel categories={len(self.category_order)} {state}>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False

    @property
    def disposed(self) -> bool:
        return self._module is None

    @property
    def module(self) -> torch.nn.Module:
        if self._module is None:
            raise ModelDisposedError("TrainedModel has been disposed")
        return self._module

    def predict_vector(self, amounts) -> np.ndarray:
        """Raw per-category amounts in, raw per-category amounts out."""
        scaler = MaxScaler()
        scaler.scaling_factor = self.scaling_factor
        x = scaler.transform(amounts)
        if x.shape != (len(self.category_order),):
            raise ValueError(f"Expected vector of length {len(self.category_order)}, got shape {x.shape}")
        return scaler.inverse_transform(forward(self.module, x))

    def dispose(self):
        if self._module is None:
            return
        module, self._module = self._module, None
        for p in module.parameters():
            p.grad = None
        del module
        if torch.cuda.is_available():
            torch.cuda.empty_cache()
        logger.debug("Disposed trained model (%d categories)", len(self.category_order))

    def metadata(self) -> Dict[str, Any]:
        return {
            "category_order": list(self.category_order),
            "scaling_factor": self.scaling_factor,
            "fit_quality": self.fit_quality,
            "mean_absolute_error": self.mae,
            "training_error": self.training_error,
            "confidence": self.confidence,
            "example_count": self.example_count,
            "trained_at": self.trained_at.isoformat(),
        }


def train(transactions: Sequence[TransactionRecord], config: ForecastConfig | None = None):
    """
    Returns a TrainedModel, or InsufficientData when the history cannot form
    training examples. Numeric or runtime failures raise TrainingFailure.
    """
    config = config or ForecastConfig()
    windowed = build_training_examples(transactions, min_records=config.min_records)
    if isinstance(windowed, InsufficientData):
        return windowed

    scaler = MaxScaler().fit(windowed.inputs, windowed.targets)
    X = scaler.transform(windowed.inputs)
    y = scaler.transform(windowed.targets)

    try:
        module, history = train_model(X, y, config)
        report = evaluate_fit(module, X, y)
    except TrainingFailure:
        raise
    except (RuntimeError, ValueError, FloatingPointError) as e:
        raise TrainingFailure(f"Model training failed: {e}") from e

    if not (math.isfinite(report.r2) and math.isfinite(report.mae)):
        raise TrainingFailure("Model produced non-finite fit metrics")

    logger.info(
        "Trained forecaster on %d examples x %d categories: R2=%.3f, loss=%.4f",
        report.example_count, len(windowed.category_order), report.r2, history.final_loss,
    )
    return TrainedModel(
        module=module,
        category_order=windowed.category_order,
        scaling_factor=scaler.scaling_factor,
        fit_quality=report.r2,
        training_error=history.final_loss,
        mae=report.mae * scaler.scaling_factor,
        confidence=report.confidence,
        example_count=report.example_count,
        history=history,
    )


def classify_trend(percentage_change: int) -> str:
    if percentage_change > TREND_THRESHOLD:
        return "up"
    if percentage_change < -TREND_THRESHOLD:
        return "down"
    return "stable"


def predict(
    model: TrainedModel,
    current_period_transactions: Sequence[TransactionRecord],
    cap: int = 6,
) -> List[Prediction]:
    """Next-period spend per category, sorted descending and capped."""
    current = category_vector(current_period_transactions, model.category_order)
    predicted = model.predict_vector(current)
    confidence = display_confidence(model.confidence)

    predictions = []
    for i, category in enumerate(model.category_order):
        predicted_amount = int(round(float(predicted[i])))
        if predicted_amount <= 0:
            continue
        current_amount = int(round(float(current[i])))
        if current_amount > 0:
            change = int(round((predicted_amount - current_amount) / current_amount * 100))
        else:
            change = 0
        predictions.append(
            Prediction(
                category=category,
                predicted_amount=predicted_amount,
                confidence=confidence,
                trend=classify_trend(change),
                percentage_change=change,
            )
        )

    predictions.sort(key=lambda p: p.predicted_amount, reverse=True)
    return predictions[:cap]


def dispose(model: TrainedModel | None):
    if model is not None:
        model.dispose()
