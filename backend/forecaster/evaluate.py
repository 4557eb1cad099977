# backend/forecaster/evaluate.py
from dataclasses import dataclass

import numpy as np
from sklearn import metrics

from forecaster.train import forward

MIN_DISPLAY_CONFIDENCE = 50
MAX_DISPLAY_CONFIDENCE = 95
FULL_VOLUME_EXAMPLES = 20


@dataclass(frozen=True)
class FitReport:
    mae: float
    r2: float
    confidence: int
    example_count: int


def mean_absolute_error(predicted, actual) -> float:
    predicted = np.asarray(predicted, dtype=np.float64).ravel()
    actual = np.asarray(actual, dtype=np.float64).ravel()
    if actual.size == 0:
        return 0.0
    return float(metrics.mean_absolute_error(actual, predicted))


def r2_score(predicted, actual) -> float:
    """
    Coefficient of determination over every scalar component.
    Identical targets leave R² undefined; that case reports 0.0.
    """
    predicted = np.asarray(predicted, dtype=np.float64).ravel()
    actual = np.asarray(actual, dtype=np.float64).ravel()
    if actual.size == 0:
        return 0.0
    ss_res = float(np.sum((actual - predicted) ** 2))
    ss_tot = float(np.sum((actual - actual.mean()) ** 2))
    if ss_tot == 0.0:
        return 0.0
    return 1.0 - ss_res / ss_tot


def confidence_score(example_count: int, r2: float) -> int:
    data_volume = min(100.0, 100.0 * example_count / FULL_VOLUME_EXAMPLES)
    fit_quality = max(0.0, 100.0 * r2)
    return int(round(data_volume * 0.3 + fit_quality * 0.7))


def display_confidence(score) -> int:
    return int(round(min(MAX_DISPLAY_CONFIDENCE, max(MIN_DISPLAY_CONFIDENCE, score))))


def evaluate_fit(model, inputs, targets) -> FitReport:
    """Score a trained model on the (normalized) examples it was trained on."""
    predicted = forward(model, inputs)
    r2 = r2_score(predicted, targets)
    n = int(np.asarray(inputs).shape[0])
    return FitReport(
        mae=mean_absolute_error(predicted, targets),
        r2=r2,
        confidence=confidence_score(n, r2),
        example_count=n,
    )
