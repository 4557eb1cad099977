# backend/forecaster/summary.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Sequence

from forecaster.date_utils import shift_period
from forecaster.records import Prediction, Provenance

PROJECTION_GROWTH = 0.05


@dataclass(frozen=True)
class ForecastSummary:
    total_predicted: int
    average_confidence: int
    fit_quality: float | None
    mean_absolute_error: float | None
    provenance: Provenance

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_predicted": self.total_predicted,
            "average_confidence": self.average_confidence,
            "fit_quality": self.fit_quality,
            "mean_absolute_error": self.mean_absolute_error,
            "provenance": self.provenance.value,
        }


def summarize(
    predictions: Sequence[Prediction],
    provenance: Provenance,
    fit_quality: float | None = None,
    mean_absolute_error: float | None = None,
) -> ForecastSummary:
    total = sum(p.predicted_amount for p in predictions)
    avg = round(sum(p.confidence for p in predictions) / len(predictions)) if predictions else 0
    return ForecastSummary(
        total_predicted=int(total),
        average_confidence=int(avg),
        fit_quality=fit_quality,
        mean_absolute_error=mean_absolute_error,
        provenance=provenance,
    )


def insight_predictions(predictions: Sequence[Prediction], cap: int = 4) -> List[Prediction]:
    """The short list shown on the dashboard card."""
    return list(predictions[:cap])


def project_totals(last_period: str | None, total: int, months: int = 2, growth: float = PROJECTION_GROWTH):
    """
    Forward-looking totals for a spending chart: the first projected period is
    the predicted total, each later one grows by `growth`.
    Returns [(YYYY-MM, amount), ...].
    """
    if last_period is None or months < 1:
        return []
    points = []
    for i in range(1, months + 1):
        amount = total if i == 1 else int((Decimal(total) * Decimal(str(1 + growth)) ** (i - 1)).to_integral_value())
        points.append((shift_period(last_period, i), amount))
    return points


def days_until_optimal(days: int, optimal_days: int = 90) -> int:
    return max(0, optimal_days - days)
