# backend/forecaster/fallback.py
"""
Rule-based estimator used when the history is too short for the network or
training fails. Predicts a flat monthly average per category.

The trend it reports is a heuristic on how many records a category has, not a
measured change between periods:

    more than 5 records  -> "up"     (+8%)
    more than 2 records  -> "stable"  (0%)
    otherwise            -> "down"   (-5%)
"""

import logging
import math
from collections import defaultdict
from typing import Dict, List, Sequence

from forecaster.records import Prediction, TransactionRecord
from forecaster.windowing import days_of_data, expense_records

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30
MAX_FALLBACK_CONFIDENCE = 90
BASE_FALLBACK_CONFIDENCE = 50

HEURISTIC_TRENDS = {
    "up": 8,
    "stable": 0,
    "down": -5,
}


def months_of_coverage(days: int) -> float:
    return max(1.0, days / DAYS_PER_MONTH)


def fallback_confidence(days: int) -> int:
    return int(round(min(MAX_FALLBACK_CONFIDENCE, BASE_FALLBACK_CONFIDENCE + days / 3)))


def heuristic_trend(record_count: int) -> str:
    if record_count > 5:
        return "up"
    if record_count > 2:
        return "stable"
    return "down"


def fallback_predictions(
    transactions: Sequence[TransactionRecord],
    days: int | None = None,
    cap: int = 6,
) -> List[Prediction]:
    expenses = expense_records(transactions)
    if not expenses:
        return []
    if days is None:
        days = days_of_data(transactions)

    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for t in expenses:
        totals[t.category] += t.amount
        counts[t.category] += 1

    months = months_of_coverage(days)
    confidence = fallback_confidence(days)

    predictions = []
    for category, total in totals.items():
        if not math.isfinite(total):
            logger.warning("Skipping %s: summed spend overflowed", category)
            continue
        amount = int(round(total / months))
        if amount <= 0:
            continue
        trend = heuristic_trend(counts[category])
        predictions.append(
            Prediction(
                category=category,
                predicted_amount=amount,
                confidence=confidence,
                trend=trend,
                percentage_change=HEURISTIC_TRENDS[trend],
            )
        )

    predictions.sort(key=lambda p: p.predicted_amount, reverse=True)
    logger.debug("Fallback estimated %d categories over %d days", len(predictions), days)
    return predictions[:cap]
