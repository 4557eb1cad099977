# backend/forecaster/windowing.py
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from forecaster.date_utils import period_key
from forecaster.records import InsufficientData, TransactionRecord

logger = logging.getLogger(__name__)

MIN_MONTHS = 2


@dataclass
class WindowedData:
    """
    Supervised examples for one training run.

    inputs[i]  = per-category totals for period_keys[i]
    targets[i] = per-category totals for period_keys[i + 1]
    Column j of both arrays is category_order[j].
    """

    inputs: np.ndarray
    targets: np.ndarray
    category_order: List[str]
    period_keys: List[str]

    @property
    def example_count(self) -> int:
        return int(self.inputs.shape[0])


def expense_records(transactions: Sequence[TransactionRecord]) -> List[TransactionRecord]:
    return [t for t in transactions if t.is_expense]


def days_of_data(transactions: Sequence[TransactionRecord]) -> int:
    """Inclusive span in days between the oldest and newest transaction."""
    if not transactions:
        return 0
    dates = [t.date for t in transactions]
    return (max(dates) - min(dates)).days + 1


def _expense_frame(transactions: Sequence[TransactionRecord]) -> pd.DataFrame:
    rows = [
        {"month": period_key(t.date), "category": t.category, "amount": t.amount}
        for t in expense_records(transactions)
    ]
    return pd.DataFrame(rows, columns=["month", "category", "amount"])


def build_period_aggregates(transactions: Sequence[TransactionRecord]) -> pd.DataFrame:
    """
    Month x category table of summed expenses.
    Index: sorted YYYY-MM keys. Columns: sorted category names. Missing cells are 0.
    """
    df = _expense_frame(transactions)
    if df.empty:
        return pd.DataFrame(dtype=float)

    monthly_groups = df.groupby(["month", "category"])["amount"].sum().reset_index()
    pivot = monthly_groups.pivot(index="month", columns="category", values="amount").fillna(0.0)
    pivot = pivot.sort_index()
    return pivot[sorted(pivot.columns)].astype(float)


def build_training_examples(transactions: Sequence[TransactionRecord], min_records: int = 15):
    """
    Returns WindowedData, or InsufficientData when there are fewer than
    `min_records` expense records or fewer than two distinct months.
    """
    expenses = expense_records(transactions)
    span = days_of_data(transactions)

    if len(expenses) < min_records:
        logger.info("Insufficient data for training: %d expense records (need %d)", len(expenses), min_records)
        return InsufficientData(
            reason=f"Need at least {min_records} expense transactions",
            expense_count=len(expenses),
            days_of_data=span,
        )

    pivot = build_period_aggregates(expenses)
    months = list(pivot.index)
    if len(months) < MIN_MONTHS:
        logger.info("Insufficient data for training: %d distinct month(s)", len(months))
        return InsufficientData(
            reason=f"Need at least {MIN_MONTHS} months of expenses",
            expense_count=len(expenses),
            days_of_data=span,
            details={"months": len(months)},
        )

    M = pivot.to_numpy(dtype=np.float64)  # (T, C)
    return WindowedData(
        inputs=M[:-1].copy(),
        targets=M[1:].copy(),
        category_order=[str(c) for c in pivot.columns],
        period_keys=months,
    )


def category_vector(transactions: Sequence[TransactionRecord], category_order: Sequence[str]) -> np.ndarray:
    """Expense totals aligned to `category_order`; unknown categories are ignored."""
    index = {cat: i for i, cat in enumerate(category_order)}
    vec = np.zeros(len(category_order), dtype=np.float64)
    for t in expense_records(transactions):
        i = index.get(t.category)
        if i is not None:
            vec[i] += t.amount
    return vec


def current_period(transactions: Sequence[TransactionRecord]) -> Tuple[str | None, List[TransactionRecord]]:
    """The month of the newest expense and the expense records that fall in it."""
    expenses = expense_records(transactions)
    if not expenses:
        return None, []
    latest = period_key(max(t.date for t in expenses))
    return latest, [t for t in expenses if period_key(t.date) == latest]
