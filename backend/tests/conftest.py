from datetime import date, timedelta

import pytest

from forecaster.config import ForecastConfig
from forecaster.model import ExpenseForecaster
from forecaster.predictor import TrainedModel
from forecaster.records import TransactionRecord


def make_txn(amount, category, day, type="expense", id=None):
    return TransactionRecord(
        id=id or f"{type}-{category}-{day.isoformat()}-{amount}",
        type=type,
        amount=amount,
        category=category,
        date=day,
    )


def make_model(category_order, scaling_factor=1000.0, r2=0.5, confidence=70):
    return TrainedModel(
        module=ExpenseForecaster(len(category_order)),
        category_order=category_order,
        scaling_factor=scaling_factor,
        fit_quality=r2,
        training_error=0.01,
        mae=10.0,
        confidence=confidence,
        example_count=2,
    )


@pytest.fixture()
def txn():
    return make_txn


@pytest.fixture()
def fast_config():
    return ForecastConfig(debounce_seconds=0)


@pytest.fixture()
def short_history():
    """10 expense transactions spanning 10 days, two categories."""
    start = date(2024, 5, 1)
    return [
        make_txn(100 + i * 10, "Food & Dining" if i % 2 else "Transportation", start + timedelta(days=i))
        for i in range(10)
    ]


@pytest.fixture()
def three_month_history():
    """
    40 expenses over Jan-Mar 2024 in three categories, plus one income
    record on 2023-12-27 so the whole set spans 95 days.
    """
    categories = ["Food & Dining", "Shopping", "Transportation"]
    base = {"Food & Dining": 300.0, "Shopping": 150.0, "Transportation": 60.0}
    records = [make_txn(30000, "Salary", date(2023, 12, 27), type="income")]

    layout = [(1, list(range(1, 15))), (2, list(range(1, 14))), (3, list(range(1, 13)) + [30])]
    i = 0
    for month, days in layout:
        for d in days:
            cat = categories[i % 3]
            records.append(make_txn(base[cat] + 10 * month + d, cat, date(2024, month, d)))
            i += 1
    return records


@pytest.fixture()
def long_history():
    """Eight months with a clear per-category pattern, four records per category per month."""
    records = []
    for m in range(8):
        month = m + 1
        monthly = {
            "Rent & Housing": 5000.0,
            "Food & Dining": 1000.0 + 100 * m,
            "Entertainment": 200.0 if m % 2 else 800.0,
        }
        for cat, total in monthly.items():
            for k in range(4):
                records.append(make_txn(total / 4, cat, date(2024, month, 3 + k * 6)))
    return records
