# backend/forecaster/synthetic.py
"""
Synthetic transaction history for demos and the CLI.

- Weighted expense categories with category-specific amount ranges.
- Weekend behaviour: more Food & Dining and Entertainment.
- Optionally injects a monthly salary as income.
"""

import calendar
import random
from datetime import date
from typing import List

from forecaster.date_utils import add_months
from forecaster.records import TransactionRecord

CATEGORY_WEIGHTS = {
    "Food & Dining": 0.45,
    "Transportation": 0.18,
    "Shopping": 0.10,
    "Bills & Utilities": 0.08,
    "Entertainment": 0.08,
    "Healthcare": 0.04,
    "Personal Care": 0.04,
    "Education": 0.03,
}

WEEKEND_CATEGORIES = ["Food & Dining", "Entertainment", "Transportation", "Shopping"]
WEEKEND_WEIGHTS = [0.6, 0.2, 0.1, 0.1]

SALARY_AMOUNT = 30000.00


def choose_category(rng: random.Random) -> str:
    """Choose a category using the CATEGORY_WEIGHTS dict (handles any sum by normalizing)."""
    total = sum(CATEGORY_WEIGHTS.values())
    r = rng.random() * total
    cumulative = 0.0
    for cat, weight in CATEGORY_WEIGHTS.items():
        cumulative += weight
        if r <= cumulative:
            return cat
    return list(CATEGORY_WEIGHTS.keys())[0]


def random_amount(category: str, rng: random.Random) -> float:
    if category == "Bills & Utilities":
        return rng.uniform(800, 2500)
    if category == "Shopping":
        return rng.uniform(300, 1800)
    if category == "Entertainment":
        return rng.uniform(100, 1200)
    if category == "Transportation":
        return rng.uniform(40, 600)
    if category == "Education":
        return rng.uniform(300, 1500)
    if category == "Healthcare":
        return rng.uniform(200, 2000)

    # a mix of small, medium, and larger random values for food/other
    return rng.choice([
        rng.uniform(10, 100),
        rng.uniform(80, 300),
        rng.uniform(250, 700),
    ])


def generate_month(year: int, month: int, entries_per_month: int, rng: random.Random, inject_salary=True):
    records = []
    days_in_month = calendar.monthrange(year, month)[1]
    for i in range(entries_per_month):
        d = date(year, month, rng.randint(1, days_in_month))
        if d.weekday() >= 5:
            category = rng.choices(WEEKEND_CATEGORIES, weights=WEEKEND_WEIGHTS)[0]
        else:
            category = choose_category(rng)
        records.append(
            TransactionRecord(
                id=f"{year:04d}{month:02d}-{i:03d}",
                type="expense",
                amount=round(random_amount(category, rng), 2),
                category=category,
                date=d,
            )
        )

    if inject_salary:
        records.append(
            TransactionRecord(
                id=f"{year:04d}{month:02d}-salary",
                type="income",
                amount=SALARY_AMOUNT,
                category="Salary",
                date=date(year, month, rng.randint(1, 5)),
            )
        )
    return records


def generate_transactions(
    start: date,
    months: int = 6,
    entries_per_month: int = 40,
    seed: int | None = None,
    inject_salary: bool = True,
) -> List[TransactionRecord]:
    rng = random.Random(seed)
    records: List[TransactionRecord] = []
    for n in range(months):
        year, month = add_months(start.year, start.month, n)
        records.extend(generate_month(year, month, entries_per_month, rng, inject_salary))
    records.sort(key=lambda t: t.date)
    return records
