# backend/forecaster/date_utils.py
from datetime import date


def add_months(year: int, month: int, n: int):
    """
    Add n months to given (year, month)
    Returns new (year, month)
    """
    new_month = month + n
    new_year = year + (new_month - 1) // 12
    new_month = ((new_month - 1) % 12) + 1
    return new_year, new_month


def period_key(d: date) -> str:
    """Canonical YYYY-MM key for the calendar month containing d."""
    return f"{d.year:04d}-{d.month:02d}"


def shift_period(key: str, n: int) -> str:
    year, month = map(int, key.split("-"))
    y, m = add_months(year, month, n)
    return f"{y:04d}-{m:02d}"
