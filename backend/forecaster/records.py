# backend/forecaster/records.py
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Literal

TransactionType = Literal["income", "expense"]
Trend = Literal["up", "down", "stable"]


def parse_date(value) -> date:
    """Coerce a date, datetime or ISO-8601 string into a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        except ValueError:
            raise ValueError(f"Invalid transaction date: {value!r}") from None
    raise ValueError(f"Unsupported date value: {value!r}")


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    type: TransactionType
    amount: float
    category: str
    date: date

    def __post_init__(self):
        if self.type not in ("income", "expense"):
            raise ValueError(f"type must be 'income' or 'expense', got {self.type!r}")
        amount = float(self.amount)
        if not math.isfinite(amount):
            raise ValueError(f"amount must be a finite number, got {amount}")
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "date", parse_date(self.date))

    @property
    def is_expense(self) -> bool:
        return self.type == "expense"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionRecord":
        return cls(
            id=str(data.get("id", "")),
            type=str(data["type"]).lower(),
            amount=data["amount"],
            category=str(data["category"]),
            date=data["date"],
        )


@dataclass(frozen=True)
class Prediction:
    category: str
    predicted_amount: int
    confidence: int
    trend: Trend
    percentage_change: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "predicted_amount": self.predicted_amount,
            "confidence": self.confidence,
            "trend": self.trend,
            "percentage_change": self.percentage_change,
        }


class Provenance(str, Enum):
    MODEL = "model"
    FALLBACK = "fallback"
    NONE = "none"


@dataclass(frozen=True)
class InsufficientData:
    """Not an error: the history is too thin for the requested path."""

    reason: str
    expense_count: int = 0
    days_of_data: int = 0
    details: Dict[str, Any] = field(default_factory=dict)
