import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from forecaster.records import TransactionRecord


class Transaction(BaseModel):
    id: str = ""
    type: Literal["income", "expense"]
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    category: str = Field(..., min_length=1)
    date: datetime.date

    def to_record(self) -> TransactionRecord:
        return TransactionRecord(
            id=self.id,
            type=self.type,
            amount=self.amount,
            category=self.category,
            date=self.date,
        )


class Preferences(BaseModel):
    predictions_enabled: bool = True
    min_days: Optional[int] = Field(None, ge=1)
    min_records: Optional[int] = Field(None, ge=1)


class ForecastRequest(BaseModel):
    transactions: List[Transaction] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)


class TransactionsUpdate(BaseModel):
    transactions: List[Transaction] = Field(default_factory=list)


class PredictionOut(BaseModel):
    category: str
    predicted_amount: int
    confidence: int = Field(..., ge=0, le=100)
    trend: Literal["up", "down", "stable"]
    percentage_change: int


class SummaryOut(BaseModel):
    total_predicted: int
    average_confidence: int
    fit_quality: Optional[float] = None
    mean_absolute_error: Optional[float] = None
    provenance: Literal["model", "fallback", "none"]


class ProjectionPoint(BaseModel):
    period: str
    total_expense: int


class ForecastResponse(BaseModel):
    predictions: List[PredictionOut]
    insights: List[PredictionOut]
    provenance: Literal["model", "fallback", "none"]
    summary: SummaryOut
    days_of_data: int
    expense_count: int
    has_enough_data: bool
    current_period: Optional[str] = None
    projection: List[ProjectionPoint]
    days_until_optimal: int
    enabled: bool
    error: bool
    error_message: Optional[str] = None
    note: Optional[str] = None


class SessionStatus(BaseModel):
    session_id: str
    state: str
    pending: bool
