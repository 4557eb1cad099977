# backend/forecaster/orchestrator.py
"""
Per-session forecasting state machine.

    idle -> evaluating -> fallback ------------------------> ready
                       -> training -> ready
                                   -> fallback_on_error ---> ready

A changed transaction set is debounced, then evaluated. Training runs in a
worker thread so the event loop stays responsive. Only the newest submission
may publish: results from superseded runs are disposed and dropped. The
orchestrator is the sole owner of the current TrainedModel and disposes it on
supersession and on close.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Sequence, Set

from forecaster.config import ForecastConfig
from forecaster.fallback import fallback_predictions
from forecaster.predictor import TrainedModel, predict, train
from forecaster.records import InsufficientData, Prediction, Provenance, TransactionRecord
from forecaster.summary import (
    ForecastSummary,
    days_until_optimal,
    insight_predictions,
    project_totals,
    summarize,
)
from forecaster.windowing import current_period, days_of_data, expense_records

logger = logging.getLogger(__name__)


class ForecastState(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    TRAINING = "training"
    FALLBACK = "fallback"
    FALLBACK_ON_ERROR = "fallback_on_error"
    READY = "ready"
    DISABLED = "disabled"


@dataclass(frozen=True)
class ForecastResult:
    predictions: List[Prediction]
    insights: List[Prediction]
    provenance: Provenance
    summary: ForecastSummary
    days_of_data: int = 0
    expense_count: int = 0
    has_enough_data: bool = False
    current_period: str | None = None
    projection: List[tuple] = field(default_factory=list)
    days_until_optimal: int = 0
    enabled: bool = True
    error: bool = False
    error_message: str | None = None

    @property
    def model_backed(self) -> bool:
        return self.provenance is Provenance.MODEL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "predictions": [p.to_dict() for p in self.predictions],
            "insights": [p.to_dict() for p in self.insights],
            "provenance": self.provenance.value,
            "summary": self.summary.to_dict(),
            "days_of_data": self.days_of_data,
            "expense_count": self.expense_count,
            "has_enough_data": self.has_enough_data,
            "current_period": self.current_period,
            "projection": [{"period": k, "total_expense": v} for k, v in self.projection],
            "days_until_optimal": self.days_until_optimal,
            "enabled": self.enabled,
            "error": self.error,
            "error_message": self.error_message,
        }


def _dispose_result(fut: asyncio.Future):
    if fut.cancelled() or fut.exception() is not None:
        return
    outcome = fut.result()
    if isinstance(outcome, TrainedModel):
        outcome.dispose()


class ForecastOrchestrator:
    def __init__(self, config: ForecastConfig | None = None, trainer: Callable = train):
        self.config = config or ForecastConfig()
        self._trainer = trainer
        self._state = ForecastState.IDLE
        self._model: TrainedModel | None = None
        self._result: ForecastResult | None = None
        self._generation = 0
        self._pending: asyncio.Task | None = None
        self._pending_debounced = False
        self._inflight: Set[asyncio.Future] = set()
        self._closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
        return False

    @property
    def state(self) -> ForecastState:
        return self._state

    @property
    def model(self) -> TrainedModel | None:
        return self._model

    @property
    def result(self) -> ForecastResult | None:
        return self._result

    @property
    def closed(self) -> bool:
        return self._closed

    # ---------- Triggers ----------
    def submit(self, transactions: Sequence[TransactionRecord]) -> asyncio.Task:
        """
        Record a changed transaction set. Evaluation starts after
        `debounce_seconds` of quiet; an earlier pending submission is cancelled.
        Must be called from a running event loop.
        """
        gen = self._supersede()
        self._pending = asyncio.get_running_loop().create_task(
            self._debounced(gen, list(transactions))
        )
        self._pending_debounced = True
        return self._pending

    async def evaluate(self, transactions: Sequence[TransactionRecord]) -> ForecastResult:
        """
        Evaluate immediately, superseding anything pending. The run is tracked
        like a submission, so wait_ready() waits for it too.
        """
        gen = self._supersede()
        task = asyncio.get_running_loop().create_task(self._evaluate(gen, list(transactions)))
        self._pending = task
        self._pending_debounced = False
        return await task

    async def wait_ready(self) -> ForecastResult | None:
        """Wait for the newest submission to publish and return its result."""
        while True:
            task = self._pending
            if task is None:
                return self._result
            try:
                result = await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
                if self._closed or self._pending is task:
                    return self._result
                continue
            if self._pending is task or self._pending is None:
                return result

    async def aclose(self):
        """Cancel pending work and release every model this session produced."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        pending, self._pending = self._pending, None
        if pending is not None and not pending.done():
            # a direct evaluate() has a caller awaiting it; let it finish as stale
            if self._pending_debounced:
                pending.cancel()
            await asyncio.gather(pending, return_exceptions=True)
        if self._inflight:
            inflight = list(self._inflight)
            await asyncio.gather(*inflight, return_exceptions=True)
            for fut in inflight:
                _dispose_result(fut)
        self._replace_model(None)
        self._set_state(ForecastState.IDLE)

    # ---------- Internals ----------
    def _supersede(self) -> int:
        if self._closed:
            raise RuntimeError("ForecastOrchestrator is closed")
        self._generation += 1
        if self._pending is not None and not self._pending.done() and self._pending_debounced:
            self._pending.cancel()
        self._pending = None
        return self._generation

    def _set_state(self, state: ForecastState):
        if state is not self._state:
            logger.debug("Forecast state %s -> %s", self._state.value, state.value)
        self._state = state

    def _replace_model(self, model: TrainedModel | None):
        old, self._model = self._model, model
        if old is not None and old is not model:
            old.dispose()

    async def _debounced(self, gen: int, transactions: List[TransactionRecord]) -> ForecastResult:
        await asyncio.sleep(self.config.debounce_seconds)
        return await self._evaluate(gen, transactions)

    async def _run_training(self, transactions: List[TransactionRecord]):
        fut = asyncio.ensure_future(asyncio.to_thread(self._trainer, transactions, self.config))
        self._inflight.add(fut)
        fut.add_done_callback(self._inflight.discard)
        try:
            return await asyncio.shield(fut)
        except asyncio.CancelledError:
            # the thread keeps running; release whatever it produces
            fut.add_done_callback(_dispose_result)
            raise

    async def _evaluate(self, gen: int, transactions: List[TransactionRecord]) -> ForecastResult:
        cfg = self.config
        if not cfg.enabled:
            self._replace_model(None)
            self._set_state(ForecastState.DISABLED)
            self._result = self._build_result([], Provenance.NONE, transactions, enabled=False)
            return self._result

        self._set_state(ForecastState.EVALUATING)
        days = days_of_data(transactions)
        expense_count = len(expense_records(transactions))

        if days < cfg.min_days or expense_count < cfg.min_records:
            logger.info(
                "Using standard predictions: %d days, %d expenses (need %d days, %d expenses)",
                days, expense_count, cfg.min_days, cfg.min_records,
            )
            self._set_state(ForecastState.FALLBACK)
            return self._publish_fallback(transactions)

        self._set_state(ForecastState.TRAINING)
        try:
            outcome = await self._run_training(transactions)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if gen != self._generation:
                return self._result
            logger.warning("Forecast model training failed, using standard predictions: %s", e, exc_info=True)
            return self._publish_fallback(transactions, error=str(e) or e.__class__.__name__)

        if gen != self._generation:
            if isinstance(outcome, TrainedModel):
                outcome.dispose()
            return self._result

        if isinstance(outcome, InsufficientData):
            logger.info("Model path rejected the history: %s", outcome.reason)
            return self._publish_fallback(transactions, error=outcome.reason)

        _, current = current_period(transactions)
        try:
            predictions = predict(outcome, current, cap=cfg.model_cap)
        except Exception as e:
            outcome.dispose()
            logger.warning("Forecast model prediction failed, using standard predictions: %s", e, exc_info=True)
            return self._publish_fallback(transactions, error=str(e) or e.__class__.__name__)

        self._replace_model(outcome)
        self._result = self._build_result(
            predictions,
            Provenance.MODEL,
            transactions,
            fit_quality=outcome.fit_quality,
            mae=outcome.mae,
        )
        self._set_state(ForecastState.READY)
        return self._result

    def _publish_fallback(self, transactions, error: str | None = None) -> ForecastResult:
        if error is not None:
            self._set_state(ForecastState.FALLBACK_ON_ERROR)
        self._replace_model(None)
        predictions = fallback_predictions(transactions, days_of_data(transactions), cap=self.config.model_cap)
        provenance = Provenance.FALLBACK if predictions else Provenance.NONE
        self._result = self._build_result(predictions, provenance, transactions, error=error)
        self._set_state(ForecastState.READY)
        return self._result

    def _build_result(
        self,
        predictions: List[Prediction],
        provenance: Provenance,
        transactions: Sequence[TransactionRecord],
        fit_quality: float | None = None,
        mae: float | None = None,
        error: str | None = None,
        enabled: bool = True,
    ) -> ForecastResult:
        cfg = self.config
        days = days_of_data(transactions)
        expense_count = len(expense_records(transactions))
        period, _ = current_period(transactions)
        summary = summarize(predictions, provenance, fit_quality=fit_quality, mean_absolute_error=mae)
        return ForecastResult(
            predictions=list(predictions),
            insights=insight_predictions(predictions, cap=cfg.insight_cap),
            provenance=provenance,
            summary=summary,
            days_of_data=days,
            expense_count=expense_count,
            has_enough_data=days >= cfg.min_days and expense_count >= cfg.min_records,
            current_period=period,
            projection=project_totals(period, summary.total_predicted) if predictions else [],
            days_until_optimal=days_until_optimal(days, cfg.optimal_days),
            enabled=enabled,
            error=error is not None,
            error_message=error,
        )
