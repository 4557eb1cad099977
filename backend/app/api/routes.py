import dataclasses

from fastapi import APIRouter, HTTPException, Request, Response
from app.core.config import FORECAST_CONFIG
from app.schemas.forecast import (
    ForecastRequest,
    ForecastResponse,
    Preferences,
    SessionStatus,
    TransactionsUpdate,
)


from forecaster.orchestrator import ForecastOrchestrator, ForecastResult
from forecaster.records import Provenance


router = APIRouter()


NOTES = {
    Provenance.MODEL: "Forecast generated using trained neural network on your spending history.",
    Provenance.FALLBACK: "Using standard predictions based on your average monthly spending.",
    Provenance.NONE: "Not enough data for predictions yet.",
}


def config_for(preferences: Preferences):
    overrides = {"enabled": preferences.predictions_enabled, "debounce_seconds": 0}
    if preferences.min_days is not None:
        overrides["min_days"] = preferences.min_days
    if preferences.min_records is not None:
        overrides["min_records"] = preferences.min_records
    return dataclasses.replace(FORECAST_CONFIG, **overrides)


def to_response(result: ForecastResult) -> ForecastResponse:
    if not result.enabled:
        note = "Predictions are disabled in your preferences."
    else:
        note = NOTES[result.provenance]
    return ForecastResponse(**result.to_dict(), note=note)


def _sessions(request: Request):
    return request.app.state.sessions


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/forecast", response_model=ForecastResponse)
async def forecast(req: ForecastRequest):
    """
    Train on the supplied history and predict next month's spend per category.
    Falls back to monthly averages when the history is thin or training fails.
    """
    records = [t.to_record() for t in req.transactions]
    async with ForecastOrchestrator(config_for(req.preferences)) as orchestrator:
        result = await orchestrator.evaluate(records)
    return to_response(result)


@router.put("/sessions/{session_id}/transactions", response_model=SessionStatus, status_code=202)
async def update_transactions(session_id: str, body: TransactionsUpdate, request: Request):
    orchestrator = await _sessions(request).get_or_create(session_id)
    orchestrator.submit([t.to_record() for t in body.transactions])
    return SessionStatus(session_id=session_id, state=orchestrator.state.value, pending=True)


@router.get("/sessions/{session_id}/forecast", response_model=ForecastResponse)
async def session_forecast(session_id: str, request: Request):
    orchestrator = _sessions(request).get(session_id)
    if orchestrator is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")

    result = await orchestrator.wait_ready()
    if result is None:
        raise HTTPException(status_code=404, detail="No transactions submitted for this session")
    return to_response(result)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str, request: Request):
    if not await _sessions(request).close(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return Response(status_code=204)
