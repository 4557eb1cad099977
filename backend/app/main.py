import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import (
    API_NAME,
    CORS_ORIGINS,
    FORECAST_CONFIG,
    LOG_LEVEL,
    SESSION_IDLE_SECONDS,
    SESSION_LIMIT,
)
from app.core.sessions import SessionRegistry
from app.api.routes import router

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.sessions = SessionRegistry(
        FORECAST_CONFIG, max_sessions=SESSION_LIMIT, idle_seconds=SESSION_IDLE_SECONDS
    )
    yield
    await app.state.sessions.close_all()


app = FastAPI(title=API_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


@app.get("/")
def root():
    return {"message": "Expense Forecaster API running"}
