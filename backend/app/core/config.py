import os
from dotenv import load_dotenv

from forecaster.config import ForecastConfig

load_dotenv()

API_NAME = os.getenv("API_NAME", "Expense Forecaster API")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("API_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


FORECAST_CONFIG = ForecastConfig(
    enabled=_env_bool("FORECAST_ENABLED", True),
    min_days=int(os.getenv("FORECAST_MIN_DAYS", "30")),
    min_records=int(os.getenv("FORECAST_MIN_RECORDS", "15")),
    epochs=int(os.getenv("FORECAST_EPOCHS", "200")),
    debounce_seconds=float(os.getenv("FORECAST_DEBOUNCE_SECONDS", "1.0")),
)

SESSION_LIMIT = int(os.getenv("SESSION_LIMIT", "1000"))
SESSION_IDLE_SECONDS = float(os.getenv("SESSION_IDLE_SECONDS", "3600"))
