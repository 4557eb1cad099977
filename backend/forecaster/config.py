# backend/forecaster/config.py
from dataclasses import dataclass


@dataclass(frozen=True)
class ForecastConfig:
    """
    Explicit settings for one forecasting session.

    enabled:          user preference; when False nothing is trained or predicted
    min_days:         days of history required before the model path is tried
    min_records:      expense records required before the model path is tried
    model_cap:        max predictions returned by the model/fallback path
    insight_cap:      max predictions shown on the summary card
    debounce_seconds: quiet period before a changed transaction set is evaluated
    """

    enabled: bool = True
    min_days: int = 30
    min_records: int = 15
    model_cap: int = 6
    insight_cap: int = 4
    debounce_seconds: float = 1.0
    epochs: int = 200
    learning_rate: float = 0.01
    validation_split: float = 0.2
    dropout: float = 0.2
    optimal_days: int = 90

    def __post_init__(self):
        if self.min_days < 1:
            raise ValueError("min_days must be >= 1")
        if self.min_records < 1:
            raise ValueError("min_records must be >= 1")
        if self.model_cap < 1 or self.insight_cap < 1:
            raise ValueError("prediction caps must be >= 1")
        if self.debounce_seconds < 0:
            raise ValueError("debounce_seconds must be >= 0")
        if self.epochs < 1:
            raise ValueError("epochs must be >= 1")
        if self.learning_rate <= 0:
            raise ValueError("learning_rate must be > 0")
        if not 0.0 <= self.validation_split < 1.0:
            raise ValueError("validation_split must be in [0, 1)")
        if not 0.0 <= self.dropout < 1.0:
            raise ValueError("dropout must be in [0, 1)")
