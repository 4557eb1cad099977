# backend/forecaster/train.py
import logging
import math
from dataclasses import dataclass, field
from typing import List

import torch
import torch.nn as nn
from torch.utils.data import DataLoader, Subset

from forecaster.config import ForecastConfig
from forecaster.dataset import PeriodPairDataset
from forecaster.errors import TrainingFailure
from forecaster.model import ExpenseForecaster

logger = logging.getLogger(__name__)

LOG_EVERY = 50


@dataclass
class TrainingHistory:
    loss: List[float] = field(default_factory=list)
    val_loss: List[float] = field(default_factory=list)

    @property
    def final_loss(self) -> float:
        return self.loss[-1] if self.loss else 0.0


def batch_size_for(n_examples: int) -> int:
    return max(2, n_examples // 2)


def split_index(n_examples: int, validation_split: float) -> int:
    """Index where the trailing validation slice starts; n when there is none."""
    split = int(n_examples * (1.0 - validation_split))
    if split < 1:
        return n_examples
    return split


def train_model(inputs, targets, config: ForecastConfig | None = None):
    """
    Fit an ExpenseForecaster on normalized (inputs, targets) pairs.

    Fixed epoch budget, no early stopping. Returns (model, TrainingHistory) with
    the model left in eval mode.
    """
    config = config or ForecastConfig()
    dataset = PeriodPairDataset(inputs, targets)
    n = len(dataset)
    if n == 0:
        raise TrainingFailure("No training examples")

    # SPLIT (time order, trailing slice is validation)
    split = split_index(n, config.validation_split)
    train_ds = Subset(dataset, range(split))
    val_ds = Subset(dataset, range(split, n))

    batch_size = batch_size_for(n)
    train_loader = DataLoader(train_ds, batch_size=batch_size, shuffle=True)
    val_loader = DataLoader(val_ds, batch_size=batch_size) if len(val_ds) else None

    # MODEL
    model = ExpenseForecaster(num_categories=dataset.X.shape[1], dropout=config.dropout)
    loss_fn = nn.MSELoss()
    optimizer = torch.optim.Adam(model.parameters(), lr=config.learning_rate)
    history = TrainingHistory()

    logger.debug("Training on %d examples (%d validation), batch size %d", split, n - split, batch_size)

    for epoch in range(config.epochs):
        model.train()
        total_loss = 0.0
        for X, y in train_loader:
            optimizer.zero_grad()
            pred = model(X)
            loss = loss_fn(pred, y)
            loss.backward()
            torch.nn.utils.clip_grad_norm_(model.parameters(), 1.0)
            optimizer.step()
            total_loss += loss.item()

        train_avg = total_loss / len(train_loader)
        if not math.isfinite(train_avg):
            raise TrainingFailure(f"Non-finite training loss at epoch {epoch + 1}")
        history.loss.append(train_avg)

        if val_loader is not None:
            model.eval()
            val_loss = 0.0
            with torch.no_grad():
                for X, y in val_loader:
                    val_loss += loss_fn(model(X), y).item()
            history.val_loss.append(val_loss / len(val_loader))

        if epoch % LOG_EVERY == 0:
            logger.debug("Epoch %d/%d: loss=%.4f", epoch + 1, config.epochs, train_avg)

    model.eval()
    return model, history


def forward(model: nn.Module, inputs):
    """Deterministic inference: eval mode, no dropout, no autograd."""
    X = torch.as_tensor(inputs, dtype=torch.float32)
    squeeze = X.dim() == 1
    if squeeze:
        X = X.unsqueeze(0)
    model.eval()
    with torch.no_grad():
        out = model(X).cpu().numpy().astype("float64")
    return out[0] if squeeze else out
