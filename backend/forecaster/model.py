# backend/forecaster/model.py
import torch.nn as nn


class ExpenseForecaster(nn.Module):
    def __init__(self, num_categories, hidden_dims=(64, 32, 16), dropout=0.2):
        super().__init__()
        h1, h2, h3 = hidden_dims
        self.net = nn.Sequential(
            nn.Linear(num_categories, h1),
            nn.ReLU(),
            nn.Dropout(dropout),
            nn.Linear(h1, h2),
            nn.ReLU(),
            nn.Dropout(dropout),
            nn.Linear(h2, h3),
            nn.ReLU(),
            nn.Linear(h3, num_categories),
            nn.Sigmoid(),
        )
        self.num_categories = num_categories

    def forward(self, x):
        """
        x: (B, C) normalized spend for one period
        returns: (B, C) normalized spend for the next period, in [0, 1]
        """
        return self.net(x)
