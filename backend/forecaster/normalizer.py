# backend/forecaster/normalizer.py
import numpy as np


def normalize(vector, scaling_factor: float) -> np.ndarray:
    return np.asarray(vector, dtype=np.float64) / scaling_factor


def denormalize(vector, scaling_factor: float) -> np.ndarray:
    return np.asarray(vector, dtype=np.float64) * scaling_factor


class MaxScaler:
    """
    Maps amounts into [0, 1] by a single global maximum.

    Unlike a per-feature scaler, every category shares one factor, so relative
    magnitudes between categories survive scaling. The factor is fitted once per
    training run and must be reused for every prediction against that model.
    """

    def __init__(self):
        self.scaling_factor: float | None = None

    def fit(self, *arrays):
        peak = 0.0
        for a in arrays:
            a = np.asarray(a, dtype=np.float64)
            if a.size:
                peak = max(peak, float(a.max()))
        self.scaling_factor = peak if peak > 0 else 1.0
        return self

    def _check_fitted(self):
        if self.scaling_factor is None:
            raise RuntimeError("MaxScaler must be fitted before use")

    def transform(self, x) -> np.ndarray:
        self._check_fitted()
        return normalize(x, self.scaling_factor)

    def inverse_transform(self, x) -> np.ndarray:
        self._check_fitted()
        return denormalize(x, self.scaling_factor)

    def fit_transform(self, *arrays):
        self.fit(*arrays)
        return tuple(self.transform(a) for a in arrays)
