# backend/forecaster/dataset.py
import numpy as np
import torch
from torch.utils.data import Dataset


class PeriodPairDataset(Dataset):
    def __init__(self, inputs, targets):
        """
        inputs:  numpy array (N, C), normalized spend for period P
        targets: numpy array (N, C), normalized spend for period P+1
        """
        inputs = np.asarray(inputs, dtype=np.float32)
        targets = np.asarray(targets, dtype=np.float32)
        if inputs.shape != targets.shape:
            raise ValueError(f"Shape mismatch: inputs {inputs.shape} vs targets {targets.shape}")

        self.X = torch.from_numpy(inputs)
        self.y = torch.from_numpy(targets)

    def __len__(self):
        return self.X.shape[0]

    def __getitem__(self, i):
        return self.X[i], self.y[i]
