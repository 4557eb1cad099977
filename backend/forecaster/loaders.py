# backend/forecaster/loaders.py
import logging
from typing import List

import pandas as pd

from forecaster.records import TransactionRecord

logger = logging.getLogger(__name__)

# export headers -> record fields
COLUMN_ALIASES = {
    "id": "id",
    "txn_id": "id",
    "type": "type",
    "income/expense": "type",
    "amount": "amount",
    "category": "category",
    "date": "date",
}

KNOWN_TYPES = ("income", "expense")


def _normalize_type(value) -> str:
    return str(value).strip().lower()


def load_transactions_csv(path) -> List[TransactionRecord]:
    """
    Read a transaction export into records.

    Accepts either the canonical columns (id, type, amount, category, date)
    or a money-manager style export (Date, Category, Amount, Income/Expense).
    Rows without an id get their row number.
    """
    df = pd.read_csv(path)
    df = df.rename(columns={c: COLUMN_ALIASES[c.strip().lower()] for c in df.columns if c.strip().lower() in COLUMN_ALIASES})
    df = df.loc[:, ~df.columns.duplicated()]

    missing = {"amount", "category", "date"} - set(df.columns)
    if missing:
        raise ValueError(f"CSV is missing required columns: {sorted(missing)}")

    if "id" not in df.columns:
        df["id"] = [str(i) for i in range(len(df))]
    df["type"] = df["type"].map(_normalize_type) if "type" in df.columns else "expense"
    unknown = ~df["type"].isin(KNOWN_TYPES)
    if unknown.any():
        logger.warning(
            "Skipping %d rows with unknown transaction type: %s",
            int(unknown.sum()), sorted(df.loc[unknown, "type"].unique()),
        )
        df = df.loc[~unknown].copy()
    df["date"] = pd.to_datetime(df["date"]).dt.date
    df["amount"] = pd.to_numeric(df["amount"]).abs()

    return [
        TransactionRecord(
            id=str(row.id),
            type=row.type,
            amount=float(row.amount),
            category=str(row.category),
            date=row.date,
        )
        for row in df.itertuples(index=False)
    ]
