from datetime import date

import pytest

from forecaster.records import TransactionRecord


def test_date_string_is_parsed():
    record = TransactionRecord(id="1", type="expense", amount=5, category="Food", date="2024-02-03")
    assert record.date == date(2024, 2, 3)
    assert record.amount == 5.0


@pytest.mark.parametrize("amount", [-1, float("inf"), float("-inf"), float("nan")])
def test_invalid_amount_is_rejected(amount):
    with pytest.raises(ValueError):
        TransactionRecord(id="1", type="expense", amount=amount, category="Food", date=date(2024, 1, 1))


def test_unknown_type_is_rejected():
    with pytest.raises(ValueError):
        TransactionRecord(id="1", type="transfer", amount=5, category="Food", date=date(2024, 1, 1))
