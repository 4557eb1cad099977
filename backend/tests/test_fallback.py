"""Rule-based estimator. Its trend is a record-count heuristic, not a measured change."""

from datetime import date, timedelta

from forecaster.fallback import (
    fallback_confidence,
    fallback_predictions,
    heuristic_trend,
    months_of_coverage,
)


def test_no_expenses_gives_empty_list(txn):
    assert fallback_predictions([]) == []
    assert fallback_predictions([txn(100, "Salary", date(2024, 1, 1), type="income")]) == []


def test_short_history_is_one_month_of_coverage(short_history):
    predictions = fallback_predictions(short_history)
    assert months_of_coverage(10) == 1.0
    totals = {}
    for t in short_history:
        totals[t.category] = totals.get(t.category, 0) + t.amount
    assert {p.category: p.predicted_amount for p in predictions} == {c: round(v) for c, v in totals.items()}


def test_amount_is_monthly_average(txn):
    start = date(2024, 1, 1)
    records = [txn(300, "Rent", start), txn(300, "Rent", start + timedelta(days=89))]
    (prediction,) = fallback_predictions(records)
    # 90 days -> 3 months of coverage
    assert prediction.predicted_amount == 200


def test_confidence_grows_with_history_and_caps_at_90():
    assert fallback_confidence(0) == 50
    assert fallback_confidence(30) == 60
    assert fallback_confidence(300) == 90


def test_record_count_trend_heuristic():
    assert heuristic_trend(6) == "up"
    assert heuristic_trend(5) == "stable"
    assert heuristic_trend(3) == "stable"
    assert heuristic_trend(2) == "down"


def test_heuristic_percentage_changes(txn):
    day = date(2024, 1, 1)
    records = (
        [txn(10, "Often", day + timedelta(days=i)) for i in range(6)]
        + [txn(10, "Sometimes", day + timedelta(days=i)) for i in range(3)]
        + [txn(100, "Rarely", day)]
    )
    by_category = {p.category: p for p in fallback_predictions(records)}
    assert (by_category["Often"].trend, by_category["Often"].percentage_change) == ("up", 8)
    assert (by_category["Sometimes"].trend, by_category["Sometimes"].percentage_change) == ("stable", 0)
    assert (by_category["Rarely"].trend, by_category["Rarely"].percentage_change) == ("down", -5)


def test_sorted_descending_and_capped(txn):
    day = date(2024, 1, 1)
    records = [txn(100 * (i + 1), f"Cat{i}", day) for i in range(8)]
    predictions = fallback_predictions(records, cap=4)
    assert len(predictions) == 4
    amounts = [p.predicted_amount for p in predictions]
    assert amounts == sorted(amounts, reverse=True)
    assert amounts[0] == 800


def test_confidence_bounds(three_month_history):
    for p in fallback_predictions(three_month_history):
        assert 0 <= p.confidence <= 90
        assert p.predicted_amount >= 0


def test_overflowing_category_total_is_skipped(txn):
    day = date(2024, 1, 1)
    records = [
        txn(1e308, "Huge", day, id="a"),
        txn(1e308, "Huge", day + timedelta(days=1), id="b"),
        txn(40, "Food", day),
    ]
    predictions = fallback_predictions(records)
    assert [p.category for p in predictions] == ["Food"]
