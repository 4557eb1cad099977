from datetime import date

from forecaster.cli import main
from forecaster.date_utils import add_months, shift_period
from forecaster.loaders import load_transactions_csv
from forecaster.summary import days_until_optimal, project_totals
from forecaster.synthetic import generate_transactions
from forecaster.windowing import build_training_examples


def test_add_months_wraps_year():
    assert add_months(2024, 11, 3) == (2025, 2)
    assert shift_period("2024-12", 1) == "2025-01"


def test_projection_grows_after_first_period():
    assert project_totals("2024-03", 1000) == [("2024-04", 1000), ("2024-05", 1050)]
    assert project_totals(None, 1000) == []


def test_days_until_optimal():
    assert days_until_optimal(30) == 60
    assert days_until_optimal(120) == 0


def test_synthetic_history_is_reproducible_and_trainable():
    a = generate_transactions(date(2024, 1, 1), months=4, entries_per_month=20, seed=3)
    b = generate_transactions(date(2024, 1, 1), months=4, entries_per_month=20, seed=3)
    assert a == b
    assert sum(t.type == "income" for t in a) == 4
    windowed = build_training_examples(a)
    assert windowed.example_count == 3


def test_load_canonical_csv(tmp_path):
    path = tmp_path / "txns.csv"
    path.write_text(
        "id,type,amount,category,date\n"
        "1,expense,12.5,Food,2024-01-03\n"
        "2,income,1000,Salary,2024-01-01\n"
    )
    records = load_transactions_csv(path)
    assert [(r.id, r.type, r.amount, r.category, r.date) for r in records] == [
        ("1", "expense", 12.5, "Food", date(2024, 1, 3)),
        ("2", "income", 1000.0, "Salary", date(2024, 1, 1)),
    ]


def test_load_money_manager_export(tmp_path):
    path = tmp_path / "export.csv"
    path.write_text(
        "Date,Category,Amount,Income/Expense\n"
        "01/05/2024 10:30,Food,-45,Expense\n"
        "01/06/2024 09:00,Salary,3000,Income\n"
    )
    records = load_transactions_csv(path)
    assert records[0].amount == 45.0
    assert records[0].type == "expense"
    assert records[1].type == "income"
    assert records[0].date == date(2024, 1, 5)


def test_cli_on_synthetic_history(capsys):
    assert main(["--months", "3", "--seed", "1", "--epochs", "20"]) == 0
    out = capsys.readouterr().out
    assert "Next month total" in out


def test_projection_of_very_large_total_does_not_overflow():
    total = int(1e308)
    points = project_totals("2024-03", total)
    assert points[0] == ("2024-04", total)
    assert points[1][1] > total


def test_unknown_transaction_types_are_skipped(tmp_path, caplog):
    path = tmp_path / "export.csv"
    path.write_text(
        "Date,Category,Amount,Income/Expense\n"
        "2024-01-05,Food,45,Expense\n"
        "2024-01-06,Savings,500,Transfer\n"
        "2024-01-07,Salary,3000,Income\n"
    )
    with caplog.at_level("WARNING", logger="forecaster.loaders"):
        records = load_transactions_csv(path)
    assert [r.category for r in records] == ["Food", "Salary"]
    assert "transfer" in caplog.text
