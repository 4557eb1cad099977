# backend/forecaster/cli.py
"""
Train the forecaster on a CSV export (or synthetic history) and print the
next-month predictions.

    python -m forecaster.cli --csv expenses.csv
    python -m forecaster.cli --months 6 --seed 7
"""

import argparse
import asyncio
import json
import logging
from datetime import date

from forecaster.config import ForecastConfig
from forecaster.loaders import load_transactions_csv
from forecaster.orchestrator import ForecastOrchestrator
from forecaster.synthetic import generate_transactions


def build_parser():
    parser = argparse.ArgumentParser(description="Forecast next month's spending per category.")
    parser.add_argument("--csv", help="transaction export to train on")
    parser.add_argument("--months", type=int, default=6, help="months of synthetic history when no CSV is given")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--epochs", type=int, default=200)
    parser.add_argument("--json", action="store_true", help="print the full result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


async def run(transactions, config):
    async with ForecastOrchestrator(config) as orchestrator:
        return await orchestrator.evaluate(transactions)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.csv:
        transactions = load_transactions_csv(args.csv)
    else:
        today = date.today()
        transactions = generate_transactions(date(today.year, today.month, 1), months=args.months, seed=args.seed)

    config = ForecastConfig(epochs=args.epochs, debounce_seconds=0)
    result = asyncio.run(run(transactions, config))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(f"{len(transactions)} transactions, {result.days_of_data} days of data")
    if result.error:
        print(f"Using standard predictions ({result.error_message})")
    print(f"Source: {result.provenance.value}")
    for p in result.predictions:
        sign = "+" if p.percentage_change > 0 else ""
        print(f"  {p.category:<20} {p.predicted_amount:>10}  {p.trend:<6} {sign}{p.percentage_change}%  ({p.confidence}%)")
    print(f"Next month total: {result.summary.total_predicted}  (avg confidence {result.summary.average_confidence}%)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
