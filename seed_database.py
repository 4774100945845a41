#!/usr/bin/env python3
"""Seed the configured database with sample customers and segments.

Uses DATABASE_URL (or DB_SECRET_ARN), falling back to a local SQLite file.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from repositories.database import get_database  # noqa: E402
from services.data_seeder import DataSeeder  # noqa: E402


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--count", type=int, default=100, help="customers to generate")
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible data")
    parser.add_argument("--user-id", default="system", help="owner stamped on every record")
    parser.add_argument(
        "--skip-segments", action="store_true", help="do not insert the segment catalogue"
    )
    args = parser.parse_args(argv)
    if args.count < 1:
        parser.error("--count must be positive")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)
    seeder = DataSeeder(get_database(), seed=args.seed)
    try:
        summary = seeder.seed_customer_data(args.user_id, args.count)
        segments = 0 if args.skip_segments else seeder.seed_customer_segments(args.user_id)
    except Exception as exc:
        print(f"Seeding failed: {exc}")
        return 1

    print(
        f"Seeded {summary.customers} customers, {summary.transactions} transactions, "
        f"{summary.interactions} interactions and {segments} segments"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
