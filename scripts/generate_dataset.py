"""
Dataset Generator

Writes synthetic campaigns, users and subscriptions to the raw zone.
"""

import argparse

from marketing_mrr.config import configure_logging, get_settings
from marketing_mrr.data.generators import DataGenerator


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Generate synthetic dashboard source data")
    parser.add_argument("--output-dir", default=settings.data_lake.raw_path)
    parser.add_argument("--year", type=int, default=settings.report.reporting_year)
    parser.add_argument("--campaigns", type=int, default=6)
    parser.add_argument("--users", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    configure_logging()

    print("=" * 60)
    print("Marketing & Subscription Dataset Generator")
    print("=" * 60 + "\n")

    data = DataGenerator(output_dir=args.output_dir, seed=args.seed).generate_all(
        year=args.year,
        n_campaigns=args.campaigns,
        n_users=args.users,
    )

    for name, df in data.items():
        print(f"   {name}: {len(df):,} rows")

    print(f"\nOutput: {args.output_dir}\n")


if __name__ == "__main__":
    main()
