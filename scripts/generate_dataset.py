"""
Sample Dataset Generator
Writes a catalog file and a matching purchase log for trying the analysis.
"""

import argparse
from pathlib import Path

from sqinch.data import DataGenerator

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "generated"


def main():
    parser = argparse.ArgumentParser(description="Generate sample catalog and purchase files")
    parser.add_argument("--products", type=int, default=40, help="Number of catalog products")
    parser.add_argument("--customers", type=int, default=200, help="Number of customers")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--output", type=Path, default=OUTPUT_DIR, help="Output directory")
    args = parser.parse_args()

    print("=" * 60)
    print("Sqinch Sample Dataset Generator")
    print("=" * 60 + "\n")

    data = DataGenerator(str(args.output), seed=args.seed).generate_all(
        n_products=args.products,
        n_customers=args.customers,
    )

    for name, df in data.items():
        print(f"   {name}.csv: {len(df):,} rows")
    print(f"\nOutput: {args.output}\n")


if __name__ == "__main__":
    main()
