# connects input (source + year range) to the service and prints the result

from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import List, Optional

from .client import TableFetchError
from .config import LEVEL_BOUNDS, load_year_range
from .models import ConfigError
from .service import format_summary, load_dataset


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tempgrid", description="Build the year x month temperature grid from a daily table.")
    p.add_argument("--source", help="csv path or http(s) url (default: TEMPGRID_DATA_URL or temperature_daily.csv)")
    p.add_argument("--level", type=int, choices=sorted(LEVEL_BOUNDS), help="preset year range")
    p.add_argument("--start-year", type=int)
    p.add_argument("--end-year", type=int)
    p.add_argument("--view", choices=("max", "min"), help="only print one statistic")
    p.add_argument("--json", action="store_true", help="print the full dataset as json")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        years = load_year_range(level=args.level, start_year=args.start_year, end_year=args.end_year)
        dataset = load_dataset(args.source, years)
    except (TableFetchError, ConfigError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(dataset.as_dict()))
        return 0

    for cell in dataset.data:
        parts = [f"{cell.month_name} {cell.year}"]
        if args.view in (None, "max"):
            parts.append(f"Max: {format_summary(cell.avg_max)}")
        if args.view in (None, "min"):
            parts.append(f"Min: {format_summary(cell.avg_min)}")
        print(" ".join(parts))
    return 0


if __name__ == "__main__":
    sys.exit(main())
