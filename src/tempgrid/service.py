# orchestration and business rules.
# pure stages (normalize -> build grid -> summarize -> assemble) plus a load_dataset coordinator
# that pulls the raw table through the client and hands the result to a callback

from __future__ import annotations
import logging
import math
import numbers
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .models import (
    DAYS_IN_MONTH,
    MONTHS,
    DailyReading,
    DailyTemp,
    MonthBucket,
    MonthCell,
    MonthSummary,
    ProcessedDataset,
    YearRange,
    round_one_decimal,
)

logger = logging.getLogger(__name__)

BucketKey = Tuple[int, int]

_DIGITS = re.compile(r"[0-9]+")


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    parts = value.strip().split("-")
    # plain ascii digits only, int() alone would also take "+1" or "2_010"
    if len(parts) != 3 or not all(_DIGITS.fullmatch(p) for p in parts):
        return None
    try:
        return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except (ValueError, OverflowError):
        # impossible calendar date like 2010-02-30, or a year far past datetime's limits
        return None


def _parse_temp(value: Any) -> Optional[float]:
    # bool is an int subclass, but True is not a temperature
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (numbers.Real, Decimal, str)):
        return None
    try:
        temp = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    return temp if math.isfinite(temp) else None


def normalize_row(row: Mapping[str, Any], years: YearRange) -> Optional[DailyReading]:
    # None means the row was rejected; noisy tables are expected so nothing is raised here
    day = _parse_date(row.get("date"))
    if day is None:
        logger.debug(f"Skipping row with unparseable date: {row!r}")
        return None
    if not years.contains(day.year):
        logger.debug(f"Skipping row outside {years.start_year}-{years.end_year}: {row!r}")
        return None

    max_temp = _parse_temp(row.get("max_temperature"))
    min_temp = _parse_temp(row.get("min_temperature"))
    if max_temp is None or min_temp is None:
        logger.debug(f"Skipping row with missing or non-numeric temperature: {row!r}")
        return None

    return DailyReading(year=day.year, month=day.month - 1, day=day.day, max_temp=max_temp, min_temp=min_temp)


def normalize_rows(rows: Iterable[Mapping[str, Any]], years: YearRange) -> List[DailyReading]:
    # later rows win on the same (year, month, day), so the grid sees at most one reading per day
    readings: Dict[Tuple[int, int, int], DailyReading] = {}
    total = rejected = duplicates = 0
    for row in rows:
        total += 1
        reading = normalize_row(row, years)
        if reading is None:
            rejected += 1
            continue
        if reading.key in readings:
            duplicates += 1
        readings[reading.key] = reading

    logger.info(f"Normalized {total} rows: kept {len(readings)}, rejected {rejected}, overwritten duplicates {duplicates}")
    return list(readings.values())


def build_grid(readings: Iterable[DailyReading], years: YearRange) -> Dict[BucketKey, MonthBucket]:
    # every (year, month) in range gets a bucket up front, empty ones included
    buckets: Dict[BucketKey, MonthBucket] = {
        (year, month): MonthBucket() for year in years.years for month in range(12)
    }
    for reading in readings:
        bucket = buckets.get((reading.year, reading.month))
        if bucket is None:
            continue
        bucket.days_present.add(reading.day)
        bucket.by_day[reading.day] = reading
        bucket.max_temps.append(reading.max_temp)
        bucket.min_temps.append(reading.min_temp)
    return buckets


def summarize(bucket: MonthBucket) -> MonthSummary:
    # extremes, not means: hottest high and coldest low of the month
    avg_max = round_one_decimal(max(bucket.max_temps)) if bucket.max_temps else None
    avg_min = round_one_decimal(min(bucket.min_temps)) if bucket.min_temps else None
    return MonthSummary(avg_max=avg_max, avg_min=avg_min)


def _daily_temps(bucket: MonthBucket, days_in_month: int) -> Tuple[DailyTemp, ...]:
    temps: List[DailyTemp] = []
    for day in range(1, days_in_month + 1):
        reading = bucket.by_day.get(day) if day in bucket.days_present else None
        if reading is None:
            temps.append(DailyTemp(day=day, max_temp=None, min_temp=None))
        else:
            temps.append(DailyTemp(day=day, max_temp=reading.max_temp, min_temp=reading.min_temp))
    return tuple(temps)


def assemble(
    years: YearRange,
    buckets: Mapping[BucketKey, MonthBucket],
    summaries: Mapping[BucketKey, MonthSummary],
    month_names: Sequence[str] = MONTHS,
    days_in_month: Sequence[int] = DAYS_IN_MONTH,
) -> ProcessedDataset:
    cells: List[MonthCell] = []
    for year in years.years:
        for month in range(12):
            summary = summaries[(year, month)]
            cells.append(MonthCell(
                year=year,
                month_index=month,
                month_name=month_names[month],
                avg_max=summary.avg_max,
                avg_min=summary.avg_min,
                daily_temps=_daily_temps(buckets[(year, month)], days_in_month[month]),
            ))
    return ProcessedDataset(years=years.years, months=tuple(month_names), data=tuple(cells))


def process_rows(rows: Iterable[Mapping[str, Any]], years: YearRange) -> ProcessedDataset:
    # single synchronous pass, every call builds fresh state so re-runs give equal datasets
    readings = normalize_rows(rows, years)
    buckets = build_grid(readings, years)
    summaries = {key: summarize(bucket) for key, bucket in buckets.items()}
    return assemble(years, buckets, summaries)


def load_dataset(
    source: Optional[str],
    years: YearRange,
    callback: Optional[Callable[[ProcessedDataset], None]] = None,
    client=None,
) -> ProcessedDataset:
    # fetch -> process -> deliver; loader errors propagate and the pipeline never runs on a partial table
    if client is None:
        from .client import TemperatureTableClient
        client = TemperatureTableClient()
    rows = client.fetch_rows(source)
    dataset = process_rows(rows, years)
    if callback is not None:
        callback(dataset)
    return dataset


# helpers for rendering consumers, kept here because they only read the dataset

def cell_value(cell: MonthCell, view: str = "max") -> Optional[float]:
    if view == "max":
        return cell.avg_max
    if view == "min":
        return cell.avg_min
    raise ValueError(f"view must be 'max' or 'min' (got {view!r})")


def daily_domain(daily_temps: Sequence[DailyTemp], padding: Tuple[int, int] = (2, 2)) -> Optional[Tuple[int, int]]:
    # y range for a cell's mini chart, padded (top, bottom) around whole degrees
    highs = [d.max_temp for d in daily_temps if d.max_temp is not None]
    lows = [d.min_temp for d in daily_temps if d.min_temp is not None]
    if not highs or not lows:
        return None
    top, bottom = padding
    return (math.floor(min(lows)) - bottom, math.ceil(max(highs)) + top)


def format_summary(value: Optional[float]) -> str:
    return f"{value:.1f}°C" if value is not None else "N/A"
