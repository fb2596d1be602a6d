# unit tests for the pure pipeline stages, kept fast, deterministic, and independent of any i/o

from decimal import Decimal

import pytest
from tempgrid.models import DAYS_IN_MONTH, MONTHS, DailyReading, MonthBucket, YearRange
from tempgrid.service import (
    assemble,
    build_grid,
    cell_value,
    daily_domain,
    format_summary,
    normalize_row,
    normalize_rows,
    process_rows,
    summarize,
)

RANGE_2010 = YearRange(2010, 2010)


def row(date, max_temp, min_temp):
    return {"date": date, "max_temperature": max_temp, "min_temperature": min_temp}


def test_normalize_row_coerces_strings_and_zero_bases_month():
    reading = normalize_row(row("2010-03-07", "12.5", " -1 "), RANGE_2010)
    assert reading == DailyReading(year=2010, month=2, day=7, max_temp=12.5, min_temp=-1.0)


@pytest.mark.parametrize("raw", [
    row("bad-date", 1, 0),
    row("2010-02-30", 1, 0),
    row("2010/01/01", 1, 0),
    row(None, 1, 0),
    row("2010-01-01", "n/a", 0),
    row("2010-01-01", 1, ""),
    row("2010-01-01", None, 0),
    row("2010-01-01", float("nan"), 0),
    row("2010-01-01", True, 0),
    row("99999999999999999999-01-01", 1, 0),
    row("2010-01-01", 10**400, 0),
    row("2_010-01-01", 1, 0),
    row("2010-+1-01", 1, 0),
    row("2010-01-01", Decimal("sNaN"), 0),
    {"date": "2010-01-01", "max_temperature": 1},
])
def test_normalize_row_rejects_malformed_rows_silently(raw):
    assert normalize_row(raw, RANGE_2010) is None


def test_normalize_row_rejects_out_of_range_year():
    assert normalize_row(row("2009-12-31", 1, 0), RANGE_2010) is None
    assert normalize_row(row("2011-01-01", 1, 0), RANGE_2010) is None


def test_normalize_rows_last_write_wins():
    readings = normalize_rows([
        row("2010-01-05", 1, 0),
        row("2010-01-05", 9, 4),
    ], RANGE_2010)
    assert len(readings) == 1
    assert (readings[0].max_temp, readings[0].min_temp) == (9.0, 4.0)


def test_build_grid_has_a_bucket_for_every_month_even_when_empty():
    buckets = build_grid([], YearRange(2010, 2012))
    assert len(buckets) == 36
    assert all(not b.max_temps and not b.days_present for b in buckets.values())


def test_build_grid_partitions_without_aggregating():
    readings = [
        DailyReading(2010, 0, 1, 5.0, -2.0),
        DailyReading(2010, 0, 3, 7.0, 0.0),
        DailyReading(2010, 5, 2, 20.0, 10.0),
    ]
    buckets = build_grid(readings, RANGE_2010)
    jan = buckets[(2010, 0)]
    assert jan.days_present == {1, 3}
    assert jan.max_temps == [5.0, 7.0]
    assert jan.min_temps == [-2.0, 0.0]
    assert buckets[(2010, 5)].days_present == {2}


def test_summarize_uses_extremes_not_means():
    bucket = MonthBucket(max_temps=[10.0, 20.0, 30.0], min_temps=[5.0, -3.0, 1.0])
    summary = summarize(bucket)
    assert summary.avg_max == 30.0
    assert summary.avg_min == -3.0


def test_summarize_rounds_to_one_decimal_and_handles_empty():
    summary = summarize(MonthBucket(max_temps=[12.34, 11.5], min_temps=[-2.25]))
    assert summary.avg_max == 12.3
    assert summary.avg_min == -2.3

    empty = summarize(MonthBucket())
    assert empty.avg_max is None and empty.avg_min is None


def test_assemble_gap_fills_by_day_number():
    readings = [DailyReading(2010, 1, 28, 4.0, 1.0)]
    buckets = build_grid(readings, RANGE_2010)
    summaries = {k: summarize(b) for k, b in buckets.items()}
    dataset = assemble(RANGE_2010, buckets, summaries)

    feb = dataset.cell(2010, 1)
    assert feb.month_name == "February"
    assert [d.day for d in feb.daily_temps] == list(range(1, 29))
    assert feb.daily_temps[27].max_temp == 4.0
    assert all(d.max_temp is None and d.min_temp is None for d in feb.daily_temps[:27])


def test_process_rows_scenario():
    dataset = process_rows([
        row("2010-01-01", 5, -2),
        row("2010-01-03", 7, 0),
    ], RANGE_2010)

    jan = dataset.data[0]
    assert (jan.year, jan.month_index, jan.month_name) == (2010, 0, "January")
    assert jan.avg_max == 7.0
    assert jan.avg_min == -2.0
    assert jan.daily_temps[0].as_dict() == {"day": 1, "maxTemp": 5, "minTemp": -2}
    assert jan.daily_temps[1].as_dict() == {"day": 2, "maxTemp": None, "minTemp": None}
    assert jan.daily_temps[2].as_dict() == {"day": 3, "maxTemp": 7, "minTemp": 0}
    assert all(d.max_temp is None for d in jan.daily_temps[3:])

    # the other eleven months exist but carry no data
    assert all(c.avg_max is None and c.filled_days == 0 for c in dataset.data[1:])


def test_process_rows_shape_and_order():
    years = YearRange(1997, 2017)
    dataset = process_rows([], years)

    assert dataset.years == tuple(range(1997, 2018))
    assert dataset.months == MONTHS
    assert len(dataset.data) == 21 * 12
    assert [(c.year, c.month_index) for c in dataset.data] == [
        (y, m) for y in range(1997, 2018) for m in range(12)
    ]
    assert all(len(c.daily_temps) == DAYS_IN_MONTH[c.month_index] for c in dataset.data)


def test_process_rows_leap_day_counts_toward_summary_only():
    dataset = process_rows([row("2012-02-29", 15, 3)], YearRange(2012, 2012))
    feb = dataset.cell(2012, 1)
    assert len(feb.daily_temps) == 28
    assert feb.filled_days == 0
    assert feb.avg_max == 15.0


def test_process_rows_out_of_range_and_bad_rows_do_not_disturb_others():
    dataset = process_rows([
        row("2009-06-01", 99, 99),
        row("bad-date", 1, 1),
        row("2010-06-01", "n/a", 1),
        row("2010-06-02", 22, 11),
    ], RANGE_2010)

    jun = dataset.cell(2010, 5)
    assert jun.filled_days == 1
    assert jun.avg_max == 22.0
    assert sum(c.filled_days for c in dataset.data) == 1


def test_process_rows_is_idempotent():
    rows = [row("2010-01-01", 5, -2), row("2010-07-04", "30.25", "18")]
    assert process_rows(rows, RANGE_2010) == process_rows(rows, RANGE_2010)


def test_view_helpers():
    dataset = process_rows([row("2010-01-01", 5.4, -2.6), row("2010-01-02", 7, 0)], RANGE_2010)
    jan = dataset.cell(2010, 0)

    assert cell_value(jan, "max") == 7.0
    assert cell_value(jan, "min") == -2.6
    with pytest.raises(ValueError):
        cell_value(jan, "mean")

    assert daily_domain(jan.daily_temps) == (-5, 9)
    assert daily_domain(dataset.cell(2010, 1).daily_temps) is None

    assert format_summary(7.0) == "7.0°C"
    assert format_summary(None) == "N/A"


def test_normalize_row_accepts_non_float_numeric_types():
    reading = normalize_row(row("2010-01-01", Decimal("5.5"), Decimal("-1")), RANGE_2010)
    assert (reading.max_temp, reading.min_temp) == (5.5, -1.0)
    assert isinstance(reading.max_temp, float)


def test_oversized_values_do_not_stop_the_pipeline():
    dataset = process_rows([
        row("99999999999999999999-01-01", 1, 0),
        row("2010-01-02", 10**400, 0),
        row("2010-01-01", 5, -2),
    ], RANGE_2010)
    jan = dataset.cell(2010, 0)
    assert jan.filled_days == 1
    assert (jan.avg_max, jan.avg_min) == (5.0, -2.0)
