# models, calendar tables and a tiny rounding helper to keep data shapes explicit and reusable across the app

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

MONTHS: Tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# non-leap table, february is always 28 days
DAYS_IN_MONTH: Tuple[int, ...] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class ConfigError(ValueError):
    # raised for invalid year bounds or unparseable configuration values
    pass


@dataclass(frozen=True)
class YearRange:
    # inclusive year bounds handed explicitly to the pipeline
    start_year: int
    end_year: int

    def __post_init__(self) -> None:
        if self.start_year > self.end_year:
            raise ConfigError(f"start_year {self.start_year} is after end_year {self.end_year}")

    @property
    def years(self) -> Tuple[int, ...]:
        return tuple(range(self.start_year, self.end_year + 1))

    def contains(self, year: int) -> bool:
        return self.start_year <= year <= self.end_year


@dataclass(frozen=True)
class DailyReading:
    # immutable value object for one validated day, month is 0-based
    year: int
    month: int
    day: int
    max_temp: float
    min_temp: float

    @property
    def key(self) -> Tuple[int, int, int]:
        return (self.year, self.month, self.day)


@dataclass
class MonthBucket:
    # per (year, month) accumulation, owned and mutated by the grid builder only
    days_present: Set[int] = field(default_factory=set)
    max_temps: List[float] = field(default_factory=list)
    min_temps: List[float] = field(default_factory=list)
    by_day: Dict[int, DailyReading] = field(default_factory=dict)


@dataclass(frozen=True)
class MonthSummary:
    # avg_* hold the month extremes (max of highs, min of lows), not means.
    # the names are what rendering consumers read, so they stay.
    avg_max: Optional[float]
    avg_min: Optional[float]


@dataclass(frozen=True)
class DailyTemp:
    day: int
    max_temp: Optional[float]
    min_temp: Optional[float]

    def as_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "maxTemp": self.max_temp, "minTemp": self.min_temp}


@dataclass(frozen=True)
class MonthCell:
    # output value object, one per (year, month) even when no readings exist
    year: int
    month_index: int
    month_name: str
    avg_max: Optional[float]  # extreme, see MonthSummary
    avg_min: Optional[float]  # extreme, see MonthSummary
    daily_temps: Tuple[DailyTemp, ...]

    @property
    def filled_days(self) -> int:
        return sum(1 for d in self.daily_temps if d.max_temp is not None)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month_index,
            "monthName": self.month_name,
            "avgMax": self.avg_max,
            "avgMin": self.avg_min,
            "dailyTemps": [d.as_dict() for d in self.daily_temps],
        }


@dataclass(frozen=True)
class ProcessedDataset:
    # the only artifact handed to rendering consumers; frozen so they can share one instance
    years: Tuple[int, ...]
    months: Tuple[str, ...]
    data: Tuple[MonthCell, ...]

    def cell(self, year: int, month_index: int) -> MonthCell:
        # data is dense and year-major, so the position is computed, not searched
        if not self.years or not (self.years[0] <= year <= self.years[-1]) or not (0 <= month_index < 12):
            raise KeyError((year, month_index))
        return self.data[(year - self.years[0]) * 12 + month_index]

    def as_dict(self) -> Dict[str, Any]:
        # JSON-ready wire shape with the key names the visualization layer expects
        return {
            "years": list(self.years),
            "months": list(self.months),
            "data": [c.as_dict() for c in self.data],
        }


def round_one_decimal(value: float) -> float:
    # half away from zero, so 2.25 -> 2.3 and -2.25 -> -2.3; adding 0.0 turns -0.0 into 0.0
    return math.copysign(math.floor(abs(value) * 10 + 0.5) / 10, value) + 0.0
