# year range configuration.
# explicit arguments win over environment variables, which win over the level defaults

from __future__ import annotations
import os
from typing import Dict, Optional, Tuple
from dotenv import load_dotenv

from .models import ConfigError, YearRange

load_dotenv()  # in production, environment variables are injected by the scheduler or container

# level 1 shows the full record, level 2 the last decade with daily mini charts
LEVEL_BOUNDS: Dict[int, Tuple[int, int]] = {
    1: (1997, 2017),
    2: (2008, 2017),
}
DEFAULT_LEVEL = 1


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer (got {raw!r})") from exc


def load_year_range(
    level: Optional[int] = None,
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
) -> YearRange:
    if level is None:
        level = _env_int("TEMPGRID_LEVEL")
        if level is None:
            level = DEFAULT_LEVEL
    if level not in LEVEL_BOUNDS:
        raise ConfigError(f"level must be one of {sorted(LEVEL_BOUNDS)} (got {level})")

    default_start, default_end = LEVEL_BOUNDS[level]
    if start_year is None:
        start_year = _env_int("TEMPGRID_START_YEAR")
    if end_year is None:
        end_year = _env_int("TEMPGRID_END_YEAR")

    return YearRange(
        start_year=default_start if start_year is None else start_year,
        end_year=default_end if end_year is None else end_year,
    )
