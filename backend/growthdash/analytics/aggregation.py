# backend/growthdash/analytics/aggregation.py
"""
Period bucketing for daily metric series.

  - daily:   one bucket per date; a date with a single point keeps its value as is
  - weekly:  bucket key is the Sunday on or before the date
  - monthly: bucket key is the first day of the month

Each bucket is reduced with "sum" (chart totals, funnel totals) or
"average" (rounded half-up to an integer). Buckets without points are
never synthesized, and output is always ascending by key.
"""
import datetime as dt
import math
from collections import defaultdict
from typing import Dict, List, Literal, Sequence

from pydantic import BaseModel, ConfigDict

from growthdash.analytics.timeseries import TimePoint, TimeSeries, with_points

PeriodType = Literal["daily", "weekly", "monthly"]
Reduction = Literal["sum", "average"]

PERIOD_TYPES = ("daily", "weekly", "monthly")
REDUCTIONS = ("sum", "average")
DEFAULT_REDUCTION: Reduction = "sum"


class PeriodBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    period_key: dt.date
    values: Dict[str, float]


# ---------- bucket keys ----------
def week_start(d: dt.date) -> dt.date:
    # date.weekday(): Monday=0 … Sunday=6; shift so Sunday=0
    return d - dt.timedelta(days=(d.weekday() + 1) % 7)


def month_floor(d: dt.date) -> dt.date:
    return d.replace(day=1)


def bucket_key(d: dt.date, period: PeriodType) -> dt.date:
    if period == "daily":
        return d
    if period == "weekly":
        return week_start(d)
    if period == "monthly":
        return month_floor(d)
    raise ValueError(f"unknown period type: {period}")


# ---------- reduction ----------
def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def reduce_values(values: Sequence[float], reduction: Reduction = DEFAULT_REDUCTION) -> float:
    if not values:
        raise ValueError("cannot reduce an empty bucket")
    total = float(sum(values))
    if reduction == "sum":
        return total
    if reduction == "average":
        return float(round_half_up(total / len(values)))
    raise ValueError(f"unknown reduction: {reduction}")


def _reduce_bucket(values: Sequence[float], period: PeriodType, reduction: Reduction) -> float:
    if period == "daily" and len(values) == 1:
        return float(values[0])
    return reduce_values(values, reduction)


def group_by_period(series: TimeSeries, period: PeriodType) -> Dict[dt.date, List[float]]:
    groups: Dict[dt.date, List[float]] = defaultdict(list)
    for p in series.sorted_points():
        groups[bucket_key(p.date, period)].append(p.value)
    return groups


# ---------- public ----------
def aggregate(series: TimeSeries, period: PeriodType, reduction: Reduction = DEFAULT_REDUCTION) -> TimeSeries:
    """One point per non-empty bucket, dated at the bucket key."""
    groups = group_by_period(series, period)
    return with_points(
        series,
        (TimePoint(date=key, value=_reduce_bucket(groups[key], period, reduction)) for key in sorted(groups)),
    )


def aggregate_buckets(
    series_list: Sequence[TimeSeries],
    period: PeriodType,
    reduction: Reduction = DEFAULT_REDUCTION,
) -> List[PeriodBucket]:
    """
    Bucket several named series together.
    A series only appears in a bucket's `values` when it contributed at least one point.
    """
    slots: Dict[dt.date, Dict[str, float]] = defaultdict(dict)
    for s in series_list:
        for p in aggregate(s, period, reduction).points:
            slots[p.date][s.title] = p.value
    return [PeriodBucket(period_key=key, values=dict(slots[key])) for key in sorted(slots)]
