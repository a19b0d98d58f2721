# backend/growthdash/analytics/timeseries.py
"""
Shared time series models.

A TimeSeries is immutable: every transform in this package builds a new one
through the mapping helpers below instead of editing points in place.
"""
import datetime as dt
from typing import Callable, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict


class TimePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    value: float


class TimeSeries(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    points: Tuple[TimePoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def sorted_points(self) -> List[TimePoint]:
        return sorted(self.points, key=lambda p: p.date)

    def values(self) -> List[float]:
        return [p.value for p in self.sorted_points()]

    def total(self) -> float:
        return float(sum(p.value for p in self.points))


def make_series(title: str, points: Iterable[TimePoint]) -> TimeSeries:
    return TimeSeries(title=title, points=tuple(points))


def with_points(series: TimeSeries, points: Iterable[TimePoint]) -> TimeSeries:
    """Same title, new points."""
    return TimeSeries(title=series.title, points=tuple(points))


def map_values(series: TimeSeries, fn: Callable[[float], float]) -> TimeSeries:
    return with_points(series, (TimePoint(date=p.date, value=fn(p.value)) for p in series.points))


def clamp_floor(series: TimeSeries, floor: float) -> TimeSeries:
    """Rate-like metrics (churn) are shown no lower than `floor`."""
    return map_values(series, lambda v: max(floor, v))
