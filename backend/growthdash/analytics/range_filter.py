# backend/growthdash/analytics/range_filter.py
import datetime as dt
from typing import Dict, List, Sequence

from growthdash.analytics.timeseries import TimePoint, TimeSeries, with_points


def filter_range(series: TimeSeries, start: dt.date, end: dt.date) -> TimeSeries:
    """Points with start <= date <= end, in their original order. start > end gives an empty series."""
    if start > end:
        return with_points(series, ())
    return with_points(series, (p for p in series.points if start <= p.date <= end))


def filter_many(series_list: Sequence[TimeSeries], start: dt.date, end: dt.date) -> List[TimeSeries]:
    # each series is filtered on its own dates; they need not line up
    return [filter_range(s, start, end) for s in series_list]


def reindex_daily(series: TimeSeries, start: dt.date, end: dt.date) -> TimeSeries:
    """
    One point per calendar day over [start, end]. Missing days become 0 and
    points sharing a date are summed. start > end gives an empty series.
    """
    by_day: Dict[dt.date, float] = {}
    for p in filter_range(series, start, end).points:
        by_day[p.date] = by_day.get(p.date, 0.0) + p.value
    days = (end - start).days + 1
    return with_points(
        series,
        (
            TimePoint(date=d, value=by_day.get(d, 0.0))
            for d in (start + dt.timedelta(days=i) for i in range(max(days, 0)))
        ),
    )
