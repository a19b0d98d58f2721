# backend/growthdash/analytics/traffic.py
import datetime as dt
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from growthdash.analytics.comparison import ComparisonEntry, calendar_comparisons
from growthdash.analytics.range_filter import filter_range
from growthdash.analytics.timeseries import TimeSeries


class TrafficShare(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    count: float
    share: float
    comparisons: List[ComparisonEntry]


def share_pct(count: float, total: float) -> float:
    return round(count * 100.0 / total, 1) if total > 0 else 0.0


def traffic_breakdown(
    sources: Sequence[TimeSeries],
    start: dt.date,
    end: dt.date,
    history_start: Optional[dt.date] = None,
) -> List[TrafficShare]:
    """
    Per-source totals over [start, end] with their share of all traffic.
    Comparisons come from each source's calendar history up to `end`
    (from `history_start`, or its first point), not the filtered range.
    """
    counts = [filter_range(s, start, end).total() for s in sources]
    total = sum(counts)
    return [
        TrafficShare(
            title=s.title,
            count=count,
            share=share_pct(count, total),
            comparisons=calendar_comparisons(s, end, history_start),
        )
        for s, count in zip(sources, counts)
    ]
