# backend/growthdash/analytics/comparison.py
"""
Trailing-period comparison badges.

Works on a full-history daily series (one point per day, no gaps; callers
make sure of that). Offsets count from the most recent day:

  - day-over-day:     day 1 vs day 2
  - week-over-week:   days 1-7 vs days 8-14
  - month-over-month: days 1-30 vs days 31-60

Percent is the rounded magnitude; the sign lives in `direction` only.
Short history or a zero previous value yields a flat 0% entry.
`calendar_comparisons` builds that gap-free input from raw warehouse history.
"""
import datetime as dt
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from growthdash.analytics.range_filter import reindex_daily
from growthdash.analytics.timeseries import TimeSeries

ComparisonLabel = Literal["day-over-day", "week-over-week", "month-over-month"]
Direction = Literal["up", "down", "flat"]
Sentiment = Literal["positive", "negative", "neutral"]

WEEK_WINDOW = 7
MONTH_WINDOW = 30


class ComparisonEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: ComparisonLabel
    percent: float
    direction: Direction
    sentiment: Sentiment = "neutral"


def _delta_dir(cur: float, prev: float) -> tuple:
    if prev == 0:
        return (0.0, "flat")
    pct = (cur - prev) * 100.0 / prev
    direction = "up" if pct > 0 else ("down" if pct < 0 else "flat")
    return (round(abs(pct), 1), direction)


def _window_totals(values: Sequence[float], window: int) -> tuple:
    """(current, previous) sums of the last `window` days and the `window` before that."""
    if len(values) < 2 * window:
        # not enough history for a previous window
        return (float(sum(values[-window:])), 0.0)
    current = float(sum(values[-window:]))
    previous = float(sum(values[-2 * window:-window]))
    return (current, previous)


def sentiment_for(direction: Direction, higher_is_better: bool = True) -> Sentiment:
    if direction == "flat":
        return "neutral"
    good = (direction == "up") == higher_is_better
    return "positive" if good else "negative"


def _entry(label: ComparisonLabel, cur: float, prev: float, higher_is_better: bool) -> ComparisonEntry:
    percent, direction = _delta_dir(cur, prev)
    return ComparisonEntry(
        label=label,
        percent=percent,
        direction=direction,
        sentiment=sentiment_for(direction, higher_is_better),
    )


def compute_comparisons(series: TimeSeries, higher_is_better: bool = True) -> List[ComparisonEntry]:
    """Exactly three entries: day, week, month. Never raises."""
    values = series.values()

    if len(values) >= 2:
        day_cur, day_prev = values[-1], values[-2]
    else:
        day_cur, day_prev = (values[-1] if values else 0.0), 0.0

    week_cur, week_prev = _window_totals(values, WEEK_WINDOW)
    month_cur, month_prev = _window_totals(values, MONTH_WINDOW)

    return [
        _entry("day-over-day", day_cur, day_prev, higher_is_better),
        _entry("week-over-week", week_cur, week_prev, higher_is_better),
        _entry("month-over-month", month_cur, month_prev, higher_is_better),
    ]


def calendar_comparisons(
    series: TimeSeries,
    end: dt.date,
    history_start: Optional[dt.date] = None,
    higher_is_better: bool = True,
) -> List[ComparisonEntry]:
    """
    Comparisons over the calendar days ending at `end`. Days the warehouse
    skipped count as 0, so the windows never slide past a gap.
    """
    if history_start is None:
        history_start = min((p.date for p in series.points), default=end)
    return compute_comparisons(reindex_daily(series, history_start, end), higher_is_better)
