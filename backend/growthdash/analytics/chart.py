# backend/growthdash/analytics/chart.py
import datetime as dt
from typing import Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, field_validator

from growthdash.analytics.aggregation import (
    DEFAULT_REDUCTION,
    PeriodBucket,
    PeriodType,
    Reduction,
    aggregate_buckets,
)
from growthdash.analytics.range_filter import filter_many
from growthdash.analytics.timeseries import TimeSeries


# record keys every chart row carries; series titles may not reuse them
ROW_KEYS = ("date", "displayDate", "tooltipLabel")


class ChartRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    display_date: str
    tooltip_label: str
    values: Dict[str, float]

    @field_validator("values")
    @classmethod
    def _no_reserved_names(cls, v: Dict[str, float]) -> Dict[str, float]:
        clash = [name for name in v if name in ROW_KEYS]
        if clash:
            raise ValueError(f"series title collides with row key: {', '.join(clash)}")
        return v

    def as_record(self) -> Dict[str, object]:
        """Flat row for the chart widget: {date, displayDate, tooltipLabel, <series>: value}."""
        return {"date": self.date, "displayDate": self.display_date, "tooltipLabel": self.tooltip_label, **self.values}


class ChartDataset(BaseModel):
    model_config = ConfigDict(frozen=True)

    period_type: PeriodType
    series_names: List[str]
    rows: List[ChartRow]


# ---------- labels ----------
def format_display_date(d: dt.date, period: PeriodType) -> str:
    """Axis label: M/D (daily), M/D週 (weekly), Y/M (monthly)."""
    if period == "daily":
        return f"{d.month}/{d.day}"
    if period == "weekly":
        return f"{d.month}/{d.day}週"
    return f"{d.year}/{d.month}"


def format_tooltip_label(d: dt.date, period: PeriodType) -> str:
    if period == "daily":
        return f"{d.year}年{d.month}月{d.day}日"
    if period == "weekly":
        return f"{d.year}年{d.month}月{d.day}日週"
    return f"{d.year}年{d.month}月"


# ---------- builders ----------
def rows_from_buckets(
    buckets: Sequence[PeriodBucket],
    series_names: Sequence[str],
    period: PeriodType,
) -> List[ChartRow]:
    # missing series value -> 0 so the line has no gaps
    return [
        ChartRow(
            date=b.period_key.isoformat(),
            display_date=format_display_date(b.period_key, period),
            tooltip_label=format_tooltip_label(b.period_key, period),
            values={name: float(b.values.get(name, 0.0)) for name in series_names},
        )
        for b in sorted(buckets, key=lambda b: b.period_key)
    ]


def build_chart_dataset(
    series_list: Sequence[TimeSeries],
    start: dt.date,
    end: dt.date,
    period: PeriodType,
    reduction: Reduction = DEFAULT_REDUCTION,
) -> ChartDataset:
    """Range-filter -> bucket -> align for one chart."""
    names = [s.title for s in series_list]
    buckets = aggregate_buckets(filter_many(series_list, start, end), period, reduction)
    return ChartDataset(period_type=period, series_names=names, rows=rows_from_buckets(buckets, names, period))
