from .timeseries import TimePoint, TimeSeries, make_series
from .range_filter import filter_range, filter_many, reindex_daily
from .aggregation import PeriodBucket, aggregate, aggregate_buckets, bucket_key
from .comparison import ComparisonEntry, calendar_comparisons, compute_comparisons
from .chart import ChartDataset, ChartRow, build_chart_dataset
from .funnel import FunnelResult, FunnelStage, reduce_funnel

__all__ = [
    "TimePoint", "TimeSeries", "make_series",
    "filter_range", "filter_many", "reindex_daily",
    "PeriodBucket", "aggregate", "aggregate_buckets", "bucket_key",
    "ComparisonEntry", "calendar_comparisons", "compute_comparisons",
    "ChartDataset", "ChartRow", "build_chart_dataset",
    "FunnelResult", "FunnelStage", "reduce_funnel",
]
