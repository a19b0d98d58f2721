# backend/tests/test_aggregation.py
import datetime as dt

import pytest

from growthdash.analytics.aggregation import (
    aggregate,
    aggregate_buckets,
    bucket_key,
    reduce_values,
    week_start,
)
from growthdash.analytics.timeseries import TimePoint, make_series


def _series(title, pairs):
    return make_series(title, [TimePoint(date=dt.date.fromisoformat(d), value=v) for d, v in pairs])


def test_weekly_key_is_previous_sunday():
    # 2024-06-12 is a Wednesday
    assert bucket_key(dt.date(2024, 6, 12), "weekly") == dt.date(2024, 6, 9)


def test_weekly_key_of_sunday_is_itself_and_saturday_rolls_back():
    assert week_start(dt.date(2024, 6, 9)) == dt.date(2024, 6, 9)
    assert week_start(dt.date(2024, 6, 15)) == dt.date(2024, 6, 9)
    # week crossing a month boundary
    assert week_start(dt.date(2024, 6, 1)) == dt.date(2024, 5, 26)


def test_monthly_key_is_first_of_month():
    assert bucket_key(dt.date(2024, 6, 12), "monthly") == dt.date(2024, 6, 1)


def test_daily_is_identity():
    s = _series("hp", [("2024-06-03", 5), ("2024-06-01", 7), ("2024-06-02", 0)])
    out = aggregate(s, "daily")
    assert [(p.date.isoformat(), p.value) for p in out.points] == [
        ("2024-06-01", 7), ("2024-06-02", 0), ("2024-06-03", 5),
    ]


def test_daily_average_keeps_fractional_values():
    s = _series("churn", [("2024-06-03", 2.35), ("2024-06-04", 1.5)])
    out = aggregate(s, "daily", "average")
    assert [p.value for p in out.points] == [2.35, 1.5]
    # weekly buckets still round the average
    assert [p.value for p in aggregate(s, "weekly", "average").points] == [2.0]


def test_sum_vs_average_in_one_week():
    s = _series("gmv", [("2024-06-10", 10), ("2024-06-12", 20)])
    assert [p.value for p in aggregate(s, "weekly", "sum").points] == [30]
    assert [p.value for p in aggregate(s, "weekly", "average").points] == [15]


def test_average_rounds_half_up():
    assert reduce_values([1, 2], "average") == 2
    assert reduce_values([2, 3], "average") == 3
    assert reduce_values([1, 1, 2], "average") == 1


def test_buckets_sorted_and_no_empty_buckets():
    s = _series("reg", [("2024-03-15", 1), ("2024-01-02", 2), ("2024-01-31", 3)])
    out = aggregate(s, "monthly")
    # February has no points and must not appear
    assert [p.date for p in out.points] == [dt.date(2024, 1, 1), dt.date(2024, 3, 1)]
    assert [p.value for p in out.points] == [5, 1]


def test_aggregation_is_deterministic_and_does_not_mutate_input():
    s = _series("hp", [("2024-06-0%d" % d, d * 3) for d in range(1, 10)])
    before = s.model_copy(deep=True)
    assert aggregate(s, "weekly") == aggregate(s, "weekly")
    assert aggregate_buckets([s], "monthly", "average") == aggregate_buckets([s], "monthly", "average")
    assert s == before


def test_bucket_completeness_under_sum():
    s = _series("hp", [(f"2024-05-{d:02d}", d) for d in range(1, 32)])
    for period in ("daily", "weekly", "monthly"):
        assert sum(p.value for p in aggregate(s, period).points) == s.total()


def test_aggregate_buckets_only_lists_contributing_series():
    a = _series("A", [("2024-06-03", 1)])
    b = _series("B", [("2024-06-12", 4), ("2024-06-13", 6)])
    buckets = aggregate_buckets([a, b], "weekly")
    assert [bk.period_key for bk in buckets] == [dt.date(2024, 6, 2), dt.date(2024, 6, 9)]
    assert buckets[0].values == {"A": 1}
    assert buckets[1].values == {"B": 10}


def test_unknown_period_or_reduction_raises():
    with pytest.raises(ValueError):
        bucket_key(dt.date(2024, 1, 1), "yearly")
    with pytest.raises(ValueError):
        reduce_values([1], "median")
