# backend/growthdash/db/warehouse.py
"""
Warehouse fetch boundary.

Each table holds one row per day (traffic: per day and source). Rows are
validated against strict pydantic models here; anything that fails is
skipped and logged, the remainder of the series is kept. Query failures
and empty results raise UpstreamFetchError for the caller to surface.
"""
import datetime as dt
import logging
from typing import Dict, Iterable, List, Type

from pydantic import BaseModel, ConfigDict, NonNegativeFloat, NonNegativeInt, ValidationError
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from growthdash.analytics import catalog
from growthdash.analytics.timeseries import TimePoint, TimeSeries, clamp_floor, make_series
from growthdash.core import config
from growthdash.core.errors import MalformedSeriesError, UpstreamFetchError
from growthdash.db.session import engine as default_engine

logger = logging.getLogger(__name__)


# ===== Row schemas =====
class _Row(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    event_date: dt.date


class FunnelRow(_Row):
    hp_views: NonNegativeInt
    member_page_views: NonNegativeInt
    registrations: NonNegativeInt
    paid_conversions: NonNegativeInt
    first_orders: NonNegativeInt


class LineFunnelRow(_Row):
    new_users: NonNegativeInt
    product_unique_users: NonNegativeInt
    cart_unique_users: NonNegativeInt
    order_unique_users: NonNegativeInt
    repeat_2_plus: NonNegativeInt
    repeat_3_plus: NonNegativeInt


class KpiRow(_Row):
    gmv: NonNegativeFloat
    paid_subscriptions: NonNegativeInt
    churn_rate: NonNegativeFloat
    new_registrations: NonNegativeInt
    branded_searches: NonNegativeInt


class TrafficRow(_Row):
    source: str
    visits: NonNegativeInt


ROW_MODELS: Dict[str, Type[_Row]] = {
    catalog.FUNNEL_TABLE: FunnelRow,
    catalog.LINE_FUNNEL_TABLE: LineFunnelRow,
    catalog.KPI_TABLE: KpiRow,
    catalog.TRAFFIC_TABLE: TrafficRow,
}


def validate_rows(table: str, rows: Iterable[dict]) -> List[_Row]:
    model = ROW_MODELS[table]
    out: List[_Row] = []
    for raw in rows:
        try:
            out.append(model.model_validate(raw))
        except ValidationError as e:
            reason = e.errors()[0]["msg"]
            logger.warning("Skipping row: %s", MalformedSeriesError(table, raw, reason))
    return out


# ===== Client =====
class WarehouseClient:
    def __init__(self, engine: Engine, rate_floor: float = config.CHURN_RATE_FLOOR):
        self.engine = engine
        self.rate_floor = rate_floor

    # ---------- raw ----------
    def _query(self, table: str, columns: List[str], start: dt.date, end: dt.date) -> List[dict]:
        sql = text(
            f"SELECT event_date, {', '.join(columns)} FROM {table} "
            "WHERE event_date BETWEEN :start AND :end ORDER BY event_date"
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(sql, {"start": start.isoformat(), "end": end.isoformat()}).mappings().all()
        except SQLAlchemyError as e:
            logger.error("Warehouse query on %s failed: %s", table, e)
            raise UpstreamFetchError(table, "query failed") from e
        if not rows:
            raise UpstreamFetchError(table, f"no rows between {start} and {end}")
        return [dict(r) for r in rows]

    def _validated(self, table: str, columns: List[str], start: dt.date, end: dt.date) -> List[_Row]:
        rows = validate_rows(table, self._query(table, columns, start, end))
        if not rows:
            raise UpstreamFetchError(table, "every row failed validation")
        return rows

    # ---------- per table ----------
    def fetch_table(self, table: str, start: dt.date, end: dt.date) -> Dict[str, TimeSeries]:
        """All catalog metrics stored in `table`, keyed by metric key, from one query."""
        metrics = catalog.metrics_in_table(table)
        rows = self._validated(table, [m.column for m in metrics], start, end)
        out: Dict[str, TimeSeries] = {}
        for m in metrics:
            series = make_series(m.title, (TimePoint(date=r.event_date, value=float(getattr(r, m.column))) for r in rows))
            out[m.key] = clamp_floor(series, self.rate_floor) if m.rate_floor else series
        return out

    def fetch_funnel_series(self, start: dt.date, end: dt.date) -> Dict[str, TimeSeries]:
        return self.fetch_table(catalog.FUNNEL_TABLE, start, end)

    def fetch_line_funnel_series(self, start: dt.date, end: dt.date) -> Dict[str, TimeSeries]:
        return self.fetch_table(catalog.LINE_FUNNEL_TABLE, start, end)

    def fetch_kpi_series(self, start: dt.date, end: dt.date) -> Dict[str, TimeSeries]:
        return self.fetch_table(catalog.KPI_TABLE, start, end)

    def fetch_time_series(self, metric_key: str, start: dt.date, end: dt.date) -> TimeSeries:
        metric = catalog.get_metric(metric_key)
        if metric is None:
            raise KeyError(metric_key)
        return self.fetch_table(metric.table, start, end)[metric_key]

    def fetch_traffic_series(self, start: dt.date, end: dt.date) -> List[TimeSeries]:
        """One series per traffic source, in display order; unknown source codes are dropped."""
        rows = self._validated(catalog.TRAFFIC_TABLE, ["source", "visits"], start, end)
        by_source: Dict[str, List[TimePoint]] = {code: [] for code in catalog.TRAFFIC_SOURCES}
        for r in rows:
            if r.source not in by_source:
                logger.warning("Unknown traffic source %r on %s", r.source, r.event_date)
                continue
            by_source[r.source].append(TimePoint(date=r.event_date, value=float(r.visits)))
        return [make_series(title, by_source[code]) for code, title in catalog.TRAFFIC_SOURCES.items()]


def get_warehouse() -> WarehouseClient:
    return WarehouseClient(default_engine)
