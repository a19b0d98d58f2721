# backend/growthdash/api/metrics.py
"""Single-metric drilldown: chart rows, raw daily points and comparison badges."""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Literal, Optional

from growthdash.analytics import catalog
from growthdash.api.params import fetch_window, resolve_range
from growthdash.db.warehouse import WarehouseClient, get_warehouse
from growthdash.schemas.dashboard import MetricDrillResponse
from growthdash.services.dashboard import build_metric_drill

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


@router.get("")
def list_metrics():
    return [
        {"key": m.key, "title": m.title, "higherIsBetter": m.higher_is_better}
        for m in catalog.METRICS.values()
    ]


@router.get("/{key}", response_model=MetricDrillResponse)
def metric_drilldown(
    key: str,
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    periodType: Literal["daily", "weekly", "monthly"] = Query("weekly"),
    reduction: Literal["sum", "average"] = Query("sum"),
    client: WarehouseClient = Depends(get_warehouse),
):
    if key not in catalog.METRICS:
        raise HTTPException(status_code=404, detail="Metric not found")
    start, end = resolve_range(startDate, endDate)
    hist, fetch_end = fetch_window(start, end)
    history = client.fetch_time_series(key, hist, fetch_end)
    return build_metric_drill(key, history, start, end, periodType, reduction, history_start=hist)
