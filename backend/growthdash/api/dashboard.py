# backend/growthdash/api/dashboard.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Literal, Optional

from growthdash.analytics import catalog
from growthdash.api.params import fetch_window, resolve_range
from growthdash.db.warehouse import WarehouseClient, get_warehouse
from growthdash.schemas.dashboard import DashboardResponse
from growthdash.services.dashboard import build_dashboard, load_sources

router = APIRouter(tags=["dashboard"])


@router.get("/api/dashboard", response_model=DashboardResponse)
async def dashboard(
    startDate: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    endDate: Optional[str] = Query(None, description="End date (YYYY-MM-DD), defaults to today"),
    periodType: Literal["daily", "weekly", "monthly"] = Query("weekly"),
    reduction: Literal["sum", "average"] = Query("sum"),
    series: Optional[List[str]] = Query(None, description="Metric keys to keep in charts (repeatable)"),
    client: WarehouseClient = Depends(get_warehouse),
):
    start, end = resolve_range(startDate, endDate)
    if series:
        unknown = [k for k in series if k not in catalog.METRICS]
        if unknown:
            raise HTTPException(400, detail=f"Unknown series: {', '.join(unknown)}")

    hist, fetch_end = fetch_window(start, end)
    sources = await load_sources(client, hist, fetch_end)
    return build_dashboard(
        sources, start, end,
        period=periodType,
        reduction=reduction,
        active=series or None,
        history_start=hist,
    )
