# backend/growthdash/services/dashboard.py
"""
Dashboard assembly: warehouse series -> graph sections, traffic breakdown, funnels.

Charts and funnel totals use the selected [start, end] range; comparison
badges use the calendar history history_start .. end, missing days counted as 0.
"""
import asyncio
import datetime as dt
import logging
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict
from starlette.concurrency import run_in_threadpool

from growthdash.analytics import catalog
from growthdash.analytics.aggregation import DEFAULT_REDUCTION, PeriodType, Reduction
from growthdash.analytics.chart import ChartDataset, build_chart_dataset
from growthdash.analytics.comparison import calendar_comparisons
from growthdash.analytics.funnel import FunnelStage, reduce_funnel
from growthdash.analytics.range_filter import filter_range
from growthdash.analytics.timeseries import TimeSeries
from growthdash.analytics.traffic import traffic_breakdown
from growthdash.core import config
from growthdash.db.warehouse import WarehouseClient
from growthdash.schemas.dashboard import (
    ChartOut,
    DashboardResponse,
    FunnelSection,
    FunnelStageOut,
    GraphSection,
    MetricDrillResponse,
    SeriesOut,
    SeriesPoint,
    Timeframe,
    TrafficItem,
)

logger = logging.getLogger(__name__)


class DashboardSources(BaseModel):
    """Full-history series for one request, keyed by catalog metric key."""
    model_config = ConfigDict(frozen=True)

    metrics: Dict[str, TimeSeries]
    traffic: List[TimeSeries]


# ---------- fetch ----------
async def load_sources(client: WarehouseClient, start: dt.date, end: dt.date) -> DashboardSources:
    """
    Independent warehouse queries run concurrently in the threadpool.
    Any failure propagates as UpstreamFetchError; nothing is substituted.
    """
    funnel, line, kpi, traffic = await asyncio.gather(
        run_in_threadpool(client.fetch_funnel_series, start, end),
        run_in_threadpool(client.fetch_line_funnel_series, start, end),
        run_in_threadpool(client.fetch_kpi_series, start, end),
        run_in_threadpool(client.fetch_traffic_series, start, end),
    )
    return DashboardSources(metrics={**funnel, **line, **kpi}, traffic=traffic)


# ---------- mapping ----------
def timeframe(
    start: dt.date,
    end: dt.date,
    period: PeriodType,
    reduction: Reduction,
    history_start: dt.date = config.HISTORY_START_DATE,
) -> Timeframe:
    return Timeframe(
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        history_start=history_start.isoformat(),
        period_type=period,
        reduction=reduction,
    )


def series_out(key: str, series: TimeSeries) -> SeriesOut:
    return SeriesOut(
        key=key,
        title=series.title,
        data=[SeriesPoint(date=p.date.isoformat(), value=p.value) for p in series.sorted_points()],
    )


def chart_out(dataset: ChartDataset) -> ChartOut:
    return ChartOut(
        periodType=dataset.period_type,
        seriesNames=list(dataset.series_names),
        rows=[r.as_record() for r in dataset.rows],
    )


def graph_section(
    gdef: catalog.GraphDef,
    sources: DashboardSources,
    start: dt.date,
    end: dt.date,
    period: PeriodType,
    reduction: Reduction,
    active: Optional[Sequence[str]] = None,
    history_start: Optional[dt.date] = None,
) -> GraphSection:
    keys = [k for k in gdef.metrics if active is None or k in active]
    series = [sources.metrics[k] for k in keys]
    dataset = build_chart_dataset(series, start, end, period, reduction)

    comparisons = []
    if gdef.with_comparisons:
        lead = catalog.METRICS[gdef.metrics[0]]
        comparisons = calendar_comparisons(
            sources.metrics[lead.key], end, history_start, higher_is_better=lead.higher_is_better,
        )

    return GraphSection(
        title=gdef.title,
        cols=gdef.cols,
        series=[series_out(k, filter_range(s, start, end)) for k, s in zip(keys, series)],
        chart=chart_out(dataset),
        comparisons=comparisons,
    )


def funnel_section(
    fdef: catalog.FunnelDef,
    sources: DashboardSources,
    start: dt.date,
    end: dt.date,
    override: Optional[float] = None,
    history_start: Optional[dt.date] = None,
) -> FunnelSection:
    stages = []
    for key in fdef.stages:
        history = sources.metrics[key]
        stages.append(FunnelStage(
            title=history.title,
            value=filter_range(history, start, end).total(),
            comparisons=calendar_comparisons(
                history, end, history_start, higher_is_better=catalog.METRICS[key].higher_is_better,
            ),
        ))
    result = reduce_funnel(stages, override=override)
    overall = result.overall_rate
    if overall is not None and not result.overall_from_override:
        overall = round(overall, 2)

    return FunnelSection(
        title=fdef.title,
        stages=[
            FunnelStageOut(
                key=key,
                title=stage.title,
                value=stage.value,
                conversionRate=round(result.step_rates[i - 1], 1) if i > 0 else None,
                comparisons=stage.comparisons or [],
            )
            for i, (key, stage) in enumerate(zip(fdef.stages, result.stages))
        ],
        stepRates=[round(r, 1) for r in result.step_rates],
        overallConversionRate=overall,
        overallFromOverride=result.overall_from_override,
    )


def traffic_items(
    sources: DashboardSources,
    start: dt.date,
    end: dt.date,
    history_start: Optional[dt.date] = None,
) -> List[TrafficItem]:
    return [
        TrafficItem(title=t.title, count=t.count, share=t.share, comparisons=t.comparisons)
        for t in traffic_breakdown(sources.traffic, start, end, history_start)
    ]


def funnel_overrides() -> Dict[str, Optional[float]]:
    return {"ショップ全体ファネル": config.LINE_FUNNEL_OVERALL_OVERRIDE}


# ---------- public ----------
def build_dashboard(
    sources: DashboardSources,
    start: dt.date,
    end: dt.date,
    period: PeriodType = "weekly",
    reduction: Reduction = DEFAULT_REDUCTION,
    active: Optional[Sequence[str]] = None,
    history_start: dt.date = config.HISTORY_START_DATE,
    overrides: Optional[Dict[str, Optional[float]]] = None,
) -> DashboardResponse:
    overrides = funnel_overrides() if overrides is None else overrides
    graphs = [graph_section(g, sources, start, end, period, reduction, active, history_start) for g in catalog.GRAPHS]
    funnels = [funnel_section(f, sources, start, end, overrides.get(f.title), history_start) for f in catalog.FUNNELS]
    logger.info(
        "Dashboard built: %s..%s (%s/%s), %d graphs, %d funnels",
        start, end, period, reduction, len(graphs), len(funnels),
    )
    return DashboardResponse(
        timeframe=timeframe(start, end, period, reduction, history_start),
        graphSections=graphs,
        trafficBreakdown=traffic_items(sources, start, end, history_start),
        funnelSections=funnels,
    )


def build_metric_drill(
    key: str,
    history: TimeSeries,
    start: dt.date,
    end: dt.date,
    period: PeriodType = "weekly",
    reduction: Reduction = DEFAULT_REDUCTION,
    history_start: dt.date = config.HISTORY_START_DATE,
) -> MetricDrillResponse:
    metric = catalog.METRICS[key]
    in_range = filter_range(history, start, end)
    return MetricDrillResponse(
        timeframe=timeframe(start, end, period, reduction, history_start),
        metric=key,
        title=metric.title,
        total=in_range.total(),
        series=series_out(key, in_range),
        chart=chart_out(build_chart_dataset([history], start, end, period, reduction)),
        comparisons=calendar_comparisons(history, end, history_start, higher_is_better=metric.higher_is_better),
    )
