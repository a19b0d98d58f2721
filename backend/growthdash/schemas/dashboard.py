from pydantic import BaseModel
from typing import Dict, List, Literal, Optional, Union

from growthdash.analytics.aggregation import PeriodType, Reduction
from growthdash.analytics.comparison import ComparisonEntry

Cols = Literal["6", "12"]


class Timeframe(BaseModel):
    start_date: str
    end_date: str
    history_start: str
    period_type: PeriodType
    reduction: Reduction


class SeriesPoint(BaseModel):
    date: str
    value: float


class SeriesOut(BaseModel):
    key: str
    title: str
    data: List[SeriesPoint]


class ChartOut(BaseModel):
    periodType: PeriodType
    seriesNames: List[str]
    # each row: {"date": "YYYY-MM-DD", "displayDate": "...", <series title>: value}
    rows: List[Dict[str, Union[str, float]]]


class GraphSection(BaseModel):
    title: str
    cols: Cols
    series: List[SeriesOut]
    chart: ChartOut
    comparisons: List[ComparisonEntry]


class TrafficItem(BaseModel):
    title: str
    count: float
    share: float
    comparisons: List[ComparisonEntry]


class FunnelStageOut(BaseModel):
    key: str
    title: str
    value: float
    # rate from the previous stage, in percent (None on the first stage)
    conversionRate: Optional[float] = None
    comparisons: List[ComparisonEntry]


class FunnelSection(BaseModel):
    title: str
    stages: List[FunnelStageOut]
    stepRates: List[float]
    overallConversionRate: Optional[float] = None
    overallFromOverride: bool = False


class DashboardResponse(BaseModel):
    timeframe: Timeframe
    graphSections: List[GraphSection]
    trafficBreakdown: List[TrafficItem]
    funnelSections: List[FunnelSection]


class MetricDrillResponse(BaseModel):
    timeframe: Timeframe
    metric: str
    title: str
    total: float
    series: SeriesOut
    chart: ChartOut
    comparisons: List[ComparisonEntry]
