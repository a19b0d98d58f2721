# backend/growthdash/analytics/catalog.py
"""Metric catalog: warehouse location and display settings for every chartable metric."""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from growthdash.analytics.chart import ROW_KEYS

Cols = Literal["6", "12"]


class MetricDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    table: str
    column: str
    higher_is_better: bool = True
    # rate-like metrics are clamped to core.config.CHURN_RATE_FLOOR
    rate_floor: bool = False

    @field_validator("title")
    @classmethod
    def _title_not_a_row_key(cls, v: str) -> str:
        # titles become chart row keys
        if v in ROW_KEYS:
            raise ValueError(f"metric title {v!r} is reserved for chart rows")
        return v


class GraphDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    cols: Cols
    metrics: List[str]
    # comparison badges are drawn from the first metric
    with_comparisons: bool = True


class FunnelDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    stages: List[str]


# ---------- warehouse tables ----------
FUNNEL_TABLE = "funnel_daily"
LINE_FUNNEL_TABLE = "line_funnel_daily"
KPI_TABLE = "kpi_daily"
TRAFFIC_TABLE = "traffic_daily"


def _m(key: str, title: str, table: str, column: str, **kw) -> MetricDef:
    return MetricDef(key=key, title=title, table=table, column=column, **kw)


_METRICS: List[MetricDef] = [
    # site funnel
    _m("hp_views",           "HP閲覧数",       FUNNEL_TABLE, "hp_views"),
    _m("member_page_views",  "会員ページ",     FUNNEL_TABLE, "member_page_views"),
    _m("registrations",      "新規登録",       FUNNEL_TABLE, "registrations"),
    _m("paid_conversions",   "有料転換",       FUNNEL_TABLE, "paid_conversions"),
    _m("first_orders",       "初注文完了",     FUNNEL_TABLE, "first_orders"),
    # LINE funnel
    _m("line_registrations", "LINE登録",       LINE_FUNNEL_TABLE, "new_users"),
    _m("shop_access",        "ショップアクセス", LINE_FUNNEL_TABLE, "product_unique_users"),
    _m("cart_adds",          "カート追加",     LINE_FUNNEL_TABLE, "cart_unique_users"),
    _m("orders",             "注文",           LINE_FUNNEL_TABLE, "order_unique_users"),
    _m("second_orders",      "2回目注文",      LINE_FUNNEL_TABLE, "repeat_2_plus"),
    _m("third_orders",       "3回目注文",      LINE_FUNNEL_TABLE, "repeat_3_plus"),
    # business KPIs
    _m("gmv",                "GMV",            KPI_TABLE, "gmv"),
    _m("paid_subscriptions", "有料契約数",     KPI_TABLE, "paid_subscriptions"),
    _m("churn_rate",         "解約率",         KPI_TABLE, "churn_rate", higher_is_better=False, rate_floor=True),
    _m("new_members",        "新規会員登録",   KPI_TABLE, "new_registrations"),
    _m("branded_searches",   "指名検索件数",   KPI_TABLE, "branded_searches"),
]

METRICS: Dict[str, MetricDef] = {m.key: m for m in _METRICS}

# warehouse traffic source code -> display title, in display order
TRAFFIC_SOURCES: Dict[str, str] = {
    "ads": "広告",
    "seo": "SEO",
    "sns": "SNS",
    "direct": "直接",
    "other": "その他",
}

GRAPHS: List[GraphDef] = [
    GraphDef(title="HPの推移", cols="12", metrics=["hp_views"]),
    GraphDef(
        title="ファネル推移",
        cols="12",
        metrics=["member_page_views", "registrations", "paid_conversions", "first_orders"],
        with_comparisons=False,
    ),
    GraphDef(title="GMV推移", cols="12", metrics=["gmv"]),
    GraphDef(title="有料契約数推移", cols="12", metrics=["paid_subscriptions"]),
    GraphDef(title="解約率推移", cols="12", metrics=["churn_rate"]),
    GraphDef(title="新規会員登録推移", cols="12", metrics=["new_members"]),
    GraphDef(title="指名検索件数", cols="6", metrics=["branded_searches"]),
]

FUNNELS: List[FunnelDef] = [
    FunnelDef(
        title="全体ファネル推移",
        stages=["hp_views", "member_page_views", "registrations", "paid_conversions", "first_orders"],
    ),
    FunnelDef(
        title="ショップ全体ファネル",
        stages=["line_registrations", "shop_access", "cart_adds", "orders", "second_orders", "third_orders"],
    ),
]


def metrics_in_table(table: str) -> List[MetricDef]:
    return [m for m in _METRICS if m.table == table]


def get_metric(key: str) -> Optional[MetricDef]:
    return METRICS.get(key)
