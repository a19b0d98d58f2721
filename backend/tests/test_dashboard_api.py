# backend/tests/test_dashboard_api.py
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from growthdash.db.warehouse import WarehouseClient, get_warehouse

Q2 = "startDate=2024-04-01&endDate=2024-06-30"


def _in_q2(rows, col):
    return sum(r[col] for r in rows if "2024-04-01" <= r["event_date"] <= "2024-06-30")


def _section(data, title):
    return next(s for s in data["graphSections"] if s["title"] == title)


def test_health(client: TestClient):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_dashboard_shape(client: TestClient):
    r = client.get(f"/api/dashboard?{Q2}&periodType=monthly")
    assert r.status_code == 200
    data = r.json()
    assert set(data) == {"timeframe", "graphSections", "trafficBreakdown", "funnelSections"}
    tf = data["timeframe"]
    assert tf["start_date"] == "2024-04-01" and tf["end_date"] == "2024-06-30"
    assert tf["period_type"] == "monthly" and tf["reduction"] == "sum"
    assert len(data["graphSections"]) == 7
    assert [f["title"] for f in data["funnelSections"]] == ["全体ファネル推移", "ショップ全体ファネル"]


def test_dashboard_defaults(client: TestClient):
    r = client.get("/api/dashboard")
    assert r.status_code == 200
    tf = r.json()["timeframe"]
    assert tf["start_date"] == "2024-01-01" and tf["period_type"] == "weekly"


def test_monthly_chart_rows_and_totals(client: TestClient, warehouse_rows):
    data = client.get(f"/api/dashboard?{Q2}&periodType=monthly").json()
    hp = _section(data, "HPの推移")
    rows = hp["chart"]["rows"]
    assert [row["date"] for row in rows] == ["2024-04-01", "2024-05-01", "2024-06-01"]
    assert [row["displayDate"] for row in rows] == ["2024/4", "2024/5", "2024/6"]
    assert sum(row["HP閲覧数"] for row in rows) == _in_q2(warehouse_rows["funnel_daily"], "hp_views")
    assert len(hp["series"][0]["data"]) == 91


def test_weekly_rows_start_on_sunday(client: TestClient):
    data = client.get(f"/api/dashboard?{Q2}&periodType=weekly").json()
    rows = _section(data, "GMV推移")["chart"]["rows"]
    # 2024-04-01 is a Monday, so the first bucket starts the day before
    assert rows[0]["date"] == "2024-03-31"
    assert all(row["displayDate"].endswith("週") for row in rows)


def test_average_reduction(client: TestClient, warehouse_rows):
    data = client.get(f"/api/dashboard?{Q2}&periodType=monthly&reduction=average").json()
    june = [r["hp_views"] for r in warehouse_rows["funnel_daily"] if r["event_date"].startswith("2024-06")]
    row = _section(data, "HPの推移")["chart"]["rows"][-1]
    assert row["HP閲覧数"] == int(sum(june) / len(june) + 0.5)


def test_comparisons_use_full_history(client: TestClient, warehouse_rows):
    data = client.get(f"/api/dashboard?{Q2}").json()
    hp = _section(data, "HPの推移")
    assert [c["label"] for c in hp["comparisons"]] == ["day-over-day", "week-over-week", "month-over-month"]
    prev, cur = [r["hp_views"] for r in warehouse_rows["funnel_daily"][-2:]]
    day = hp["comparisons"][0]
    assert day["percent"] == round(abs((cur - prev) * 100.0 / prev), 1)
    assert day["direction"] == ("up" if cur > prev else "down" if cur < prev else "flat")
    # the multi-series funnel chart carries no badges
    assert _section(data, "ファネル推移")["comparisons"] == []


def test_churn_sentiment_is_inverted(client: TestClient):
    data = client.get(f"/api/dashboard?{Q2}").json()
    for c in _section(data, "解約率推移")["comparisons"]:
        expected = {"up": "negative", "down": "positive", "flat": "neutral"}[c["direction"]]
        assert c["sentiment"] == expected


def test_funnel_sections(client: TestClient, warehouse_rows):
    data = client.get(f"/api/dashboard?{Q2}").json()
    site, line = data["funnelSections"]
    assert [s["title"] for s in site["stages"]] == ["HP閲覧数", "会員ページ", "新規登録", "有料転換", "初注文完了"]
    assert site["stages"][0]["value"] == _in_q2(warehouse_rows["funnel_daily"], "hp_views")
    assert site["stages"][0]["conversionRate"] is None
    assert len(site["stepRates"]) == 4 and len(line["stepRates"]) == 5
    first, last = site["stages"][0]["value"], site["stages"][-1]["value"]
    assert site["overallConversionRate"] == round(last * 100.0 / first, 2)
    assert site["overallFromOverride"] is False
    assert all(len(s["comparisons"]) == 3 for s in line["stages"])


def test_traffic_breakdown(client: TestClient, warehouse_rows):
    data = client.get(f"/api/dashboard?{Q2}").json()
    traffic = data["trafficBreakdown"]
    assert [t["title"] for t in traffic] == ["広告", "SEO", "SNS", "直接", "その他"]
    seo = sum(r["visits"] for r in warehouse_rows["traffic_daily"]
              if r["source"] == "seo" and "2024-04-01" <= r["event_date"] <= "2024-06-30")
    assert traffic[1]["count"] == seo
    assert abs(sum(t["share"] for t in traffic) - 100.0) < 0.5


def test_series_selection(client: TestClient):
    data = client.get(f"/api/dashboard?{Q2}&series=hp_views&series=registrations").json()
    funnel_chart = _section(data, "ファネル推移")["chart"]
    assert funnel_chart["seriesNames"] == ["新規登録"]
    assert set(funnel_chart["rows"][0]) == {"date", "displayDate", "tooltipLabel", "新規登録"}
    assert _section(data, "GMV推移")["chart"]["seriesNames"] == []


def test_inverted_range_gives_empty_charts(client: TestClient):
    r = client.get("/api/dashboard?startDate=2024-06-30&endDate=2024-04-01")
    assert r.status_code == 200
    assert all(s["chart"]["rows"] == [] for s in r.json()["graphSections"])

    # end before the history start
    r = client.get("/api/dashboard?startDate=2024-03-01&endDate=2023-12-01")
    assert r.status_code == 200
    data = r.json()
    assert all(s["chart"]["rows"] == [] for s in data["graphSections"])
    assert all(st["value"] == 0 for f in data["funnelSections"] for st in f["stages"])
    assert data["timeframe"]["history_start"] == "2023-12-01"


def test_bad_params(client: TestClient):
    assert client.get("/api/dashboard?startDate=2024/04/01").status_code == 400
    assert client.get("/api/dashboard?series=bogus").status_code == 400
    assert client.get("/api/dashboard?periodType=yearly").status_code == 422


def test_upstream_failure_is_surfaced(client: TestClient, empty_db_url):
    from growthdash.main import app

    app.dependency_overrides[get_warehouse] = lambda: WarehouseClient(create_engine(empty_db_url))
    r = client.get(f"/api/dashboard?{Q2}")
    assert r.status_code == 502
    assert "error" in r.json()


def test_metric_drilldown(client: TestClient, warehouse_rows):
    r = client.get("/api/metrics/gmv?startDate=2024-06-01&endDate=2024-06-30&periodType=daily")
    assert r.status_code == 200
    data = r.json()
    assert data["metric"] == "gmv" and data["title"] == "GMV"
    assert len(data["chart"]["rows"]) == 30
    assert data["total"] == sum(r["gmv"] for r in warehouse_rows["kpi_daily"] if r["event_date"].startswith("2024-06"))
    assert len(data["comparisons"]) == 3


def test_metric_catalog_and_unknown_metric(client: TestClient):
    keys = [m["key"] for m in client.get("/api/metrics").json()]
    assert "churn_rate" in keys and "third_orders" in keys
    assert client.get("/api/metrics/nope").status_code == 404


def test_daily_average_keeps_fractional_churn(client: TestClient, warehouse_rows):
    data = client.get("/api/dashboard?startDate=2024-06-01&endDate=2024-06-30&periodType=daily&reduction=average").json()
    rows = _section(data, "解約率推移")["chart"]["rows"]
    raw = [max(r["churn_rate"], 1.0) for r in warehouse_rows["kpi_daily"] if r["event_date"].startswith("2024-06")]
    assert [row["解約率"] for row in rows] == raw
