# backend/growthdash/api/params.py
import datetime as dt
from typing import Optional, Tuple

from fastapi import HTTPException

from growthdash.core import config

_DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str, name: str) -> dt.date:
    try:
        return dt.datetime.strptime(value, _DATE_FORMAT).date()
    except ValueError:
        raise HTTPException(400, detail=f"Invalid {name} format. Use YYYY-MM-DD.")


def resolve_range(start_date: Optional[str], end_date: Optional[str]) -> Tuple[dt.date, dt.date]:
    """
    Requested window, defaulting to the fixed history start and today.
    start > end is allowed and simply yields empty charts.
    """
    start = parse_date(start_date, "startDate") if start_date else config.HISTORY_START_DATE
    end = parse_date(end_date, "endDate") if end_date else dt.date.today()
    return start, end


def fetch_window(start: dt.date, end: dt.date) -> Tuple[dt.date, dt.date]:
    """
    Warehouse window for a request: comparisons need the full history, and an
    inverted range still has to query a non-empty span.
    """
    return min(config.HISTORY_START_DATE, start, end), max(start, end)
