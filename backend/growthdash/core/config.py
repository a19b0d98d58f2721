# backend/growthdash/core/config.py
import os
import datetime as dt
from pathlib import Path
from typing import Optional

# ── Paths are relative to this file (…/backend/growthdash/core/config.py)
_THIS = Path(__file__).resolve()
APP_DIR = _THIS.parents[1]             # backend/growthdash
DATA_DIR = APP_DIR / "data"            # backend/growthdash/data

DEFAULT_DB_URL = f"sqlite:///{(DATA_DIR / 'warehouse.db').as_posix()}"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


# ---------- warehouse ----------
DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DB_URL)
WAREHOUSE_PROJECT_ID = os.getenv("WAREHOUSE_PROJECT_ID", "growth-analytics")
WAREHOUSE_CREDENTIALS_PATH = os.getenv("WAREHOUSE_CREDENTIALS_PATH", "./key/prod.json")
WAREHOUSE_USE_ADC = _flag("WAREHOUSE_USE_ADC", "false")
AUTO_BOOTSTRAP_DB = _flag("AUTO_BOOTSTRAP_DB", "1")

# ---------- dashboard ----------
HISTORY_START_DATE = dt.date.fromisoformat(os.getenv("HISTORY_START_DATE", "2024-01-01"))
CHURN_RATE_FLOOR = float(os.getenv("CHURN_RATE_FLOOR", "1"))
LINE_FUNNEL_OVERALL_OVERRIDE = _optional_float("LINE_FUNNEL_OVERALL_OVERRIDE")

# ---------- http ----------
CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def engine_options() -> dict:
    """
    Extra create_engine() kwargs for the configured warehouse.
    sqlite needs check_same_thread off (fetches run in the threadpool);
    bigquery:// URLs take the credential file unless ambient credentials are used.
    """
    if DATABASE_URL.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    if DATABASE_URL.startswith("bigquery"):
        return {} if WAREHOUSE_USE_ADC else {"credentials_path": WAREHOUSE_CREDENTIALS_PATH}
    return {}
