import logging
import os
import sqlite3
from pathlib import Path

from sqlalchemy import create_engine, inspect

from growthdash.core import config

logger = logging.getLogger(__name__)

_THIS = Path(__file__).resolve()

# SQL scripts directory: backend/growthdash/db/sql
SQL_DIR = _THIS.parent / "sql"
SCHEMA_SQL = SQL_DIR / "init_schema.sql"

REQUIRED_TABLES = ("funnel_daily", "line_funnel_daily", "kpi_daily", "traffic_daily")

if config.DATABASE_URL == config.DEFAULT_DB_URL:
    config.DATA_DIR.mkdir(parents=True, exist_ok=True)

engine = create_engine(config.DATABASE_URL, echo=False, future=True, **config.engine_options())


def get_sqlite_conn() -> sqlite3.Connection:
    """Raw sqlite connection (for executing SQL scripts)."""
    if engine.url.get_backend_name() != "sqlite":
        raise RuntimeError("get_sqlite_conn only supports sqlite backend")
    conn = sqlite3.connect(Path(engine.url.database).as_posix())
    conn.row_factory = sqlite3.Row
    return conn


def missing_tables() -> list:
    present = set(inspect(engine).get_table_names())
    return [t for t in REQUIRED_TABLES if t not in present]


def executescript(path: Path):
    if not path.exists():
        raise FileNotFoundError(f"SQL file not found: {path}")
    sql = path.read_text(encoding="utf-8")
    with get_sqlite_conn() as c:
        c.executescript(sql)
        c.commit()


def maybe_bootstrap():
    # Only the local sqlite warehouse is ours to create; remote warehouses are read-only here.
    if not config.AUTO_BOOTSTRAP_DB or engine.url.get_backend_name() != "sqlite":
        return
    missing = missing_tables()
    if missing:
        logger.info("Bootstrapping warehouse schema (missing: %s)", ", ".join(missing))
        executescript(SCHEMA_SQL)


if os.getenv("RESET_DB", "0") == "1" and engine.url.get_backend_name() == "sqlite":
    p = Path(engine.url.database)
    if p.exists():
        p.unlink()
        logger.info("RESET_DB=1: removed %s", p)
