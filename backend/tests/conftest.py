# backend/tests/conftest.py
import os, sys, sqlite3, pathlib, tempfile, pytest
from fastapi.testclient import TestClient

BACKEND_DIR = pathlib.Path(__file__).resolve().parents[1]   # .../backend
APP_DIR = BACKEND_DIR / "growthdash"
SCHEMA_SQL = APP_DIR / "db" / "sql" / "init_schema.sql"
DB_PATH = pathlib.Path(tempfile.gettempdir()) / "growthdash_test_warehouse.db"

# Make `from growthdash.*` importable
sys.path.insert(0, str(BACKEND_DIR))

# Point the warehouse at a throwaway sqlite file before anything imports the engine
os.environ["DATABASE_URL"] = f"sqlite:///{DB_PATH.as_posix()}"
os.environ["AUTO_BOOTSTRAP_DB"] = "0"
os.environ.pop("LINE_FUNNEL_OVERALL_OVERRIDE", None)

from sample_data import seed_warehouse  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def warehouse_rows():
    if DB_PATH.exists():
        DB_PATH.unlink()
    with sqlite3.connect(DB_PATH) as conn:
        conn.executescript(SCHEMA_SQL.read_text(encoding="utf-8"))
        rows = seed_warehouse(conn)
    yield rows


@pytest.fixture()
def client():
    from growthdash.main import app
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def empty_db_url(tmp_path):
    path = tmp_path / "empty.db"
    with sqlite3.connect(path) as conn:
        conn.executescript(SCHEMA_SQL.read_text(encoding="utf-8"))
    return f"sqlite:///{path.as_posix()}"
