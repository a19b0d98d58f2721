# backend/growthdash/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import importlib, logging

from growthdash.core import config
from growthdash.core.errors import UpstreamFetchError

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(title="Growth Dashboard API", version="0.1.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Upstream failures are surfaced, never papered over with generated figures
@app.exception_handler(UpstreamFetchError)
async def upstream_fetch_error(request: Request, exc: UpstreamFetchError):
    logging.error("Upstream fetch failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"error": f"Failed to fetch dashboard data ({exc.source})"})


# Health check
@app.get("/api/health")
def health():
    return {"status": "ok"}


# ---- Warehouse schema (local sqlite only) ----
from growthdash.db.session import maybe_bootstrap  # noqa: E402

try:
    maybe_bootstrap()
except Exception as e:
    logging.warning("Warehouse bootstrap skipped due to error: %s", e)


# ---- Router mounting helper (logs reasons for optional modules; no silent failures) ----
def _mount_optional(module_path: str):
    try:
        mod = importlib.import_module(module_path)
        router = getattr(mod, "router")
        app.include_router(router)
        logging.info("Mounted router: %s", module_path)
    except Exception as e:
        logging.warning("Skip router %s due to error: %s", module_path, e)


# ===== Required: dashboard payload (fail fast to avoid a half-broken system) =====
from growthdash.api.dashboard import router as dashboard_router  # noqa: E402
app.include_router(dashboard_router)
logging.info("Mounted router: growthdash.api.dashboard")

# ===== Optional modules (mount if present; if missing or failing, log the reason) =====
_optional_modules = [
    "growthdash.api.metrics",   # /api/metrics, /api/metrics/{key}
]

for mod in _optional_modules:
    _mount_optional(mod)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
