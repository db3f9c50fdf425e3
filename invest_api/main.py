"""FastAPI application entry point.

Serves the investment-advisory API consumed by the front-end on port 3000.

Usage:
    uvicorn invest_api.main:app --host 0.0.0.0 --port 3000 --reload
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from invest_api.config import settings
from invest_api.database import close_db, init_db, is_db_available, record_audit
from invest_api.exceptions import AdvisoryError
from invest_api.models.db_models import PerformanceLog
from invest_api.routers import auth, investimentos, perfil, performance, produtos
from invest_api.routers.performance import memory_mb, record_response_time
from invest_api.store import get_store

# ── Logging ──────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan (startup + shutdown) ────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Investment Advisory API on port %s …", settings.APP_PORT)
    store = get_store()
    logger.info("Document store: %s", store.path)
    await init_db()
    yield
    await close_db()
    logger.info("Application shutdown complete.")


# ── Application factory ──────────────────────────────────────────────────

app = FastAPI(
    title="Investment Advisory API",
    description=(
        "Backend for the investment-advisory demo: risk score (pontuação) "
        "and risk-profile tiers computed from the client's portfolio, "
        "recommended products, compound-interest simulation and investment "
        "records over a JSON document store."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request-level timing & performance logging middleware ─────────────────

@app.middleware("http")
async def timing_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"

    record_response_time(elapsed_ms)

    if is_db_available():
        await record_audit(PerformanceLog(
            endpoint=str(request.url.path),
            method=request.method,
            response_time_ms=round(elapsed_ms, 2),
            memory_mb=round(memory_mb(), 2),
            threads=threading.active_count(),
        ))

    return response


# ── Exception handlers ───────────────────────────────────────────────────

@app.exception_handler(AdvisoryError)
async def advisory_exception_handler(request: Request, exc: AdvisoryError):
    logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. Please check the logs."},
    )


# ── Register routers ─────────────────────────────────────────────────────
app.include_router(auth.router)
app.include_router(perfil.router)
app.include_router(produtos.router)
app.include_router(investimentos.router)
app.include_router(performance.router)


# ── Health check ──────────────────────────────────────────────────────────

@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "port": settings.APP_PORT, "auditDatabase": is_db_available()}


# ── Dev entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "invest_api.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=True,
    )
