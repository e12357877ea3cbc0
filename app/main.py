"""FastAPI app for the code judge. Lean."""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from time import perf_counter

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.Core.config import get_settings
from app.common.errors import register_exception_handlers
from app.common.schemas import HealthCheckResponse
from app.features.judge0.endpoints import public_router as judge0_public_router
from app.features.problems.endpoints import router as problems_router
from app.features.submissions.endpoints import router as submissions_router

_settings = get_settings()
logging.basicConfig(level=_settings.log_level)

app = FastAPI(title=_settings.app_name, version=_settings.version)
_START_TIME = datetime.now(timezone.utc)


# ------------------------
# CORS Setup
# ------------------------
_CORS_ORIGIN_REGEX = re.compile(r"https?://(localhost|127\.0\.0\.1)(:\d+)?", re.I)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.origins,
    allow_origin_regex=_CORS_ORIGIN_REGEX.pattern,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------
# Custom Middlewares
# ------------------------
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    incoming = request.headers.get("X-Request-Id") or request.headers.get("X-Request-ID")
    req_id = incoming or str(uuid.uuid4())
    request.state.request_id = req_id
    logger = logging.getLogger("request")
    logger.info("request.start", extra={"request_id": req_id, "path": request.url.path, "method": request.method})
    t0 = perf_counter()
    response = await call_next(request)
    dt = int((perf_counter() - t0) * 1000)
    response.headers["X-Request-Id"] = req_id
    logger.info(
        "request.end",
        extra={"request_id": req_id, "path": request.url.path, "status_code": response.status_code, "duration_ms": dt},
    )
    return response


register_exception_handlers(app)


# ------------------------
# Routers
# ------------------------
app.include_router(judge0_public_router)
# submissions first: /problems/submissions/{id} must not be captured by /problems/{id}
app.include_router(submissions_router)
app.include_router(problems_router)


@app.get("/healthz", response_model=HealthCheckResponse)
async def healthz():
    return HealthCheckResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        services={"api": "ok", "judge0": _settings.judge0_api_url or "unconfigured"},
        version=_settings.version,
    )


@app.get("/")
async def root():
    uptime = (datetime.now(timezone.utc) - _START_TIME).total_seconds()
    return {"name": _settings.app_name, "status": "ok", "uptime_s": int(uptime)}
