from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException

from app.common.errors import BackendError
from app.features.judge0.languages import supported_languages
from app.features.judge0.schemas import Judge0Status, LanguageInfo, SupportedLanguage
from app.features.judge0.service import judge0_service

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

public_router = APIRouter(prefix="/judge0", tags=["judge0-public"])


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------

@public_router.get("/supported-languages", response_model=List[SupportedLanguage])
async def get_judge_languages():
    return [SupportedLanguage(key=spec.key, judge0_id=spec.judge0_id, name=spec.name) for spec in supported_languages()]


@public_router.get("/languages", response_model=List[LanguageInfo])
async def get_backend_languages():
    return await judge0_service.get_languages()


@public_router.get("/statuses", response_model=List[Judge0Status])
async def get_submission_statuses():
    return await judge0_service.get_statuses()


@public_router.get("/test")
async def test_judge0_connection():
    try:
        langs = await judge0_service.get_languages()
        return {"status": "connected", "count": len(langs)}
    except BackendError as exc:
        raise HTTPException(status_code=502, detail=f"Connectivity failed: {exc}") from exc


router = public_router
