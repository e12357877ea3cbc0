# app/features/submissions/endpoints.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from app.common.schemas import ErrorResponse
from app.features.judge0.languages import resolve_language
from app.features.problems.service import problems_service
from app.features.submissions.repository import submissions_repository
from app.features.submissions.schemas import (
    ExecuteCodeRequest,
    JudgeResponse,
    SubmitResponse,
)
from app.features.submissions.service import judge_service
from app.features.submissions.verdicts import summarize

logger = logging.getLogger("submissions")

router = APIRouter(prefix="/problems", tags=["submissions"])

_JUDGE_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


@router.get(
    "/submissions",
    summary="List stored submissions, optionally for one problem",
)
async def list_submissions(problem_id: Optional[str] = Query(default=None, alias="problemId")) -> Dict[str, Any]:
    if problem_id:
        records = await submissions_repository.list_for_problem(problem_id)
    else:
        records = await submissions_repository.list()
    # source code stays out of listings; fetch one submission to see it
    data = [r.model_dump(by_alias=True, mode="json", exclude={"source_code"}) for r in records]
    return {"success": True, "data": data}


@router.get(
    "/submissions/{submission_id}",
    summary="Fetch a stored submission summary",
)
async def get_submission(submission_id: str) -> Dict[str, Any]:
    record = await submissions_repository.get_submission(submission_id)
    if record is None:
        raise HTTPException(status_code=404, detail="submission_not_found")
    return {"success": True, "data": record.model_dump(by_alias=True, mode="json")}


@router.post(
    "/{problem_id}/execute",
    response_model=JudgeResponse,
    responses=_JUDGE_ERRORS,
    summary="Run code against every test case without recording a submission",
)
async def execute_code(problem_id: str, payload: ExecuteCodeRequest):
    problem = await problems_service.get_problem(problem_id)
    outcome = await judge_service.judge_submission(problem, payload.language, payload.code)
    return JudgeResponse.from_outcome(outcome)


@router.post(
    "/{problem_id}/submit",
    response_model=SubmitResponse,
    responses=_JUDGE_ERRORS,
    summary="Judge a submission and record its summary",
)
async def submit_code(problem_id: str, payload: ExecuteCodeRequest):
    problem = await problems_service.get_problem(problem_id)
    spec = resolve_language(payload.language)
    outcome = await judge_service.judge_submission(problem, spec, payload.code)
    summary = summarize(outcome)
    record = await submissions_repository.create_submission(
        problem_id=problem.id,
        language=spec.key,
        source_code=payload.code,
        summary=summary,
        verdicts=outcome.verdicts,
    )
    logger.info(
        "Submission %s for problem %s: %s (%d/%d)",
        record.id,
        problem.id,
        summary.status.value,
        summary.passed_test_cases,
        summary.total_test_cases,
    )
    return SubmitResponse(
        success=outcome.all_passed,
        message="Submission accepted!" if outcome.all_passed else "Submission failed",
        passed=outcome.all_passed,
        passed_test_cases=outcome.passed_count,
        total_test_cases=outcome.total,
        test_case_results=outcome.verdicts,
        submission=record,
    )
