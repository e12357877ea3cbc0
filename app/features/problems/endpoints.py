from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.features.problems.schemas import (
    ProblemCreate,
    ProblemEnvelope,
    ReferenceFailureResponse,
    public_problem,
)
from app.features.problems.service import problems_service

router = APIRouter(prefix="/problems", tags=["problems"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProblemEnvelope,
    responses={400: {"model": ReferenceFailureResponse}},
    summary="Create a problem after validating its reference solutions",
)
async def create_problem(payload: ProblemCreate):
    creation = await problems_service.create_problem(payload)
    if not creation.created:
        failure = creation.failure
        body = ReferenceFailureResponse(
            message=f"Reference solution failed for {failure.language_name}",
            test_case=failure.test_case,
            judge0_status=failure.judge0_status,
            test_case_index=failure.test_case_index,
        )
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(by_alias=True, mode="json"))
    return ProblemEnvelope(message="Problem created successfully", data=creation.problem)


@router.get("", summary="List problems")
async def list_problems() -> Dict[str, Any]:
    problems = await problems_service.repository.list()
    return {"success": True, "data": [public_problem(p) for p in problems]}


@router.get("/{problem_id}", summary="Fetch one problem (reference solutions omitted)")
async def get_problem(problem_id: str) -> Dict[str, Any]:
    problem = await problems_service.get_problem(problem_id)
    return {"success": True, "data": public_problem(problem)}


@router.delete("/{problem_id}", summary="Delete a problem")
async def delete_problem(problem_id: str) -> Dict[str, Any]:
    problem = await problems_service.delete_problem(problem_id)
    return {"success": True, "data": public_problem(problem)}
