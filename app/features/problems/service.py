from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.common.errors import ResourceNotFoundError
from app.features.problems.repository import ProblemsRepository, problems_repository
from app.features.problems.schemas import Problem, ProblemCreate
from app.features.submissions.schemas import ReferenceValidationFailure
from app.features.submissions.service import JudgeService, judge_service

logger = logging.getLogger("problems")


@dataclass
class ProblemCreation:
    problem: Optional[Problem] = None
    failure: Optional[ReferenceValidationFailure] = None

    @property
    def created(self) -> bool:
        return self.problem is not None


class ProblemsService:
    def __init__(self, repository: Optional[ProblemsRepository] = None, judge: Optional[JudgeService] = None):
        self.repository = repository or problems_repository
        self.judge = judge or judge_service

    async def create_problem(self, payload: ProblemCreate) -> ProblemCreation:
        """Store the problem only if every reference solution passes every test case."""
        failure = await self.judge.validate_reference_solutions(payload)
        if failure is not None:
            logger.info(
                "Reference solution for %s failed test case %d (%s)",
                failure.language,
                failure.test_case_index,
                failure.judge0_status.description,
            )
            return ProblemCreation(failure=failure)
        problem = await self.repository.create(payload)
        logger.info("Problem %s created (%d test cases)", problem.id, len(problem.test_cases))
        return ProblemCreation(problem=problem)

    async def get_problem(self, problem_id: str) -> Problem:
        problem = await self.repository.get(problem_id)
        if problem is None:
            raise ResourceNotFoundError("Problem not found")
        return problem

    async def delete_problem(self, problem_id: str) -> Problem:
        problem = await self.repository.delete(problem_id)
        if problem is None:
            raise ResourceNotFoundError("Problem not found")
        return problem


problems_service = ProblemsService()

__all__ = ["problems_service", "ProblemsService", "ProblemCreation"]
