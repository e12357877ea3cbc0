from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from app.features.problems.schemas import Problem, ProblemCreate


class ProblemsRepository:
    """In-process problem store; the judge only ever reads from it."""

    def __init__(self) -> None:
        self._rows: Dict[str, Problem] = {}

    async def create(self, payload: ProblemCreate) -> Problem:
        problem = Problem(
            **payload.model_dump(),
            id=str(uuid4()),
            created_at=datetime.now(timezone.utc),
        )
        self._rows[problem.id] = problem
        return problem

    async def get(self, problem_id: str) -> Optional[Problem]:
        return self._rows.get(problem_id)

    async def list(self) -> List[Problem]:
        return sorted(self._rows.values(), key=lambda p: p.created_at)

    async def delete(self, problem_id: str) -> Optional[Problem]:
        return self._rows.pop(problem_id, None)

    def clear(self) -> None:
        self._rows.clear()


problems_repository = ProblemsRepository()

__all__ = ["problems_repository", "ProblemsRepository"]
