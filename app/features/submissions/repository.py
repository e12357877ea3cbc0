from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from app.features.submissions.schemas import SubmissionRecord, SubmissionSummary, Verdict


class SubmissionsRepository:
    """Summarised submission records, written after a judge call completes."""

    def __init__(self) -> None:
        self._rows: Dict[str, SubmissionRecord] = {}

    async def create_submission(
        self,
        *,
        problem_id: str,
        language: str,
        source_code: str,
        summary: SubmissionSummary,
        verdicts: List[Verdict],
    ) -> SubmissionRecord:
        record = SubmissionRecord(
            id=str(uuid4()),
            problem_id=problem_id,
            language=language,
            source_code=source_code,
            summary=summary,
            test_case_results=verdicts,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._rows[record.id] = record
        return record

    async def get_submission(self, submission_id: str) -> Optional[SubmissionRecord]:
        return self._rows.get(submission_id)

    async def list(self) -> List[SubmissionRecord]:
        return sorted(self._rows.values(), key=lambda r: r.created_at)

    async def list_for_problem(self, problem_id: str) -> List[SubmissionRecord]:
        return [r for r in await self.list() if r.problem_id == problem_id]

    def clear(self) -> None:
        self._rows.clear()


submissions_repository = SubmissionsRepository()

__all__ = ["submissions_repository", "SubmissionsRepository"]
