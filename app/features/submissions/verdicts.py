"""Map Judge0 results to verdicts and fold them into a judge outcome."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from app.common.errors import BackendResponseError
from app.features.judge0.schemas import BackendResult, BackendSubmissionRequest
from app.features.submissions.schemas import (
    Judge0StatusOut,
    JudgeOutcome,
    SubmissionSummary,
    Verdict,
    VerdictStatus,
)

ACCEPTED_STATUS_ID = 3

# Judge0 CE status table (GET /statuses); ids 1 and 2 never reach the reducer
JUDGE0_STATUS_DESCRIPTIONS: Dict[int, str] = {
    1: "In Queue",
    2: "Processing",
    3: "Accepted",
    4: "Wrong Answer",
    5: "Time Limit Exceeded",
    6: "Compilation Error",
    7: "Runtime Error (SIGSEGV)",
    8: "Runtime Error (SIGXFSZ)",
    9: "Runtime Error (SIGFPE)",
    10: "Runtime Error (SIGABRT)",
    11: "Runtime Error (NZEC)",
    12: "Runtime Error (Other)",
    13: "Internal Error",
    14: "Exec Format Error",
}

_STATUS_BY_ID: Dict[int, VerdictStatus] = {
    3: VerdictStatus.ACCEPTED,
    4: VerdictStatus.WRONG_ANSWER,
    5: VerdictStatus.TIME_LIMIT_EXCEEDED,
    6: VerdictStatus.COMPILE_ERROR,
    **{sid: VerdictStatus.RUNTIME_ERROR for sid in range(7, 13)},
}

_STATUS_TEXT: Dict[VerdictStatus, str] = {
    VerdictStatus.ACCEPTED: "Test case passed",
    VerdictStatus.WRONG_ANSWER: "Wrong Answer",
    VerdictStatus.TIME_LIMIT_EXCEEDED: "Time Limit Exceeded",
    VerdictStatus.COMPILE_ERROR: "Compilation Error",
    VerdictStatus.RUNTIME_ERROR: "Runtime Error",
}


def map_status(status_id: int) -> VerdictStatus:
    return _STATUS_BY_ID.get(status_id, VerdictStatus.UNKNOWN_ERROR)


def _describe(status: VerdictStatus, result: BackendResult) -> str:
    if status in _STATUS_TEXT:
        return _STATUS_TEXT[status]
    return result.status_description or JUDGE0_STATUS_DESCRIPTIONS.get(result.status_id) or "Unknown Error"


def _time_ms(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        return float(raw) * 1000.0
    except ValueError:
        return None


def reduce_one(result: BackendResult, request: BackendSubmissionRequest, index: int) -> Verdict:
    status = map_status(result.status_id)
    actual = result.stdout.strip() if result.stdout else None
    return Verdict(
        test_case_index=index,
        passed=result.status_id == ACCEPTED_STATUS_ID,
        status=status,
        status_description=_describe(status, result),
        input=request.stdin or "",
        expected_output=request.expected_output or "",
        actual_output=actual or None,
        error=result.stderr or result.compile_output or None,
        time=result.time,
        memory=result.memory,
        execution_time_ms=_time_ms(result.time),
        judge0_status=Judge0StatusOut(
            id=result.status_id,
            description=result.status_description or JUDGE0_STATUS_DESCRIPTIONS.get(result.status_id, ""),
        ),
    )


def reduce_all(verdicts: Iterable[Verdict]) -> JudgeOutcome:
    ordered = sorted(verdicts, key=lambda v: v.test_case_index)
    return JudgeOutcome(all_passed=all(v.passed for v in ordered), verdicts=ordered)


def align_results(tokens: List[str], results: List[BackendResult]) -> List[BackendResult]:
    """Re-order batch results to submission order using the token of each request."""
    by_token = {r.token: r for r in results if r.token}
    missing = [tok for tok in tokens if tok not in by_token]
    if missing:
        raise BackendResponseError(
            f"Judge0 batch response is missing {len(missing)} submission(s)",
            details={"missing_tokens": missing},
        )
    return [by_token[tok] for tok in tokens]


def summarize(outcome: JudgeOutcome) -> SubmissionSummary:
    """Collapse an outcome into the record a caller stores for a submission."""
    first_failure = outcome.first_failure
    times = [v.execution_time_ms for v in outcome.verdicts if v.execution_time_ms is not None]
    memories = [v.memory for v in outcome.verdicts if v.memory is not None]
    return SubmissionSummary(
        status=first_failure.status if first_failure else VerdictStatus.ACCEPTED,
        passed=outcome.all_passed,
        passed_test_cases=outcome.passed_count,
        total_test_cases=outcome.total,
        average_time_ms=round(sum(times) / len(times), 2) if times else None,
        average_memory_kb=round(sum(memories) / len(memories), 2) if memories else None,
    )


__all__ = [
    "ACCEPTED_STATUS_ID",
    "JUDGE0_STATUS_DESCRIPTIONS",
    "map_status",
    "reduce_one",
    "reduce_all",
    "align_results",
    "summarize",
]
