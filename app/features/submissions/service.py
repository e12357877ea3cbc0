from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol, Sequence, Tuple, Union

from app.Core.config import Settings, get_settings
from app.common.errors import BackendError, BadRequestError, PollTimeoutError
from app.features.judge0.languages import Language, LanguageSpec, resolve_language
from app.features.judge0.poller import poll_until_done
from app.features.judge0.schemas import BackendSubmissionRequest
from app.features.judge0.service import Judge0Service, judge0_service
from app.features.judge0.wrappers import wrap_code
from app.features.submissions.schemas import (
    FailingTestCase,
    JudgeOutcome,
    ReferenceValidationFailure,
    TestCase,
)
from app.features.submissions.verdicts import align_results, reduce_all, reduce_one

logger = logging.getLogger("judge")

LanguageArg = Union[str, Language, LanguageSpec]


class JudgeableProblem(Protocol):
    test_cases: Sequence[TestCase]
    entry_point: str


class ProblemWithReferences(JudgeableProblem, Protocol):
    reference_solution: dict


def build_requests(
    spec: LanguageSpec,
    entry_point: str,
    code: str,
    test_cases: Sequence[TestCase],
) -> List[BackendSubmissionRequest]:
    """One request per test case, all sharing the same wrapped program."""
    if not test_cases:
        raise BadRequestError("problem_missing_test_cases")
    wrapped = wrap_code(spec, entry_point, code)
    return [
        BackendSubmissionRequest(
            source_code=wrapped,
            language_id=spec.judge0_id,
            stdin=tc.input,
            expected_output=tc.output,
        )
        for tc in test_cases
    ]


class JudgeService:
    """Wrap -> submit -> poll -> reduce, for both problem creation and submissions.

    Every call builds its own requests, tokens and verdicts; nothing is kept
    between calls. Backend and timeout errors propagate to the caller as-is.
    """

    def __init__(self, client: Optional[Judge0Service] = None, settings: Optional[Settings] = None):
        self.client = client or judge0_service
        self.settings = settings or get_settings()

    async def run(
        self,
        test_cases: Sequence[TestCase],
        language: LanguageArg,
        code: str,
        *,
        entry_point: str,
    ) -> JudgeOutcome:
        spec = resolve_language(language)
        requests = build_requests(spec, entry_point, code, test_cases)
        logger.info("judge.prepared", extra={"language": spec.key, "test_cases": len(requests)})

        deadline = self.settings.judge_deadline_s
        if deadline is not None and deadline <= 0:
            deadline = None
        timeout_cm = asyncio.timeout(deadline)
        try:
            async with timeout_cm:
                return await self._dispatch(spec, requests)
        except TimeoutError as exc:
            if timeout_cm.expired():
                logger.warning("judge.timed_out", extra={"language": spec.key, "deadline_s": deadline})
                raise PollTimeoutError(f"Judge call exceeded its {deadline}s deadline") from exc
            raise

    async def _dispatch(self, spec: LanguageSpec, requests: List[BackendSubmissionRequest]) -> JudgeOutcome:
        try:
            submitted = await self.client.batch_submit(requests)
        except BackendError as exc:
            logger.error("judge.backend_error", extra={"language": spec.key, "error": str(exc)})
            raise
        tokens = [s.token for s in submitted]
        logger.info("judge.submitted", extra={"language": spec.key, "tokens": tokens})

        try:
            results = await poll_until_done(
                self.client,
                tokens,
                max_attempts=self.settings.judge0_poll_max_attempts,
                interval_s=self.settings.judge0_poll_interval_s,
            )
        except PollTimeoutError:
            logger.warning("judge.timed_out", extra={"language": spec.key, "tokens": tokens})
            raise

        # Batch fetch order is not trusted: realign by token before reducing
        aligned = align_results(tokens, results)
        outcome = reduce_all(reduce_one(res, requests[idx], idx) for idx, res in enumerate(aligned))
        logger.info(
            "judge.reduced",
            extra={"language": spec.key, "passed": outcome.passed_count, "total": outcome.total},
        )
        return outcome

    async def validate_reference_solution(
        self,
        problem: JudgeableProblem,
        language: LanguageArg,
        code: str,
    ) -> JudgeOutcome:
        return await self.run(problem.test_cases, language, code, entry_point=problem.entry_point)

    async def validate_reference_solutions(
        self,
        problem: ProblemWithReferences,
    ) -> Optional[ReferenceValidationFailure]:
        """Check every declared reference solution; report the first failing test case.

        Languages are resolved up front so an unsupported key is rejected
        before anything is sent. Each language's test cases still go out as
        one batch; validation stops at the first language that fails.
        """
        plan: List[Tuple[LanguageSpec, str]] = [
            (resolve_language(key), code) for key, code in problem.reference_solution.items()
        ]
        for spec, code in plan:
            outcome = await self.validate_reference_solution(problem, spec, code)
            failed = outcome.first_failure
            if failed is None:
                continue
            logger.info(
                "judge.reference_rejected",
                extra={"language": spec.key, "test_case_index": failed.test_case_index},
            )
            return ReferenceValidationFailure(
                language=spec.key,
                language_name=spec.name,
                test_case_index=failed.test_case_index,
                test_case=FailingTestCase(
                    input=failed.input,
                    expected_output=failed.expected_output,
                    actual_output=failed.actual_output,
                    error=failed.error,
                ),
                judge0_status=failed.judge0_status,
            )
        return None

    async def judge_submission(
        self,
        problem: JudgeableProblem,
        language: LanguageArg,
        code: str,
    ) -> JudgeOutcome:
        return await self.run(problem.test_cases, language, code, entry_point=problem.entry_point)


judge_service = JudgeService()

__all__ = ["JudgeService", "judge_service", "build_requests"]
