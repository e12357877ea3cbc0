from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import ConfigDict, Field, model_validator

from app.common.schemas import CamelModel


class VerdictStatus(str, Enum):
	ACCEPTED = "ACCEPTED"
	WRONG_ANSWER = "WRONG_ANSWER"
	TIME_LIMIT_EXCEEDED = "TIME_LIMIT_EXCEEDED"
	COMPILE_ERROR = "COMPILE_ERROR"
	RUNTIME_ERROR = "RUNTIME_ERROR"
	UNKNOWN_ERROR = "UNKNOWN_ERROR"


class TestCase(CamelModel):
	model_config = ConfigDict(frozen=True)

	input: str = Field(min_length=1)
	output: str = Field(min_length=1)
	explanation: Optional[str] = None


class Judge0StatusOut(CamelModel):
	id: int
	description: str = ""


class Verdict(CamelModel):
	test_case_index: int
	passed: bool
	status: VerdictStatus
	status_description: str
	input: str
	expected_output: str
	actual_output: Optional[str] = None
	error: Optional[str] = None
	time: Optional[str] = None
	memory: Optional[int] = None
	execution_time_ms: Optional[float] = None
	judge0_status: Judge0StatusOut


class JudgeOutcome(CamelModel):
	all_passed: bool
	verdicts: List[Verdict] = Field(default_factory=list)

	@property
	def total(self) -> int:
		return len(self.verdicts)

	@property
	def passed_count(self) -> int:
		return sum(1 for v in self.verdicts if v.passed)

	@property
	def first_failure(self) -> Optional[Verdict]:
		return next((v for v in self.verdicts if not v.passed), None)


class SubmissionSummary(CamelModel):
	status: VerdictStatus
	passed: bool
	passed_test_cases: int
	total_test_cases: int
	average_time_ms: Optional[float] = None
	average_memory_kb: Optional[float] = None


class FailingTestCase(CamelModel):
	input: str
	expected_output: str
	actual_output: Optional[str] = None
	error: Optional[str] = None


class ReferenceValidationFailure(CamelModel):
	language: str
	language_name: str
	test_case_index: int
	test_case: FailingTestCase
	judge0_status: Judge0StatusOut


class ExecuteCodeRequest(CamelModel):
	code: str
	language: str

	@model_validator(mode="after")
	def ensure_payload(self) -> "ExecuteCodeRequest":
		if not self.code or not self.code.strip():
			raise ValueError("code is required")
		if not self.language or not self.language.strip():
			raise ValueError("language is required")
		return self


class JudgeResponse(CamelModel):
	success: bool
	passed: bool
	passed_test_cases: int
	total_test_cases: int
	test_case_results: List[Verdict]

	@classmethod
	def from_outcome(cls, outcome: JudgeOutcome) -> "JudgeResponse":
		return cls(
			success=outcome.all_passed,
			passed=outcome.all_passed,
			passed_test_cases=outcome.passed_count,
			total_test_cases=outcome.total,
			test_case_results=outcome.verdicts,
		)


class SubmissionRecord(CamelModel):
	id: str
	problem_id: str
	language: str
	source_code: str
	summary: SubmissionSummary
	test_case_results: List[Verdict]
	created_at: str


class SubmitResponse(JudgeResponse):
	message: str
	submission: SubmissionRecord
