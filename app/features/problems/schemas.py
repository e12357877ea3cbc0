from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from app.common.schemas import CamelModel
from app.features.submissions.schemas import (
    FailingTestCase,
    Judge0StatusOut,
    TestCase,
)

DEFAULT_ENTRY_POINT = "solve"
_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class Example(CamelModel):
    input: str = Field(min_length=1)
    output: str = Field(min_length=1)
    explanation: Optional[str] = None


class ProblemCreate(CamelModel):
    title: str = Field(min_length=3, max_length=150)
    description: str = Field(min_length=10)
    difficulty: Difficulty
    tags: List[str] = Field(min_length=1)
    examples: List[Example] = Field(min_length=1)
    constraints: str = Field(min_length=5)
    hints: Optional[str] = None
    editorial: Optional[str] = None
    test_cases: List[TestCase] = Field(min_length=1)
    code_snippets: Dict[str, str] = Field(default_factory=dict)
    reference_solution: Dict[str, str] = Field(min_length=1)
    # Name of the function every wrapped program calls
    entry_point: str = DEFAULT_ENTRY_POINT

    @field_validator("tags")
    @classmethod
    def _tags_not_blank(cls, value: List[str]) -> List[str]:
        cleaned = [t.strip() for t in value]
        if any(not t for t in cleaned):
            raise ValueError("tags must be non-empty strings")
        return cleaned

    @field_validator("code_snippets", "reference_solution")
    @classmethod
    def _normalise_language_keys(cls, value: Dict[str, str]) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for key, code in value.items():
            if not code or not code.strip():
                raise ValueError(f"code for {key!r} cannot be empty")
            out[key.strip().lower()] = code
        return out

    @field_validator("entry_point")
    @classmethod
    def _entry_point_identifier(cls, value: str) -> str:
        value = (value or "").strip()
        if not _IDENTIFIER_RE.fullmatch(value):
            raise ValueError("entry_point must be a plain identifier")
        return value


class Problem(ProblemCreate):
    id: str
    created_at: datetime


class ProblemEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: Problem


class ReferenceFailureResponse(CamelModel):
    success: bool = False
    message: str
    test_case: FailingTestCase
    judge0_status: Judge0StatusOut
    test_case_index: Optional[int] = None


def public_problem(problem: Problem) -> Dict[str, Any]:
    """Problem payload without reference solutions, for non-authors."""
    return problem.model_dump(by_alias=True, mode="json", exclude={"reference_solution"})
