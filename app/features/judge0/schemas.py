from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, model_validator

# Judge0 status ids that mean the submission has not finished yet
IN_FLIGHT_STATUS_IDS = frozenset({1, 2})


class BackendSubmissionRequest(BaseModel):
    source_code: str
    language_id: int
    stdin: Optional[str] = None
    expected_output: Optional[str] = None


class Judge0SubmissionResponse(BaseModel):
    token: str


class Judge0Status(BaseModel):
    id: int
    description: str = ""


class BackendResult(BaseModel):
    token: Optional[str] = None
    status: Judge0Status
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    message: Optional[str] = None
    time: Optional[str] = None
    memory: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _ensure_status(cls, payload: Any) -> Any:
        # Some deployments return flat status_id/status_description instead of a nested status
        if not isinstance(payload, dict):
            return payload
        status_val = payload.get("status")
        if not status_val:
            status_id = payload.get("status_id")
            if status_id is not None:
                payload = dict(payload)
                payload["status"] = {
                    "id": status_id,
                    "description": payload.get("status_description") or "",
                }
        elif isinstance(status_val, dict) and not status_val.get("description"):
            desc = payload.get("status_description")
            if desc:
                payload = dict(payload)
                payload["status"] = {**status_val, "description": desc}
        if isinstance(payload.get("time"), (int, float)):
            payload = dict(payload)
            payload["time"] = str(payload["time"])
        return payload

    @property
    def status_id(self) -> int:
        return self.status.id

    @property
    def status_description(self) -> str:
        return self.status.description

    @property
    def is_terminal(self) -> bool:
        return self.status.id not in IN_FLIGHT_STATUS_IDS


class LanguageInfo(BaseModel):
    id: int
    name: str


class SupportedLanguage(BaseModel):
    key: str
    judge0_id: int
    name: str
