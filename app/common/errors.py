"""Judge error taxonomy and the FastAPI handlers that render it."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("errors")


class JudgeError(Exception):
    """Base class for errors raised by the judging pipeline."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "E_JUDGE"
    retryable: bool = False

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnsupportedLanguageError(JudgeError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "E_UNSUPPORTED_LANGUAGE"

    def __init__(self, language: Any):
        super().__init__(f"Unsupported language: {language}", details={"language": str(language)})
        self.language = language


class BadRequestError(JudgeError, ValueError):
    """Input the pipeline cannot judge (blank code, bad entry point, no test cases)."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "E_BAD_REQUEST"


class BackendError(JudgeError):
    """The execution backend answered, but not with something usable."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "E_BACKEND"


class BackendUnavailableError(BackendError):
    """Connection-level failure talking to the execution backend."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "E_BACKEND_UNAVAILABLE"
    retryable = True


class BackendResponseError(BackendError):
    code = "E_BACKEND_RESPONSE"


class PollTimeoutError(JudgeError):
    """Batch did not settle within the attempt budget: the verdict is unknown, not wrong."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    code = "E_POLL_TIMEOUT"
    retryable = True

    def __init__(self, message: str = "Judge0 timeout: submissions did not finish in time", *, attempts: Optional[int] = None):
        super().__init__(message, details={"attempts": attempts} if attempts is not None else None)
        self.attempts = attempts


class ResourceNotFoundError(JudgeError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "E_NOT_FOUND"


def error_payload(message: str, code: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message, "code": code}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


async def judge_error_handler(request: Request, exc: JudgeError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    if exc.status_code >= 500:
        logger.error("judge error %s: %s (request_id=%s)", exc.code, exc.message, request_id)
    else:
        logger.info("judge rejection %s: %s (request_id=%s)", exc.code, exc.message, request_id)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(
            exc.message,
            exc.code,
            retryable=True if exc.retryable else None,
            details=exc.details or None,
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(JudgeError, judge_error_handler)  # type: ignore[arg-type]


__all__ = [
    "JudgeError",
    "UnsupportedLanguageError",
    "BadRequestError",
    "BackendError",
    "BackendUnavailableError",
    "BackendResponseError",
    "PollTimeoutError",
    "ResourceNotFoundError",
    "error_payload",
    "register_exception_handlers",
]
