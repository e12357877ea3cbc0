import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterable, List, Optional
from urllib.parse import urlparse, urlunparse

import httpx
from pydantic import ValidationError

from app.Core.config import Settings, get_settings
from app.common.errors import BackendResponseError, BackendUnavailableError
from .schemas import (
    BackendResult,
    BackendSubmissionRequest,
    Judge0Status,
    Judge0SubmissionResponse,
    LanguageInfo,
)

RESULT_FIELDS = "token,stdout,stderr,compile_output,message,status,time,memory"


def normalise_base_url(raw: str) -> str:
    base = (raw or "").strip()
    if base and not base.startswith("http://") and not base.startswith("https://"):
        # assume http if scheme omitted
        base = "http://" + base
    # If no explicit port provided, default to 2358 (common Judge0 CE port)
    if base:
        parsed = urlparse(base)
        if ":" not in parsed.netloc:
            parsed = parsed._replace(netloc=f"{parsed.netloc}:2358")
            base = urlunparse(parsed)
    return base.rstrip("/")


class Judge0Service:
    """Stateless HTTP adapter to the Judge0 execution backend.

    Network failures surface as ``BackendUnavailableError`` and unexpected
    responses as ``BackendResponseError``. Nothing is retried here; the
    poller owns the repeat-until-settled loop.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.base_url = normalise_base_url(self.settings.judge0_api_url)
        self.headers = {"Content-Type": "application/json"}
        if self.settings.judge0_api_key and self.settings.judge0_host:
            self.headers.update({
                "X-RapidAPI-Key": self.settings.judge0_api_key,
                "X-RapidAPI-Host": self.settings.judge0_host,
            })
        self._submit_concurrency = max(1, int(self.settings.judge0_submit_concurrency))
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def _mask_headers(h: Dict[str, str]) -> Dict[str, str]:
        return {k: ("[REDACTED]" if k.lower() == "x-rapidapi-key" else v) for k, v in (h or {}).items()}

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Perform one HTTP request against the configured Judge0 base URL."""
        if not self.base_url:
            raise BackendUnavailableError("Judge0 base URL is not configured (JUDGE0_BASE_URL).")
        if not path.startswith("/"):
            path = "/" + path
        url = self.base_url + path
        self._logger.debug("Judge0 request: %s %s headers=%s", method, url, self._mask_headers(self.headers))
        read_timeout = self.settings.judge0_timeout_s
        timeout = httpx.Timeout(connect=3.0, read=read_timeout, write=5.0, pool=5.0)
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                return await client.request(method, url, headers=self.headers, **kwargs)
        except httpx.TransportError as e:
            raise BackendUnavailableError(f"Failed to reach Judge0 at {self.base_url}: {e}") from e

    @staticmethod
    def _json(resp: httpx.Response, what: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise BackendResponseError(f"Failed to parse {what} JSON: {e} body={resp.text[:200]}") from e

    async def _bounded_gather(
        self,
        coroutines: Iterable[Awaitable[Any]],
        *,
        limit: int,
    ) -> List[Any]:
        # Semaphore is per call, so concurrent judge calls never share state
        semaphore = asyncio.Semaphore(max(1, limit))

        async def _runner(coro: Awaitable[Any]) -> Any:
            async with semaphore:
                return await coro

        tasks = [asyncio.ensure_future(_runner(coro)) for coro in coroutines]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            # one failure ends the batch: stop the remaining submits before re-raising
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def submit_code(self, request: BackendSubmissionRequest) -> Judge0SubmissionResponse:
        response = await self._request(
            "POST",
            "/submissions?base64_encoded=false&wait=false",
            json=request.model_dump(exclude_none=True),
        )
        if response.status_code not in (200, 201):
            raise BackendResponseError(
                f"Failed to submit code: {response.status_code} - {response.text[:200]}",
                details={"status_code": response.status_code},
            )
        data = self._json(response, "submission")
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise BackendResponseError("Judge0 returned an empty token")
        return Judge0SubmissionResponse(token=token)

    async def batch_submit(self, requests: List[BackendSubmissionRequest]) -> List[Judge0SubmissionResponse]:
        """Submit every request concurrently; tokens come back in input order."""
        if not requests:
            return []
        responses = await self._bounded_gather(
            (self.submit_code(req) for req in requests),
            limit=self._submit_concurrency,
        )
        self._logger.info("Judge0 batch submitted: %d submissions", len(responses))
        return list(responses)

    async def fetch_batch(self, tokens: List[str], *, fields: Optional[str] = RESULT_FIELDS) -> List[BackendResult]:
        """Fetch the current state of every token in one call (order not guaranteed)."""
        if not tokens:
            return []
        query = f"/submissions/batch?tokens={','.join(tokens)}&base64_encoded=false"
        if fields:
            query = f"{query}&fields={fields}"
        resp = await self._request("GET", query)
        if resp.status_code != 200:
            raise BackendResponseError(
                f"Batch get failed: {resp.status_code} {resp.text[:200]}",
                details={"status_code": resp.status_code},
            )
        data = self._json(resp, "batch")
        # Judge0 batch GET returns {"submissions": [...]}; unknown tokens come back as null
        arr = data.get("submissions", []) if isinstance(data, dict) else data
        if not isinstance(arr, list):
            raise BackendResponseError("Batch get returned an unexpected payload")
        try:
            return [BackendResult(**item) for item in arr if isinstance(item, dict)]
        except ValidationError as e:
            raise BackendResponseError(f"Malformed submission in batch response: {e}") from e

    async def get_languages(self) -> List[LanguageInfo]:
        resp = await self._request("GET", "/languages")
        if resp.status_code != 200:
            raise BackendResponseError(f"Failed to fetch languages: {resp.status_code} body={resp.text[:300]}")
        try:
            return [LanguageInfo.model_validate(lang) for lang in self._json(resp, "languages")]
        except ValidationError as e:
            raise BackendResponseError(f"Malformed language list from Judge0: {e}") from e

    async def get_statuses(self) -> List[Judge0Status]:
        resp = await self._request("GET", "/statuses")
        if resp.status_code != 200:
            raise BackendResponseError(f"Failed to fetch statuses: {resp.status_code} body={resp.text[:300]}")
        try:
            return [Judge0Status.model_validate(status) for status in self._json(resp, "statuses")]
        except ValidationError as e:
            raise BackendResponseError(f"Malformed status list from Judge0: {e}") from e


judge0_service = Judge0Service()
