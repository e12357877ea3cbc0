"""Bounded polling of a Judge0 batch until every submission has settled."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Protocol

from app.common.errors import PollTimeoutError
from app.features.judge0.schemas import BackendResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 15
DEFAULT_INTERVAL_S = 1.5


class BatchFetcher(Protocol):
    async def fetch_batch(self, tokens: List[str]) -> List[BackendResult]: ...


def batch_settled(tokens: List[str], results: List[BackendResult]) -> bool:
    """True when every token has a result and none is still queued or processing."""
    seen = {r.token for r in results if r.token}
    if any(tok not in seen for tok in tokens):
        return False
    return all(r.is_terminal for r in results if r.token in seen)


async def poll_until_done(
    client: BatchFetcher,
    tokens: List[str],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval_s: float = DEFAULT_INTERVAL_S,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> List[BackendResult]:
    """Fetch the batch until it settles, at most ``max_attempts`` rounds.

    Raises PollTimeoutError once the budget is spent; backend errors raised
    by the fetch propagate unchanged.
    """
    if not tokens:
        return []
    attempts = 0
    while attempts < max_attempts:
        results = await client.fetch_batch(tokens)
        if batch_settled(tokens, results):
            logger.debug("Judge0 batch settled after %d attempt(s)", attempts + 1)
            return results
        attempts += 1
        pending = sum(1 for r in results if not r.is_terminal)
        logger.debug("Judge0 batch pending=%d attempt=%d/%d", pending, attempts, max_attempts)
        if attempts < max_attempts:
            await sleep(interval_s)
    logger.warning("Judge0 batch of %d did not settle after %d attempts", len(tokens), max_attempts)
    raise PollTimeoutError(attempts=attempts)


__all__ = ["poll_until_done", "batch_settled", "DEFAULT_MAX_ATTEMPTS", "DEFAULT_INTERVAL_S"]
