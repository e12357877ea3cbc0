import sys
import os

import pytest

# Ensure repo root on sys.path for imports like `app...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.Core.config import Settings  # noqa: E402
from app.features.judge0.schemas import BackendResult, Judge0SubmissionResponse  # noqa: E402


class FakeJudge0:
    """In-memory stand-in for Judge0Service.

    Each submission gets a ``tok-N`` token. By default a submission is
    Accepted when the scripted answer for its stdin (or, failing that, its
    expected output) matches the expected output, Wrong Answer otherwise.
    ``overrides`` maps stdin to a raw result payload; ``pending_rounds``
    keeps every submission Processing for that many fetches.
    """

    def __init__(self, answers=None, overrides=None, pending_rounds=0, reverse=False):
        self.answers = dict(answers or {})
        self.overrides = dict(overrides or {})
        self.pending_rounds = pending_rounds
        self.reverse = reverse
        self.submitted = []
        self.fetch_calls = 0

    async def batch_submit(self, requests):
        start = len(self.submitted)
        self.submitted.extend(requests)
        return [Judge0SubmissionResponse(token=f"tok-{start + i}") for i in range(len(requests))]

    def _respond(self, request):
        if request.stdin in self.overrides:
            return dict(self.overrides[request.stdin])
        stdout = self.answers.get(request.stdin, f"{request.expected_output}\n")
        accepted = stdout.strip() == (request.expected_output or "").strip()
        return {
            "stdout": stdout,
            "status": {"id": 3, "description": "Accepted"} if accepted else {"id": 4, "description": "Wrong Answer"},
            "time": "0.02",
            "memory": 2048,
        }

    async def fetch_batch(self, tokens):
        self.fetch_calls += 1
        results = []
        for tok in tokens:
            request = self.submitted[int(tok.split("-", 1)[1])]
            if self.fetch_calls <= self.pending_rounds:
                payload = {"status": {"id": 2, "description": "Processing"}}
            else:
                payload = self._respond(request)
            results.append(BackendResult(token=tok, **payload))
        if self.reverse:
            results.reverse()
        return results


@pytest.fixture
def fast_settings():
    settings = Settings()
    settings.judge0_poll_interval_s = 0
    settings.judge0_poll_max_attempts = 15
    settings.judge_deadline_s = None
    return settings


@pytest.fixture
def fake_backend():
    return FakeJudge0()


@pytest.fixture
def make_backend():
    return FakeJudge0
