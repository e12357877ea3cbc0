import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.features.problems.repository import problems_repository
from app.features.submissions.repository import submissions_repository
from app.features.submissions.service import judge_service


PY_REFERENCE = "def isPalindrome(s):\n    t = ''.join(c for c in s if c.isalnum())\n    return t == t[::-1]\n"


def _payload(**overrides):
    body = {
        "title": "Valid Palindrome",
        "description": "Return true when the string reads the same both ways.",
        "difficulty": "EASY",
        "tags": ["strings", "two-pointers"],
        "examples": [{"input": "racecar", "output": "true"}],
        "constraints": "1 <= s.length <= 2 * 10^5",
        "testCases": [
            {"input": "racecar", "output": "true"},
            {"input": "hello", "output": "false"},
            {"input": "race a car", "output": "false"},
        ],
        "codeSnippets": {"python": "def isPalindrome(s):\n    pass\n"},
        "referenceSolution": {"python": PY_REFERENCE},
        "entryPoint": "isPalindrome",
    }
    body.update(overrides)
    return body


@pytest.fixture
def backend(monkeypatch, make_backend, fast_settings):
    fake = make_backend()
    monkeypatch.setattr(judge_service, "client", fake)
    monkeypatch.setattr(judge_service, "settings", fast_settings)
    problems_repository.clear()
    submissions_repository.clear()
    yield fake
    problems_repository.clear()
    submissions_repository.clear()


@pytest.fixture
def client():
    return TestClient(app)


def _create(client):
    resp = client.post("/problems", json=_payload())
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers.get("X-Request-Id")


def test_supported_languages(client):
    resp = client.get("/judge0/supported-languages")
    assert resp.status_code == 200
    keys = {item["key"]: item["judge0_id"] for item in resp.json()}
    assert keys["python"] == 71 and keys["java"] == 62


def test_create_problem_stores_after_reference_passes(client, backend):
    data = _create(client)

    assert data["title"] == "Valid Palindrome"
    assert len(data["testCases"]) == 3
    assert len(backend.submitted) == 3

    fetched = client.get(f"/problems/{data['id']}")
    assert fetched.status_code == 200
    assert "referenceSolution" not in fetched.json()["data"]


def test_create_problem_rejects_failing_reference(client, backend):
    backend.answers["race a car"] = "true\n"

    resp = client.post("/problems", json=_payload())

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Reference solution failed for Python (3.8.1)"
    assert body["testCase"] == {
        "input": "race a car",
        "expectedOutput": "false",
        "actualOutput": "true",
        "error": None,
    }
    assert body["judge0Status"]["id"] == 4
    assert client.get("/problems").json()["data"] == []


def test_create_problem_unsupported_reference_language(client, backend):
    resp = client.post("/problems", json=_payload(referenceSolution={"ruby": "def x; end"}))

    assert resp.status_code == 400
    assert resp.json()["code"] == "E_UNSUPPORTED_LANGUAGE"
    assert backend.submitted == []


def test_create_problem_requires_test_cases(client, backend):
    resp = client.post("/problems", json=_payload(testCases=[]))
    assert resp.status_code == 422


def test_execute_reports_every_case(client, backend):
    problem = _create(client)
    backend.answers["race a car"] = "true\n"

    resp = client.post(
        f"/problems/{problem['id']}/execute",
        json={"code": "def isPalindrome(s):\n    return True\n", "language": "python"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["passed"] is False
    assert body["passedTestCases"] == 2
    assert body["totalTestCases"] == 3
    third = body["testCaseResults"][2]
    assert third["testCaseIndex"] == 2
    assert third["status"] == "WRONG_ANSWER"
    assert third["actualOutput"] == "true"


def test_submit_records_summary(client, backend):
    problem = _create(client)

    resp = client.post(
        f"/problems/{problem['id']}/submit",
        json={"code": PY_REFERENCE, "language": "Python"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Submission accepted!"
    submission = body["submission"]
    assert submission["language"] == "python"
    assert submission["summary"]["status"] == "ACCEPTED"
    assert submission["summary"]["passedTestCases"] == 3

    stored = client.get(f"/problems/submissions/{submission['id']}")
    assert stored.status_code == 200
    assert stored.json()["data"]["problemId"] == problem["id"]


def test_submit_unsupported_language(client, backend):
    problem = _create(client)
    sent = len(backend.submitted)

    resp = client.post(f"/problems/{problem['id']}/submit", json={"code": "puts 1", "language": "ruby"})

    assert resp.status_code == 400
    assert resp.json()["code"] == "E_UNSUPPORTED_LANGUAGE"
    assert len(backend.submitted) == sent


def test_execute_timeout_is_retryable_504(client, backend):
    problem = _create(client)
    backend.pending_rounds = 10**6

    resp = client.post(f"/problems/{problem['id']}/execute", json={"code": PY_REFERENCE, "language": "python"})

    assert resp.status_code == 504
    body = resp.json()
    assert body["code"] == "E_POLL_TIMEOUT"
    assert body["retryable"] is True


def test_unknown_problem_is_404(client, backend):
    resp = client.post("/problems/nope/execute", json={"code": PY_REFERENCE, "language": "python"})
    assert resp.status_code == 404
    assert resp.json()["code"] == "E_NOT_FOUND"

    assert client.get("/problems/submissions/missing").status_code == 404


def test_malformed_backend_language_list_is_502(client, monkeypatch):
    from app.features.judge0.service import judge0_service

    class _Resp:
        status_code = 200
        text = '[{"id": 71}]'

        def json(self):
            return [{"id": 71}]

    async def fake_request(method, path, **kwargs):
        return _Resp()

    monkeypatch.setattr(judge0_service, "_request", fake_request)

    resp = client.get("/judge0/languages")

    assert resp.status_code == 502
    assert resp.json()["code"] == "E_BACKEND_RESPONSE"


def test_list_submissions_filters_by_problem(client, backend):
    first = _create(client)
    second = _create(client)
    for problem_id in (first["id"], first["id"], second["id"]):
        resp = client.post(f"/problems/{problem_id}/submit", json={"code": PY_REFERENCE, "language": "python"})
        assert resp.status_code == 200

    listed = client.get("/problems/submissions", params={"problemId": first["id"]})
    assert listed.status_code == 200
    data = listed.json()["data"]
    assert len(data) == 2
    assert {item["problemId"] for item in data} == {first["id"]}
    assert all("sourceCode" not in item for item in data)

    everything = client.get("/problems/submissions").json()["data"]
    assert len(everything) == 3
