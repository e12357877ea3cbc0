import pytest

from app.common.errors import BackendResponseError
from app.features.judge0.schemas import BackendResult, BackendSubmissionRequest
from app.features.submissions.schemas import VerdictStatus
from app.features.submissions.verdicts import (
    align_results,
    map_status,
    reduce_all,
    reduce_one,
    summarize,
)


def _request(stdin="abc", expected="cba"):
    return BackendSubmissionRequest(source_code="x", language_id=71, stdin=stdin, expected_output=expected)


def _result(token="t", status_id=3, description="Accepted", **kwargs):
    return BackendResult(token=token, status={"id": status_id, "description": description}, **kwargs)


@pytest.mark.parametrize(
    "status_id, expected",
    [
        (3, VerdictStatus.ACCEPTED),
        (4, VerdictStatus.WRONG_ANSWER),
        (5, VerdictStatus.TIME_LIMIT_EXCEEDED),
        (6, VerdictStatus.COMPILE_ERROR),
        (7, VerdictStatus.RUNTIME_ERROR),
        (11, VerdictStatus.RUNTIME_ERROR),
        (12, VerdictStatus.RUNTIME_ERROR),
        (13, VerdictStatus.UNKNOWN_ERROR),
        (14, VerdictStatus.UNKNOWN_ERROR),
        (99, VerdictStatus.UNKNOWN_ERROR),
    ],
)
def test_map_status(status_id, expected):
    assert map_status(status_id) is expected


def test_reduce_one_accepted_carries_metrics():
    verdict = reduce_one(_result(stdout="cba\n", time="0.045", memory=3100), _request(), 0)

    assert verdict.passed is True
    assert verdict.status is VerdictStatus.ACCEPTED
    assert verdict.status_description == "Test case passed"
    assert verdict.actual_output == "cba"
    assert verdict.input == "abc"
    assert verdict.expected_output == "cba"
    assert verdict.time == "0.045"
    assert verdict.memory == 3100
    assert verdict.execution_time_ms == pytest.approx(45.0)
    assert verdict.judge0_status.id == 3


def test_reduce_one_compile_error_uses_compile_output():
    result = _result(status_id=6, description="Compilation Error", compile_output="Main.java:3: error")
    verdict = reduce_one(result, _request(), 1)

    assert verdict.passed is False
    assert verdict.status is VerdictStatus.COMPILE_ERROR
    assert verdict.error == "Main.java:3: error"
    assert verdict.actual_output is None


def test_reduce_one_stderr_wins_over_compile_output():
    result = _result(status_id=11, description="Runtime Error (NZEC)", stderr="Traceback", compile_output="warn")
    verdict = reduce_one(result, _request(), 0)

    assert verdict.status is VerdictStatus.RUNTIME_ERROR
    assert verdict.error == "Traceback"
    assert verdict.judge0_status.description == "Runtime Error (NZEC)"


def test_reduce_one_internal_error_keeps_backend_description():
    verdict = reduce_one(_result(status_id=13, description="Internal Error"), _request(), 0)

    assert verdict.status is VerdictStatus.UNKNOWN_ERROR
    assert verdict.status_description == "Internal Error"


def test_time_limit_boundary_is_a_failure():
    verdict = reduce_one(_result(status_id=5, description="Time Limit Exceeded", stdout="cba"), _request(), 0)
    assert verdict.passed is False
    assert verdict.status is VerdictStatus.TIME_LIMIT_EXCEEDED


def test_reduce_all_orders_by_index():
    verdicts = [
        reduce_one(_result(status_id=4, description="Wrong Answer", stdout="x"), _request(), 2),
        reduce_one(_result(stdout="cba"), _request(), 0),
        reduce_one(_result(stdout="cba"), _request(), 1),
    ]
    outcome = reduce_all(verdicts)

    assert [v.test_case_index for v in outcome.verdicts] == [0, 1, 2]
    assert outcome.all_passed is False
    assert outcome.passed_count == 2
    assert outcome.first_failure.test_case_index == 2


def test_reduce_all_empty_is_vacuously_passed():
    outcome = reduce_all([])
    assert outcome.all_passed is True
    assert outcome.total == 0


def test_align_results_restores_submission_order():
    results = [_result(token="c"), _result(token="a"), _result(token="b")]
    aligned = align_results(["a", "b", "c"], results)
    assert [r.token for r in aligned] == ["a", "b", "c"]


def test_align_results_missing_token_is_backend_error():
    with pytest.raises(BackendResponseError) as info:
        align_results(["a", "b"], [_result(token="a")])
    assert info.value.details["missing_tokens"] == ["b"]


def test_summarize_reports_first_failure_and_averages():
    outcome = reduce_all([
        reduce_one(_result(stdout="cba", time="0.010", memory=1000), _request(), 0),
        reduce_one(_result(status_id=5, description="Time Limit Exceeded", time="0.020", memory=3000), _request(), 1),
        reduce_one(_result(status_id=4, description="Wrong Answer", stdout="x"), _request(), 2),
    ])
    summary = summarize(outcome)

    assert summary.status is VerdictStatus.TIME_LIMIT_EXCEEDED
    assert summary.passed is False
    assert summary.passed_test_cases == 1
    assert summary.total_test_cases == 3
    assert summary.average_time_ms == pytest.approx(15.0)
    assert summary.average_memory_kb == pytest.approx(2000.0)


def test_summarize_all_passed():
    outcome = reduce_all([reduce_one(_result(stdout="cba"), _request(), 0)])
    summary = summarize(outcome)
    assert summary.status is VerdictStatus.ACCEPTED
    assert summary.passed is True
    assert summary.average_time_ms is None
