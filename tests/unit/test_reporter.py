import json

import pytest

from cadence.assertions import AssertionResult
from cadence.reporting import Reporter, RunStatus, StepStatus, Timing
from cadence.suites import validate_suite_yaml
from tests.fixtures.responses import make_response

SUITE = """
version: 1
name: reporting
base_url: http://localhost/api
cases:
  - id: first
    request:
      url: /one
  - id: chained
    steps:
      - request:
          url: /two
      - request:
          url: /three
"""


@pytest.fixture
def reporter():
    suite, result = validate_suite_yaml(SUITE)
    assert result.is_valid, str(result)
    return Reporter.from_suite(suite, run_id="run-1")


def _passed():
    return AssertionResult.passed_result("Status code is 200", selector="status code", actual=200)


def _failed():
    return AssertionResult.failed_result(
        "Status code does not match", selector="status code", expected=200, actual=404
    )


class TestReporter:
    def test_records_are_prepopulated(self, reporter):
        report = reporter.report

        assert report.run_id == "run-1"
        assert [c.case_id for c in report.cases] == ["first", "chained"]
        assert [s.url_template for s in report.get_case("chained").steps] == ["/two", "/three"]
        assert len(report.suite_hash) == 12

    def test_all_passing_run(self, reporter):
        reporter.start_run()
        for case_id, steps in (("first", 1), ("chained", 2)):
            reporter.start_case(case_id)
            for index in range(steps):
                reporter.start_step(case_id, index, url=f"http://localhost/api/{index}")
                reporter.complete_step(case_id, index, make_response(body={}), [_passed()])
            reporter.finish_case(case_id)

        report = reporter.finish_run()

        assert report.status == RunStatus.PASSED
        assert report.passed_cases == 2
        assert report.get_case("first").steps[0].status_code == 200

    def test_failed_step_and_skipped_rest(self, reporter):
        reporter.start_run()
        reporter.skip_case("first", "not selected")
        reporter.start_case("chained")
        reporter.start_step("chained", 0)
        reporter.complete_step("chained", 0, make_response(status=404), [_passed(), _failed()])
        reporter.skip_remaining_steps("chained", 1, "previous step failed")
        record = reporter.finish_case("chained")

        report = reporter.finish_run()

        assert record.status == StepStatus.FAILED
        assert record.steps[1].status == StepStatus.SKIPPED
        assert record.failure_message == "status code: Status code does not match"
        assert report.get_case("first").status == StepStatus.SKIPPED
        assert report.status == RunStatus.FAILED
        assert (report.failed_cases, report.skipped_cases) == (1, 1)

    def test_error_outranks_failure(self, reporter):
        reporter.start_run()
        reporter.start_case("first")
        reporter.start_step("first", 0)
        reporter.complete_step_error("first", 0, "connection_error: refused", {"code": "connection_error"})
        reporter.finish_case("first")
        reporter.start_case("chained")
        reporter.start_step("chained", 0)
        reporter.complete_step("chained", 0, make_response(status=404), [_failed()])
        reporter.skip_remaining_steps("chained", 1, "previous step failed")
        reporter.finish_case("chained")

        report = reporter.finish_run()

        assert report.status == RunStatus.ERROR
        assert report.get_case("first").failure_message == "Error: connection_error: refused"

    def test_unknown_ids_are_ignored(self, reporter):
        assert reporter.start_case("nope") is None
        assert reporter.start_step("first", 5) is None

    def test_save_json(self, reporter, tmp_path):
        reporter.start_run()
        reporter.skip_case("first")
        reporter.skip_case("chained")
        reporter.finish_run()

        path = tmp_path / "reports" / "run.json"
        reporter.save_json(path)
        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["run_id"] == "run-1"
        assert data["status"] == "passed"
        assert data["summary"]["skipped"] == 2
        assert data["cases"][1]["steps"][0]["status"] == "skipped"

    def test_summary_lists_cases(self, reporter):
        reporter.start_run()
        reporter.start_case("first")
        reporter.start_step("first", 0)
        reporter.complete_step("first", 0, make_response(status=404), [_failed()])
        reporter.finish_case("first")
        reporter.skip_case("chained", "not selected")
        reporter.finish_run()

        summary = reporter.get_summary()

        assert summary.splitlines()[1] == "  reporting"
        assert "2 cases: 0 passed, 1 failed, 0 errors, 1 skipped" in summary
        assert "FAILED" in summary
        assert "[first] 1 step(s)" in summary
        assert "└─ status code: Status code does not match" in summary


def test_timing_duration():
    timing = Timing()
    assert timing.duration_ms is None

    timing.start()
    timing.stop()

    assert timing.duration_ms >= 0
    assert timing.to_dict()["started_at"].endswith("+00:00")
