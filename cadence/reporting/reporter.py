"""
Reporter for building and managing run reports.

This module provides the Reporter class which helps construct
run reports from suite executions.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..assertions import AssertionResult
from .models import (
    CaseRecord,
    RunReport,
    StepRecord,
    StepStatus,
    compute_suite_hash,
)

if TYPE_CHECKING:
    from ..suites import Suite
    from ..transport import HTTPResponse


class Reporter:
    """
    Builds and manages run reports.

    The Reporter provides a convenient interface for creating reports
    from Suite objects and recording case and step results.

    Example:
        suite, _ = load_suite("suites/ergast.yaml")
        reporter = Reporter.from_suite(suite)

        reporter.start_run()
        reporter.start_case("circuits_2017")
        reporter.start_step("circuits_2017", 0, url=spec.build_url())
        reporter.complete_step("circuits_2017", 0, response, results)
        reporter.finish_case("circuits_2017")

        report = reporter.finish_run()
        print(report.summary())
    """

    def __init__(self, report: RunReport):
        """
        Initialize with a RunReport.

        Use Reporter.from_suite() for the typical case.
        """
        self.report = report

    @classmethod
    def from_suite(cls, suite: Suite, run_id: str | None = None) -> Reporter:
        """
        Create a Reporter from a parsed Suite.

        Args:
            suite: The parsed suite to create a report for
            run_id: Optional custom run ID (auto-generated if not provided)

        Returns:
            Reporter instance ready to record results
        """
        report = RunReport(
            suite_name=suite.name,
            suite_version=suite.version,
            suite_hash=compute_suite_hash(_suite_to_dict(suite)),
            base_url=suite.base_url,
        )

        if run_id:
            report.run_id = run_id

        # Pre-populate records from the suite's cases
        for case in suite.cases:
            record = CaseRecord(case_id=case.id, description=case.description)
            for index, step in enumerate(case.steps):
                record.steps.append(StepRecord(
                    index=index,
                    method=step.request.method,
                    url_template=step.request.url,
                ))
            report.add_case(record)

        return cls(report)

    def start_run(self) -> None:
        """Mark the run as started."""
        self.report.start()

    def finish_run(self) -> RunReport:
        """
        Mark the run as completed and return the final report.

        Returns:
            The completed RunReport with summary stats
        """
        self.report.complete()
        return self.report

    def start_case(self, case_id: str) -> CaseRecord | None:
        case = self.report.get_case(case_id)
        if case:
            case.start()
        return case

    def finish_case(self, case_id: str) -> CaseRecord | None:
        """Complete a case; its status follows from its steps."""
        case = self.report.get_case(case_id)
        if case:
            case.complete()
        return case

    def skip_case(self, case_id: str, reason: str | None = None) -> CaseRecord | None:
        """Mark a case and all its steps as skipped."""
        case = self.report.get_case(case_id)
        if case:
            for step in case.steps:
                if reason:
                    step.failure_message = f"Skipped: {reason}"
                step.complete(StepStatus.SKIPPED)
            case.complete()
        return case

    def _get_step(self, case_id: str, index: int) -> StepRecord | None:
        case = self.report.get_case(case_id)
        return case.get_step(index) if case else None

    def start_step(self, case_id: str, index: int, url: str | None = None) -> StepRecord | None:
        """
        Mark a step as started.

        Args:
            case_id: The ID of the case
            index: Position of the step in the case
            url: The final URL after substitution

        Returns:
            The StepRecord, or None if not found
        """
        step = self._get_step(case_id, index)
        if step:
            step.url = url
            step.start()
        return step

    def complete_step(
        self,
        case_id: str,
        index: int,
        response: HTTPResponse,
        results: list[AssertionResult],
        extracted: dict[str, Any] | None = None,
    ) -> StepRecord | None:
        """
        Record a step that received a response.

        The step passes when every assertion passed, otherwise it fails
        with the first non-passing assertion as its failure message.
        """
        step = self._get_step(case_id, index)
        if step:
            step.status_code = response.status_code
            step.response_headers = {k: v for k, v in response.headers.items()}
            step.assertions = list(results)
            step.extracted = dict(extracted or {})

            failing = [r for r in results if not r.passed]
            if failing:
                first = failing[0]
                step.failure_message = f"{first.selector}: {first.message}" if first.selector else first.message
                step.complete(StepStatus.FAILED)
            else:
                step.complete(StepStatus.PASSED)
        return step

    def complete_step_error(
        self,
        case_id: str,
        index: int,
        error_message: str,
        error_details: dict[str, Any] | None = None,
    ) -> StepRecord | None:
        """
        Mark a step as errored (not a test failure, but an execution error).

        Args:
            case_id: The ID of the case
            index: Position of the step in the case
            error_message: Error description
            error_details: Additional error context

        Returns:
            The StepRecord, or None if not found
        """
        step = self._get_step(case_id, index)
        if step:
            step.error_message = error_message
            step.error_details = error_details
            step.complete(StepStatus.ERROR)
        return step

    def skip_remaining_steps(self, case_id: str, from_index: int, reason: str) -> None:
        """Skip every step of a case from the given index on."""
        case = self.report.get_case(case_id)
        if not case:
            return
        for step in case.steps[from_index:]:
            step.failure_message = f"Skipped: {reason}"
            step.complete(StepStatus.SKIPPED)

    def save_json(self, path: str | Path) -> None:
        """
        Save the report to a JSON file.

        Args:
            path: Path to save the JSON file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.report.to_json(), encoding="utf-8")

    def get_summary(self) -> str:
        """Get a human-readable summary of the run."""
        return self.report.summary()


def _suite_to_dict(suite: Suite) -> dict[str, Any]:
    """Convert a Suite to a dict for hashing."""
    return {
        "version": suite.version,
        "name": suite.name,
        "base_url": suite.base_url,
        "env": suite.env,
        "defaults": {"timeout_ms": suite.defaults.timeout_ms},
        "cases": [
            {
                "id": case.id,
                "steps": [
                    {
                        "request": step.request.to_dict(),
                        "expect": [a.to_dict() for a in step.expect],
                        "extract": step.extract,
                    }
                    for step in case.steps
                ],
            }
            for case in suite.cases
        ],
    }
