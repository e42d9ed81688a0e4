"""
Report data models for suite runs.

A RunReport holds one CaseRecord per suite case, and each CaseRecord one
StepRecord per request. Statuses roll up from steps to cases to the run.
"""

from __future__ import annotations

import hashlib
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..assertions import AssertionResult


class StepStatus(str, Enum):
    """Status of a step or a case."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    SKIPPED = "skipped"


class RunStatus(str, Enum):
    """Overall status of a suite run."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment else None


@dataclass
class Timing:
    """Wall-clock start and end of a step, case or run."""
    started_at: datetime | None = None
    ended_at: datetime | None = None

    def start(self) -> None:
        self.started_at = _now()
        self.ended_at = None

    def stop(self) -> None:
        self.ended_at = _now()

    @property
    def duration_ms(self) -> float | None:
        if self.started_at is None or self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds() * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": _iso(self.started_at),
            "ended_at": _iso(self.ended_at),
            "duration_ms": self.duration_ms,
        }


@dataclass
class StepRecord:
    """
    Record of a single request within a case.

    Holds the URL that was sent, the status and headers that came back,
    every assertion outcome and the values extracted for later steps.
    """
    index: int
    method: str
    url_template: str
    status: StepStatus = StepStatus.PENDING
    timing: Timing = field(default_factory=Timing)

    url: str | None = None
    status_code: int | None = None
    response_headers: dict[str, str] | None = None

    assertions: list[AssertionResult] = field(default_factory=list)
    extracted: dict[str, Any] = field(default_factory=dict)

    # Set for transport/extraction errors and for skipped or failed steps
    error_message: str | None = None
    error_details: dict[str, Any] | None = None
    failure_message: str | None = None

    def start(self) -> None:
        self.status = StepStatus.RUNNING
        self.timing.start()

    def complete(self, status: StepStatus) -> None:
        self.status = status
        self.timing.stop()

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "method": self.method,
            "url_template": self.url_template,
            "url": self.url,
            "status": self.status.value,
            **self.timing.to_dict(),
            "status_code": self.status_code,
            "response_headers": self.response_headers,
            "assertions": [a.to_dict() for a in self.assertions],
            "extracted": {k: _safe_serialize(v) for k, v in self.extracted.items()},
            "error_message": self.error_message,
            "error_details": self.error_details,
            "failure_message": self.failure_message,
        }


@dataclass
class CaseRecord:
    """Record of one test case and its steps."""
    case_id: str
    description: str | None = None
    status: StepStatus = StepStatus.PENDING
    steps: list[StepRecord] = field(default_factory=list)
    timing: Timing = field(default_factory=Timing)

    def start(self) -> None:
        self.status = StepStatus.RUNNING
        self.timing.start()

    def complete(self) -> None:
        """Derive the case status from its steps."""
        self.timing.stop()

        statuses = {s.status for s in self.steps}
        if StepStatus.ERROR in statuses:
            self.status = StepStatus.ERROR
        elif StepStatus.FAILED in statuses:
            self.status = StepStatus.FAILED
        elif statuses == {StepStatus.SKIPPED}:
            self.status = StepStatus.SKIPPED
        else:
            self.status = StepStatus.PASSED

    def get_step(self, index: int) -> StepRecord | None:
        if 0 <= index < len(self.steps):
            return self.steps[index]
        return None

    @property
    def failure_message(self) -> str | None:
        """First failure or error message among the steps."""
        for step in self.steps:
            if step.failure_message:
                return step.failure_message
            if step.error_message:
                return f"Error: {step.error_message}"
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "case_id": self.case_id,
            "description": self.description,
            "status": self.status.value,
            **self.timing.to_dict(),
            "steps": [step.to_dict() for step in self.steps],
        }


@dataclass
class RunReport:
    """
    Complete record of a suite run.

    Identifies the suite that ran (name, version, content hash) and
    carries a CaseRecord for every case, including skipped ones.
    """
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timing: Timing = field(default_factory=Timing)

    suite_name: str = ""
    suite_version: int = 1
    suite_hash: str = ""
    base_url: str | None = None

    status: RunStatus = RunStatus.PENDING
    cases: list[CaseRecord] = field(default_factory=list)

    # Filled in by complete()
    total_cases: int = 0
    passed_cases: int = 0
    failed_cases: int = 0
    error_cases: int = 0
    skipped_cases: int = 0

    def start(self) -> None:
        self.status = RunStatus.RUNNING
        self.timing.start()

    def complete(self) -> None:
        """Count case outcomes; any error wins over any failure."""
        self.timing.stop()

        counts = {status: 0 for status in StepStatus}
        for case in self.cases:
            counts[case.status] += 1

        self.total_cases = len(self.cases)
        self.passed_cases = counts[StepStatus.PASSED]
        self.failed_cases = counts[StepStatus.FAILED]
        self.error_cases = counts[StepStatus.ERROR]
        self.skipped_cases = counts[StepStatus.SKIPPED]

        if self.error_cases:
            self.status = RunStatus.ERROR
        elif self.failed_cases:
            self.status = RunStatus.FAILED
        else:
            self.status = RunStatus.PASSED

    def add_case(self, case: CaseRecord) -> None:
        self.cases.append(case)

    def get_case(self, case_id: str) -> CaseRecord | None:
        for case in self.cases:
            if case.case_id == case_id:
                return case
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            **self.timing.to_dict(),
            "suite_name": self.suite_name,
            "suite_version": self.suite_version,
            "suite_hash": self.suite_hash,
            "base_url": self.base_url,
            "status": self.status.value,
            "summary": {
                "total": self.total_cases,
                "passed": self.passed_cases,
                "failed": self.failed_cases,
                "errors": self.error_cases,
                "skipped": self.skipped_cases,
            },
            "cases": [case.to_dict() for case in self.cases],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def summary(self) -> str:
        """Plain-text summary, one line per case plus its first problem."""
        rule = "=" * 60
        thin = "-" * 60
        started = self.timing.started_at
        lines = [
            rule,
            f"  {self.suite_name}",
            rule,
            f"  Run:      {self.run_id}",
            f"  Status:   {_status_icon(self.status)} {self.status.value.upper()}",
            f"  Started:  {started.strftime('%Y-%m-%d %H:%M:%S UTC') if started else 'N/A'}",
            f"  Took:     {_format_ms(self.timing.duration_ms)}",
            thin,
            (
                f"  {self.total_cases} cases: {self.passed_cases} passed, "
                f"{self.failed_cases} failed, {self.error_cases} errors, "
                f"{self.skipped_cases} skipped"
            ),
            thin,
        ]

        for case in self.cases:
            icon = _status_icon_step(case.status)
            took = _format_ms(case.timing.duration_ms)
            lines.append(f"  {icon} [{case.case_id}] {len(case.steps)} step(s), {took}")

            message = case.failure_message
            if message and case.status != StepStatus.PASSED:
                lines.append(f"      └─ {message}")

        lines.append(rule)
        return "\n".join(lines)


def compute_suite_hash(suite_dict: dict[str, Any]) -> str:
    """First 12 hex digits of the SHA-256 of the suite's canonical JSON."""
    serialized = json.dumps(suite_dict, sort_keys=True, default=str)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:12]


def _format_ms(value: float | None) -> str:
    return f"{value:.0f}ms" if value is not None else "N/A"


def _safe_serialize(value: Any) -> Any:
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


def _status_icon(status: RunStatus) -> str:
    return {
        RunStatus.PENDING: "⏳",
        RunStatus.RUNNING: "🔄",
        RunStatus.PASSED: "✅",
        RunStatus.FAILED: "❌",
        RunStatus.ERROR: "⚠️",
    }.get(status, "❓")


def _status_icon_step(status: StepStatus) -> str:
    return {
        StepStatus.PENDING: "⏳",
        StepStatus.RUNNING: "🔄",
        StepStatus.PASSED: "✅",
        StepStatus.FAILED: "❌",
        StepStatus.ERROR: "⚠️",
        StepStatus.SKIPPED: "⏭️",
    }.get(status, "❓")
