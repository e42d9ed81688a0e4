"""
Reporting for Suite Runs

This package provides reporting capabilities for capturing complete
records of suite runs.

Features:
    - Run metadata (ID, timestamp, suite info)
    - Case and step records with timing
    - Request URL, status code and response headers
    - Every assertion outcome and extracted value
    - JSON serialization
    - Human-readable summaries

Usage:
    from cadence.suites import load_suite
    from cadence.reporting import Reporter

    suite, _ = load_suite("suites/ergast.yaml")
    reporter = Reporter.from_suite(suite)

    reporter.start_run()
    ...
    report = reporter.finish_run()
    print(report.summary())

    reporter.save_json("reports/run.json")
"""

# Models
from .models import (
    CaseRecord,
    RunReport,
    RunStatus,
    StepRecord,
    StepStatus,
    Timing,
    compute_suite_hash,
)

# Reporter
from .reporter import Reporter

__all__ = [
    # Models
    "CaseRecord",
    "RunReport",
    "RunStatus",
    "StepRecord",
    "StepStatus",
    "Timing",
    "compute_suite_hash",
    # Reporter
    "Reporter",
]
