"""
Suite execution.

Runs the cases of a Suite one after another over a single HTTP
transport and records everything in a Reporter. Each case starts with
no variables; values extracted by a step are only visible to the later
steps of the same case.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from ..assertions import AssertionEngine
from ..reporting import CaseRecord, Reporter, RunReport
from ..runner import ExtractionError, extract
from ..transport import HTTPTransport, RequestSpec, TransportError
from .models import Case, Step, Suite

logger = logging.getLogger(__name__)

# Template interpolation: {{env.KEY}} or {{vars.NAME}}
TEMPLATE_PATTERN = re.compile(r"\{\{\s*(env|vars)\.(\w+)\s*\}\}")

# Called with (case, record) after each case finishes
CaseCallback = Callable[[Case, "CaseRecord | None"], None]


def interpolate_value(value: Any, env: dict[str, Any], variables: dict[str, Any]) -> Any:
    """Interpolate template variables in a value. Unknown names are left as-is."""
    if isinstance(value, str):
        def replace(match: re.Match) -> str:
            scope, name = match.groups()
            source = env if scope == "env" else variables
            if name in source:
                return str(source[name])
            return match.group(0)
        return TEMPLATE_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_value(v, env, variables) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_value(v, env, variables) for v in value]
    return value


def join_url(base_url: str | None, url: str) -> str:
    """Resolve a step URL against the suite base URL."""
    if not base_url or url.startswith("http://") or url.startswith("https://"):
        return url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"


class SuiteExecutor:
    """
    Executes a suite and returns its RunReport.

    Example:
        suite, _ = load_suite("suites/ergast.yaml")
        report = await SuiteExecutor(suite).run()
        print(report.summary())
    """

    def __init__(
        self,
        suite: Suite,
        reporter: Reporter | None = None,
        transport: HTTPTransport | None = None,
        on_case_complete: CaseCallback | None = None,
    ):
        self.suite = suite
        self.reporter = reporter or Reporter.from_suite(suite)
        self.transport = transport or HTTPTransport()
        self.engine = AssertionEngine()
        self._on_case_complete = on_case_complete

    def build_request(self, step: Step, variables: dict[str, Any]) -> RequestSpec:
        """Fill in templates and the base URL for one step."""
        env = self.suite.env
        request = step.request
        return RequestSpec(
            url=join_url(self.suite.base_url, interpolate_value(request.url, env, variables)),
            method=request.method,
            path_params=interpolate_value(request.path_params, env, variables),
            query_params=interpolate_value(request.query_params, env, variables),
            headers=interpolate_value(request.headers, env, variables),
            timeout_ms=request.timeout_ms,
        )

    async def run(self, case_ids: list[str] | None = None) -> RunReport:
        """
        Run every case, or only the selected ones.

        Args:
            case_ids: Case IDs to run; other cases are reported as skipped
        """
        selected = set(case_ids) if case_ids else None
        self.reporter.start_run()
        logger.info(f"Running suite {self.suite.name!r} ({len(self.suite.cases)} cases)")

        try:
            await self.transport.connect()
            for case in self.suite.cases:
                if selected is not None and case.id not in selected:
                    self.reporter.skip_case(case.id, "not selected")
                    continue
                await self._run_case(case)
        finally:
            await self.transport.disconnect()

        return self.reporter.finish_run()

    async def _run_case(self, case: Case) -> None:
        reporter = self.reporter
        reporter.start_case(case.id)
        variables: dict[str, Any] = {}
        logger.debug(f"Case {case.id}: {len(case.steps)} step(s)")

        for index, step in enumerate(case.steps):
            spec = self.build_request(step, variables)
            reporter.start_step(case.id, index, url=spec.build_url())

            try:
                response = await self.transport.send(spec)
            except TransportError as e:
                logger.warning(f"Case {case.id} step {index}: {e}")
                reporter.complete_step_error(case.id, index, str(e), e.to_dict())
                reporter.skip_remaining_steps(case.id, index + 1, "previous step errored")
                break

            results = self.engine.evaluate_all(response, step.expect)

            try:
                extracted = {name: extract(response, path) for name, path in step.extract.items()}
            except ExtractionError as e:
                reporter.complete_step(case.id, index, response, results)
                reporter.complete_step_error(
                    case.id, index, str(e), {"path": e.path, "status_code": response.status_code}
                )
                reporter.skip_remaining_steps(case.id, index + 1, "previous step errored")
                break

            variables.update(extracted)
            reporter.complete_step(case.id, index, response, results, extracted)

            if not all(r.passed for r in results):
                reporter.skip_remaining_steps(case.id, index + 1, "previous step failed")
                break

        record = reporter.finish_case(case.id)
        if self._on_case_complete is not None:
            self._on_case_complete(case, record)
