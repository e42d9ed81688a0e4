"""
Schema parser for test suites.

This module converts validated YAML data into typed Suite structures.
"""

from __future__ import annotations

from typing import Any

from ..assertions import (
    Assertion,
    ContentType,
    body_equals,
    body_has_size,
    content_type_is,
    header_equals,
    status_equals,
)
from ..transport import RequestSpec
from .models import Case, Defaults, Step, Suite


class SchemaParser:
    """Parses and converts validated YAML to typed Suite structure."""

    def __init__(self, data: dict[str, Any]):
        self.data = data

    def parse(self) -> Suite:
        """Convert validated data to typed Suite."""
        defaults = self._parse_defaults()
        return Suite(
            version=self.data["version"],
            name=self.data["name"],
            base_url=self.data.get("base_url"),
            env=self.data.get("env") or {},
            defaults=defaults,
            cases=[self._parse_case(case, defaults) for case in self.data["cases"]],
        )

    def _parse_defaults(self) -> Defaults:
        defaults = self.data.get("defaults") or {}
        return Defaults(
            timeout_ms=defaults.get("timeout_ms", 30000),
        )

    def _parse_case(self, case: dict, defaults: Defaults) -> Case:
        if "steps" in case:
            raw_steps = case["steps"]
        else:
            raw_steps = [{k: case[k] for k in ("request", "expect", "extract") if k in case}]

        return Case(
            id=case["id"],
            description=case.get("description"),
            steps=[self._parse_step(step, defaults) for step in raw_steps],
        )

    def _parse_step(self, step: dict, defaults: Defaults) -> Step:
        return Step(
            request=self._parse_request(step["request"], defaults),
            expect=[parse_assertion(entry) for entry in step.get("expect") or []],
            extract=dict(step.get("extract") or {}),
        )

    def _parse_request(self, request: dict, defaults: Defaults) -> RequestSpec:
        return RequestSpec(
            url=request["url"],
            method=request.get("method", "GET").upper(),
            path_params=dict(request.get("path_params") or {}),
            query_params=dict(request.get("query_params") or {}),
            headers={k: str(v) for k, v in (request.get("headers") or {}).items()},
            timeout_ms=defaults.timeout_ms,
        )


def parse_assertion(entry: dict[str, Any]) -> Assertion:
    """
    Convert one validated 'expect' entry to an Assertion.

        {status: 200}
        {header: Content-Length, equals: "4551"}
        {content_type: json}
        {body: md5, equals: "..."}
        {body: "Circuits[*].circuitId", size: 20}
    """
    if "status" in entry:
        return status_equals(entry["status"])
    if "header" in entry:
        return header_equals(entry["header"], str(entry["equals"]))
    if "content_type" in entry:
        value = entry["content_type"]
        try:
            return content_type_is(ContentType(value.lower()))
        except ValueError:
            return content_type_is(value)
    if "size" in entry:
        return body_has_size(entry["body"], entry["size"])
    return body_equals(entry["body"], entry["equals"])
