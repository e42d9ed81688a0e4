"""
Schema validation for test suites.

This module contains the validation logic that checks raw parsed YAML
against the suite schema and reports errors with helpful messages.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from ..assertions import ContentType, PathError
from ..assertions.paths import compile_path


# {{vars.NAME}} references to values extracted by earlier steps
VARS_PATTERN = re.compile(r"\{\{\s*vars\.(\w+)\s*\}\}")


# ─────────────────────────────────────────────────────────────────────────────
# Validation Result Types
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ValidationError:
    """Represents a single validation error with context."""
    path: str  # e.g., "cases[0].steps[1].expect[2].body"
    message: str
    value: Any = None
    suggestion: str | None = None

    def __str__(self) -> str:
        parts = [f"❌ {self.path}: {self.message}"]
        if self.value is not None:
            parts.append(f"   Got: {repr(self.value)}")
        if self.suggestion:
            parts.append(f"   💡 {self.suggestion}")
        return "\n".join(parts)


@dataclass
class ValidationResult:
    """Result of schema validation."""
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(
        self,
        path: str,
        message: str,
        value: Any = None,
        suggestion: str | None = None
    ) -> None:
        self.errors.append(ValidationError(path, message, value, suggestion))

    def __str__(self) -> str:
        if self.is_valid:
            return "✅ Schema validation passed"
        lines = [f"Schema validation failed with {len(self.errors)} error(s):\n"]
        lines.extend(str(e) for e in self.errors)
        return "\n".join(lines)


# ─────────────────────────────────────────────────────────────────────────────
# Schema Validator
# ─────────────────────────────────────────────────────────────────────────────

class SchemaValidator:
    """Validates raw parsed YAML against the suite schema."""

    REQUIRED_TOP_LEVEL = {"version", "name", "cases"}
    OPTIONAL_TOP_LEVEL = {"base_url", "env", "defaults"}
    CASE_KEYS = {"id", "description", "steps", "request", "expect", "extract"}
    STEP_KEYS = {"request", "expect", "extract"}
    REQUEST_KEYS = {"url", "method", "path_params", "query_params", "headers"}
    SELECTOR_KEYS = {"status", "header", "content_type", "body"}
    VALID_METHODS = {"GET", "HEAD", "OPTIONS", "DELETE", "POST", "PUT", "PATCH"}
    VALID_CONTENT_TYPES = {t.value for t in ContentType}

    def __init__(self, data: dict[str, Any]):
        self.data = data
        self.result = ValidationResult()
        self.case_ids: set[str] = set()

    def validate(self) -> ValidationResult:
        """Run all validation checks and return result."""
        self._validate_top_level()
        if not self.result.is_valid:
            return self.result

        self._validate_version()
        self._validate_name()
        self._validate_base_url()
        self._validate_env()
        self._validate_defaults()
        self._validate_cases()

        return self.result

    def _validate_top_level(self) -> None:
        """Check required and unknown top-level keys."""
        keys = set(self.data.keys())
        missing = self.REQUIRED_TOP_LEVEL - keys
        unknown = keys - self.REQUIRED_TOP_LEVEL - self.OPTIONAL_TOP_LEVEL

        for key in sorted(missing):
            self.result.add_error(
                key,
                f"Required field '{key}' is missing",
                suggestion=f"Add '{key}:' to your suite file"
            )

        for key in sorted(unknown, key=str):
            self.result.add_error(
                str(key),
                f"Unknown top-level field '{key}'",
                suggestion=f"Valid fields are: {', '.join(sorted(self.REQUIRED_TOP_LEVEL | self.OPTIONAL_TOP_LEVEL))}"
            )

    def _validate_version(self) -> None:
        version = self.data.get("version")
        if not isinstance(version, int) or isinstance(version, bool):
            self.result.add_error(
                "version",
                "Must be an integer",
                value=version,
                suggestion="Use 'version: 1'"
            )
        elif version < 1:
            self.result.add_error(
                "version",
                "Must be >= 1",
                value=version
            )

    def _validate_name(self) -> None:
        name = self.data.get("name")
        if not isinstance(name, str):
            self.result.add_error(
                "name",
                "Must be a string",
                value=name
            )
        elif not name.strip():
            self.result.add_error(
                "name",
                "Cannot be empty",
                suggestion="Provide a descriptive name for your suite"
            )

    def _validate_base_url(self) -> None:
        base_url = self.data.get("base_url")
        if base_url is None:
            return
        if not isinstance(base_url, str):
            self.result.add_error(
                "base_url",
                "Must be a string",
                value=base_url
            )
        elif not _is_absolute_url(base_url):
            self.result.add_error(
                "base_url",
                "Must be a valid HTTP(S) URL",
                value=base_url,
                suggestion="URL should start with 'http://' or 'https://'"
            )

    def _validate_env(self) -> None:
        env = self.data.get("env")
        if env is None:
            return
        if not isinstance(env, dict):
            self.result.add_error(
                "env",
                "Must be an object (key-value pairs)",
                value=env
            )

    def _validate_defaults(self) -> None:
        defaults = self.data.get("defaults")
        if defaults is None:
            return
        if not isinstance(defaults, dict):
            self.result.add_error(
                "defaults",
                "Must be an object",
                value=defaults
            )
            return

        timeout = defaults.get("timeout_ms")
        if timeout is not None:
            if not isinstance(timeout, int) or isinstance(timeout, bool) or timeout <= 0:
                self.result.add_error(
                    "defaults.timeout_ms",
                    "Must be a positive integer (milliseconds)",
                    value=timeout
                )

    def _validate_cases(self) -> None:
        cases = self.data.get("cases")
        if not isinstance(cases, list):
            self.result.add_error(
                "cases",
                "Must be a list",
                value=cases
            )
            return

        if len(cases) == 0:
            self.result.add_error(
                "cases",
                "Must contain at least one case",
                suggestion="Add a case with an 'id' and a 'request'"
            )
            return

        for i, case in enumerate(cases):
            self._validate_case(i, case)

    def _validate_case(self, index: int, case: Any) -> None:
        path = f"cases[{index}]"

        if not isinstance(case, dict):
            self.result.add_error(
                path,
                "Case must be an object",
                value=case
            )
            return

        case_id = case.get("id")
        if not case_id:
            self.result.add_error(
                f"{path}.id",
                "Case must have an 'id' field",
                suggestion="Add a unique identifier like 'id: circuits_2017'"
            )
        elif not isinstance(case_id, str):
            self.result.add_error(
                f"{path}.id",
                "Case id must be a string",
                value=case_id
            )
        elif case_id in self.case_ids:
            self.result.add_error(
                f"{path}.id",
                "Duplicate case id",
                value=case_id,
                suggestion="Each case must have a unique id"
            )
        else:
            self.case_ids.add(case_id)

        unknown = set(case.keys()) - self.CASE_KEYS
        for key in sorted(unknown, key=str):
            self.result.add_error(
                f"{path}.{key}",
                "Unknown case field",
                suggestion=f"Valid fields are: {', '.join(sorted(self.CASE_KEYS))}"
            )

        description = case.get("description")
        if description is not None and not isinstance(description, str):
            self.result.add_error(
                f"{path}.description",
                "Must be a string",
                value=description
            )

        inline = self.STEP_KEYS & set(case.keys())
        if "steps" in case:
            if inline:
                self.result.add_error(
                    path,
                    "Use either 'steps' or an inline 'request', not both",
                    value=sorted(inline)
                )
                return
            steps = case["steps"]
            if not isinstance(steps, list) or len(steps) == 0:
                self.result.add_error(
                    f"{path}.steps",
                    "Must be a non-empty list",
                    value=steps
                )
                return
        elif "request" in case:
            steps = [{k: case[k] for k in inline}]
        else:
            self.result.add_error(
                path,
                "Case requires 'steps' or a 'request'",
                suggestion="Add 'request: {url: ...}' for a single-request case"
            )
            return

        defined_vars: set[str] = set()
        for i, step in enumerate(steps):
            step_path = f"{path}.steps[{i}]" if "steps" in case else path
            self._validate_step(step_path, step, defined_vars)

    def _validate_step(self, path: str, step: Any, defined_vars: set[str]) -> None:
        if not isinstance(step, dict):
            self.result.add_error(
                path,
                "Step must be an object",
                value=step
            )
            return

        unknown = set(step.keys()) - self.STEP_KEYS
        for key in sorted(unknown, key=str):
            self.result.add_error(
                f"{path}.{key}",
                "Unknown step field",
                suggestion=f"Valid fields are: {', '.join(sorted(self.STEP_KEYS))}"
            )

        request = step.get("request")
        if request is None:
            self.result.add_error(
                f"{path}.request",
                "Step requires a 'request' field"
            )
        else:
            self._validate_request(f"{path}.request", request, defined_vars)

        expect = step.get("expect")
        if expect is not None:
            if not isinstance(expect, list):
                self.result.add_error(
                    f"{path}.expect",
                    "Must be a list of assertions",
                    value=expect
                )
            else:
                for i, entry in enumerate(expect):
                    self._validate_assertion(f"{path}.expect[{i}]", entry)

        extract = step.get("extract")
        if extract is not None:
            if not isinstance(extract, dict):
                self.result.add_error(
                    f"{path}.extract",
                    "Must be an object mapping variable names to JSONPath expressions",
                    value=extract
                )
            else:
                for name, expr in extract.items():
                    if not isinstance(name, str) or not re.fullmatch(r"\w+", name):
                        self.result.add_error(
                            f"{path}.extract",
                            "Variable names may only contain letters, digits and '_'",
                            value=name
                        )
                        continue
                    self._validate_jsonpath(f"{path}.extract.{name}", expr)
                    defined_vars.add(name)

    def _validate_request(self, path: str, request: Any, defined_vars: set[str]) -> None:
        if not isinstance(request, dict):
            self.result.add_error(
                path,
                "Request must be an object",
                value=request
            )
            return

        unknown = set(request.keys()) - self.REQUEST_KEYS
        for key in sorted(unknown, key=str):
            self.result.add_error(
                f"{path}.{key}",
                "Unknown request field",
                suggestion=f"Valid fields are: {', '.join(sorted(self.REQUEST_KEYS))}"
            )

        url = request.get("url")
        if not url:
            self.result.add_error(
                f"{path}.url",
                "Request requires a 'url' field"
            )
        elif not isinstance(url, str):
            self.result.add_error(
                f"{path}.url",
                "Must be a string",
                value=url
            )
        elif not _is_absolute_url(url) and not self.data.get("base_url"):
            self.result.add_error(
                f"{path}.url",
                "Relative URL without a suite 'base_url'",
                value=url,
                suggestion="Use an absolute http(s) URL or set 'base_url:' at the top level"
            )

        method = request.get("method")
        if method is not None and (not isinstance(method, str) or method.upper() not in self.VALID_METHODS):
            self.result.add_error(
                f"{path}.method",
                "Invalid HTTP method",
                value=method,
                suggestion=f"Valid methods: {', '.join(sorted(self.VALID_METHODS))}"
            )

        for key in ("path_params", "query_params", "headers"):
            value = request.get(key)
            if value is not None and not isinstance(value, dict):
                self.result.add_error(
                    f"{path}.{key}",
                    "Must be an object (key-value pairs)",
                    value=value
                )

        for ref in _collect_var_refs(request):
            if ref not in defined_vars:
                self.result.add_error(
                    path,
                    f"References unknown variable 'vars.{ref}'",
                    suggestion=(
                        f"Available variables: {', '.join(sorted(defined_vars)) or '(none yet)'}; "
                        "variables come from 'extract' in an earlier step of the same case"
                    )
                )

    def _validate_assertion(self, path: str, entry: Any) -> None:
        if not isinstance(entry, dict):
            self.result.add_error(
                path,
                "Assertion must be an object",
                value=entry
            )
            return

        selectors = self.SELECTOR_KEYS & set(entry.keys())
        if len(selectors) != 1:
            self.result.add_error(
                path,
                "Assertion must have exactly one of: " + ", ".join(sorted(self.SELECTOR_KEYS)),
                value=sorted(selectors) or None
            )
            return

        selector = selectors.pop()

        if selector == "status":
            status = entry["status"]
            if not isinstance(status, int) or isinstance(status, bool) or not 100 <= status <= 599:
                self.result.add_error(
                    f"{path}.status",
                    "Must be an HTTP status code (100-599)",
                    value=status
                )
            self._reject_extra(path, entry, {"status"})

        elif selector == "header":
            name = entry["header"]
            if not isinstance(name, str) or not name:
                self.result.add_error(
                    f"{path}.header",
                    "Header name must be a non-empty string",
                    value=name
                )
            if "equals" not in entry:
                self.result.add_error(
                    f"{path}.equals",
                    "Header assertion requires an 'equals' field"
                )
            elif not isinstance(entry["equals"], (str, int)) or isinstance(entry["equals"], bool):
                self.result.add_error(
                    f"{path}.equals",
                    "Header value must be a string or number",
                    value=entry["equals"]
                )
            self._reject_extra(path, entry, {"header", "equals"})

        elif selector == "content_type":
            value = entry["content_type"]
            if not isinstance(value, str) or (
                value.lower() not in self.VALID_CONTENT_TYPES and "/" not in value
            ):
                self.result.add_error(
                    f"{path}.content_type",
                    "Must be a known content type or a media type",
                    value=value,
                    suggestion=f"Use one of {', '.join(sorted(self.VALID_CONTENT_TYPES))} or e.g. 'application/json'"
                )
            self._reject_extra(path, entry, {"content_type"})

        else:
            self._validate_jsonpath(f"{path}.body", entry["body"])
            comparisons = {"equals", "size"} & set(entry.keys())
            if len(comparisons) != 1:
                self.result.add_error(
                    path,
                    "Body assertion requires exactly one of 'equals' or 'size'",
                    value=sorted(comparisons) or None
                )
            elif "size" in comparisons:
                size = entry["size"]
                if not isinstance(size, int) or isinstance(size, bool) or size < 0:
                    self.result.add_error(
                        f"{path}.size",
                        "Must be a non-negative integer",
                        value=size
                    )
            self._reject_extra(path, entry, {"body", "equals", "size"})

    def _validate_jsonpath(self, path: str, expr: Any) -> None:
        if not isinstance(expr, str) or not expr.strip():
            self.result.add_error(
                path,
                "Must be a non-empty JSONPath string",
                value=expr
            )
            return
        try:
            compile_path(expr)
        except PathError as e:
            self.result.add_error(
                path,
                "Invalid JSONPath expression",
                value=expr,
                suggestion=str(e)
            )

    def _reject_extra(self, path: str, entry: dict, allowed: set[str]) -> None:
        for key in sorted(set(entry.keys()) - allowed, key=str):
            self.result.add_error(
                f"{path}.{key}",
                "Unexpected field for this assertion",
                suggestion=f"Allowed fields: {', '.join(sorted(allowed))}"
            )


def _is_absolute_url(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def _collect_var_refs(value: Any) -> list[str]:
    """Every {{vars.NAME}} referenced anywhere inside a value."""
    if isinstance(value, str):
        return VARS_PATTERN.findall(value)
    if isinstance(value, dict):
        return [ref for v in value.values() for ref in _collect_var_refs(v)]
    if isinstance(value, list):
        return [ref for v in value for ref in _collect_var_refs(v)]
    return []
