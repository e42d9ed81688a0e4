"""
Assertion models.

This module defines what can be asserted on an HTTP response
(selectors, comparisons, assertions) and the outcome of each check,
including detailed failure information.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AssertionStatus(str, Enum):
    """Status of an assertion check."""
    PASSED = "passed"
    FAILED = "failed"    # value found but different
    MISSING = "missing"  # header absent or body path unresolved
    ERROR = "error"      # e.g., invalid path, body is not JSON


class SelectorKind(str, Enum):
    """Which part of the response an assertion looks at."""
    STATUS = "status"
    HEADER = "header"
    CONTENT_TYPE = "content_type"
    BODY = "body"


class Comparison(str, Enum):
    """How the selected value is compared to the expected one."""
    EQUALS = "equals"
    SIZE = "size"


class ContentType(str, Enum):
    """Well-known content types, matched against the response media type."""
    JSON = "json"
    XML = "xml"
    HTML = "html"
    TEXT = "text"

    @property
    def media_types(self) -> tuple[str, ...]:
        return _MEDIA_TYPES[self]

    def matches(self, media_type: str) -> bool:
        media_type = media_type.split(";", 1)[0].strip().lower()
        if media_type in self.media_types:
            return True
        if self is ContentType.JSON:
            return media_type.endswith("+json")
        if self is ContentType.XML:
            return media_type.endswith("+xml")
        return False


_MEDIA_TYPES: dict[ContentType, tuple[str, ...]] = {
    ContentType.JSON: (
        "application/json",
        "application/javascript",
        "text/javascript",
        "text/json",
    ),
    ContentType.XML: ("application/xml", "text/xml", "application/xhtml+xml"),
    ContentType.HTML: ("text/html",),
    ContentType.TEXT: ("text/plain",),
}


@dataclass
class Selector:
    """
    A reference to one value of a response.

    Attributes:
        kind: Status code, a header, the content type, or a body path
        name: Header name or JSONPath expression (unused otherwise)
    """
    kind: SelectorKind
    name: str | None = None

    def describe(self) -> str:
        if self.kind == SelectorKind.STATUS:
            return "status code"
        if self.kind == SelectorKind.CONTENT_TYPE:
            return "content type"
        if self.kind == SelectorKind.HEADER:
            return f"header {self.name!r}"
        return f"body {self.name!r}"

    def __str__(self) -> str:
        return self.describe()


@dataclass
class Assertion:
    """A (selector, expected value, comparison) triple."""
    selector: Selector
    expected: Any
    comparison: Comparison = Comparison.EQUALS

    def describe(self) -> str:
        if self.comparison == Comparison.SIZE:
            return f"{self.selector} has size {self.expected}"
        return f"{self.selector} equals {_format_value(self.expected)}"

    def to_dict(self) -> dict[str, Any]:
        expected = self.expected
        if isinstance(expected, ContentType):
            expected = expected.value
        return {
            "selector": self.selector.kind.value,
            "name": self.selector.name,
            "comparison": self.comparison.value,
            "expected": expected,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Assertion constructors
# ─────────────────────────────────────────────────────────────────────────────

def status_equals(code: int) -> Assertion:
    return Assertion(Selector(SelectorKind.STATUS), code)


def header_equals(name: str, value: str) -> Assertion:
    return Assertion(Selector(SelectorKind.HEADER, name), value)


def content_type_is(content_type: ContentType | str) -> Assertion:
    """Accepts a ContentType or an explicit media type like 'application/json'."""
    return Assertion(Selector(SelectorKind.CONTENT_TYPE), content_type)


def body_equals(path: str, value: Any) -> Assertion:
    return Assertion(Selector(SelectorKind.BODY, path), value)


def body_has_size(path: str, size: int) -> Assertion:
    return Assertion(Selector(SelectorKind.BODY, path), size, Comparison.SIZE)


# ─────────────────────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────────────────────

class _Unset:
    """Marks an expected or actual value that does not apply to a result."""

    def __repr__(self) -> str:
        return "UNSET"


# JSON null is a real value, so absence needs its own marker
UNSET: Any = _Unset()


@dataclass
class AssertionResult:
    """
    Result of a single assertion check.

    Attributes:
        status: Whether the assertion passed, failed, was missing, or errored
        message: Human-readable description of the result
        selector: Description of what was evaluated
        expected: What was expected; UNSET when it does not apply
        actual: What was actually found; UNSET when nothing was found
        details: Additional context for debugging
    """
    status: AssertionStatus
    message: str
    selector: str | None = None
    expected: Any = UNSET
    actual: Any = UNSET
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return self.status == AssertionStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status in (AssertionStatus.FAILED, AssertionStatus.MISSING)

    @property
    def missing(self) -> bool:
        return self.status == AssertionStatus.MISSING

    def __str__(self) -> str:
        """Format as a human-readable string."""
        if self.status == AssertionStatus.PASSED:
            return f"✅ PASS: {self.message}"

        icon = "⚠️" if self.status == AssertionStatus.ERROR else "❌"
        lines = [f"{icon} {self.status.value.upper()}: {self.message}"]

        if self.selector:
            lines.append(f"   Selector: {self.selector}")

        if self.expected is not UNSET:
            lines.append(f"   Expected: {_format_value(self.expected)}")

        if self.actual is not UNSET:
            lines.append(f"   Actual:   {_format_value(self.actual)}")

        if self.details:
            for key, value in self.details.items():
                lines.append(f"   {key}: {_format_value(value)}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "selector": self.selector,
            "expected": None if self.expected is UNSET else _safe_serialize(self.expected),
            "actual": None if self.actual is UNSET else _safe_serialize(self.actual),
            "details": {k: _safe_serialize(v) for k, v in self.details.items()},
        }

    @classmethod
    def passed_result(
        cls,
        message: str,
        selector: str | None = None,
        actual: Any = UNSET,
    ) -> AssertionResult:
        """Create a passing result."""
        return cls(
            status=AssertionStatus.PASSED,
            message=message,
            selector=selector,
            actual=actual,
        )

    @classmethod
    def failed_result(
        cls,
        message: str,
        selector: str | None = None,
        expected: Any = UNSET,
        actual: Any = UNSET,
        details: dict[str, Any] | None = None,
    ) -> AssertionResult:
        """Create a failing result."""
        return cls(
            status=AssertionStatus.FAILED,
            message=message,
            selector=selector,
            expected=expected,
            actual=actual,
            details=details or {},
        )

    @classmethod
    def missing_result(
        cls,
        message: str,
        selector: str | None = None,
        expected: Any = UNSET,
        details: dict[str, Any] | None = None,
    ) -> AssertionResult:
        """Create a result for a value that could not be found at all."""
        return cls(
            status=AssertionStatus.MISSING,
            message=message,
            selector=selector,
            expected=expected,
            details=details or {},
        )

    @classmethod
    def error_result(
        cls,
        message: str,
        selector: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AssertionResult:
        """Create an error result (assertion couldn't be evaluated)."""
        return cls(
            status=AssertionStatus.ERROR,
            message=message,
            selector=selector,
            details=details or {},
        )


class AssertionFailure(AssertionError):
    """Raised by assert_that() when one or more assertions did not pass."""

    def __init__(self, results: list[AssertionResult]):
        self.results = results
        failing = [r for r in results if not r.passed]
        lines = [f"{len(failing)} of {len(results)} assertion(s) did not pass:"]
        lines.extend(str(r) for r in failing)
        super().__init__("\n".join(lines))


def _format_value(value: Any, max_length: int = 100) -> str:
    """Format a value for display, truncating if too long."""
    if value is None:
        return "null"

    if isinstance(value, Enum):
        formatted = repr(value.value)
    elif isinstance(value, str):
        formatted = repr(value)
    elif isinstance(value, (list, dict)):
        try:
            formatted = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            formatted = repr(value)
    else:
        formatted = repr(value)

    if len(formatted) > max_length:
        return formatted[: max_length - 3] + "..."

    return formatted


def _safe_serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)
