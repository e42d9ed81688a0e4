"""
Assertion engine for evaluating checks on HTTP responses.

This module provides the core assertion logic for verifying a
response's status code, headers, content type and JSON body fields
against expected values.
"""

from __future__ import annotations

import logging
from typing import Any

from ..transport.models import BodyParseError, HTTPResponse
from .models import (
    Assertion,
    AssertionFailure,
    AssertionResult,
    Comparison,
    ContentType,
    SelectorKind,
)
from .paths import PathError, PathNotFound, resolve

logger = logging.getLogger(__name__)


class AssertionEngine:
    """
    Engine for running assertions on HTTP responses.

    Supports:
    - status: the response status code equals an integer
    - header: a header (case-insensitive) equals a string
    - content_type: the media type matches a ContentType or media type
    - body equals: the value at a JSONPath equals an expected value
    - body size: the value at a JSONPath has exactly N items

    Example:
        engine = AssertionEngine()

        result = engine.status(response, 200)
        result = engine.header(response, "Content-Length", "4551")
        result = engine.body_size(response, "MRData.CircuitTable.Circuits[*].circuitId", 20)
    """

    def evaluate(self, response: HTTPResponse, assertion: Assertion) -> AssertionResult:
        """Dispatch a single Assertion to the matching check."""
        selector = assertion.selector
        kind = selector.kind

        if kind == SelectorKind.STATUS:
            result = self.status(response, assertion.expected)
        elif kind == SelectorKind.HEADER:
            result = self.header(response, selector.name or "", assertion.expected)
        elif kind == SelectorKind.CONTENT_TYPE:
            result = self.content_type(response, assertion.expected)
        elif assertion.comparison == Comparison.SIZE:
            result = self.body_size(response, selector.name or "", assertion.expected)
        else:
            result = self.body_equals(response, selector.name or "", assertion.expected)

        logger.debug(f"{assertion.describe()}: {result.status.value}")
        return result

    def evaluate_all(
        self, response: HTTPResponse, assertions: list[Assertion]
    ) -> list[AssertionResult]:
        return [self.evaluate(response, a) for a in assertions]

    def status(self, response: HTTPResponse, expected: int) -> AssertionResult:
        """
        Assert the response status code.

        Args:
            response: The response to check
            expected: Expected status code

        Returns:
            AssertionResult indicating pass/fail
        """
        selector = "status code"
        actual = response.status_code

        if actual == expected:
            return AssertionResult.passed_result(
                message=f"Status code is {expected}",
                selector=selector,
                actual=actual,
            )
        details = {"reason": response.reason} if response.reason else None
        return AssertionResult.failed_result(
            message="Status code does not match",
            selector=selector,
            expected=expected,
            actual=actual,
            details=details,
        )

    def header(self, response: HTTPResponse, name: str, expected: str) -> AssertionResult:
        """
        Assert a header value. Header names are case-insensitive.

        Args:
            response: The response to check
            name: Header name
            expected: Expected header value

        Returns:
            AssertionResult indicating pass/missing/fail
        """
        selector = f"header {name!r}"
        actual = response.header(name)

        if actual is None:
            return AssertionResult.missing_result(
                message=f"Header {name!r} is not present",
                selector=selector,
                expected=expected,
                details={"available": list(dict.fromkeys(response.headers.keys()))},
            )

        if actual == str(expected):
            return AssertionResult.passed_result(
                message="Header matches expected",
                selector=selector,
                actual=actual,
            )
        return AssertionResult.failed_result(
            message="Header does not match",
            selector=selector,
            expected=str(expected),
            actual=actual,
        )

    def content_type(
        self, response: HTTPResponse, expected: ContentType | str
    ) -> AssertionResult:
        """
        Assert the response media type.

        A ContentType matches any of its media types; a string must equal
        the media type exactly. Parameters such as charset are ignored.
        """
        selector = "content type"
        raw = response.header("Content-Type")

        if raw is None:
            return AssertionResult.missing_result(
                message="Content-Type header is not present",
                selector=selector,
                expected=expected,
            )

        actual = response.content_type
        if isinstance(expected, ContentType):
            matched = expected.matches(actual)
        else:
            matched = actual == str(expected).split(";", 1)[0].strip().lower()

        if matched:
            return AssertionResult.passed_result(
                message="Content type matches expected",
                selector=selector,
                actual=raw,
            )
        return AssertionResult.failed_result(
            message="Content type does not match",
            selector=selector,
            expected=expected,
            actual=raw,
        )

    def body_equals(self, response: HTTPResponse, path: str, expected: Any) -> AssertionResult:
        """
        Assert that the value at a body path equals an expected value.

        For paths that select a sequence, an expected list is compared
        elementwise; any other expected value must equal every element.

        Args:
            response: The response to check
            path: JSONPath expression
            expected: The expected value

        Returns:
            AssertionResult indicating pass/missing/fail
        """
        resolution, error = self._resolve(response, path, expected)
        if error:
            return error

        selector = f"body {path!r}"
        actual = resolution.value

        if resolution.is_sequence and not isinstance(expected, list):
            mismatched = [i for i, item in enumerate(actual) if not _values_equal(expected, item)]
            if actual and not mismatched:
                return AssertionResult.passed_result(
                    message=f"All {len(actual)} values match expected",
                    selector=selector,
                    actual=actual,
                )
            details = {"mismatched_indexes": mismatched} if actual else {"hint": "No values selected"}
            return AssertionResult.failed_result(
                message="Not every selected value matches",
                selector=selector,
                expected=expected,
                actual=actual,
                details=details,
            )

        if _values_equal(expected, actual):
            return AssertionResult.passed_result(
                message="Value matches expected",
                selector=selector,
                actual=actual,
            )
        return AssertionResult.failed_result(
            message="Value does not match",
            selector=selector,
            expected=expected,
            actual=actual,
            details=self._type_mismatch_hint(expected, actual),
        )

    def body_size(self, response: HTTPResponse, path: str, expected_size: int) -> AssertionResult:
        """
        Assert that the value at a body path has exactly N items.

        Args:
            response: The response to check
            path: JSONPath expression
            expected_size: Required exact size

        Returns:
            AssertionResult indicating pass/missing/fail
        """
        resolution, error = self._resolve(response, path, f"size {expected_size}")
        if error:
            return error

        selector = f"body {path!r}"
        actual = resolution.value

        if not isinstance(actual, (list, dict, str)):
            return AssertionResult.error_result(
                message=f"Cannot check size of {type(actual).__name__}",
                selector=selector,
                details={"type": type(actual).__name__, "value": actual},
            )

        actual_size = len(actual)
        type_name = {list: "array", dict: "object", str: "string"}[type(actual)]

        if actual_size == expected_size:
            return AssertionResult.passed_result(
                message=f"{type_name.capitalize()} has exactly {expected_size} items",
                selector=selector,
                actual=f"size {actual_size}",
            )
        return AssertionResult.failed_result(
            message=f"{type_name.capitalize()} size mismatch",
            selector=selector,
            expected=f"size == {expected_size}",
            actual=f"size {actual_size}",
            details={"difference": abs(actual_size - expected_size)},
        )

    def _resolve(self, response: HTTPResponse, path: str, expected: Any):
        """
        Parse the body and resolve a path.

        Returns:
            Tuple of (resolution, error). If error is not None, resolution is None.
        """
        selector = f"body {path!r}"

        try:
            data = response.json()
        except BodyParseError as e:
            return None, AssertionResult.error_result(
                message="Response body is not JSON",
                selector=selector,
                details={"error": str(e), "content_type": response.content_type or None},
            )

        try:
            return resolve(data, path), None
        except PathError as e:
            return None, AssertionResult.error_result(
                message="Invalid JSONPath expression",
                selector=selector,
                details={"error": str(e)},
            )
        except PathNotFound:
            return None, AssertionResult.missing_result(
                message="Path does not exist",
                selector=selector,
                expected=expected,
            )

    def _type_mismatch_hint(self, expected: Any, actual: Any) -> dict[str, Any]:
        """Generate a hint if types don't match."""
        if type(expected) != type(actual):
            return {
                "hint": f"Type mismatch: expected {type(expected).__name__}, got {type(actual).__name__}"
            }
        return {}


def _values_equal(expected: Any, actual: Any) -> bool:
    """JSON equality: true and false never equal 1 and 0."""
    if isinstance(expected, bool) or isinstance(actual, bool):
        return type(expected) is type(actual) and expected == actual
    if isinstance(expected, list) and isinstance(actual, list):
        return len(expected) == len(actual) and all(
            _values_equal(e, a) for e, a in zip(expected, actual)
        )
    if isinstance(expected, dict) and isinstance(actual, dict):
        return expected.keys() == actual.keys() and all(
            _values_equal(value, actual[key]) for key, value in expected.items()
        )
    return expected == actual


def assert_on(response: HTTPResponse, assertion: Assertion) -> AssertionResult:
    """Evaluate one assertion against a response."""
    return AssertionEngine().evaluate(response, assertion)


def assert_that(response: HTTPResponse, *assertions: Assertion) -> list[AssertionResult]:
    """
    Evaluate every assertion and raise if any of them did not pass.

    Raises:
        AssertionFailure: Listing each failing, missing or errored check
    """
    results = AssertionEngine().evaluate_all(response, list(assertions))
    if not all(r.passed for r in results):
        raise AssertionFailure(results)
    return results
