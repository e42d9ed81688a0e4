"""
Assertion Engine for HTTP Response Validation

This package provides assertion capabilities for validating an HTTP
response's status code, headers, content type and JSON body.

Supported assertions:
    - status_equals: the status code equals an integer
    - header_equals: a header (case-insensitive) equals a string
    - content_type_is: the media type matches, e.g. ContentType.JSON
    - body_equals: the value at a JSONPath equals an expected value
    - body_has_size: the value at a JSONPath has exactly N items

Usage:
    from cadence.assertions import assert_that, body_has_size, status_equals

    assert_that(
        response,
        status_equals(200),
        body_has_size("MRData.CircuitTable.Circuits[*].circuitId", 20),
    )
"""

# Models
from .models import (
    Assertion,
    AssertionFailure,
    AssertionResult,
    AssertionStatus,
    Comparison,
    ContentType,
    Selector,
    SelectorKind,
    body_equals,
    body_has_size,
    content_type_is,
    header_equals,
    status_equals,
)

# Paths
from .paths import PathError, PathNotFound, Resolution, extract_value, resolve

# Engine
from .engine import AssertionEngine, assert_on, assert_that

__all__ = [
    # Models
    "Assertion",
    "AssertionFailure",
    "AssertionResult",
    "AssertionStatus",
    "Comparison",
    "ContentType",
    "Selector",
    "SelectorKind",
    # Constructors
    "body_equals",
    "body_has_size",
    "content_type_is",
    "header_equals",
    "status_equals",
    # Paths
    "PathError",
    "PathNotFound",
    "Resolution",
    "extract_value",
    "resolve",
    # Engine
    "AssertionEngine",
    "assert_on",
    "assert_that",
]
