"""
Cadence - HTTP API Assertion Runner

This package provides components for sending HTTP requests and asserting
on their status codes, headers and JSON bodies.

Subpackages:
    - transport: RequestSpec, HTTPResponse and the aiohttp transport
    - assertions: Assertion engine and JSONPath resolution
    - suites: Load, validate and run YAML test suites
    - reporting: Run reports and result tracking

Usage:
    from cadence import (
        RequestSpec, run, extract, assert_that,
        status_equals, content_type_is, ContentType,
    )

    response = run(RequestSpec(
        url="http://ergast.com/api/f1/{season}/circuits.json",
        path_params={"season": "2017"},
    ))
    assert_that(response, status_equals(200), content_type_is(ContentType.JSON))

    circuit_id = extract(response, "MRData.CircuitTable.Circuits[1].circuitId")
"""

__version__ = "0.1.0"

# Re-export transport for convenience
from .transport import (
    # Implementation
    HTTPTransport,
    # Models
    BodyParseError,
    HTTPResponse,
    RequestSpec,
    TransportError,
    TransportErrorCode,
)

# Re-export assertions for convenience
from .assertions import (
    # Models
    Assertion,
    AssertionFailure,
    AssertionResult,
    AssertionStatus,
    Comparison,
    ContentType,
    Selector,
    SelectorKind,
    # Constructors
    body_equals,
    body_has_size,
    content_type_is,
    header_equals,
    status_equals,
    # Engine
    AssertionEngine,
    assert_on,
    assert_that,
)

# Blocking runner
from .runner import ExtractionError, expect, extract, extract_from, run

# Re-export suites for convenience
from .suites import (
    Suite,
    SuiteExecutor,
    ValidationResult,
    load_suite,
    validate_suite_yaml,
)

# Re-export reporting for convenience
from .reporting import (
    Reporter,
    RunReport,
    RunStatus,
    StepStatus,
)

__all__ = [
    # Package info
    "__version__",
    # Transport
    "HTTPTransport",
    "BodyParseError",
    "HTTPResponse",
    "RequestSpec",
    "TransportError",
    "TransportErrorCode",
    # Assertions - Models
    "Assertion",
    "AssertionFailure",
    "AssertionResult",
    "AssertionStatus",
    "Comparison",
    "ContentType",
    "Selector",
    "SelectorKind",
    # Assertions - Constructors
    "body_equals",
    "body_has_size",
    "content_type_is",
    "header_equals",
    "status_equals",
    # Assertions - Engine
    "AssertionEngine",
    "assert_on",
    "assert_that",
    # Runner
    "ExtractionError",
    "expect",
    "extract",
    "extract_from",
    "run",
    # Suites
    "Suite",
    "SuiteExecutor",
    "ValidationResult",
    "load_suite",
    "validate_suite_yaml",
    # Reporting
    "Reporter",
    "RunReport",
    "RunStatus",
    "StepStatus",
]
