"""
Blocking entry points for one-shot request/assert tests.

Each call opens its own HTTP session, sends a single request and closes
the session again, so tests stay independent of each other. Code that
already runs inside an event loop should use HTTPTransport directly.

Usage:
    from cadence import RequestSpec, run, extract, assert_that, status_equals

    circuit_id = extract(run(RequestSpec(url=CIRCUITS_URL)),
                         "MRData.CircuitTable.Circuits[1].circuitId")

    response = run(RequestSpec(url=CIRCUIT_URL, path_params={"circuitId": circuit_id}))
    assert_that(response, status_equals(200))
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .assertions import Assertion, PathError, PathNotFound, assert_that, extract_value
from .transport import BodyParseError, HTTPResponse, HTTPTransport, RequestSpec

logger = logging.getLogger(__name__)


class ExtractionError(LookupError):
    """Raised when a value cannot be extracted from a response body."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Cannot extract {path!r}: {message}")
        self.path = path


async def send(spec: RequestSpec) -> HTTPResponse:
    """Send one request on a short-lived transport."""
    async with HTTPTransport() as transport:
        return await transport.send(spec)


def run(spec: RequestSpec) -> HTTPResponse:
    """
    Send a request and block until the response has been read.

    Raises:
        TransportError: If no response was received
    """
    return asyncio.run(send(spec))


def extract(response: HTTPResponse, path: str) -> Any:
    """
    Read a value out of a JSON response body.

    Raises:
        ExtractionError: If the body is not JSON or the path does not resolve
    """
    try:
        value = extract_value(response.json(), path)
    except (BodyParseError, PathError) as e:
        raise ExtractionError(path, str(e)) from e
    except PathNotFound as e:
        raise ExtractionError(path, "path does not exist") from e

    logger.debug(f"Extracted {path!r} -> {value!r}")
    return value


def extract_from(spec: RequestSpec, path: str) -> Any:
    """Run a request and extract a value from its body."""
    return extract(run(spec), path)


def expect(spec: RequestSpec, *assertions: Assertion) -> HTTPResponse:
    """
    Run a request and assert on the response.

    Raises:
        TransportError: If no response was received
        AssertionFailure: If any assertion did not pass
    """
    response = run(spec)
    assert_that(response, *assertions)
    return response
