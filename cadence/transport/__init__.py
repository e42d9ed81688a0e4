"""
HTTP Transport Layer

This package builds URLs from RequestSpec objects, sends them with
aiohttp and captures the full response.

Usage:
    from cadence.transport import HTTPTransport, RequestSpec

    spec = RequestSpec(
        url="http://ergast.com/api/f1/{season}/circuits.json",
        path_params={"season": "2017"},
    )

    async with HTTPTransport() as transport:
        response = await transport.send(spec)
        print(response.status_code, response.content_type)
"""

from .http import HTTPTransport

from .models import (
    BodyParseError,
    HTTPResponse,
    RequestSpec,
    TransportError,
    TransportErrorCode,
)

__all__ = [
    # Implementation
    "HTTPTransport",
    # Models
    "BodyParseError",
    "HTTPResponse",
    "RequestSpec",
    "TransportError",
    "TransportErrorCode",
]
