"""
Transport layer models for HTTP requests.

This module defines the request description, the captured response,
and the transport-level error raised when no response was received.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote, urlencode

from multidict import CIMultiDict, CIMultiDictProxy

# Matches {name} placeholders in a URL template
PLACEHOLDER_PATTERN = re.compile(r"\{([^{}/?#]+)\}")

JSON_MEDIA_SUFFIX = "+json"
JSON_MEDIA_TYPE = "application/json"


class TransportErrorCode(str, Enum):
    """Kinds of failure where no HTTP response was received."""
    CONNECTION_ERROR = "connection_error"
    TIMEOUT_ERROR = "timeout_error"
    HTTP_ERROR = "http_error"


class TransportError(Exception):
    """
    Raised when a request could not produce a response.

    Not an AssertionError: a transport failure aborts the test rather
    than counting as a failed expectation.
    """

    def __init__(self, code: TransportErrorCode, message: str, url: str | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.url = url

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "url": self.url,
        }

    def __str__(self) -> str:
        where = f" ({self.url})" if self.url else ""
        return f"{self.code.value}: {self.message}{where}"


class BodyParseError(ValueError):
    """Raised when a response body cannot be parsed as JSON."""


@dataclass
class RequestSpec:
    """
    Everything needed to issue a single HTTP request.

    Attributes:
        url: URL template, may contain {name} placeholders
        method: HTTP method (GET unless stated otherwise)
        path_params: Placeholder name -> substitution value
        query_params: Query parameter name -> value
        headers: Extra request headers
        timeout_ms: Total request timeout in milliseconds
    """
    url: str
    method: str = "GET"
    path_params: dict[str, Any] = field(default_factory=dict)
    query_params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    timeout_ms: int = 30000

    def placeholders(self) -> list[str]:
        """Names of every {name} placeholder in the URL template."""
        return PLACEHOLDER_PATTERN.findall(self.url)

    def unresolved_placeholders(self) -> list[str]:
        """Placeholders that have no path parameter supplied."""
        return [name for name in self.placeholders() if name not in self.path_params]

    def unused_path_params(self) -> list[str]:
        """Path parameters that no placeholder references."""
        names = set(self.placeholders())
        return [name for name in self.path_params if name not in names]

    def build_url(self) -> str:
        """
        Build the final URL.

        Placeholders are replaced by str(value) without further encoding.
        Placeholders without a value are left as literal text. Query
        parameters are appended as key=value pairs.
        """
        def replace(match: re.Match) -> str:
            name = match.group(1)
            if name in self.path_params:
                return str(self.path_params[name])
            return match.group(0)

        url = PLACEHOLDER_PATTERN.sub(replace, self.url)

        if self.query_params:
            query = urlencode(
                {k: str(v) for k, v in self.query_params.items()},
                quote_via=quote,
            )
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{query}"

        return url

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "path_params": self.path_params,
            "query_params": self.query_params,
            "headers": self.headers,
            "timeout_ms": self.timeout_ms,
        }


@dataclass
class HTTPResponse:
    """A fully read HTTP response."""
    status_code: int
    headers: CIMultiDictProxy[str] = field(
        default_factory=lambda: CIMultiDictProxy(CIMultiDict())
    )
    body: bytes = b""
    url: str = ""
    reason: str | None = None
    elapsed_ms: float | None = None
    _parsed: Any = field(default=None, init=False, repr=False)
    _is_parsed: bool = field(default=False, init=False, repr=False)

    @property
    def content_type(self) -> str:
        """Media type from Content-Type, lower-cased, without parameters."""
        raw = self.headers.get("Content-Type", "")
        return raw.split(";", 1)[0].strip().lower()

    @property
    def is_json(self) -> bool:
        media = self.content_type
        return media == JSON_MEDIA_TYPE or media.endswith(JSON_MEDIA_SUFFIX)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return self.headers.get(name)

    def json(self) -> Any:
        """
        Parse the body as JSON (cached).

        Raises:
            BodyParseError: If the body is empty or not valid JSON
        """
        if self._is_parsed:
            return self._parsed

        if not self.body:
            raise BodyParseError("Response body is empty")

        try:
            parsed = json.loads(self.body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            hint = "" if self.is_json else f" (Content-Type: {self.content_type or 'none'})"
            raise BodyParseError(f"Response body is not valid JSON{hint}: {e}") from e

        self._parsed = parsed
        self._is_parsed = True
        return parsed

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "status_code": self.status_code,
            "url": self.url,
            "reason": self.reason,
            "elapsed_ms": self.elapsed_ms,
            "headers": {k: v for k, v in self.headers.items()},
            "body": self.text[:500],
        }
