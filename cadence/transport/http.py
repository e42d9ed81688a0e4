"""
HTTP transport built on aiohttp.

This module sends a RequestSpec over HTTP and captures the complete
response (status, headers, body) for later assertions.
"""

from __future__ import annotations

import asyncio
import logging
import time

import aiohttp
from multidict import CIMultiDictProxy

from .models import HTTPResponse, RequestSpec, TransportError, TransportErrorCode

logger = logging.getLogger(__name__)

USER_AGENT = "cadence/0.1.0"


class HTTPTransport:
    """
    Sends requests with a single aiohttp session.

    The session is opened by connect() and closed by disconnect(); the
    transport can also be used as an async context manager. Requests are
    issued one at a time, there is no retry, pooling policy or caching.

    Example:
        async with HTTPTransport() as transport:
            response = await transport.send(RequestSpec(
                url="http://ergast.com/api/f1/{season}/circuits.json",
                path_params={"season": "2017"},
            ))
            print(response.status_code)
    """

    def __init__(self, headers: dict[str, str] | None = None):
        """
        Initialize the transport.

        Args:
            headers: Headers sent with every request (request headers win)
        """
        self._default_headers = {"User-Agent": USER_AGENT}
        if headers:
            self._default_headers.update(headers)
        self._session: aiohttp.ClientSession | None = None

    @property
    def is_connected(self) -> bool:
        return self._session is not None and not self._session.closed

    async def connect(self) -> None:
        """Create the HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()

    async def disconnect(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _build_headers(self, spec: RequestSpec) -> dict[str, str]:
        headers = dict(self._default_headers)
        headers.update(spec.headers)
        return headers

    async def send(self, spec: RequestSpec) -> HTTPResponse:
        """
        Send a request and read the whole response.

        Any HTTP status, including 4xx and 5xx, is returned as a normal
        response.

        Args:
            spec: The request to send

        Returns:
            HTTPResponse with status, headers and raw body

        Raises:
            TransportError: If no response was received
        """
        if not self.is_connected:
            raise TransportError(
                TransportErrorCode.CONNECTION_ERROR,
                "Transport not connected. Call connect() first.",
            )

        unresolved = spec.unresolved_placeholders()
        if unresolved:
            logger.warning(
                f"Sending {spec.url!r} with unresolved placeholders: {', '.join(unresolved)}"
            )
        unused = spec.unused_path_params()
        if unused:
            logger.debug(f"Ignoring unused path params: {', '.join(unused)}")

        url = spec.build_url()
        method = spec.method.upper()
        timeout = aiohttp.ClientTimeout(total=spec.timeout_ms / 1000)
        logger.debug(f"{method} {url}")

        started = time.perf_counter()
        try:
            async with self._session.request(
                method,
                url,
                headers=self._build_headers(spec),
                timeout=timeout,
            ) as resp:
                body = await resp.read()
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.debug(
                    f"Response: HTTP {resp.status} ({len(body)} bytes, {elapsed_ms:.0f}ms)"
                )
                return HTTPResponse(
                    status_code=resp.status,
                    headers=CIMultiDictProxy(resp.headers.copy()),
                    body=body,
                    url=str(resp.url),
                    reason=resp.reason,
                    elapsed_ms=elapsed_ms,
                )

        except asyncio.TimeoutError as e:
            raise TransportError(
                TransportErrorCode.TIMEOUT_ERROR,
                f"Request timed out after {spec.timeout_ms}ms",
                url=url,
            ) from e
        except aiohttp.ClientConnectorError as e:
            raise TransportError(
                TransportErrorCode.CONNECTION_ERROR,
                f"Connection failed: {e}",
                url=url,
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                TransportErrorCode.HTTP_ERROR,
                f"HTTP error: {type(e).__name__}: {e}",
                url=url,
            ) from e

    async def __aenter__(self) -> HTTPTransport:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    def __repr__(self) -> str:
        status = "connected" if self.is_connected else "disconnected"
        return f"HTTPTransport(status={status})"
