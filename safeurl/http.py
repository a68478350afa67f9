"""Guarded httpx helpers.

Every helper sends through a ``SafeURLTransport``: the destination, and every
redirect target when ``follow_redirects=True``, is validated before any
network I/O, and ``UnsafeURLError`` is raised when a URL is rejected.

    >>> from safeurl import http
    >>> http.get("https://10.0.0.1/ssrf.txt")
    Traceback (most recent call last):
    ...
    safeurl.exceptions.UnsafeURLError: Request blocked: unsafe_reserved (URL: https://10.0.0.1/ssrf.txt)

Long-lived clients can mount the transport themselves:

    client = httpx.Client(transport=SafeURLTransport(), follow_redirects=True)
"""

import asyncio
import logging
from typing import Any

import httpx

from safeurl.exceptions import UnsafeURLError
from safeurl.validator import ValidationResult, Validator

logger = logging.getLogger(__name__)

_default_validator = Validator()

# httpx.request() arguments that configure the connection rather than the request
_TRANSPORT_KWARGS = ("verify", "cert", "trust_env", "proxy")


def _check(validator: Validator, url: str, options: dict[str, Any]) -> ValidationResult:
    result = validator.validate(url, **options)
    if not result.ok:
        logger.info(f"Blocked outbound request to {url}: {result.reason.value}")
        raise UnsafeURLError(result.reason, url)
    return result


def request(
    method: str,
    url: str,
    *,
    validator: Validator | None = None,
    safeurl_options: dict[str, Any] | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """Perform a one-off request, validating the URL before it is sent.

    Mirrors ``httpx.request``. The request goes through a ``SafeURLTransport``,
    so with ``follow_redirects=True`` every redirect target is validated too.
    """
    transport_kwargs = {k: kwargs.pop(k) for k in _TRANSPORT_KWARGS if k in kwargs}
    transport = SafeURLTransport(
        validator,
        httpx.HTTPTransport(**transport_kwargs),
        **(safeurl_options or {}),
    )
    with httpx.Client(transport=transport) as client:
        return client.request(method, url, **kwargs)


def get(url: str, **kwargs: Any) -> httpx.Response:
    return request("GET", url, **kwargs)


def post(url: str, **kwargs: Any) -> httpx.Response:
    return request("POST", url, **kwargs)


def put(url: str, **kwargs: Any) -> httpx.Response:
    return request("PUT", url, **kwargs)


def patch(url: str, **kwargs: Any) -> httpx.Response:
    return request("PATCH", url, **kwargs)


def delete(url: str, **kwargs: Any) -> httpx.Response:
    return request("DELETE", url, **kwargs)


def head(url: str, **kwargs: Any) -> httpx.Response:
    return request("HEAD", url, **kwargs)


def options(url: str, **kwargs: Any) -> httpx.Response:
    return request("OPTIONS", url, **kwargs)


class SafeURLTransport(httpx.BaseTransport):
    """Transport that validates every request before handing it on."""

    def __init__(
        self,
        validator: Validator | None = None,
        transport: httpx.BaseTransport | None = None,
        **safeurl_options: Any,
    ) -> None:
        self.validator = validator or _default_validator
        self.transport = transport or httpx.HTTPTransport()
        self.safeurl_options = safeurl_options
        # fail fast on bad ranges instead of on the first request
        self.validator.options(**safeurl_options)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        _check(self.validator, str(request.url), self.safeurl_options)
        return self.transport.handle_request(request)

    def close(self) -> None:
        self.transport.close()


class AsyncSafeURLTransport(httpx.AsyncBaseTransport):
    """Async variant of ``SafeURLTransport``.

    Validation (including DNS) runs in a worker thread.
    """

    def __init__(
        self,
        validator: Validator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **safeurl_options: Any,
    ) -> None:
        self.validator = validator or _default_validator
        self.transport = transport or httpx.AsyncHTTPTransport()
        self.safeurl_options = safeurl_options
        self.validator.options(**safeurl_options)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await asyncio.to_thread(
            _check, self.validator, str(request.url), self.safeurl_options
        )
        return await self.transport.handle_async_request(request)

    async def aclose(self) -> None:
        await self.transport.aclose()
