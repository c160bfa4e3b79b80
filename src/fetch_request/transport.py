"""Transport adapter: performs the exchange for a RequestDescriptor over httpx."""

import asyncio
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import TypeVar

import httpx
import structlog

from fetch_request.constants import CREDENTIAL_HEADERS, NO_REFERRER_VALUES
from fetch_request.errors import RequestAbortedError
from fetch_request.models import RequestDescriptor
from fetch_request.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()

T = TypeVar("T")

# Cache modes mapped to the request directives they imply
_CACHE_DIRECTIVES: dict[str, dict[str, str]] = {
    "no-store": {"Cache-Control": "no-store"},
    "reload": {"Cache-Control": "no-cache", "Pragma": "no-cache"},
    "no-cache": {"Cache-Control": "no-cache", "Pragma": "no-cache"},
    "only-if-cached": {"Cache-Control": "only-if-cached"},
}


def build_transport_headers(request: RequestDescriptor) -> httpx.Headers:
    """Apply the descriptor's policy flags to its headers.

    Caller-supplied headers always win over the ones implied by a policy.

    Args:
        request: The request descriptor.

    Returns:
        Headers to send on the wire.
    """
    headers = httpx.Headers(request.headers)

    for name, value in _CACHE_DIRECTIVES.get(request.cache, {}).items():
        if name not in headers:
            headers[name] = value

    if request.credentials == "omit":
        for name in CREDENTIAL_HEADERS:
            if name in headers:
                del headers[name]

    if (
        request.referrer not in NO_REFERRER_VALUES
        and request.referrer_policy != "no-referrer"
        and "Referer" not in headers
    ):
        headers["Referer"] = request.referrer

    return headers


def to_httpx_request(request: RequestDescriptor) -> httpx.Request:
    """Convert a descriptor into an httpx.Request.

    Args:
        request: The request descriptor.

    Returns:
        httpx.Request ready to be sent.
    """
    return httpx.Request(
        method=request.method,
        url=request.url,
        headers=build_transport_headers(request),
        content=request.content,
    )


async def run_cancellable(
    awaitable: Awaitable[T],
    signal: asyncio.Event | None,
    url: str,
) -> T:
    """Await a coroutine unless the cancellation signal fires first.

    Args:
        awaitable: The work to run.
        signal: Caller-supplied cancellation signal, or None.
        url: URL reported if the work is aborted.

    Returns:
        Result of the awaited work.

    Raises:
        RequestAbortedError: If the signal is set before the work completes.
    """
    if signal is None:
        return await awaitable

    if signal.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise RequestAbortedError(url)

    work = asyncio.ensure_future(awaitable)
    aborted = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({work, aborted}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        raise
    finally:
        aborted.cancel()

    if not work.done():
        work.cancel()
        try:
            await work
        except asyncio.CancelledError:
            pass
        raise RequestAbortedError(url)

    return work.result()


@asynccontextmanager
async def open_exchange(
    request: RequestDescriptor,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[httpx.Response]:
    """Send the request and yield the response before its body is read.

    A short-lived client is opened per exchange; connection handling stays
    inside httpx. The response is closed when the context exits, so the
    body must be read with read_body() inside the block.

    Args:
        request: The request descriptor.
        transport: Optional httpx transport, e.g. httpx.MockTransport in tests.

    Yields:
        The streaming response with status and headers available.

    Raises:
        RequestAbortedError: If the request's signal fires.
        httpx.TooManyRedirects: If a redirect arrives while redirect="error".
        httpx.HTTPError: On any transport failure.
    """
    url = redact_url_credentials(str(request.url))
    http_request = to_httpx_request(request)
    log = logger.bind(component="fetch", method=request.method, url=url)

    async with httpx.AsyncClient(
        transport=transport,
        timeout=None,
        follow_redirects=request.redirect == "follow",
    ) as client:
        log.debug("request_sent", headers=redact_headers(dict(http_request.headers)))
        try:
            response = await run_cancellable(
                client.send(http_request, stream=True), request.signal, url
            )
        except httpx.HTTPError as e:
            log.debug("request_failed", error_type=type(e).__name__, error=str(e))
            raise

        try:
            if request.redirect == "error" and response.is_redirect:
                msg = f"Redirect response received from '{url}' while redirect policy is 'error'."
                raise httpx.TooManyRedirects(msg, request=http_request)

            log.debug("response_received", status_code=response.status_code)
            yield response
        finally:
            await response.aclose()


async def read_body(request: RequestDescriptor, response: httpx.Response) -> bytes:
    """Read a streaming response body, honoring the request's signal.

    Args:
        request: The request that was sent.
        response: Response yielded by open_exchange().

    Returns:
        The full response body.

    Raises:
        RequestAbortedError: If the request's signal fires while reading.
        httpx.HTTPError: If the connection fails mid-body.
    """
    url = redact_url_credentials(str(request.url))
    try:
        return await run_cancellable(response.aread(), request.signal, url)
    except httpx.HTTPError as e:
        logger.debug(
            "request_failed",
            component="fetch",
            method=request.method,
            url=url,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise
