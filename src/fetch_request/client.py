"""Request orchestration: build, send, validate and extract in one call.

Every entry point is a stateless coroutine; the transport and the retry
delay primitive are injected per call.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from fetch_request.errors import ErrorKind, FetchRequestError
from fetch_request.extract import extract_response_data, resolve_data_type
from fetch_request.models import ResponseEnvelope, RetryPolicy, SendOptions
from fetch_request.redact import redact_url_credentials
from fetch_request.request import RequestInput, build_request
from fetch_request.settings import get_settings
from fetch_request.transport import open_exchange, read_body, run_cancellable
from fetch_request.validation import validate_response


logger = structlog.get_logger()

Sleep = Callable[[float], Awaitable[None]]
OptionsInput = SendOptions | Mapping[str, Any] | None


def build_options(options: OptionsInput = None) -> SendOptions:
    """Build the send options by merging the given partial over the defaults.

    Args:
        options: Partial options as a mapping, or a SendOptions instance.

    Returns:
        Effective SendOptions.

    Raises:
        FetchRequestError: INVALID_REQUEST_OPTIONS if the options are rejected.
    """
    if isinstance(options, SendOptions):
        return options
    try:
        return SendOptions.model_validate(options or {})
    except ValidationError as e:
        raise FetchRequestError(
            ErrorKind.INVALID_REQUEST_OPTIONS,
            f"The provided options are invalid: {e}",
        ) from e


def _with_method(options: OptionsInput, method: str) -> SendOptions:
    """Return the options with the request method fixed, everything else unchanged."""
    built = build_options(options)
    request_options = built.request_options.model_copy(update={"method": method})
    return built.model_copy(update={"request_options": request_options})


async def send(
    request_input: RequestInput,
    options: OptionsInput = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResponseEnvelope:
    """Build and send an HTTP request, then validate and extract the response.

    Args:
        request_input: Absolute URL string or a parsed httpx.URL.
        options: Partial send options.
        transport: Optional httpx transport used for the exchange.

    Returns:
        ResponseEnvelope with the status, headers and extracted data.

    Raises:
        FetchRequestError: INVALID_REQUEST_URL, INVALID_REQUEST_HEADERS or
            INVALID_REQUEST_OPTIONS if the request cannot be built;
            UNEXPECTED_RESPONSE_STATUS_CODE, INVALID_RESPONSE_CONTENT_TYPE or
            CONTENT_TYPE_MISSMATCH if the response is rejected;
            INVALID_RESPONSE_DTYPE if the data type is unsupported.
        RequestAbortedError: If the request's signal fires.
        httpx.HTTPError: On transport failures.
    """
    opts = build_options(options)
    request = build_request(request_input, opts.request_options)

    async with open_exchange(request, transport=transport) as response:
        validate_response(request, response, opts)
        data_type = resolve_data_type(opts.response_data_type)
        await read_body(request, response)

    if response.history:
        logger.warning(
            "request_redirected",
            component="fetch",
            url=redact_url_credentials(str(request.url)),
            final_url=redact_url_credentials(str(response.url)),
            hint="Update the request URL to avoid future redirections.",
        )

    return ResponseEnvelope(
        code=response.status_code,
        status_text=response.reason_phrase,
        headers=response.headers,
        data=await extract_response_data(response, data_type),
    )


async def send_get(
    request_input: RequestInput,
    options: OptionsInput = None,
    retry_attempts: int = 0,
    retry_delay_seconds: float | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    sleep: Sleep = asyncio.sleep,
) -> ResponseEnvelope:
    """Send a GET request, retrying failed attempts after a fixed delay.

    Every attempt builds a fresh request. Once the attempts are exhausted
    the last error propagates unchanged.

    Args:
        request_input: Absolute URL string or a parsed httpx.URL.
        options: Partial send options; the method is forced to GET.
        retry_attempts: Extra attempts after the first one fails.
        retry_delay_seconds: Delay between attempts. Defaults to
            FETCH_REQUEST_RETRY_DELAY_SECONDS (3 seconds).
        transport: Optional httpx transport used for the exchange.
        sleep: Delay primitive, replaceable by a virtual clock in tests.

    Returns:
        ResponseEnvelope of the first successful attempt.
    """
    if retry_delay_seconds is None:
        retry_delay_seconds = get_settings().retry_delay_seconds
    try:
        policy = RetryPolicy(attempts=retry_attempts, delay_seconds=retry_delay_seconds)
    except ValidationError as e:
        raise FetchRequestError(
            ErrorKind.INVALID_REQUEST_OPTIONS,
            f"The provided retry settings are invalid: {e}",
        ) from e

    opts = _with_method(options, "GET")
    signal = opts.request_options.signal
    log = logger.bind(
        component="fetch",
        url=redact_url_credentials(str(request_input)),
        max_retries=policy.attempts,
    )

    attempt = 0
    while True:
        try:
            return await send(request_input, opts, transport=transport)
        except Exception as e:
            if not policy.should_retry(e, attempt):
                raise
            attempt += 1
            log.info(
                "retry_attempt",
                attempt=attempt,
                delay_seconds=policy.delay_seconds,
                error=str(e),
            )
            await run_cancellable(
                sleep(policy.delay_seconds), signal, str(request_input)
            )


async def send_post(
    request_input: RequestInput,
    options: OptionsInput = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResponseEnvelope:
    """Build and send a POST request. See send() for errors."""
    return await send(request_input, _with_method(options, "POST"), transport=transport)


async def send_put(
    request_input: RequestInput,
    options: OptionsInput = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResponseEnvelope:
    """Build and send a PUT request. See send() for errors."""
    return await send(request_input, _with_method(options, "PUT"), transport=transport)


async def send_patch(
    request_input: RequestInput,
    options: OptionsInput = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResponseEnvelope:
    """Build and send a PATCH request. See send() for errors."""
    return await send(request_input, _with_method(options, "PATCH"), transport=transport)


async def send_delete(
    request_input: RequestInput,
    options: OptionsInput = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResponseEnvelope:
    """Build and send a DELETE request. See send() for errors."""
    return await send(request_input, _with_method(options, "DELETE"), transport=transport)
