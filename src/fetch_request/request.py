"""Request builder: turns a URL and partial options into a RequestDescriptor."""

import json
import re
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from fetch_request.constants import (
    DEFAULT_MEDIA_TYPE,
    FORBIDDEN_METHODS,
    HEADER_ACCEPT,
    HEADER_CONTENT_TYPE,
    NORMALIZED_METHODS,
)
from fetch_request.errors import ErrorKind, FetchRequestError
from fetch_request.models import RequestDescriptor, RequestOptions


# RFC 9110 token, used for both header names and methods
_TOKEN_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_INVALID_VALUE_CHARS = ("\r", "\n", "\0")

RequestInput = str | httpx.URL


def _build_request_url(request_input: Any) -> httpx.URL:
    """Build the request URL.

    Args:
        request_input: Absolute URL string or a parsed httpx.URL.

    Returns:
        Parsed absolute URL.

    Raises:
        FetchRequestError: INVALID_REQUEST_URL if the input cannot be parsed.
    """
    if isinstance(request_input, httpx.URL):
        url = request_input
    elif isinstance(request_input, str):
        try:
            url = httpx.URL(request_input)
        except httpx.InvalidURL as e:
            raise FetchRequestError(
                ErrorKind.INVALID_REQUEST_URL,
                f"The request URL '{request_input}' could not be parsed: {e}",
            ) from e
    else:
        raise FetchRequestError(
            ErrorKind.INVALID_REQUEST_URL,
            f"The request URL must be a string or an httpx.URL, "
            f"received '{type(request_input).__name__}'.",
        )

    if not url.is_absolute_url or not url.host:
        raise FetchRequestError(
            ErrorKind.INVALID_REQUEST_URL,
            f"The request URL '{request_input}' is not an absolute URL.",
        )
    return url


def _normalize_headers(headers: Any) -> httpx.Headers:
    """Normalize a header collection into httpx.Headers.

    Args:
        headers: Mapping, httpx.Headers or sequence of (name, value) pairs.

    Returns:
        Case-insensitive, ordered headers.

    Raises:
        FetchRequestError: INVALID_REQUEST_HEADERS if the collection is malformed.
    """
    if isinstance(headers, httpx.Headers):
        pairs = list(headers.multi_items())
    elif isinstance(headers, Mapping):
        pairs = list(headers.items())
    elif isinstance(headers, (list, tuple)):
        pairs = []
        for entry in headers:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise FetchRequestError(
                    ErrorKind.INVALID_REQUEST_HEADERS,
                    f"Header entries must be (name, value) pairs, received '{entry!r}'.",
                )
            pairs.append((entry[0], entry[1]))
    else:
        raise FetchRequestError(
            ErrorKind.INVALID_REQUEST_HEADERS,
            f"Headers must be a mapping or a sequence of pairs, "
            f"received '{type(headers).__name__}'.",
        )

    normalized: list[tuple[str, str]] = []
    for name, value in pairs:
        if not isinstance(name, str) or not _TOKEN_PATTERN.match(name):
            raise FetchRequestError(
                ErrorKind.INVALID_REQUEST_HEADERS,
                f"Invalid header name '{name!r}'.",
            )
        if isinstance(value, bytes):
            value = value.decode("latin-1")
        elif not isinstance(value, str):
            value = str(value)
        if any(char in value for char in _INVALID_VALUE_CHARS):
            raise FetchRequestError(
                ErrorKind.INVALID_REQUEST_HEADERS,
                f"Invalid value for header '{name}'.",
            )
        normalized.append((name, value))

    return httpx.Headers(normalized)


def _build_request_headers(headers: Any, method: str) -> httpx.Headers:
    """Build the headers for a request, applying the defaults.

    Args:
        headers: Caller-supplied headers, or None.
        method: Normalized request method.

    Returns:
        Headers that always carry Accept, plus Content-Type for non-GET.
    """
    request_headers = httpx.Headers() if headers is None else _normalize_headers(headers)

    if HEADER_ACCEPT not in request_headers:
        request_headers[HEADER_ACCEPT] = DEFAULT_MEDIA_TYPE

    if method != "GET" and HEADER_CONTENT_TYPE not in request_headers:
        request_headers[HEADER_CONTENT_TYPE] = DEFAULT_MEDIA_TYPE

    return request_headers


def _build_request_body(body: Any) -> bytes | str | None:
    """Build the body of a non-GET request.

    Args:
        body: Caller-supplied body.

    Returns:
        Text or bytes passed through, structured values as JSON text.
    """
    if body is None:
        return None
    if isinstance(body, (str, bytes)):
        return body
    if isinstance(body, bytearray):
        return bytes(body)
    if isinstance(body, BaseModel):
        return body.model_dump_json()
    return json.dumps(body)


def _build_request_method(method: str) -> str:
    """Normalize and validate the request method."""
    if not _TOKEN_PATTERN.match(method):
        msg = f"'{method}' is not a valid HTTP method."
        raise ValueError(msg)

    upper = method.upper()
    if upper in FORBIDDEN_METHODS:
        msg = f"'{method}' HTTP method is unsupported."
        raise ValueError(msg)

    return upper if upper in NORMALIZED_METHODS else method


def build_request(
    request_input: RequestInput,
    request_options: RequestOptions | Mapping[str, Any] | None = None,
) -> RequestDescriptor:
    """Build a RequestDescriptor from the given input and options.

    Args:
        request_input: Absolute URL string or a parsed httpx.URL.
        request_options: Partial request options.

    Returns:
        Fully populated RequestDescriptor.

    Raises:
        FetchRequestError: INVALID_REQUEST_URL if the URL cannot be parsed,
            INVALID_REQUEST_HEADERS if the headers are malformed,
            INVALID_REQUEST_OPTIONS if the options are rejected.
    """
    try:
        url = _build_request_url(request_input)
        if isinstance(request_options, RequestOptions):
            options = request_options
        else:
            options = RequestOptions.model_validate(request_options or {})

        method = _build_request_method(options.method)
        headers = _build_request_headers(options.headers, method)
        body = None if method == "GET" else _build_request_body(options.body)
        if method == "HEAD" and body is not None:
            msg = "Request with HEAD method cannot have a body."
            raise ValueError(msg)

        return RequestDescriptor(
            url=url,
            method=method,
            headers=headers,
            body=body,
            mode=options.mode,
            cache=options.cache,
            credentials=options.credentials,
            priority=options.priority,
            redirect=options.redirect,
            referrer=options.referrer,
            referrer_policy=options.referrer_policy,
            integrity=options.integrity,
            keepalive=options.keepalive,
            signal=options.signal,
        )
    except FetchRequestError:
        raise
    except (ValidationError, TypeError, ValueError) as e:
        raise FetchRequestError(
            ErrorKind.INVALID_REQUEST_OPTIONS,
            f"The request could not be built with the given options: {e}",
        ) from e
