"""Response validation: status code and Content-Type agreement."""

import httpx

from fetch_request.constants import HEADER_ACCEPT, HEADER_CONTENT_TYPE
from fetch_request.errors import (
    ContentTypeMismatchError,
    ErrorKind,
    FetchRequestError,
    UnexpectedStatusCodeError,
)
from fetch_request.models import RequestDescriptor, SendOptions


def validate_status_code(response: httpx.Response, options: SendOptions) -> None:
    """Validate the response status code.

    A non-empty allow-list takes precedence and the range is not checked.

    Args:
        response: The HTTP response.
        options: Effective send options.

    Raises:
        UnexpectedStatusCodeError: If the code is not acceptable.
    """
    if options.skip_status_code_validation:
        return

    status_code = response.status_code
    if options.acceptable_status_codes:
        acceptable = status_code in options.acceptable_status_codes
    else:
        acceptable = options.acceptable_status_codes_range.contains(status_code)

    if not acceptable:
        raise UnexpectedStatusCodeError(status_code, response.reason_phrase)


def validate_content_type(request: RequestDescriptor, response: httpx.Response) -> None:
    """Ensure the response Content-Type contains the request Accept value.

    Matching is a plain substring check, so parameters such as
    "; charset=utf-8" are tolerated.

    Args:
        request: The request that was sent.
        response: The HTTP response.

    Raises:
        FetchRequestError: INVALID_RESPONSE_CONTENT_TYPE if the header is
            missing or empty.
        ContentTypeMismatchError: If the header doesn't contain Accept.
    """
    # requests built by this package always carry Accept
    accept = request.headers.get(HEADER_ACCEPT, "")
    content_type = response.headers.get(HEADER_CONTENT_TYPE)

    if not content_type:
        raise FetchRequestError(
            ErrorKind.INVALID_RESPONSE_CONTENT_TYPE,
            f"The response's Content-Type Header is invalid. Received: '{content_type}'.",
            details={"content_type": content_type},
        )

    if accept not in content_type:
        raise ContentTypeMismatchError(accept, content_type)


def validate_response(
    request: RequestDescriptor,
    response: httpx.Response,
    options: SendOptions,
) -> None:
    """Validate the status code, then the Content-Type header.

    Args:
        request: The request that was sent.
        response: The HTTP response.
        options: Effective send options.

    Raises:
        UnexpectedStatusCodeError: If the code doesn't meet the options.
        FetchRequestError: INVALID_RESPONSE_CONTENT_TYPE if the header is
            missing or empty.
        ContentTypeMismatchError: If the Content-Type doesn't match Accept.
    """
    validate_status_code(response, options)
    validate_content_type(request, response)
