"""Async convenience layer over httpx.

This package provides:
- Request construction with Accept/Content-Type defaults and body serialization
- Response validation of status codes and Content-Type agreement
- Response body extraction into bytes, blobs, form data, JSON or text
- Fixed-delay retries for GET requests
"""

from fetch_request.client import (
    build_options,
    send,
    send_delete,
    send_get,
    send_patch,
    send_post,
    send_put,
)
from fetch_request.errors import (
    ContentTypeMismatchError,
    ErrorKind,
    FetchRequestError,
    RequestAbortedError,
    UnexpectedStatusCodeError,
)
from fetch_request.extract import extract_response_data
from fetch_request.models import (
    Blob,
    RequestDescriptor,
    RequestOptions,
    ResponseDataType,
    ResponseEnvelope,
    RetryPolicy,
    SendOptions,
    StatusCodeRange,
)
from fetch_request.observability import configure_logging
from fetch_request.request import build_request
from fetch_request.validation import validate_response


__all__ = [
    # Client
    "send",
    "send_get",
    "send_post",
    "send_put",
    "send_patch",
    "send_delete",
    "build_options",
    # Building blocks
    "build_request",
    "extract_response_data",
    "validate_response",
    # Models
    "Blob",
    "RequestDescriptor",
    "RequestOptions",
    "ResponseDataType",
    "ResponseEnvelope",
    "RetryPolicy",
    "SendOptions",
    "StatusCodeRange",
    # Errors
    "ErrorKind",
    "FetchRequestError",
    "UnexpectedStatusCodeError",
    "ContentTypeMismatchError",
    "RequestAbortedError",
    # Logging
    "configure_logging",
]
