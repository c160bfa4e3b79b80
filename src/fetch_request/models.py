"""Data models for the fetch-request layer."""

import asyncio
from enum import Enum
from typing import Annotated, Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from fetch_request.constants import (
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_STATUS_CODE_MAX,
    DEFAULT_STATUS_CODE_MIN,
)
from fetch_request.errors import (
    RESPONSE_ERROR_KINDS,
    FetchRequestError,
    RequestAbortedError,
)


RequestMode = Literal["cors", "no-cors", "same-origin", "navigate"]
RequestCache = Literal[
    "default", "no-store", "reload", "no-cache", "force-cache", "only-if-cached"
]
RequestCredentials = Literal["omit", "same-origin", "include"]
RequestPriority = Literal["high", "low", "auto"]
RequestRedirect = Literal["follow", "error", "manual"]
ReferrerPolicy = Literal[
    "",
    "no-referrer",
    "no-referrer-when-downgrade",
    "origin",
    "origin-when-cross-origin",
    "same-origin",
    "strict-origin",
    "strict-origin-when-cross-origin",
    "unsafe-url",
]


class ResponseDataType(str, Enum):
    """Shape the response body is materialized into.

    - ARRAY_BUFFER: Raw bytes
    - BLOB: Bytes plus their media type
    - FORM_DATA: Ordered (name, value) pairs from a form body
    - JSON: Parsed JSON document
    - TEXT: Decoded text
    """

    ARRAY_BUFFER = "arrayBuffer"
    BLOB = "blob"
    FORM_DATA = "formData"
    JSON = "json"
    TEXT = "text"


class StatusCodeRange(BaseModel):
    """Inclusive range of acceptable response status codes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min: Annotated[int, Field(ge=0)] = DEFAULT_STATUS_CODE_MIN
    max: Annotated[int, Field(ge=0)] = DEFAULT_STATUS_CODE_MAX

    @model_validator(mode="after")
    def validate_bounds(self) -> "StatusCodeRange":
        """Ensure the range is not empty."""
        if self.min > self.max:
            msg = f"Status code range min ({self.min}) exceeds max ({self.max})"
            raise ValueError(msg)
        return self

    def contains(self, status_code: int) -> bool:
        """Check if a status code falls within the range.

        Args:
            status_code: The status code to check.

        Returns:
            True if min <= status_code <= max.
        """
        return self.min <= status_code <= self.max


class RequestOptions(BaseModel):
    """Partial overrides applied when building a request.

    Unset fields fall back to the fetch defaults. Headers and body are
    kept as supplied; the request builder normalizes them.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", arbitrary_types_allowed=True
    )

    method: Annotated[str, Field(min_length=1)] = "GET"
    mode: RequestMode = "cors"
    cache: RequestCache = "default"
    credentials: RequestCredentials = "same-origin"
    headers: Any = None
    priority: RequestPriority = "auto"
    redirect: RequestRedirect = "follow"
    referrer: str = "about:client"
    referrer_policy: ReferrerPolicy = "no-referrer-when-downgrade"
    integrity: str = ""
    keepalive: bool = False
    body: Any = None
    signal: asyncio.Event | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_unset_values(cls, data: Any) -> Any:
        """Treat explicit None values as unset."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class SendOptions(BaseModel):
    """Options controlling a single send call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    request_options: RequestOptions = Field(default_factory=RequestOptions)
    response_data_type: ResponseDataType | str = ResponseDataType.JSON
    acceptable_status_codes: list[int] | None = None
    acceptable_status_codes_range: StatusCodeRange = Field(
        default_factory=StatusCodeRange
    )
    skip_status_code_validation: bool = False

    @model_validator(mode="before")
    @classmethod
    def drop_unset_values(cls, data: Any) -> Any:
        """Treat explicit None values as unset, except for the allow-list."""
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if value is not None or key == "acceptable_status_codes"
            }
        return data


class RetryPolicy(BaseModel):
    """Configuration for GET retry behavior.

    Retries use a fixed delay between attempts.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    attempts: Annotated[int, Field(ge=0)] = DEFAULT_RETRY_ATTEMPTS
    delay_seconds: Annotated[float, Field(ge=0.0)] = DEFAULT_RETRY_DELAY_SECONDS

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Determine if a failed attempt should be retried.

        Request-construction errors, unsupported data types, redirects
        refused by redirect="error" and cancellation are deterministic and
        never retried.

        Args:
            error: The error raised by the attempt.
            attempt: Current attempt number (0-indexed).

        Returns:
            True if the request should be retried.
        """
        if attempt >= self.attempts:
            return False

        if isinstance(error, (RequestAbortedError, httpx.TooManyRedirects, ValidationError)):
            return False

        if isinstance(error, FetchRequestError):
            return error.kind in RESPONSE_ERROR_KINDS

        # Transport failures and undecodable bodies
        return isinstance(error, (httpx.HTTPError, ValueError))


class RequestDescriptor(BaseModel):
    """Fully resolved representation of an outbound HTTP exchange."""

    model_config = ConfigDict(
        frozen=True, extra="forbid", arbitrary_types_allowed=True
    )

    url: httpx.URL
    method: str
    headers: httpx.Headers
    body: bytes | str | None = None
    mode: RequestMode = "cors"
    cache: RequestCache = "default"
    credentials: RequestCredentials = "same-origin"
    priority: RequestPriority = "auto"
    redirect: RequestRedirect = "follow"
    referrer: str = "about:client"
    referrer_policy: ReferrerPolicy = "no-referrer-when-downgrade"
    integrity: str = ""
    keepalive: bool = False
    signal: asyncio.Event | None = None

    @property
    def content(self) -> bytes | None:
        """Get the body encoded as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body


class Blob(BaseModel):
    """Binary payload together with its media type."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    content: bytes = b""
    content_type: str = ""

    @property
    def size(self) -> int:
        """Get the size of the payload in bytes."""
        return len(self.content)

    def text(self, encoding: str = "utf-8") -> str:
        """Decode the payload as text."""
        return self.content.decode(encoding)


class ResponseEnvelope(BaseModel):
    """Normalized result returned to the caller after validation and extraction."""

    model_config = ConfigDict(
        frozen=True, extra="forbid", arbitrary_types_allowed=True
    )

    code: int = Field(ge=0, description="HTTP status code")
    status_text: str = Field(default="", description="HTTP reason phrase")
    headers: httpx.Headers = Field(
        default_factory=httpx.Headers, description="Response headers"
    )
    data: Any = Field(default=None, description="Extracted response body")
