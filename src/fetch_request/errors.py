"""Error types for the fetch-request layer."""

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable classification of fetch-request errors.

    - INVALID_REQUEST_URL: Input cannot be parsed as an absolute URL
    - INVALID_REQUEST_HEADERS: Supplied headers cannot be normalized
    - INVALID_REQUEST_OPTIONS: Options rejected at request construction
    - INVALID_RESPONSE_CONTENT_TYPE: Response lacks a Content-Type header
    - CONTENT_TYPE_MISSMATCH: Response Content-Type doesn't match Accept
    - UNEXPECTED_RESPONSE_STATUS_CODE: Status outside the allow-list/range
    - INVALID_RESPONSE_DTYPE: Unsupported response data type requested
    """

    INVALID_REQUEST_URL = "INVALID_REQUEST_URL"
    INVALID_REQUEST_HEADERS = "INVALID_REQUEST_HEADERS"
    INVALID_REQUEST_OPTIONS = "INVALID_REQUEST_OPTIONS"
    INVALID_RESPONSE_CONTENT_TYPE = "INVALID_RESPONSE_CONTENT_TYPE"
    CONTENT_TYPE_MISSMATCH = "CONTENT_TYPE_MISSMATCH"
    UNEXPECTED_RESPONSE_STATUS_CODE = "UNEXPECTED_RESPONSE_STATUS_CODE"
    INVALID_RESPONSE_DTYPE = "INVALID_RESPONSE_DTYPE"


# Kinds raised by response validation
RESPONSE_ERROR_KINDS = frozenset(
    {
        ErrorKind.INVALID_RESPONSE_CONTENT_TYPE,
        ErrorKind.CONTENT_TYPE_MISSMATCH,
        ErrorKind.UNEXPECTED_RESPONSE_STATUS_CODE,
    }
)


class FetchRequestError(Exception):
    """Base exception for fetch-request errors.

    Carries a machine-readable kind so callers can branch on it instead of
    matching on the message.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, str | int | None] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            kind: Classification of the error.
            message: Human-readable error message.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def to_dict(self) -> dict[str, str | dict[str, str | int | None]]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


class UnexpectedStatusCodeError(FetchRequestError):
    """Raised when the response status code is not acceptable."""

    def __init__(self, status_code: int, status_text: str) -> None:
        """Initialize the error.

        Args:
            status_code: Status code received.
            status_text: Reason phrase received.
        """
        super().__init__(
            kind=ErrorKind.UNEXPECTED_RESPONSE_STATUS_CODE,
            message=(
                "Request Failed: received unexpected response code "
                f"'{status_code}': {status_text}"
            ),
            details={"status_code": status_code, "status_text": status_text},
        )
        self.status_code = status_code
        self.status_text = status_text


class ContentTypeMismatchError(FetchRequestError):
    """Raised when the response Content-Type doesn't contain the request Accept."""

    def __init__(self, accept: str, content_type: str) -> None:
        """Initialize the error.

        Args:
            accept: Accept header sent with the request.
            content_type: Content-Type header received in the response.
        """
        super().__init__(
            kind=ErrorKind.CONTENT_TYPE_MISSMATCH,
            message=(
                f"The request's Accept Header '{accept}' is different to the "
                f"Content-Type received in the response '{content_type}'."
            ),
            details={"accept": accept, "content_type": content_type},
        )
        self.accept = accept
        self.content_type = content_type


class RequestAbortedError(Exception):
    """Raised when the caller's cancellation signal fires.

    Not a tagged kind: the layer never originates cancellation itself.
    """

    def __init__(self, url: str) -> None:
        """Initialize the error.

        Args:
            url: URL of the aborted request.
        """
        self.url = url
        super().__init__(f"Request aborted: {url}")
