"""Response data extraction into the shape selected by a ResponseDataType."""

from email import policy
from email.parser import BytesParser
from typing import Any
from urllib.parse import parse_qsl

import httpx

from fetch_request.constants import HEADER_CONTENT_TYPE
from fetch_request.errors import ErrorKind, FetchRequestError
from fetch_request.models import Blob, ResponseDataType


FormData = list[tuple[str, str | Blob]]

_FORM_URLENCODED = "application/x-www-form-urlencoded"
_FORM_MULTIPART = "multipart/form-data"


def resolve_data_type(data_type: ResponseDataType | str) -> ResponseDataType:
    """Resolve a caller-supplied tag into a ResponseDataType.

    Args:
        data_type: Enum member or its string value.

    Returns:
        The matching ResponseDataType.

    Raises:
        FetchRequestError: INVALID_RESPONSE_DTYPE if the tag is unsupported.
    """
    try:
        return ResponseDataType(data_type)
    except ValueError as e:
        raise FetchRequestError(
            ErrorKind.INVALID_RESPONSE_DTYPE,
            f"The provided response data type '{data_type}' is invalid.",
            details={"data_type": str(data_type)},
        ) from e


def _parse_multipart(content_type: str, body: bytes) -> FormData:
    """Parse a multipart/form-data body into (name, value) pairs."""
    raw = f"{HEADER_CONTENT_TYPE}: {content_type}\r\n\r\n".encode("latin-1") + body
    message = BytesParser(policy=policy.HTTP).parsebytes(raw)
    if not message.is_multipart():
        msg = "Response body is not a valid multipart/form-data payload."
        raise ValueError(msg)

    entries: FormData = []
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name:
            continue
        payload = part.get_payload(decode=True) or b""
        if part.get_filename() is not None:
            entries.append(
                (str(name), Blob(content=payload, content_type=part.get_content_type()))
            )
        else:
            entries.append((str(name), payload.decode(part.get_content_charset() or "utf-8")))
    return entries


def parse_form_data(response: httpx.Response) -> FormData:
    """Parse a form response body.

    Args:
        response: Response whose body was already read.

    Returns:
        Ordered (name, value) pairs; file parts are returned as Blobs.

    Raises:
        ValueError: If the body is not a form payload.
    """
    content_type = response.headers.get(HEADER_CONTENT_TYPE, "")
    media_type = content_type.split(";", 1)[0].strip().lower()

    if media_type == _FORM_URLENCODED:
        return list(parse_qsl(response.text, keep_blank_values=True))
    if media_type == _FORM_MULTIPART:
        return _parse_multipart(content_type, response.content)

    msg = f"Could not parse content as FormData (Content-Type: '{content_type}')."
    raise ValueError(msg)


async def extract_response_data(
    response: httpx.Response,
    data_type: ResponseDataType | str,
) -> Any:
    """Extract the response body in the requested shape.

    The tag is checked before the body is touched.

    Args:
        response: The HTTP response.
        data_type: Shape to materialize the body into.

    Returns:
        bytes, Blob, FormData, parsed JSON or text.

    Raises:
        FetchRequestError: INVALID_RESPONSE_DTYPE if the tag is unsupported.
        ValueError: If the body cannot be decoded into the requested shape.
    """
    resolved = resolve_data_type(data_type)
    body = await response.aread()

    if resolved is ResponseDataType.ARRAY_BUFFER:
        return body
    if resolved is ResponseDataType.BLOB:
        return Blob(content=body, content_type=response.headers.get(HEADER_CONTENT_TYPE, ""))
    if resolved is ResponseDataType.FORM_DATA:
        return parse_form_data(response)
    if resolved is ResponseDataType.JSON:
        return response.json()
    return response.text
