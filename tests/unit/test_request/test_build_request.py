"""Unit tests for the request builder."""

import asyncio
import json

import httpx
import pytest

from fetch_request.errors import ErrorKind, FetchRequestError
from fetch_request.models import RequestOptions
from fetch_request.request import build_request


URL = "https://www.example.com/favicon.ico"


class TestBuildRequestDefaults:
    """Tests for the defaults applied when no options are given."""

    def test_default_descriptor(self) -> None:
        """Test building a GET request with every default."""
        request = build_request(URL)

        assert str(request.url) == URL
        assert request.method == "GET"
        assert request.mode == "cors"
        assert request.cache == "default"
        assert request.credentials == "same-origin"
        assert request.priority == "auto"
        assert request.redirect == "follow"
        assert request.referrer == "about:client"
        assert request.referrer_policy == "no-referrer-when-downgrade"
        assert request.integrity == ""
        assert request.keepalive is False
        assert request.signal is None
        assert request.body is None

    def test_get_only_defaults_accept(self) -> None:
        """Test that GET requests get Accept but no Content-Type by default."""
        request = build_request(URL)

        assert request.headers["Accept"] == "application/json"
        assert "Content-Type" not in request.headers

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_non_get_defaults_content_type(self, method: str) -> None:
        """Test that non-GET requests also default Content-Type."""
        request = build_request(URL, {"method": method})

        assert request.headers["Accept"] == "application/json"
        assert request.headers["Content-Type"] == "application/json"

    def test_accepts_parsed_url(self) -> None:
        """Test that an httpx.URL is used as-is."""
        url = httpx.URL(URL)

        request = build_request(url)

        assert request.url == url


class TestBuildRequestOptions:
    """Tests for caller-supplied options."""

    def test_custom_options(self) -> None:
        """Test that every policy flag is carried onto the descriptor."""
        signal = asyncio.Event()
        request = build_request(
            URL,
            {
                "method": "POST",
                "mode": "same-origin",
                "cache": "force-cache",
                "credentials": "omit",
                "redirect": "error",
                "referrer": "",
                "referrer_policy": "strict-origin-when-cross-origin",
                "integrity": "sha256-BpfBw7ivV8q2jLiT13fxDYAe2tJllusRSZ273h2nFSE=",
                "keepalive": True,
                "signal": signal,
                "body": {"some": "coolData"},
            },
        )

        assert request.method == "POST"
        assert request.mode == "same-origin"
        assert request.cache == "force-cache"
        assert request.credentials == "omit"
        assert request.redirect == "error"
        assert request.referrer == ""
        assert request.referrer_policy == "strict-origin-when-cross-origin"
        assert request.integrity.startswith("sha256-")
        assert request.keepalive is True
        assert request.signal is signal
        assert json.loads(request.body) == {"some": "coolData"}

    def test_accepts_request_options_model(self) -> None:
        """Test that a RequestOptions instance is used directly."""
        request = build_request(URL, RequestOptions(method="PUT", body=[1, 2, 3]))

        assert request.method == "PUT"
        assert json.loads(request.body) == [1, 2, 3]

    def test_none_values_fall_back_to_defaults(self) -> None:
        """Test that explicit None values behave like unset ones."""
        request = build_request(URL, {"cache": None, "method": None})

        assert request.cache == "default"
        assert request.method == "GET"

    def test_standard_methods_are_upper_cased(self) -> None:
        """Test case-insensitive normalization of standard methods."""
        assert build_request(URL, {"method": "post"}).method == "POST"
        assert build_request(URL, {"method": "delete"}).method == "DELETE"

    def test_custom_method_kept_verbatim(self) -> None:
        """Test that non-standard methods are not normalized."""
        assert build_request(URL, {"method": "patch"}).method == "patch"
        assert build_request(URL, {"method": "PROPFIND"}).method == "PROPFIND"


class TestBuildRequestHeaders:
    """Tests for header normalization and defaulting."""

    def test_custom_headers_are_kept(self) -> None:
        """Test that caller headers override the defaults."""
        request = build_request(
            URL,
            {
                "headers": {
                    "Accept": "text/html",
                    "Content-Type": "text/html",
                    "Authorization": "bearer 123456",
                }
            },
        )

        assert request.headers["Accept"] == "text/html"
        assert request.headers["Content-Type"] == "text/html"
        assert request.headers["Authorization"] == "bearer 123456"

    def test_defaults_added_next_to_custom_headers(self) -> None:
        """Test that missing defaults are appended to caller headers."""
        request = build_request(
            URL,
            {"method": "POST", "headers": {"Authorization": "bearer 123456"}},
        )

        assert request.headers["Authorization"] == "bearer 123456"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["Content-Type"] == "application/json"

    def test_headers_are_case_insensitive(self) -> None:
        """Test that lowercase names count as present."""
        request = build_request(
            URL,
            {"method": "POST", "headers": {"accept": "text/html", "content-type": "text/plain"}},
        )

        assert request.headers.get_list("Accept") == ["text/html"]
        assert request.headers.get_list("Content-Type") == ["text/plain"]

    def test_accepts_httpx_headers(self) -> None:
        """Test that httpx.Headers are accepted."""
        headers = httpx.Headers({"X-Trace": "abc"})

        request = build_request(URL, {"headers": headers})

        assert request.headers["x-trace"] == "abc"
        assert request.headers["Accept"] == "application/json"

    def test_accepts_pairs(self) -> None:
        """Test that a sequence of (name, value) pairs is accepted."""
        request = build_request(URL, {"headers": [("X-One", "1"), ("X-Two", "2")]})

        assert request.headers["X-One"] == "1"
        assert request.headers["X-Two"] == "2"

    @pytest.mark.parametrize(
        "headers",
        [
            "Accept: text/html",
            42,
            [("X-One", "1", "extra")],
            [["only-name"]],
            {"Bad Name": "value"},
            {"X-Injected": "value\r\nEvil: 1"},
        ],
    )
    def test_invalid_headers(self, headers: object) -> None:
        """Test that malformed header collections are rejected."""
        with pytest.raises(FetchRequestError) as exc_info:
            build_request(URL, {"headers": headers})

        assert exc_info.value.kind == ErrorKind.INVALID_REQUEST_HEADERS


class TestBuildRequestBody:
    """Tests for body resolution."""

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_structured_body_round_trips(self, method: str) -> None:
        """Test that structured bodies serialize to JSON text."""
        data = {"hello": "World!", "foo": 123, "baz": False, "items": [1, 2]}

        request = build_request(URL, {"method": method, "body": data})

        assert json.loads(request.content) == data

    def test_string_body_passes_through(self) -> None:
        """Test that text bodies are not re-encoded."""
        data = json.dumps({"hello": "World!"})

        request = build_request(URL, {"method": "POST", "body": data})

        assert request.body == data

    def test_bytes_body_passes_through(self) -> None:
        """Test that binary bodies are not re-encoded."""
        request = build_request(URL, {"method": "POST", "body": b"\x00\x01"})

        assert request.body == b"\x00\x01"

    def test_absent_body_is_none(self) -> None:
        """Test that a non-GET request without body has None."""
        assert build_request(URL, {"method": "POST"}).body is None

    @pytest.mark.parametrize("body", [{"foo": "bar"}, "raw text", b"bytes"])
    def test_get_body_is_always_none(self, body: object) -> None:
        """Test that GET silently drops any supplied body."""
        request = build_request(URL, {"method": "GET", "body": body})

        assert request.body is None


class TestBuildRequestErrors:
    """Tests for request construction failures."""

    @pytest.mark.parametrize(
        "url",
        ["not a url", "/relative/path", "www.example.com", "https://example.com:notaport/"],
    )
    def test_invalid_url(self, url: str) -> None:
        """Test that non-absolute or unparseable URLs are rejected."""
        with pytest.raises(FetchRequestError) as exc_info:
            build_request(url)

        assert exc_info.value.kind == ErrorKind.INVALID_REQUEST_URL

    def test_invalid_url_type(self) -> None:
        """Test that non-string inputs are rejected as URL errors."""
        with pytest.raises(FetchRequestError) as exc_info:
            build_request(12345)  # type: ignore[arg-type]

        assert exc_info.value.kind == ErrorKind.INVALID_REQUEST_URL

    @pytest.mark.parametrize(
        "options",
        [
            {"cache": "sometimes"},
            {"redirect": "bounce"},
            {"unknown_option": True},
            {"method": "BAD METHOD"},
            {"method": "CONNECT"},
            {"method": "trace"},
            {"method": "HEAD", "body": {"a": 1}},
            {"method": "POST", "body": {1, 2, 3}},
        ],
    )
    def test_invalid_options(self, options: dict[str, object]) -> None:
        """Test that rejected option combinations are tagged as options errors."""
        with pytest.raises(FetchRequestError) as exc_info:
            build_request(URL, options)

        assert exc_info.value.kind == ErrorKind.INVALID_REQUEST_OPTIONS

    def test_url_error_is_not_rewrapped(self) -> None:
        """Test that URL errors pass through even with invalid options."""
        with pytest.raises(FetchRequestError) as exc_info:
            build_request("nope", {"cache": "sometimes"})

        assert exc_info.value.kind == ErrorKind.INVALID_REQUEST_URL

    def test_header_error_is_not_rewrapped(self) -> None:
        """Test that header errors keep their kind."""
        with pytest.raises(FetchRequestError) as exc_info:
            build_request(URL, {"method": "POST", "headers": 42})

        assert exc_info.value.kind == ErrorKind.INVALID_REQUEST_HEADERS
