"""HTTP client abstraction for the CodePush API and the file-upload service.

This module provides:
- HttpClient: Protocol for HTTP requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from codepush.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    "RecordedRequest",
    "with_query",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        body: Raw response body, if the server sent one
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """A successful (2xx) response."""

    url: str
    status: int
    body: bytes = b""

    def json(self) -> object:
        """Decode the body as JSON; an empty body decodes to None.

        Raises:
            ValueError: If the body is not valid UTF-8 JSON.
        """
        if not self.body:
            return None
        return json.loads(self.body.decode("utf-8"))


def with_query(url: str, params: dict[str, str | int] | None) -> str:
    """Append URL-encoded query parameters to url."""
    if not params:
        return url
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{urllib.parse.urlencode(params)}"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Any non-2xx answer is returned as Err(HttpError) with the status and
    body preserved, so callers can interpret specific codes (403, 409).
    """

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: object | None = None,
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        """Send a request.

        Args:
            method: HTTP method (GET, POST, ...)
            url: Absolute URL including any query string
            headers: Extra request headers
            json_body: Object to send as JSON (sets Content-Type)
            data: Raw bytes to send (mutually exclusive with json_body)

        Returns:
            Ok with HttpResponse, or Err with HttpError
        """
        ...


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - JSON and raw byte bodies
    - Timeout handling
    """

    def __init__(self, timeout: float = 60.0, user_agent: str = "codepush-cli") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: object | None = None,
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        payload = data
        if json_body is not None:
            payload = json.dumps(json_body).encode("utf-8")
            all_headers.setdefault("Content-Type", "application/json")

        try:
            req = urllib.request.Request(url, data=payload, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(HttpResponse(url=url, status=response.status, body=response.read()))
        except urllib.error.HTTPError as e:
            body = _read_error_body(e)
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


def _read_error_body(e: urllib.error.HTTPError) -> str:
    try:
        raw = e.read()
    except OSError:
        return ""
    return raw.decode("utf-8", errors="replace") if raw else ""


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    """A request seen by MockHttpClient."""

    method: str
    url: str
    headers: dict[str, str]
    json_body: object | None
    data: bytes | None

    @property
    def path(self) -> str:
        return self.url.split("?", 1)[0]

    @property
    def query(self) -> dict[str, str]:
        parsed = urllib.parse.urlsplit(self.url)
        return dict(urllib.parse.parse_qsl(parsed.query))


@dataclass(frozen=True, slots=True)
class _MockReply:
    status: int
    body: bytes


def _empty_routes() -> dict[tuple[str, str], _MockReply]:
    return {}


def _empty_calls() -> list[RecordedRequest]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Replies are registered per (method, URL without query string) and are
    persistent: every matching request gets the same reply.

    Usage:
        client = MockHttpClient()
        client.reply("GET", "https://api.example.com/v0.1/apps/o/a", 200, {"platform": "Cordova"})
        result = client.request("GET", "https://api.example.com/v0.1/apps/o/a")
        assert isinstance(result, Ok)
    """

    routes: dict[tuple[str, str], _MockReply] = field(default_factory=_empty_routes)
    calls: list[RecordedRequest] = field(default_factory=_empty_calls)

    def reply(self, method: str, url: str, status: int, body: object | bytes | None = None) -> None:
        """Register (or replace) the reply for method + url."""
        if isinstance(body, bytes):
            raw = body
        elif body is None:
            raw = b""
        else:
            raw = json.dumps(body).encode("utf-8")
        self.routes[(method.upper(), url)] = _MockReply(status=status, body=raw)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: object | None = None,
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        call = RecordedRequest(
            method=method.upper(),
            url=url,
            headers=dict(headers or {}),
            json_body=json_body,
            data=data,
        )
        self.calls.append(call)

        reply = self.routes.get((call.method, call.path))
        if reply is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if 200 <= reply.status < 300:
            return Ok(HttpResponse(url=url, status=reply.status, body=reply.body))
        return Err(
            HttpError(
                url=url,
                status=reply.status,
                message=f"status {reply.status} (mock)",
                body=reply.body.decode("utf-8", errors="replace"),
            )
        )

    # Test helper methods

    def find(self, method: str, path_suffix: str) -> list[RecordedRequest]:
        """Recorded calls with the given method whose path ends with path_suffix."""
        return [
            c for c in self.calls if c.method == method.upper() and c.path.endswith(path_suffix)
        ]
