"""CodePush REST API client.

Thin typed wrapper over `HttpClient` for the handful of endpoints the
release command needs. Responses are decoded into `codepush.api.models`
types; non-2xx answers come back as `ApiError` with the status preserved so
the release registrar can interpret 403/404/409 itself.
"""

from __future__ import annotations

import json
import urllib.parse
from dataclasses import dataclass
from typing import TypeVar

from codepush import __version__
from codepush.core.result import Err, Ok, Result
from codepush.core.structured import as_str_dict

from .http import HttpClient, HttpError, HttpResponse
from .models import (
    AppResponse,
    CodePushReleaseResponse,
    CreateReleaseBody,
    DeploymentResponse,
    ErrorDetails,
    ReleaseUploadResponse,
    from_wire,
    to_wire,
)

__all__ = ["ApiError", "AppRef", "CodePushApi", "parse_app_ref", "server_message"]

M = TypeVar("M")


@dataclass(frozen=True, slots=True)
class AppRef:
    """An app addressed as ``owner/app``."""

    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_app_ref(value: str) -> AppRef | None:
    parts = value.strip().split("/")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        return None
    return AppRef(owner=parts[0].strip(), name=parts[1].strip())


@dataclass(frozen=True, slots=True)
class ApiError:
    """Failure of an API call.

    Attributes:
        status: HTTP status (0 for transport or decoding failures)
        message: Best human-readable message (server message when present)
        url: Request URL
    """

    status: int
    message: str
    url: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message}"
        return self.message


def server_message(body: str) -> str | None:
    """Extract the server-provided message from an error body.

    Accepts ``{"message": ...}``, ``{"error": {"message": ...}}`` or a plain
    text body.
    """
    text = body.strip()
    if not text:
        return None

    try:
        data: object = json.loads(text)
    except ValueError:
        return text

    obj = as_str_dict(data)
    if obj is None:
        return text
    nested = as_str_dict(obj.get("error"))
    details = from_wire(ErrorDetails, nested if nested is not None else obj)
    if isinstance(details, Ok) and details.value.message:
        return details.value.message
    return text


def _api_error(e: HttpError) -> ApiError:
    return ApiError(status=e.status, message=server_message(e.body) or e.message, url=e.url)


class CodePushApi:
    """Client for ``{server}/{api_version}/apps/{owner}/{app}/...``."""

    def __init__(
        self,
        http: HttpClient,
        *,
        server_url: str,
        api_version: str,
        token: str,
    ) -> None:
        self._http = http
        self._server_url = server_url.rstrip("/")
        self._api_version = api_version
        self._token = token

    def app_url(self, app: AppRef) -> str:
        owner = urllib.parse.quote(app.owner, safe="")
        name = urllib.parse.quote(app.name, safe="")
        return f"{self._server_url}/{self._api_version}/apps/{owner}/{name}"

    def deployment_url(self, app: AppRef, deployment_name: str) -> str:
        return f"{self.app_url(app)}/deployments/{urllib.parse.quote(deployment_name, safe='')}"

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "X-API-Token": self._token,
            "User-Agent": f"codepush-cli/{__version__}",
        }

    def _call(
        self, method: str, url: str, *, json_body: object | None = None
    ) -> Result[HttpResponse, ApiError]:
        result = self._http.request(method, url, headers=self._headers(), json_body=json_body)
        if isinstance(result, Err):
            return Err(_api_error(result.error))
        return Ok(result.value)

    def _decode(self, response: HttpResponse, cls: type[M]) -> Result[M, ApiError]:
        try:
            data = response.json()
        except ValueError as e:
            return Err(ApiError(status=0, message=f"Invalid JSON response: {e}", url=response.url))
        decoded = from_wire(cls, data)  # type: ignore[type-var]
        if isinstance(decoded, Err):
            return Err(ApiError(status=0, message=str(decoded.error), url=response.url))
        return Ok(decoded.value)

    def get_app(self, app: AppRef) -> Result[AppResponse, ApiError]:
        result = self._call("GET", self.app_url(app))
        if isinstance(result, Err):
            return result
        return self._decode(result.value, AppResponse)

    def get_deployment(
        self, app: AppRef, deployment_name: str
    ) -> Result[DeploymentResponse, ApiError]:
        result = self._call("GET", self.deployment_url(app, deployment_name))
        if isinstance(result, Err):
            return result
        if not result.value.body:
            return Ok(DeploymentResponse(name=deployment_name))
        return self._decode(result.value, DeploymentResponse)

    def create_upload(
        self, app: AppRef, deployment_name: str
    ) -> Result[ReleaseUploadResponse, ApiError]:
        """Initiate an upload session for a new release."""
        url = f"{self.deployment_url(app, deployment_name)}/uploads"
        result = self._call("POST", url)
        if isinstance(result, Err):
            return result
        return self._decode(result.value, ReleaseUploadResponse)

    def create_release(
        self, app: AppRef, deployment_name: str, body: CreateReleaseBody
    ) -> Result[CodePushReleaseResponse | None, ApiError]:
        """Register a release.

        The stored release is returned when the server echoes a well-formed
        record, None otherwise (the release itself still succeeded).
        """
        url = f"{self.deployment_url(app, deployment_name)}/releases"
        result = self._call("POST", url, json_body=to_wire(body))
        if isinstance(result, Err):
            return result
        decoded = self._decode(result.value, CodePushReleaseResponse)
        if isinstance(decoded, Err):
            return Ok(None)
        return Ok(decoded.value)
