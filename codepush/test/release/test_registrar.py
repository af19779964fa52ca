"""Tests for release/registrar.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from codepush.api.client import AppRef, CodePushApi
from codepush.api.http import MockHttpClient
from codepush.api.models import ReleaseUploadResponse
from codepush.core.result import Err, Ok
from codepush.output.console import MockConsole
from codepush.release.model import ReleaseRequest
from codepush.release.registrar import (
    DUPLICATE_RELEASE_MESSAGE,
    build_release_body,
    register_release,
)

RELEASES_URL = "https://api.example.com/v0.1/apps/acme/shop/deployments/Staging/releases"
SESSION = ReleaseUploadResponse(id="up-1", upload_domain="upload.example.com", token="tok")


def _request(*, disable_duplicate_release_error: bool = False) -> ReleaseRequest:
    return ReleaseRequest(
        app=AppRef("acme", "shop"),
        update_contents_path=Path("www"),
        target_binary_version="^1.0.0",
        deployment_name="Staging",
        description="fixes",
        mandatory=True,
        disabled=False,
        rollout=50,
        private_key_path=None,
        disable_duplicate_release_error=disable_duplicate_release_error,
    )


def _api(http: MockHttpClient) -> CodePushApi:
    return CodePushApi(http, server_url="https://api.example.com", api_version="v0.1", token="t")


def test_build_release_body() -> None:
    body = build_release_body(_request(), SESSION)
    assert body.release_upload == SESSION
    assert body.target_binary_version == "^1.0.0"
    assert body.mandatory is True
    assert body.disabled is False
    assert body.description == "fixes"
    assert body.rollout == 50


def test_success_returns_release() -> None:
    http = MockHttpClient()
    http.reply("POST", RELEASES_URL, 201, {"label": "v3"})

    result = register_release(_api(http), _request(), SESSION, MockConsole())

    assert isinstance(result, Ok)
    assert result.value.release is not None
    assert result.value.release.label == "v3"
    assert not result.value.duplicate


def test_conflict_is_an_error_by_default() -> None:
    http = MockHttpClient()
    http.reply("POST", RELEASES_URL, 409)
    console = MockConsole()

    result = register_release(_api(http), _request(), SESSION, console)

    assert isinstance(result, Err)
    assert result.error.kind == "duplicate_release"
    assert not console.has_warning()


def test_conflict_tolerated_with_flag() -> None:
    http = MockHttpClient()
    http.reply("POST", RELEASES_URL, 409, {"message": DUPLICATE_RELEASE_MESSAGE})
    console = MockConsole()

    result = register_release(
        _api(http), _request(disable_duplicate_release_error=True), SESSION, console
    )

    assert isinstance(result, Ok)
    assert result.value.duplicate
    assert console.messages[-1] == f"warning: [Warning] {DUPLICATE_RELEASE_MESSAGE}"


@pytest.mark.parametrize("disable_duplicate_release_error", [False, True])
def test_forbidden(disable_duplicate_release_error: bool) -> None:
    http = MockHttpClient()
    http.reply("POST", RELEASES_URL, 403, {"message": "no collaborator access"})
    console = MockConsole()

    result = register_release(
        _api(http),
        _request(disable_duplicate_release_error=disable_duplicate_release_error),
        SESSION,
        console,
    )

    assert isinstance(result, Err)
    assert result.error.kind == "forbidden"
    assert "no collaborator access" in result.error.message
    assert not console.has_warning()


def test_unauthorized() -> None:
    http = MockHttpClient()
    http.reply("POST", RELEASES_URL, 401)

    result = register_release(_api(http), _request(), SESSION, MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "unauthorized"


def test_server_error() -> None:
    http = MockHttpClient()
    http.reply("POST", RELEASES_URL, 500, b"internal")

    result = register_release(_api(http), _request(), SESSION, MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "network"
