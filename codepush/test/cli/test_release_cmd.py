from __future__ import annotations

from pathlib import Path

import pytest
import typer

from codepush.api.http import MockHttpClient
from codepush.cli.context import CLIContext
from codepush.core.config import Config
from codepush.core.errors import ErrorCode
from codepush.output.console import MockConsole

SERVER = "https://api.example.com"
DEPLOYMENT_URL = f"{SERVER}/v0.1/apps/acme/shop/deployments/Production"


def _ctx(*, config: Config | None = None) -> CLIContext:
    return CLIContext(
        config=config or Config(server_url=SERVER, token="cfg-token", app="acme/shop"),
        console=MockConsole(),
        http=MockHttpClient(),
    )


def _nock(http: MockHttpClient, *, release_status: int = 201) -> None:
    http.reply("GET", DEPLOYMENT_URL, 200, {"name": "Production"})
    http.reply(
        "POST",
        f"{DEPLOYMENT_URL}/uploads",
        200,
        {"id": "up-1", "upload_domain": "upload.example.com", "token": "tok"},
    )
    base = "https://upload.example.com/upload"
    http.reply("POST", f"{base}/set_metadata/up-1", 200, {"status_code": "Success"})
    http.reply("POST", f"{base}/upload_chunk/up-1", 200, {"error": False})
    http.reply("POST", f"{base}/finished/up-1", 200, {"state": "Done"})
    http.reply("POST", f"{DEPLOYMENT_URL}/releases", release_status, {"label": "v9"})


def _run(
    ctx: CLIContext, monkeypatch: pytest.MonkeyPatch, contents: Path, **overrides: object
) -> None:
    import codepush.cli.commands.release_cmd as release_cmd

    monkeypatch.setattr(release_cmd, "build_context", lambda **_: ctx)
    kwargs: dict[str, object] = {
        "update_contents_path": contents,
        "target_binary_version": "1.0.0",
        "deployment_name": "Production",
        "description": None,
        "disabled": False,
        "mandatory": False,
        "private_key_path": None,
        "disable_duplicate_release_error": False,
        "rollout": None,
        "app": None,
        "token": None,
        "debug": False,
    }
    kwargs.update(overrides)
    release_cmd.release(**kwargs)  # type: ignore[arg-type]


@pytest.fixture
def contents(tmp_path: Path) -> Path:
    path = tmp_path / "main.jsbundle"
    path.write_text("bundle", encoding="utf-8")
    return path


def test_release_success(contents: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = _ctx()
    assert isinstance(ctx.http, MockHttpClient)
    _nock(ctx.http)

    _run(ctx, monkeypatch, contents, mandatory=True, rollout="20")

    console = ctx.console
    assert isinstance(console, MockConsole)
    assert console.has_success()
    assert console.find("label: v9")
    [call] = ctx.http.find("POST", "/releases")
    assert call.headers["X-API-Token"] == "cfg-token"
    assert call.json_body is not None


def test_flags_override_config(contents: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = _ctx()
    assert isinstance(ctx.http, MockHttpClient)
    _nock(ctx.http)

    _run(ctx, monkeypatch, contents, token="flag-token", app="acme/shop")

    assert ctx.http.calls[0].headers["X-API-Token"] == "flag-token"


def test_missing_app_is_user_error(contents: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = _ctx(config=Config(server_url=SERVER, token="t"))

    with pytest.raises(typer.Exit) as exc:
        _run(ctx, monkeypatch, contents)

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_missing_token_is_env_error(contents: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = _ctx(config=Config(server_url=SERVER, app="acme/shop"))

    with pytest.raises(typer.Exit) as exc:
        _run(ctx, monkeypatch, contents)

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)


def test_invalid_rollout_exit_code(contents: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = _ctx()

    with pytest.raises(typer.Exit) as exc:
        _run(ctx, monkeypatch, contents, rollout="101")

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.has_error()


def test_duplicate_release_is_conflict(contents: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = _ctx()
    assert isinstance(ctx.http, MockHttpClient)
    _nock(ctx.http, release_status=409)

    with pytest.raises(typer.Exit) as exc:
        _run(ctx, monkeypatch, contents)

    assert exc.value.exit_code == int(ErrorCode.CONFLICT)


def test_duplicate_release_tolerated(contents: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = _ctx()
    assert isinstance(ctx.http, MockHttpClient)
    _nock(ctx.http, release_status=409)

    _run(ctx, monkeypatch, contents, disable_duplicate_release_error=True)

    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.has_warning()
    assert ctx.console.has_success()


def test_forbidden_is_auth_error(contents: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = _ctx()
    assert isinstance(ctx.http, MockHttpClient)
    _nock(ctx.http, release_status=403)

    with pytest.raises(typer.Exit) as exc:
        _run(ctx, monkeypatch, contents)

    assert exc.value.exit_code == int(ErrorCode.AUTH_ERROR)


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    from codepush import __version__
    from codepush.cli.app import _main  # pyright: ignore[reportPrivateUsage]

    with pytest.raises(typer.Exit):
        _main(version=True)

    assert capsys.readouterr().out.strip() == __version__
