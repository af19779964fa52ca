from __future__ import annotations

from pathlib import Path

import typer

from codepush.api.client import CodePushApi
from codepush.cli.commands._helpers import fail
from codepush.cli.context import build_context
from codepush.core.config import ENV_ACCESS_TOKEN
from codepush.core.errors import ErrorCode
from codepush.core.result import Err
from codepush.output.console import Style
from codepush.release.errors import ReleaseErrorKind
from codepush.release.model import ReleaseOptions
from codepush.release.upload import FileUploader
from codepush.release.workflow import run_release

_EXIT_CODES: dict[ReleaseErrorKind, ErrorCode] = {
    "invalid_input": ErrorCode.USER_ERROR,
    "not_found": ErrorCode.USER_ERROR,
    "duplicate_release": ErrorCode.CONFLICT,
    "forbidden": ErrorCode.AUTH_ERROR,
    "unauthorized": ErrorCode.AUTH_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "upload_failed": ErrorCode.NETWORK_ERROR,
    "signing_failed": ErrorCode.IO_ERROR,
    "io": ErrorCode.IO_ERROR,
}


def exit_code_for(kind: ReleaseErrorKind) -> ErrorCode:
    return _EXIT_CODES.get(kind, ErrorCode.NETWORK_ERROR)


def release(
    update_contents_path: Path = typer.Option(
        ...,
        "--update-contents-path",
        "-c",
        help="Directory or single file with the update contents (not a .zip/.apk/.ipa)",
    ),
    target_binary_version: str = typer.Option(
        ...,
        "--target-binary-version",
        "-t",
        help="Semver range of binary versions this release targets (e.g. 1.0.0, ^1.2.3, 1.x)",
    ),
    deployment_name: str | None = typer.Option(
        None, "--deployment-name", "-d", help="Deployment to release to [default: Staging]"
    ),
    description: str | None = typer.Option(None, "--description", help="Release notes"),
    disabled: bool = typer.Option(
        False, "--disabled", "-x", help="Prevent the release from being downloaded"
    ),
    mandatory: bool = typer.Option(False, "--mandatory", "-m", help="Mark the release mandatory"),
    private_key_path: Path | None = typer.Option(
        None, "--private-key-path", "-k", help="PEM private key used to sign the release"
    ),
    disable_duplicate_release_error: bool = typer.Option(
        False,
        "--disable-duplicate-release-error",
        help="Treat a release identical to the current one as a success",
    ),
    rollout: str | None = typer.Option(
        None, "--rollout", "-r", help="Percentage of users (1-100) that receive the release"
    ),
    app: str | None = typer.Option(None, "--app", "-a", help="App as owner/app"),
    token: str | None = typer.Option(
        None, "--token", help=f"API token [env: {ENV_ACCESS_TOKEN}]"
    ),
    debug: bool = typer.Option(False, "--debug", help="Trace each API and upload call"),
) -> None:
    """Release an update to a CodePush deployment."""
    ctx = build_context(debug=debug)
    config = ctx.config

    app_ref = app or config.app
    if not app_ref:
        fail(
            ctx,
            "No app specified.",
            code=ErrorCode.USER_ERROR,
            hint="pass --app owner/app or set `app` in the config file",
        )

    access_token = token or config.token
    if not access_token:
        fail(
            ctx,
            "No access token.",
            code=ErrorCode.ENV_ERROR,
            hint=f"pass --token or set {ENV_ACCESS_TOKEN}",
        )

    api = CodePushApi(
        ctx.http,
        server_url=config.server_url,
        api_version=config.api_version,
        token=access_token,
    )
    options = ReleaseOptions(
        update_contents_path=update_contents_path,
        target_binary_version=target_binary_version,
        app=app_ref,
        deployment_name=deployment_name or config.deployment_name,
        description=description,
        mandatory=mandatory,
        disabled=disabled,
        private_key_path=private_key_path,
        disable_duplicate_release_error=disable_duplicate_release_error,
        rollout=rollout,
    )

    result = run_release(
        options, api=api, uploader=FileUploader(ctx.http, ctx.console), console=ctx.console
    )
    if isinstance(result, Err):
        error = result.error
        fail(ctx, error.message, code=exit_code_for(error.kind), hint=error.hint)

    outcome = result.value
    ctx.console.success(outcome.message)
    if outcome.release is not None and outcome.release.label:
        ctx.console.print(f"label: {outcome.release.label}", Style.DIM)
