"""The release command's use case.

validate -> check deployment -> [stage + sign] -> package -> upload -> register

Every step returns a Result and the first Err ends the run. Temporary files
(signed copies, the zip archive) all live in one `ScratchDir`, removed on
the way out whatever happened.
"""

from __future__ import annotations

from pathlib import Path

from codepush.api.client import ApiError, CodePushApi
from codepush.core.result import Err, Ok, Result
from codepush.output.console import ConsoleProtocol
from codepush.platform.files import ScratchDir

from .errors import ReleaseError
from .model import ReleaseOptions, ReleaseOutcome, ReleaseRequest
from .packaging import package_contents
from .registrar import register_release
from .signing import sign_contents, stage_for_signing
from .upload import FileUploader
from .validation import validate_release

__all__ = ["run_release"]


def _api_failure(error: ApiError, action: str) -> ReleaseError:
    match error.status:
        case 401:
            return ReleaseError(
                kind="unauthorized",
                message=f"Failed to {action}: the access token was rejected",
                hint="check --token or CODEPUSH_ACCESS_TOKEN",
            )
        case 403:
            return ReleaseError(kind="forbidden", message=f"Failed to {action}: {error.message}")
        case _:
            return ReleaseError(kind="network", message=f"Failed to {action}: {error}")


def _check_deployment(api: CodePushApi, request: ReleaseRequest) -> Result[None, ReleaseError]:
    result = api.get_deployment(request.app, request.deployment_name)
    if isinstance(result, Ok):
        return Ok(None)
    if result.error.status == 404:
        return Err(
            ReleaseError(
                kind="not_found",
                message=f'Deployment "{request.deployment_name}" does not exist.',
            )
        )
    return Err(_api_failure(result.error, f"fetch deployment {request.deployment_name}"))


def _sign(
    api: CodePushApi, request: ReleaseRequest, key: Path, scratch: Path, console: ConsoleProtocol
) -> Result[Path, ReleaseError]:
    app = api.get_app(request.app)
    if isinstance(app, Err):
        return Err(_api_failure(app.error, f"fetch app {request.app}"))

    platform = app.value.platform
    console.debug(f"app platform: {platform or 'unknown'}")
    staged = stage_for_signing(request.update_contents_path, platform=platform, scratch=scratch)
    if isinstance(staged, Err):
        return staged

    signed = sign_contents(key, staged.value)
    if isinstance(signed, Err):
        return signed
    return Ok(staged.value)


def _release(
    request: ReleaseRequest,
    scratch: Path,
    *,
    api: CodePushApi,
    uploader: FileUploader,
    console: ConsoleProtocol,
) -> Result[ReleaseOutcome, ReleaseError]:
    contents = request.update_contents_path
    if request.private_key_path is not None:
        signed = _sign(api, request, request.private_key_path, scratch, console)
        if isinstance(signed, Err):
            return signed
        contents = signed.value

    packaged = package_contents(contents, scratch)
    if isinstance(packaged, Err):
        return packaged
    console.debug(f"package {packaged.value.path.name} hash {packaged.value.package_hash}")

    session = api.create_upload(request.app, request.deployment_name)
    if isinstance(session, Err):
        return Err(_api_failure(session.error, "start the release upload"))

    uploaded = uploader.upload(
        session.value, packaged.value.path, package_hash=packaged.value.package_hash
    )
    if isinstance(uploaded, Err):
        return uploaded

    registered = register_release(api, request, session.value, console)
    if isinstance(registered, Err):
        return registered

    if registered.value.duplicate:
        return Ok(
            ReleaseOutcome(
                message=(
                    "No new release was created: the contents match the current release of the "
                    f'"{request.deployment_name}" deployment.'
                ),
                duplicate=True,
            )
        )

    kind = "directory" if request.update_contents_path.is_dir() else "file"
    return Ok(
        ReleaseOutcome(
            message=(
                f'Successfully released an update containing the "{request.update_contents_path}" '
                f'{kind} to the "{request.deployment_name}" deployment of the '
                f'"{request.app.name}" app.'
            ),
            release=registered.value.release,
        )
    )


def run_release(
    options: ReleaseOptions,
    *,
    api: CodePushApi,
    uploader: FileUploader,
    console: ConsoleProtocol,
) -> Result[ReleaseOutcome, ReleaseError]:
    """Run one release to completion or to its first failure."""
    validated = validate_release(options)
    if isinstance(validated, Err):
        return validated
    request = validated.value

    checked = _check_deployment(api, request)
    if isinstance(checked, Err):
        return checked

    with ScratchDir() as scratch:
        return _release(request, scratch.path, api=api, uploader=uploader, console=console)
