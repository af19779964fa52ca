"""Release registration and status-code interpretation."""

from __future__ import annotations

from dataclasses import dataclass

from codepush.api.client import ApiError, CodePushApi
from codepush.api.models import CodePushReleaseResponse, CreateReleaseBody, ReleaseUploadResponse
from codepush.core.result import Err, Ok, Result
from codepush.output.console import ConsoleProtocol

from .errors import ReleaseError
from .model import ReleaseRequest

__all__ = ["DUPLICATE_RELEASE_MESSAGE", "Registration", "build_release_body", "register_release"]

DUPLICATE_RELEASE_MESSAGE = (
    "The uploaded package was not released because it is identical to the contents "
    "of the specified deployment's current release."
)


@dataclass(frozen=True, slots=True)
class Registration:
    release: CodePushReleaseResponse | None
    duplicate: bool = False


def build_release_body(
    request: ReleaseRequest, session: ReleaseUploadResponse
) -> CreateReleaseBody:
    return CreateReleaseBody(
        release_upload=session,
        target_binary_version=request.target_binary_version,
        mandatory=request.mandatory,
        disabled=request.disabled,
        description=request.description,
        rollout=request.rollout,
    )


def _classify(error: ApiError, deployment_name: str) -> ReleaseError:
    match error.status:
        case 409:
            return ReleaseError(
                kind="duplicate_release",
                message=error.message or DUPLICATE_RELEASE_MESSAGE,
                hint="use --disable-duplicate-release-error to treat this as a success",
            )
        case 403:
            return ReleaseError(
                kind="forbidden",
                message=f"Not allowed to release to deployment {deployment_name}: {error.message}",
            )
        case 401:
            return ReleaseError(
                kind="unauthorized",
                message=f"The access token was rejected: {error.message}",
                hint="check --token or CODEPUSH_ACCESS_TOKEN",
            )
        case _:
            return ReleaseError(kind="network", message=f"Failed to create release: {error}")


def register_release(
    api: CodePushApi,
    request: ReleaseRequest,
    session: ReleaseUploadResponse,
    console: ConsoleProtocol,
) -> Result[Registration, ReleaseError]:
    """POST the release; a 409 is a success only when duplicates are tolerated."""
    console.debug(f"creating release on {request.app}/{request.deployment_name}")
    result = api.create_release(
        request.app, request.deployment_name, build_release_body(request, session)
    )
    if isinstance(result, Ok):
        return Ok(Registration(release=result.value))

    error = result.error
    if error.status == 409 and request.disable_duplicate_release_error:
        console.warning(f"[Warning] {error.message or DUPLICATE_RELEASE_MESSAGE}")
        return Ok(Registration(release=None, duplicate=True))
    return Err(_classify(error, request.deployment_name))
