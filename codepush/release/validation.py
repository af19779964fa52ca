"""Argument validation for the release command.

Validation runs before anything touches the network or the filesystem
beyond `stat` calls; a failure here means no request was sent.
"""

from __future__ import annotations

import re
from pathlib import Path

from codepush.api.client import parse_app_ref
from codepush.core.result import Err, Ok, Result

from .errors import ReleaseError
from .model import DEFAULT_ROLLOUT, ReleaseOptions, ReleaseRequest
from .semver import is_valid_range

__all__ = [
    "BINARY_OR_ZIP_MESSAGE",
    "INVALID_ROLLOUT_MESSAGE",
    "INVALID_VERSION_MESSAGE",
    "is_binary_or_zip",
    "parse_rollout",
    "validate_release",
]

BINARY_OR_ZIP_MESSAGE = (
    "It is unnecessary to package releases in a .zip or binary file. "
    "Please specify the direct path to the update content's directory "
    "(e.g. /platforms/ios/www) or file (e.g. main.jsbundle)."
)
INVALID_VERSION_MESSAGE = "Invalid binary version(s) for a release."
INVALID_ROLLOUT_MESSAGE = "Rollout value should be integer value between 1 and 100."

_BINARY_SUFFIXES = frozenset({".zip", ".apk", ".ipa"})
_ROLLOUT_RE = re.compile(r"^(100|[1-9][0-9]?)$")


def is_binary_or_zip(path: Path) -> bool:
    """True for archives and app binaries (.zip, .apk, .ipa)."""
    return path.suffix.lower() in _BINARY_SUFFIXES


def parse_rollout(raw: str | None) -> int | None:
    """Parse a rollout percentage; None means the value is invalid.

    A missing value defaults to a full rollout.
    """
    if raw is None:
        return DEFAULT_ROLLOUT
    if not _ROLLOUT_RE.fullmatch(raw):
        return None
    return int(raw)


def _invalid(message: str, hint: str | None = None) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="invalid_input", message=message, hint=hint))


def validate_release(options: ReleaseOptions) -> Result[ReleaseRequest, ReleaseError]:
    """Check command-line input and build the immutable release request."""
    if is_binary_or_zip(options.update_contents_path):
        return _invalid(BINARY_OR_ZIP_MESSAGE)

    if not is_valid_range(options.target_binary_version):
        return _invalid(INVALID_VERSION_MESSAGE)

    rollout = parse_rollout(options.rollout)
    if rollout is None:
        return _invalid(INVALID_ROLLOUT_MESSAGE)

    app = parse_app_ref(options.app)
    if app is None:
        return _invalid(
            f'Invalid --app value "{options.app}": expected "owner/app".',
            hint="pass --app or set `app` in the config file",
        )

    deployment_name = options.deployment_name.strip()
    if not deployment_name:
        return _invalid("Deployment name must not be empty.")

    if not options.update_contents_path.exists():
        return _invalid(f'Update contents path "{options.update_contents_path}" does not exist.')

    return Ok(
        ReleaseRequest(
            app=app,
            update_contents_path=options.update_contents_path,
            target_binary_version=options.target_binary_version.strip(),
            deployment_name=deployment_name,
            description=options.description,
            mandatory=options.mandatory,
            disabled=options.disabled,
            rollout=rollout,
            private_key_path=options.private_key_path,
            disable_duplicate_release_error=options.disable_duplicate_release_error,
        )
    )
