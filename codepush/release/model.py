from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from codepush.api.client import AppRef
from codepush.api.models import CodePushReleaseResponse

DEFAULT_ROLLOUT = 100


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    """Raw command-line input for one release, before validation."""

    update_contents_path: Path
    target_binary_version: str
    app: str
    deployment_name: str
    description: str | None = None
    mandatory: bool = False
    disabled: bool = False
    private_key_path: Path | None = None
    disable_duplicate_release_error: bool = False
    rollout: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Validated release parameters."""

    app: AppRef
    update_contents_path: Path
    target_binary_version: str
    deployment_name: str
    description: str | None
    mandatory: bool
    disabled: bool
    rollout: int
    private_key_path: Path | None
    disable_duplicate_release_error: bool


@dataclass(frozen=True, slots=True)
class PackagedContent:
    """The file that gets uploaded, plus its package hash."""

    path: Path
    package_hash: str


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """What a finished release command reports."""

    message: str
    release: CodePushReleaseResponse | None = None
    duplicate: bool = False
