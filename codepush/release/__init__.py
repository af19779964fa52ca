"""Release workflow: validate, package, sign, upload and register a release."""

from __future__ import annotations

from .errors import ReleaseError
from .model import ReleaseOptions, ReleaseOutcome, ReleaseRequest
from .workflow import run_release

__all__ = [
    "ReleaseError",
    "ReleaseOptions",
    "ReleaseOutcome",
    "ReleaseRequest",
    "run_release",
]
