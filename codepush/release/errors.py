"""Error payload for the release workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_input",
    "not_found",
    "duplicate_release",
    "forbidden",
    "unauthorized",
    "network",
    "upload_failed",
    "signing_failed",
    "io",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    `kind` classifies the failure (the CLI maps it to an exit code);
    `message` is shown to the user as is.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
