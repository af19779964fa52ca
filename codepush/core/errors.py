"""Process exit codes for the codepush CLI.

Every failed release maps to exactly one of these codes, so scripts and CI
jobs can tell a bad flag apart from a rejected or duplicate release.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (invalid flag values, missing update contents)
    - 2: Environment error (no access token, unreadable config file)
    - 3: Authorization error (401/403 from the API)
    - 4: Network error (API unreachable, unexpected status, upload failure)
    - 5: I/O error (packaging or signing failed on the local filesystem)
    - 6: Conflict (the release duplicates the deployment's current one)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    CONFLICT = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
