"""Code signing of release contents.

A signed release carries a ``.codepushrelease`` file at the root of its
contents: an RS256 JWT whose claims hold the package hash of everything
else in the tree. Clients verify it with the matching public key.

React Native clients expect the bundle under a ``CodePush`` folder, so for
that platform the contents are first copied into ``<scratch>/CodePush``.
Other platforms sign the given directory in place; a single file is copied
into a scratch directory first since the signature needs a tree to live in.
"""

from __future__ import annotations

from pathlib import Path

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from codepush.core.result import Err, Ok, Result
from codepush.platform.files import copy_tree

from .errors import ReleaseError
from .packaging import SIGNATURE_FILE_NAME, directory_package_hash

__all__ = [
    "CLAIM_VERSION",
    "REACT_NATIVE_FOLDER",
    "is_react_native",
    "sign_contents",
    "stage_for_signing",
]

CLAIM_VERSION = "1.0.0"
REACT_NATIVE_FOLDER = "CodePush"
_SINGLE_FILE_FOLDER = "release"
_KEY_HINT = "--private-key-path must point to a PEM-encoded RSA private key"


def is_react_native(platform: str | None) -> bool:
    return (platform or "").strip().lower() == "react-native"


def stage_for_signing(
    contents: Path, *, platform: str | None, scratch: Path
) -> Result[Path, ReleaseError]:
    """Return the directory the signature will be written into."""
    if is_react_native(platform):
        target = scratch / REACT_NATIVE_FOLDER
    elif contents.is_dir():
        return Ok(contents)
    else:
        target = scratch / _SINGLE_FILE_FOLDER

    try:
        copy_tree(contents, target)
    except OSError as e:
        return Err(
            ReleaseError(kind="io", message=f"Failed to stage {contents} for signing: {e}")
        )
    return Ok(target)


def _load_private_key(path: Path) -> Result[rsa.RSAPrivateKey, ReleaseError]:
    try:
        data = path.read_bytes()
    except OSError as e:
        return Err(
            ReleaseError(
                kind="signing_failed",
                message=f"Could not read private key {path}: {e}",
                hint=_KEY_HINT,
            )
        )

    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        return Err(
            ReleaseError(
                kind="signing_failed",
                message=f"Could not load private key {path}: {e}",
                hint=_KEY_HINT,
            )
        )

    if not isinstance(key, rsa.RSAPrivateKey):
        return Err(
            ReleaseError(
                kind="signing_failed",
                message=f"{path} is not an RSA private key",
                hint=_KEY_HINT,
            )
        )
    return Ok(key)


def sign_contents(private_key_path: Path, contents_dir: Path) -> Result[Path, ReleaseError]:
    """Write the release signature into contents_dir.

    A signature left over from a previous release is replaced.

    Returns:
        Ok with the signature file path, or Err(signing_failed / io)
    """
    loaded = _load_private_key(private_key_path)
    if isinstance(loaded, Err):
        return loaded
    private_key = loaded.value

    signature_path = contents_dir / SIGNATURE_FILE_NAME
    try:
        signature_path.unlink(missing_ok=True)
        content_hash = directory_package_hash(contents_dir)
    except OSError as e:
        return Err(ReleaseError(kind="io", message=f"Failed to hash {contents_dir}: {e}"))

    try:
        claims = {"claimVersion": CLAIM_VERSION, "contentHash": content_hash}
        token = jwt.encode(claims, private_key, algorithm="RS256")
    except (jwt.PyJWTError, ValueError, TypeError) as e:
        return Err(
            ReleaseError(
                kind="signing_failed",
                message=f"Failed to sign release with {private_key_path}: {e}",
            )
        )

    try:
        signature_path.write_text(token, encoding="utf-8")
    except OSError as e:
        return Err(ReleaseError(kind="io", message=f"Could not write {signature_path}: {e}"))
    return Ok(signature_path)
