"""Update-contents packaging.

A directory is zipped into the scratch area with the directory itself as the
archive's root folder (``www/index.html``, ``CodePush/main.jsbundle``). A
single file is uploaded as is. Either way a package hash is computed:

- file: SHA-256 of its bytes
- directory: SHA-256 of the JSON array of sorted ``"<path>:<sha256>"``
  entries, paths relative to the directory's parent, skipping macOS
  metadata and the release signature file
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from codepush.core.result import Err, Ok, Result

from .errors import ReleaseError
from .model import PackagedContent

__all__ = [
    "SIGNATURE_FILE_NAME",
    "collect_files",
    "directory_package_hash",
    "file_sha256",
    "package_contents",
    "zip_directory",
]

SIGNATURE_FILE_NAME = ".codepushrelease"

_MACOSX_PREFIX = "__MACOSX/"
_DS_STORE = ".DS_Store"


def file_sha256(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def collect_files(directory: Path) -> list[tuple[Path, str]]:
    """List (file, archive name) pairs, archive names rooted at directory.name."""
    directory = directory.resolve()
    base = directory.parent
    out: list[tuple[Path, str]] = []
    for p in sorted(directory.rglob("*")):
        if p.is_dir():
            continue
        out.append((p, p.relative_to(base).as_posix()))
    return out


def _is_ignored(relative_path: str) -> bool:
    if relative_path.startswith(_MACOSX_PREFIX):
        return True
    name = relative_path.rsplit("/", 1)[-1]
    return name in (_DS_STORE, SIGNATURE_FILE_NAME)


def directory_package_hash(directory: Path) -> str:
    entries = [
        f"{arc}:{file_sha256(src)}" for src, arc in collect_files(directory) if not _is_ignored(arc)
    ]
    entries.sort()
    manifest = json.dumps(entries, separators=(",", ":"))
    return hashlib.sha256(manifest.encode("utf-8")).hexdigest()


def zip_directory(directory: Path, zip_path: Path) -> Path:
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    # Files checked out or copied with mtime=0 cannot be represented in ZIP
    # (timestamps before 1980); don't let that fail the release.
    with ZipFile(zip_path, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
        for src, arc in collect_files(directory):
            zf.write(src, arcname=arc)
    return zip_path


def package_contents(contents: Path, scratch: Path) -> Result[PackagedContent, ReleaseError]:
    """Produce the uploadable file for contents.

    Args:
        contents: Update contents (directory or single file)
        scratch: Directory that receives the temporary archive

    Returns:
        Ok with the packaged content, or Err(io) on filesystem failure
    """
    try:
        if not contents.is_dir():
            return Ok(PackagedContent(path=contents, package_hash=file_sha256(contents)))

        package_hash = directory_package_hash(contents)
        archive = zip_directory(contents, scratch / f"{contents.resolve().name or 'release'}.zip")
        return Ok(PackagedContent(path=archive, package_hash=package_hash))
    except OSError as e:
        return Err(
            ReleaseError(kind="io", message=f"Failed to package update contents {contents}: {e}")
        )
