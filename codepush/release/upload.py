"""File-upload service client (set_metadata -> upload_chunk* -> finished).

The upload session (id, domain, token) is issued by the CodePush API; every
call here is addressed by the session id and authenticated by its token in
the query string. The metadata reply decides the chunk size and which
1-based blocks to send. Each step is attempted once; any failure aborts the
upload.
"""

from __future__ import annotations

import math
import urllib.parse
from pathlib import Path

from codepush.api.http import HttpClient, HttpError, HttpResponse, with_query
from codepush.api.models import (
    ReleaseUploadResponse,
    SetMetadataResponse,
    UploadChunkResponse,
    from_wire,
)
from codepush.core.result import Err, Ok, Result
from codepush.output.console import ConsoleProtocol

from .errors import ReleaseError

__all__ = ["DEFAULT_CHUNK_SIZE", "FileUploader", "plan_blocks"]

DEFAULT_CHUNK_SIZE = 4 * 1024 * 1024

_NO_ERROR_CODES = frozenset({"", "none"})


def plan_blocks(file_size: int, chunk_size: int, chunk_list: list[int] | None) -> list[int]:
    """Block numbers to send, in order.

    The server's chunk list wins; without one every block of the file is
    sent (an empty file is still one block).
    """
    if chunk_list:
        return sorted({int(n) for n in chunk_list})
    count = max(1, math.ceil(file_size / chunk_size))
    return list(range(1, count + 1))


def _has_error(error: bool | None, error_code: str | None) -> bool:
    if error:
        return True
    return (error_code or "").strip().lower() not in _NO_ERROR_CODES


class FileUploader:
    """Uploads one file into an upload session."""

    def __init__(self, http: HttpClient, console: ConsoleProtocol) -> None:
        self._http = http
        self._console = console

    def upload(
        self, session: ReleaseUploadResponse, file: Path, *, package_hash: str | None = None
    ) -> Result[None, ReleaseError]:
        """Send file to the session; package_hash is declared with the metadata."""
        try:
            file_size = file.stat().st_size
        except OSError as e:
            return Err(ReleaseError(kind="io", message=f"Cannot read {file}: {e}"))

        metadata = self._set_metadata(session, file.name, file_size, package_hash)
        if isinstance(metadata, Err):
            return metadata

        chunk_size = metadata.value.chunk_size or DEFAULT_CHUNK_SIZE
        blocks = plan_blocks(file_size, chunk_size, metadata.value.chunk_list)
        self._console.debug(
            f"uploading {file.name}: {file_size} bytes in {len(blocks)} chunk(s) of {chunk_size}"
        )

        try:
            with file.open("rb") as f:
                for block_number in blocks:
                    f.seek((block_number - 1) * chunk_size)
                    chunk = f.read(chunk_size)
                    sent = self._upload_chunk(session, block_number, chunk)
                    if isinstance(sent, Err):
                        return sent
        except OSError as e:
            return Err(ReleaseError(kind="io", message=f"Cannot read {file}: {e}"))

        return self._finish(session)

    # -------------------------------------------------------------------------

    def _url(self, session: ReleaseUploadResponse, action: str) -> str:
        domain = session.upload_domain.rstrip("/")
        if "://" not in domain:
            domain = f"https://{domain}"
        return f"{domain}/upload/{action}/{urllib.parse.quote(session.id, safe='')}"

    def _post(
        self, step: str, url: str, data: bytes | None = None
    ) -> Result[HttpResponse, ReleaseError]:
        headers = {"Accept": "application/json"}
        if data is not None:
            headers["Content-Type"] = "application/octet-stream"
        result = self._http.request("POST", url, headers=headers, data=data)
        if isinstance(result, Err):
            return Err(_upload_error(step, result.error))
        return Ok(result.value)

    def _set_metadata(
        self,
        session: ReleaseUploadResponse,
        file_name: str,
        file_size: int,
        package_hash: str | None,
    ) -> Result[SetMetadataResponse, ReleaseError]:
        params: dict[str, str | int] = {"file_name": file_name, "file_size": file_size}
        if package_hash is not None:
            params["package_hash"] = package_hash
        params["token"] = session.token
        url = with_query(self._url(session, "set_metadata"), params)
        self._console.debug(f"set_metadata for upload {session.id}")
        response = self._post("set_metadata", url)
        if isinstance(response, Err):
            return response

        decoded = _decode(response.value, SetMetadataResponse, "set_metadata")
        if isinstance(decoded, Err):
            return decoded
        meta = decoded.value
        status = (meta.status_code or "Success").strip()
        if _has_error(meta.error, meta.error_code) or status.lower() != "success":
            return Err(
                ReleaseError(
                    kind="upload_failed",
                    message=f"Upload metadata was rejected (status: {status})",
                )
            )
        return Ok(meta)

    def _upload_chunk(
        self, session: ReleaseUploadResponse, block_number: int, chunk: bytes
    ) -> Result[None, ReleaseError]:
        url = with_query(
            self._url(session, "upload_chunk"),
            {"token": session.token, "block_number": block_number},
        )
        self._console.debug(f"upload_chunk block {block_number} ({len(chunk)} bytes)")
        response = self._post("upload_chunk", url, data=chunk)
        if isinstance(response, Err):
            return response

        decoded = _decode(response.value, UploadChunkResponse, "upload_chunk")
        if isinstance(decoded, Err):
            return decoded
        reply = decoded.value
        if _has_error(reply.error, reply.error_code):
            return Err(
                ReleaseError(
                    kind="upload_failed",
                    message=(
                        f"Chunk {block_number} was rejected "
                        f"(error code: {reply.error_code or 'unknown'})"
                    ),
                )
            )
        return Ok(None)

    def _finish(self, session: ReleaseUploadResponse) -> Result[None, ReleaseError]:
        url = with_query(self._url(session, "finished"), {"token": session.token})
        self._console.debug(f"finishing upload {session.id}")
        response = self._post("finished", url)
        if isinstance(response, Err):
            return response

        decoded = _decode(response.value, UploadChunkResponse, "finished")
        if isinstance(decoded, Err):
            return decoded
        reply = decoded.value
        if _has_error(reply.error, reply.error_code) or reply.state != "Done":
            return Err(
                ReleaseError(
                    kind="upload_failed",
                    message=f"Upload did not complete (state: {reply.state or 'unknown'})",
                )
            )
        return Ok(None)


def _decode[M](response: HttpResponse, cls: type[M], step: str) -> Result[M, ReleaseError]:
    try:
        data = response.json()
    except ValueError as e:
        return Err(ReleaseError(kind="upload_failed", message=f"{step}: invalid response: {e}"))
    decoded = from_wire(cls, data)  # type: ignore[type-var]
    if isinstance(decoded, Err):
        return Err(ReleaseError(kind="upload_failed", message=f"{step}: {decoded.error}"))
    return Ok(decoded.value)


def _upload_error(step: str, error: HttpError) -> ReleaseError:
    if error.status == 0:
        return ReleaseError(kind="network", message=f"Upload {step} failed: {error}")
    return ReleaseError(kind="upload_failed", message=f"Upload {step} failed: {error}")
