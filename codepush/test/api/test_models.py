"""Tests for api/models.py - wire model mapping."""

from __future__ import annotations

import pytest

from codepush.api.models import (
    AppResponse,
    CodePushReleaseResponse,
    CreateReleaseBody,
    GdprExportFileSetFileOKResponse,
    GetPublishErrorOKResponse,
    ReleaseUploadResponse,
    SetMetadataResponse,
    from_wire,
    to_wire,
)
from codepush.core.result import Err, Ok


SESSION = ReleaseUploadResponse(id="up-1", upload_domain="upload.example.com", token="tok")
SESSION_WIRE = {"id": "up-1", "upload_domain": "upload.example.com", "token": "tok"}


class TestFromWire:
    def test_required_fields(self) -> None:
        result = from_wire(ReleaseUploadResponse, SESSION_WIRE)
        assert result == Ok(SESSION)

    def test_missing_required_field(self) -> None:
        result = from_wire(ReleaseUploadResponse, {"id": "up-1", "token": "tok"})
        assert isinstance(result, Err)
        assert "upload_domain" in str(result.error)
        assert result.error.model == "ReleaseUploadResponse"

    def test_optional_fields_default_to_none(self) -> None:
        result = from_wire(AppResponse, {"platform": "React-Native"})
        assert result == Ok(AppResponse(platform="React-Native"))

    def test_unknown_keys_ignored(self) -> None:
        result = from_wire(AppResponse, {"name": "shop", "owner": {"name": "acme"}})
        assert isinstance(result, Ok)
        assert result.value.name == "shop"

    def test_wrong_scalar_type(self) -> None:
        result = from_wire(SetMetadataResponse, {"chunk_size": "big"})
        assert isinstance(result, Err)
        assert "chunk_size" in result.error.message

    def test_bool_is_not_a_number(self) -> None:
        assert isinstance(from_wire(CodePushReleaseResponse, {"rollout": True}), Err)

    def test_sequence_elements_checked(self) -> None:
        ok = from_wire(SetMetadataResponse, {"chunk_list": [1, 2, 3]})
        assert isinstance(ok, Ok)
        assert ok.value.chunk_list == [1, 2, 3]

        bad = from_wire(SetMetadataResponse, {"chunk_list": [1, "two"]})
        assert isinstance(bad, Err)
        assert "chunk_list[1]" in bad.error.message

    def test_uuid_fields(self) -> None:
        valid = from_wire(
            GdprExportFileSetFileOKResponse,
            {"hash_file_id": "12345678-1234-5678-1234-567812345678"},
        )
        assert isinstance(valid, Ok)

        invalid = from_wire(GdprExportFileSetFileOKResponse, {"hash_file_id": "nope"})
        assert isinstance(invalid, Err)

    def test_composite_field(self) -> None:
        result = from_wire(
            CreateReleaseBody,
            {
                "release_upload": SESSION_WIRE,
                "target_binary_version": "1.0.0",
            },
        )
        assert isinstance(result, Ok)
        assert result.value.release_upload == SESSION

    def test_not_an_object(self) -> None:
        assert isinstance(from_wire(GetPublishErrorOKResponse, ["message"]), Err)


class TestToWire:
    def test_omits_unset_optionals(self) -> None:
        body = CreateReleaseBody(release_upload=SESSION, target_binary_version="^1.2.0", rollout=25)
        assert to_wire(body) == {
            "release_upload": SESSION_WIRE,
            "target_binary_version": "^1.2.0",
            "rollout": 25,
        }

    def test_all_fields(self) -> None:
        body = CreateReleaseBody(
            release_upload=SESSION,
            target_binary_version="1.0.0",
            mandatory=True,
            disabled=False,
            description="fixes",
            rollout=100,
        )
        wire = to_wire(body)
        assert wire["mandatory"] is True
        assert wire["disabled"] is False
        assert wire["description"] == "fixes"

    def test_missing_required_raises(self) -> None:
        body = CreateReleaseBody(
            release_upload=SESSION,
            target_binary_version=None,  # type: ignore[arg-type]
        )
        with pytest.raises(ValueError, match="target_binary_version"):
            to_wire(body)
