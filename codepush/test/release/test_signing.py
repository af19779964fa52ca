"""Tests for release/signing.py."""

from __future__ import annotations

from pathlib import Path

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from codepush.core.result import Err, Ok
from codepush.release.packaging import SIGNATURE_FILE_NAME, directory_package_hash
from codepush.release.signing import (
    CLAIM_VERSION,
    REACT_NATIVE_FOLDER,
    is_react_native,
    sign_contents,
    stage_for_signing,
)


@pytest.fixture(scope="module")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def key_file(tmp_path: Path, rsa_key: rsa.RSAPrivateKey) -> Path:
    pem = rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    path = tmp_path / "private.pem"
    path.write_bytes(pem)
    return path


@pytest.fixture
def www(tmp_path: Path) -> Path:
    www = tmp_path / "www"
    www.mkdir()
    (www / "index.html").write_text("<html/>", encoding="utf-8")
    return www


def test_is_react_native() -> None:
    assert is_react_native("React-Native")
    assert is_react_native("react-native")
    assert not is_react_native("Cordova")
    assert not is_react_native(None)


class TestStageForSigning:
    def test_react_native_copies_into_codepush_folder(self, www: Path, tmp_path: Path) -> None:
        scratch = tmp_path / "scratch"

        result = stage_for_signing(www, platform="React-Native", scratch=scratch)

        assert isinstance(result, Ok)
        assert result.value == scratch / REACT_NATIVE_FOLDER
        assert (result.value / "index.html").exists()

    @pytest.mark.parametrize("platform", ["Cordova", "Electron", None])
    def test_other_platforms_sign_in_place(
        self, www: Path, tmp_path: Path, platform: str | None
    ) -> None:
        result = stage_for_signing(www, platform=platform, scratch=tmp_path / "scratch")
        assert result == Ok(www)

    def test_single_file_is_copied(self, tmp_path: Path) -> None:
        bundle = tmp_path / "main.jsbundle"
        bundle.write_text("bundle", encoding="utf-8")
        scratch = tmp_path / "scratch"

        result = stage_for_signing(bundle, platform="Cordova", scratch=scratch)

        assert isinstance(result, Ok)
        assert result.value.parent == scratch
        assert (result.value / "main.jsbundle").read_text(encoding="utf-8") == "bundle"


class TestSignContents:
    def test_writes_verifiable_signature(
        self, www: Path, key_file: Path, rsa_key: rsa.RSAPrivateKey
    ) -> None:
        expected_hash = directory_package_hash(www)

        result = sign_contents(key_file, www)

        assert result == Ok(www / SIGNATURE_FILE_NAME)
        token = (www / SIGNATURE_FILE_NAME).read_text(encoding="utf-8")
        claims = jwt.decode(token, rsa_key.public_key(), algorithms=["RS256"])
        assert claims == {"claimVersion": CLAIM_VERSION, "contentHash": expected_hash}

    def test_replaces_stale_signature(self, www: Path, key_file: Path) -> None:
        (www / SIGNATURE_FILE_NAME).write_text("stale", encoding="utf-8")

        result = sign_contents(key_file, www)

        assert isinstance(result, Ok)
        assert (www / SIGNATURE_FILE_NAME).read_text(encoding="utf-8") != "stale"

    def test_missing_key(self, www: Path, tmp_path: Path) -> None:
        result = sign_contents(tmp_path / "nope.pem", www)
        assert isinstance(result, Err)
        assert result.error.kind == "signing_failed"
        assert not (www / SIGNATURE_FILE_NAME).exists()

    def test_garbage_key(self, www: Path, tmp_path: Path) -> None:
        key = tmp_path / "bad.pem"
        key.write_text("not a key", encoding="utf-8")

        result = sign_contents(key, www)

        assert isinstance(result, Err)
        assert result.error.kind == "signing_failed"

    def test_public_key_is_rejected(
        self, www: Path, tmp_path: Path, rsa_key: rsa.RSAPrivateKey
    ) -> None:
        key = tmp_path / "public.pem"
        key.write_bytes(
            rsa_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        )

        result = sign_contents(key, www)

        assert isinstance(result, Err)
        assert result.error.kind == "signing_failed"
        assert result.error.hint is not None
        assert not (www / SIGNATURE_FILE_NAME).exists()

    def test_non_rsa_key_is_rejected(self, www: Path, tmp_path: Path) -> None:
        key = tmp_path / "ec.pem"
        key.write_bytes(
            ec.generate_private_key(ec.SECP256R1()).private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )

        result = sign_contents(key, www)

        assert isinstance(result, Err)
        assert result.error.kind == "signing_failed"
        assert "not an RSA private key" in result.error.message
