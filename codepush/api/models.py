"""Wire models for the CodePush REST API and the file-upload service.

Each model is a frozen dataclass paired with a `Mapper` describing its wire
shape: the serialized (snake_case) name of every field, its type and
whether the server guarantees it. `from_wire` validates a decoded JSON
object against the mapper; `to_wire` produces the JSON object to send,
omitting unset optional fields.

Supported type names: String, Boolean, Number, Uuid, Sequence, Composite,
Object (any JSON value).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, ClassVar, Literal, Protocol, TypeVar, cast

from codepush.core.result import Err, Ok, Result
from codepush.core.structured import as_str_dict

__all__ = [
    "AppResponse",
    "CodePushReleaseResponse",
    "CreateReleaseBody",
    "DeploymentResponse",
    "ErrorDetails",
    "FieldSpec",
    "GdprExportFileSetFileOKResponse",
    "GetPublishErrorOKResponse",
    "Mapper",
    "ModelError",
    "ReleaseUploadResponse",
    "SetMetadataResponse",
    "UploadChunkResponse",
    "from_wire",
    "to_wire",
]

TypeName = Literal["String", "Boolean", "Number", "Uuid", "Sequence", "Composite", "Object"]


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One model property.

    Attributes:
        attr: Python attribute name on the model dataclass
        serialized_name: Key used on the wire
        type_name: Wire type
        required: Whether the key must be present (and non-null)
        element: Element type name for Sequence fields
        model: Model class for Composite fields
    """

    attr: str
    serialized_name: str
    type_name: TypeName
    required: bool = False
    element: TypeName | None = None
    model: type[Any] | None = None


@dataclass(frozen=True, slots=True)
class Mapper:
    serialized_name: str
    fields: tuple[FieldSpec, ...]


@dataclass(frozen=True, slots=True)
class ModelError:
    """A payload did not match a model's mapper."""

    model: str
    message: str

    def __str__(self) -> str:
        return f"{self.model}: {self.message}"


class WireModel(Protocol):
    MAPPER: ClassVar[Mapper]


M = TypeVar("M", bound=WireModel)


def _check_scalar(type_name: TypeName, value: object) -> bool:
    match type_name:
        case "String":
            return isinstance(value, str)
        case "Boolean":
            return isinstance(value, bool)
        case "Number":
            return isinstance(value, int | float) and not isinstance(value, bool)
        case "Uuid":
            if not isinstance(value, str):
                return False
            try:
                uuid.UUID(value)
            except ValueError:
                return False
            return True
        case _:
            return True


def _decode_value(
    field_spec: FieldSpec, value: object, owner: str
) -> Result[object, ModelError]:
    where = f"{field_spec.serialized_name}"
    if field_spec.type_name == "Composite":
        if field_spec.model is None:
            raise AssertionError(f"{owner}.{field_spec.attr}: Composite field without model")
        return from_wire(field_spec.model, value)

    if field_spec.type_name == "Sequence":
        if not isinstance(value, list):
            return Err(ModelError(owner, f"'{where}' must be a list"))
        items = cast(list[object], value)
        element = field_spec.element or "Object"
        for i, item in enumerate(items):
            if not _check_scalar(element, item):
                return Err(ModelError(owner, f"'{where}[{i}]' must be {element}"))
        return Ok(list(items))

    if not _check_scalar(field_spec.type_name, value):
        return Err(ModelError(owner, f"'{where}' must be {field_spec.type_name}"))
    return Ok(value)


def from_wire(cls: type[M], data: object) -> Result[M, ModelError]:
    """Build a model instance from a decoded JSON object."""
    mapper = cls.MAPPER
    obj = as_str_dict(data)
    if obj is None:
        return Err(ModelError(mapper.serialized_name, "expected a JSON object"))

    kwargs: dict[str, object] = {}
    for field_spec in mapper.fields:
        value = obj.get(field_spec.serialized_name)
        if value is None:
            if field_spec.required:
                return Err(
                    ModelError(
                        mapper.serialized_name,
                        f"missing required '{field_spec.serialized_name}'",
                    )
                )
            kwargs[field_spec.attr] = None
            continue
        decoded = _decode_value(field_spec, value, mapper.serialized_name)
        if isinstance(decoded, Err):
            return decoded
        kwargs[field_spec.attr] = decoded.value

    return Ok(cls(**kwargs))


def to_wire(model: WireModel) -> dict[str, object]:
    """Serialize a model instance, dropping unset optional fields."""
    out: dict[str, object] = {}
    for field_spec in model.MAPPER.fields:
        value = getattr(model, field_spec.attr)
        if value is None:
            if field_spec.required:
                raise ValueError(f"{model.MAPPER.serialized_name}: '{field_spec.attr}' is required")
            continue
        if field_spec.type_name == "Composite":
            out[field_spec.serialized_name] = to_wire(cast(WireModel, value))
        elif field_spec.type_name == "Sequence":
            out[field_spec.serialized_name] = list(value)
        else:
            out[field_spec.serialized_name] = value
    return out


# -----------------------------------------------------------------------------
# Upload service
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReleaseUploadResponse:
    """Upload session issued by ``POST .../deployments/{name}/uploads``."""

    id: str
    upload_domain: str
    token: str

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="ReleaseUploadResponse",
        fields=(
            FieldSpec("id", "id", "String", required=True),
            FieldSpec("upload_domain", "upload_domain", "String", required=True),
            FieldSpec("token", "token", "String", required=True),
        ),
    )


@dataclass(frozen=True, slots=True)
class SetMetadataResponse:
    id: str | None = None
    chunk_size: int | None = None
    chunk_list: list[int] | None = None
    blob_partitions: int | None = None
    resume_restart: bool | None = None
    status_code: str | None = None
    error: bool | None = None
    error_code: str | None = None

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="SetMetadataResponse",
        fields=(
            FieldSpec("id", "id", "String"),
            FieldSpec("chunk_size", "chunk_size", "Number"),
            FieldSpec("chunk_list", "chunk_list", "Sequence", element="Number"),
            FieldSpec("blob_partitions", "blob_partitions", "Number"),
            FieldSpec("resume_restart", "resume_restart", "Boolean"),
            FieldSpec("status_code", "status_code", "String"),
            FieldSpec("error", "error", "Boolean"),
            FieldSpec("error_code", "error_code", "String"),
        ),
    )


@dataclass(frozen=True, slots=True)
class UploadChunkResponse:
    """Reply to upload_chunk and finished calls."""

    error: bool | None = None
    chunk_num: int | None = None
    error_code: str | None = None
    state: str | None = None

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="UploadChunkResponse",
        fields=(
            FieldSpec("error", "error", "Boolean"),
            FieldSpec("chunk_num", "chunk_num", "Number"),
            FieldSpec("error_code", "error_code", "String"),
            FieldSpec("state", "state", "String"),
        ),
    )


# -----------------------------------------------------------------------------
# Apps, deployments, releases
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AppResponse:
    name: str | None = None
    display_name: str | None = None
    os: str | None = None
    platform: str | None = None

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="AppResponse",
        fields=(
            FieldSpec("name", "name", "String"),
            FieldSpec("display_name", "display_name", "String"),
            FieldSpec("os", "os", "String"),
            FieldSpec("platform", "platform", "String"),
        ),
    )


@dataclass(frozen=True, slots=True)
class DeploymentResponse:
    name: str | None = None
    key: str | None = None

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="DeploymentResponse",
        fields=(
            FieldSpec("name", "name", "String"),
            FieldSpec("key", "key", "String"),
        ),
    )


@dataclass(frozen=True, slots=True)
class CreateReleaseBody:
    """Body of ``POST .../deployments/{name}/releases``."""

    release_upload: ReleaseUploadResponse
    target_binary_version: str
    mandatory: bool | None = None
    disabled: bool | None = None
    description: str | None = None
    rollout: int | None = None

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="CreateReleaseBody",
        fields=(
            FieldSpec(
                "release_upload",
                "release_upload",
                "Composite",
                required=True,
                model=ReleaseUploadResponse,
            ),
            FieldSpec("target_binary_version", "target_binary_version", "String", required=True),
            FieldSpec("mandatory", "mandatory", "Boolean"),
            FieldSpec("disabled", "disabled", "Boolean"),
            FieldSpec("description", "description", "String"),
            FieldSpec("rollout", "rollout", "Number"),
        ),
    )


@dataclass(frozen=True, slots=True)
class CodePushReleaseResponse:
    """Stored release metadata echoed back by the releases endpoint."""

    label: str | None = None
    target_binary_range: str | None = None
    description: str | None = None
    is_disabled: bool | None = None
    is_mandatory: bool | None = None
    rollout: int | None = None
    package_hash: str | None = None
    blob_url: str | None = None
    size: int | None = None
    upload_time: int | None = None
    released_by: str | None = None
    release_method: str | None = None
    original_deployment: str | None = None
    original_label: str | None = None

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="CodePushReleaseResponse",
        fields=(
            FieldSpec("label", "label", "String"),
            FieldSpec("target_binary_range", "target_binary_range", "String"),
            FieldSpec("description", "description", "String"),
            FieldSpec("is_disabled", "is_disabled", "Boolean"),
            FieldSpec("is_mandatory", "is_mandatory", "Boolean"),
            FieldSpec("rollout", "rollout", "Number"),
            FieldSpec("package_hash", "package_hash", "String"),
            FieldSpec("blob_url", "blob_url", "String"),
            FieldSpec("size", "size", "Number"),
            FieldSpec("upload_time", "upload_time", "Number"),
            FieldSpec("released_by", "released_by", "String"),
            FieldSpec("release_method", "release_method", "String"),
            FieldSpec("original_deployment", "original_deployment", "String"),
            FieldSpec("original_label", "original_label", "String"),
        ),
    )


@dataclass(frozen=True, slots=True)
class ErrorDetails:
    """Error payload, either top level or nested under ``error``."""

    code: str | None = None
    message: str | None = None

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="ErrorDetails",
        fields=(
            FieldSpec("code", "code", "String"),
            FieldSpec("message", "message", "String"),
        ),
    )


# -----------------------------------------------------------------------------
# Auxiliary responses
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GdprExportFileSetFileOKResponse:
    path: str | None = None
    hash_file_id: str | None = None
    app_upload_id: str | None = None
    hash_file_url: str | None = None

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="GdprExportFileSetFileOKResponse",
        fields=(
            FieldSpec("path", "path", "String"),
            FieldSpec("hash_file_id", "hash_file_id", "Uuid"),
            FieldSpec("app_upload_id", "app_upload_id", "Uuid"),
            FieldSpec("hash_file_url", "hash_file_url", "String"),
        ),
    )


@dataclass(frozen=True, slots=True)
class GetPublishErrorOKResponse:
    """Release publish error: details plus whether logs can be downloaded."""

    message: str | None = None
    is_log_available: bool | None = None

    MAPPER: ClassVar[Mapper] = Mapper(
        serialized_name="GetPublishErrorOKResponse",
        fields=(
            FieldSpec("message", "message", "String"),
            FieldSpec("is_log_available", "is_log_available", "Boolean"),
        ),
    )
