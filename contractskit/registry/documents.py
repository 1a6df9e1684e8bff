"""
Contract documents: event, API and data-model contracts.

Every kind shares the ContractDocument fields and adds its own. Documents
are value objects: construction never validates or fails on bad data,
and updates return new documents with a refreshed ``updated_at``.

``to_dict`` produces the wire shape shared with other runtimes (camelCase
keys, decomposed version, ISO 8601 timestamps); ``contract_from_dict``
reads it back.
"""
import enum
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type, Union

from ..config import get_contract_config
from ..errors import DocumentFormatError, VersionParseError
from ..schemas.version import ContractVersion
from ..timestamps import format_timestamp, now_utc, parse_timestamp
from .metadata import ContractMetadata

logger = logging.getLogger(__name__)

VersionLike = Union[ContractVersion, str]


class ContractKind(str, enum.Enum):
    BASE = "base"
    EVENT = "event"
    API = "api"
    DATA_MODEL = "data_model"

    @property
    def schema_name(self) -> str:
        return f"{self.value}_contract"


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def _mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DocumentFormatError(f"Field '{path}' must be an object, got {type(value).__name__}")
    return value


def _sequence(value: Any, path: str) -> Tuple[Any, ...]:
    """A list field as a tuple; absent means empty."""
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise DocumentFormatError(f"Field '{path}' must be a list, got {type(value).__name__}")
    return tuple(value)


def _optional_record(data: Mapping[str, Any], key: str, record_type):
    """Read a nested record; absent or empty means None."""
    value = data.get(key)
    if value is None:
        return None
    value = _mapping(value, key)
    return record_type.from_dict(value) if value else None


# Event-specific records

@dataclass(frozen=True)
class EventMetadata:
    priority: Optional[str] = None  # low | normal | high | critical
    category: Optional[str] = None
    persistent: Optional[bool] = None
    ttl: Optional[int] = None  # milliseconds

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "priority": self.priority,
            "category": self.category,
            "persistent": self.persistent,
            "ttl": self.ttl,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EventMetadata":
        return cls(
            priority=data.get("priority"),
            category=data.get("category"),
            persistent=data.get("persistent"),
            ttl=data.get("ttl"),
        )


# API-specific records

@dataclass(frozen=True)
class AuthRequirements:
    type: str = "none"  # none | bearer | basic | api-key | oauth2
    scopes: Tuple[str, ...] = ()
    optional: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type}
        if self.scopes:
            result["scopes"] = list(self.scopes)
        if self.optional is not None:
            result["optional"] = self.optional
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuthRequirements":
        return cls(
            type=data.get("type", "none"),
            scopes=_sequence(data.get("scopes"), "auth.scopes"),
            optional=data.get("optional"),
        )


# Data-model records

@dataclass(frozen=True)
class ValidationRule:
    type: str  # min | max | pattern | enum | custom
    value: Any = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"type": self.type, "value": self.value}
        if self.message is not None:
            result["message"] = self.message
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ValidationRule":
        return cls(type=data.get("type"), value=data.get("value"), message=data.get("message"))


@dataclass(frozen=True)
class FieldDefinition:
    type: str
    required: Optional[bool] = None
    default: Any = None
    description: Optional[str] = None
    validation: Tuple[ValidationRule, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        result = _drop_none({
            "type": self.type,
            "required": self.required,
            "default": self.default,
            "description": self.description,
        })
        if self.validation:
            result["validation"] = [rule.to_dict() for rule in self.validation]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldDefinition":
        return cls(
            type=data.get("type"),
            required=data.get("required"),
            default=data.get("default"),
            description=data.get("description"),
            validation=tuple(
                ValidationRule.from_dict(_mapping(rule, f"validation[{index}]"))
                for index, rule in enumerate(_sequence(data.get("validation"), "validation"))
            ),
        )


@dataclass(frozen=True)
class ForeignKey:
    field: str
    references: str
    referenced_field: str
    on_delete: Optional[str] = None  # cascade | set-null | restrict
    on_update: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "field": self.field,
            "references": self.references,
            "referencedField": self.referenced_field,
            "onDelete": self.on_delete,
            "onUpdate": self.on_update,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ForeignKey":
        return cls(
            field=data.get("field"),
            references=data.get("references"),
            referenced_field=data.get("referencedField"),
            on_delete=data.get("onDelete"),
            on_update=data.get("onUpdate"),
        )


@dataclass(frozen=True)
class ModelConstraints:
    unique: Tuple[str, ...] = ()
    indexes: Tuple[str, ...] = ()
    foreign_keys: Tuple[ForeignKey, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.unique:
            result["unique"] = list(self.unique)
        if self.indexes:
            result["indexes"] = list(self.indexes)
        if self.foreign_keys:
            result["foreignKeys"] = [key.to_dict() for key in self.foreign_keys]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelConstraints":
        return cls(
            unique=_sequence(data.get("unique"), "constraints.unique"),
            indexes=_sequence(data.get("indexes"), "constraints.indexes"),
            foreign_keys=tuple(
                ForeignKey.from_dict(_mapping(key, f"constraints.foreignKeys[{index}]"))
                for index, key in enumerate(_sequence(data.get("foreignKeys"), "constraints.foreignKeys"))
            ),
        )


# Documents

@dataclass(frozen=True, kw_only=True)
class ContractDocument:
    """Fields shared by every contract kind."""
    kind: ClassVar[ContractKind] = ContractKind.BASE

    id: str
    version: ContractVersion
    name: str
    description: Optional[str] = None
    metadata: ContractMetadata = field(default_factory=ContractMetadata)
    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)

    def common_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "version": self.version.to_dict(),
            "name": self.name,
        }
        if self.description is not None:
            result["description"] = self.description
        result["metadata"] = self.metadata.to_dict()
        result["createdAt"] = format_timestamp(self.created_at)
        result["updatedAt"] = format_timestamp(self.updated_at)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return self.common_dict()

    @property
    def version_string(self) -> str:
        return self.version.format()

    @property
    def key(self) -> str:
        """``<id>@<version>``, unique within a well-formed registry."""
        return f"{self.id}@{self.version.format()}"

    @classmethod
    def kind_fields(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True, kw_only=True)
class EventContract(ContractDocument):
    kind: ClassVar[ContractKind] = ContractKind.EVENT

    event_type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    event_metadata: Optional[EventMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        result = self.common_dict()
        result["eventType"] = self.event_type
        result["payload"] = self.payload
        if self.event_metadata is not None:
            result["eventMetadata"] = self.event_metadata.to_dict()
        return result

    @classmethod
    def kind_fields(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "event_type": data.get("eventType"),
            "payload": data.get("payload") or {},
            "event_metadata": _optional_record(data, "eventMetadata", EventMetadata),
        }


@dataclass(frozen=True, kw_only=True)
class ApiContract(ContractDocument):
    kind: ClassVar[ContractKind] = ContractKind.API

    method: str
    path: str
    request_schema: Optional[Dict[str, Any]] = None
    response_schema: Optional[Dict[str, Any]] = None
    auth: Optional[AuthRequirements] = None

    def to_dict(self) -> Dict[str, Any]:
        result = self.common_dict()
        result["method"] = self.method
        result["path"] = self.path
        if self.request_schema is not None:
            result["requestSchema"] = self.request_schema
        if self.response_schema is not None:
            result["responseSchema"] = self.response_schema
        if self.auth is not None:
            result["auth"] = self.auth.to_dict()
        return result

    @classmethod
    def kind_fields(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "method": data.get("method"),
            "path": data.get("path"),
            "request_schema": data.get("requestSchema"),
            "response_schema": data.get("responseSchema"),
            "auth": _optional_record(data, "auth", AuthRequirements),
        }


@dataclass(frozen=True, kw_only=True)
class DataModelContract(ContractDocument):
    kind: ClassVar[ContractKind] = ContractKind.DATA_MODEL

    model_name: str
    fields: Dict[str, FieldDefinition] = field(default_factory=dict)
    constraints: Optional[ModelConstraints] = None

    def to_dict(self) -> Dict[str, Any]:
        result = self.common_dict()
        result["modelName"] = self.model_name
        result["fields"] = {name: definition.to_dict() for name, definition in self.fields.items()}
        if self.constraints is not None:
            result["constraints"] = self.constraints.to_dict()
        return result

    @classmethod
    def kind_fields(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "model_name": data.get("modelName"),
            "fields": _field_definitions(data.get("fields") or {}),
            "constraints": _optional_record(data, "constraints", ModelConstraints),
        }


DOCUMENT_TYPES: Dict[ContractKind, Type[ContractDocument]] = {
    ContractKind.BASE: ContractDocument,
    ContractKind.EVENT: EventContract,
    ContractKind.API: ApiContract,
    ContractKind.DATA_MODEL: DataModelContract,
}


def _field_definitions(fields: Any) -> Dict[str, FieldDefinition]:
    return {
        name: definition if isinstance(definition, FieldDefinition)
        else FieldDefinition.from_dict(_mapping(definition, f"fields.{name}"))
        for name, definition in _mapping(fields, "fields").items()
    }


def infer_kind(data: Mapping[str, Any]) -> ContractKind:
    """Guess the contract kind of a wire dict from its kind-specific keys."""
    if "eventType" in data:
        return ContractKind.EVENT
    if "modelName" in data or "fields" in data:
        return ContractKind.DATA_MODEL
    if "method" in data or "path" in data:
        return ContractKind.API
    return ContractKind.BASE


def _coerce_version(value: Any) -> ContractVersion:
    if isinstance(value, ContractVersion):
        return value
    if isinstance(value, str):
        return ContractVersion.parse(value)
    if isinstance(value, Mapping):
        try:
            return ContractVersion.from_dict(value)
        except (KeyError, TypeError, ValueError) as e:
            raise DocumentFormatError(f"Invalid version record {dict(value)!r}: {e}") from None
    raise DocumentFormatError(f"Version must be a string or object, got {type(value).__name__}")


def _read_timestamp(data: Mapping[str, Any], key: str) -> datetime:
    value = data.get(key)
    if value is None:
        return now_utc()
    if isinstance(value, datetime):
        return value
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise DocumentFormatError(f"Field '{key}': {e}") from None


def contract_from_dict(data: Any, kind: Optional[ContractKind] = None) -> ContractDocument:
    """
    Build a contract document from its wire dict.

    Raises:
        DocumentFormatError: if ``data`` is not a mapping, its version or
            timestamps cannot be read, or a nested record or list has the
            wrong shape. Other problems are left for the validator to report.
    """
    if not isinstance(data, Mapping):
        raise DocumentFormatError(f"Contract must be an object, got {type(data).__name__}")
    kind = ContractKind(kind) if kind is not None else infer_kind(data)
    try:
        version = _coerce_version(data.get("version"))
    except VersionParseError as e:
        raise DocumentFormatError(str(e)) from None

    metadata = data.get("metadata")
    document_type = DOCUMENT_TYPES[kind]
    return document_type(
        id=data.get("id"),
        version=version,
        name=data.get("name"),
        description=data.get("description"),
        metadata=ContractMetadata.from_dict(None if metadata is None else _mapping(metadata, "metadata")),
        created_at=_read_timestamp(data, "createdAt"),
        updated_at=_read_timestamp(data, "updatedAt"),
        **document_type.kind_fields(data),
    )


def _stamp(id: str, name: str, version: Optional[VersionLike],
           metadata: Optional[ContractMetadata], description: Optional[str]) -> Dict[str, Any]:
    """Common fields for a new contract, stamped with the current time."""
    config = get_contract_config()
    if version is None:
        version = config["default_version"]
    now = now_utc()
    return {
        "id": id,
        "name": name,
        "version": _coerce_version(version),
        "description": description,
        "metadata": (metadata or ContractMetadata()).with_defaults(author=config["default_author"]),
        "created_at": now,
        "updated_at": now,
    }


def create_base_contract(id: str, name: str, version: Optional[VersionLike] = None,
                         metadata: Optional[ContractMetadata] = None,
                         description: Optional[str] = None) -> ContractDocument:
    return ContractDocument(**_stamp(id, name, version, metadata, description))


def create_event_contract(id: str, name: str, event_type: str, payload_schema: Optional[Dict[str, Any]] = None,
                          version: Optional[VersionLike] = None, metadata: Optional[ContractMetadata] = None,
                          description: Optional[str] = None,
                          event_metadata: Optional[EventMetadata] = None) -> EventContract:
    """Create an event contract. Defaults: version from config (1.0.0), author "Unknown"."""
    return EventContract(
        **_stamp(id, name, version, metadata, description),
        event_type=event_type,
        payload=dict(payload_schema or {}),
        event_metadata=event_metadata,
    )


def create_api_contract(id: str, name: str, method: str, path: str,
                        version: Optional[VersionLike] = None, metadata: Optional[ContractMetadata] = None,
                        description: Optional[str] = None,
                        request_schema: Optional[Dict[str, Any]] = None,
                        response_schema: Optional[Dict[str, Any]] = None,
                        auth: Optional[AuthRequirements] = None) -> ApiContract:
    return ApiContract(
        **_stamp(id, name, version, metadata, description),
        method=method,
        path=path,
        request_schema=request_schema,
        response_schema=response_schema,
        auth=auth,
    )


def create_data_model_contract(id: str, name: str, model_name: str, fields: Mapping[str, Any],
                               version: Optional[VersionLike] = None,
                               metadata: Optional[ContractMetadata] = None,
                               description: Optional[str] = None,
                               constraints: Optional[ModelConstraints] = None) -> DataModelContract:
    """``fields`` may hold FieldDefinition objects or their wire dicts."""
    return DataModelContract(
        **_stamp(id, name, version, metadata, description),
        model_name=model_name,
        fields=_field_definitions(fields),
        constraints=constraints,
    )


def update_contract(contract: ContractDocument, **changes: Any) -> ContractDocument:
    """New document with ``changes`` applied and ``updated_at`` refreshed."""
    changes.setdefault("updated_at", now_utc())
    return replace(contract, **changes)


def update_contract_timestamp(contract: ContractDocument) -> ContractDocument:
    return update_contract(contract)
