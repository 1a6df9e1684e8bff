"""
Structural validation of contract documents.

``validate`` walks a document against a SchemaNode and collects every
problem it finds instead of stopping at the first one. Field constraints
are checked by jsonschema; each failed keyword is turned into a
ValidationError with a readable message. The contract entry
points add kind-specific rules on top (id format, PascalCase model names,
API paths, nested version/metadata records).

Data problems are always returned in a ValidationResult. Only a malformed
schema raises (SchemaDefinitionError).
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..errors import SchemaDefinitionError
from ..timestamps import ISO_DATETIME_PATTERN, format_timestamp, try_parse_timestamp
from .definitions import (
    API_CONTRACT_NODE,
    AUTH_REQUIREMENTS_NODE,
    BASE_CONTRACT_NODE,
    CONTRACT_ID_PATTERN,
    DATA_MODEL_CONTRACT_NODE,
    EVENT_CONTRACT_NODE,
    EVENT_METADATA_NODE,
    EVENT_TYPE_PATTERN,
    FIELD_DEFINITION_NODE,
    FOREIGN_KEY_NODE,
    METADATA_NODE,
    MODEL_CONSTRAINTS_NODE,
    MODEL_NAME_PATTERN,
    VALIDATION_RULE_NODE,
    VERSION_NODE,
)
from .schema_node import FieldSchema, FieldType, SchemaNode
from .version import ContractVersion

logger = logging.getLogger(__name__)

# Strict semver.org grammar (no leading zeros), used by the boolean helper only
STRICT_SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

_CONTRACT_ID_RE = re.compile(CONTRACT_ID_PATTERN)
_EVENT_TYPE_RE = re.compile(EVENT_TYPE_PATTERN)
_MODEL_NAME_RE = re.compile(MODEL_NAME_PATTERN)

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


@dataclass(frozen=True)
class ValidationError:
    """A single problem found in a document."""
    path: str
    message: str
    value: Any = None
    expected: Any = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"path": self.path, "message": self.message}
        if self.value is not None:
            result["value"] = self.value
        if self.expected is not None:
            result["expected"] = self.expected
        return result

    def prefixed(self, prefix: str) -> "ValidationError":
        path = f"{prefix}.{self.path}" if self.path else prefix
        return ValidationError(path, self.message, self.value, self.expected)

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


@dataclass(frozen=True)
class ValidationResult:
    """Aggregated outcome; ``valid`` is derived from ``errors``."""
    errors: Tuple[ValidationError, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "errors", tuple(self.errors))

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def paths(self) -> List[str]:
        return [error.path for error in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": [error.to_dict() for error in self.errors]}


def create_validation_error(path: str, message: str, value: Any = None,
                            expected: Any = None) -> ValidationError:
    return ValidationError(path, message, value, expected)


def combine_validation_results(*results: ValidationResult) -> ValidationResult:
    """Concatenate errors in argument order."""
    return ValidationResult(tuple(error for result in results for error in result.errors))


def _is_missing(document: Mapping[str, Any], name: str) -> bool:
    return document.get(name) is None


def _field_error(name: str, value: Any, schema: FieldSchema, keyword: str) -> ValidationError:
    """Map a failed jsonschema keyword to a contract validation error."""
    if keyword == "type":
        return ValidationError(name, f"Field '{name}' must be of type {schema.type.value}", value, schema.type.value)
    if keyword == "minLength":
        return ValidationError(name, f"Field '{name}' must be at least {schema.min_length} characters long",
                               value, f"minimum {schema.min_length} characters")
    if keyword == "maxLength":
        return ValidationError(name, f"Field '{name}' must be at most {schema.max_length} characters long",
                               value, f"maximum {schema.max_length} characters")
    if keyword == "enum":
        allowed = ", ".join(str(v) for v in schema.enum_values)
        return ValidationError(name, f"Field '{name}' must be one of: {allowed}", value, list(schema.enum_values))
    if keyword == "pattern":
        return ValidationError(name, f"Field '{name}' must match pattern {schema.pattern}", value, schema.pattern)
    if keyword == "minimum":
        return ValidationError(name, f"Field '{name}' must be at least {schema.minimum}", value, f"minimum {schema.minimum}")
    if keyword == "maximum":
        return ValidationError(name, f"Field '{name}' must be at most {schema.maximum}", value, f"maximum {schema.maximum}")
    return ValidationError(name, f"Field '{name}' failed '{keyword}'", value)


def _check_field(name: str, value: Any, schema: FieldSchema) -> List[ValidationError]:
    return [_field_error(name, value, schema, error.validator) for error in schema.iter_errors(value)]


def validate(document: Any, schema: SchemaNode) -> ValidationResult:
    """
    Validate a document against a schema node.

    Required-field errors come first, in required order, followed by the
    per-field checks in schema property order. A field whose value is
    None counts as absent.

    Raises:
        SchemaDefinitionError: if ``schema`` is not a SchemaNode.
    """
    if not isinstance(schema, SchemaNode):
        raise SchemaDefinitionError(f"Expected a SchemaNode, got {type(schema).__name__}")
    if not isinstance(document, Mapping):
        return ValidationResult((ValidationError(
            "", "Document must be an object", document, FieldType.OBJECT.value
        ),))

    errors: List[ValidationError] = []
    for name in schema.effective_required():
        if _is_missing(document, name):
            errors.append(ValidationError(name, f"Required field '{name}' is missing", expected="defined value"))

    for name, field_schema in schema.effective_fields().items():
        if _is_missing(document, name):
            continue
        errors.extend(_check_field(name, document[name], field_schema))

    if errors:
        logger.debug("Document failed %s with %d error(s)", schema.title or "schema", len(errors))
    return ValidationResult(tuple(errors))


# Kind-specific rules. Each takes the wire dict and returns its errors.

Rule = Callable[[Mapping[str, Any]], List[ValidationError]]


def _nested(document: Mapping[str, Any], key: str, node: SchemaNode) -> List[ValidationError]:
    value = document.get(key)
    if not isinstance(value, Mapping):
        return []
    return [error.prefixed(key) for error in validate(value, node).errors]


def _string_items(document: Mapping[str, Any], key: str, path: str) -> List[ValidationError]:
    items = document.get(key)
    if not isinstance(items, (list, tuple)):
        return []
    if all(isinstance(item, str) for item in items):
        return []
    return [ValidationError(path, f"Field '{key}' must contain only strings", list(items), "array of strings")]


def _version_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    value = document.get("version")
    if value is None:
        return []
    if isinstance(value, str):
        if ContractVersion.try_parse(value) is None:
            return [ValidationError("version", "Invalid semantic version", value,
                                    "MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]")]
        return []
    if isinstance(value, Mapping):
        return _nested(document, "version", VERSION_NODE)
    return [ValidationError("version", "Field 'version' must be a version string or object",
                            value, "string or object")]


def _metadata_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    errors = _nested(document, "metadata", METADATA_NODE)
    metadata = document.get("metadata")
    if isinstance(metadata, Mapping):
        errors.extend(_string_items(metadata, "tags", "metadata.tags"))
    return errors


def _timestamp_rule(name: str) -> Rule:
    def check(document: Mapping[str, Any]) -> List[ValidationError]:
        value = document.get(name)
        if isinstance(value, str) and not validate_iso_datetime(value):
            return [ValidationError(name, "Invalid ISO 8601 timestamp", value, "YYYY-MM-DDTHH:MM:SS[.mmm]Z")]
        return []
    return check


def _contract_id_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    value = document.get("id")
    if isinstance(value, str) and not _CONTRACT_ID_RE.fullmatch(value):
        return [ValidationError("id", "Invalid contract ID format", value,
                                "alphanumeric characters, hyphens, and underscores only")]
    return []


def _name_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    value = document.get("name")
    if not isinstance(value, str):
        return []
    if not value:
        return [ValidationError("name", "Contract name cannot be empty", value, "at least 1 character")]
    if len(value) > MAX_NAME_LENGTH:
        return [ValidationError("name", f"Contract name must be {MAX_NAME_LENGTH} characters or less",
                                value, f"maximum {MAX_NAME_LENGTH} characters")]
    return []


def _description_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    value = document.get("description")
    if isinstance(value, str) and len(value) > MAX_DESCRIPTION_LENGTH:
        return [ValidationError("description", f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less",
                                value, f"maximum {MAX_DESCRIPTION_LENGTH} characters")]
    return []


def _event_type_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    value = document.get("eventType")
    if isinstance(value, str) and not _EVENT_TYPE_RE.fullmatch(value):
        return [ValidationError("eventType", "Invalid event type format", value,
                                "alphanumeric characters, dots, underscores, and hyphens only")]
    return []


def _event_metadata_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    return _nested(document, "eventMetadata", EVENT_METADATA_NODE)


def _api_path_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    value = document.get("path")
    if isinstance(value, str) and not value.startswith("/"):
        return [ValidationError("path", "API path must start with '/'", value, "path starting with '/'")]
    return []


def _auth_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    errors = _nested(document, "auth", AUTH_REQUIREMENTS_NODE)
    auth = document.get("auth")
    if isinstance(auth, Mapping):
        errors.extend(_string_items(auth, "scopes", "auth.scopes"))
    return errors


def _model_name_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    value = document.get("modelName")
    if isinstance(value, str) and not _MODEL_NAME_RE.fullmatch(value):
        return [ValidationError("modelName", "Model name must be PascalCase", value,
                                "PascalCase format (e.g., 'UserModel')")]
    return []


def _fields_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    fields = document.get("fields")
    if not isinstance(fields, Mapping):
        return []
    if not fields:
        return [ValidationError("fields", "Data model must have at least one field", {}, "at least one field")]

    errors = []
    for name, definition in fields.items():
        path = f"fields.{name}"
        if not isinstance(definition, Mapping):
            errors.append(ValidationError(path, "Field definition must be an object", definition, "object"))
            continue
        errors.extend(error.prefixed(path) for error in validate(definition, FIELD_DEFINITION_NODE).errors)
        rules = definition.get("validation")
        if isinstance(rules, (list, tuple)):
            for index, rule in enumerate(rules):
                rule_path = f"{path}.validation[{index}]"
                if not isinstance(rule, Mapping):
                    errors.append(ValidationError(rule_path, "Validation rule must be an object", rule, "object"))
                    continue
                errors.extend(error.prefixed(rule_path) for error in validate(rule, VALIDATION_RULE_NODE).errors)
    return errors


def _constraints_rule(document: Mapping[str, Any]) -> List[ValidationError]:
    errors = _nested(document, "constraints", MODEL_CONSTRAINTS_NODE)
    constraints = document.get("constraints")
    if not isinstance(constraints, Mapping):
        return errors
    errors.extend(_string_items(constraints, "unique", "constraints.unique"))
    errors.extend(_string_items(constraints, "indexes", "constraints.indexes"))
    foreign_keys = constraints.get("foreignKeys")
    if isinstance(foreign_keys, (list, tuple)):
        for index, key in enumerate(foreign_keys):
            path = f"constraints.foreignKeys[{index}]"
            if not isinstance(key, Mapping):
                errors.append(ValidationError(path, "Foreign key must be an object", key, "object"))
                continue
            errors.extend(error.prefixed(path) for error in validate(key, FOREIGN_KEY_NODE).errors)
    return errors


BASE_RULES: Tuple[Rule, ...] = (
    _contract_id_rule,
    _name_rule,
    _description_rule,
    _version_rule,
    _metadata_rule,
    _timestamp_rule("createdAt"),
    _timestamp_rule("updatedAt"),
)
EVENT_RULES: Tuple[Rule, ...] = BASE_RULES + (_event_type_rule, _event_metadata_rule)
API_RULES: Tuple[Rule, ...] = BASE_RULES + (_api_path_rule, _auth_rule)
DATA_MODEL_RULES: Tuple[Rule, ...] = BASE_RULES + (_model_name_rule, _fields_rule, _constraints_rule)


def apply_rules(document: Any, rules: Iterable[Rule]) -> ValidationResult:
    """Run every rule; a rule never stops the ones after it."""
    if not isinstance(document, Mapping):
        return ValidationResult()
    errors: List[ValidationError] = []
    for rule in rules:
        errors.extend(rule(document))
    return ValidationResult(tuple(errors))


def _merge_passes(schema_result: ValidationResult, rule_result: ValidationResult) -> ValidationResult:
    # one report per path: rule errors on paths the schema pass flagged are dropped
    flagged = set(schema_result.paths)
    extra = tuple(error for error in rule_result.errors if error.path not in flagged)
    return ValidationResult(schema_result.errors + extra)


def _as_wire(contract: Any) -> Any:
    to_dict = getattr(contract, "to_dict", None)
    if callable(to_dict) and not isinstance(contract, Mapping):
        return to_dict()
    return contract


class SchemaValidator:
    """Validate documents against named schemas and their rule sets."""

    SCHEMAS = {
        "base_contract": (BASE_CONTRACT_NODE, BASE_RULES),
        "event_contract": (EVENT_CONTRACT_NODE, EVENT_RULES),
        "api_contract": (API_CONTRACT_NODE, API_RULES),
        "data_model_contract": (DATA_MODEL_CONTRACT_NODE, DATA_MODEL_RULES),
    }

    def __init__(self):
        self._schemas: Dict[str, Tuple[SchemaNode, Tuple[Rule, ...]]] = dict(self.SCHEMAS)

    def register(self, name: str, schema: SchemaNode, rules: Iterable[Rule] = ()) -> None:
        """Add or replace a named schema."""
        if not isinstance(schema, SchemaNode):
            raise SchemaDefinitionError(f"Expected a SchemaNode for '{name}', got {type(schema).__name__}")
        self._schemas[name] = (schema, tuple(rules))

    @property
    def schema_names(self) -> List[str]:
        return list(self._schemas)

    def get_schema(self, name: str) -> SchemaNode:
        if name not in self._schemas:
            raise KeyError(f"Unknown schema: {name}")
        return self._schemas[name][0]

    def validate(self, data: Any, schema_name: str) -> ValidationResult:
        """
        Validate data (a wire dict or a contract document) against a named schema.

        Raises:
            KeyError: if no schema is registered under ``schema_name``.
        """
        if schema_name not in self._schemas:
            raise KeyError(f"Unknown schema: {schema_name}")
        node, rules = self._schemas[schema_name]
        document = _as_wire(data)
        result = _merge_passes(validate(document, node), apply_rules(document, rules))
        if not result.valid:
            logger.debug("%s validation failed: %s", schema_name, "; ".join(str(e) for e in result.errors))
        return result

    def validate_base_contract(self, data: Any) -> ValidationResult:
        return self.validate(data, "base_contract")

    def validate_event_contract(self, data: Any) -> ValidationResult:
        return self.validate(data, "event_contract")

    def validate_api_contract(self, data: Any) -> ValidationResult:
        return self.validate(data, "api_contract")

    def validate_data_model_contract(self, data: Any) -> ValidationResult:
        return self.validate(data, "data_model_contract")


# Module-level validator for convenience
_default_validator = None


def get_validator() -> SchemaValidator:
    """Get singleton validator instance."""
    global _default_validator
    if _default_validator is None:
        _default_validator = SchemaValidator()
    return _default_validator


def validate_base_contract(contract: Any) -> ValidationResult:
    return get_validator().validate_base_contract(contract)


def validate_event_contract(contract: Any) -> ValidationResult:
    return get_validator().validate_event_contract(contract)


def validate_api_contract(contract: Any) -> ValidationResult:
    return get_validator().validate_api_contract(contract)


def validate_data_model_contract(contract: Any) -> ValidationResult:
    return get_validator().validate_data_model_contract(contract)


def validate_contract_id(contract_id: Any) -> bool:
    return isinstance(contract_id, str) and _CONTRACT_ID_RE.fullmatch(contract_id) is not None


def validate_semantic_version(version: Any) -> bool:
    """Strict semver.org check (no leading zeros in numeric identifiers)."""
    return isinstance(version, str) and STRICT_SEMVER_PATTERN.fullmatch(version) is not None


def validate_iso_datetime(text: Any) -> bool:
    """True for ``YYYY-MM-DDTHH:MM:SS[.mmm]Z`` strings naming a real instant that round-trip."""
    if not isinstance(text, str) or not ISO_DATETIME_PATTERN.fullmatch(text):
        return False
    parsed = try_parse_timestamp(text)
    if parsed is None:
        return False
    return try_parse_timestamp(format_timestamp(parsed)) == parsed
