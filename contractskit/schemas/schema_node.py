"""
Declarative schema nodes for the structural validator.

A SchemaNode lists required fields and per-field constraints. It may
extend exactly one base node; the effective schema is the union of both,
with the derived node winning on key collisions. There is no deeper
composition and no $ref resolution.

Nodes are usually compiled from JSON-schema style definition dicts (see
``definitions.py``); the dict is checked against the draft-07 meta-schema
with jsonschema before it is compiled. Each field's constraints are then
enforced by a jsonschema validator built from the field's own schema.
"""
import enum
import re
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from jsonschema import Draft7Validator, validators
from jsonschema.exceptions import SchemaError, ValidationError as JsonSchemaValidationError

from ..errors import SchemaDefinitionError

# Draft-07 with tuples accepted as arrays and any Mapping as an object
_TYPE_CHECKER = Draft7Validator.TYPE_CHECKER.redefine_many({
    "array": lambda checker, instance: isinstance(instance, (list, tuple)),
    "object": lambda checker, instance: isinstance(instance, MappingABC),
})
FieldValidator = validators.extend(Draft7Validator, type_checker=_TYPE_CHECKER)


class FieldType(str, enum.Enum):
    """Closed set of JSON-like primitive shapes."""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"

    def matches(self, value: Any) -> bool:
        """Whether a runtime value has this shape."""
        return FieldValidator.TYPE_CHECKER.is_type(value, self.value)


def _check_bound(name: str, value: Any, field_name: str) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SchemaDefinitionError(f"'{name}' must be a non-negative integer, got {value!r}", field_name)


@dataclass(frozen=True)
class FieldSchema:
    """Constraints for a single field."""
    type: FieldType
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    enum_values: Optional[Tuple[Any, ...]] = None
    pattern: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    description: Optional[str] = None
    name: str = ""
    _validator: Any = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.type is None:
            raise SchemaDefinitionError("Field schema is missing its 'type'", self.name)
        try:
            object.__setattr__(self, "type", FieldType(self.type))
        except ValueError:
            raise SchemaDefinitionError(f"Unknown field type {self.type!r}", self.name) from None
        _check_bound("minLength", self.min_length, self.name)
        _check_bound("maxLength", self.max_length, self.name)
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise SchemaDefinitionError("'minLength' is greater than 'maxLength'", self.name)
        if self.enum_values is not None:
            if isinstance(self.enum_values, (str, bytes)) or not isinstance(self.enum_values, Iterable):
                raise SchemaDefinitionError("'enum' must be a list of values", self.name)
            object.__setattr__(self, "enum_values", tuple(self.enum_values))
        if self.pattern is not None:
            try:
                re.compile(self.pattern)
            except (re.error, TypeError) as e:
                raise SchemaDefinitionError(f"Invalid pattern {self.pattern!r}: {e}", self.name) from None
        for bound in ("minimum", "maximum"):
            value = getattr(self, bound)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise SchemaDefinitionError(f"'{bound}' must be a number, got {value!r}", self.name)
        object.__setattr__(self, "_validator", FieldValidator(self._check_schema()))

    def iter_errors(self, value: Any) -> Iterator[JsonSchemaValidationError]:
        """jsonschema errors for ``value``, in constraint declaration order."""
        return self._validator.iter_errors(value)

    def _check_schema(self) -> Dict[str, Any]:
        # patterns must match the whole value, not just a substring
        schema = self.to_json_schema()
        if self.pattern is not None:
            schema["pattern"] = f"^(?:{self.pattern})\\Z"
        return schema

    @classmethod
    def from_definition(cls, name: str, definition: Mapping[str, Any]) -> "FieldSchema":
        if not isinstance(definition, Mapping):
            raise SchemaDefinitionError("Field schema must be an object", name)
        if "type" not in definition:
            raise SchemaDefinitionError("Field schema is missing its 'type'", name)
        return cls(
            type=definition["type"],
            min_length=definition.get("minLength"),
            max_length=definition.get("maxLength"),
            enum_values=definition.get("enum"),
            pattern=definition.get("pattern"),
            minimum=definition.get("minimum"),
            maximum=definition.get("maximum"),
            description=definition.get("description"),
            name=name,
        )

    def to_json_schema(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type.value}
        if self.min_length is not None:
            result["minLength"] = self.min_length
        if self.max_length is not None:
            result["maxLength"] = self.max_length
        if self.enum_values is not None:
            result["enum"] = list(self.enum_values)
        if self.pattern is not None:
            result["pattern"] = self.pattern
        if self.minimum is not None:
            result["minimum"] = self.minimum
        if self.maximum is not None:
            result["maximum"] = self.maximum
        if self.description:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class SchemaNode:
    """
    Required fields plus field constraints, optionally extending a base.

    ``field_schemas`` keeps declaration order, which is the order errors
    are reported in.
    """
    required_fields: Tuple[str, ...] = ()
    field_schemas: Mapping[str, FieldSchema] = field(default_factory=dict)
    extends: Optional["SchemaNode"] = None
    title: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "required_fields", tuple(self.required_fields))
        object.__setattr__(self, "field_schemas", dict(self.field_schemas))
        for name, schema in self.field_schemas.items():
            if not isinstance(schema, FieldSchema):
                raise SchemaDefinitionError("Field schema must be a FieldSchema", name)
        if self.extends is not None:
            if not isinstance(self.extends, SchemaNode):
                raise SchemaDefinitionError("A schema can only extend another SchemaNode")
            if self.extends.extends is not None:
                raise SchemaDefinitionError("Schema composition is limited to one level of extension")

    def effective_required(self) -> Tuple[str, ...]:
        """Base required fields first, then the derived ones, without repeats."""
        names: List[str] = []
        for source in (self.extends, self):
            if source is None:
                continue
            for name in source.required_fields:
                if name not in names:
                    names.append(name)
        return tuple(names)

    def effective_fields(self) -> Dict[str, FieldSchema]:
        """Base fields in base order, overridden or extended by the derived node."""
        merged: Dict[str, FieldSchema] = {}
        if self.extends is not None:
            merged.update(self.extends.field_schemas)
        merged.update(self.field_schemas)
        return merged

    def extend(self, required_fields: Iterable[str] = (),
               field_schemas: Optional[Mapping[str, FieldSchema]] = None,
               title: Optional[str] = None) -> "SchemaNode":
        return SchemaNode(tuple(required_fields), field_schemas or {}, extends=self, title=title)

    @classmethod
    def from_definition(cls, definition: Mapping[str, Any]) -> "SchemaNode":
        """
        Compile a JSON-schema style dict.

        Understands ``required`` and ``properties``, or an ``allOf`` of
        exactly two such dicts read as (base, extension).

        Raises:
            SchemaDefinitionError: when the dict fails the draft-07
                meta-schema, uses deeper composition, or a property lacks
                a usable type.
        """
        if not isinstance(definition, Mapping):
            raise SchemaDefinitionError("Schema definition must be an object")
        try:
            Draft7Validator.check_schema(definition)
        except SchemaError as e:
            raise SchemaDefinitionError(f"Schema definition is not valid JSON Schema: {e.message}") from None

        if "allOf" in definition:
            parts = definition["allOf"]
            if len(parts) != 2:
                raise SchemaDefinitionError("'allOf' must hold exactly a base and an extension")
            base, extension = parts
            if "allOf" in base or "allOf" in extension:
                raise SchemaDefinitionError("Schema composition is limited to one level of extension")
            return cls._from_flat(extension, extends=cls._from_flat(base),
                                  title=definition.get("title"))
        return cls._from_flat(definition)

    @classmethod
    def _from_flat(cls, definition: Mapping[str, Any], extends: Optional["SchemaNode"] = None,
                   title: Optional[str] = None) -> "SchemaNode":
        properties = definition.get("properties", {})
        fields = {name: FieldSchema.from_definition(name, spec) for name, spec in properties.items()}
        return cls(
            required_fields=tuple(definition.get("required", ())),
            field_schemas=fields,
            extends=extends,
            title=title or definition.get("title"),
        )

    def to_json_schema(self) -> Dict[str, Any]:
        """Flattened draft-07 schema of the effective constraints."""
        result: Dict[str, Any] = {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "required": list(self.effective_required()),
            "properties": {name: schema.to_json_schema() for name, schema in self.effective_fields().items()},
        }
        if self.title:
            result["title"] = self.title
        return result
