"""
JSON Schema definitions for contracts.

Every contract document is checked against one of these before it is
published. The contract-kind schemas are an ``allOf`` of the base contract
schema and a kind-specific extension; that single level of extension is the
only composition the validator understands.

``version`` is listed as required but has no property entry: it may arrive
either as a version string or as decomposed fields, and is checked by a
dedicated rule against VERSION_SCHEMA.
"""
from .schema_node import SchemaNode

DRAFT_07 = "http://json-schema.org/draft-07/schema#"

CONTRACT_ID_PATTERN = "^[a-zA-Z0-9_-]+$"
EVENT_TYPE_PATTERN = "^[a-zA-Z0-9._-]+$"
MODEL_NAME_PATTERN = "^[A-Z][a-zA-Z0-9]*$"
VERSION_IDENTIFIER_PATTERN = "^[0-9A-Za-z.-]+$"

HTTP_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH"]
AUTH_TYPES = ["none", "bearer", "basic", "api-key", "oauth2"]
EVENT_PRIORITIES = ["low", "normal", "high", "critical"]
RULE_TYPES = ["min", "max", "pattern", "enum", "custom"]
REFERENTIAL_ACTIONS = ["cascade", "set-null", "restrict"]

# Decomposed semantic version
VERSION_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "ContractVersion",
    "type": "object",
    "required": ["major", "minor", "patch"],
    "properties": {
        "major": {"type": "integer", "minimum": 0, "description": "Major version number"},
        "minor": {"type": "integer", "minimum": 0, "description": "Minor version number"},
        "patch": {"type": "integer", "minimum": 0, "description": "Patch version number"},
        "prerelease": {"type": "string", "pattern": VERSION_IDENTIFIER_PATTERN, "description": "Prerelease identifier"},
        "build": {"type": "string", "pattern": VERSION_IDENTIFIER_PATTERN, "description": "Build metadata"}
    }
}

METADATA_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "ContractMetadata",
    "type": "object",
    "properties": {
        "author": {"type": "string", "description": "Author of the contract"},
        "tags": {"type": "array", "description": "Tags for categorization"},
        "documentationUrl": {"type": "string", "description": "External documentation URL"},
        "deprecated": {"type": "boolean", "description": "Whether the contract is deprecated"},
        "deprecationReason": {"type": "string", "description": "Reason for deprecation"}
    }
}

BASE_CONTRACT_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "BaseContract",
    "type": "object",
    "required": ["id", "version", "name", "metadata", "createdAt", "updatedAt"],
    "properties": {
        "id": {
            "type": "string",
            "pattern": CONTRACT_ID_PATTERN,
            "description": "Unique identifier for the contract"
        },
        "name": {
            "type": "string",
            "minLength": 1,
            "maxLength": 100,
            "description": "Human-readable name for the contract"
        },
        "description": {
            "type": "string",
            "maxLength": 500,
            "description": "Optional description of the contract"
        },
        "metadata": {"type": "object", "description": "Contract metadata"},
        "createdAt": {"type": "string", "description": "ISO 8601 creation timestamp"},
        "updatedAt": {"type": "string", "description": "ISO 8601 last-update timestamp"}
    }
}

EVENT_METADATA_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "EventMetadata",
    "type": "object",
    "properties": {
        "priority": {"type": "string", "enum": EVENT_PRIORITIES, "description": "Event priority level"},
        "category": {"type": "string", "description": "Event category"},
        "persistent": {"type": "boolean", "description": "Whether event should be persisted"},
        "ttl": {"type": "integer", "minimum": 0, "description": "Time to live in milliseconds"}
    }
}

EVENT_CONTRACT_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "EventContract",
    "allOf": [
        BASE_CONTRACT_SCHEMA,
        {
            "type": "object",
            "required": ["eventType", "payload"],
            "properties": {
                "eventType": {
                    "type": "string",
                    "pattern": EVENT_TYPE_PATTERN,
                    "description": "Event type identifier"
                },
                "payload": {"type": "object", "description": "Event payload schema"},
                "eventMetadata": {"type": "object", "description": "Event-specific metadata"}
            }
        }
    ]
}

AUTH_REQUIREMENTS_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "AuthRequirements",
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"type": "string", "enum": AUTH_TYPES, "description": "Authentication type"},
        "scopes": {"type": "array", "description": "Required scopes or permissions"},
        "optional": {"type": "boolean", "description": "Whether authentication is optional"}
    }
}

API_CONTRACT_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "ApiContract",
    "allOf": [
        BASE_CONTRACT_SCHEMA,
        {
            "type": "object",
            "required": ["method", "path"],
            "properties": {
                "method": {"type": "string", "enum": HTTP_METHODS, "description": "HTTP method"},
                "path": {"type": "string", "pattern": "^/.*", "description": "API endpoint path"},
                "requestSchema": {"type": "object", "description": "Request payload schema"},
                "responseSchema": {"type": "object", "description": "Response payload schema"},
                "auth": {"type": "object", "description": "Authentication requirements"}
            }
        }
    ]
}

FIELD_DEFINITION_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "FieldDefinition",
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"type": "string", "minLength": 1, "description": "Field type"},
        "required": {"type": "boolean", "description": "Whether field is required"},
        "description": {"type": "string", "description": "Field description"},
        "validation": {"type": "array", "description": "Validation rules for the field"}
    }
}

VALIDATION_RULE_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "ValidationRule",
    "type": "object",
    "required": ["type", "value"],
    "properties": {
        "type": {"type": "string", "enum": RULE_TYPES, "description": "Validation rule type"},
        "message": {"type": "string", "description": "Custom error message"}
    }
}

MODEL_CONSTRAINTS_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "ModelConstraints",
    "type": "object",
    "properties": {
        "unique": {"type": "array", "description": "Fields that must be unique"},
        "indexes": {"type": "array", "description": "Fields to be indexed"},
        "foreignKeys": {"type": "array", "description": "Foreign key relationships"}
    }
}

FOREIGN_KEY_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "ForeignKey",
    "type": "object",
    "required": ["field", "references", "referencedField"],
    "properties": {
        "field": {"type": "string", "description": "Local field name"},
        "references": {"type": "string", "description": "Referenced model name"},
        "referencedField": {"type": "string", "description": "Referenced field name"},
        "onDelete": {"type": "string", "enum": REFERENTIAL_ACTIONS, "description": "Behavior on delete"},
        "onUpdate": {"type": "string", "enum": REFERENTIAL_ACTIONS, "description": "Behavior on update"}
    }
}

DATA_MODEL_CONTRACT_SCHEMA = {
    "$schema": DRAFT_07,
    "title": "DataModelContract",
    "allOf": [
        BASE_CONTRACT_SCHEMA,
        {
            "type": "object",
            "required": ["modelName", "fields"],
            "properties": {
                "modelName": {
                    "type": "string",
                    "pattern": MODEL_NAME_PATTERN,
                    "description": "Model name (PascalCase)"
                },
                "fields": {"type": "object", "description": "Model field definitions"},
                "constraints": {"type": "object", "description": "Model constraints"}
            }
        }
    ]
}

# Compiled nodes, built once at import and shared read-only
VERSION_NODE = SchemaNode.from_definition(VERSION_SCHEMA)
METADATA_NODE = SchemaNode.from_definition(METADATA_SCHEMA)
BASE_CONTRACT_NODE = SchemaNode.from_definition(BASE_CONTRACT_SCHEMA)
EVENT_METADATA_NODE = SchemaNode.from_definition(EVENT_METADATA_SCHEMA)
EVENT_CONTRACT_NODE = SchemaNode.from_definition(EVENT_CONTRACT_SCHEMA)
AUTH_REQUIREMENTS_NODE = SchemaNode.from_definition(AUTH_REQUIREMENTS_SCHEMA)
API_CONTRACT_NODE = SchemaNode.from_definition(API_CONTRACT_SCHEMA)
FIELD_DEFINITION_NODE = SchemaNode.from_definition(FIELD_DEFINITION_SCHEMA)
VALIDATION_RULE_NODE = SchemaNode.from_definition(VALIDATION_RULE_SCHEMA)
MODEL_CONSTRAINTS_NODE = SchemaNode.from_definition(MODEL_CONSTRAINTS_SCHEMA)
FOREIGN_KEY_NODE = SchemaNode.from_definition(FOREIGN_KEY_SCHEMA)
DATA_MODEL_CONTRACT_NODE = SchemaNode.from_definition(DATA_MODEL_CONTRACT_SCHEMA)

SCHEMAS = {
    "base_contract": BASE_CONTRACT_SCHEMA,
    "event_contract": EVENT_CONTRACT_SCHEMA,
    "api_contract": API_CONTRACT_SCHEMA,
    "data_model_contract": DATA_MODEL_CONTRACT_SCHEMA,
}
