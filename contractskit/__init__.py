"""
contractskit - shared contract schemas and validation

Language-agnostic contracts for events, APIs and data models:
- Semantic versions with prerelease-aware ordering
- Schema-driven structural validation with aggregated error reports
- Contract documents, metadata merging and registry operations
"""

__version__ = "0.3.0"

from .errors import ContractsKitError, SchemaDefinitionError, VersionParseError
from .schemas.schema_node import SchemaNode
from .schemas.validator import SchemaValidator, ValidationResult, validate
from .schemas.version import ContractVersion, compare_versions, parse_version
from .registry.metadata import ContractMetadata, merge_metadata
from .registry.operations import ContractRegistry

__all__ = [
    "ContractsKitError",
    "SchemaDefinitionError",
    "VersionParseError",
    "SchemaNode",
    "SchemaValidator",
    "ValidationResult",
    "validate",
    "ContractVersion",
    "compare_versions",
    "parse_version",
    "ContractMetadata",
    "merge_metadata",
    "ContractRegistry",
]
