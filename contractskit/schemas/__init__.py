"""Schema definitions, versions and validation for contractskit."""

from .definitions import (
    BASE_CONTRACT_SCHEMA,
    EVENT_CONTRACT_SCHEMA,
    API_CONTRACT_SCHEMA,
    DATA_MODEL_CONTRACT_SCHEMA,
    SCHEMAS,
)

from .schema_node import (
    FieldSchema,
    FieldType,
    SchemaNode,
)

from .validator import (
    SchemaValidator,
    ValidationError,
    ValidationResult,
    combine_validation_results,
    create_validation_error,
    get_validator,
    validate,
    validate_api_contract,
    validate_base_contract,
    validate_contract_id,
    validate_data_model_contract,
    validate_event_contract,
    validate_iso_datetime,
    validate_semantic_version,
)

from .version import (
    ContractVersion,
    VersionOrder,
    compare_prerelease,
    compare_versions,
    create_contract_version,
    latest_version,
    parse_version,
    sort_versions_descending,
)

__all__ = [
    'BASE_CONTRACT_SCHEMA',
    'EVENT_CONTRACT_SCHEMA',
    'API_CONTRACT_SCHEMA',
    'DATA_MODEL_CONTRACT_SCHEMA',
    'SCHEMAS',
    'FieldSchema',
    'FieldType',
    'SchemaNode',
    'SchemaValidator',
    'ValidationError',
    'ValidationResult',
    'combine_validation_results',
    'create_validation_error',
    'get_validator',
    'validate',
    'validate_api_contract',
    'validate_base_contract',
    'validate_contract_id',
    'validate_data_model_contract',
    'validate_event_contract',
    'validate_iso_datetime',
    'validate_semantic_version',
    'ContractVersion',
    'VersionOrder',
    'compare_prerelease',
    'compare_versions',
    'create_contract_version',
    'latest_version',
    'parse_version',
    'sort_versions_descending',
]
