"""Contract documents, metadata and registry operations."""

from .metadata import ContractMetadata, merge_metadata

from .documents import (
    ApiContract,
    AuthRequirements,
    ContractDocument,
    ContractKind,
    DataModelContract,
    EventContract,
    EventMetadata,
    FieldDefinition,
    ForeignKey,
    ModelConstraints,
    ValidationRule,
    contract_from_dict,
    create_api_contract,
    create_base_contract,
    create_data_model_contract,
    create_event_contract,
    infer_kind,
    update_contract,
    update_contract_timestamp,
)

from .operations import (
    ContractRegistry,
    clone_contract,
    filter_contracts_by_tag,
    find_latest_contract_version,
    generate_contract_id,
    get_contract_tags_string,
    is_contract_deprecated,
    sort_contracts_by_version,
)

__all__ = [
    'ContractMetadata',
    'merge_metadata',
    'ApiContract',
    'AuthRequirements',
    'ContractDocument',
    'ContractKind',
    'DataModelContract',
    'EventContract',
    'EventMetadata',
    'FieldDefinition',
    'ForeignKey',
    'ModelConstraints',
    'ValidationRule',
    'contract_from_dict',
    'create_api_contract',
    'create_base_contract',
    'create_data_model_contract',
    'create_event_contract',
    'infer_kind',
    'update_contract',
    'update_contract_timestamp',
    'ContractRegistry',
    'clone_contract',
    'filter_contracts_by_tag',
    'find_latest_contract_version',
    'generate_contract_id',
    'get_contract_tags_string',
    'is_contract_deprecated',
    'sort_contracts_by_version',
]
