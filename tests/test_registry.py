"""Tests for contract documents, metadata merging and registry operations."""
import json
import logging
import re

import pytest

from contractskit.config import reload_config
from contractskit.errors import DocumentFormatError
from contractskit.registry.documents import (
    ApiContract,
    ContractKind,
    DataModelContract,
    EventContract,
    EventMetadata,
    contract_from_dict,
    create_api_contract,
    create_base_contract,
    create_data_model_contract,
    infer_kind,
    update_contract,
    update_contract_timestamp,
)
from contractskit.registry.metadata import ContractMetadata, merge_metadata
from contractskit.registry.operations import (
    ContractRegistry,
    clone_contract,
    filter_contracts_by_tag,
    find_latest_contract_version,
    generate_contract_id,
    get_contract_tags_string,
    is_contract_deprecated,
    sort_contracts_by_version,
)
from contractskit.schemas.validator import validate_contract_id
from contractskit.schemas.version import ContractVersion

from conftest import FIXED_TIME, make_event


class TestDocuments:

    def test_round_trip_through_wire_dict(self, event_contract, api_contract, data_model_contract):
        for contract in (event_contract, api_contract, data_model_contract):
            restored = contract_from_dict(contract.to_dict())
            assert type(restored) is type(contract)
            assert restored == contract

    def test_wire_shape(self, event_contract):
        data = event_contract.to_dict()
        assert data["version"] == {"major": 1, "minor": 0, "patch": 0}
        assert data["createdAt"] == "2024-01-15T10:30:00.123Z"
        assert data["metadata"] == {"tags": [], "author": "platform", "deprecated": False}
        assert data["eventType"] == "user.created"
        assert "description" not in data
        json.dumps(data)

    def test_event_metadata_survives_round_trip(self):
        contract = make_event(event_metadata=EventMetadata(priority="high", ttl=60000))
        data = contract.to_dict()
        assert data["eventMetadata"] == {"priority": "high", "ttl": 60000}
        assert contract_from_dict(data).event_metadata == EventMetadata(priority="high", ttl=60000)

    def test_version_string_is_read(self, event_contract):
        data = event_contract.to_dict()
        data["version"] = "2.0.0-beta.1"
        assert contract_from_dict(data).version == ContractVersion(2, 0, 0, prerelease="beta.1")

    def test_infer_kind(self, event_contract, api_contract, data_model_contract):
        assert infer_kind(event_contract.to_dict()) is ContractKind.EVENT
        assert infer_kind(api_contract.to_dict()) is ContractKind.API
        assert infer_kind(data_model_contract.to_dict()) is ContractKind.DATA_MODEL
        assert infer_kind({"id": "x"}) is ContractKind.BASE
        assert ContractKind.DATA_MODEL.schema_name == "data_model_contract"

    def test_explicit_kind(self, event_contract):
        restored = contract_from_dict(event_contract.to_dict(), kind="base")
        assert restored.kind is ContractKind.BASE
        assert "eventType" not in restored.to_dict()

    @pytest.mark.parametrize("data", [
        ["not", "a", "mapping"],
        {"id": "x", "version": "one"},
        {"id": "x", "version": {"major": 1}},
        {"id": "x", "version": 3},
        {"id": "x", "version": "1.0.0", "createdAt": "Monday"},
    ])
    def test_unreadable_records(self, data):
        with pytest.raises(DocumentFormatError):
            contract_from_dict(data)

    @pytest.mark.parametrize("key,value", [
        ("eventMetadata", "high"),
        ("metadata", "platform"),
    ])
    def test_malformed_event_records(self, event_contract, key, value):
        data = event_contract.to_dict()
        data[key] = value
        with pytest.raises(DocumentFormatError):
            contract_from_dict(data)

    def test_malformed_tags(self, event_contract):
        data = event_contract.to_dict()
        data["metadata"]["tags"] = "users"
        with pytest.raises(DocumentFormatError):
            contract_from_dict(data)

    @pytest.mark.parametrize("key,value", [
        ("auth", "bearer"),
        ("auth", {"type": "bearer", "scopes": "read"}),
    ])
    def test_malformed_api_records(self, api_contract, key, value):
        data = api_contract.to_dict()
        data[key] = value
        with pytest.raises(DocumentFormatError):
            contract_from_dict(data)

    @pytest.mark.parametrize("key,value", [
        ("fields", {"a": "string"}),
        ("fields", ["a"]),
        ("fields", {"a": {"type": "string", "validation": "min"}}),
        ("fields", {"a": {"type": "string", "validation": ["min"]}}),
        ("constraints", ["x"]),
        ("constraints", {"foreignKeys": ["orgId"]}),
        ("constraints", {"unique": "email"}),
    ])
    def test_malformed_data_model_records(self, data_model_contract, key, value):
        data = data_model_contract.to_dict()
        data[key] = value
        with pytest.raises(DocumentFormatError):
            contract_from_dict(data)

    def test_empty_nested_records_read_as_absent(self, api_contract):
        data = api_contract.to_dict()
        data["auth"] = {}
        assert contract_from_dict(data).auth is None

    def test_update_refreshes_timestamp(self, event_contract):
        updated = update_contract_timestamp(event_contract)
        assert updated.created_at == FIXED_TIME
        assert updated.updated_at > FIXED_TIME
        assert event_contract.updated_at == FIXED_TIME

        renamed = update_contract(event_contract, name="Renamed")
        assert renamed.name == "Renamed"
        assert renamed.id == event_contract.id
        assert renamed.updated_at > FIXED_TIME

    def test_factories_stamp_defaults(self):
        base = create_base_contract("base-1", "Base")
        assert base.version == ContractVersion(1, 0, 0)
        assert base.metadata.author == "Unknown"
        assert base.metadata.deprecated is False
        assert base.created_at == base.updated_at

        api = create_api_contract("get-user", "Get User", "GET", "/users/{id}", version="1.1.0",
                                  metadata=ContractMetadata(author="api-team", tags=["users"]))
        assert isinstance(api, ApiContract)
        assert api.metadata.author == "api-team"
        assert api.metadata.tags == ("users",)

        model = create_data_model_contract("user", "User", "User", {"id": {"type": "string", "required": True}})
        assert isinstance(model, DataModelContract)
        assert model.fields["id"].required is True

    def test_key_and_version_string(self, api_contract):
        assert api_contract.key == "list-users@2.1.0"
        assert api_contract.version_string == "2.1.0"


class TestMetadata:

    def test_merge_prefers_override_and_unions_tags(self):
        base = ContractMetadata(author="alice", tags=("b", "a"), documentation_url="https://docs", deprecated=False)
        override = ContractMetadata(tags=("c", "a"), deprecated=True, deprecation_reason="replaced by v2")
        merged = merge_metadata(base, override)
        assert merged.author == "alice"
        assert merged.tags == ("a", "b", "c")
        assert merged.documentation_url == "https://docs"
        assert merged.deprecated is True
        assert merged.deprecation_reason == "replaced by v2"
        assert base.tags == ("b", "a")
        assert override.author is None

    def test_explicit_false_overrides(self):
        merged = merge_metadata(ContractMetadata(deprecated=True), ContractMetadata(deprecated=False))
        assert merged.deprecated is False

    def test_reason_without_deprecation_is_kept(self):
        metadata = ContractMetadata(deprecation_reason="legacy naming")
        assert not metadata.is_deprecated
        assert metadata.to_dict() == {"tags": [], "deprecationReason": "legacy naming"}

    def test_lists_become_tuples(self):
        assert ContractMetadata(tags=["x"]).tags == ("x",)
        assert ContractMetadata.from_dict(None) == ContractMetadata()


class TestOperations:

    def test_filter_by_tag_keeps_input_order(self):
        a = make_event("a", tags=("users",))
        b = make_event("b")
        c = make_event("c", tags=("billing", "users"))
        assert filter_contracts_by_tag([a, b, c], "users") == [a, c]
        assert filter_contracts_by_tag([a, b, c], "none") == []

    def test_sort_by_version_is_stable(self):
        first = make_event("first", "1.0.0")
        newest = make_event("newest", "2.0.0")
        second = make_event("second", "1.0.0+build")
        items = [first, newest, second]
        assert sort_contracts_by_version(items) == [newest, first, second]
        assert [c.id for c in sort_contracts_by_version(items)] == ["newest", "first", "second"]
        assert items[0] is first

    def test_find_latest_version(self):
        contracts = [make_event("x", "1.0.0"), make_event("x", "1.2.0"), make_event("y", "9.0.0")]
        latest = find_latest_contract_version(contracts, "x")
        assert latest.version_string == "1.2.0"
        assert find_latest_contract_version(contracts, "z") is None
        assert find_latest_contract_version([], "x") is None

    def test_latest_prefers_release_over_prerelease(self):
        contracts = [make_event("x", "2.0.0-rc.1"), make_event("x", "2.0.0"), make_event("x", "1.9.0")]
        assert find_latest_contract_version(contracts, "x").version_string == "2.0.0"

    def test_clone_is_independent(self, event_contract):
        clone = clone_contract(event_contract)
        assert clone == event_contract
        assert clone is not event_contract
        clone.payload["extra"] = {"type": "number"}
        assert "extra" not in event_contract.payload

    def test_deprecation_and_tags_string(self):
        contract = make_event(tags=("users", "auth"))
        assert get_contract_tags_string(contract) == "users, auth"
        assert not is_contract_deprecated(contract)
        deprecated = update_contract(contract, metadata=ContractMetadata(deprecated=True))
        assert is_contract_deprecated(deprecated)

    def test_generated_ids(self):
        contract_id = generate_contract_id()
        assert re.fullmatch(r"[0-9a-z]+-[0-9a-z]{6}", contract_id)
        assert validate_contract_id(contract_id)
        assert generate_contract_id("evt").startswith("evt-")
        assert generate_contract_id() != generate_contract_id()

    def test_generated_id_prefix_from_config(self, isolated_config):
        (isolated_config / "config.json").write_text(json.dumps({"contracts": {"id_prefix": "svc"}}))
        reload_config()
        assert generate_contract_id().startswith("svc-")
        assert generate_contract_id("evt").startswith("evt-")


class TestContractRegistry:

    def test_lookup_by_id(self):
        registry = ContractRegistry([
            make_event("x", "1.0.0"), make_event("y", "9.0.0"), make_event("x", "1.2.0"),
        ])
        assert len(registry) == 3
        assert registry.ids == ["x", "y"]
        assert "x" in registry
        assert "z" not in registry
        assert registry.latest("x").version_string == "1.2.0"
        assert [c.version_string for c in registry.versions("x")] == ["1.2.0", "1.0.0"]

    def test_same_id_and_version_is_replaced(self, caplog):
        registry = ContractRegistry()
        registry.add(make_event("x", "1.0.0"))
        with caplog.at_level(logging.WARNING, logger="contractskit"):
            registry.add(make_event("x", "1.0.0", name="Renamed"))
        assert len(registry) == 1
        assert next(iter(registry)).name == "Renamed"
        assert "x@1.0.0" in caplog.text

    def test_tags_and_deprecation(self):
        registry = ContractRegistry([
            make_event("a", tags=("users",)),
            make_event("b", metadata=ContractMetadata(deprecated=True, tags=("users",))),
        ])
        assert [c.id for c in registry.by_tag("users")] == ["a", "b"]
        assert [c.id for c in registry.deprecated()] == ["b"]

    def test_validate_all(self, event_contract, api_contract):
        broken = make_event("broken", event_type="bad type")
        registry = ContractRegistry([event_contract, api_contract, broken])
        results = registry.validate_all()
        assert list(results) == ["user-created-event@1.0.0", "list-users@2.1.0", "broken@1.0.0"]
        assert results["user-created-event@1.0.0"].valid
        assert results["list-users@2.1.0"].valid
        assert results["broken@1.0.0"].paths == ["eventType"]

    def test_export(self, event_contract):
        registry = ContractRegistry([event_contract])
        exported = registry.export()
        assert exported == [event_contract.to_dict()]
        assert isinstance(contract_from_dict(exported[0]), EventContract)
