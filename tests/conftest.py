"""Shared fixtures for the contractskit test suite."""
import logging
from datetime import datetime, timezone

import pytest

from contractskit import config
from contractskit.registry.documents import (
    ApiContract,
    DataModelContract,
    EventContract,
    FieldDefinition,
)
from contractskit.registry.metadata import ContractMetadata
from contractskit.schemas.version import ContractVersion

FIXED_TIME = datetime(2024, 1, 15, 10, 30, 0, 123000, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config loader at an empty per-test directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("CONTRACTSKIT_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("CONTRACTSKIT_LOG_LEVEL", raising=False)
    monkeypatch.delenv("CONTRACTSKIT_DEFAULT_AUTHOR", raising=False)
    # dropped, not reloaded: a test may leave a broken config.json behind
    monkeypatch.setattr(config, "_config_cache", None)
    yield config_dir
    logging.getLogger("contractskit").handlers.clear()


def make_event(contract_id="user-created-event", version="1.0.0", tags=(), **overrides):
    fields = dict(
        id=contract_id,
        version=ContractVersion.parse(version),
        name="User Created",
        metadata=ContractMetadata(author="platform", tags=tuple(tags), deprecated=False),
        created_at=FIXED_TIME,
        updated_at=FIXED_TIME,
        event_type="user.created",
        payload={"userId": {"type": "string"}},
    )
    fields.update(overrides)
    return EventContract(**fields)


@pytest.fixture
def event_contract():
    return make_event()


@pytest.fixture
def api_contract():
    return ApiContract(
        id="list-users",
        version=ContractVersion(2, 1, 0),
        name="List Users",
        metadata=ContractMetadata(author="platform", tags=("users",), deprecated=False),
        created_at=FIXED_TIME,
        updated_at=FIXED_TIME,
        method="GET",
        path="/api/users",
    )


@pytest.fixture
def data_model_contract():
    return DataModelContract(
        id="user-model",
        version=ContractVersion(1, 0, 0),
        name="User",
        metadata=ContractMetadata(author="platform", deprecated=False),
        created_at=FIXED_TIME,
        updated_at=FIXED_TIME,
        model_name="UserModel",
        fields={
            "id": FieldDefinition(type="string", required=True),
            "email": FieldDefinition(type="string", description="Primary email"),
        },
    )
