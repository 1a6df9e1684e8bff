"""Operations over collections of contract documents."""
import copy
import logging
import random
import string
import time
from typing import Dict, Iterable, List, Optional, TypeVar

from ..config import get_contract_config
from ..schemas.validator import ValidationResult, get_validator
from ..schemas.version import latest_version, sort_versions_descending
from .documents import ContractDocument

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=ContractDocument)

_BASE36_DIGITS = string.digits + string.ascii_lowercase


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_contract_id(prefix: Optional[str] = None) -> str:
    """
    ``[<prefix>-]<base36 ms timestamp>-<6 base36 random chars>``.

    Uniqueness is advisory only (time plus randomness); callers that need a
    guarantee must check against their own store. ``prefix`` falls back to
    the configured ``contracts.id_prefix``.
    """
    if prefix is None:
        prefix = get_contract_config().get("id_prefix")
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choice(_BASE36_DIGITS) for _ in range(6))
    contract_id = f"{timestamp}-{suffix}"
    return f"{prefix}-{contract_id}" if prefix else contract_id


def filter_contracts_by_tag(contracts: Iterable[D], tag: str) -> List[D]:
    """Contracts carrying ``tag``, in input order."""
    return [contract for contract in contracts if tag in contract.metadata.tags]


def sort_contracts_by_version(contracts: Iterable[D]) -> List[D]:
    """New list, newest version first; equal versions keep input order."""
    return sort_versions_descending(contracts, key=lambda contract: contract.version)


def find_latest_contract_version(contracts: Iterable[D], contract_id: str) -> Optional[D]:
    """Highest version among contracts with this id, or None."""
    return latest_version(
        contracts,
        predicate=lambda contract: contract.id == contract_id,
        key=lambda contract: contract.version,
    )


def clone_contract(contract: D) -> D:
    """Deep copy sharing no mutable structure with the original."""
    return copy.deepcopy(contract)


def is_contract_deprecated(contract: ContractDocument) -> bool:
    return contract.metadata.is_deprecated


def get_contract_tags_string(contract: ContractDocument) -> str:
    return ", ".join(contract.metadata.tags)


class ContractRegistry:
    """
    In-memory collection of contract documents.

    Several versions of the same contract id may be held at once; lookups
    by id resolve to the highest version. Documents are stored as given
    and treated as immutable.
    """

    def __init__(self, contracts: Iterable[ContractDocument] = ()):
        self._contracts: List[ContractDocument] = []
        for contract in contracts:
            self.add(contract)

    def add(self, contract: ContractDocument) -> ContractDocument:
        """Register a document. A second document with the same id and version replaces the first."""
        for index, existing in enumerate(self._contracts):
            if existing.id == contract.id and existing.version == contract.version:
                logger.warning("Replacing contract %s", contract.key)
                self._contracts[index] = contract
                return contract
        self._contracts.append(contract)
        return contract

    def __len__(self) -> int:
        return len(self._contracts)

    def __iter__(self):
        return iter(list(self._contracts))

    def __contains__(self, contract_id: object) -> bool:
        return any(contract.id == contract_id for contract in self._contracts)

    @property
    def ids(self) -> List[str]:
        """Distinct contract ids in registration order."""
        seen: Dict[str, None] = {}
        for contract in self._contracts:
            seen.setdefault(contract.id, None)
        return list(seen)

    def versions(self, contract_id: str) -> List[ContractDocument]:
        """All versions of a contract, newest first."""
        return sort_contracts_by_version(c for c in self._contracts if c.id == contract_id)

    def latest(self, contract_id: str) -> Optional[ContractDocument]:
        return find_latest_contract_version(self._contracts, contract_id)

    def by_tag(self, tag: str) -> List[ContractDocument]:
        return filter_contracts_by_tag(self._contracts, tag)

    def deprecated(self) -> List[ContractDocument]:
        return [contract for contract in self._contracts if is_contract_deprecated(contract)]

    def validate_all(self) -> Dict[str, ValidationResult]:
        """Validate every document against the schema of its kind, keyed by ``<id>@<version>``."""
        validator = get_validator()
        results = {}
        for contract in self._contracts:
            results[contract.key] = validator.validate(contract, contract.kind.schema_name)
        invalid = sum(1 for result in results.values() if not result.valid)
        if invalid:
            logger.warning("%d of %d contracts failed validation", invalid, len(results))
        return results

    def export(self) -> List[dict]:
        """Wire dicts for every document, in registration order."""
        return [contract.to_dict() for contract in self._contracts]
