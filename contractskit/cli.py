"""
contractskit command line.

Usage:
    contractskit validate contracts.json [--kind event]
    contractskit version compare 1.0.0-alpha.2 1.0.0-alpha.10
    contractskit version sort 1.0.0 2.0.0-rc.1 1.2.0
    contractskit latest contracts.json user-created-event
"""
import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from .errors import ContractsKitError
from .log import setup_logging
from .registry.documents import ContractKind, contract_from_dict, infer_kind
from .registry.operations import find_latest_contract_version
from .schemas.validator import get_validator
from .schemas.version import ContractVersion, sort_versions_descending

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


def _load_documents(path: str) -> List[Any]:
    with open(path, "r") as f:
        data = json.load(f)
    return data if isinstance(data, list) else [data]


def cmd_validate(args) -> int:
    documents = _load_documents(args.file)
    validator = get_validator()
    failures = 0
    for index, document in enumerate(documents):
        kind = ContractKind(args.kind) if args.kind else (
            infer_kind(document) if isinstance(document, dict) else ContractKind.BASE
        )
        label = document.get("id", f"#{index}") if isinstance(document, dict) else f"#{index}"
        result = validator.validate(document, kind.schema_name)
        if result.valid:
            print(f"OK {label} ({kind.value})")
            continue
        failures += 1
        print(f"INVALID {label} ({kind.value})")
        for error in result.errors:
            print(f"  {error}")
    logger.info("Validated %d document(s), %d invalid", len(documents), failures)
    return EXIT_INVALID if failures else EXIT_OK


def cmd_version_compare(args) -> int:
    order = ContractVersion.parse(args.a).compare(ContractVersion.parse(args.b))
    print(order)
    return EXIT_OK


def cmd_version_sort(args) -> int:
    versions = [ContractVersion.parse(text) for text in args.versions]
    for version in sort_versions_descending(versions):
        print(version)
    return EXIT_OK


def cmd_latest(args) -> int:
    contracts = [contract_from_dict(document) for document in _load_documents(args.file)]
    latest = find_latest_contract_version(contracts, args.id)
    if latest is None:
        print(f"No contract with id '{args.id}'", file=sys.stderr)
        return EXIT_INVALID
    print(latest.version)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contractskit", description="Contract schema validation tools")
    parser.add_argument("--log-level", default=None, help="Log level (default from config)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Validate contract documents in a JSON file")
    validate_parser.add_argument("file", help="JSON file holding one contract or a list of contracts")
    validate_parser.add_argument("--kind", choices=[kind.value for kind in ContractKind],
                                 help="Contract kind (inferred from the document when omitted)")
    validate_parser.set_defaults(func=cmd_validate)

    version_parser = subparsers.add_parser("version", help="Compare or sort semantic versions")
    version_subparsers = version_parser.add_subparsers(dest="version_command", required=True)
    compare_parser = version_subparsers.add_parser("compare", help="Print less, equal or greater")
    compare_parser.add_argument("a")
    compare_parser.add_argument("b")
    compare_parser.set_defaults(func=cmd_version_compare)
    sort_parser = version_subparsers.add_parser("sort", help="Print versions newest first")
    sort_parser.add_argument("versions", nargs="+")
    sort_parser.set_defaults(func=cmd_version_sort)

    latest_parser = subparsers.add_parser("latest", help="Print the latest version of a contract id")
    latest_parser.add_argument("file", help="JSON file holding a list of contracts")
    latest_parser.add_argument("id", help="Contract id")
    latest_parser.set_defaults(func=cmd_latest)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        setup_logging(level=args.log_level)
        return args.func(args)
    except (OSError, json.JSONDecodeError, ContractsKitError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
