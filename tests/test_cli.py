"""Tests for the contractskit command line."""
import json

import pytest

from contractskit.cli import EXIT_INVALID, EXIT_OK, EXIT_USAGE, main

from conftest import make_event


@pytest.fixture
def contracts_file(tmp_path):
    path = tmp_path / "contracts.json"
    documents = [
        make_event("x", "1.0.0").to_dict(),
        make_event("x", "1.2.0").to_dict(),
        make_event("y", "9.0.0").to_dict(),
    ]
    path.write_text(json.dumps(documents))
    return path


@pytest.mark.parametrize("a,b,expected", [
    ("1.0.0-alpha.2", "1.0.0-alpha.10", "less"),
    ("1.0.0", "1.0.0-rc.1", "greater"),
    ("1.0.0+a", "1.0.0+b", "equal"),
])
def test_version_compare(capsys, a, b, expected):
    assert main(["version", "compare", a, b]) == EXIT_OK
    assert capsys.readouterr().out.strip() == expected


def test_version_sort(capsys):
    assert main(["version", "sort", "1.0.0", "2.0.0-rc.1", "1.2.0", "2.0.0"]) == EXIT_OK
    assert capsys.readouterr().out.split() == ["2.0.0", "2.0.0-rc.1", "1.2.0", "1.0.0"]


def test_invalid_version_is_a_usage_error(capsys):
    assert main(["version", "compare", "1.0", "1.0.0"]) == EXIT_USAGE
    assert "error:" in capsys.readouterr().err


def test_validate_ok(capsys, contracts_file):
    assert main(["validate", str(contracts_file)]) == EXIT_OK
    out = capsys.readouterr().out
    assert out.count("OK ") == 3
    assert "OK x (event)" in out


def test_validate_reports_errors(capsys, tmp_path):
    path = tmp_path / "broken.json"
    document = make_event("broken").to_dict()
    document["eventType"] = "invalid event type"
    path.write_text(json.dumps(document))

    assert main(["validate", str(path)]) == EXIT_INVALID
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "INVALID broken (event)"
    assert lines[1].startswith("  eventType: ")
    assert len(lines) == 2


def test_validate_with_explicit_kind(capsys, contracts_file):
    assert main(["validate", str(contracts_file), "--kind", "base"]) == EXIT_OK
    assert "(base)" in capsys.readouterr().out


def test_latest(capsys, contracts_file):
    assert main(["latest", str(contracts_file), "x"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "1.2.0"


def test_latest_unknown_id(capsys, contracts_file):
    assert main(["latest", str(contracts_file), "z"]) == EXIT_INVALID
    assert "No contract with id 'z'" in capsys.readouterr().err


def test_missing_file(capsys, tmp_path):
    assert main(["validate", str(tmp_path / "missing.json")]) == EXIT_USAGE
    assert "error:" in capsys.readouterr().err


def test_latest_with_malformed_record(capsys, tmp_path):
    document = make_event("x").to_dict()
    document["eventMetadata"] = "high"
    path = tmp_path / "malformed.json"
    path.write_text(json.dumps([document]))
    assert main(["latest", str(path), "x"]) == EXIT_USAGE
    assert "eventMetadata" in capsys.readouterr().err
