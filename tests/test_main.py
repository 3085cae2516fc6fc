from __future__ import annotations

import json
from pathlib import Path

import pytest

from kingraph.main import load_records, main

Capture = pytest.CaptureFixture[str]

RECORDS = [
    {"id": "A", "name": "Alice", "birth_date": "1900", "spouse_ids": ["B"]},
    {"id": "B", "name": "Bob"},
    {"id": "C", "name": "Carol", "birth_date": "1890", "father_id": "B", "mother_id": "A"},
]


@pytest.fixture()
def records_file(tmp_path: Path) -> Path:
    path = tmp_path / "family.json"
    path.write_text(json.dumps(RECORDS), encoding="utf-8")
    return path


def test_load_records(records_file: Path) -> None:
    records = load_records(records_file)
    assert [r.id for r in records] == ["A", "B", "C"]
    assert records[0].spouse_ids == ("B",)


def test_relationship_command(records_file: Path, capsys: Capture) -> None:
    assert main([str(records_file), "relationship", "A", "C"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["description"] == "Child"
    assert data["status"] == "related"
    assert [step["person_id"] for step in data["path"]] == ["A", "C"]


def test_relationship_with_unknown_person(records_file: Path, capsys: Capture) -> None:
    assert main([str(records_file), "relationship", "A", "Z"]) == 1
    assert json.loads(capsys.readouterr().out)["status"] == "person_not_found"


def test_layout_command(records_file: Path, capsys: Capture) -> None:
    argv = [str(records_file), "layout", "A", "--tree-type", "full", "--layout-type", "compact"]
    assert main(argv) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["engine"] == "family-chart"
    assert data["options"]["node_spacing_x"] == 150
    assert {p["person_id"] for p in data["positions"]} == {"A", "B", "C"}


def test_layout_with_unknown_root(records_file: Path, capsys: Capture) -> None:
    assert main([str(records_file), "layout", "Z"]) == 1
    assert "Z" in capsys.readouterr().err


def test_layout_with_invalid_spacing(records_file: Path, capsys: Capture) -> None:
    assert main([str(records_file), "layout", "A", "--spacing-x", "-5"]) == 1
    assert "node_spacing_x must be positive" in capsys.readouterr().err


def test_neighbourhood_command(records_file: Path, capsys: Capture) -> None:
    assert main([str(records_file), "neighbourhood", "A", "--radius", "1"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["center"] == "A"
    assert [p["person_id"] for p in data["persons"]] == ["A", "B", "C"]
    assert data["persons"][0]["name"] == "Alice"
    assert {"from": "A", "to": "B", "type": "spouse"} in data["edges"]
    assert {"from": "A", "to": "C", "type": "parent"} in data["edges"]
    assert len(data["edges"]) == 3

    assert main([str(records_file), "neighbourhood", "C", "--radius", "0"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["persons"] == [{"person_id": "C", "name": "Carol"}]
    assert data["edges"] == []


def test_neighbourhood_errors(records_file: Path, capsys: Capture) -> None:
    assert main([str(records_file), "neighbourhood", "Z"]) == 1
    assert main([str(records_file), "neighbourhood", "A", "--radius", "-1"]) == 1
    assert "radius must be non-negative" in capsys.readouterr().err


def test_validate_flag_reports_on_stderr(records_file: Path, capsys: Capture) -> None:
    assert main([str(records_file), "--validate", "relationship", "B", "A"]) == 0

    captured = capsys.readouterr()
    assert "Carol born before parent Alice" in captured.err
    assert json.loads(captured.out)["description"] == "Spouse"


@pytest.mark.parametrize(
    "content",
    [
        '{"id": "A"}',
        '[{"name": "nobody"}]',
        '["A", "B"]',
        '[{"id": "A"}, 7]',
        '[{"id": "X", "parent_ids": 5}]',
        "not json",
    ],
    ids=["object", "no-id", "strings", "number", "scalar-id-list", "invalid-json"],
)
def test_bad_input_files(tmp_path: Path, capsys: Capture, content: str) -> None:
    path = tmp_path / "records.json"
    path.write_text(content, encoding="utf-8")

    assert main([str(path), "relationship", "A", "B"]) == 2
    assert "Could not load records" in capsys.readouterr().err


def test_missing_file(tmp_path: Path, capsys: Capture) -> None:
    assert main([str(tmp_path / "missing.json"), "relationship", "A", "B"]) == 2
    assert "Could not load records" in capsys.readouterr().err


def test_malformed_record_is_named(tmp_path: Path) -> None:
    path = tmp_path / "records.json"
    path.write_text('[{"id": "A"}, "B"]', encoding="utf-8")

    with pytest.raises(ValueError, match="record 1 is not an object"):
        load_records(path)
