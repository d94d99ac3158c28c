import asyncio
from datetime import datetime, timezone
from pathlib import Path

import orjson

from adoption import (
    create_export_data,
    generate_export_filename,
    import_adoption_state,
    parse_import_content,
    parse_import_file,
    validate_import_data,
)

NOW = datetime(2025, 12, 31, 23, 59, 59, 123456, tzinfo=timezone.utc)


def _doc(**overrides) -> bytes:
    doc = {"version": "1.0.0", "exportedAt": "2025-01-01T00:00:00.000Z", "adoptedPractices": ["a", "b"]}
    doc.update(overrides)
    return orjson.dumps(doc)


def test_filename() -> None:
    assert generate_export_filename(NOW) == "cd-practices-adoption-2025-12-31.cdpa"
    assert generate_export_filename().endswith(".cdpa")


def test_export_document() -> None:
    data = create_export_data({"b", "a"}, 3, now=NOW)
    assert data["$schema"] == "https://json-schema.org/draft-07/schema#"
    assert data["version"] == "1.0.0"
    assert data["exportedAt"] == "2025-12-31T23:59:59.123Z"
    assert data["adoptedPractices"] == ["a", "b"]
    assert data["metadata"] == {
        "totalPractices": 3,
        "adoptedCount": 2,
        "adoptionPercentage": 67,
        "appVersion": "1.0.0",
    }
    assert create_export_data([], 0, app_version="2.3.4", now=NOW)["metadata"]["appVersion"] == "2.3.4"


def test_validate_import_data_accumulates_errors() -> None:
    result = validate_import_data({"adoptedPractices": "a"})
    assert not result["valid"]
    assert result["errors"] == [
        "Missing required field: version",
        "Missing required field: exportedAt",
        "adoptedPractices must be an array",
    ]
    assert validate_import_data({"version": "2.0.0", "exportedAt": "x", "adoptedPractices": []})["errors"] == [
        "Incompatible file version: 2.0.0"
    ]
    assert validate_import_data({"version": "1.4.0", "exportedAt": "x", "adoptedPractices": []})["valid"]
    assert not validate_import_data([])["valid"]


def test_parse_import_content() -> None:
    result = parse_import_content(_doc(adoptedPractices=["a", "  ", 3, None, "b", "a"], metadata={"adoptedCount": 2}))
    assert result["success"]
    assert result["data"] == {"a", "b"}
    assert result["metadata"] == {"adoptedCount": 2}


def test_parse_errors() -> None:
    bad_json = parse_import_content("{nope")
    assert bad_json == {"success": False, "error": "Invalid JSON format. Please check the file and try again."}
    bad_format = parse_import_content(orjson.dumps({"version": "1.0.0"}))
    assert not bad_format["success"]
    assert bad_format["error"].startswith("Invalid file format: ")
    assert "Missing required field: exportedAt" in bad_format["error"]
    assert "Missing required field: adoptedPractices" in bad_format["error"]


def test_parse_import_file(tmp_path: Path) -> None:
    path = tmp_path / "export.cdpa"
    path.write_bytes(_doc())
    assert asyncio.run(parse_import_file(path))["data"] == {"a", "b"}
    missing = asyncio.run(parse_import_file(tmp_path / "missing.cdpa"))
    assert not missing["success"]
    assert missing["error"].startswith("Failed to read file: ")


def test_import_filters_against_catalog() -> None:
    result = import_adoption_state(_doc(adoptedPractices=["x", "a", "y", "b"]), {"a", "b", "c"})
    assert result["success"]
    assert result["imported"] == {"a", "b"}
    assert result["invalid"] == ["x", "y"]
    assert not import_adoption_state("[]", {"a"})["success"]


def test_export_then_import() -> None:
    exported = orjson.dumps(create_export_data({"a", "c"}, 3, now=NOW))
    assert import_adoption_state(exported, {"a", "b", "c"})["imported"] == {"a", "c"}
