import asyncio
from pathlib import Path

import orjson
import pytest

from catalog.models import Catalog, PracticeCategoryError, PracticeIdError
from conftest import catalog_data, edge, practice
from db import CatalogLoadError, FilePracticeRepository
from services import GetPracticeTreeService


def _run(coro):
    return asyncio.run(coro)


def test_repository_queries(catalog_file: Path) -> None:
    repo = FilePracticeRepository(catalog_file)
    assert _run(repo.find_by_id("a")).name == "A"
    assert _run(repo.find_by_id("missing")) is None
    assert [p.id for p in _run(repo.find_all())] == ["root", "a", "b", "d"]
    assert [p.id for p in _run(repo.find_by_category("behavior"))] == ["a"]
    assert [p["practice"].id for p in _run(repo.find_practice_prerequisites("root"))] == ["a", "b"]
    assert _run(repo.find_capability_prerequisites("root")) == []
    assert _run(repo.get_transitive_categories("root")) == [
        "automation",
        "behavior",
        "behavior-enabled-automation",
    ]
    assert _run(repo.get_transitive_categories("d")) == []
    assert _run(repo.count_total_dependencies("root")) == 3
    assert _run(repo.count_total_dependencies("missing")) == 0
    assert _run(repo.valid_practice_ids()) == {"root", "a", "b", "d"}


def test_repository_rejects_bad_input(catalog_file: Path) -> None:
    repo = FilePracticeRepository(catalog_file)
    with pytest.raises(PracticeIdError):
        _run(repo.find_by_id("Not Valid"))
    with pytest.raises(PracticeCategoryError):
        _run(repo.find_by_category("tooling"))
    with pytest.raises(NotImplementedError):
        _run(repo.save(_run(repo.find_by_id("a"))))


def test_repository_tree(catalog_file: Path) -> None:
    repo = FilePracticeRepository(catalog_file)
    tree = _run(repo.get_practice_tree("root"))
    assert [c["id"] for c in tree["dependencies"]] == ["a", "b"]
    assert _run(repo.get_practice_tree("missing")) is None


def test_repository_load_errors(tmp_path: Path) -> None:
    with pytest.raises(CatalogLoadError):
        _run(FilePracticeRepository(tmp_path / "absent.json").load())

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(CatalogLoadError):
        _run(FilePracticeRepository(broken).load())

    cyclic = tmp_path / "cyclic.json"
    cyclic.write_bytes(
        orjson.dumps(
            catalog_data([practice("root", "core", "root"), practice("a")], [edge("root", "a"), edge("a", "root")])
        )
    )
    with pytest.raises(CatalogLoadError):
        _run(FilePracticeRepository(cyclic).load())
    assert _run(FilePracticeRepository(cyclic, validate=False).load()).valid_practice_ids() == {"root", "a"}


def test_sample_catalog_tree(sample_catalog_path: Path) -> None:
    repo = FilePracticeRepository(sample_catalog_path)
    tree = _run(repo.get_practice_tree("continuous-delivery"))
    assert tree["id"] == "continuous-delivery"
    assert _run(repo.count_total_dependencies("continuous-delivery")) == 11


def test_service_success(diamond_catalog: Catalog) -> None:
    service = GetPracticeTreeService(FilePracticeRepository(catalog=diamond_catalog))
    result = _run(service.execute("root"))
    assert result["success"]
    data = result["data"]
    assert data["categories"] == ["automation", "behavior", "behavior-enabled-automation"]
    assert data["dependencies"][0]["categories"] == ["behavior-enabled-automation"]
    assert data["requirementCount"] == 1
    assert result["metadata"]["rootId"] == "root"
    assert result["metadata"]["totalPractices"] == 4
    assert result["metadata"]["timestamp"].endswith("Z")


def test_service_failures_are_envelopes(diamond_catalog: Catalog) -> None:
    service = GetPracticeTreeService(FilePracticeRepository(catalog=diamond_catalog))
    missing = _run(service.execute("missing"))
    assert missing["success"] is False
    assert missing["error"] == "Practice not found: missing"
    assert "timestamp" in missing["metadata"]
    invalid = _run(service.execute("Bad Id"))
    assert invalid["success"] is False
    assert invalid["errorType"] == "PracticeIdError"


def test_service_requires_repository() -> None:
    with pytest.raises(ValueError):
        GetPracticeTreeService(None)
