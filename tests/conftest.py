from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import orjson
import pytest

ROOT = Path(__file__).resolve().parents[1]
BACKEND = ROOT / "backend"
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))

from catalog.models import Catalog  # noqa: E402


def practice(pid: str, category: str = "automation", ptype: str = "practice", **extra: Any) -> dict:
    """Minimal valid practice record."""
    return {
        "id": pid,
        "name": pid.replace("-", " ").title(),
        "type": ptype,
        "category": category,
        "description": f"{pid} description",
        "requirements": [f"{pid} requirement"],
        "benefits": [f"{pid} benefit"],
        **extra,
    }


def edge(src: str, dst: str) -> dict:
    return {"practice_id": src, "depends_on_id": dst}


def catalog_data(practices: list, edges: list) -> dict:
    return {"metadata": {"version": "1.0.0"}, "practices": practices, "dependencies": edges}


@pytest.fixture
def diamond_data() -> dict:
    """root -> a, b; a -> d; b -> d."""
    return catalog_data(
        [
            practice("root", "core", "root", maturityLevel=3),
            practice("a", "behavior", maturityLevel=1),
            practice("b", "automation"),
            practice("d", "behavior-enabled-automation", maturityLevel=0),
        ],
        [edge("root", "a"), edge("root", "b"), edge("a", "d"), edge("b", "d")],
    )


@pytest.fixture
def diamond_catalog(diamond_data: dict) -> Catalog:
    return Catalog.from_dict(diamond_data)


@pytest.fixture
def catalog_file(tmp_path: Path, diamond_data: dict) -> Path:
    path = tmp_path / "catalog.json"
    path.write_bytes(orjson.dumps(diamond_data))
    return path


@pytest.fixture
def sample_catalog_path() -> Path:
    return BACKEND / "db" / "cd-practices.json"
