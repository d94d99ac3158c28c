"""
Database Module
File-based, read-only practice repository: the catalog lives in a JSON file
(db/cd-practices.json by default) that is edited and version controlled by hand.
The file is read once (aiofiles + orjson), validated, and cached as an
immutable Catalog snapshot.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles
import networkx as nx
import orjson
from loguru import logger

from catalog.models import Catalog, CatalogSchemaError, Practice, PracticeCategory, PracticeId
from catalog.validator import format_validation_errors, validate_catalog
from config import CATALOG_PATH
from practice_tree.materializer import build_tree
from shared.graph import graph_from_catalog

DB_DIR = Path(__file__).parent


class CatalogLoadError(RuntimeError):
    """Catalog file missing, unparseable or failing validation."""


class FilePracticeRepository:
    def __init__(
        self,
        path: Union[str, Path, None] = None,
        catalog: Optional[Catalog] = None,
        validate: bool = True,
    ):
        self.path = Path(path) if path is not None else CATALOG_PATH
        self.validate = validate
        self._catalog = catalog
        self._graph: Optional[nx.DiGraph] = graph_from_catalog(catalog) if catalog is not None else None
        self._lock = asyncio.Lock()

    async def _read_file(self) -> Any:
        try:
            async with aiofiles.open(self.path, "rb") as f:
                return orjson.loads(await f.read())
        except FileNotFoundError:
            raise CatalogLoadError(f"Catalog file not found: {self.path}") from None
        except orjson.JSONDecodeError as e:
            raise CatalogLoadError(f"Invalid JSON in {self.path}: {e}") from e

    async def load(self) -> Catalog:
        """Load (once) and return the catalog snapshot."""
        if self._catalog is not None:
            return self._catalog
        async with self._lock:
            if self._catalog is not None:
                return self._catalog
            data = await self._read_file()
            try:
                if self.validate:
                    result = validate_catalog(data)
                    if not result.is_valid:
                        report = format_validation_errors(result)
                        logger.error("Catalog {} failed validation: {}", self.path, report["message"])
                        raise CatalogLoadError(f"Catalog {self.path}: {report['message']}")
                catalog = Catalog.from_dict(data)
            except CatalogSchemaError as e:
                raise CatalogLoadError(str(e)) from e
            self._graph = graph_from_catalog(catalog)
            self._catalog = catalog
            logger.info("Loaded catalog {} ({} practices)", self.path, len(catalog.practices))
            return catalog

    async def _graph_for(self) -> nx.DiGraph:
        await self.load()
        return self._graph

    # -- queries ------------------------------------------------------------

    async def find_by_id(self, practice_id: str) -> Optional[Practice]:
        catalog = await self.load()
        return catalog.get_practice(str(PracticeId.from_value(practice_id)))

    async def find_all(self) -> List[Practice]:
        catalog = await self.load()
        return list(catalog.practices)

    async def find_by_category(self, category: Union[str, PracticeCategory]) -> List[Practice]:
        category = PracticeCategory.from_value(category)
        catalog = await self.load()
        return [p for p in catalog.practices if p.category == category]

    async def find_practice_prerequisites(self, practice_id: str) -> List[Dict[str, Any]]:
        """Direct prerequisites -> [{practice, rationale}]."""
        catalog = await self.load()
        by_id = catalog.practice_by_id()
        return [
            {"practice": by_id[dep], "rationale": ""}
            for dep in catalog.dependency_ids(practice_id)
            if dep in by_id
        ]

    async def find_capability_prerequisites(self, practice_id: str) -> List[Dict[str, Any]]:
        return []

    async def get_practice_tree(self, root_id: str) -> Optional[Dict[str, Any]]:
        catalog = await self.load()
        return build_tree(catalog, str(PracticeId.from_value(root_id)))

    async def get_transitive_categories(self, practice_id: str) -> List[str]:
        catalog = await self.load()
        G = await self._graph_for()
        if practice_id not in G:
            return []
        by_id = catalog.practice_by_id()
        return sorted({by_id[n].category.value for n in nx.descendants(G, practice_id) if n != practice_id})

    async def count_total_dependencies(self, practice_id: str) -> int:
        """Distinct practices reachable from practice_id, excluding itself."""
        G = await self._graph_for()
        if practice_id not in G:
            return 0
        return len(nx.descendants(G, practice_id) - {practice_id})

    async def valid_practice_ids(self) -> frozenset:
        catalog = await self.load()
        return catalog.valid_practice_ids()

    async def save(self, practice: Practice) -> None:
        raise NotImplementedError(f"Save not supported in file-based repository. Edit {self.path}")


_repository: Optional[FilePracticeRepository] = None


def get_repository() -> FilePracticeRepository:
    """Process-wide repository for the configured catalog path."""
    global _repository
    if _repository is None:
        _repository = FilePracticeRepository(CATALOG_PATH)
    return _repository


def set_repository(repository: Optional[FilePracticeRepository]) -> None:
    global _repository
    _repository = repository


__all__ = ["CatalogLoadError", "DB_DIR", "FilePracticeRepository", "get_repository", "set_repository"]
