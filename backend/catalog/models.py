"""
Catalog domain values: practices, dependency edges and the catalog itself.
All values are frozen; transformations return new instances.
"""

import re
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

KEBAB_CASE_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


class PracticeIdError(ValueError):
    pass


class PracticeCategoryError(ValueError):
    pass


class CatalogSchemaError(ValueError):
    """Raised when catalog data does not have the expected top-level shape."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid catalog structure: " + "; ".join(self.problems))


def is_valid_practice_id(value: Any) -> bool:
    return isinstance(value, str) and bool(KEBAB_CASE_PATTERN.match(value))


class PracticeId(str):
    """Kebab-case practice identifier."""

    @classmethod
    def from_value(cls, value: Any) -> "PracticeId":
        if not isinstance(value, str) or not value.strip():
            raise PracticeIdError("Practice ID is required")
        trimmed = value.strip()
        if not KEBAB_CASE_PATTERN.match(trimmed):
            raise PracticeIdError(f"Practice ID must be kebab-case: {trimmed}")
        return cls(trimmed)


class PracticeCategory(str, Enum):
    AUTOMATION = "automation"
    BEHAVIOR = "behavior"
    BEHAVIOR_ENABLED_AUTOMATION = "behavior-enabled-automation"
    CORE = "core"

    @classmethod
    def values(cls) -> List[str]:
        return [c.value for c in cls]

    @classmethod
    def from_value(cls, value: Any) -> "PracticeCategory":
        try:
            return cls(value)
        except ValueError:
            raise PracticeCategoryError(
                f"Invalid category: {value}. Must be one of: {', '.join(cls.values())}"
            ) from None


class PracticeType(str, Enum):
    ROOT = "root"
    PRACTICE = "practice"


def _clean_items(items: Iterable[str], label: str) -> Tuple[str, ...]:
    cleaned = []
    for item in items:
        if not isinstance(item, str) or not item.strip():
            raise ValueError(f"{label} must be a non-empty string")
        cleaned.append(item.strip())
    return tuple(cleaned)


class Practice(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    name: str
    description: str
    type: PracticeType = PracticeType.PRACTICE
    category: PracticeCategory
    requirements: Tuple[str, ...] = ()
    benefits: Tuple[str, ...] = ()
    quick_start_guide: Optional[Any] = Field(None, alias="quickStartGuide")
    maturity_level: Optional[int] = Field(None, alias="maturityLevel", ge=0, le=3)

    @field_validator("id", mode="before")
    @classmethod
    def _check_id(cls, v: Any) -> str:
        return str(PracticeId.from_value(v))

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Practice name is required")
        return v.strip()

    @field_validator("description", mode="before")
    @classmethod
    def _check_description(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Practice description is required")
        return v.strip()

    @property
    def requirement_count(self) -> int:
        return len(self.requirements)

    @property
    def benefit_count(self) -> int:
        return len(self.benefits)

    def with_requirement(self, requirement: str) -> "Practice":
        return self.with_requirements([requirement])

    def with_requirements(self, requirements: Iterable[str]) -> "Practice":
        added = _clean_items(requirements, "Requirement")
        return self.model_copy(update={"requirements": self.requirements + added})

    def with_benefit(self, benefit: str) -> "Practice":
        return self.with_benefits([benefit])

    def with_benefits(self, benefits: Iterable[str]) -> "Practice":
        added = _clean_items(benefits, "Benefit")
        return self.model_copy(update={"benefits": self.benefits + added})

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Dependency(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    practice_id: str
    depends_on_id: str


class Catalog(BaseModel):
    """Immutable snapshot of practices and their dependency edges."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    practices: Tuple[Practice, ...] = ()
    dependencies: Tuple[Dependency, ...] = ()
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Catalog":
        """Build a catalog from raw JSON data after checking its top-level shape."""
        from .validator import validate_catalog_shape

        validate_catalog_shape(data)
        return cls.model_validate(data)

    def practice_by_id(self) -> Dict[str, Practice]:
        return {p.id: p for p in self.practices}

    def get_practice(self, practice_id: str) -> Optional[Practice]:
        return self.practice_by_id().get(practice_id)

    def dependency_ids(self, practice_id: str) -> List[str]:
        """Ids the practice depends on, in edge order, without repeats."""
        seen: Dict[str, None] = {}
        for d in self.dependencies:
            if d.practice_id == practice_id:
                seen.setdefault(d.depends_on_id, None)
        return list(seen)

    def adjacency(self) -> Dict[str, List[str]]:
        """practice_id -> depends_on ids (edge order, existing practices only)."""
        known = self.valid_practice_ids()
        adj: Dict[str, List[str]] = {p.id: [] for p in self.practices}
        for d in self.dependencies:
            if d.practice_id in known and d.depends_on_id in known and d.depends_on_id not in adj[d.practice_id]:
                adj[d.practice_id].append(d.depends_on_id)
        return adj

    def valid_practice_ids(self) -> FrozenSet[str]:
        return frozenset(p.id for p in self.practices)

    def root_practices(self) -> List[Practice]:
        return [p for p in self.practices if p.type == PracticeType.ROOT]
