"""Catalog module - practice/dependency domain values and integrity validation."""

from .models import (
    Catalog,
    CatalogSchemaError,
    Dependency,
    Practice,
    PracticeCategory,
    PracticeCategoryError,
    PracticeId,
    PracticeIdError,
    PracticeType,
    is_valid_practice_id,
)
from .validator import (
    ValidationResult,
    combine_validations,
    format_validation_errors,
    load_and_validate_catalog,
    validate_catalog,
    validate_catalog_shape,
)

__all__ = [
    "Catalog",
    "CatalogSchemaError",
    "Dependency",
    "Practice",
    "PracticeCategory",
    "PracticeCategoryError",
    "PracticeId",
    "PracticeIdError",
    "PracticeType",
    "ValidationResult",
    "combine_validations",
    "format_validation_errors",
    "is_valid_practice_id",
    "load_and_validate_catalog",
    "validate_catalog",
    "validate_catalog_shape",
]
