"""Adoption module - adoption set arithmetic, the adoption store and .cdpa files."""

from .engine import (
    build_practice_map,
    calculate_adopted_dependencies,
    calculate_adoption_percentage,
    filter_valid_practice_ids,
    summarize_adoption,
    toggle,
)
from .export_import import (
    create_export_data,
    generate_export_filename,
    import_adoption_state,
    parse_import_content,
    parse_import_file,
    validate_import_data,
)
from .store import AdoptionStore

__all__ = [
    "AdoptionStore",
    "build_practice_map",
    "calculate_adopted_dependencies",
    "calculate_adoption_percentage",
    "create_export_data",
    "filter_valid_practice_ids",
    "generate_export_filename",
    "import_adoption_state",
    "parse_import_content",
    "parse_import_file",
    "summarize_adoption",
    "toggle",
    "validate_import_data",
]
