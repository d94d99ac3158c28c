"""
Validate a catalog JSON file from the command line.
Exit codes: 0 valid, 1 validation errors, 2 unreadable or malformed catalog.

Usage: python -m catalog.cli [path]
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import orjson

from config import CATALOG_PATH

from .models import CatalogSchemaError
from .validator import format_validation_errors, validate_catalog


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a CD practices catalog")
    parser.add_argument("path", nargs="?", default=str(CATALOG_PATH), help="Path to catalog JSON")
    args = parser.parse_args(argv)

    path = Path(args.path)
    try:
        data = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        print(f"Failed to load catalog {path}: {e}", file=sys.stderr)
        return 2
    try:
        result = validate_catalog(data)
    except CatalogSchemaError as e:
        print(str(e), file=sys.stderr)
        return 2

    report = format_validation_errors(result)
    print(orjson.dumps(report, option=orjson.OPT_INDENT_2).decode("utf-8"))
    return 0 if report["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
