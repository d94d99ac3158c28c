"""
GetPracticeTreeService - the "show me the tree for root X" use case.
Returns a result envelope and never raises.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from loguru import logger

from catalog.models import PracticeId
from config import DEFAULT_ROOT_ID
from practice_tree.materializer import collect_transitive_categories, count_practices


def _timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def _enrich(node: Mapping[str, Any]) -> Dict[str, Any]:
    """Add transitive categories and counts to every node."""
    return {
        **node,
        "categories": collect_transitive_categories(node),
        "requirementCount": len(node.get("requirements") or []),
        "benefitCount": len(node.get("benefits") or []),
        "dependencies": [_enrich(c) for c in node.get("dependencies") or []],
    }


class PracticeNotFoundError(LookupError):
    pass


class GetPracticeTreeService:
    def __init__(self, repository):
        if repository is None:
            raise ValueError("PracticeRepository is required")
        self.repository = repository

    async def execute(self, root_id: Optional[str] = None) -> Dict[str, Any]:
        root_id = root_id or DEFAULT_ROOT_ID
        try:
            practice_id = str(PracticeId.from_value(root_id))
            tree = await self.repository.get_practice_tree(practice_id)
            if tree is None:
                raise PracticeNotFoundError(f"Practice not found: {root_id}")
            enriched = _enrich(tree)
            return {
                "success": True,
                "data": enriched,
                "metadata": {
                    "rootId": root_id,
                    "totalPractices": count_practices(enriched),
                    "timestamp": _timestamp(),
                },
            }
        except Exception as e:
            logger.warning("GetPracticeTreeService error: {}", e)
            return {
                "success": False,
                "error": str(e),
                "errorType": type(e).__name__,
                "metadata": {"timestamp": _timestamp()},
            }
