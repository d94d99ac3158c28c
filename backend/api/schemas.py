"""Pydantic request schemas for API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AdoptionSummaryRequest(BaseModel):
    """Adopted ids, given directly or as an encoded URL `adopted` value."""
    model_config = ConfigDict(populate_by_name=True)
    adopted: Optional[List[str]] = None
    state: Optional[str] = None
    root_id: Optional[str] = Field(default=None, alias="rootId")


class AdoptionExportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    adopted: List[str] = Field(default_factory=list)
    app_version: str = Field(default="1.0.0", alias="appVersion")


class AdoptionUrlRequest(BaseModel):
    url: str
    adopted: List[str] = Field(default_factory=list)


def practice_payload(practice) -> Dict[str, Any]:
    """Serialize a Practice with camelCase keys."""
    return practice.model_dump(mode="json", by_alias=True)
