"""
Gateway domain models.

Live state read from the API Gateway administration API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Gateway(BaseModel):
    """A REST API registered on API Gateway."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Gateway":
        """Factory from a get_rest_apis / create_rest_api item."""
        return cls(id=item["id"], name=item.get("name", ""))


class LiveResource(BaseModel):
    """
    One path segment provisioned on a gateway.

    The root resource ("/") has no path_part and no parent_id.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    path: str
    path_part: Optional[str] = Field(default=None, alias="pathPart")
    parent_id: Optional[str] = Field(default=None, alias="parentId")

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "LiveResource":
        """Factory from a get_resources item (ignores resourceMethods etc.)."""
        return cls(
            id=item["id"],
            path=item.get("path", ""),
            path_part=item.get("pathPart"),
            parent_id=item.get("parentId"),
        )


class ResourcePage(BaseModel):
    """One page of get_resources output."""

    items: List[LiveResource] = Field(default_factory=list)
    position: Optional[str] = None


class RedundantResource(BaseModel):
    """A template path resource that already exists on the live gateway."""

    model_config = ConfigDict(frozen=True)

    key: str
    live_id: str
    live_parent_id: Optional[str] = None
