"""
cms-feed — Pydantic models for CMS payloads.

Wire names follow the CMS integration API (camelCase); attributes are
snake_case with aliases, and either form is accepted on input.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

ASSET_TYPE = "asset"


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

class CMSField(BaseModel):
    id: Optional[str] = None
    key: str
    type: Optional[str] = None
    value: Any = None
    name: Optional[str] = None

    class Config:
        populate_by_name = True

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        if self.id is not None:
            d["id"] = self.id
        d["key"] = self.key
        if self.type is not None:
            d["type"] = self.type
        d["value"] = self.value
        if self.name is not None:
            d["name"] = self.name
        return d


class CMSItem(BaseModel):
    id: str
    fields: list[CMSField] = Field(default_factory=list)
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    class Config:
        populate_by_name = True

    @field_validator("fields", mode="before")
    @classmethod
    def _null_fields(cls, v: Any) -> Any:
        return [] if v is None else v

    def field(self, key: str) -> Optional[CMSField]:
        """Return the first field with *key*, or None."""
        for f in self.fields:
            if f.key == key:
                return f
        return None


class CMSItemsResponse(BaseModel):
    items: list[CMSItem] = Field(default_factory=list)
    total_count: Optional[int] = Field(default=None, alias="totalCount")
    page: Optional[int] = None
    per_page: Optional[int] = Field(default=None, alias="perPage")

    class Config:
        populate_by_name = True

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, v: Any) -> Any:
        return [] if v is None else v


# ---------------------------------------------------------------------------
# Model / schema
# ---------------------------------------------------------------------------

class CMSSchemaField(BaseModel):
    id: Optional[str] = None
    key: str
    name: str = ""
    type: str = ""
    multiple: bool = False
    required: bool = False


class CMSSchema(BaseModel):
    id: Optional[str] = None
    project_id: Optional[str] = Field(default=None, alias="projectId")
    fields: list[CMSSchemaField] = Field(default_factory=list)
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    class Config:
        populate_by_name = True


class CMSModel(BaseModel):
    id: str
    key: Optional[str] = None
    name: Optional[str] = None
    project_id: Optional[str] = Field(default=None, alias="projectId")
    schema_id: Optional[str] = Field(default=None, alias="schemaId")
    schema_: CMSSchema = Field(default_factory=CMSSchema, alias="schema")

    class Config:
        populate_by_name = True


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------

class CMSAsset(BaseModel):
    id: str
    url: Optional[str] = None
    file_name: Optional[str] = Field(default=None, alias="fileName")
    content_type: Optional[str] = Field(default=None, alias="contentType")
    total_size: Optional[int] = Field(default=None, alias="totalSize")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    class Config:
        populate_by_name = True


class CMSAssetsResponse(BaseModel):
    items: list[CMSAsset] = Field(default_factory=list)
    total_count: Optional[int] = Field(default=None, alias="totalCount")

    class Config:
        populate_by_name = True

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, v: Any) -> Any:
        return [] if v is None else v

    def url_map(self) -> dict[str, str]:
        """Map asset id → URL. The first asset with a given id wins."""
        urls: dict[str, Optional[str]] = {}
        for asset in reversed(self.items):
            urls[asset.id] = asset.url
        return {asset_id: url for asset_id, url in urls.items() if url}

    def url_for(self, asset_id: Any) -> Optional[str]:
        """Return the URL of the asset with *asset_id*, or None."""
        if not isinstance(asset_id, str):
            return None
        return self.url_map().get(asset_id)
