"""Category Schemas - request/response contracts for category endpoints.

Invariants:
    - CategoryCreate.name: 1-20 chars, stripped, non-empty
    - description <= 100 chars; at most 5 image URLs
    - CategoryUpdate: every field optional, plus is_active / is_featured
    - CategoryDetailResponse adds parent, children and items to the flat view
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from marketplace.schemas.common import CategorySummary, ItemSummary


class CategoryCreate(BaseModel):
    """Category creation payload."""
    name: str = Field(min_length=1, max_length=20)
    description: str | None = Field(None, max_length=100)
    images: list[HttpUrl] | None = Field(None, max_length=5)
    parent_id: UUID | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class CategoryUpdate(BaseModel):
    """Partial category update."""
    name: str | None = Field(None, min_length=1, max_length=20)
    description: str | None = Field(None, max_length=100)
    images: list[HttpUrl] | None = Field(None, max_length=5)
    parent_id: UUID | None = None
    is_active: bool | None = None
    is_featured: bool | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class CategoryResponse(BaseModel):
    """Category as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    images: list[str]
    parent_id: UUID | None
    user_id: UUID | None
    is_active: bool
    is_featured: bool
    created_at: datetime
    updated_at: datetime


class CategoryDetailResponse(CategoryResponse):
    """Single category with its place in the tree and the items filed under it."""
    parent: CategorySummary | None
    children: list[CategorySummary]
    items: list[ItemSummary]
