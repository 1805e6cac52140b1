"""Item Schemas - Pydantic models with field-level validation for API boundaries.

Invariants:
    - ItemCreate.name: 1-64 chars; price 0-1,000,000; at most 5 image URLs
    - slug is normalized at the boundary (lowercase, [a-z0-9-] only)
    - ItemUpdate: every field optional; absent fields are left untouched
    - ItemResponse embeds the category and an owner summary (id, name, image)
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from marketplace.core.domain_types import ItemCondition
from marketplace.core.slugs import normalize_slug
from marketplace.schemas.common import CategorySummary, UserSummary


class _ItemFields(BaseModel):
    description: str | None = Field(None, max_length=200)
    images: list[HttpUrl] | None = Field(None, max_length=5)
    category_id: UUID | None = None
    condition_description: str | None = Field(None, max_length=200)
    longitude: float | None = Field(None, ge=-180, le=180)
    latitude: float | None = Field(None, ge=-90, le=90)
    location: str | None = Field(None, max_length=100)
    pin_code: str | None = Field(None, min_length=1, max_length=10)
    slug: str | None = Field(None, min_length=1, max_length=100)

    @field_validator("slug")
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        slug = normalize_slug(v)
        if not slug:
            raise ValueError("slug must contain at least one letter or digit")
        return slug


class ItemCreate(_ItemFields):
    """Item creation payload."""
    name: str = Field(min_length=1, max_length=64)
    price: float = Field(ge=0, le=1_000_000)
    condition: ItemCondition = ItemCondition.USED


class ItemUpdate(_ItemFields):
    """Partial item update."""
    name: str | None = Field(None, min_length=1, max_length=64)
    price: float | None = Field(None, ge=0, le=1_000_000)
    condition: ItemCondition | None = None
    is_active: bool | None = None
    is_featured: bool | None = None


class ItemResponse(BaseModel):
    """Item as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    images: list[str]
    price: float
    condition: str
    condition_description: str | None
    longitude: float | None
    latitude: float | None
    location: str | None
    pin_code: str | None
    slug: str
    is_active: bool
    is_featured: bool
    category_id: UUID | None
    user_id: UUID
    created_at: datetime
    updated_at: datetime
    category: CategorySummary | None
    user: UserSummary
