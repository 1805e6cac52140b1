"""Summary Schemas - compact views embedded in item and category responses."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Public part of an owner account."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None
    image: str | None


class CategorySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    parent_id: UUID | None


class ItemSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    price: float
