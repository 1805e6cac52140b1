"""Item Routes - HTTP adapter over ItemHandlers.

Invariants:
    - Reads are public; writes require an authenticated Subject
    - Permission decisions happen in the handlers, never here
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.dependencies import get_current_subject
from marketplace.core.principals import Subject
from marketplace.infrastructure.database import get_db
from marketplace.schemas.item import ItemCreate, ItemResponse, ItemUpdate
from marketplace.services.handle_items import ItemHandlers

router = APIRouter(prefix="/api/v1/items", tags=["items"])


@router.post(
    "", response_model=ItemResponse, status_code=status.HTTP_201_CREATED,
)
async def create_item(
    body: ItemCreate,
    subject: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db),
):
    """Create an item owned by the caller."""
    return await ItemHandlers(db).create_item(subject, body)


@router.get("")
async def list_items(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: UUID | None = Query(None),
    category_id: UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List items with pagination."""
    items, total = await ItemHandlers(db).list_items(
        limit, offset, user_id=user_id, category_id=category_id,
    )
    return {
        "items": [
            ItemResponse.model_validate(i).model_dump(mode="json") for i in items
        ],
        "total": total,
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{id_or_slug}", response_model=ItemResponse)
async def get_item(id_or_slug: str, db: AsyncSession = Depends(get_db)):
    """Get an item by id or slug."""
    return await ItemHandlers(db).get_item(id_or_slug)


@router.patch("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: UUID,
    body: ItemUpdate,
    subject: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db),
):
    """Update an item the caller owns, or any item with UPDATE."""
    return await ItemHandlers(db).update_item(subject, item_id, body)


@router.delete("/{item_id}", response_model=ItemResponse)
async def delete_item(
    item_id: UUID,
    subject: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db),
):
    """Delete an item the caller owns, or any item with DELETE."""
    return await ItemHandlers(db).delete_item(subject, item_id)
