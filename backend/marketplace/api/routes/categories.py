"""Category Routes - HTTP adapter over CategoryHandlers.

Invariants:
    - Reads are public; writes require an authenticated Subject
    - GET "" lists top-level categories; GET "/all" lists every category
    - "/all" is registered before "/{category_id}" so it is never parsed as an id
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.dependencies import get_current_subject
from marketplace.core.principals import Subject
from marketplace.infrastructure.database import get_db
from marketplace.schemas.category import (
    CategoryCreate, CategoryDetailResponse, CategoryResponse, CategoryUpdate,
)
from marketplace.services.handle_categories import CategoryHandlers

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


def _page(categories, total: int, limit: int, offset: int) -> dict:
    return {
        "categories": [
            CategoryResponse.model_validate(c).model_dump(mode="json")
            for c in categories
        ],
        "total": total,
        "pagination": {"limit": limit, "offset": offset},
    }


@router.post(
    "", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED,
)
async def create_category(
    body: CategoryCreate,
    subject: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db),
):
    return await CategoryHandlers(db).create_category(subject, body)


@router.get("")
async def list_categories(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List top-level categories with pagination."""
    categories, total = await CategoryHandlers(db).list_categories(
        limit, offset, user_id=user_id,
    )
    return _page(categories, total, limit, offset)


@router.get("/all")
async def list_all_categories(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List every category, nested ones included."""
    categories, total = await CategoryHandlers(db).list_all_categories(
        limit, offset, user_id=user_id,
    )
    return _page(categories, total, limit, offset)


@router.get("/{category_id}", response_model=CategoryDetailResponse)
async def get_category(category_id: UUID, db: AsyncSession = Depends(get_db)):
    return await CategoryHandlers(db).get_category(category_id)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    body: CategoryUpdate,
    subject: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db),
):
    return await CategoryHandlers(db).update_category(subject, category_id, body)


@router.delete("/{category_id}", response_model=CategoryResponse)
async def delete_category(
    category_id: UUID,
    subject: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db),
):
    return await CategoryHandlers(db).delete_category(subject, category_id)
