"""Category Handlers - create, list, get, update, delete categories.

Invariants:
    - create requires CATEGORY.CREATE (USER is denied, ADMIN allowed)
    - update/delete: 404 first, then ':OWN' on the category or the generic action
    - Names are unique; a clash with ANOTHER category is a 409
    - A category can never be its own parent (400); an unknown parent is a 404
    - The default listing holds top-level categories only; list_all_categories
      returns every category
    - get_category loads parent, children and items (selectinload, never lazy)
    - A unique-name violation at commit (concurrent writers) is a 409, not a 503
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from marketplace.core.domain_types import Action, ResourceKind
from marketplace.core.errors import (
    ConflictError, InvalidInputError, ResourceNotFoundError,
)
from marketplace.core.principals import CategoryOwnership, Subject
from marketplace.models.category import Category
from marketplace.schemas.category import (
    CategoryCreate, CategoryResponse, CategoryUpdate,
)
from marketplace.services.access_guard import (
    require_owner_or_permission,
    require_permission,
)

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = frozenset({"name", "is_active", "is_featured"})

_NAME_TAKEN = "Item category with same name already exists"

_TREE = (
    selectinload(Category.parent),
    selectinload(Category.children),
    selectinload(Category.items),
)


def category_ownership(category: Category) -> CategoryOwnership:
    """Ownership projection handed to the permission engine."""
    return CategoryOwnership(
        owner_id=str(category.user_id) if category.user_id else None,
    )


class CategoryHandlers:
    """Category use cases for one request-scoped DB session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_category(
        self, subject: Subject, body: CategoryCreate,
    ) -> Category:
        require_permission(subject, ResourceKind.CATEGORY, Action.CREATE)

        await self._ensure_name_free(body.name)
        if body.parent_id:
            await self._get_or_404(body.parent_id, "Parent category")

        category = Category(
            name=body.name,
            description=body.description,
            images=[str(url) for url in body.images or []],
            parent_id=body.parent_id,
            user_id=UUID(subject.id),
        )
        self.db.add(category)
        await self._commit()
        await self.db.refresh(category)
        logger.info(
            f"Category {category.id} created", extra={"user_id": subject.id},
        )
        return category

    async def list_categories(
        self, limit: int, offset: int, user_id: UUID | None = None,
    ) -> tuple[list[Category], int]:
        """Top-level categories (no parent) ordered by name, plus the total."""
        return await self._page(limit, offset, user_id, top_level_only=True)

    async def list_all_categories(
        self, limit: int, offset: int, user_id: UUID | None = None,
    ) -> tuple[list[Category], int]:
        """Every category regardless of nesting."""
        return await self._page(limit, offset, user_id, top_level_only=False)

    async def _page(
        self, limit: int, offset: int, user_id: UUID | None, top_level_only: bool,
    ) -> tuple[list[Category], int]:
        criteria = []
        if top_level_only:
            criteria.append(Category.parent_id.is_(None))
        if user_id:
            criteria.append(Category.user_id == user_id)
        query = select(Category)
        count_query = select(func.count()).select_from(Category)
        if criteria:
            query = query.where(*criteria)
            count_query = count_query.where(*criteria)

        result = await self.db.execute(
            query.order_by(Category.name.asc()).limit(limit).offset(offset),
        )
        total = await self.db.scalar(count_query)
        return list(result.scalars().all()), total or 0

    async def get_category(self, category_id: UUID) -> Category:
        """Category with parent, children and items loaded."""
        return await self._get_or_404(category_id, options=_TREE)

    async def update_category(
        self, subject: Subject, category_id: UUID, body: CategoryUpdate,
    ) -> Category:
        category = await self._get_or_404(category_id)
        require_owner_or_permission(
            subject, ResourceKind.CATEGORY, Action.UPDATE_OWN,
            category_ownership(category), resource_id=str(category.id),
        )

        changes = {
            field: value
            for field, value in body.model_dump(exclude_unset=True).items()
            if value is not None or field not in _REQUIRED_FIELDS
        }
        if "name" in changes and changes["name"] != category.name:
            await self._ensure_name_free(changes["name"], exclude_id=category.id)
        if changes.get("parent_id"):
            if changes["parent_id"] == category.id:
                raise InvalidInputError(
                    "Cannot set parent category to itself", "parent_id",
                )
            await self._get_or_404(changes["parent_id"], "Parent category")
        if "images" in changes:
            changes["images"] = [str(url) for url in changes["images"] or []]

        for field, value in changes.items():
            setattr(category, field, value)
        await self._commit()
        await self.db.refresh(category)
        logger.info(
            f"Category {category.id} updated", extra={"user_id": subject.id},
        )
        return category

    async def delete_category(
        self, subject: Subject, category_id: UUID,
    ) -> CategoryResponse:
        category = await self._get_or_404(category_id, options=_TREE)
        require_owner_or_permission(
            subject, ResourceKind.CATEGORY, Action.DELETE_OWN,
            category_ownership(category), resource_id=str(category.id),
        )

        deleted = CategoryResponse.model_validate(category)
        await self.db.delete(category)
        await self.db.commit()
        logger.info(
            f"Category {category_id} deleted", extra={"user_id": subject.id},
        )
        return deleted

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(_NAME_TAKEN)

    async def _get_or_404(
        self, category_id: UUID, label: str = "Category", options=(),
    ) -> Category:
        category = await self.db.get(Category, category_id, options=options)
        if not category:
            raise ResourceNotFoundError(label, str(category_id))
        return category

    async def _ensure_name_free(
        self, name: str, exclude_id: UUID | None = None,
    ) -> None:
        query = select(Category.id).where(Category.name == name)
        if exclude_id:
            query = query.where(Category.id != exclude_id)
        if (await self.db.execute(query)).first():
            raise ConflictError(_NAME_TAKEN)
