"""Item Handlers - create, list, get, update, delete marketplace items.

Invariants:
    - create requires ITEM.CREATE; the subject becomes the owner
    - update/delete load the item first (404), then require the ':OWN' action on
      it or the generic action, then write
    - No write happens before the permission check passes
    - Slugs are unique; a clash with ANOTHER item is a 409
    - list/get are public reads and never consult the engine
    - Returned items carry their category and owner (selectinload, never lazy)
    - A unique-slug violation at commit (concurrent writers) is a 409, not a 503
"""

import logging
import secrets
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from marketplace.core.domain_types import Action, ResourceKind
from marketplace.core.errors import ConflictError, ResourceNotFoundError
from marketplace.core.principals import ItemOwnership, Subject
from marketplace.core.slugs import build_item_slug, parse_id_or_slug
from marketplace.models.category import Category
from marketplace.models.item import Item
from marketplace.schemas.item import ItemCreate, ItemResponse, ItemUpdate
from marketplace.services.access_guard import (
    require_owner_or_permission,
    require_permission,
)

logger = logging.getLogger(__name__)

# Columns that are NOT NULL: an explicit null in a PATCH leaves them unchanged
_REQUIRED_FIELDS = frozenset({
    "name", "price", "condition", "slug", "is_active", "is_featured",
})

_SLUG_TAKEN = "Item with this slug already exists"


def _with_relations(query):
    return query.options(selectinload(Item.category), selectinload(Item.user))


def item_ownership(item: Item) -> ItemOwnership:
    """Ownership projection handed to the permission engine."""
    return ItemOwnership(owner_id=str(item.user_id) if item.user_id else None)


class ItemHandlers:
    """Item use cases for one request-scoped DB session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_item(self, subject: Subject, body: ItemCreate) -> Item:
        """Create an item owned by `subject`."""
        require_permission(subject, ResourceKind.ITEM, Action.CREATE)

        slug = build_item_slug(body.name, body.slug, secrets.token_hex(4))
        await self._ensure_slug_free(slug)
        if body.category_id:
            await self._ensure_category_exists(body.category_id)

        item = Item(
            name=body.name,
            description=body.description,
            images=[str(url) for url in body.images or []],
            price=body.price,
            condition=body.condition.value,
            condition_description=body.condition_description,
            longitude=body.longitude,
            latitude=body.latitude,
            location=body.location,
            pin_code=body.pin_code,
            slug=slug,
            category_id=body.category_id,
            user_id=UUID(subject.id),
        )
        self.db.add(item)
        await self._commit()
        logger.info(f"Item {item.id} created", extra={"user_id": subject.id})
        return await self._reload(item.id)

    async def list_items(
        self,
        limit: int,
        offset: int,
        user_id: UUID | None = None,
        category_id: UUID | None = None,
    ) -> tuple[list[Item], int]:
        """Page of items ordered by name, plus the total matching count."""
        query = _with_relations(select(Item))
        count_query = select(func.count()).select_from(Item)
        if user_id:
            query = query.where(Item.user_id == user_id)
            count_query = count_query.where(Item.user_id == user_id)
        if category_id:
            query = query.where(Item.category_id == category_id)
            count_query = count_query.where(Item.category_id == category_id)

        result = await self.db.execute(
            query.order_by(Item.name.asc()).limit(limit).offset(offset),
        )
        total = await self.db.scalar(count_query)
        return list(result.scalars().all()), total or 0

    async def get_item(self, id_or_slug: str) -> Item:
        """Item by UUID or slug."""
        key = parse_id_or_slug(id_or_slug)
        if "id" in key:
            query = select(Item).where(Item.id == key["id"])
        else:
            query = select(Item).where(Item.slug == key["slug"])
        query = _with_relations(query)
        item = (await self.db.execute(query)).scalar_one_or_none()
        if not item:
            raise ResourceNotFoundError("Item", id_or_slug)
        return item

    async def update_item(
        self, subject: Subject, item_id: UUID, body: ItemUpdate,
    ) -> Item:
        """Apply a partial update if the subject owns the item or may update any."""
        item = await self._get_or_404(item_id)
        require_owner_or_permission(
            subject, ResourceKind.ITEM, Action.UPDATE_OWN,
            item_ownership(item), resource_id=str(item.id),
        )

        changes = {
            field: value
            for field, value in body.model_dump(exclude_unset=True).items()
            if value is not None or field not in _REQUIRED_FIELDS
        }
        if "slug" in changes and changes["slug"] != item.slug:
            await self._ensure_slug_free(changes["slug"], exclude_id=item.id)
        if changes.get("category_id"):
            await self._ensure_category_exists(changes["category_id"])
        if "images" in changes:
            changes["images"] = [str(url) for url in changes["images"] or []]
        if "condition" in changes:
            changes["condition"] = changes["condition"].value

        for field, value in changes.items():
            setattr(item, field, value)
        await self._commit()
        logger.info(f"Item {item.id} updated", extra={"user_id": subject.id})
        return await self._reload(item.id)

    async def delete_item(self, subject: Subject, item_id: UUID) -> ItemResponse:
        """Delete if the subject owns the item or may delete any. Returns the deleted item."""
        item = await self._get_or_404(item_id)
        require_owner_or_permission(
            subject, ResourceKind.ITEM, Action.DELETE_OWN,
            item_ownership(item), resource_id=str(item.id),
        )

        deleted = ItemResponse.model_validate(item)
        await self.db.delete(item)
        await self.db.commit()
        logger.info(f"Item {item_id} deleted", extra={"user_id": subject.id})
        return deleted

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(_SLUG_TAKEN)

    async def _reload(self, item_id: UUID) -> Item:
        result = await self.db.execute(
            _with_relations(select(Item).where(Item.id == item_id))
            .execution_options(populate_existing=True),
        )
        return result.scalar_one()

    async def _get_or_404(self, item_id: UUID) -> Item:
        item = await self.db.get(
            Item, item_id,
            options=[selectinload(Item.category), selectinload(Item.user)],
        )
        if not item:
            raise ResourceNotFoundError("Item", str(item_id))
        return item

    async def _ensure_slug_free(
        self, slug: str, exclude_id: UUID | None = None,
    ) -> None:
        query = select(Item.id).where(Item.slug == slug)
        if exclude_id:
            query = query.where(Item.id != exclude_id)
        if (await self.db.execute(query)).first():
            raise ConflictError(_SLUG_TAKEN)

    async def _ensure_category_exists(self, category_id: UUID) -> None:
        if not await self.db.get(Category, category_id):
            raise ResourceNotFoundError("Category", str(category_id))
