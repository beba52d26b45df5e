"""Category management: create, rename/recolor, delete and lookups."""

from __future__ import annotations

import logging
from typing import List

from expense_tracker.core.exceptions import CategoryNotFound, DuplicateCategory
from expense_tracker.db.base import LedgerStore
from expense_tracker.models import Category, CategoryIn, CategoryUpdateIn
from expense_tracker.models.constants import DEFAULT_CATEGORY_COLOR

logger = logging.getLogger("expense_tracker.categories")


class CategoryService:
    def __init__(self, store: LedgerStore):
        self.store = store

    def list_categories(self, order_by_name: bool = False) -> List[Category]:
        return self.store.list_categories(order_by_name=order_by_name)

    def get_category(self, category_id: int) -> Category:
        category = self.store.find_category(category_id)
        if category is None:
            raise CategoryNotFound(category_id)
        return category

    def get_category_by_name(self, name: str) -> Category:
        category = self.store.find_category_by_name(name)
        if category is None:
            raise CategoryNotFound(name)
        return category

    def exists_by_name(self, name: str) -> bool:
        return self.store.category_name_exists(name)

    def search_categories(self, keyword: str) -> List[Category]:
        return self.store.search_categories(keyword)

    def unused_categories(self) -> List[Category]:
        return self.store.unused_categories()

    def create_category(self, payload: CategoryIn) -> Category:
        with self.store.transaction():
            if self.store.category_name_exists(payload.name):
                raise DuplicateCategory(payload.name)
            saved = self.store.save_category(
                Category(
                    name=payload.name,
                    color=payload.color or DEFAULT_CATEGORY_COLOR,
                    description=payload.description,
                )
            )
        logger.info("category created", extra={"category_id": saved.id})
        return saved

    def update_category(self, category_id: int, payload: CategoryUpdateIn) -> Category:
        with self.store.transaction():
            existing = self.get_category(category_id)
            # keeping its own name is not a conflict
            if (
                payload.name is not None
                and payload.name != existing.name
                and self.store.category_name_exists(payload.name)
            ):
                raise DuplicateCategory(payload.name)
            updated = existing.model_copy(
                update={
                    k: v
                    for k, v in (
                        ("name", payload.name),
                        ("color", payload.color),
                        ("description", payload.description),
                    )
                    if v is not None
                }
            )
            return self.store.save_category(updated)

    def delete_category(self, category_id: int) -> None:
        self.store.delete_category(category_id)
        logger.info("category deleted", extra={"category_id": category_id})


__all__ = ["CategoryService"]
