from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from app.application.interfaces.catalog_repo import CatalogRepo
from app.domain.entities.catalog_item import CatalogItem
from app.domain.errors import ConflictError


class InMemoryCatalogRepo(CatalogRepo):
    def __init__(self, first_id: int = 1) -> None:
        self.items: dict[int, CatalogItem] = {}
        self._by_isbn: dict[str, int] = {}
        self._next_id = first_id

    async def create(self, fields: dict[str, Any]) -> CatalogItem:
        isbn = fields["isbn"]
        # Unique index on isbn
        if isbn in self._by_isbn:
            raise ConflictError(isbn)
        now = datetime.now(timezone.utc)
        item = CatalogItem(
            id=self._next_id,
            title=fields["title"],
            author=fields["author"],
            isbn=isbn,
            price=Decimal(str(fields["price"])),
            stock_quantity=fields.get("stock_quantity", 0),
            category=fields["category"],
            description=fields.get("description"),
            publisher=fields.get("publisher"),
            active=fields.get("active", True),
            version=0,
            created_at=now,
            updated_at=now,
        )
        self._next_id += 1
        self.items[item.id] = item
        self._by_isbn[isbn] = item.id
        return item

    async def update_by_id(self, item_id: int, changes: dict[str, Any]) -> CatalogItem | None:
        current = self.items.get(item_id)
        if current is None:
            return None
        new_isbn = changes.get("isbn")
        if new_isbn and new_isbn != current.isbn and new_isbn in self._by_isbn:
            raise ConflictError(new_isbn)
        if "price" in changes:
            changes = {**changes, "price": Decimal(str(changes["price"]))}

        updated = replace(
            current,
            **changes,
            version=current.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        if updated.isbn != current.isbn:
            del self._by_isbn[current.isbn]
            self._by_isbn[updated.isbn] = item_id
        self.items[item_id] = updated
        return updated

    async def exists_by_natural_key(self, isbn: str) -> bool:
        return isbn in self._by_isbn

    async def get_by_id(self, item_id: int) -> CatalogItem | None:
        return self.items.get(item_id)

    async def delete_by_id(self, item_id: int) -> CatalogItem | None:
        item = self.items.pop(item_id, None)
        if item is not None:
            del self._by_isbn[item.isbn]
        return item
