from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.catalog_repo import CatalogRepo
from app.domain.entities.catalog_item import CatalogItem
from app.domain.errors import ConflictError, TransientError
from app.infrastructure.db.tables import catalog_items


@contextmanager
def translate_db_errors(natural_key: str | None) -> Iterator[None]:
    """Unique-index violations become ConflictError, any other driver error TransientError."""
    try:
        yield
    except IntegrityError as exc:
        raise ConflictError(natural_key or "?") from exc
    except SQLAlchemyError as exc:
        raise TransientError("database", exc.__class__.__name__) from exc


def _row_to_item(row: Any) -> CatalogItem:
    return CatalogItem(
        id=row["id"],
        title=row["title"],
        author=row["author"],
        isbn=row["isbn"],
        price=Decimal(str(row["price"])),
        stock_quantity=row["stock_quantity"],
        category=row["category"],
        description=row["description"],
        publisher=row["publisher"],
        active=bool(row["active"]),
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class CatalogRepoSQL(CatalogRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, fields: dict[str, Any]) -> CatalogItem:
        now = datetime.now(timezone.utc)
        values = {
            "title": fields["title"],
            "author": fields["author"],
            "isbn": fields["isbn"],
            "price": Decimal(str(fields["price"])),
            "stock_quantity": fields.get("stock_quantity", 0),
            "category": fields["category"],
            "description": fields.get("description"),
            "publisher": fields.get("publisher"),
            "active": fields.get("active", True),
            "version": 0,
            "created_at": now,
            "updated_at": now,
        }
        with translate_db_errors(values["isbn"]):
            result = await self._session.execute(insert(catalog_items).values(**values))
        return _row_to_item({"id": result.inserted_primary_key[0], **values})

    async def update_by_id(self, item_id: int, changes: dict[str, Any]) -> CatalogItem | None:
        values = dict(changes)
        if "price" in values:
            values["price"] = Decimal(str(values["price"]))
        stmt = (
            update(catalog_items)
            .where(catalog_items.c.id == item_id)
            .values(
                **values,
                version=catalog_items.c.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        with translate_db_errors(values.get("isbn")):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(item_id)

    async def exists_by_natural_key(self, isbn: str) -> bool:
        stmt = select(catalog_items.c.id).where(catalog_items.c.isbn == isbn).limit(1)
        with translate_db_errors(isbn):
            result = await self._session.execute(stmt)
        return result.first() is not None

    async def get_by_id(self, item_id: int) -> CatalogItem | None:
        stmt = select(catalog_items).where(catalog_items.c.id == item_id).limit(1)
        with translate_db_errors(None):
            result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _row_to_item(row) if row else None

    async def delete_by_id(self, item_id: int) -> CatalogItem | None:
        item = await self.get_by_id(item_id)
        if item is None:
            return None
        with translate_db_errors(None):
            await self._session.execute(delete(catalog_items).where(catalog_items.c.id == item_id))
        return item
