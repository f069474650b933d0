"""Entidad CatalogItem - representa un ítem del catálogo (libro)."""

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

# Campos que el cliente puede mutar vía CREATE/UPDATE
MUTABLE_FIELDS = (
    "title",
    "author",
    "isbn",
    "price",
    "stock_quantity",
    "category",
    "description",
    "publisher",
    "active",
)

# Campos sin los cuales no se puede crear un ítem
REQUIRED_FIELDS = ("title", "author", "isbn", "price", "category")

# Campos incluidos en el snapshot de los eventos de dominio
SNAPSHOT_FIELDS = ("title", "author", "isbn", "price", "stock_quantity", "category", "active")


@dataclass(frozen=True)
class CatalogItem:
    """
    Ítem del catálogo persistido.

    El ISBN es la clave natural: único en todo el catálogo.
    """

    id: int
    title: str
    author: str
    isbn: str
    price: Decimal
    stock_quantity: int
    category: str
    description: str | None = None
    publisher: str | None = None
    active: bool = True
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def snapshot(self) -> dict[str, Any]:
        """Retorna los campos relevantes para consumidores downstream."""
        data = {name: getattr(self, name) for name in SNAPSHOT_FIELDS}
        data["price"] = str(self.price)
        return data

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["price"] = str(self.price)
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogItem":
        values = dict(data)
        try:
            values["price"] = Decimal(str(values["price"]))
        except InvalidOperation as exc:
            raise ValueError(f"Precio inválido: {values['price']!r}") from exc
        for name in ("created_at", "updated_at"):
            if values.get(name):
                values[name] = datetime.fromisoformat(values[name])
        return cls(**values)
