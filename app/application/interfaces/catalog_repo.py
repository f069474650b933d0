from typing import Any

from app.domain.entities.catalog_item import CatalogItem


class CatalogRepo:
    """
    Colaborador de persistencia del catálogo.

    Las implementaciones traducen sus errores de driver:
    clave natural duplicada -> ConflictError, resto -> TransientError.
    """

    async def create(self, fields: dict[str, Any]) -> CatalogItem:
        raise NotImplementedError

    async def update_by_id(self, item_id: int, changes: dict[str, Any]) -> CatalogItem | None:
        """Aplica los cambios y retorna el ítem actualizado, o None si no existe."""
        raise NotImplementedError

    async def delete_by_id(self, item_id: int) -> CatalogItem | None:
        """Elimina el ítem y retorna su último estado, o None si no existe."""
        raise NotImplementedError

    async def exists_by_natural_key(self, isbn: str) -> bool:
        raise NotImplementedError

    async def get_by_id(self, item_id: int) -> CatalogItem | None:
        raise NotImplementedError
