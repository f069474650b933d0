"""Interface ResultCache - almacén TTL de resultados por idempotency key."""

from app.domain.entities.mutation import MutationResult

KEY_PREFIX = "idempotency"


def build_cache_key(namespace: str, idem_key: str) -> str:
    """Formato de key en el backend: idempotency:<namespace>:<key>."""
    return f"{KEY_PREFIX}:{namespace}:{idem_key}"


class ResultCache:
    """
    Contrato del cache de resultados.

    get/put no son atómicos entre sí (check-then-act); el coordinador serializa
    por key dentro del proceso.
    """

    async def get(self, idem_key: str) -> tuple[MutationResult | None, bool]:
        """
        Busca un resultado previo.

        Raises:
            IdempotencyReplayError: el valor existe pero no se puede deserializar.
        """
        raise NotImplementedError

    async def put(self, idem_key: str, result: MutationResult, ttl_seconds: int) -> None:
        """Guarda (o sobrescribe) el resultado. Nunca falla por el backend."""
        raise NotImplementedError

    async def delete(self, idem_key: str) -> bool:
        """Invalidación administrativa; no la usa el coordinador."""
        raise NotImplementedError
