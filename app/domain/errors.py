"""Excepciones de dominio para el servicio de catálogo."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de mutación ===


class ConflictError(DomainError):
    """Ya existe un ítem con la misma clave natural (ISBN)."""

    def __init__(self, natural_key: str):
        super().__init__(
            message=f"Ya existe un ítem de catálogo con ISBN: {natural_key}",
            code="CONFLICT",
        )
        self.natural_key = natural_key


class NotFoundError(DomainError):
    """El ítem a modificar no existe."""

    def __init__(self, item_id: int | None):
        super().__init__(
            message=f"Ítem de catálogo no encontrado: {item_id}",
            code="NOT_FOUND",
        )
        self.item_id = item_id


class InvalidRequestError(DomainError):
    """La mutación no trae los campos que la operación necesita."""

    def __init__(self, missing_fields: list[str]):
        super().__init__(
            message=f"Faltan campos obligatorios: {', '.join(missing_fields)}",
            code="INVALID_REQUEST",
        )
        self.missing_fields = missing_fields


# === Errores de dependencias ===


class TransientError(DomainError):
    """Falla de una dependencia (base de datos, broker); el cliente puede reintentar."""

    def __init__(self, dependency: str, detail: str | None = None):
        super().__init__(
            message=f"Falla transitoria en {dependency}: {detail or 'sin detalle'}",
            code="TRANSIENT",
        )
        self.dependency = dependency
        self.detail = detail


class ServiceUnavailableError(DomainError):
    """El circuit breaker está abierto; reintentar después del backoff."""

    def __init__(self, breaker_name: str, retry_after_seconds: float):
        super().__init__(
            message=f"Servicio no disponible ({breaker_name}): reintentar en {retry_after_seconds:.0f}s",
            code="SERVICE_UNAVAILABLE",
        )
        self.breaker_name = breaker_name
        self.retry_after_seconds = retry_after_seconds


# === Errores de idempotencia ===


class IdempotencyReplayError(DomainError):
    """El resultado cacheado no pudo deserializarse; se trata como cache miss."""

    def __init__(self, idem_key: str, reason: str):
        super().__init__(
            message=f"No se pudo reproducir el resultado para key '{idem_key}': {reason}",
            code="IDEMPOTENCY_REPLAY_ERROR",
        )
        self.idem_key = idem_key
        self.reason = reason
