class EventBroker:
    """Broker externo de eventos (Kafka en producción)."""

    async def send(self, key: str, value: bytes) -> int:
        """
        Publica un mensaje particionado por key.

        Returns:
            Offset/secuencia asignado por el broker (solo para logging).
        """
        raise NotImplementedError

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None
