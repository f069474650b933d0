"""Kafka event broker for catalog domain events (via aiokafka)."""

import logging

from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError

from app.application.interfaces.event_broker import EventBroker
from app.domain.errors import TransientError

logger = logging.getLogger(__name__)


class KafkaEventBroker(EventBroker):
    """
    Publishes messages keyed by entity id.

    Kafka's default partitioner hashes the key, so every event of one entity
    lands on the same partition and keeps its relative order.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        topic: str,
        client_id: str = "catalog-service",
        request_timeout_ms: int = 10000,
    ) -> None:
        self._topic = topic
        self._bootstrap_servers = bootstrap_servers
        self._client_id = client_id
        self._request_timeout_ms = request_timeout_ms
        self._producer: AIOKafkaProducer | None = None
        self._started = False

    async def start(self) -> None:
        # The producer binds to the running loop, so it is created here
        self._producer = AIOKafkaProducer(
            bootstrap_servers=self._bootstrap_servers,
            client_id=self._client_id,
            acks="all",
            request_timeout_ms=self._request_timeout_ms,
        )
        try:
            await self._producer.start()
        except Exception:
            # A half-started client still holds sockets and background tasks
            logger.error("Kafka producer failed to start", extra={"topic": self._topic})
            await self._producer.stop()
            self._producer = None
            raise
        self._started = True
        logger.info("Kafka producer started", extra={"topic": self._topic})

    async def stop(self) -> None:
        if self._started:
            await self._producer.stop()
            self._started = False
            logger.info("Kafka producer stopped", extra={"topic": self._topic})

    async def send(self, key: str, value: bytes) -> int:
        if not self._started:
            raise TransientError("kafka", "producer not started")
        try:
            metadata = await self._producer.send_and_wait(
                self._topic, value=value, key=key.encode()
            )
        except KafkaError as exc:
            raise TransientError("kafka", str(exc)) from exc
        return metadata.offset
