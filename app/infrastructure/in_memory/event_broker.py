import zlib
from dataclasses import dataclass

from app.application.interfaces.event_broker import EventBroker


@dataclass(frozen=True)
class BrokerMessage:
    partition: int
    offset: int
    key: str
    value: bytes


class InMemoryEventBroker(EventBroker):
    """Stand-in broker: keeps messages per partition, partitioned by key hash."""

    def __init__(self, partitions: int = 3) -> None:
        self._partitions: list[list[BrokerMessage]] = [[] for _ in range(partitions)]

    def partition_for(self, key: str) -> int:
        return zlib.crc32(key.encode()) % len(self._partitions)

    async def send(self, key: str, value: bytes) -> int:
        partition = self.partition_for(key)
        log = self._partitions[partition]
        message = BrokerMessage(partition=partition, offset=len(log), key=key, value=value)
        log.append(message)
        return message.offset

    @property
    def messages(self) -> list[BrokerMessage]:
        return [message for log in self._partitions for message in log]

    def messages_for(self, key: str) -> list[BrokerMessage]:
        return [m for m in self._partitions[self.partition_for(key)] if m.key == key]
