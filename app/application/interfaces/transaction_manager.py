from contextlib import AbstractAsyncContextManager
from typing import Protocol


class TransactionManager(Protocol):
    """Delimita la transacción de una mutación; commit al salir, rollback si hay excepción."""

    def start(self) -> AbstractAsyncContextManager[None]:
        ...
