"""
Capa de Aplicación - Servicio de mutaciones del catálogo.

Esta capa contiene los casos de uso, servicios e interfaces (puertos).
Orquesta la lógica de negocio y define los contratos con la infraestructura.

Estructura:
- use_cases/: Coordinador de mutaciones idempotentes e invalidación de claves
- services/: Ejecutor de mutaciones y emisor de eventos
- interfaces/: Puertos (contratos para adaptadores)
"""

from app.application.interfaces import (
    CatalogRepo,
    Clock,
    EventBroker,
    FakeClock,
    ResultCache,
    SystemClock,
    TransactionManager,
)

__all__ = [
    # Interfaces - Repositories
    "CatalogRepo",
    "ResultCache",
    # Interfaces - Messaging
    "EventBroker",
    # Interfaces - Infrastructure
    "TransactionManager",
    # Interfaces - Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
]
