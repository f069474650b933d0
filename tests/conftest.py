"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Reloj fake para TTL y ventanas del circuit breaker
- Coordinador armado con adaptadores in-memory
- Cliente HTTP de prueba (FastAPI TestClient) con la app en modo in-memory
- Datos de prueba (payloads de ítems de catálogo)
"""

import uuid
from collections.abc import Generator
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.application.interfaces.clock import FakeClock
from app.config import Settings
from app.main import create_app
from tests.doubles import build_harness

# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def harness(clock: FakeClock) -> SimpleNamespace:
    return build_harness(clock)


@pytest.fixture
def sample_item_payload() -> dict:
    """
    Payload de ejemplo para crear un ítem de catálogo.
    Reutilizable en múltiples tests.
    """
    return {
        "title": "Cien años de soledad",
        "author": "Gabriel García Márquez",
        "isbn": "978-0307474728",
        "price": "19.99",
        "stock_quantity": 10,
        "category": "Novela",
    }


@pytest.fixture
def unique_idem_key() -> str:
    """Generador de idempotency keys únicas para cada test."""
    return f"test_{uuid.uuid4().hex[:16]}"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        use_in_memory=True,
        redis_url=None,
        kafka_bootstrap_servers=None,
        idempotency_namespace="test",
        persistence_breaker_fail_max=5,
        persistence_breaker_reset_timeout=30,
    )


@pytest.fixture
def app(settings: Settings, clock: FakeClock):
    return create_app(settings=settings, clock=clock)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient en modo in-memory.
    El context manager ejecuta el lifespan (arranque y cierre del contenedor).
    """
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# MARKERS DE PYTEST
# ============================================================================

def pytest_configure(config):
    """
    Configurar markers personalizados de pytest.
    """
    config.addinivalue_line(
        "markers",
        "integration: Tests de integración contra SQLite in-memory"
    )
    config.addinivalue_line(
        "markers",
        "circuit_breaker: Tests del circuit breaker"
    )
    config.addinivalue_line(
        "markers",
        "idempotency: Tests de replay idempotente"
    )
