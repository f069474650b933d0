"""
Tests de los endpoints de health check.
"""

from fastapi.testclient import TestClient


class TestHealthChecks:
    """Liveness y readiness"""

    def test_basic_health_endpoint(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_liveness_check(self, client: TestClient):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness_reports_circuits(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["database"] == "in_memory"
        assert data["circuits"]["persistence"]["state"] == "CLOSED"
        assert data["circuits"]["event_broker"]["state"] == "CLOSED"

    def test_not_ready_while_persistence_circuit_open(self, app, client: TestClient):
        breaker = app.state.container.persistence_resilience.breaker
        for _ in range(breaker.fail_max):
            breaker.record_failure(ConnectionError("down"))

        response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["circuits"]["persistence"]["state"] == "OPEN"

    def test_open_event_circuit_does_not_block_readiness(self, app, client: TestClient):
        breaker = app.state.container.event_emitter.breaker
        for _ in range(breaker.fail_max):
            breaker.record_failure(ConnectionError("down"))

        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["circuits"]["event_broker"]["state"] == "OPEN"
