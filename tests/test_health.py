def test_basic_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"]["database"] == "ok"
    assert "deepseek" in body["services"]["ai"]
    assert body["services"]["auth"] == "configured"


def test_detailed_health(client):
    response = client.get("/api/health/detailed")

    assert response.status_code == 200
    body = response.json()
    assert body["overall_status"] == "healthy"
    assert [c["name"] for c in body["components"]] == ["database", "ai_services"]
    assert body["service_info"]["version"] == "1.0.0"


def test_responses_carry_correlation_id(client):
    response = client.get("/api/health", headers={"x-correlation-id": "abc-123"})

    assert response.headers["x-correlation-id"] == "abc-123"
