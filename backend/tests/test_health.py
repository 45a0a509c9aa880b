def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    payload = ready.json()
    assert payload["database"]["ok"] is True
    assert payload["database"]["missing_tables"] == []


def test_responses_carry_security_and_request_headers(client):
    response = client.get("/api/health", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Request-ID"] == "abc123"


def test_oversized_body_is_rejected(client):
    response = client.post(
        "/api/schedules",
        content=b"x" * 300_000,
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 413
