def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["trace_id"]
    assert response.headers["X-Trace-ID"] == payload["trace_id"]


def test_health_echoes_caller_trace_id(client):
    response = client.get("/health", headers={"X-Trace-ID": "caixa-01-abc"})
    assert response.status_code == 200
    assert response.json()["trace_id"] == "caixa-01-abc"
    assert response.headers["X-Trace-ID"] == "caixa-01-abc"
