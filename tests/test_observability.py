import json
import logging
from types import SimpleNamespace

from fastapi.testclient import TestClient
from starlette.requests import Request
from starlette.responses import Response

from app.kwanza.core.config import Settings
from app.kwanza.middleware.observability import build_request_log_payload
from app.main import create_app
from tests.helpers import admin_headers, create_category, create_product


def test_build_request_log_payload():
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/products/7",
        "headers": [],
        "route": SimpleNamespace(path="/api/products/{product_id}"),
    }
    request = Request(scope)
    request.state.trace_id = "trace-1"
    request.state.context = SimpleNamespace(user_id=3)
    request.state.error_code = None

    payload = build_request_log_payload(
        request=request,
        response=Response(status_code=200),
        latency_ms=12.3456,
        db_time_ms=4.5678,
    )

    assert payload["event"] == "http_request"
    assert payload["trace_id"] == "trace-1"
    assert payload["user_id"] == 3
    assert payload["route"] == "/api/products/{product_id}"
    assert payload["status_code"] == 200
    assert payload["latency_ms"] == 12.35
    assert payload["db_time_ms"] == 4.57


def test_payload_without_response_reports_server_error():
    request = Request({"type": "http", "method": "POST", "path": "/api/sales", "headers": []})
    payload = build_request_log_payload(request=request, response=None, latency_ms=1.0, db_time_ms=None)
    assert payload["route"] == "/api/sales"
    assert payload["status_code"] == 500
    assert payload["user_id"] is None
    assert payload["db_time_ms"] is None


def test_metrics_count_requests_errors_and_sales(client, db_session):
    category = create_category(db_session)
    product = create_product(db_session, category=category, sale_price="1000")
    headers = admin_headers(client)
    client.post("/api/auth/login", json={"username": "admin", "password": "errada"})

    sale = client.post("/api/sales", headers=headers, json={"payment_method": "Dinheiro"}).json()
    client.post(f"/api/sales/{sale['id']}/items", headers=headers, json={"product_id": product.meta.id, "quantity": 2})
    client.post(f"/api/sales/{sale['id']}/actions", headers=headers, json={"action": "finalize"})

    response = client.get("/api/ops/metrics")
    assert response.status_code == 200
    content = response.text
    assert 'app_errors_total{code="INVALID_CREDENTIALS"} 1.0' in content
    assert 'sales_finalized_total{payment_method="Dinheiro"} 1.0' in content
    assert "sales_revenue_kz_total 2000.0" in content
    assert 'route="/api/sales/{sale_id}/actions"' in content


def test_metrics_can_be_disabled(tmp_path):
    settings = Settings(DATABASE_URL=f"sqlite+pysqlite:///{tmp_path / 'off.db'}", METRICS_ENABLED=False)
    with TestClient(create_app(settings)) as client:
        response = client.get("/api/ops/metrics")
    assert response.status_code == 200
    assert response.text == "metrics_disabled\n"


def test_each_request_is_logged(client, caplog):
    caplog.set_level(logging.INFO, logger="kwanza.request")
    client.get("/api/me", headers={"X-Trace-ID": "trace-log-1"})

    payloads = [json.loads(record.getMessage()) for record in caplog.records if record.name == "kwanza.request"]
    entry = next(item for item in payloads if item["trace_id"] == "trace-log-1")
    assert entry["route"] == "/api/me"
    assert entry["status_code"] == 401
    assert entry["error_code"] == "UNAUTHORIZED"
