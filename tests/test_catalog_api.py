import pytest

from app.kwanza.domain.permissions import Role
from app.kwanza.repos.stock import StockMovementRepository
from tests.helpers import admin_headers, auth_headers, create_category, create_product, create_user, login


def _product_payload(category_id: int, **overrides) -> dict:
    payload = {
        "name": "Cerveja Cuca 330ml",
        "category_id": category_id,
        "purchase_price": "250.00",
        "sale_price": "400.00",
        "barcode": "4006381333931",
        "current_stock": 24,
        "min_stock": 6,
        "unit": "Lata",
    }
    payload.update(overrides)
    return payload


def test_create_and_list_categories(client):
    headers = admin_headers(client)
    response = client.post(
        "/api/categories",
        headers=headers,
        json={"name": "Bebidas", "color": "e74c3c", "icon": "🥤"},
    )
    assert response.status_code == 201
    payload = response.json()
    assert payload["color"] == "#E74C3C"
    assert payload["display_name"] == "🥤 Bebidas"

    response = client.get("/api/categories", headers=headers)
    assert response.status_code == 200
    assert [row["name"] for row in response.json()] == ["Bebidas"]


def test_duplicate_category_name_conflicts(client):
    headers = admin_headers(client)
    assert client.post("/api/categories", headers=headers, json={"name": "Limpeza"}).status_code == 201
    response = client.post("/api/categories", headers=headers, json={"name": "limpeza"})
    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


def test_update_category_and_hide_inactive(client, db_session):
    category = create_category(db_session, "Padaria")
    headers = admin_headers(client)
    response = client.patch(
        f"/api/categories/{category.meta.id}",
        headers=headers,
        json={"description": "Pão e bolos", "active": False},
    )
    assert response.status_code == 200
    assert response.json()["active"] is False

    assert client.get("/api/categories", headers=headers).json() == []
    response = client.get("/api/categories", headers=headers, params={"include_inactive": True})
    assert [row["description"] for row in response.json()] == ["Pão e bolos"]


def test_category_validation_error(client):
    response = client.post("/api/categories", headers=admin_headers(client), json={"name": "X"})
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["details"]["errors"] == ["Category name must be between 2 and 100 characters"]


def test_create_product_records_initial_stock(client, db_session):
    category = create_category(db_session)
    response = client.post("/api/products", headers=admin_headers(client), json=_product_payload(category.meta.id))
    assert response.status_code == 201
    payload = response.json()
    assert payload["category_name"] == "Bebidas"
    assert payload["current_stock"] == 24
    assert payload["margin_percent"] == "60.00"
    assert payload["warnings"] == []

    movements = StockMovementRepository(db_session).list_for_product(payload["id"])
    assert [(m.quantity_delta, m.reason) for m in movements] == [(24, "PURCHASE")]


def test_create_product_returns_price_warning(client, db_session):
    category = create_category(db_session)
    response = client.post(
        "/api/products",
        headers=admin_headers(client),
        json=_product_payload(category.meta.id, sale_price="200.00", barcode=None),
    )
    assert response.status_code == 201
    assert response.json()["warnings"] == ["Sale price is lower than purchase price"]


def test_create_product_rejects_bad_barcode_and_missing_category(client):
    response = client.post(
        "/api/products",
        headers=admin_headers(client),
        json=_product_payload(999, barcode="4006381333932"),
    )
    assert response.status_code == 422
    errors = response.json()["details"]["errors"]
    assert "Barcode check digit is invalid" in errors
    assert "Category does not exist" in errors


def test_duplicate_barcode_conflicts(client, db_session):
    category = create_category(db_session)
    create_product(db_session, category=category, barcode="4006381333931")
    response = client.post("/api/products", headers=admin_headers(client), json=_product_payload(category.meta.id))
    assert response.status_code == 409


def test_lookup_by_barcode_and_search(client, db_session):
    category = create_category(db_session)
    product = create_product(db_session, category=category, name="Óleo Fula 1L", barcode="96385074")
    create_product(db_session, category=category, name="Açúcar 1kg")
    headers = admin_headers(client)

    response = client.get("/api/products/barcode/96385074", headers=headers)
    assert response.status_code == 200
    assert response.json()["id"] == product.meta.id

    response = client.get("/api/products/barcode/0000", headers=headers)
    assert response.status_code == 404

    response = client.get("/api/products", headers=headers, params={"q": "Fula"})
    assert [row["name"] for row in response.json()["rows"]] == ["Óleo Fula 1L"]


def test_low_stock_filter(client, db_session):
    category = create_category(db_session)
    create_product(db_session, category=category, name="Fósforos", stock=2, min_stock=5)
    create_product(db_session, category=category, name="Velas", stock=50, min_stock=5)
    response = client.get("/api/products", headers=admin_headers(client), params={"low_stock": True})
    assert [row["name"] for row in response.json()["rows"]] == ["Fósforos"]
    assert response.json()["rows"][0]["is_low_stock"] is True


def test_update_product_partial_fields(client, db_session):
    category = create_category(db_session)
    product = create_product(db_session, category=category, barcode="96385074")
    response = client.patch(
        f"/api/products/{product.meta.id}",
        headers=admin_headers(client),
        json={"sale_price": "1200", "notes": "Promoção"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["sale_price"] == "1200.00"
    assert payload["purchase_price"] == "600.00"
    assert payload["barcode"] == "96385074"
    assert payload["notes"] == "Promoção"


def test_adjust_stock_writes_movement(client, db_session):
    category = create_category(db_session)
    product = create_product(db_session, category=category, stock=10)
    headers = admin_headers(client)

    response = client.post(
        f"/api/products/{product.meta.id}/stock",
        headers=headers,
        json={"quantity_delta": -3, "reason": "loss", "reference": "garrafas partidas"},
    )
    assert response.status_code == 200
    assert response.json()["current_stock"] == 7

    movements = StockMovementRepository(db_session).list_for_product(product.meta.id)
    assert movements[0].reason == "LOSS"
    assert movements[0].stock_after == 7


def test_adjust_stock_cannot_go_negative(client, db_session):
    category = create_category(db_session)
    product = create_product(db_session, category=category, stock=2)
    response = client.post(
        f"/api/products/{product.meta.id}/stock",
        headers=admin_headers(client),
        json={"quantity_delta": -3},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "INSUFFICIENT_STOCK"


def test_adjust_stock_rejects_unknown_reason(client, db_session):
    category = create_category(db_session)
    product = create_product(db_session, category=category)
    response = client.post(
        f"/api/products/{product.meta.id}/stock",
        headers=admin_headers(client),
        json={"quantity_delta": 1, "reason": "SALE"},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_seller_can_look_up_but_not_manage_products(client, db_session):
    category = create_category(db_session)
    product = create_product(db_session, category=category)
    create_user(db_session, username="vendedor2", role=Role.SELLER)
    headers = auth_headers(login(client, "vendedor2", "Pass1234!"))

    assert client.get(f"/api/products/{product.meta.id}", headers=headers).status_code == 200

    response = client.post("/api/products", headers=headers, json=_product_payload(category.meta.id))
    assert response.status_code == 403
    assert response.json()["details"] == {"capability": "PRODUCT_MANAGEMENT"}

    response = client.post(f"/api/products/{product.meta.id}/stock", headers=headers, json={"quantity_delta": 1})
    assert response.status_code == 403


def test_request_schema_errors_use_error_envelope(client):
    response = client.post("/api/products", headers=admin_headers(client), json={"name": "Sem categoria"})
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["details"]["errors"][0]["field"] == "category_id"


@pytest.mark.parametrize(
    "overrides",
    [
        {"sale_price": "1E+30"},
        {"purchase_price": "-1"},
        {"sale_price": "10.005"},
        {"current_stock": 10**20},
        {"min_stock": -1},
    ],
)
def test_product_numbers_outside_storage_limits_are_rejected(client, db_session, overrides):
    category = create_category(db_session)
    response = client.post(
        "/api/products",
        headers=admin_headers(client),
        json=_product_payload(category.meta.id, **overrides),
    )
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_product_update_rejects_oversized_price(client, db_session):
    category = create_category(db_session)
    product = create_product(db_session, category=category)
    response = client.patch(
        f"/api/products/{product.meta.id}",
        headers=admin_headers(client),
        json={"sale_price": "1E+30"},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_adjust_stock_rejects_oversized_delta(client, db_session):
    category = create_category(db_session)
    product = create_product(db_session, category=category)
    response = client.post(
        f"/api/products/{product.meta.id}/stock",
        headers=admin_headers(client),
        json={"quantity_delta": 10**20},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_product_list_total_counts_all_matches(client, db_session):
    category = create_category(db_session)
    for name in ("Arroz", "Feijão", "Massa"):
        create_product(db_session, category=category, name=name)

    response = client.get("/api/products", headers=admin_headers(client), params={"limit": 2})
    payload = response.json()
    assert [row["name"] for row in payload["rows"]] == ["Arroz", "Feijão"]
    assert payload["total"] == 3
