from app.kwanza.domain.permissions import Role
from app.kwanza.repos.audit import AuditRepository
from tests.helpers import admin_headers, auth_headers, create_user, login


def test_admin_creates_user_who_can_log_in(client):
    headers = admin_headers(client)
    response = client.post(
        "/api/users",
        headers=headers,
        json={"name": "Joana Caixa", "username": "Joana", "password": "Caixa2024!", "role": "SELLER"},
    )
    assert response.status_code == 201
    payload = response.json()
    assert payload["username"] == "joana"
    assert payload["role_label"] == "Vendedor"
    assert "password" not in payload

    assert login(client, "joana", "Caixa2024!")


def test_duplicate_username_conflicts(client):
    headers = admin_headers(client)
    response = client.post(
        "/api/users",
        headers=headers,
        json={"name": "Outro Admin", "username": "ADMIN", "password": "segredo1"},
    )
    assert response.status_code == 409


def test_short_password_is_rejected(client):
    response = client.post(
        "/api/users",
        headers=admin_headers(client),
        json={"name": "Pedro", "username": "pedro", "password": "123"},
    )
    assert response.status_code == 422
    assert response.json()["details"]["errors"] == ["Password must have at least 6 characters"]


def test_seller_is_refused_user_management(client, db_session):
    create_user(db_session, username="vendedor9", role=Role.SELLER)
    headers = auth_headers(login(client, "vendedor9", "Pass1234!"))
    response = client.get("/api/users", headers=headers)
    assert response.status_code == 403
    payload = response.json()
    assert payload["code"] == "PERMISSION_DENIED"
    assert payload["details"] == {"capability": "USER_MANAGEMENT"}


def test_manager_is_refused_user_management(client, db_session):
    create_user(db_session, username="gerente9", role=Role.MANAGER)
    headers = auth_headers(login(client, "gerente9", "Pass1234!"))
    response = client.post(
        "/api/users",
        headers=headers,
        json={"name": "Novo", "username": "novo", "password": "segredo1"},
    )
    assert response.status_code == 403


def test_list_users_by_role(client, db_session):
    create_user(db_session, username="vendedor5", role=Role.SELLER)
    create_user(db_session, username="gerente5", role=Role.MANAGER)
    response = client.get("/api/users", headers=admin_headers(client), params={"role": "manager"})
    assert response.status_code == 200
    assert [row["username"] for row in response.json()["rows"]] == ["gerente5"]


def test_promote_and_deactivate_user(client, db_session):
    user = create_user(db_session, username="temp", role=Role.SELLER)
    headers = admin_headers(client)

    response = client.patch(f"/api/users/{user.meta.id}", headers=headers, json={"role": "MANAGER", "password": "NovaSenha1"})
    assert response.status_code == 200
    assert response.json()["role"] == "MANAGER"
    assert login(client, "temp", "NovaSenha1")

    response = client.patch(f"/api/users/{user.meta.id}", headers=headers, json={"active": False})
    assert response.status_code == 200
    assert response.json()["active"] is False
    response = client.post("/api/auth/login", json={"username": "temp", "password": "NovaSenha1"})
    assert response.status_code == 403

    events = AuditRepository(db_session).list_for_entity("user", str(user.meta.id))
    assert [event.event_metadata["fields"] for event in events] == [["role"], ["active"]]


def test_admin_cannot_deactivate_self(client):
    headers = admin_headers(client)
    me = client.get("/api/me", headers=headers).json()
    response = client.patch(f"/api/users/{me['id']}", headers=headers, json={"active": False})
    assert response.status_code == 409
