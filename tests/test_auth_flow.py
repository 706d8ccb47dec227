from datetime import timedelta

from app.kwanza.core.security import create_access_token
from app.kwanza.domain.permissions import Role
from app.kwanza.repos.users import UserRepository
from tests.helpers import auth_headers, create_user, login


def test_login_success(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["access_token"]
    assert payload["token_type"] == "bearer"
    assert payload["user"]["username"] == "admin"
    assert payload["user"]["role"] == "ADMINISTRATOR"
    assert payload["user"]["role_label"] == "Administrador"


def test_login_username_is_case_insensitive(client):
    response = client.post("/api/auth/login", json={"username": "  ADMIN ", "password": "admin123"})
    assert response.status_code == 200


def test_login_invalid_password(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": "wrong-pass"})
    assert response.status_code == 401
    payload = response.json()
    assert payload["code"] == "INVALID_CREDENTIALS"
    assert payload["trace_id"]


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"username": "ninguem", "password": "admin123"})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_login_blocked_inactive(client, db_session):
    create_user(db_session, username="inativo", active=False)
    response = client.post("/api/auth/login", json={"username": "inativo", "password": "Pass1234!"})
    assert response.status_code == 403
    assert response.json()["code"] == "USER_INACTIVE"


def test_me_lists_role_capabilities(client, db_session):
    create_user(db_session, username="vendedor1", role=Role.SELLER)
    token = login(client, "vendedor1", "Pass1234!")
    response = client.get("/api/me", headers=auth_headers(token))
    assert response.status_code == 200
    payload = response.json()
    assert payload["username"] == "vendedor1"
    assert payload["capabilities"] == ["CUSTOMER_LOOKUP", "PRODUCT_LOOKUP", "SALES"]


def test_me_requires_token(client):
    response = client.get("/api/me")
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"


def test_me_rejects_garbage_token(client):
    response = client.get("/api/me", headers=auth_headers("not-a-token"))
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


def test_me_rejects_expired_token(client, settings):
    token = create_access_token(
        {"sub": "1", "username": "admin", "role": "ADMINISTRATOR"},
        settings,
        expires_delta=timedelta(minutes=-1),
    )
    response = client.get("/api/me", headers=auth_headers(token))
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_TOKEN"


def test_token_of_deactivated_user_is_refused(client, db_session):
    user = create_user(db_session, username="saiu")
    token = login(client, "saiu", "Pass1234!")
    user.meta.deactivate()
    UserRepository(db_session).save(user)
    db_session.commit()

    response = client.get("/api/me", headers=auth_headers(token))
    assert response.status_code == 403
    assert response.json()["code"] == "USER_INACTIVE"
