from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from alembic import command
from alembic.config import Config

from app.kwanza.domain.catalog import Category, Product
from app.kwanza.domain.permissions import Role
from app.kwanza.domain.users import User
from app.kwanza.repos.catalog import CategoryRepository, ProductRepository
from app.kwanza.repos.users import UserRepository

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"
ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"


def run_migrations(database_url: str) -> None:
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("sqlalchemy.url", database_url)
    config.attributes["configure_logger"] = False
    command.upgrade(config, "head")


def login(client, username: str = ADMIN_USERNAME, password: str = ADMIN_PASSWORD) -> str:
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def admin_headers(client) -> dict:
    return auth_headers(login(client))


def create_user(db_session, *, username: str, role: Role = Role.SELLER, password: str = "Pass1234!", active: bool = True):
    user = User(name=f"User {username}", username=username, password=password, role=role)
    if not active:
        user.meta.deactivate()
    UserRepository(db_session).save(user)
    db_session.commit()
    return user


def create_category(db_session, name: str = "Bebidas") -> Category:
    category = Category(name=name)
    CategoryRepository(db_session).save(category)
    db_session.commit()
    return category


def create_product(
    db_session,
    *,
    category: Category,
    name: str = "Água Mineral 1.5L",
    sale_price: str = "1000.00",
    purchase_price: str = "600.00",
    stock: int = 10,
    barcode: str | None = None,
    min_stock: int = 5,
) -> Product:
    product = Product(
        name=name,
        category_id=category.meta.id,
        purchase_price=Decimal(purchase_price),
        sale_price=Decimal(sale_price),
        current_stock=stock,
        min_stock=min_stock,
        barcode=barcode,
    )
    ProductRepository(db_session).save(product)
    db_session.commit()
    return product
