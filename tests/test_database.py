import pytest
from sqlalchemy import inspect

from app.kwanza.core.config import Settings
from app.kwanza.db.seed import seed_defaults
from app.kwanza.db.session import Database
from app.kwanza.domain.catalog import Category
from app.kwanza.domain.permissions import Role
from app.kwanza.repos.catalog import CategoryRepository
from app.kwanza.repos.users import UserRepository
from tests.helpers import create_user, run_migrations


def test_migrations_create_all_tables(app):
    tables = set(inspect(app.state.database.engine).get_table_names())
    assert {
        "categories",
        "products",
        "customers",
        "suppliers",
        "users",
        "sales",
        "sale_items",
        "stock_movements",
        "audit_events",
    } <= tables


def test_connection_check(app, tmp_path):
    assert app.state.database.test_connection() is True

    broken = Database(Settings(DATABASE_URL=f"sqlite+pysqlite:///{tmp_path / 'missing' / 'x.db'}"))
    try:
        assert broken.test_connection() is False
    finally:
        broken.dispose()


def test_transaction_rolls_back_on_error(app):
    database = app.state.database
    with pytest.raises(RuntimeError):
        with database.transaction() as db:
            CategoryRepository(db).save(Category(name="Temporária"))
            raise RuntimeError("boom")

    with database.transaction() as db:
        assert CategoryRepository(db).get_by_name("Temporária") is None


def test_transaction_commits_on_success(app):
    database = app.state.database
    with database.transaction() as db:
        CategoryRepository(db).save(Category(name="Mercearia"))

    with database.transaction() as db:
        assert CategoryRepository(db).get_by_name("Mercearia") is not None


def test_seed_is_idempotent(app, settings, db_session):
    with app.state.database.transaction() as db:
        admin = seed_defaults(db, settings)
    assert admin.username == "admin"
    assert admin.role == Role.ADMINISTRATOR
    assert UserRepository(db_session).count() == 1


def test_seed_skips_admin_when_operators_exist(tmp_path):
    settings = Settings(DATABASE_URL=f"sqlite+pysqlite:///{tmp_path / 'store.db'}", SECRET_KEY="test-secret")
    run_migrations(settings.DATABASE_URL)
    database = Database(settings)
    try:
        with database.transaction() as db:
            create_user(db, username="gerente", role=Role.MANAGER)
        with database.transaction() as db:
            assert seed_defaults(db, settings) is None
            assert UserRepository(db).get_by_username("admin") is None
    finally:
        database.dispose()
