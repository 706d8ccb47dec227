from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.kwanza.core.config import Settings
from app.kwanza.db.seed import seed_defaults
from app.main import create_app
from tests.helpers import run_migrations


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    database_url = f"sqlite+pysqlite:///{tmp_path / 'test.db'}"
    return Settings(DATABASE_URL=database_url, SECRET_KEY="test-secret", INVOICE_PREFIX="FT")


@pytest.fixture()
def app(settings):
    run_migrations(settings.DATABASE_URL)
    app = create_app(settings)
    with app.state.database.transaction() as db:
        seed_defaults(db, settings)
    return app


@pytest.fixture()
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def db_session(app):
    db = app.state.database.session()
    try:
        yield db
    finally:
        db.close()
