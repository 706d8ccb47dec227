import logging

from app.kwanza.core.config import Settings
from app.kwanza.core.logging import configure_logging, log_json
from app.kwanza.db.session import Database
from app.kwanza.domain.permissions import Role
from app.kwanza.domain.users import User
from app.kwanza.repos.users import UserRepository

logger = logging.getLogger(__name__)


def _get_or_create_admin(db, settings: Settings) -> User | None:
    repo = UserRepository(db)
    existing = repo.get_by_username(settings.ADMIN_USERNAME)
    if existing is not None:
        return existing
    if repo.count() > 0:
        # the store already has operators; never resurrect the default account
        return None
    admin = User(
        name=settings.ADMIN_NAME,
        username=settings.ADMIN_USERNAME,
        password=settings.ADMIN_PASSWORD,
        role=Role.ADMINISTRATOR,
    )
    repo.save(admin)
    log_json(logger, {"event": "seed.admin_created", "username": admin.username})
    return admin


def seed_defaults(db, settings: Settings) -> User | None:
    admin = _get_or_create_admin(db, settings)
    db.commit()
    return admin


def main() -> None:
    settings = Settings()
    configure_logging(settings.LOG_LEVEL)
    database = Database(settings)
    try:
        with database.transaction() as db:
            seed_defaults(db, settings)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
