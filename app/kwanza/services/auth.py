import logging

from app.kwanza.core.config import Settings
from app.kwanza.core.error_catalog import AppError, ErrorCatalog
from app.kwanza.core.logging import log_json
from app.kwanza.core.security import create_user_access_token, verify_password
from app.kwanza.repos.users import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db, settings: Settings):
        self.repo = UserRepository(db)
        self.settings = settings

    def login(self, username: str, password: str, trace_id: str = ""):
        user = self.repo.get_by_username(username)
        if user is None or not verify_password(password, user.password):
            log_json(
                logger,
                {"event": "auth.login_failed", "username": (username or "").strip().lower(), "trace_id": trace_id},
            )
            raise AppError(ErrorCatalog.INVALID_CREDENTIALS)
        self._ensure_user_active(user)
        token = create_user_access_token(user, self.settings)
        log_json(logger, {"event": "auth.login", "user_id": user.meta.id, "trace_id": trace_id})
        return user, token

    @staticmethod
    def _ensure_user_active(user) -> None:
        if not user.meta.active:
            raise AppError(ErrorCatalog.USER_INACTIVE)
