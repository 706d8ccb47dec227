from app.kwanza.core.context import RequestContext
from app.kwanza.core.error_catalog import AppError, ErrorCatalog, validation_failed
from app.kwanza.domain.permissions import Role
from app.kwanza.domain.users import User
from app.kwanza.repos.users import UserRepository
from app.kwanza.services.audit import AuditEventPayload, AuditService


class UserService:
    def __init__(self, db):
        self.db = db
        self.repo = UserRepository(db)
        self.audit = AuditService(db)

    def get(self, user_id: int) -> User:
        user = self.repo.get_by_id(user_id)
        if user is None:
            raise AppError(ErrorCatalog.NOT_FOUND, details={"user_id": user_id})
        return user

    def list(self, role: str | None = None, search: str | None = None) -> list[User]:
        return self.repo.list_users(role=role, search=search)

    def create(self, context: RequestContext, user: User) -> User:
        errors = user.validate()
        if errors:
            raise validation_failed(errors)
        if self.repo.get_by_username(user.username) is not None:
            raise AppError(ErrorCatalog.CONFLICT, details={"username": user.username})
        self.repo.save(user)
        self.db.commit()
        self._audit(context, "user.create", user, {"username": user.username, "role": user.role.value})
        return user

    def update(self, context: RequestContext, user_id: int, changes: dict) -> User:
        user = self.get(user_id)
        if "name" in changes:
            user.rename(changes["name"])
        if changes.get("password"):
            user.change_password(changes["password"])
        if changes.get("role"):
            user.change_role(Role(changes["role"]))
        if changes.get("active") is False:
            if user.meta.id == context.user_id:
                raise AppError(ErrorCatalog.CONFLICT, details={"message": "Cannot deactivate the current user"})
            user.meta.deactivate()
        elif changes.get("active") is True:
            user.meta.activate()
        errors = user.validate()
        if errors:
            raise validation_failed(errors)
        self.repo.save(user)
        self.db.commit()
        # never put the password in audit metadata
        self._audit(context, "user.update", user, {"fields": sorted(key for key in changes if key != "password")})
        return user

    def _audit(self, context: RequestContext, action: str, user: User, metadata: dict) -> None:
        self.audit.record_event(
            AuditEventPayload.from_context(
                context, action=action, entity_type="user", entity_id=user.meta.id, metadata=metadata
            )
        )
