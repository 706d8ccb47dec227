from fastapi import Depends, Request
from jose import JWTError
from pydantic import ValidationError

from app.kwanza.core.config import Settings
from app.kwanza.core.context import RequestContext, build_request_context
from app.kwanza.core.error_catalog import AppError, ErrorCatalog
from app.kwanza.core.metrics import Metrics
from app.kwanza.core.security import TokenData, decode_token, oauth2_scheme
from app.kwanza.db.session import get_db
from app.kwanza.domain.permissions import Capability, has_permission
from app.kwanza.repos.users import UserRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics(request: Request) -> Metrics:
    return request.app.state.metrics


def get_current_token_data(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> TokenData:
    try:
        payload = decode_token(token, settings)
        return TokenData(**payload)
    except (JWTError, ValidationError, TypeError) as exc:
        raise AppError(ErrorCatalog.INVALID_TOKEN) from exc


def get_current_user(token_data: TokenData = Depends(get_current_token_data), db=Depends(get_db)):
    try:
        user_id = int(token_data.sub)
    except ValueError as exc:
        raise AppError(ErrorCatalog.INVALID_TOKEN) from exc

    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise AppError(ErrorCatalog.INVALID_TOKEN)
    if not user.meta.active:
        raise AppError(ErrorCatalog.USER_INACTIVE)
    return user


def require_request_context(request: Request, user=Depends(get_current_user)) -> RequestContext:
    context = build_request_context(
        user_id=user.meta.id,
        username=user.username,
        role=user.role.value,
        trace_id=getattr(request.state, "trace_id", ""),
    )
    request.state.context = context
    return context


def require_capability(capability: Capability):
    """Dependency factory: the role stored on the user (not the token) decides."""

    def dependency(
        user=Depends(get_current_user),
        context: RequestContext = Depends(require_request_context),
    ) -> RequestContext:
        if not has_permission(user.role, capability):
            raise AppError(ErrorCatalog.PERMISSION_DENIED, details={"capability": capability.value})
        return context

    return dependency


__all__ = [
    "get_settings",
    "get_metrics",
    "get_current_token_data",
    "get_current_user",
    "require_request_context",
    "require_capability",
]
