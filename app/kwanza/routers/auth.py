from fastapi import APIRouter, Depends, Request

from app.kwanza.core.config import Settings
from app.kwanza.core.deps import get_settings
from app.kwanza.db.session import get_db
from app.kwanza.schemas.auth import LoginRequest, TokenResponse
from app.kwanza.schemas.errors import ApiErrorResponse
from app.kwanza.schemas.users import UserResponse
from app.kwanza.services.auth import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login (JSON)",
    responses={401: {"model": ApiErrorResponse}, 403: {"model": ApiErrorResponse}},
)
def login(
    request: Request,
    payload: LoginRequest,
    db=Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    trace_id = getattr(request.state, "trace_id", "")
    user, token = AuthService(db, settings).login(payload.username, payload.password, trace_id=trace_id)
    return TokenResponse(access_token=token, user=UserResponse.from_domain(user))
