from fastapi import APIRouter, Depends, Query

from app.kwanza.core.context import RequestContext
from app.kwanza.core.deps import get_current_user, require_capability
from app.kwanza.db.session import get_db
from app.kwanza.domain.permissions import Capability
from app.kwanza.domain.users import User
from app.kwanza.schemas.errors import ERROR_RESPONSES
from app.kwanza.schemas.users import (
    MeResponse,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from app.kwanza.services.users import UserService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/api/me", response_model=MeResponse)
def me(user=Depends(get_current_user)):
    return MeResponse.from_domain(user)


@router.get("/api/users", response_model=UserListResponse)
def list_users(
    role: str | None = Query(default=None),
    q: str | None = Query(default=None),
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.USER_MANAGEMENT)),
):
    users = UserService(db).list(role=role, search=q)
    return UserListResponse(rows=[UserResponse.from_domain(user) for user in users], total=len(users))


@router.post("/api/users", response_model=UserResponse, status_code=201)
def create_user(
    payload: UserCreateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.USER_MANAGEMENT)),
):
    user = User(name=payload.name, username=payload.username, password=payload.password, role=payload.role)
    return UserResponse.from_domain(UserService(db).create(context, user))


@router.patch("/api/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    db=Depends(get_db),
    context: RequestContext = Depends(require_capability(Capability.USER_MANAGEMENT)),
):
    user = UserService(db).update(context, user_id, payload.model_dump(exclude_unset=True))
    return UserResponse.from_domain(user)
