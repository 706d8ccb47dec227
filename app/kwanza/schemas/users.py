from datetime import datetime

from pydantic import BaseModel

from app.kwanza.domain.permissions import Role, capabilities_for
from app.kwanza.domain.users import User


class UserCreateRequest(BaseModel):
    name: str
    username: str
    password: str
    role: Role = Role.SELLER


class UserUpdateRequest(BaseModel):
    name: str | None = None
    password: str | None = None
    role: Role | None = None
    active: bool | None = None


class UserResponse(BaseModel):
    id: int
    name: str
    username: str
    role: Role
    role_label: str
    active: bool
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.meta.id,
            name=user.name,
            username=user.username,
            role=user.role,
            role_label=user.role_label,
            active=user.meta.active,
            created_at=user.meta.created_at,
            updated_at=user.meta.updated_at,
        )


class MeResponse(UserResponse):
    capabilities: list[str]

    @classmethod
    def from_domain(cls, user: User) -> "MeResponse":
        base = UserResponse.from_domain(user).model_dump()
        return cls(**base, capabilities=sorted(capability.value for capability in capabilities_for(user.role)))


class UserListResponse(BaseModel):
    rows: list[UserResponse]
    total: int
