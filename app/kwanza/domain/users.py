from __future__ import annotations

from dataclasses import dataclass, field

from app.kwanza.core.validation import PasswordStrength, password_strength
from app.kwanza.domain.permissions import Capability, Role, has_permission, role_label
from app.kwanza.domain.records import RecordMetadata

MIN_PASSWORD_LENGTH = 6


def normalize_username(username: str | None) -> str:
    return (username or "").strip().lower()


@dataclass(eq=False)
class User:
    name: str
    username: str
    password: str
    role: Role = Role.SELLER
    meta: RecordMetadata = field(default_factory=RecordMetadata)

    def __post_init__(self):
        self.name = (self.name or "").strip()
        self.username = normalize_username(self.username)
        self.role = Role(self.role)

    @property
    def role_label(self) -> str:
        return role_label(self.role)

    @property
    def password_strength(self) -> PasswordStrength:
        return password_strength(self.password)

    def can(self, capability: Capability) -> bool:
        return self.meta.active and has_permission(self.role, capability)

    def rename(self, name: str) -> None:
        self.name = (name or "").strip()
        self.meta.touch()

    def change_password(self, password: str) -> None:
        self.password = password
        self.meta.touch()

    def change_role(self, role: Role) -> None:
        self.role = Role(role)
        self.meta.touch()

    def validate(self) -> list[str]:
        errors = []
        if not self.name:
            errors.append("Name is required")
        elif not 2 <= len(self.name) <= 100:
            errors.append("Name must be between 2 and 100 characters")
        if not self.username:
            errors.append("Username is required")
        elif not 3 <= len(self.username) <= 50:
            errors.append("Username must be between 3 and 50 characters")
        if not self.password:
            errors.append("Password is required")
        elif len(self.password) < MIN_PASSWORD_LENGTH:
            errors.append(f"Password must have at least {MIN_PASSWORD_LENGTH} characters")
        return errors

    def __str__(self) -> str:
        return f"{self.name} ({self.role_label})"
