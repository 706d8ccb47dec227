from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class RecordMetadata:
    """Identity and bookkeeping shared by every persisted entity."""

    id: int | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None
    active: bool = True

    def touch(self) -> None:
        self.updated_at = utcnow()

    def deactivate(self) -> None:
        self.active = False
        self.touch()

    def activate(self) -> None:
        self.active = True
        self.touch()

    def same_record(self, other: RecordMetadata) -> bool:
        return self.id is not None and other.id is not None and self.id == other.id


@runtime_checkable
class Validatable(Protocol):
    def validate(self) -> list[str]: ...


def is_valid(entity: Validatable) -> bool:
    return not entity.validate()
