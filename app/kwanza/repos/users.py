from sqlalchemy import func, or_, select

from app.kwanza.db.models import User as UserRow
from app.kwanza.domain.permissions import Role
from app.kwanza.domain.users import User, normalize_username
from app.kwanza.repos.records import apply_meta, meta_from_row


def user_from_row(row: UserRow) -> User:
    return User(
        name=row.name,
        username=row.username,
        password=row.password,
        role=Role(row.role),
        meta=meta_from_row(row),
    )


class UserRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, user_id: int) -> User | None:
        row = self.db.get(UserRow, user_id)
        return user_from_row(row) if row is not None else None

    def get_by_username(self, username: str) -> User | None:
        stmt = select(UserRow).where(UserRow.username == normalize_username(username))
        row = self.db.execute(stmt).scalars().first()
        return user_from_row(row) if row is not None else None

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(UserRow)).scalar_one()

    def list_users(self, *, role: str | None = None, search: str | None = None) -> list[User]:
        stmt = select(UserRow)
        if role:
            stmt = stmt.where(UserRow.role == role.strip().upper())
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(UserRow.username.ilike(pattern), UserRow.name.ilike(pattern)))
        rows = self.db.execute(stmt.order_by(UserRow.username)).scalars().all()
        return [user_from_row(row) for row in rows]

    def save(self, user: User) -> User:
        row = self.db.get(UserRow, user.meta.id) if user.meta.id else UserRow()
        row.name = user.name
        row.username = user.username
        row.password = user.password
        row.role = user.role.value
        apply_meta(row, user.meta)
        self.db.add(row)
        self.db.flush()
        user.meta.id = row.id
        return user
