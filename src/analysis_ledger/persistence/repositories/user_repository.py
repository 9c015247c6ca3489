"""Users: attribution records for analyses."""

from datetime import datetime
from typing import Optional

from ...domain import User, UserRole
from ..rows import row_to_user, user_to_row
from ..schema import validate_user
from ..timing import timed
from .base import BaseRepository, Where


class UserRepository(BaseRepository[User]):
    table = "users"
    entity_name = "User"
    metric_name = "user"
    sortable = frozenset({"id", "username", "email", "created_at", "updated_at", "last_login"})

    def _to_row(self, entity: User):
        return user_to_row(entity)

    def _from_row(self, row) -> User:
        return row_to_user(row)

    def _validate(self, entity: User) -> None:
        validate_user(entity)

    def _filter(
        self,
        where: Where,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        username_contains: Optional[str] = None,
        email_contains: Optional[str] = None,
        name_contains: Optional[str] = None,
        created_between: Optional[tuple[datetime, datetime]] = None,
        last_login_between: Optional[tuple[datetime, datetime]] = None,
    ) -> None:
        where.eq("role", role).eq("is_active", is_active)
        where.contains("username", username_contains).contains("email", email_contains)
        where.contains_any(("first_name", "last_name"), name_contains)
        where.between("created_at", created_between).between("last_login", last_login_between)

    @timed("get_by_username")
    def get_by_username(self, username: str) -> Optional[User]:
        found = self._select(Where().eq("username", username))
        return found[0] if found else None

    @timed("get_by_email")
    def get_by_email(self, email: str) -> Optional[User]:
        found = self._select(Where().eq("email", email))
        return found[0] if found else None

    def get_by_username_or_email(self, login: str) -> Optional[User]:
        return self.get_by_username(login) or self.get_by_email(login)

    def exists_by_username(self, username: str) -> bool:
        return self._count(Where().eq("username", username)) > 0

    def exists_by_email(self, email: str) -> bool:
        return self._count(Where().eq("email", email)) > 0
