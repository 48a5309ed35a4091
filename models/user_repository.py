"""
UserRepository: the persistence operations the session core depends on.

update_refresh_hash() doubles as a compare-and-swap: when `expected` is
given, the row is only updated if its stored hash still equals it, and the
return value says whether this caller won.
"""
from __future__ import annotations

from typing import Optional

from models.base_model import utcnow
from models.user import User

ANY = object()


class UserRepository:
    def __init__(self, storage):
        self._storage = storage

    def _session(self):
        return self._storage.get_session()

    def find_by_email(self, email: str) -> Optional[User]:
        return self._session().query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self._storage.get(User, user_id)

    def find_by_refresh_hash(self, refresh_hash: str) -> Optional[User]:
        if not refresh_hash:
            return None
        return self._session().query(User).filter(User.refresh_token_hash == refresh_hash).first()

    def create(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        self._storage.new(user)
        self._storage.save()
        return user

    def update_password_hash(self, user_id: str, password_hash: str) -> None:
        self._session().query(User).filter(User.id == user_id).update(
            {User.password_hash: password_hash, User.updated_at: utcnow()},
            synchronize_session="fetch",
        )
        self._storage.save()

    def update_refresh_hash(self, user_id: str, new_hash: Optional[str], expected=ANY) -> bool:
        query = self._session().query(User).filter(User.id == user_id)
        if expected is not ANY:
            if expected is None:
                query = query.filter(User.refresh_token_hash.is_(None))
            else:
                query = query.filter(User.refresh_token_hash == expected)
        updated = query.update(
            {User.refresh_token_hash: new_hash, User.updated_at: utcnow()},
            synchronize_session="fetch",
        )
        self._storage.save()
        return updated == 1
