"""Repository for dashboard user accounts."""

from __future__ import annotations

from typing import Any

from infrastructure.database.ops.users import UserOperations


class UserRepository:
    def __init__(self, backend: UserOperations) -> None:
        self._backend = backend

    def create(self, fullname: str, email: str, password_hash: str, role: str = "client") -> dict[str, Any]:
        return self._backend.insert_user(fullname=fullname, email=email, password_hash=password_hash, role=role)

    def get(self, user_id: int) -> dict[str, Any] | None:
        return self._backend.get_user_by_id(user_id)

    def get_by_email(self, email: str) -> dict[str, Any] | None:
        return self._backend.get_user_by_email(email)

    def update(self, user_id: int, **fields: Any) -> bool:
        return self._backend.update_user(user_id, fields)
