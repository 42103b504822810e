from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        employee_code: str,
        password_hash: str,
        role: Role,
        manager_id: Optional[int],
        dept_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, **fields: Any) -> bool:
        """Update only the given columns (full_name, email, role, manager_id, dept_id, is_active)."""

        raise NotImplementedError

    def list_active(self) -> Sequence[User]:
        raise NotImplementedError

    def list_direct_reports(self, manager_id: int) -> Sequence[User]:
        """Active users whose manager is ``manager_id``."""

        raise NotImplementedError

    def count_active_in_department(self, dept_id: int) -> int:
        raise NotImplementedError

    def manager_of(self, user_id: int) -> Optional[int]:
        raise NotImplementedError
