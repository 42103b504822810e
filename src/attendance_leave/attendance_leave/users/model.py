from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object, no database access here.
    """

    user_id: int
    full_name: str
    email: str
    employee_code: str
    password_hash: str
    role: Role
    manager_id: Optional[int] = None
    dept_id: Optional[int] = None
    is_active: bool = True
