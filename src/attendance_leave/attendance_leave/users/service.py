from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from .department_repository import DepartmentRepository
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def parse_role(value: Union[str, Role]) -> Role:
    if isinstance(value, Role):
        return value
    raw = (value or "").strip() if isinstance(value, str) else value
    try:
        return Role(raw)
    except ValueError:
        pass
    try:
        return Role[str(raw).upper()]
    except KeyError:
        raise ValidationError("Invalid role")


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    email: str
    employee_code: str
    role: Role
    manager_id: Optional[int]
    dept_id: Optional[int]


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthenticationError("Invalid email or password")
        user = self._users.get_by_email(email.strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        logger.info("User %s authenticated", user.user_id)
        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            email=user.email,
            employee_code=user.employee_code,
            role=user.role,
            manager_id=user.manager_id,
            dept_id=user.dept_id,
        )


class UserService:
    """Use case: manage users (admin)."""

    def __init__(self, users: UserRepository, departments: DepartmentRepository):
        self._users = users
        self._departments = departments

    def _check_manager(self, manager_id: int) -> None:
        manager = self._users.get_by_id(int(manager_id))
        if not manager:
            raise NotFoundError("Manager not found")
        if manager.role not in {Role.MANAGER, Role.ADMINISTRATOR}:
            raise ValidationError("The specified manager must have Manager or Administrator role")

    def _check_department(self, dept_id: int) -> None:
        dept = self._departments.get_by_id(int(dept_id))
        if not dept or not dept.is_active:
            raise NotFoundError("Department not found or inactive")

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        employee_code: str,
        password: str,
        role: Union[str, Role],
        manager_id: Optional[int] = None,
        dept_id: Optional[int] = None,
    ) -> User:
        full_name = require_non_empty(full_name, "Full name")
        email = require_non_empty(email, "Email").lower()
        employee_code = require_non_empty(employee_code, "Employee code")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = parse_role(role)

        if self._users.get_by_email(email):
            raise ConflictError("A user with this email already exists")
        if self._users.get_by_employee_code(employee_code):
            raise ConflictError("A user with this employee code already exists")
        if manager_id is not None:
            self._check_manager(manager_id)
        if dept_id is not None:
            self._check_department(dept_id)

        password_hash = generate_password_hash(password)
        user_id = self._users.create_user(
            full_name=full_name,
            email=email,
            employee_code=employee_code,
            password_hash=password_hash,
            role=role,
            manager_id=int(manager_id) if manager_id is not None else None,
            dept_id=int(dept_id) if dept_id is not None else None,
        )
        logger.info("Created user %s (%s) with role %s", user_id, email, role.value)
        return User(
            user_id=user_id,
            full_name=full_name,
            email=email,
            employee_code=employee_code,
            password_hash=password_hash,
            role=role,
            manager_id=int(manager_id) if manager_id is not None else None,
            dept_id=int(dept_id) if dept_id is not None else None,
        )

    def update_user(
        self,
        user_id: int,
        *,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[Union[str, Role]] = None,
        manager_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> User:
        """Partial update: ``None`` leaves a field unchanged."""

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")

        changes: dict[str, object] = {}
        if full_name is not None:
            changes["full_name"] = require_non_empty(full_name, "Full name")
        if email is not None:
            email = require_non_empty(email, "Email").lower()
            other = self._users.get_by_email(email)
            if other and other.user_id != user.user_id:
                raise ConflictError("A user with this email already exists")
            changes["email"] = email
        if role is not None:
            changes["role"] = parse_role(role)
        if manager_id is not None:
            if int(manager_id) == user.user_id:
                raise ValidationError("A user cannot be their own manager")
            self._check_manager(manager_id)
            changes["manager_id"] = int(manager_id)
        if dept_id is not None:
            self._check_department(dept_id)
            changes["dept_id"] = int(dept_id)
        if is_active is not None:
            changes["is_active"] = bool(is_active)

        if changes:
            self._users.update_user(user.user_id, **changes)
            logger.info("Updated user %s: %s", user.user_id, ", ".join(sorted(changes)))

        return self._users.get_by_id(user.user_id) or user

    def list_active_users(self) -> Sequence[User]:
        return self._users.list_active()

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user
