from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_WEEKLY_OFF_DAYS, WEEKDAY_NAMES
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .department_model import Department
from .department_repository import DepartmentRepository
from .repository import UserRepository

logger = logging.getLogger(__name__)


def normalize_weekly_off_days(days: Optional[Iterable[str]]) -> tuple[str, ...]:
    if days is None:
        return DEFAULT_WEEKLY_OFF_DAYS
    if isinstance(days, str) or not isinstance(days, (list, tuple, set, frozenset)):
        raise ValidationError("Weekly off days must be a list of weekday names")
    by_lower = {name.lower(): name for name in WEEKDAY_NAMES}
    out: list[str] = []
    for d in days:
        name = by_lower.get(str(d).strip().lower())
        if not name:
            raise ValidationError(f"Invalid weekday: {d}")
        if name not in out:
            out.append(name)
    return tuple(sorted(out, key=WEEKDAY_NAMES.index))


class DepartmentService:
    def __init__(self, departments: DepartmentRepository, users: UserRepository):
        self._departments = departments
        self._users = users

    def create(
        self,
        *,
        name: str,
        description: Optional[str] = None,
        weekly_off_days: Optional[Iterable[str]] = None,
    ) -> Department:
        name = require_non_empty(name, "Department name")
        description = optional_text(description, "Description")
        days = normalize_weekly_off_days(weekly_off_days)

        dept_id = self._departments.create(name=name, description=description, weekly_off_days=days)
        logger.info("Created department %s (%s)", dept_id, name)
        return Department(dept_id=dept_id, name=name, description=description, weekly_off_days=days)

    def update(
        self,
        dept_id: int,
        *,
        name: str,
        description: Optional[str] = None,
        weekly_off_days: Optional[Iterable[str]] = None,
        is_active: bool = True,
    ) -> Department:
        if not self._departments.get_by_id(int(dept_id)):
            raise NotFoundError("Department not found")

        name = require_non_empty(name, "Department name")
        description = optional_text(description, "Description")
        days = normalize_weekly_off_days(weekly_off_days)

        self._departments.update(
            dept_id=int(dept_id),
            name=name,
            description=description,
            weekly_off_days=days,
            is_active=bool(is_active),
        )
        logger.info("Updated department %s", dept_id)
        return Department(
            dept_id=int(dept_id),
            name=name,
            description=description,
            weekly_off_days=days,
            is_active=bool(is_active),
        )

    def list_active(self) -> Sequence[Department]:
        return self._departments.list_active()

    def deactivate(self, dept_id: int) -> None:
        if not self._departments.get_by_id(int(dept_id)):
            raise NotFoundError("Department not found")
        if self._users.count_active_in_department(int(dept_id)) > 0:
            raise ConflictError("Cannot delete department with active employees. Please reassign employees first.")

        self._departments.set_active(int(dept_id), is_active=False)
        logger.info("Deactivated department %s", dept_id)
