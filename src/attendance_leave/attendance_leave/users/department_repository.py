from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .department_model import Department


class DepartmentRepository(Protocol):
    def get_by_id(self, dept_id: int) -> Optional[Department]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Department]:
        raise NotImplementedError

    def create(self, *, name: str, description: Optional[str], weekly_off_days: Sequence[str]) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        dept_id: int,
        name: str,
        description: Optional[str],
        weekly_off_days: Sequence[str],
        is_active: bool,
    ) -> bool:
        raise NotImplementedError

    def set_active(self, dept_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError
