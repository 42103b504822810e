"""Example: drive the service layer directly (no Flask).

Controllers are thin; the workflow lives in the services wired by the container.
"""

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_leave.attendance_leave.approvals.authority import Actor
from src.attendance_leave.attendance_leave.container import build_container
from src.attendance_leave.attendance_leave.core.enums import Role
from src.attendance_leave.attendance_leave.core.logging import setup_logging


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(level="INFO", json_format=False)
    container = build_container(db_config=settings.DB_CONFIG)

    employee = container.users_repo.get_by_email("employee@company.com")
    manager = container.users_repo.get_by_email("manager@company.com")
    if not employee or not manager:
        raise SystemExit("Run scripts/seed_db.py first")

    print(container.leave_service.get_available_balance(employee.user_id))
    for record in container.attendance_service.pending_for(Actor(manager.user_id, Role.MANAGER)):
        print(record)


if __name__ == "__main__":
    main()
