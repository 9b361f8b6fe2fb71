"""Example: drive the service layer directly, without Flask.

Controllers stay thin; every rule lives in the services.
"""

import importlib

from dotenv import load_dotenv

from hr_portal.config import get_settings_module
from hr_portal.container import build_container
from hr_portal.core.constants import BOOTSTRAP_ADMIN_CODE
from hr_portal.employees.identity import Identity


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    admin = container.employees_repo.get_by_code(BOOTSTRAP_ADMIN_CODE)
    if admin is None:
        raise SystemExit("Run scripts/seed_db.py first")
    identity = Identity.of(admin)

    print(container.attendance_service.get_today(identity.employee_id))
    print(container.leave_service.list_requests(employee_id=identity.employee_id, limit=5))
    print(container.task_service.list_tasks(status=None, limit=5))


if __name__ == "__main__":
    main()
