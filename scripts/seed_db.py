from __future__ import annotations

import importlib

from dotenv import load_dotenv

from hr_portal.config import get_settings_module
from hr_portal.core.constants import BOOTSTRAP_ADMIN_CODE
from hr_portal.database.bootstrap import ensure_admin
from hr_portal.database.connection import DBConfig


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    admin_id = ensure_admin(db_config)
    print(
        f"OK: Seeded database -> {DBConfig.from_dict(db_config).describe()} "
        f"(admin {BOOTSTRAP_ADMIN_CODE}, employee_id={admin_id})"
    )


if __name__ == "__main__":
    main()
