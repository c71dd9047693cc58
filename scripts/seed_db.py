from __future__ import annotations

import importlib

from dotenv import load_dotenv

from study_room.config import get_settings_module
from study_room.database.bootstrap import ensure_demo_users


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ids = ensure_demo_users(db_config)

    print(
        "OK: Seeded demo users -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )
    for email, user_id in ids.items():
        print(f"  {user_id:>4}  {email}")


if __name__ == "__main__":
    main()
