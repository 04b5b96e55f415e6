#!/usr/bin/env python
"""Create (or repair) the marketplace admin account."""
from __future__ import annotations

import argparse

from campus_market.config import get_settings
from campus_market.services.admin import AdminService
from campus_market.services.auth import get_auth_service
from campus_market.services.datastore import get_datastore


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Bootstrap the Campus Market admin account")
    parser.add_argument("--email", default=settings.admin_email)
    parser.add_argument("--password", default=settings.admin_password)
    args = parser.parse_args()

    admin = AdminService(get_datastore(), get_auth_service())
    result = admin.bootstrap_admin(args.email, args.password)
    print(result.message)
    print(result.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
