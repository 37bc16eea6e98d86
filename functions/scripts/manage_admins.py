"""
CLI helper to manage the admin allow-list in the record store.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from farmstay.config import get_settings
from farmstay.db import PostgresDbClient
from farmstay.guard import ADMIN_USERS_TABLE, normalize_email


def main() -> int:
    parser = argparse.ArgumentParser(description="Manage allow-listed admin emails")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    add = sub.add_parser("add", help="Allow an email to use the admin dashboard")
    add.add_argument("emails", nargs="+")
    remove = sub.add_parser("remove", help="Revoke admin access")
    remove.add_argument("emails", nargs="+")
    sub.add_parser("list", help="Print allow-listed emails")
    args = parser.parse_args()

    database_url = args.database_url or get_settings().database_url
    if not database_url:
        print("DATABASE_URL is not set.", file=sys.stderr)
        return 2
    db = PostgresDbClient(database_url)

    if args.command == "list":
        for row in db.select(ADMIN_USERS_TABLE, order_by="email"):
            print(row["email"])
        return 0

    failed = 0
    for email in map(normalize_email, args.emails):
        if args.command == "add":
            if db.get(ADMIN_USERS_TABLE, email) is None:
                db.insert(ADMIN_USERS_TABLE, {"email": email})
            print(f"added {email}")
        elif db.delete(ADMIN_USERS_TABLE, email):
            print(f"removed {email}")
        else:
            print(f"not found: {email}", file=sys.stderr)
            failed += 1
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
