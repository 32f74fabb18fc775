#!/usr/bin/env python3
"""
Create an administrator account, or grant capabilities to an existing one.

Run: python scripts/create_admin.py admin@example.com --password s3cret-pass
     python scripts/create_admin.py author@example.com --permissions create_courses
"""
from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin user.")
    parser.add_argument("email", help="Account email")
    parser.add_argument("--password", default=None, help="Password for a new account (prompted if omitted)")
    parser.add_argument(
        "--permissions",
        nargs="+",
        default=["admin", "manage_accounts"],
        help="Capabilities to grant (default: admin manage_accounts)",
    )
    args = parser.parse_args()

    from learnpath.config import SessionLocal, create_db
    from learnpath.utils.auth import create_user, get_user_by_email
    from learnpath.utils.common import commit_or_raise
    from learnpath.utils.errors import LearnPathError
    from learnpath.utils.permissions import PermissionSet

    create_db()
    db = SessionLocal()
    try:
        granted = PermissionSet.from_names(args.permissions)
        user = get_user_by_email(args.email, db)
        if user is None:
            password = args.password or getpass.getpass("Password: ")
            if len(password) < 8:
                print("Password must be at least 8 characters", file=sys.stderr)
                return 1
            user = create_user(args.email, password, db, permissions=granted.to_names())
            print(f"Created {user.email} permissions={user.permissions}")
        else:
            current = PermissionSet.from_names(user.permissions)
            user.permissions = PermissionSet(current.capabilities | granted.capabilities).to_names()
            commit_or_raise(db, "update permissions")
            print(f"Updated {user.email} permissions={user.permissions}")
    except LearnPathError as e:
        print(f"Error: {e.detail}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
