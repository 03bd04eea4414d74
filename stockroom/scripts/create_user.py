"""
Create a user (e.g. the first Administrator). Run from project root:
  python -m stockroom.scripts.create_user USERNAME PASSWORD [role] [--display-name NAME]
Example:
  python -m stockroom.scripts.create_user admin your-secure-password administrator
"""
import argparse
import logging
import sys

from stockroom.core.database import SessionLocal
from stockroom.core.errors import StockroomError
from stockroom.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from stockroom.models import RoleId
from stockroom.services.identity import create_user, seed_roles

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)

ROLE_CHOICES = {role.label.lower(): role for role in RoleId}


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Stockroom user.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="reader", choices=sorted(ROLE_CHOICES))
    parser.add_argument("--display-name", default=None, help="Full name shown in audit fields")
    args = parser.parse_args()

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    role = ROLE_CHOICES[args.role]
    db = SessionLocal()
    try:
        seed_roles(db)
        create_user(
            db,
            username=username,
            password=args.password,
            role_id=role,
            display_name=args.display_name,
        )
    except StockroomError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{username}' with role '{role.label}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
