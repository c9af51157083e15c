# src/byteverse/scripts/reset_admin.py
"""
Replace every administrator account with a single fresh one.

Run it when admin credentials are lost:

    python -m byteverse.scripts.reset_admin --password 'new-secret'
"""

import argparse
import sys

from sqlalchemy.orm import Session

from byteverse.core.security import hash_password
from byteverse.db.session import SessionLocal, create_tables
from byteverse.models import Admin

DEFAULT_USERNAME = "admin"
DEFAULT_EMAIL = "admin@byteverse.tech"
DEFAULT_NAME = "ByteVerse Admin"
MIN_PASSWORD_LENGTH = 8


def reset_admin(
    db: Session,
    *,
    password: str,
    username: str = DEFAULT_USERNAME,
    email: str = DEFAULT_EMAIL,
    name: str = DEFAULT_NAME,
) -> Admin:
    """Delete all admins and create one with the given credentials.

    Args:
        db: Database session
        password: Plain-text password, hashed before storage
        username: Login name for the new admin
        email: Contact address for the new admin
        name: Display name for the new admin

    Returns:
        The newly created admin record.
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    removed = db.query(Admin).delete()
    admin = Admin(
        username=username,
        email=email.lower(),
        name=name,
        password_hash=hash_password(password),
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    print(f"Removed {removed} admin account(s); created '{admin.username}'")
    return admin


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Reset the platform administrator account")
    parser.add_argument("--password", required=True, help="Password for the new admin")
    parser.add_argument("--username", default=DEFAULT_USERNAME)
    parser.add_argument("--email", default=DEFAULT_EMAIL)
    parser.add_argument("--name", default=DEFAULT_NAME)
    args = parser.parse_args(argv)

    create_tables()
    db = SessionLocal()
    try:
        reset_admin(
            db,
            password=args.password,
            username=args.username,
            email=args.email,
            name=args.name,
        )
    except ValueError as exc:
        print(f"[reset_admin] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
