"""Seed an admin user.

Usage:
    python -m church_registry.scripts.create_admin --username admin --password secret
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from church_registry.auth.utils import hash_password
from church_registry.common.db import Database
from church_registry.common.models import User
from church_registry.core.config import settings

logger = logging.getLogger(__name__)


def create_admin(db: Session, username: str, password: str) -> Optional[User]:
    """Create an active admin user; returns None if the username exists."""
    existing = db.execute(
        select(User).where(User.username == username)
    ).scalar_one_or_none()
    if existing is not None:
        return None

    user = User(
        username=username,
        password_hash=hash_password(password),
        role="admin",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--username", required=True)
    parser.add_argument(
        "--password", help="Prompted for when omitted", default=None
    )
    parser.add_argument(
        "--database-url", default=None, help="Overrides DATABASE_URL"
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = parse_args(argv)
    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        logger.error("Password must be at least 6 characters")
        return 1

    database = Database(args.database_url or settings.database_url)
    database.connect()
    try:
        with database.session() as db:
            user = create_admin(db, args.username, password)
    finally:
        database.dispose()

    if user is None:
        logger.error("User %s already exists", args.username)
        return 1
    logger.info("Admin user %s created (%s)", user.username, user.id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
