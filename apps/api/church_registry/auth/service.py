from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from church_registry.auth.utils import (
    create_access_token,
    hash_password,
    verify_password,
)
from church_registry.common.db import commit_or_duplicate
from church_registry.common.models import User
from church_registry.common.references import EntityType, require_reference
from church_registry.common.scope_validation import UserRole
from church_registry.core.errors import DuplicateError
from church_registry.core.metrics import emit_record_event

logger = logging.getLogger(__name__)


class AuthService:
    @staticmethod
    def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
        stmt = select(User).where(User.username == username, User.is_active.is_(True))
        user = db.execute(stmt).scalar_one_or_none()
        if not user or not user.password_hash:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    @staticmethod
    def create_session(db: Session, user: User) -> str:
        """Record the login and issue an access token for ``user``."""
        user.last_login = datetime.now(timezone.utc)
        db.commit()
        db.refresh(user)

        logger.info("User %s logged in", user.username)
        return create_access_token(
            {
                "sub": str(user.id),
                "user_id": str(user.id),
                "role": user.role,
                "wereda_id": str(user.wereda_unit_id) if user.wereda_unit_id else None,
            }
        )

    @staticmethod
    def register_user(
        db: Session,
        username: str,
        password: str,
        role: UserRole,
        wereda_unit_id: Optional[UUID] = None,
    ) -> User:
        """Create an API user; wereda admins must name an existing unit."""
        if role is UserRole.WEREDA_ADMIN or wereda_unit_id is not None:
            require_reference(db, EntityType.WEREDA, wereda_unit_id, field="weredaUnit")

        existing = db.execute(
            select(User.id).where(User.username == username)
        ).scalar_one_or_none()
        if existing is not None:
            raise DuplicateError(
                "Username is already taken.", details={"username": username}
            )

        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role.value,
            wereda_unit_id=wereda_unit_id,
        )
        db.add(user)
        commit_or_duplicate(db, "Username is already taken.")
        db.refresh(user)

        logger.info("User %s registered with role %s", username, role.value)
        emit_record_event("user", "created", role=role.value)
        return user

    @staticmethod
    def get_active_user(db: Session, user_id: UUID) -> Optional[User]:
        user = db.get(User, user_id)
        if user is None or not user.is_active:
            return None
        return user
