from __future__ import annotations

from datetime import date
from typing import Callable, Generator, Optional
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from church_registry.auth.utils import create_access_token, hash_password
from church_registry.common.models import Base, Member, Parish, User, WeredaUnit
from church_registry.common.scope_validation import CurrentUser, UserRole
from church_registry.main import app

# In-memory SQLite shared by every connection of the test engine
TEST_DB_URL = "sqlite:///:memory:"
engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test.

    Tables are created before the test and dropped afterwards.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session, monkeypatch) -> Generator[TestClient, None, None]:
    """Create a test client with dependency overrides."""
    from church_registry.core.config import settings

    monkeypatch.setattr(settings, "database_url", "sqlite://")

    def get_test_db():
        yield db

    from church_registry.common.db import get_db

    app.dependency_overrides[get_db] = get_test_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def token_for(user: User) -> str:
    return create_access_token(
        {
            "sub": str(user.id),
            "user_id": str(user.id),
            "role": user.role,
            "wereda_id": str(user.wereda_unit_id) if user.wereda_unit_id else None,
        }
    )


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture
def admin_user(db: Session) -> User:
    user = User(
        id=uuid4(),
        username="admin",
        password_hash=hash_password("adminpass123"),
        role="admin",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return bearer(admin_user)


@pytest.fixture
def admin_identity(admin_user: User) -> CurrentUser:
    return CurrentUser(id=admin_user.id, role=UserRole.ADMIN)


@pytest.fixture
def make_wereda(db: Session) -> Callable[..., WeredaUnit]:
    counter = {"n": 0}

    def _make(name: Optional[str] = None, region: str = "Amhara") -> WeredaUnit:
        counter["n"] += 1
        wereda = WeredaUnit(
            id=uuid4(),
            name=name or f"Wereda {counter['n']}",
            region=region,
            zone="North Gondar",
            woreda="Dabat",
            kebele="01",
        )
        db.add(wereda)
        db.commit()
        db.refresh(wereda)
        return wereda

    return _make


@pytest.fixture
def make_parish(db: Session) -> Callable[..., Parish]:
    counter = {"n": 0}

    def _make(wereda: WeredaUnit, name: Optional[str] = None) -> Parish:
        counter["n"] += 1
        parish = Parish(
            id=uuid4(),
            name=name or f"Parish {counter['n']}",
            region=wereda.region,
            under_id=wereda.id,
        )
        db.add(parish)
        db.commit()
        db.refresh(parish)
        return parish

    return _make


@pytest.fixture
def make_member(db: Session) -> Callable[..., Member]:
    def _make(
        parish: Optional[Parish] = None,
        first_name: str = "Abel",
        gender: str = "Male",
        date_of_birth: date = date(1990, 1, 1),
        **fields,
    ) -> Member:
        member = Member(
            id=uuid4(),
            first_name=first_name,
            gender=gender,
            date_of_birth=date_of_birth,
            parish_id=parish.id if parish else None,
            **fields,
        )
        db.add(member)
        db.commit()
        db.refresh(member)
        return member

    return _make


@pytest.fixture
def make_wereda_admin(db: Session) -> Callable[[WeredaUnit], User]:
    def _make(wereda: WeredaUnit, username: Optional[str] = None) -> User:
        user = User(
            id=uuid4(),
            username=username or f"wereda-admin-{uuid4().hex[:8]}",
            password_hash=hash_password("weredapass123"),
            role="wereda_admin",
            wereda_unit_id=wereda.id,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def wereda(make_wereda) -> WeredaUnit:
    return make_wereda(name="Gondar Wereda")


@pytest.fixture
def parish(make_parish, wereda) -> Parish:
    return make_parish(wereda, name="Debre Berhan Selassie")


@pytest.fixture
def member(make_member, parish) -> Member:
    return make_member(parish)


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    """Bearer headers for an arbitrary user."""
    return bearer
