"""Shared fixtures: an in-memory database and an authenticated test client."""

from collections.abc import Callable
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from campus_energy import models  # noqa: F401
from campus_energy.core.database import Base, get_db
from campus_energy.main import app
from campus_energy.models.block import Block
from campus_energy.models.device import Device
from campus_energy.models.enums import LineStatus, UserRole
from campus_energy.models.line import Line
from campus_energy.models.user import User
from campus_energy.services.auth import create_access_token, get_password_hash


@pytest.fixture
def engine():
    """Create an in-memory test database."""
    test_engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Session:
    """A session for arranging data and checking results directly."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """Create a test client with database override."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _bearer(user: User) -> dict[str, str]:
    """Bearer header for a user."""
    token = create_access_token(data={"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build bearer headers for any user."""
    return _bearer


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    """Factory for users with a known password."""

    def _make(email: str, role: UserRole = UserRole.STUDENT, line: Line | None = None) -> User:
        user = User(
            email=email,
            hashed_password=get_password_hash("password123"),
            role=role,
            line_id=line.id if line else None,
            block_id=line.block_id if line else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin(make_user) -> User:
    """An administrator."""
    return make_user("admin@campus.edu", UserRole.ADMIN)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    """Bearer header for the administrator."""
    return _bearer(admin)


@pytest.fixture
def block(db: Session) -> Block:
    """A block with no lines."""
    block = Block(name="Hostel A", total_quota_kwh=Decimal("500"))
    db.add(block)
    db.commit()
    db.refresh(block)
    return block


@pytest.fixture
def make_line(db: Session, block: Block) -> Callable[..., Line]:
    """Factory for lines in the default block."""
    counter = {"next": 1}

    def _make(
        remaining: str = "50",
        quota: str = "50",
        admin_hold: bool = False,
        max_power_w: str = "4400",
        max_current_a: str = "20",
    ) -> Line:
        remaining_kwh = Decimal(remaining)
        line = Line(
            block_id=block.id,
            line_number=counter["next"],
            current_quota_kwh=Decimal(quota),
            remaining_kwh=remaining_kwh,
            admin_hold=admin_hold,
            status=(
                LineStatus.ACTIVE
                if remaining_kwh > 0 and not admin_hold
                else LineStatus.DISCONNECTED
            ),
            max_current_a=Decimal(max_current_a),
            max_power_w=Decimal(max_power_w),
            idle_limit_hours=24,
        )
        counter["next"] += 1
        db.add(line)
        db.commit()
        db.refresh(line)
        return line

    return _make


@pytest.fixture
def device(db: Session, block: Block) -> Device:
    """A device installed in the default block."""
    device = Device(block_id=block.id, name="esp32-a", device_token="token-block-a")
    db.add(device)
    db.commit()
    db.refresh(device)
    return device


@pytest.fixture
def device_headers(device: Device) -> dict[str, str]:
    """Header carrying the device token."""
    return {"X-Device-Token": device.device_token}


@pytest.fixture
def reload_line(db: Session) -> Callable[[int], Line]:
    """Fetch a line fresh from the database."""

    def _reload(line_id: int) -> Line:
        db.expire_all()
        return db.get(Line, line_id)

    return _reload
