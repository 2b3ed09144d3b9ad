"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, rebuilt for every test
- Profiles (client with a broker, broker, admin) and a draft deal
- HTTPX AsyncClient wired to the app with the test session
"""
import os
import uuid
from datetime import timedelta
from typing import AsyncGenerator, Generator

# Configure before any dealflow import; settings and the engine are module-level
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["INTERNAL_SECRET"] = "test-secret"
os.environ["RESEND_API_KEY"] = ""
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["TWILIO_AUTH_TOKEN"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from dealflow.core.deps import USER_HEADER, get_db
from dealflow.db.base import Base
from dealflow.db.enums import DealStatus, Role
from dealflow.db.models import Deal, NotificationPreference, Profile
from dealflow.db.session import SessionLocal, engine
from dealflow.main import app
from dealflow.utils.datetime_utils import utc_now


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh schema per test.

    Services commit, so isolation comes from recreating the tables rather
    than rolling back. Code that opens its own SessionLocal() sees the same
    in-memory database.
    """
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


def make_profile(db: Session, role: Role = Role.CLIENT, **kwargs) -> Profile:
    profile = Profile(
        id=uuid.uuid4(),
        email=kwargs.pop("email", f"user-{uuid.uuid4().hex[:8]}@test.com"),
        role=role.value,
        **kwargs,
    )
    db.add(profile)
    db.commit()
    return profile


def enable_channels(db: Session, user_id: uuid.UUID, email: bool = True, sms: bool = False) -> None:
    db.add(NotificationPreference(user_id=user_id, email_enabled=email, sms_enabled=sms))
    db.commit()


@pytest.fixture(scope="function")
def broker(db: Session) -> Profile:
    return make_profile(
        db,
        Role.BROKER,
        first_name="Bea",
        last_name="Broker",
        phone_number="+447700900001",
    )


@pytest.fixture(scope="function")
def client_profile(db: Session, broker: Profile) -> Profile:
    """A client whose assigned broker is `broker`."""
    return make_profile(
        db,
        Role.CLIENT,
        first_name="Cal",
        last_name="Client",
        phone_number="+447700900002",
        assigned_broker_id=broker.id,
    )


@pytest.fixture(scope="function")
def admin(db: Session) -> Profile:
    return make_profile(db, Role.ADMIN, first_name="Ada", last_name="Admin")


@pytest.fixture(scope="function")
def deal(db: Session, client_profile: Profile) -> Deal:
    deal = Deal(
        id=uuid.uuid4(),
        name="Riverside Bridge",
        status=DealStatus.DRAFT.value,
        client_id=client_profile.id,
    )
    db.add(deal)
    db.commit()
    return deal


@pytest.fixture(scope="function")
def idle_deal(db: Session, deal: Deal) -> Deal:
    """The standard deal, last touched ten days ago."""
    deal.updated_at = utc_now() - timedelta(days=10)
    db.commit()
    return deal


# =============================================================================
# Client Fixtures
# =============================================================================

def auth_headers(profile: Profile) -> dict[str, str]:
    return {USER_HEADER: str(profile.id)}


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient sharing the test session with the app."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
