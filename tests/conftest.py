"""
Shared fixtures: a fresh SQLite database per test and an ASGI client
with the database, payment and email dependencies overridden.
"""
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import sessionmaker

from fundflow.api.deps import get_notifier, get_payment_client
from fundflow.database.database import build_engine, get_db
from fundflow.main import app
from fundflow.models import Base, Campaign, CampaignStatus, Category
from fundflow.models.base import utcnow


# ============================================================================
# DATABASE
# ============================================================================

@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so concurrent requests each get their own connection"""
    test_engine = build_engine(f"sqlite:///{tmp_path / 'fundflow_test.db'}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


# ============================================================================
# COLLABORATORS
# ============================================================================

@pytest.fixture
def payment_client():
    """Payment provider stand-in returning a fixed client secret"""
    client = MagicMock()
    client.create_payment_intent = AsyncMock(return_value="pi_test_secret_123")
    return client


@pytest.fixture
def notifier():
    """Email provider stand-in recording every send"""
    mock = MagicMock()
    mock.send_donor_thank_you = AsyncMock(return_value=True)
    mock.send_creator_alert = AsyncMock(return_value=True)
    return mock


# ============================================================================
# HTTP CLIENT
# ============================================================================

@pytest_asyncio.fixture
async def client(session_factory, payment_client, notifier):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_client] = lambda: payment_client
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# HELPERS
# ============================================================================

async def register_user(client, name, email, role="donor", password="password123"):
    """Register through the API and return (token, user json)"""
    response = await client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": password, "role": role},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return body["token"], body["user"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def future_deadline(days=30):
    return (utcnow() + timedelta(days=days)).isoformat()


def insert_campaign(session, creator_id, status=CampaignStatus.ACTIVE, **overrides):
    """Insert a campaign directly, bypassing moderation"""
    values = dict(
        title="Clean Water for Riverside",
        description="Build two wells for the Riverside community",
        goal=10000.0,
        deadline=utcnow() + timedelta(days=30),
        category=Category.HEALTH,
        images=[],
        creator_id=creator_id,
        status=status,
    )
    values.update(overrides)
    campaign = Campaign(**values)
    session.add(campaign)
    session.commit()
    session.refresh(campaign)
    return campaign


@pytest_asyncio.fixture
async def creator(client):
    return await register_user(client, "Casey Creator", "creator@example.com", role="creator")


@pytest_asyncio.fixture
async def donor(client):
    return await register_user(client, "Dana Donor", "donor@example.com", role="donor")


@pytest_asyncio.fixture
async def admin(client):
    return await register_user(client, "Alex Admin", "admin@example.com", role="admin")
