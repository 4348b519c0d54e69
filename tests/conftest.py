"""Pytest configuration and fixtures."""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from timesheet_api.main import app
from timesheet_api.config import settings
from timesheet_api.models.user import UserRole
from timesheet_api.utils.auth import create_access_token


FELLOW_ID = "cm5fellow0a1b"
OTHER_FELLOW_ID = "cm5fellow9z8y"
ADMIN_ID = "cm5admin00001"


def auth_headers(user_id: str, role: UserRole = UserRole.USER) -> dict:
    """Bearer headers for a user, as the identity provider would issue them."""
    token = create_access_token(user_id=user_id, role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_db():
    """
    Clean test database on the configured MongoDB server.

    Tests using it are skipped when no server is reachable.
    """
    test_client = AsyncIOMotorClient(settings.mongodb_url, serverSelectionTimeoutMS=1000)
    try:
        await test_client.admin.command("ping")
    except PyMongoError:
        test_client.close()
        pytest.skip(f"MongoDB not reachable at {settings.mongodb_url}")

    test_db_name = f"{settings.mongodb_db_name}_test"
    await test_client.drop_database(test_db_name)
    yield test_client[test_db_name]

    # Cleanup: drop test database
    await test_client.drop_database(test_db_name)
    test_client.close()


@pytest_asyncio.fixture
async def app_client(test_db):
    """
    Create a test client with a clean test database.

    This fixture:
    - Swaps the test database into the global connection
    - Yields an async HTTP client for testing
    - Restores the original database afterwards
    """
    from timesheet_api.database import database
    original_db = database.db
    database.db = test_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    database.db = original_db


@pytest.fixture
def fellow_headers():
    return auth_headers(FELLOW_ID)


@pytest.fixture
def other_fellow_headers():
    return auth_headers(OTHER_FELLOW_ID)


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_ID, UserRole.ADMIN)
