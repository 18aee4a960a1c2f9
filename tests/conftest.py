import asyncio
import os
import tempfile
import uuid

import pytest

# Configuration is read at import time, so point it at a scratch database first
_tmpdir = tempfile.mkdtemp(prefix="edu_api_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmpdir}/test.db"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RATE_LIMIT"] = "30/minute"

from fastapi.testclient import TestClient  # noqa: E402

from edu_api.core.database.engine import AsyncSessionLocal, init_db  # noqa: E402
from edu_api.features.permissions.dependencies import get_or_create_role  # noqa: E402
from edu_api.features.permissions.models import UserRole  # noqa: E402
from edu_api.features.users.auth import create_access_token  # noqa: E402
from edu_api.features.users.models import User  # noqa: E402
from edu_api.main import app  # noqa: E402


async def _create_user(role_names, is_active=True) -> str:
    async with AsyncSessionLocal() as db:
        user = User(
            email=f"{uuid.uuid4().hex[:12]}@school.edu",
            first_name="Test",
            last_name="User",
            is_active=is_active,
        )
        for name in role_names:
            role = await get_or_create_role(db, name)
            user.roles.append(UserRole(role=role))
        db.add(user)
        await db.commit()
        return user.id


@pytest.fixture(scope="session", autouse=True)
def database():
    asyncio.run(init_db())


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user():
    """Create a user holding the given roles; returns (user_id, auth headers)."""
    def _make(*role_names, is_active=True):
        user_id = asyncio.run(_create_user(role_names, is_active=is_active))
        headers = {"Authorization": f"Bearer {create_access_token(user_id)}"}
        return user_id, headers

    return _make
