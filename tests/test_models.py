import asyncio
import uuid

import pytest
from fastapi import HTTPException
from sqlalchemy import select

from edu_api.core.database.base import generate_ulid
from edu_api.core.database.engine import AsyncSessionLocal
from edu_api.features.permissions.dependencies import flush_or_conflict
from edu_api.features.permissions.models import Role


def test_generate_ulid():
    first, second = generate_ulid(), generate_ulid()
    assert isinstance(first, str)
    assert len(first) == 26
    assert first != second


def test_inserted_rows_get_ulid_ids():
    name = f"role-{uuid.uuid4().hex[:8]}"

    async def insert():
        async with AsyncSessionLocal() as db:
            db.add(Role(name=name))
            await db.commit()
            result = await db.execute(select(Role).where(Role.name == name))
            return result.scalar_one().id

    role_id = asyncio.run(insert())
    assert isinstance(role_id, str)
    assert len(role_id) == 26


def test_unique_violation_on_flush_is_409():
    name = f"role-{uuid.uuid4().hex[:8]}"

    async def insert_twice():
        async with AsyncSessionLocal() as db:
            db.add(Role(name=name))
            await db.commit()
        async with AsyncSessionLocal() as db:
            db.add(Role(name=name))
            await flush_or_conflict(db, "Role already exists")

    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(insert_twice())
    assert excinfo.value.status_code == 409
    assert excinfo.value.detail == "Role already exists"
