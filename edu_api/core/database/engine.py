"""
Async database engine and session management.

DATABASE_URL selects the backend; SQLite via aiosqlite is the default,
PostgreSQL works through asyncpg with no code changes here.
"""
from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from edu_api.core import config
from edu_api.utils import get_logger


log = get_logger(__name__)

_is_sqlite = config.SQLALCHEMY_DATABASE_URL.startswith("sqlite")

engine = create_async_engine(
    config.SQLALCHEMY_DATABASE_URL,
    # NullPool for SQLite to avoid sharing connections across event loops
    poolclass=NullPool if _is_sqlite else None,
    echo=False,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.

    Commits when the request handler returns, rolls back and re-raises
    on any exception.

    Usage in FastAPI routes:
        @router.get("/roles")
        async def get_roles(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Role))
            return result.scalars().all()
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """
    Create all tables. Called from the application startup hook and from
    scripts/seed_roles.py.
    """
    from edu_api.core.database.base import Base

    # Import all models to ensure they're registered with SQLAlchemy
    from edu_api.features.users.models import User  # noqa: F401
    from edu_api.features.permissions.models import Role, AuditLog, user_roles  # noqa: F401

    log.debug("Creating tables on %s", engine.url.render_as_string(hide_password=True))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
