"""
create_tables.py
----------------
Create the schema and seed the 'user' and 'admin' roles with their
permissions. Safe to run more than once: existing tables and roles are
left alone.

Usage:
    python create_tables.py
"""

import asyncio

from sqlalchemy.ext.asyncio import async_sessionmaker

from portal.core.config import settings
from portal.core.logging import configure_logging, get_logger
from portal.db.session import make_engine, session_scope
from portal.models import Base  # Imports all models so metadata is populated
from portal.services.user_service import UserService

logger = get_logger(__name__)


async def create_all_tables() -> None:
    engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        factory = async_sessionmaker(engine, expire_on_commit=False)
        async with session_scope(factory) as session:
            roles = await UserService.ensure_default_roles(session)
    finally:
        await engine.dispose()

    logger.info("Schema ready", tables=len(Base.metadata.tables), roles=[r.name for r in roles])


if __name__ == "__main__":
    configure_logging()
    asyncio.run(create_all_tables())
