"""
Shared fixtures.

Each test gets a fresh in-memory SQLite database with the default roles
seeded. API tests talk to the app through httpx's ASGI transport with
get_db overridden to use that database. Seed data is written through its
own committed session before any request is made.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from main import app  # noqa: E402
from portal.core.config import settings  # noqa: E402
from portal.core.security import encode_session_token, hash_password  # noqa: E402
from portal.db.session import get_db, session_scope  # noqa: E402
from portal.models import Base, User  # noqa: E402
from portal.schemas.billing import BillingCreate  # noqa: E402
from portal.schemas.lease import LeaseUpsert  # noqa: E402
from portal.services.billing_service import BillingService  # noqa: E402
from portal.services.lease_service import LeaseService  # noqa: E402
from portal.services.user_service import UserService  # noqa: E402

PASSWORD = "correct-horse-battery"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        await UserService.ensure_default_roles(session)
        await session.commit()
    return factory


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    return tmp_path / "uploads"


# ── Seed helpers ──────────────────────────────────────────────────────────────

@pytest.fixture
def create_user(session_factory):
    async def _create(email: str, role: str = "user", name: str = "Test Tenant") -> User:
        async with session_factory() as session:
            role_row = await UserService.get_role_by_name(session, role)
            user = User(
                email=email,
                name=name,
                mobile="5550100",
                role_id=role_row.id,
                hashed_password=hash_password(PASSWORD),
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user
    return _create


@pytest.fixture
def create_lease(session_factory):
    async def _create(user_id: str, rent_amount: int = 1200):
        async with session_factory() as session:
            lease = await LeaseService.upsert_for_user(
                session,
                user_id,
                LeaseUpsert(
                    start_date=date(2024, 1, 1),
                    end_date=date(2025, 12, 31),
                    rent_amount=rent_amount,
                    deposit=2400,
                    maintenance_fee=50,
                    property_description="Unit 4B, 12 Harbour Street",
                ),
            )
            await session.commit()
            return lease
    return _create


@pytest.fixture
def create_bill(session_factory):
    async def _create(
        lease_id: str,
        due_date: date | None = None,
        amount: int = 1200,
        description: str = "Rent payment for December 2024.",
    ):
        async with session_factory() as session:
            bill = await BillingService.create(
                session,
                BillingCreate(
                    lease_id=lease_id,
                    due_date=due_date or date.today() - timedelta(days=1),
                    amount=amount,
                    description=description,
                ),
            )
            await session.commit()
            return bill
    return _create


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
async def tenant(create_user):
    return await create_user("tenant@example.com")


@pytest.fixture
async def other_tenant(create_user):
    return await create_user("neighbour@example.com", name="Other Tenant")


@pytest.fixture
async def admin(create_user):
    return await create_user("admin@example.com", role="admin", name="Site Admin")


@pytest.fixture
def sign_in(client: AsyncClient):
    """Put a valid session cookie for a user into the client's cookie jar."""
    def _sign_in(user: User, role: str = "user") -> None:
        token = encode_session_token(user.id, role, 3600)
        client.cookies.set(settings.SESSION_COOKIE_NAME, token)
    return _sign_in


@pytest.fixture
async def lease(create_lease, tenant):
    return await create_lease(tenant.id)


@pytest.fixture
async def other_lease(create_lease, other_tenant):
    return await create_lease(other_tenant.id, rent_amount=900)
