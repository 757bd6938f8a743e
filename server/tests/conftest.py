"""Test configuration and fixtures."""

import os

# Keep the application's module-level engine off the filesystem
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from datetime import datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from travel_api.core.database import Base, build_engine, get_db  # noqa: E402
from travel_api.core.security import create_access_token  # noqa: E402
from travel_api.models import *  # noqa: E402,F403 - Import all models
from travel_api.models.user import UserRole  # noqa: E402
from travel_api.schemas.package import CreatePackageRequest  # noqa: E402
from travel_api.schemas.user import CreateUserRequest  # noqa: E402
from travel_api.services.package_service import PackageService  # noqa: E402
from travel_api.services.user_service import UserService  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = build_engine(TEST_DATABASE_URL)

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Create the application with its database dependency bound to the test session."""
    from travel_api.main import create_app

    app = create_app()

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(test_session):
    """Factory creating persisted users."""
    async def _make_user(
        email: str,
        role: UserRole = UserRole.CUSTOMER,
        password: str = "secret123",
        first_name: str = "Test",
        last_name: str = "User",
    ):
        return await UserService(test_session).create_user(
            CreateUserRequest(
                email=email,
                first_name=first_name,
                last_name=last_name,
                password=password,
                role=role,
            )
        )

    return _make_user


@pytest_asyncio.fixture
async def customer(make_user):
    return await make_user("alice@example.com", first_name="Alice", last_name="Walker")


@pytest_asyncio.fixture
async def other_customer(make_user):
    return await make_user("bob@example.com", first_name="Bob", last_name="Stone")


@pytest_asyncio.fixture
async def admin_user(make_user):
    return await make_user("admin@travel.com", role=UserRole.ADMIN, password="admin123", first_name="Admin")


def _bearer(user) -> dict[str, str]:
    token = create_access_token(
        user_id=user.id,
        email=user.email,
        name=user.full_name,
        role=user.role,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(customer):
    return _bearer(customer)


@pytest.fixture
def other_headers(other_customer):
    return _bearer(other_customer)


@pytest.fixture
def admin_headers(admin_user):
    return _bearer(admin_user)


@pytest.fixture
def package_data():
    """Request body for the Paris City Break sample package."""
    start = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=30)
    return {
        "title": "Paris City Break",
        "description": "Explore the City of Light",
        "destination": "Paris, France",
        "price": "899.99",
        "duration": 4,
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=4)).isoformat(),
        "max_capacity": 20,
    }


@pytest.fixture
def make_package(test_session, package_data):
    """Factory creating persisted packages from the sample data with overrides."""
    async def _make_package(**overrides):
        data = {**package_data, **overrides}
        return await PackageService(test_session).create_package(CreatePackageRequest(**data))

    return _make_package


@pytest_asyncio.fixture
async def paris_package(make_package):
    """Active package: capacity 20 at 899.99."""
    return await make_package()


@pytest_asyncio.fixture
async def tokyo_package(make_package):
    """Active package: capacity 15 at 1299.99."""
    start = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=45)
    return await make_package(
        title="Tokyo Discovery",
        description="Tradition and modernity in Japan's capital",
        destination="Tokyo, Japan",
        price=Decimal("1299.99"),
        duration=7,
        start_date=start,
        end_date=start + timedelta(days=7),
        max_capacity=15,
    )
