import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
import tempfile
import os
from datetime import datetime, timezone

from pms.infrastructure.persistence.models.models import Base
from pms.infrastructure.persistence.unit_of_work import SQLAlchemyUnitOfWork
from pms.application.services.facility_service import FacilityService
from pms.application.services.vehicle_service import VehicleService
from pms.application.services.parking_session_service import ParkingSessionService
from pms.config.settings_env import Settings


class FakeClock:
    """Hands out a fixed time that tests move forward explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta):
        self.now = self.now + delta


@pytest.fixture(scope="function")
async def test_db():
    """Create a test database for each test function."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp_file:
        test_db_path = tmp_file.name

    # NullPool so every unit of work gets its own connection
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{test_db_path}",
        poolclass=NullPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    yield async_session_maker

    await engine.dispose()
    os.unlink(test_db_path)


@pytest.fixture
async def db_session(test_db):
    """A plain session for inspecting committed state."""
    async with test_db() as session:
        yield session
        await session.rollback()


@pytest.fixture
def uow(test_db):
    return SQLAlchemyUnitOfWork(test_db)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_settings():
    """Provide test settings."""
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        ASYNC_DATABASE_URL="sqlite+aiosqlite:///:memory:",
        DEFAULT_FEE_PER_HOUR=100.0,
        LOT_CLAIM_ATTEMPTS=3,
    )


@pytest.fixture
def facility_service(uow):
    return FacilityService(uow)


@pytest.fixture
def vehicle_service(uow):
    return VehicleService(uow)


@pytest.fixture
def session_service(uow, clock):
    return ParkingSessionService(uow, clock=clock)


@pytest.fixture
async def parking(facility_service):
    """A facility with three free lots at 100 per hour."""
    result = await facility_service.create_facility(
        parking_code="P1",
        total_spaces=3,
        name="Downtown",
        location="Main street",
        fee_per_hour=100.0,
    )
    return result.parking


@pytest.fixture
async def single_lot_parking(facility_service):
    result = await facility_service.create_facility(parking_code="SOLO", total_spaces=1, fee_per_hour=60.0)
    return result.parking


@pytest.fixture
async def vehicle(vehicle_service):
    return await vehicle_service.register_vehicle(user_id=7, plate="rad 123", model="Corolla", type="car", color="Red")


@pytest.fixture
async def other_vehicle(vehicle_service):
    return await vehicle_service.register_vehicle(user_id=8, plate="RAE 456", model="Civic", type="car")
