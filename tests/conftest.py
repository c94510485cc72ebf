from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from fleetdesk.database import Database
from fleetdesk.schemas.policy import Coverage, PolicyRecord
from fleetdesk.schemas.vehicle import VehicleRecord
from fleetdesk.services.fleet import FleetService


@pytest.fixture(autouse=True, scope="session")
def disable_api_key():
    # Disable API key auth for tests
    from fleetdesk.config import settings
    settings.api_key = ""


@pytest_asyncio.fixture
async def db(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'fleet.sqlite3'}")
    await database.create_tables()
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def service(db):
    return FleetService(db)


@pytest_asyncio.fixture
async def client(db):
    from fleetdesk.dependencies import get_fleet_service
    from fleetdesk.main import app

    app.dependency_overrides[get_fleet_service] = lambda: FleetService(db)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_vehicle():
    def _make(with_policy: bool = True, **overrides) -> VehicleRecord:
        fields = {
            "plate": "AB123CD",
            "make": "Toyota",
            "model": "Corolla",
            "year": 2022,
            "chassis_number": "XYZ1",
        }
        fields.update(overrides)
        vehicle = VehicleRecord(**fields)
        if with_policy:
            vehicle.policy = PolicyRecord(
                insurer="Acme",
                policy_number="P-001",
                coverage=Coverage.FULL_COVERAGE,
                expiry=date.today() + timedelta(days=365),
            )
        return vehicle

    return _make


@pytest.fixture
def count_rows(db):
    """Count rows in a table, soft-deleted ones included."""
    async def _count(model) -> int:
        async with db.sessions() as session:
            return (await session.execute(select(func.count()).select_from(model))).scalar_one()

    return _count
