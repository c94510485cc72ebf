import pytest

from fleetdesk.seed import SEED_VEHICLES, seed_data


@pytest.mark.asyncio
async def test_seed_populates_empty_database(service):
    await seed_data(service)

    vehicles = await service.list_vehicles()
    assert [v.plate for v in vehicles] == [v["plate"] for v in SEED_VEHICLES]
    assert vehicles[0].policy is not None
    assert vehicles[1].policy is None


@pytest.mark.asyncio
async def test_seed_is_skipped_when_data_exists(service):
    await seed_data(service)
    await seed_data(service)

    assert len(await service.list_vehicles()) == len(SEED_VEHICLES)
