import logging
from datetime import date, timedelta

from fleetdesk.schemas.policy import Coverage, PolicyRecord
from fleetdesk.schemas.vehicle import VehicleRecord
from fleetdesk.services.fleet import FleetService

logger = logging.getLogger(__name__)


SEED_VEHICLES = [
    {"plate": "AB123CD", "make": "Toyota", "model": "Corolla", "year": 2022, "chassis_number": "JTDBR32E720001234"},
    {"plate": "AC456EF", "make": "Ford", "model": "Ranger", "year": 2020, "chassis_number": "8AFAR22N4LJ000567"},
]

SEED_POLICY = {"insurer": "La Segunda", "policy_number": "DEMO-0001", "coverage": Coverage.FULL_COVERAGE}


async def seed_data(service: FleetService) -> None:
    if await service.list_vehicles():
        return

    insured = VehicleRecord(**SEED_VEHICLES[0])
    insured.policy = PolicyRecord(**SEED_POLICY, expiry=date.today() + timedelta(days=365))
    await service.create_vehicle(insured)
    await service.create_vehicle(VehicleRecord(**SEED_VEHICLES[1]))

    logger.info("Seeded %d demo vehicles", len(SEED_VEHICLES))
