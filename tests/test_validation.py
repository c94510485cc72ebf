from datetime import date, timedelta

import pytest

from fleetdesk.schemas.policy import Coverage, PolicyRecord
from fleetdesk.schemas.vehicle import VehicleRecord
from fleetdesk.services.validation import (
    ensure_unique_plate,
    ensure_unique_policy_number,
    normalize_policy,
    normalize_vehicle,
    validate_policy,
    validate_vehicle,
)
from fleetdesk.utils.exceptions import ConflictError, ValidationError

TODAY = date(2026, 6, 15)


def _vehicle(**overrides) -> VehicleRecord:
    fields = {"plate": "AB123CD", "make": "Toyota", "model": "Corolla", "year": 2022, "chassis_number": "XYZ1"}
    fields.update(overrides)
    return VehicleRecord(**fields)


def _policy(**overrides) -> PolicyRecord:
    fields = {
        "insurer": "Acme",
        "policy_number": "P-001",
        "coverage": Coverage.BASIC_LIABILITY,
        "expiry": TODAY + timedelta(days=1),
    }
    fields.update(overrides)
    return PolicyRecord(**fields)


def test_normalize_vehicle_uppercases_keys():
    vehicle = normalize_vehicle(_vehicle(plate="  ab123cd ", make=" Toyota ", chassis_number="xyz1"))
    assert vehicle.plate == "AB123CD"
    assert vehicle.make == "Toyota"
    assert vehicle.chassis_number == "XYZ1"


def test_normalize_policy_uppercases_number():
    policy = normalize_policy(_policy(policy_number=" p-001 ", insurer=" Acme "))
    assert policy.policy_number == "P-001"
    assert policy.insurer == "Acme"


def test_valid_vehicle_passes():
    validate_vehicle(_vehicle(), today=TODAY)


@pytest.mark.parametrize("field", ["plate", "make", "model", "chassis_number"])
def test_blank_vehicle_field_rejected(field):
    with pytest.raises(ValidationError):
        validate_vehicle(_vehicle(**{field: "   "}), today=TODAY)


@pytest.mark.parametrize("plate", ["A123BCD", "AB12CD", "ABC123D", "12ABC34", "AB١٢٣CD"])
def test_malformed_plate_rejected(plate):
    with pytest.raises(ValidationError, match="Plate"):
        validate_vehicle(_vehicle(plate=plate), today=TODAY)


def test_normalized_plate_with_non_ascii_digits_rejected():
    vehicle = normalize_vehicle(_vehicle(plate=" ab١٢٣cd "))
    with pytest.raises(ValidationError, match="Plate"):
        validate_vehicle(vehicle, today=TODAY)


def test_year_bounds():
    validate_vehicle(_vehicle(year=1950), today=TODAY)
    validate_vehicle(_vehicle(year=TODAY.year + 1), today=TODAY)

    with pytest.raises(ValidationError, match="Year"):
        validate_vehicle(_vehicle(year=1949), today=TODAY)
    with pytest.raises(ValidationError, match="Year"):
        validate_vehicle(_vehicle(year=TODAY.year + 2), today=TODAY)


def test_year_bound_uses_current_date_by_default():
    validate_vehicle(_vehicle(year=date.today().year + 1))
    with pytest.raises(ValidationError):
        validate_vehicle(_vehicle(year=date.today().year + 2))


def test_valid_policy_passes():
    validate_policy(_policy(), today=TODAY)


def test_expiry_today_rejected():
    with pytest.raises(ValidationError, match="Expiry"):
        validate_policy(_policy(expiry=TODAY), today=TODAY)


def test_expiry_missing_rejected():
    with pytest.raises(ValidationError):
        validate_policy(_policy(expiry=None), today=TODAY)


@pytest.mark.parametrize("field", ["insurer", "policy_number"])
def test_blank_policy_field_rejected(field):
    with pytest.raises(ValidationError):
        validate_policy(_policy(**{field: ""}), today=TODAY)


@pytest.mark.asyncio
async def test_unique_plate_conflict(service, make_vehicle):
    await service.create_vehicle(make_vehicle(with_policy=False))

    with pytest.raises(ConflictError):
        await ensure_unique_plate(service.vehicles, "ab123cd")

    # The same row is not a conflict with itself
    existing = await service.find_vehicle_by_plate("AB123CD")
    await ensure_unique_plate(service.vehicles, "AB123CD", exclude_id=existing.id)


@pytest.mark.asyncio
async def test_unique_policy_number_conflict(service, make_vehicle):
    await service.create_vehicle(make_vehicle())

    with pytest.raises(ConflictError):
        await ensure_unique_policy_number(service.policies, "p-001")
    await ensure_unique_policy_number(service.policies, "P-002")
