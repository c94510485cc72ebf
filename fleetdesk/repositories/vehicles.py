"""
Vehicle store: data access for the ``vehicle`` table.

Rules:
- Every operation accepts an optional open Transaction; with one it runs
  inside the caller's transaction and never commits, without one it opens
  and commits its own session.
- Reads filter soft-deleted rows and eagerly join the active policy.
"""

from __future__ import annotations

from sqlalchemy import and_, select, update

from fleetdesk.database import Database
from fleetdesk.models.policy import InsurancePolicy
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.schemas.policy import PolicyRecord
from fleetdesk.schemas.vehicle import VehicleRecord
from fleetdesk.transaction import Transaction, session_scope
from fleetdesk.utils.exceptions import NotFoundError, StorageError


def _select_with_policy():
    return (
        select(Vehicle, InsurancePolicy)
        .outerjoin(
            InsurancePolicy,
            and_(InsurancePolicy.vehicle_id == Vehicle.id, InsurancePolicy.active()),
        )
        .where(Vehicle.active())
        .execution_options(populate_existing=True)
    )


def _to_record(vehicle: Vehicle, policy: InsurancePolicy | None) -> VehicleRecord:
    record = VehicleRecord.model_validate(vehicle)
    if policy is not None:
        record.policy = PolicyRecord.model_validate(policy)
    return record


def _values(vehicle: VehicleRecord) -> dict:
    """Column values keyed by mapped attribute."""
    return {
        Vehicle.plate: vehicle.plate.upper(),
        Vehicle.make: vehicle.make,
        Vehicle.model: vehicle.model,
        Vehicle.year: vehicle.year,
        Vehicle.chassis_number: vehicle.chassis_number.upper(),
    }


class VehicleStore:
    def __init__(self, db: Database):
        self.db = db

    async def insert(self, vehicle: VehicleRecord, tx: Transaction | None = None) -> int:
        """Insert the vehicle row and return its generated id."""
        async with session_scope(self.db.sessions, tx) as session:
            row = Vehicle(
                plate=vehicle.plate.upper(),
                make=vehicle.make,
                model=vehicle.model,
                year=vehicle.year,
                chassis_number=vehicle.chassis_number.upper(),
            )
            session.add(row)
            await session.flush()
            if row.id is None:
                raise StorageError("Vehicle insert did not return a generated id")
            return row.id

    async def update(self, vehicle: VehicleRecord, tx: Transaction | None = None) -> None:
        stmt = (
            update(Vehicle)
            .where(Vehicle.id == vehicle.id, Vehicle.active())
            .values(_values(vehicle))
            .execution_options(synchronize_session=False)
        )
        async with session_scope(self.db.sessions, tx) as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError(f"Vehicle {vehicle.id} not found")

    async def soft_delete(self, vehicle_id: int, tx: Transaction | None = None) -> None:
        stmt = (
            update(Vehicle)
            .where(Vehicle.id == vehicle_id, Vehicle.active())
            .values({Vehicle.deleted: True})
            .execution_options(synchronize_session=False)
        )
        async with session_scope(self.db.sessions, tx) as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError(f"Vehicle {vehicle_id} not found")

    async def get_by_id(self, vehicle_id: int, tx: Transaction | None = None) -> VehicleRecord | None:
        stmt = _select_with_policy().where(Vehicle.id == vehicle_id)
        async with session_scope(self.db.sessions, tx) as session:
            row = (await session.execute(stmt)).first()
            return _to_record(*row) if row is not None else None

    async def get_all(self) -> list[VehicleRecord]:
        stmt = _select_with_policy().order_by(Vehicle.id)
        async with session_scope(self.db.sessions) as session:
            result = await session.execute(stmt)
            return [_to_record(vehicle, policy) for vehicle, policy in result.all()]

    async def find_by_plate(self, plate: str, tx: Transaction | None = None) -> VehicleRecord | None:
        """Look up an active vehicle by plate (case-insensitive)."""
        stmt = _select_with_policy().where(Vehicle.plate == plate.strip().upper())
        async with session_scope(self.db.sessions, tx) as session:
            row = (await session.execute(stmt)).first()
            return _to_record(*row) if row is not None else None
