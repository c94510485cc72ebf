"""Atomic vehicle + insurance policy operations.

Every write runs inside one ``Transaction``: uniqueness checks, the vehicle
row and its policy row share a single session, and the vehicle row is always
written before the policy that references it. Identifiers are copied back to
the caller's records only once the transaction has committed, so a failed
operation leaves them as they were submitted.
"""
import logging

from fleetdesk.database import Database
from fleetdesk.repositories.policies import PolicyStore
from fleetdesk.repositories.vehicles import VehicleStore
from fleetdesk.schemas.policy import PolicyRecord
from fleetdesk.schemas.vehicle import VehicleRecord
from fleetdesk.services.validation import (
    ensure_unique_plate,
    ensure_unique_policy_number,
    normalize_policy,
    normalize_vehicle,
    validate_policy,
    validate_vehicle,
)
from fleetdesk.utils.exceptions import ConflictError, NotFoundError, UsageError, ValidationError

logger = logging.getLogger(__name__)


class FleetService:
    def __init__(self, db: Database):
        self.db = db
        self.vehicles = VehicleStore(db)
        self.policies = PolicyStore(db)

    # -- vehicles ----------------------------------------------------------

    async def create_vehicle(self, vehicle: VehicleRecord) -> VehicleRecord:
        """Persist a vehicle and its optional policy, both or neither."""
        normalize_vehicle(vehicle)
        validate_vehicle(vehicle)
        policy = vehicle.policy
        if policy is not None:
            normalize_policy(policy)
            validate_policy(policy)

        policy_id = 0
        async with self.db.transaction() as tx:
            await ensure_unique_plate(self.vehicles, vehicle.plate, tx)
            if policy is not None:
                await ensure_unique_policy_number(self.policies, policy.policy_number, tx)

            vehicle_id = await self.vehicles.insert(vehicle, tx)
            tx.record_step("insert vehicle")

            if policy is not None:
                linked = policy.model_copy(update={"vehicle_id": vehicle_id})
                policy_id = await self.policies.insert(linked, tx)
                tx.record_step("insert policy")

            await tx.commit()

        vehicle.id = vehicle_id
        if policy is not None:
            policy.id = policy_id
            policy.vehicle_id = vehicle_id
        logger.info("Created vehicle %s (id=%d, policy id=%s)", vehicle.plate, vehicle_id, policy_id or None)
        return vehicle

    async def update_vehicle(self, vehicle: VehicleRecord, link_current_policy: bool = False) -> VehicleRecord:
        """Update a vehicle and, when attached, its already linked policy.

        With ``link_current_policy`` the stored vehicle is read inside the
        transaction and an attached policy without an id is resolved to the
        vehicle's active policy.
        """
        policy = vehicle.policy
        if policy is not None and policy.id <= 0 and not link_current_policy:
            raise UsageError("A new policy cannot be attached while updating a vehicle")

        normalize_vehicle(vehicle)
        validate_vehicle(vehicle)
        if policy is not None:
            normalize_policy(policy)
            validate_policy(policy)

        policy_id = policy.id if policy is not None else 0
        async with self.db.transaction() as tx:
            if link_current_policy:
                current = await self.vehicles.get_by_id(vehicle.id, tx)
                if current is None:
                    raise NotFoundError(f"Vehicle {vehicle.id} not found")
            if policy is not None and policy_id <= 0:
                if current.policy is None:
                    raise UsageError("A new policy cannot be attached while updating a vehicle")
                policy_id = current.policy.id

            await ensure_unique_plate(self.vehicles, vehicle.plate, tx, exclude_id=vehicle.id)
            await self.vehicles.update(vehicle, tx)
            tx.record_step("update vehicle")

            if policy is not None:
                await ensure_unique_policy_number(
                    self.policies, policy.policy_number, tx, exclude_id=policy_id
                )
                linked = policy.model_copy(update={"id": policy_id, "vehicle_id": vehicle.id})
                await self.policies.update(linked, tx)
                tx.record_step("update policy")

            await tx.commit()

        if policy is not None:
            policy.id = policy_id
            policy.vehicle_id = vehicle.id
        logger.info("Updated vehicle %d", vehicle.id)
        return vehicle

    async def delete_vehicle(self, vehicle_id: int) -> None:
        """Soft-delete a vehicle together with its active policy."""
        vehicle = await self.vehicles.get_by_id(vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")

        async with self.db.transaction() as tx:
            await self.vehicles.soft_delete(vehicle_id, tx)
            tx.record_step("delete vehicle")
            if vehicle.policy is not None:
                await self.policies.soft_delete(vehicle.policy.id, tx)
                tx.record_step("delete policy")
            await tx.commit()

        logger.info("Deleted vehicle %d", vehicle_id)

    async def get_vehicle(self, vehicle_id: int) -> VehicleRecord | None:
        return await self.vehicles.get_by_id(vehicle_id)

    async def list_vehicles(self) -> list[VehicleRecord]:
        return await self.vehicles.get_all()

    async def find_vehicle_by_plate(self, plate: str) -> VehicleRecord | None:
        return await self.vehicles.find_by_plate(plate)

    # -- policies ----------------------------------------------------------

    async def create_policy(self, policy: PolicyRecord) -> PolicyRecord:
        """Insure an existing vehicle that has no active policy yet."""
        normalize_policy(policy)
        validate_policy(policy)
        if policy.vehicle_id <= 0:
            raise ValidationError("A policy must reference an existing vehicle")

        async with self.db.transaction() as tx:
            vehicle = await self.vehicles.get_by_id(policy.vehicle_id, tx)
            if vehicle is None:
                raise NotFoundError(f"Vehicle {policy.vehicle_id} not found")
            if vehicle.policy is not None:
                raise ConflictError(f"Vehicle {policy.vehicle_id} already has an active policy")

            await ensure_unique_policy_number(self.policies, policy.policy_number, tx)
            policy_id = await self.policies.insert(policy, tx)
            tx.record_step("insert policy")
            await tx.commit()

        policy.id = policy_id
        logger.info("Created policy %s for vehicle %d", policy.policy_number, policy.vehicle_id)
        return policy

    async def update_policy(self, policy: PolicyRecord) -> PolicyRecord:
        existing = await self.policies.get_by_id(policy.id)
        if existing is None:
            raise NotFoundError(f"Policy {policy.id} not found")

        normalize_policy(policy)
        validate_policy(policy)

        async with self.db.transaction() as tx:
            await ensure_unique_policy_number(
                self.policies, policy.policy_number, tx, exclude_id=policy.id
            )
            linked = policy.model_copy(update={"vehicle_id": existing.vehicle_id})
            await self.policies.update(linked, tx)
            tx.record_step("update policy")
            await tx.commit()

        policy.vehicle_id = existing.vehicle_id
        logger.info("Updated policy %d", policy.id)
        return policy

    async def delete_policy(self, policy_id: int) -> None:
        async with self.db.transaction() as tx:
            await self.policies.soft_delete(policy_id, tx)
            tx.record_step("delete policy")
            await tx.commit()
        logger.info("Deleted policy %d", policy_id)

    async def get_policy(self, policy_id: int) -> PolicyRecord | None:
        return await self.policies.get_by_id(policy_id)

    async def list_policies(self) -> list[PolicyRecord]:
        return await self.policies.get_all()

    async def find_policy_by_number(self, policy_number: str) -> PolicyRecord | None:
        return await self.policies.find_by_number(policy_number)
