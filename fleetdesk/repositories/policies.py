"""
Policy store: data access for the ``segurovehicular`` table.

Follows the same transaction rules as the vehicle store. A policy row is
always tied to a vehicle, so inserts require a resolved ``vehicle_id`` and
updates never change it.
"""

from __future__ import annotations

from sqlalchemy import select, update

from fleetdesk.database import Database
from fleetdesk.models.policy import InsurancePolicy
from fleetdesk.schemas.policy import PolicyRecord
from fleetdesk.transaction import Transaction, session_scope
from fleetdesk.utils.exceptions import NotFoundError, StorageError, ValidationError


def _select_active():
    return (
        select(InsurancePolicy)
        .where(InsurancePolicy.active())
        .execution_options(populate_existing=True)
    )


class PolicyStore:
    def __init__(self, db: Database):
        self.db = db

    async def insert(self, policy: PolicyRecord, tx: Transaction | None = None) -> int:
        """Insert the policy row and return its generated id."""
        if policy.vehicle_id <= 0:
            raise ValidationError("A policy must reference an existing vehicle")

        async with session_scope(self.db.sessions, tx) as session:
            row = InsurancePolicy(
                insurer=policy.insurer,
                policy_number=policy.policy_number.upper(),
                coverage=policy.coverage.value,
                expiry=policy.expiry,
                vehicle_id=policy.vehicle_id,
            )
            session.add(row)
            await session.flush()
            if row.id is None:
                raise StorageError("Policy insert did not return a generated id")
            return row.id

    async def update(self, policy: PolicyRecord, tx: Transaction | None = None) -> None:
        """Update an active policy still linked to ``policy.vehicle_id``."""
        stmt = (
            update(InsurancePolicy)
            .where(
                InsurancePolicy.id == policy.id,
                InsurancePolicy.vehicle_id == policy.vehicle_id,
                InsurancePolicy.active(),
            )
            .values({
                InsurancePolicy.insurer: policy.insurer,
                InsurancePolicy.policy_number: policy.policy_number.upper(),
                InsurancePolicy.coverage: policy.coverage.value,
                InsurancePolicy.expiry: policy.expiry,
            })
            .execution_options(synchronize_session=False)
        )
        async with session_scope(self.db.sessions, tx) as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError(
                    f"Policy {policy.id} not found for vehicle {policy.vehicle_id}"
                )

    async def soft_delete(self, policy_id: int, tx: Transaction | None = None) -> None:
        stmt = (
            update(InsurancePolicy)
            .where(InsurancePolicy.id == policy_id, InsurancePolicy.active())
            .values({InsurancePolicy.deleted: True})
            .execution_options(synchronize_session=False)
        )
        async with session_scope(self.db.sessions, tx) as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError(f"Policy {policy_id} not found")

    async def get_by_id(self, policy_id: int, tx: Transaction | None = None) -> PolicyRecord | None:
        stmt = _select_active().where(InsurancePolicy.id == policy_id)
        async with session_scope(self.db.sessions, tx) as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return PolicyRecord.model_validate(row) if row is not None else None

    async def get_all(self) -> list[PolicyRecord]:
        stmt = _select_active().order_by(InsurancePolicy.id)
        async with session_scope(self.db.sessions) as session:
            result = await session.execute(stmt)
            return [PolicyRecord.model_validate(row) for row in result.scalars().all()]

    async def find_by_number(self, policy_number: str, tx: Transaction | None = None) -> PolicyRecord | None:
        """Look up an active policy by number (case-insensitive)."""
        stmt = _select_active().where(InsurancePolicy.policy_number == policy_number.strip().upper())
        async with session_scope(self.db.sessions, tx) as session:
            row = (await session.execute(stmt)).scalars().first()
            return PolicyRecord.model_validate(row) if row is not None else None
