from datetime import date
from enum import Enum

from pydantic import BaseModel


class Coverage(str, Enum):
    BASIC_LIABILITY = "BASIC_LIABILITY"
    THIRD_PARTY = "THIRD_PARTY"
    FULL_COVERAGE = "FULL_COVERAGE"


class PolicyRecord(BaseModel):
    """In-memory insurance policy. ``id`` stays 0 until the row is committed."""

    id: int = 0
    deleted: bool = False
    insurer: str = ""
    policy_number: str = ""
    coverage: Coverage = Coverage.BASIC_LIABILITY
    expiry: date | None = None
    vehicle_id: int = 0

    model_config = {"from_attributes": True}


class PolicyCreate(BaseModel):
    insurer: str
    policy_number: str
    coverage: Coverage
    expiry: date

    def to_record(self, vehicle_id: int = 0, policy_id: int = 0) -> PolicyRecord:
        fields = self.model_dump(include={"insurer", "policy_number", "coverage", "expiry"})
        return PolicyRecord(id=policy_id, vehicle_id=vehicle_id, **fields)


class PolicyAttach(PolicyCreate):
    vehicle_id: int

    def to_record(self, vehicle_id: int = 0, policy_id: int = 0) -> PolicyRecord:
        return super().to_record(vehicle_id=vehicle_id or self.vehicle_id, policy_id=policy_id)


class PolicyUpdate(PolicyCreate):
    pass
