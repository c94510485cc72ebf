from pydantic import BaseModel

from fleetdesk.schemas.policy import PolicyCreate, PolicyRecord, PolicyUpdate


class VehicleRecord(BaseModel):
    """In-memory vehicle with its eagerly loaded policy, if any."""

    id: int = 0
    deleted: bool = False
    plate: str = ""
    make: str = ""
    model: str = ""
    year: int = 0
    chassis_number: str = ""
    policy: PolicyRecord | None = None

    model_config = {"from_attributes": True}


class VehicleCreate(BaseModel):
    plate: str
    make: str
    model: str
    year: int
    chassis_number: str
    policy: PolicyCreate | None = None

    def to_record(self) -> VehicleRecord:
        record = VehicleRecord(**self.model_dump(exclude={"policy"}))
        if self.policy is not None:
            record.policy = self.policy.to_record()
        return record


class VehicleUpdate(BaseModel):
    plate: str
    make: str
    model: str
    year: int
    chassis_number: str
    policy: PolicyUpdate | None = None
