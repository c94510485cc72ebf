"""Field rules and uniqueness checks for vehicles and policies."""
import re
from datetime import date

from fleetdesk.repositories.policies import PolicyStore
from fleetdesk.repositories.vehicles import VehicleStore
from fleetdesk.schemas.policy import Coverage, PolicyRecord
from fleetdesk.schemas.vehicle import VehicleRecord
from fleetdesk.transaction import Transaction
from fleetdesk.utils.exceptions import ConflictError, ValidationError

# Two letters, three digits, two letters (e.g. AB123CD)
PLATE_PATTERN = re.compile(r"^[A-Z]{2}[0-9]{3}[A-Z]{2}$")
MIN_YEAR = 1950


def max_year(today: date | None = None) -> int:
    return (today or date.today()).year + 1


def normalize_vehicle(vehicle: VehicleRecord) -> VehicleRecord:
    vehicle.plate = (vehicle.plate or "").strip().upper()
    vehicle.make = (vehicle.make or "").strip()
    vehicle.model = (vehicle.model or "").strip()
    vehicle.chassis_number = (vehicle.chassis_number or "").strip().upper()
    return vehicle


def normalize_policy(policy: PolicyRecord) -> PolicyRecord:
    policy.insurer = (policy.insurer or "").strip()
    policy.policy_number = (policy.policy_number or "").strip().upper()
    return policy


def _require(value: str, label: str) -> None:
    if not value or not value.strip():
        raise ValidationError(f"{label} is required")


def validate_vehicle(vehicle: VehicleRecord, today: date | None = None) -> None:
    if vehicle is None:
        raise ValidationError("Vehicle is required")
    _require(vehicle.plate, "Plate")
    _require(vehicle.make, "Make")
    _require(vehicle.model, "Model")
    _require(vehicle.chassis_number, "Chassis number")

    if not PLATE_PATTERN.match(vehicle.plate.strip().upper()):
        raise ValidationError(
            f"Plate '{vehicle.plate}' must be two letters, three digits and two letters"
        )

    upper = max_year(today)
    if not MIN_YEAR <= vehicle.year <= upper:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {upper}")


def validate_policy(policy: PolicyRecord, today: date | None = None) -> None:
    """Check policy fields; the expiry must fall strictly after today."""
    if policy is None:
        raise ValidationError("Policy is required")
    _require(policy.insurer, "Insurer")
    _require(policy.policy_number, "Policy number")

    if not isinstance(policy.coverage, Coverage):
        raise ValidationError(f"Unknown coverage '{policy.coverage}'")

    today = today or date.today()
    if policy.expiry is None or policy.expiry <= today:
        raise ValidationError("Expiry date must be after today")


async def ensure_unique_plate(
    store: VehicleStore, plate: str, tx: Transaction | None = None, exclude_id: int = 0
) -> None:
    existing = await store.find_by_plate(plate, tx)
    if existing is not None and existing.id != exclude_id:
        raise ConflictError(f"A vehicle with plate '{plate.upper()}' already exists")


async def ensure_unique_policy_number(
    store: PolicyStore, policy_number: str, tx: Transaction | None = None, exclude_id: int = 0
) -> None:
    existing = await store.find_by_number(policy_number, tx)
    if existing is not None and existing.id != exclude_id:
        raise ConflictError(f"An active policy with number '{policy_number.upper()}' already exists")
