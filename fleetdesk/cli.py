"""
Interactive console for the fleet database.

Usage (from project root):

    fleetdesk            # or: python -m fleetdesk.cli

Every option calls FleetService; errors raised by the service are printed
and the menu is shown again.
"""

import asyncio
import logging
import os
from datetime import date, datetime
from typing import Callable

from fleetdesk.config import settings
from fleetdesk.database import Database
from fleetdesk.schemas.policy import Coverage, PolicyRecord
from fleetdesk.schemas.vehicle import VehicleRecord
from fleetdesk.seed import seed_data
from fleetdesk.services.fleet import FleetService
from fleetdesk.services.validation import MIN_YEAR, max_year
from fleetdesk.utils.exceptions import AppException

MENU = """
+---------------------------------------------------+
|            FLEET MANAGEMENT CONSOLE               |
+---------------------------------------------------+
| VEHICLES                                          |
| 1. Create vehicle (optionally insured)            |
| 2. List vehicles                                  |
| 3. Find vehicle by id                             |
| 4. Update vehicle (and its policy)                |
| 5. Delete vehicle (and its policy)                |
|                                                   |
| SEARCH & POLICIES                                 |
| 6. Find vehicle by plate                          |
| 7. Find policy by number                          |
| 8. Create policy for an existing vehicle          |
| 9. List policies                                  |
+---------------------------------------------------+
| 0. Exit                                           |
+---------------------------------------------------+"""

SEPARATOR = "-" * 40


# -------------------------------------------------------------------
# Formatting
# -------------------------------------------------------------------

def format_policy(policy: PolicyRecord) -> str:
    return "\n".join([
        f"| Policy id:   {policy.id}",
        f"| Insurer:     {policy.insurer}",
        f"| Number:      {policy.policy_number}",
        f"| Coverage:    {policy.coverage.value}",
        f"| Expiry:      {policy.expiry.isoformat() if policy.expiry else '-'}",
        f"| Vehicle id:  {policy.vehicle_id}",
    ])


def format_vehicle(vehicle: VehicleRecord) -> str:
    lines = [
        SEPARATOR,
        f"| Vehicle id:  {vehicle.id}",
        f"| Plate:       {vehicle.plate}",
        f"| Make:        {vehicle.make}",
        f"| Model:       {vehicle.model}",
        f"| Year:        {vehicle.year}",
        f"| Chassis:     {vehicle.chassis_number}",
        SEPARATOR,
    ]
    if vehicle.policy is not None:
        lines.append(format_policy(vehicle.policy))
    else:
        lines.append("| No insurance policy")
    lines.append(SEPARATOR)
    return "\n".join(lines)


# -------------------------------------------------------------------
# Menu
# -------------------------------------------------------------------

class ConsoleMenu:
    def __init__(
        self,
        service: FleetService,
        prompt: Callable[[str], str] = input,
        out: Callable[[str], None] = print,
    ):
        self.service = service
        self.prompt = prompt
        self.out = out
        self._actions = {
            1: self.create_vehicle,
            2: self.list_vehicles,
            3: self.find_vehicle,
            4: self.update_vehicle,
            5: self.delete_vehicle,
            6: self.find_vehicle_by_plate,
            7: self.find_policy_by_number,
            8: self.create_policy,
            9: self.list_policies,
        }

    async def run(self) -> int:
        """Loop until the user picks 0 (or input ends). Returns the exit code."""
        while True:
            self.out(MENU)
            try:
                choice = self.read_int("Option: ", 0, 9)
            except EOFError:
                return 0
            if choice == 0:
                self.out("Goodbye.")
                return 0
            try:
                await self._actions[choice]()
            except AppException as exc:
                self.out(f"ERROR: {exc.message}")
            except EOFError:
                return 0

    # ---------------- Input helpers ---------------- #

    def read_text(self, label: str) -> str:
        while True:
            value = self.prompt(label).strip()
            if value:
                return value
            self.out("Error: the field cannot be empty.")

    def read_int(self, label: str, low: int, high: int) -> int:
        while True:
            raw = self.prompt(label).strip()
            try:
                value = int(raw)
            except ValueError:
                self.out("Error: enter a whole number.")
                continue
            if low <= value <= high:
                return value
            self.out(f"Error: the number must be between {low} and {high}.")

    def read_coverage(self, label: str = "Coverage (BASIC_LIABILITY, THIRD_PARTY, FULL_COVERAGE): ") -> Coverage:
        while True:
            raw = self.prompt(label).strip().upper()
            try:
                return Coverage(raw)
            except ValueError:
                self.out("Error: unknown coverage, use one of the listed options.")

    def read_date(self, label: str = "Expiry (YYYY-MM-DD): ") -> date:
        while True:
            raw = self.prompt(label).strip()
            try:
                value = datetime.strptime(raw, "%Y-%m-%d").date()
            except ValueError:
                self.out("Error: invalid date format, use YYYY-MM-DD.")
                continue
            if value <= date.today():
                self.out("Error: the date must be after today.")
                continue
            return value

    def read_yes(self, label: str) -> bool:
        return self.prompt(label).strip().lower() in ("y", "yes")

    def _keep(self, label: str, current):
        raw = self.prompt(f"{label} [{current}]: ").strip()
        return raw or current

    def _keep_int(self, label: str, current: int, low: int, high: int) -> int:
        while True:
            raw = self.prompt(f"{label} [{current}]: ").strip()
            if not raw:
                return current
            if raw.isdigit() and low <= int(raw) <= high:
                return int(raw)
            self.out(f"Error: enter a number between {low} and {high}.")

    def _read_policy(self) -> PolicyRecord:
        return PolicyRecord(
            insurer=self.read_text("Insurer: "),
            policy_number=self.read_text("Policy number: "),
            coverage=self.read_coverage(),
            expiry=self.read_date(),
        )

    # ---------------- Actions ---------------- #

    async def create_vehicle(self) -> None:
        self.out("\n--- Create vehicle ---")
        vehicle = VehicleRecord(
            plate=self.read_text("Plate (AA123BB): "),
            make=self.read_text("Make: "),
            model=self.read_text("Model: "),
            year=self.read_int("Year: ", MIN_YEAR, max_year()),
            chassis_number=self.read_text("Chassis number: "),
        )
        if self.read_yes("Attach an insurance policy? (y/n): "):
            vehicle.policy = self._read_policy()

        await self.service.create_vehicle(vehicle)
        policy_id = vehicle.policy.id if vehicle.policy is not None else "-"
        self.out(f"Vehicle created. Vehicle id: {vehicle.id} | Policy id: {policy_id}")

    async def list_vehicles(self) -> None:
        vehicles = await self.service.list_vehicles()
        if not vehicles:
            self.out("No active vehicles.")
            return
        for vehicle in vehicles:
            self.out(format_vehicle(vehicle))

    async def find_vehicle(self) -> None:
        vehicle_id = self.read_int("Vehicle id: ", 1, 2**31 - 1)
        vehicle = await self.service.get_vehicle(vehicle_id)
        if vehicle is None:
            self.out(f"Vehicle {vehicle_id} not found.")
            return
        self.out(format_vehicle(vehicle))

    async def update_vehicle(self) -> None:
        vehicle_id = self.read_int("Vehicle id: ", 1, 2**31 - 1)
        vehicle = await self.service.get_vehicle(vehicle_id)
        if vehicle is None:
            self.out(f"Vehicle {vehicle_id} not found.")
            return

        self.out("Leave a field blank to keep its current value.")
        vehicle.plate = self._keep("Plate", vehicle.plate)
        vehicle.make = self._keep("Make", vehicle.make)
        vehicle.model = self._keep("Model", vehicle.model)
        vehicle.year = self._keep_int("Year", vehicle.year, MIN_YEAR, max_year())
        vehicle.chassis_number = self._keep("Chassis number", vehicle.chassis_number)

        policy = vehicle.policy
        if policy is not None and self.read_yes("Update the policy too? (y/n): "):
            policy.insurer = self._keep("Insurer", policy.insurer)
            policy.policy_number = self._keep("Policy number", policy.policy_number)
            if self.read_yes("Change coverage? (y/n): "):
                policy.coverage = self.read_coverage()
            if self.read_yes("Change expiry? (y/n): "):
                policy.expiry = self.read_date()

        await self.service.update_vehicle(vehicle)
        self.out("Vehicle updated.")

    async def delete_vehicle(self) -> None:
        vehicle_id = self.read_int("Vehicle id: ", 1, 2**31 - 1)
        await self.service.delete_vehicle(vehicle_id)
        self.out("Vehicle and its policy deleted.")

    async def find_vehicle_by_plate(self) -> None:
        plate = self.read_text("Plate: ")
        vehicle = await self.service.find_vehicle_by_plate(plate)
        if vehicle is None:
            self.out(f"No active vehicle with plate {plate.upper()}.")
            return
        self.out(format_vehicle(vehicle))

    async def find_policy_by_number(self) -> None:
        number = self.read_text("Policy number: ")
        policy = await self.service.find_policy_by_number(number)
        if policy is None:
            self.out(f"No active policy with number {number.upper()}.")
            return
        self.out(format_policy(policy))

    async def create_policy(self) -> None:
        self.out("\n--- Create policy for an existing vehicle ---")
        vehicle_id = self.read_int("Vehicle id: ", 1, 2**31 - 1)
        policy = self._read_policy()
        policy.vehicle_id = vehicle_id
        await self.service.create_policy(policy)
        self.out(f"Policy created with id: {policy.id}")

    async def list_policies(self) -> None:
        policies = await self.service.list_policies()
        if not policies:
            self.out("No active policies.")
            return
        for policy in policies:
            self.out(format_policy(policy))
            self.out(SEPARATOR)


# -------------------------------------------------------------------
# Main entrypoint
# -------------------------------------------------------------------

async def _run(db: Database) -> int:
    await db.create_tables()
    service = FleetService(db)
    if settings.seed_demo_data:
        await seed_data(service)
    try:
        return await ConsoleMenu(service).run()
    finally:
        await db.dispose()


def main() -> None:
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    os.makedirs(settings.data_dir, exist_ok=True)
    raise SystemExit(asyncio.run(_run(Database(settings.database_url))))


if __name__ == "__main__":
    main()
