from datetime import date, timedelta

import pytest

from fleetdesk.cli import ConsoleMenu, format_vehicle


def _scripted(answers):
    remaining = iter(answers)

    def prompt(label: str) -> str:
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError
    return prompt


def _menu(service, answers):
    output: list[str] = []
    return ConsoleMenu(service, prompt=_scripted(answers), out=output.append), output


def _expiry() -> str:
    return (date.today() + timedelta(days=30)).isoformat()


@pytest.mark.asyncio
async def test_exit_returns_zero(service):
    menu, output = _menu(service, ["0"])

    assert await menu.run() == 0
    assert output[-1] == "Goodbye."


@pytest.mark.asyncio
async def test_create_insured_vehicle_then_list(service):
    menu, output = _menu(service, [
        "1", "ab123cd", "Toyota", "Corolla", "2022", "xyz1",
        "y", "Acme", "p-001", "full_coverage", _expiry(),
        "2",
        "0",
    ])

    assert await menu.run() == 0
    assert any("Vehicle created. Vehicle id: 1 | Policy id: 1" in line for line in output)
    assert any("| Plate:       AB123CD" in line and "| Number:      P-001" in line for line in output)


@pytest.mark.asyncio
async def test_input_helpers_reprompt_on_bad_values(service):
    menu, output = _menu(service, [
        "1", "", "AB123CD", "Toyota", "Corolla", "abc", "1800", "2020", "XYZ1",
        "y", "Acme", "P-1", "GOLD", "THIRD_PARTY", "2020-13-01", date.today().isoformat(), _expiry(),
        "0",
    ])

    await menu.run()

    assert "Error: the field cannot be empty." in output
    assert "Error: enter a whole number." in output
    assert any(line.startswith("Error: the number must be between 1950") for line in output)
    assert "Error: unknown coverage, use one of the listed options." in output
    assert "Error: invalid date format, use YYYY-MM-DD." in output
    assert "Error: the date must be after today." in output
    assert (await service.find_vehicle_by_plate("AB123CD")).policy.policy_number == "P-1"


@pytest.mark.asyncio
async def test_service_errors_are_printed(service):
    menu, output = _menu(service, [
        "1", "AB123CD", "Toyota", "Corolla", "2022", "XYZ1", "n",
        "1", "AB123CD", "Ford", "Ka", "2015", "K1", "n",
        "5", "77",
        "0",
    ])

    assert await menu.run() == 0
    assert "ERROR: A vehicle with plate 'AB123CD' already exists" in output
    assert "ERROR: Vehicle 77 not found" in output


@pytest.mark.asyncio
async def test_update_keeps_blank_fields(service):
    menu, _ = _menu(service, [
        "1", "AB123CD", "Toyota", "Corolla", "2022", "XYZ1", "y", "Acme", "P-1", "BASIC_LIABILITY", _expiry(),
        "4", "1", "", "", "Yaris", "2023", "", "y", "Zurich", "", "n", "n",
        "0",
    ])

    await menu.run()

    vehicle = await service.get_vehicle(1)
    assert vehicle.model == "Yaris"
    assert vehicle.make == "Toyota"
    assert vehicle.year == 2023
    assert vehicle.policy.insurer == "Zurich"
    assert vehicle.policy.policy_number == "P-1"


@pytest.mark.asyncio
async def test_policy_options(service):
    menu, output = _menu(service, [
        "1", "AB123CD", "Toyota", "Corolla", "2022", "XYZ1", "n",
        "8", "1", "Acme", "P-55", "THIRD_PARTY", _expiry(),
        "7", "p-55",
        "9",
        "6", "AB123CD",
        "3", "1",
        "0",
    ])

    await menu.run()

    assert "Policy created with id: 1" in output
    assert sum("| Number:      P-55" in line for line in output) >= 3


@pytest.mark.asyncio
async def test_end_of_input_exits_cleanly(service):
    menu, _ = _menu(service, ["2"])
    assert await menu.run() == 0


def test_format_vehicle_without_policy(make_vehicle):
    text = format_vehicle(make_vehicle(with_policy=False))
    assert "| No insurance policy" in text
    assert "| Plate:       AB123CD" in text
