from fastapi import APIRouter, Depends

from fleetdesk.dependencies import get_fleet_service
from fleetdesk.schemas.vehicle import VehicleCreate, VehicleRecord, VehicleUpdate
from fleetdesk.services.fleet import FleetService
from fleetdesk.utils.exceptions import NotFoundError
from fleetdesk.utils.response import success_response

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("")
async def list_vehicles(service: FleetService = Depends(get_fleet_service)):
    return success_response(data=await service.list_vehicles())


@router.post("", status_code=201)
async def create_vehicle(payload: VehicleCreate, service: FleetService = Depends(get_fleet_service)):
    vehicle = await service.create_vehicle(payload.to_record())
    return success_response(data=vehicle)


@router.get("/by-plate/{plate}")
async def find_vehicle_by_plate(plate: str, service: FleetService = Depends(get_fleet_service)):
    vehicle = await service.find_vehicle_by_plate(plate)
    if vehicle is None:
        raise NotFoundError(f"No active vehicle with plate '{plate.upper()}'")
    return success_response(data=vehicle)


@router.get("/{vehicle_id}")
async def get_vehicle(vehicle_id: int, service: FleetService = Depends(get_fleet_service)):
    vehicle = await service.get_vehicle(vehicle_id)
    if vehicle is None:
        raise NotFoundError(f"Vehicle {vehicle_id} not found")
    return success_response(data=vehicle)


@router.put("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: int,
    payload: VehicleUpdate,
    service: FleetService = Depends(get_fleet_service),
):
    vehicle = VehicleRecord(id=vehicle_id, **payload.model_dump(exclude={"policy"}))
    if payload.policy is not None:
        vehicle.policy = payload.policy.to_record(vehicle_id=vehicle_id)

    updated = await service.update_vehicle(vehicle, link_current_policy=True)
    return success_response(data=updated)


@router.delete("/{vehicle_id}")
async def delete_vehicle(vehicle_id: int, service: FleetService = Depends(get_fleet_service)):
    await service.delete_vehicle(vehicle_id)
    return success_response(data={"id": vehicle_id}, message="Vehicle deleted")
