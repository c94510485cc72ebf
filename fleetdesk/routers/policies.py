from fastapi import APIRouter, Depends

from fleetdesk.dependencies import get_fleet_service
from fleetdesk.schemas.policy import PolicyAttach, PolicyUpdate
from fleetdesk.services.fleet import FleetService
from fleetdesk.utils.exceptions import NotFoundError
from fleetdesk.utils.response import success_response

router = APIRouter(prefix="/policies", tags=["policies"])


@router.get("")
async def list_policies(service: FleetService = Depends(get_fleet_service)):
    return success_response(data=await service.list_policies())


@router.post("", status_code=201)
async def create_policy(payload: PolicyAttach, service: FleetService = Depends(get_fleet_service)):
    policy = await service.create_policy(payload.to_record())
    return success_response(data=policy)


@router.get("/by-number/{policy_number}")
async def find_policy_by_number(policy_number: str, service: FleetService = Depends(get_fleet_service)):
    policy = await service.find_policy_by_number(policy_number)
    if policy is None:
        raise NotFoundError(f"No active policy with number '{policy_number.upper()}'")
    return success_response(data=policy)


@router.get("/{policy_id}")
async def get_policy(policy_id: int, service: FleetService = Depends(get_fleet_service)):
    policy = await service.get_policy(policy_id)
    if policy is None:
        raise NotFoundError(f"Policy {policy_id} not found")
    return success_response(data=policy)


@router.put("/{policy_id}")
async def update_policy(
    policy_id: int,
    payload: PolicyUpdate,
    service: FleetService = Depends(get_fleet_service),
):
    policy = await service.update_policy(payload.to_record(policy_id=policy_id))
    return success_response(data=policy)


@router.delete("/{policy_id}")
async def delete_policy(policy_id: int, service: FleetService = Depends(get_fleet_service)):
    await service.delete_policy(policy_id)
    return success_response(data={"id": policy_id}, message="Policy deleted")
