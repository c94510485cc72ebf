from fastapi import Header, HTTPException

from fleetdesk.config import settings
from fleetdesk.database import get_database
from fleetdesk.services.fleet import FleetService


async def verify_api_key(x_api_key: str = Header(default="")) -> None:
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=403, detail="Invalid or missing API key")


def get_fleet_service() -> FleetService:
    return FleetService(get_database())
