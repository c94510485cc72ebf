import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from fleetdesk.config import settings
from fleetdesk.database import get_database
from fleetdesk.dependencies import verify_api_key
from fleetdesk.seed import seed_data
from fleetdesk.services.fleet import FleetService
from fleetdesk.routers.vehicles import router as vehicles_router
from fleetdesk.routers.policies import router as policies_router
from fleetdesk.utils.exceptions import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    os.makedirs(settings.data_dir, exist_ok=True)
    db = get_database()
    await db.create_tables()
    if settings.seed_demo_data:
        await seed_data(FleetService(db))
    yield
    await db.dispose()
    get_database.cache_clear()


app = FastAPI(
    title="Fleetdesk API",
    description="Vehicle fleet and insurance policy management",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

_api_key_dep = [Depends(verify_api_key)]

app.include_router(vehicles_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(policies_router, prefix="/api/v1", dependencies=_api_key_dep)


@app.get("/health")
async def health_check():
    return {"status": "success", "data": {"service": "fleetdesk-api", "version": "0.1.0"}, "message": None}
