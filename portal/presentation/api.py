from fastapi import APIRouter

from portal.presentation.routers.v1.auth import router as auth_router
from portal.presentation.routers.v1.cron import router as cron_router
from portal.presentation.routes.health import router as health_router

api = APIRouter()
api.include_router(health_router)

# Add all v1 routers here
routers = (auth_router, cron_router)
for router in routers:
    api.include_router(router, prefix="/v1")
