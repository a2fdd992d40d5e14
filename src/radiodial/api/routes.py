"""API route table."""

from fastapi import APIRouter

from radiodial.api.routers import admin_router, health_router, stations_router

router = APIRouter()
router.include_router(health_router.router)
router.include_router(stations_router.router)
router.include_router(admin_router.router)
