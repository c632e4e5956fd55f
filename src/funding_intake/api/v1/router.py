"""
Main API router for v1 endpoints
"""
from fastapi import APIRouter

from funding_intake.api.v1.endpoints import applications

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(applications.router, tags=["applications"])
