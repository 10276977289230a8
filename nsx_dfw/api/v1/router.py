"""
API v1 router.
"""
from fastapi import APIRouter

from nsx_dfw.api.v1.endpoints import health, sections, rules, workloads

api_router = APIRouter()

# Health check endpoint (no prefix, so it's /api/v1/health)
api_router.include_router(health.router, tags=["health"])

api_router.include_router(sections.router, prefix="/sections", tags=["sections"])
api_router.include_router(rules.router, prefix="/rules", tags=["rules"])
api_router.include_router(workloads.router, prefix="/workloads", tags=["workloads"])
