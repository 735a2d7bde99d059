"""
API Router

All API endpoints for the chart frontend.
"""

from fastapi import APIRouter

from app.api.endpoints import chart

router = APIRouter()

# Include all endpoint routers
router.include_router(chart.router, tags=["Chart"])
