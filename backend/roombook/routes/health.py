# backend/roombook/routes/health.py
"""
Health check endpoint for load balancer probes.
"""

import logging

from fastapi import APIRouter

from ..core.constants import BRAND_NAME

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok", "service": BRAND_NAME}
