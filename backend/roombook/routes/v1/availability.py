# backend/roombook/routes/v1/availability.py
"""
Availability routes - API v1

Read-only slot listing under /api/v1/rooms, outside any booking session.
Nothing is held or reserved by reading availability.
"""

import asyncio
from datetime import date
import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_booking_session_service
from ...core.exceptions import DomainException
from ...schemas.booking_session import SlotOption
from ...services.booking_session_service import BookingSessionService
from .booking_sessions import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


@router.get("/{room_id}/sections/{section_id}/availability", response_model=List[SlotOption])
async def get_section_availability(
    room_id: str,
    section_id: str,
    target_date: date = Query(..., alias="date"),
    service: BookingSessionService = Depends(get_booking_session_service),
) -> List[SlotOption]:
    """Open slots of a section on a date in the operating time zone."""
    try:
        return await asyncio.to_thread(service.get_availability, room_id, section_id, target_date)
    except DomainException as e:
        handle_domain_exception(e)
