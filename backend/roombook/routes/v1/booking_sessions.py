# backend/roombook/routes/v1/booking_sessions.py
"""
Booking session routes - API v1

Versioned endpoints under /api/v1/booking-sessions.
All business logic delegated to BookingSessionService.

Endpoints:
    POST / - Start a booking session for a room section
    GET /{session_id} - Current view of a session
    POST /{session_id}/date - Choose (or re-choose) a date
    POST /{session_id}/slot - Choose a slot and commit it
    DELETE /{session_id} - Cancel a session
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status

from ...api.dependencies import get_booking_session_service, get_current_user_id
from ...core.exceptions import DomainException
from ...schemas.booking_session import (
    BookingSessionView,
    ChooseDateRequest,
    ChooseSlotRequest,
    StartSessionRequest,
)
from ...services.booking_session_service import BookingSessionService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["booking-sessions-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=BookingSessionView, status_code=status.HTTP_201_CREATED)
async def start_booking_session(
    payload: StartSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: BookingSessionService = Depends(get_booking_session_service),
) -> BookingSessionView:
    """Start booking a section, by room/section name or id."""
    try:
        return await asyncio.to_thread(
            service.start_session,
            user_id,
            room_id=payload.room_id,
            section_id=payload.section_id,
            room_name=payload.room_name,
            section_name=payload.section_name,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{session_id}", response_model=BookingSessionView)
async def get_booking_session(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    user_id: str = Depends(get_current_user_id),
    service: BookingSessionService = Depends(get_booking_session_service),
) -> BookingSessionView:
    try:
        return await asyncio.to_thread(service.get_session_view, session_id, user_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/date", response_model=BookingSessionView)
async def choose_booking_date(
    payload: ChooseDateRequest,
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    user_id: str = Depends(get_current_user_id),
    service: BookingSessionService = Depends(get_booking_session_service),
) -> BookingSessionView:
    """Choose a date from the session's window and list its open slots."""
    try:
        return await asyncio.to_thread(service.choose_date, session_id, user_id, payload.date)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{session_id}/slot", response_model=BookingSessionView)
async def choose_booking_slot(
    payload: ChooseSlotRequest,
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    user_id: str = Depends(get_current_user_id),
    service: BookingSessionService = Depends(get_booking_session_service),
) -> BookingSessionView:
    """
    Choose an offered slot and commit it.

    Returns the confirmed view, or a conflict view when the slot was taken
    while the user was browsing.
    """
    try:
        return await asyncio.to_thread(
            service.choose_slot, session_id, user_id, payload.start_hour
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking_session(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    user_id: str = Depends(get_current_user_id),
    service: BookingSessionService = Depends(get_booking_session_service),
) -> Response:
    try:
        await asyncio.to_thread(service.cancel_session, session_id, user_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
