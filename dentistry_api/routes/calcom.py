import json
import logging
from typing import Any, Optional

import httpx
from fastapi import APIRouter, Body, Depends, Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import CALCOM_WEBHOOK_SECRET
from ..services.calcom_service import (
    CalcomAPIError,
    CalcomBooking,
    CalcomEvent,
    CalcomNotConfiguredError,
    CalcomService,
)
from ..shared.errors import ApiError
from ..shared.responses import ApiResponse, MessageResponse
from ..webhook_security import verify_calcom_webhook

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calcom", tags=["calcom"])
calcom_service = CalcomService()

NOT_CONFIGURED_MESSAGE = (
    "Cal.com integration not configured. Please add CALCOM_API_KEY to your .env file."
)


class CalcomStatus(BaseModel):
    configured: bool
    message: str


class AttendeeIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    timeZone: Optional[str] = None


class BookingCreateRequest(BaseModel):
    eventTypeId: int
    start: str = Field(..., min_length=1)
    attendee: AttendeeIn
    metadata: Optional[dict[str, Any]] = None


class BookingUpdateRequest(BaseModel):
    """Fields to change on a booking; anything else Cal.com accepts is forwarded too"""

    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    description: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    status: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class CancelBookingRequest(BaseModel):
    reason: Optional[str] = None


def get_calcom_service() -> CalcomService:
    return calcom_service


def require_calcom(service: CalcomService = Depends(get_calcom_service)) -> CalcomService:
    """Answer 503 up front when the integration has no API key"""
    if not service.is_configured():
        raise ApiError(503, NOT_CONFIGURED_MESSAGE)
    return service


def get_webhook_secret() -> Optional[str]:
    return CALCOM_WEBHOOK_SECRET


def calcom_failure(message: str, exc: Exception) -> ApiError:
    logger.error(f"❌ {message}: {exc}")
    if isinstance(exc, CalcomNotConfiguredError):
        return ApiError(503, NOT_CONFIGURED_MESSAGE)
    return ApiError(500, message, str(exc))


CALCOM_ERRORS = (CalcomAPIError, CalcomNotConfiguredError, httpx.HTTPError)


@router.get("/status", response_model=ApiResponse[CalcomStatus])
async def get_status(service: CalcomService = Depends(get_calcom_service)):
    """Check whether the Cal.com integration is configured"""
    configured = service.is_configured()
    return ApiResponse(
        data=CalcomStatus(
            configured=configured,
            message=(
                "Cal.com integration is configured and ready"
                if configured
                else NOT_CONFIGURED_MESSAGE
            ),
        )
    )


@router.get("/bookings", response_model=ApiResponse[list[CalcomBooking]])
async def get_bookings(
    status: Optional[str] = None,
    userId: Optional[int] = None,
    eventTypeId: Optional[int] = None,
    afterStart: Optional[str] = None,
    beforeEnd: Optional[str] = None,
    service: CalcomService = Depends(require_calcom),
):
    """Fetch all bookings, optionally filtered"""
    try:
        bookings = await service.get_bookings(
            status=status,
            user_id=userId,
            event_type_id=eventTypeId,
            after_start=afterStart,
            before_end=beforeEnd,
        )
    except CALCOM_ERRORS as e:
        raise calcom_failure("Error fetching Cal.com bookings", e) from e
    return ApiResponse(data=bookings)


@router.get("/bookings/upcoming", response_model=ApiResponse[list[CalcomBooking]])
async def get_upcoming_bookings(service: CalcomService = Depends(require_calcom)):
    """Fetch accepted bookings starting from now"""
    try:
        bookings = await service.get_upcoming_bookings()
    except CALCOM_ERRORS as e:
        raise calcom_failure("Error fetching upcoming Cal.com bookings", e) from e
    return ApiResponse(data=bookings)


@router.get("/bookings/{booking_id}", response_model=ApiResponse[CalcomBooking])
async def get_booking(booking_id: int, service: CalcomService = Depends(require_calcom)):
    try:
        booking = await service.get_booking(booking_id)
    except CALCOM_ERRORS as e:
        raise calcom_failure("Error fetching Cal.com booking", e) from e
    return ApiResponse(data=booking)


@router.get("/events", response_model=ApiResponse[list[CalcomEvent]])
async def get_calendar_events(
    afterStart: Optional[str] = None,
    beforeEnd: Optional[str] = None,
    service: CalcomService = Depends(require_calcom),
):
    """Fetch bookings formatted as calendar events"""
    try:
        events = await service.get_calendar_events(after_start=afterStart, before_end=beforeEnd)
    except CALCOM_ERRORS as e:
        raise calcom_failure("Error fetching Cal.com calendar events", e) from e
    return ApiResponse(data=events)


@router.get("/event-types", response_model=ApiResponse[list[dict[str, Any]]])
async def get_event_types(service: CalcomService = Depends(require_calcom)):
    try:
        event_types = await service.get_event_types()
    except CALCOM_ERRORS as e:
        raise calcom_failure("Error fetching Cal.com event types", e) from e
    return ApiResponse(data=event_types)


@router.post("/bookings", status_code=201, response_model=ApiResponse[CalcomBooking])
async def create_booking(
    data: BookingCreateRequest, service: CalcomService = Depends(require_calcom)
):
    """Create a new booking"""
    try:
        booking = await service.create_booking(
            event_type_id=data.eventTypeId,
            start=data.start,
            attendee_name=data.attendee.name,
            attendee_email=data.attendee.email,
            attendee_timezone=data.attendee.timeZone,
            metadata=data.metadata,
        )
    except CALCOM_ERRORS as e:
        raise calcom_failure("Error creating Cal.com booking", e) from e
    return ApiResponse(data=booking)


@router.patch("/bookings/{booking_id}", response_model=ApiResponse[CalcomBooking])
async def update_booking(
    booking_id: int,
    data: BookingUpdateRequest,
    service: CalcomService = Depends(require_calcom),
):
    updates = data.model_dump(exclude_unset=True)
    if not updates:
        raise ApiError(400, "Invalid request", "No fields to update")

    try:
        booking = await service.update_booking(booking_id, updates)
    except CALCOM_ERRORS as e:
        raise calcom_failure("Error updating Cal.com booking", e) from e
    return ApiResponse(data=booking)


@router.delete("/bookings/{booking_id}", response_model=MessageResponse)
async def cancel_booking(
    booking_id: int,
    data: Optional[CancelBookingRequest] = Body(None),
    service: CalcomService = Depends(require_calcom),
):
    """Cancel a booking"""
    try:
        await service.cancel_booking(booking_id, data.reason if data else None)
    except CALCOM_ERRORS as e:
        raise calcom_failure("Error cancelling Cal.com booking", e) from e
    return MessageResponse(message="Booking cancelled successfully")


@router.post("/webhooks", response_model=ApiResponse[CalcomEvent])
async def handle_calcom_webhook(
    request: Request,
    secret: Optional[str] = Depends(get_webhook_secret),
    service: CalcomService = Depends(get_calcom_service),
):
    """
    Handle Cal.com webhook deliveries
    Supported events: BOOKING_CREATED, BOOKING_RESCHEDULED, BOOKING_CANCELLED
    """
    if not secret:
        logger.warning("⚠️ CALCOM_WEBHOOK_SECRET not configured - signature verification skipped")
        body = await request.body()
    else:
        _, body = await verify_calcom_webhook(request, secret, raise_on_failure=True)

    try:
        payload = json.loads(body.decode())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ApiError(400, "Invalid webhook payload", str(e)) from e

    if not isinstance(payload, dict):
        raise ApiError(400, "Invalid webhook payload", "Expected a JSON object")

    logger.info(f"📥 Cal.com webhook: {payload.get('triggerEvent')}")
    try:
        event = service.handle_webhook(payload)
    except ValidationError as e:
        raise ApiError(400, "Invalid webhook payload", str(e)) from e
    return ApiResponse(data=event)
