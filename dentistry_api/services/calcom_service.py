import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from ..config import CALCOM_API_KEY, CALCOM_API_URL, CALCOM_DEFAULT_TIMEZONE
from ..shared.dates import to_iso_z, utc_now

logger = logging.getLogger(__name__)

DEFAULT_EVENT_TITLE = "Agendamento Cal.com"
DEFAULT_CUSTOMER_NAME = "Cliente"

# (background, border) per booking status
ACCEPTED_COLORS = ("#10b981", "#059669")
PENDING_COLORS = ("#f59e0b", "#d97706")
CANCELLED_COLOR = "#ef4444"


class CalcomAPIError(Exception):
    """Non-2xx or unreadable answer from the Cal.com API"""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Cal.com API error: {status_code} - {message}")
        self.status_code = status_code
        self.message = message


class CalcomNotConfiguredError(Exception):
    """Raised when an API call is attempted without CALCOM_API_KEY"""


class BookingStatus(str, Enum):
    ACCEPTED = "ACCEPTED"
    PENDING = "PENDING"
    CANCELLED = "CANCELLED"


class CalcomAttendee(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None
    timeZone: Optional[str] = None


class CalcomBooking(BaseModel):
    """Booking as returned by Cal.com; fields this API does not use pass through untouched"""

    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    uid: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    attendees: list[CalcomAttendee] = []
    status: Optional[str] = None
    eventTypeId: Optional[int] = None


class CalcomEvent(BaseModel):
    """Booking reshaped for the dashboard calendar"""

    id: Optional[str] = None
    title: str
    start: Optional[str] = None
    end: Optional[str] = None
    customerName: str
    customerEmail: str
    status: Optional[str] = None
    backgroundColor: Optional[str] = None
    borderColor: Optional[str] = None


def _error_message(response: httpx.Response) -> str:
    """Pull the error message out of a Cal.com error body, falling back to the reason phrase"""
    try:
        body = response.json()
    except ValueError:
        body = {}

    if isinstance(body, dict):
        if body.get("message"):
            return str(body["message"])
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])

    return response.reason_phrase


def _parse_booking(raw: Any) -> CalcomBooking:
    """Validate one booking from an API response"""
    try:
        return CalcomBooking.model_validate(raw)
    except ValidationError as e:
        logger.error(f"❌ Cal.com returned an unreadable booking: {e}")
        raise CalcomAPIError(502, "Malformed response: invalid booking") from e


def _list_field(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise CalcomAPIError(502, f"Malformed response: '{key}' is not a list")
    return value


class CalcomService:
    """Service for interacting with Cal.com API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        default_timezone: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else (CALCOM_API_KEY or "")
        self.api_url = (api_url or CALCOM_API_URL).rstrip("/")
        self.default_timezone = default_timezone or CALCOM_DEFAULT_TIMEZONE
        self._transport = transport

    def is_configured(self) -> bool:
        """Check whether the API key and URL are set"""
        return bool(self.api_key) and bool(self.api_url)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        if not self.is_configured():
            raise CalcomNotConfiguredError("Cal.com API key not configured")

        async with self._client() as client:
            response = await client.request(method, endpoint, params=params, json=json)

        if response.is_error:
            message = _error_message(response)
            logger.error(f"❌ Cal.com {method} {endpoint} failed: {response.status_code} {message}")
            raise CalcomAPIError(response.status_code, message)

        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"❌ Cal.com {method} {endpoint} returned a non-JSON body: {e}")
            raise CalcomAPIError(502, "Malformed response: body is not JSON") from e

        if not isinstance(data, dict):
            raise CalcomAPIError(502, "Malformed response: expected a JSON object")
        return data

    async def get_bookings(
        self,
        status: Optional[str] = None,
        user_id: Optional[int] = None,
        event_type_id: Optional[int] = None,
        after_start: Optional[str] = None,
        before_end: Optional[str] = None,
    ) -> list[CalcomBooking]:
        """Fetch bookings, sending only the filters that were given"""
        params = {}
        if status:
            params["status"] = status
        if user_id is not None:
            params["userId"] = str(user_id)
        if event_type_id is not None:
            params["eventTypeId"] = str(event_type_id)
        if after_start:
            params["afterStart"] = after_start
        if before_end:
            params["beforeEnd"] = before_end

        data = await self._request("GET", "/bookings", params=params)
        return [_parse_booking(b) for b in _list_field(data, "bookings")]

    async def get_upcoming_bookings(self, now: Optional[datetime] = None) -> list[CalcomBooking]:
        """Fetch accepted bookings that start from now on"""
        return await self.get_bookings(
            after_start=to_iso_z(now or utc_now()),
            status=BookingStatus.ACCEPTED.value,
        )

    async def get_booking(self, booking_id: int) -> CalcomBooking:
        data = await self._request("GET", f"/bookings/{booking_id}")
        booking = data.get("booking")
        if not booking:
            raise CalcomAPIError(404, "Booking not found")
        return _parse_booking(booking)

    async def create_booking(
        self,
        event_type_id: int,
        start: str,
        attendee_name: str,
        attendee_email: str,
        attendee_timezone: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> CalcomBooking:
        """Create a new booking for one attendee"""
        logger.info(f"📅 Creating Cal.com booking for event type {event_type_id} at {start}")
        data = await self._request(
            "POST",
            "/bookings",
            json={
                "eventTypeId": event_type_id,
                "start": start,
                "responses": {"name": attendee_name, "email": attendee_email},
                "timeZone": attendee_timezone or self.default_timezone,
                "metadata": metadata,
            },
        )
        return _parse_booking(data.get("booking") or {})

    async def update_booking(self, booking_id: int, updates: dict[str, Any]) -> CalcomBooking:
        data = await self._request("PATCH", f"/bookings/{booking_id}", json=updates)
        return _parse_booking(data.get("booking") or {})

    async def cancel_booking(self, booking_id: int, reason: Optional[str] = None) -> None:
        """Cancel a booking"""
        logger.info(f"🗑️ Cancelling Cal.com booking {booking_id}")
        await self._request("DELETE", f"/bookings/{booking_id}/cancel", json={"reason": reason})
        logger.info(f"✅ Cancelled Cal.com booking {booking_id}")

    async def get_event_types(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/event-types")
        event_types = _list_field(data, "eventTypes")
        if not all(isinstance(t, dict) for t in event_types):
            raise CalcomAPIError(502, "Malformed response: invalid event type")
        return event_types

    @staticmethod
    def booking_to_event(booking: CalcomBooking) -> CalcomEvent:
        attendee = booking.attendees[0] if booking.attendees else None
        accepted = (booking.status or "").upper() == BookingStatus.ACCEPTED.value
        background, border = ACCEPTED_COLORS if accepted else PENDING_COLORS

        return CalcomEvent(
            id=booking.uid,
            title=booking.title or DEFAULT_EVENT_TITLE,
            start=booking.startTime,
            end=booking.endTime,
            customerName=(attendee.name if attendee else None) or DEFAULT_CUSTOMER_NAME,
            customerEmail=(attendee.email if attendee else None) or "",
            status=booking.status,
            backgroundColor=background,
            borderColor=border,
        )

    def convert_bookings_to_events(self, bookings: list[CalcomBooking]) -> list[CalcomEvent]:
        """Convert Cal.com bookings to calendar events"""
        return [self.booking_to_event(b) for b in bookings]

    async def get_calendar_events(
        self, after_start: Optional[str] = None, before_end: Optional[str] = None
    ) -> list[CalcomEvent]:
        """Fetch bookings in a window, formatted for the calendar"""
        bookings = await self.get_bookings(after_start=after_start, before_end=before_end)
        return self.convert_bookings_to_events(bookings)

    def handle_webhook(self, payload: dict[str, Any]) -> Optional[CalcomEvent]:
        """
        Turn a Cal.com webhook delivery into a calendar event.

        BOOKING_CREATED and BOOKING_RESCHEDULED yield the event as is;
        BOOKING_CANCELLED yields it painted red. Other triggers are ignored.
        """
        trigger = payload.get("triggerEvent")
        data = payload.get("payload") or {}

        if trigger in ("BOOKING_CREATED", "BOOKING_RESCHEDULED"):
            return self.booking_to_event(CalcomBooking.model_validate(data))

        if trigger == "BOOKING_CANCELLED":
            event = self.booking_to_event(CalcomBooking.model_validate(data))
            event.backgroundColor = CANCELLED_COLOR
            event.borderColor = CANCELLED_COLOR
            return event

        logger.warning(f"⚠️ Unrecognized Cal.com webhook event: {trigger}")
        return None
