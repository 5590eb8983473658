"""Appointment router - FastAPI endpoints for appointment operations"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.responses import ApiResponse, MessageResponse
from .schemas import AppointmentCreate, AppointmentUpdate, AppointmentWithClient
from .service import DEFAULT_UPCOMING_LIMIT, AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


@router.get("", response_model=ApiResponse[list[AppointmentWithClient]])
async def get_all_appointments(service: AppointmentService = Depends(get_appointment_service)):
    """Get all appointments (excluding cancelled) for the calendar"""
    return ApiResponse(data=service.get_all_appointments())


@router.get("/upcoming", response_model=ApiResponse[list[AppointmentWithClient]])
async def get_upcoming_appointments(
    limit: int = Query(DEFAULT_UPCOMING_LIMIT, ge=1, le=100),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get the next appointments that are neither finished nor cancelled"""
    return ApiResponse(data=service.get_upcoming_appointments(limit))


@router.post("", status_code=201, response_model=ApiResponse[AppointmentWithClient])
async def create_appointment(
    data: AppointmentCreate, service: AppointmentService = Depends(get_appointment_service)
):
    return ApiResponse(data=service.create_appointment(data))


@router.patch("/{appointment_id}", response_model=ApiResponse[AppointmentWithClient])
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    service: AppointmentService = Depends(get_appointment_service),
):
    return ApiResponse(data=service.update_appointment(appointment_id, data))


@router.delete("/{appointment_id}", response_model=MessageResponse)
async def delete_appointment(
    appointment_id: int, service: AppointmentService = Depends(get_appointment_service)
):
    service.delete_appointment(appointment_id)
    return MessageResponse(message="Appointment deleted")
