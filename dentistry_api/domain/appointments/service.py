"""Appointment service - Business logic for appointment operations"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Appointment
from ...shared.dates import as_utc, utc_now
from ...shared.errors import ApiError
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentUpdate, AppointmentWithClient

logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_LIMIT = 10


def client_label(client_id: int) -> str:
    """Placeholder name for appointments whose client row is gone"""
    return f"Cliente #{client_id}"


def to_appointment_with_client(
    appointment: Appointment, client_names: dict[int, str]
) -> AppointmentWithClient:
    return AppointmentWithClient(
        id_agendamento=appointment.id,
        id_cliente=appointment.client_id,
        clientName=client_names.get(appointment.client_id) or client_label(appointment.client_id),
        hora_inicio=as_utc(appointment.start_time),
        hora_fim=as_utc(appointment.end_time),
        finalizado=appointment.completed,
        cancelado=appointment.cancelled,
    )


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    def get_all_appointments(self) -> list[AppointmentWithClient]:
        """Get every non-cancelled appointment joined with client names"""
        try:
            appointments = self.repo.get_active_appointments(self.db)
            client_names = self.repo.get_client_names(self.db)
        except SQLAlchemyError as e:
            raise ApiError(500, "Error fetching appointments", str(e)) from e

        return [to_appointment_with_client(a, client_names) for a in appointments]

    def get_upcoming_appointments(
        self, limit: int = DEFAULT_UPCOMING_LIMIT
    ) -> list[AppointmentWithClient]:
        """Get the next open appointments, fetching names only for the clients involved"""
        try:
            appointments = self.repo.get_upcoming_appointments(self.db, utc_now(), limit)
            if not appointments:
                return []

            client_ids = {a.client_id for a in appointments}
            client_names = self.repo.get_client_names(self.db, client_ids)
        except SQLAlchemyError as e:
            raise ApiError(500, "Error fetching upcoming appointments", str(e)) from e

        return [to_appointment_with_client(a, client_names) for a in appointments]

    def get_appointment(self, appointment_id: int) -> Appointment:
        try:
            appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        except SQLAlchemyError as e:
            raise ApiError(500, "Error fetching appointment", str(e)) from e
        if not appointment:
            raise ApiError(404, "Appointment not found")
        return appointment

    def create_appointment(self, data: AppointmentCreate) -> AppointmentWithClient:
        logger.info(f"📅 Booking appointment for client {data.id_cliente} at {data.hora_inicio}")
        try:
            if not self.repo.client_exists(self.db, data.id_cliente):
                raise ApiError(404, "Client not found")

            appointment = self.repo.create_appointment(
                self.db,
                client_id=data.id_cliente,
                start_time=as_utc(data.hora_inicio),
                end_time=as_utc(data.hora_fim),
                completed=False,
                cancelled=False,
            )
            client_names = self.repo.get_client_names(self.db, [appointment.client_id])
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ApiError(500, "Error creating appointment", str(e)) from e

        return to_appointment_with_client(appointment, client_names)

    def update_appointment(
        self, appointment_id: int, data: AppointmentUpdate
    ) -> AppointmentWithClient:
        """Reschedule, complete or cancel an appointment"""
        appointment = self.get_appointment(appointment_id)

        start = as_utc(data.hora_inicio) if data.hora_inicio else as_utc(appointment.start_time)
        end = as_utc(data.hora_fim) if data.hora_fim else as_utc(appointment.end_time)
        if end <= start:
            raise ApiError(400, "Invalid request", "hora_fim must be after hora_inicio")

        try:
            self.repo.update_appointment(
                self.db,
                appointment,
                start_time=as_utc(data.hora_inicio),
                end_time=as_utc(data.hora_fim),
                completed=data.finalizado,
                cancelled=data.cancelado,
            )
            client_names = self.repo.get_client_names(self.db, [appointment.client_id])
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ApiError(500, "Error updating appointment", str(e)) from e

        return to_appointment_with_client(appointment, client_names)

    def delete_appointment(self, appointment_id: int) -> None:
        appointment = self.get_appointment(appointment_id)
        try:
            self.repo.delete_appointment(self.db, appointment)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ApiError(500, "Error deleting appointment", str(e)) from e
        logger.info(f"🗑️ Deleted appointment {appointment_id}")
