"""Appointment repository - Database operations for appointments"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import Appointment, Client


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_active_appointments(db: Session) -> list[Appointment]:
        """Get every appointment that was not cancelled, earliest first"""
        return (
            db.query(Appointment)
            .filter(Appointment.cancelled.is_(False))
            .order_by(Appointment.start_time.asc())
            .all()
        )

    @staticmethod
    def get_upcoming_appointments(db: Session, now: datetime, limit: int) -> list[Appointment]:
        """Get open appointments starting at or after now"""
        return (
            db.query(Appointment)
            .filter(
                Appointment.completed.is_(False),
                Appointment.cancelled.is_(False),
                Appointment.start_time >= now,
            )
            .order_by(Appointment.start_time.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_client_names(db: Session, client_ids: Optional[Iterable[int]] = None) -> dict[int, str]:
        """Map client id to name, for all clients or only the given ids"""
        query = db.query(Client.id, Client.name)
        if client_ids is not None:
            query = query.filter(Client.id.in_(list(client_ids)))
        return {client_id: name for client_id, name in query.all()}

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def client_exists(db: Session, client_id: int) -> bool:
        return db.query(Client.id).filter(Client.id == client_id).first() is not None

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            if value is not None and hasattr(appointment, key):
                setattr(appointment, key, value)

        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()
