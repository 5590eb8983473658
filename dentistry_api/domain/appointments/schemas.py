"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, model_validator

from ...shared.dates import as_utc


class AppointmentCreate(BaseModel):
    """Schema for booking a new appointment"""

    id_cliente: int
    hora_inicio: datetime
    hora_fim: datetime

    @model_validator(mode="after")
    def check_interval(self):
        if as_utc(self.hora_fim) <= as_utc(self.hora_inicio):
            raise ValueError("hora_fim must be after hora_inicio")
        return self


class AppointmentUpdate(BaseModel):
    """Schema for rescheduling or closing an appointment"""

    hora_inicio: Optional[datetime] = None
    hora_fim: Optional[datetime] = None
    finalizado: Optional[bool] = None
    cancelado: Optional[bool] = None


class AppointmentWithClient(BaseModel):
    """Appointment joined with the owning client's name, as the calendar consumes it"""

    id_agendamento: int
    id_cliente: int
    clientName: str
    hora_inicio: datetime
    hora_fim: datetime
    finalizado: bool
    cancelado: bool
