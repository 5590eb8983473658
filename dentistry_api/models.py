from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Client(Base):
    """Clinic patient, stored in the WhatsApp intake table"""

    __tablename__ = "dados_cliente"

    id = Column(Integer, primary_key=True, index=True)
    name = Column("nomewpp", String(255), nullable=False)  # Name captured from WhatsApp
    phone = Column("telefone", String(20), nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    appointments = relationship(
        "Appointment", back_populates="client", cascade="all, delete-orphan"
    )


class Appointment(Base):
    __tablename__ = "agendamentos"

    id = Column("id_agendamento", Integer, primary_key=True, index=True)
    start_time = Column("hora_inicio", DateTime(timezone=True), nullable=False, index=True)
    end_time = Column("hora_fim", DateTime(timezone=True), nullable=False)
    client_id = Column("id_cliente", Integer, ForeignKey("dados_cliente.id"), nullable=False)
    completed = Column("finalizado", Boolean, default=False, nullable=False)
    cancelled = Column("cancelado", Boolean, default=False, nullable=False)

    client = relationship("Client", back_populates="appointments")
