"""Client service - Business logic for client operations"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Appointment, Client
from ...shared.dates import as_utc, format_date, format_datetime, utc_now
from ...shared.errors import ApiError
from .repository import ClientRepository
from .schemas import ClientCreate, ClientResponse, ClientUpdate

logger = logging.getLogger(__name__)


def summarize_client(
    client: Client, appointments: Iterable[Appointment], now: Optional[datetime] = None
) -> ClientResponse:
    """
    Build the dashboard row for a client from that client's appointments.

    lastVisit is the latest completed appointment; nextAppointment is the
    earliest appointment still ahead (not completed, not cancelled, not
    started yet). totalVisits counts completed appointments.
    """
    now = now or utc_now()

    completed = [a for a in appointments if a.completed]
    pending = [
        a
        for a in appointments
        if not a.completed and not a.cancelled and as_utc(a.start_time) >= now
    ]

    last_visit = max(completed, key=lambda a: as_utc(a.start_time), default=None)
    next_appointment = min(pending, key=lambda a: as_utc(a.start_time), default=None)

    return ClientResponse(
        id=client.id,
        name=client.name,
        phone=client.phone,
        email=client.email,
        lastVisit=format_date(last_visit.start_time) if last_visit else "-",
        nextAppointment=format_datetime(next_appointment.start_time) if next_appointment else None,
        totalVisits=len(completed),
    )


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients_with_appointments(self) -> list[ClientResponse]:
        """Get all clients merged with their visit summary"""
        try:
            clients = self.repo.get_clients(self.db)
            appointments = self.repo.get_appointments(self.db)
        except SQLAlchemyError as e:
            raise ApiError(500, "Error fetching clients", str(e)) from e

        by_client = defaultdict(list)
        for appointment in appointments:
            by_client[appointment.client_id].append(appointment)

        now = utc_now()
        summaries = [summarize_client(c, by_client[c.id], now) for c in clients]
        logger.info(
            f"📈 Summarized {len(summaries)} clients from {len(appointments)} appointments"
        )
        return summaries

    def get_client(self, client_id: int) -> Client:
        """Get a specific client"""
        try:
            client = self.repo.get_client_by_id(self.db, client_id)
        except SQLAlchemyError as e:
            raise ApiError(500, "Error fetching client", str(e)) from e
        if not client:
            raise ApiError(404, "Client not found")
        return client

    def get_client_summary(self, client_id: int) -> ClientResponse:
        client = self.get_client(client_id)
        try:
            appointments = self.repo.get_appointments(self.db, client_id)
        except SQLAlchemyError as e:
            raise ApiError(500, "Error fetching client", str(e)) from e
        return summarize_client(client, appointments)

    def create_client(self, data: ClientCreate) -> ClientResponse:
        """Create a new client"""
        logger.info(f"📥 Creating client {data.name}")
        try:
            client = self.repo.create_client(self.db, **data.model_dump())
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ApiError(500, "Error creating client", str(e)) from e
        return summarize_client(client, [])

    def update_client(self, client_id: int, data: ClientUpdate) -> ClientResponse:
        """Update a client"""
        client = self.get_client(client_id)
        try:
            self.repo.update_client(self.db, client, **data.model_dump(exclude_unset=True))
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ApiError(500, "Error updating client", str(e)) from e
        return self.get_client_summary(client_id)

    def delete_client(self, client_id: int) -> None:
        """Delete a client and its appointments"""
        client = self.get_client(client_id)
        try:
            self.repo.delete_client(self.db, client)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ApiError(500, "Error deleting client", str(e)) from e
        logger.info(f"🗑️ Deleted client {client_id}")
