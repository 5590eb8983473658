"""Client router - FastAPI endpoints for client operations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.responses import ApiResponse, MessageResponse
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


@router.get(
    "", response_model=ApiResponse[list[ClientResponse]], response_model_exclude_none=True
)
async def get_clients(service: ClientService = Depends(get_client_service)):
    """Get all clients with last visit, next appointment and visit count"""
    return ApiResponse(data=service.get_clients_with_appointments())


@router.get(
    "/{client_id}", response_model=ApiResponse[ClientResponse], response_model_exclude_none=True
)
async def get_client(client_id: int, service: ClientService = Depends(get_client_service)):
    return ApiResponse(data=service.get_client_summary(client_id))


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[ClientResponse],
    response_model_exclude_none=True,
)
async def create_client(data: ClientCreate, service: ClientService = Depends(get_client_service)):
    return ApiResponse(data=service.create_client(data))


@router.patch(
    "/{client_id}", response_model=ApiResponse[ClientResponse], response_model_exclude_none=True
)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    service: ClientService = Depends(get_client_service),
):
    return ApiResponse(data=service.update_client(client_id, data))


@router.delete("/{client_id}", response_model=MessageResponse)
async def delete_client(client_id: int, service: ClientService = Depends(get_client_service)):
    """Delete a client and every appointment it owns"""
    service.delete_client(client_id)
    return MessageResponse(message="Client deleted")
