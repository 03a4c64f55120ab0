"""
CRM API Routes - Clients and Events
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from buffetdesk.api.deps import require_user
from buffetdesk.core.database import get_db
from buffetdesk.core.exceptions import NotFoundError
from buffetdesk.models import EventStatus
from buffetdesk.schemas import (
    ClientCreate, ClientResponse, ClientUpdate,
    EventCreate, EventResponse, EventUpdate
)
from buffetdesk.services import ClientService, EventService

clients_router = APIRouter(prefix="/clients", tags=["Clients"], dependencies=require_user)
events_router = APIRouter(prefix="/events", tags=["Events"], dependencies=require_user)


# ==================== CLIENTS ====================

@clients_router.get("", response_model=List[ClientResponse])
def list_clients(search: Optional[str] = None, db: Session = Depends(get_db)):
    return ClientService(db).get_all(search)


@clients_router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(client_data: ClientCreate, db: Session = Depends(get_db)):
    return ClientService(db).create(client_data)


@clients_router.get("/{client_id}", response_model=ClientResponse)
def get_client(client_id: str, db: Session = Depends(get_db)):
    client = ClientService(db).get_by_id(client_id)
    if not client:
        raise NotFoundError("Client", client_id)
    return client


@clients_router.put("/{client_id}", response_model=ClientResponse)
def update_client(client_id: str, client_data: ClientUpdate, db: Session = Depends(get_db)):
    return ClientService(db).update(client_id, client_data)


@clients_router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(client_id: str, db: Session = Depends(get_db)):
    """Delete a client with no booked events"""
    ClientService(db).delete(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== EVENTS ====================

@events_router.get("/upcoming", response_model=List[EventResponse])
def list_upcoming_events(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Events from today on, soonest first"""
    return EventService(db).get_upcoming(limit)


@events_router.get("", response_model=List[EventResponse])
def list_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    return EventService(db).get_all(
        status_filter.value if status_filter else None,
        start_date,
        end_date
    )


@events_router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(event_data: EventCreate, db: Session = Depends(get_db)):
    return EventService(db).create(event_data)


@events_router.get("/{event_id}", response_model=EventResponse)
def get_event(event_id: str, db: Session = Depends(get_db)):
    event = EventService(db).get_by_id(event_id)
    if not event:
        raise NotFoundError("Event", event_id)
    return event


@events_router.put("/{event_id}", response_model=EventResponse)
def update_event(event_id: str, event_data: EventUpdate, db: Session = Depends(get_db)):
    return EventService(db).update(event_id, event_data)


@events_router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, db: Session = Depends(get_db)):
    """Delete an event that has no payments, expenses or stock movements"""
    EventService(db).delete(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
