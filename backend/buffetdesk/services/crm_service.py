"""
CRM Service - Clients and Events
"""
from typing import Optional, List
from datetime import date
from enum import Enum
from sqlalchemy.orm import Session, joinedload

from buffetdesk.core.exceptions import NotFoundError, ValidationError
from buffetdesk.core.money import to_money, utctoday
from buffetdesk.models import Client, Event, Expense, InventoryMovement, Payment
from buffetdesk.schemas import ClientCreate, ClientUpdate, EventCreate, EventUpdate


class ClientService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, client_id: str) -> Optional[Client]:
        return self.db.query(Client).filter(Client.id == client_id).first()

    def get_all(self, search: str = None) -> List[Client]:
        query = self.db.query(Client)
        if search:
            query = query.filter(Client.name.ilike(f"%{search}%"))
        return query.order_by(Client.name).all()

    def create(self, client_data: ClientCreate) -> Client:
        client = Client(**client_data.model_dump())
        self.db.add(client)
        self.db.commit()
        self.db.refresh(client)
        return client

    def update(self, client_id: str, client_data: ClientUpdate) -> Client:
        client = self.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client", client_id)

        update_data = client_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if key == "name" and value is None:
                continue
            setattr(client, key, value)

        self.db.commit()
        self.db.refresh(client)
        return client

    def delete(self, client_id: str) -> None:
        client = self.get_by_id(client_id)
        if not client:
            raise NotFoundError("Client", client_id)

        # Events must always have a client
        has_events = self.db.query(Event.id).filter(Event.client_id == client_id).first()
        if has_events:
            raise ValidationError("Cannot delete a client that has events")

        self.db.delete(client)
        self.db.commit()


class EventService:
    REQUIRED_FIELDS = {
        "child_name", "age", "client_id", "event_date", "start_time",
        "end_time", "guest_count", "total_value", "status",
    }

    def __init__(self, db: Session):
        self.db = db

    def _ensure_client(self, client_id: str) -> None:
        if not self.db.query(Client.id).filter(Client.id == client_id).first():
            raise NotFoundError("Client", client_id)

    @staticmethod
    def _check_times(start_time, end_time) -> None:
        if start_time is not None and end_time is not None and end_time <= start_time:
            raise ValidationError("End time must be after start time")

    def get_by_id(self, event_id: str) -> Optional[Event]:
        return self.db.query(Event).options(joinedload(Event.client)).filter(
            Event.id == event_id
        ).first()

    def get_all(self, status: str = None, start_date: date = None, end_date: date = None) -> List[Event]:
        query = self.db.query(Event).options(joinedload(Event.client))
        if status:
            query = query.filter(Event.status == status)
        if start_date:
            query = query.filter(Event.event_date >= start_date)
        if end_date:
            query = query.filter(Event.event_date <= end_date)
        return query.order_by(Event.event_date, Event.start_time).all()

    def get_upcoming(self, limit: int = 10, today: date = None) -> List[Event]:
        """Events from today on, soonest first"""
        today = today or utctoday()
        return self.db.query(Event).options(joinedload(Event.client)).filter(
            Event.event_date >= today
        ).order_by(Event.event_date, Event.start_time).limit(limit).all()

    def create(self, event_data: EventCreate) -> Event:
        self._ensure_client(event_data.client_id)
        self._check_times(event_data.start_time, event_data.end_time)

        data = event_data.model_dump()
        data["status"] = event_data.status.value
        data["total_value"] = to_money(event_data.total_value)
        event = Event(**data)
        self.db.add(event)
        self.db.commit()
        return self.get_by_id(event.id)

    def update(self, event_id: str, event_data: EventUpdate) -> Event:
        event = self.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event", event_id)

        update_data = {
            key: value for key, value in event_data.model_dump(exclude_unset=True).items()
            if not (value is None and key in self.REQUIRED_FIELDS)
        }
        if "client_id" in update_data:
            self._ensure_client(update_data["client_id"])
        self._check_times(
            update_data.get("start_time", event.start_time),
            update_data.get("end_time", event.end_time),
        )

        for key, value in update_data.items():
            if isinstance(value, Enum):
                value = value.value
            if key == "total_value":
                value = to_money(value)
            setattr(event, key, value)

        self.db.commit()
        return self.get_by_id(event.id)

    def delete(self, event_id: str) -> None:
        event = self.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event", event_id)

        for model, label in ((Payment, "payments"), (Expense, "expenses"), (InventoryMovement, "inventory movements")):
            if self.db.query(model.id).filter(model.event_id == event_id).first():
                raise ValidationError(f"Cannot delete an event that has {label}")

        self.db.delete(event)
        self.db.commit()
